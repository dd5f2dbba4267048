"""NebulaXML text to canonical document tree.

Strict in exactly three places, checked in this order:

1. the text must be well-formed XML (``MalformedXmlError``)
2. the root element must be ``<nebula>`` (``InvalidRootError``)
3. the root must have a ``<document>`` child (``MissingBodyError``)

Past those checks parsing never fails. Unknown block elements are flattened
into their parent (or wrapped as an implicit paragraph), unknown inline
elements become ``Span``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from lxml import etree

from nebula.convert.emitter import emit
from nebula.convert.importer import merge_text
from nebula.convert.serializer import ROOT_TAG
from nebula.models import (
    Block,
    Blockquote,
    Bold,
    Break,
    Cell,
    Code,
    CodeBlock,
    Divider,
    Document,
    Heading,
    Image,
    Inline,
    Italic,
    Item,
    Link,
    ListBlock,
    Paragraph,
    Row,
    Span,
    Strike,
    Table,
    Text,
    clamp_heading_level,
)

logger = logging.getLogger(__name__)

BODY_TAG = "document"

_BLOCK_TAGS = frozenset(
    (
        "heading",
        "paragraph",
        "list",
        "codeBlock",
        "blockquote",
        "divider",
        "table",
        "image",
    )
)

# Leading integer, the way a lenient number parse reads "2.5" or " 3px".
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_TRAILING_NEWLINES = re.compile(r"\n+$")


class CanonicalParseError(ValueError):
    """NebulaXML text failed one of the three structural checks.

    Attributes:
        kind: ``"malformed"``, ``"invalid_root"`` or ``"missing_body"``.
    """

    kind = "malformed"


class MalformedXmlError(CanonicalParseError):
    """The text is not well-formed XML."""

    kind = "malformed"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("XML parse error")


class InvalidRootError(CanonicalParseError):
    """The root element is not ``<nebula>``."""

    kind = "invalid_root"

    def __init__(self, found: str) -> None:
        self.found = found
        super().__init__(f"Root element must be <{ROOT_TAG}>")


class MissingBodyError(CanonicalParseError):
    """The root element has no ``<document>`` child."""

    kind = "missing_body"

    def __init__(self) -> None:
        super().__init__(f"Missing <{BODY_TAG}>")


@dataclass(frozen=True)
class XmlValidation:
    """Outcome of ``validate_xml``, shaped for a status badge."""

    ok: bool
    message: str


_VALIDATION_MESSAGES = {
    "malformed": "XML parse error",
    "invalid_root": f"Root must be <{ROOT_TAG}>",
    "missing_body": f"Missing <{BODY_TAG}>",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_document(xml_text: str) -> Document:
    """Parse NebulaXML text into a ``Document``.

    Raises:
        MalformedXmlError: The text is not well-formed XML.
        InvalidRootError: The root element is not ``<nebula>``.
        MissingBodyError: There is no ``<document>`` child.
    """
    root = _parse_root(xml_text)

    if root.tag != ROOT_TAG:
        raise InvalidRootError(str(root.tag))

    body = next(
        (child for child in root if child.tag == BODY_TAG),
        None,
    )
    if body is None:
        raise MissingBodyError()

    document = Document(
        title=root.findtext("meta/title") or "",
        updated_at=root.findtext("meta/updatedAt") or "",
        body=_parse_blocks(body),
    )
    logger.debug("[PARSE] %d top-level blocks", len(document.body))
    return document


def xml_to_markdown(xml_text: str) -> str:
    """Parse NebulaXML and emit authoring markup.

    Raises:
        CanonicalParseError: See ``parse_document``.
    """
    return emit(parse_document(xml_text).body)


def validate_xml(xml_text: str) -> XmlValidation:
    """Check NebulaXML text without raising."""
    if not xml_text:
        return XmlValidation(ok=False, message="Empty")
    try:
        parse_document(xml_text)
    except CanonicalParseError as exc:
        return XmlValidation(ok=False, message=_VALIDATION_MESSAGES[exc.kind])
    return XmlValidation(ok=True, message="Valid")


def _parse_root(xml_text: str) -> etree._Element:
    if not xml_text.strip():
        raise MalformedXmlError("document is empty")
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(xml_text.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as exc:
        logger.warning("[PARSE] malformed XML: %s", exc)
        raise MalformedXmlError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def _elements(parent: etree._Element) -> list[etree._Element]:
    """Child elements, without comments or processing instructions."""
    return [child for child in parent if isinstance(child.tag, str)]


def _parse_blocks(parent: etree._Element) -> tuple[Block, ...]:
    blocks: list[Block] = []
    for child in _elements(parent):
        blocks.extend(_parse_block(child))
    return tuple(blocks)


def _parse_block(element: etree._Element) -> list[Block]:
    match element.tag:
        case "heading":
            level = _parse_level(element.get("level"))
            return [Heading(level=level, inline=_parse_inlines(element))]
        case "paragraph":
            return [Paragraph(_parse_inlines(element))]
        case "list":
            items = tuple(
                Item(_parse_blocks(child))
                for child in _elements(element)
                if child.tag == "item"
            )
            return [ListBlock(ordered=element.get("ordered") == "true", items=items)]
        case "codeBlock":
            text = _TRAILING_NEWLINES.sub("", "".join(element.itertext()))
            return [CodeBlock(lang=(element.get("lang") or "").strip(), text=text)]
        case "blockquote":
            return [Blockquote(_parse_blocks(element))]
        case "divider":
            return [Divider()]
        case "table":
            return [_parse_table(element)]
        case "image":
            return [Image(src=element.get("src") or "", alt=element.get("alt") or "")]
        case _:
            return _parse_unknown_block(element)


def _parse_level(raw: str | None) -> int:
    match = _LEADING_INT.match(raw or "")
    level = int(match.group(1)) if match else 1
    return clamp_heading_level(level)


def _parse_table(element: etree._Element) -> Table:
    rows = tuple(
        Row(
            tuple(
                Cell(_parse_inlines(cell))
                for cell in _elements(row)
                if cell.tag == "cell"
            )
        )
        for row in _elements(element)
        if row.tag == "row"
    )
    return Table(rows)


def _parse_unknown_block(element: etree._Element) -> list[Block]:
    """Flatten an element outside the block vocabulary.

    If it wraps known blocks (at any depth) they are lifted into the parent;
    otherwise its content becomes one implicit paragraph.
    """
    if _has_blocks(element):
        logger.debug("[PARSE] flattening unknown block <%s>", element.tag)
        return list(_parse_blocks(element))

    inlines = _parse_inlines(element)
    if not inlines:
        return []
    logger.debug("[PARSE] unknown block <%s> read as paragraph", element.tag)
    return [Paragraph(inlines)]


def _has_blocks(element: etree._Element) -> bool:
    return any(
        descendant.tag in _BLOCK_TAGS
        for descendant in element.iterdescendants()
        if isinstance(descendant.tag, str)
    )


# ---------------------------------------------------------------------------
# Inlines
# ---------------------------------------------------------------------------


def _parse_inlines(element: etree._Element) -> tuple[Inline, ...]:
    inlines: list[Inline] = []
    if element.text:
        inlines.append(Text(element.text))
    for child in element:
        if isinstance(child.tag, str):
            inlines.append(_parse_inline(child))
        if child.tail:
            inlines.append(Text(child.tail))
    return merge_text(inlines)


def _parse_inline(element: etree._Element) -> Inline:
    match element.tag:
        case "bold":
            return Bold(_parse_inlines(element))
        case "italic":
            return Italic(_parse_inlines(element))
        case "strike":
            return Strike(_parse_inlines(element))
        case "code":
            return Code(_parse_inlines(element))
        case "link":
            return Link(href=element.get("href") or "", children=_parse_inlines(element))
        case "break":
            return Break()
        case _:
            return Span(_parse_inlines(element))
