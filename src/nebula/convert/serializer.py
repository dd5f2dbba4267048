"""Canonical document tree to NebulaXML text.

``serialize`` builds an lxml element tree from a ``Document`` and hands the
flat serialization to ``pretty_print``, a pure string transform that puts
one element per line with two-space indentation.

Output shape::

    <nebula version="1.0">
      <meta>
        <title>Notes</title>
        <updatedAt>2025-01-01T00:00:00.000Z</updatedAt>
      </meta>
      <document>
        <heading level="1">Notes</heading>
        <paragraph>Some <bold>bold</bold> text.</paragraph>
      </document>
    </nebula>
"""

from __future__ import annotations

import logging
import re

from lxml import etree

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

ROOT_TAG = "nebula"
FORMAT_VERSION = "1.0"
INDENT = "  "

# Characters XML 1.0 cannot carry, even escaped.
_XML_INVALID_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

# Elements whose content is text-bearing; the pretty-printer keeps them on
# one line so whitespace inside them is never altered.
_TEXT_ELEMENTS = frozenset(
    ("heading", "paragraph", "cell", "codeBlock", "title", "updatedAt")
)

_TOKEN = re.compile(r"<[^>]*>?|[^<]+")
_TAG_NAME = re.compile(r"</?\s*([^\s/>]+)")


def serialize(document: Document) -> str:
    """Serialize a document to pretty-printed NebulaXML."""
    root = etree.Element(ROOT_TAG, version=FORMAT_VERSION)

    meta = etree.SubElement(root, "meta")
    etree.SubElement(meta, "title").text = _xml_safe(document.title)
    etree.SubElement(meta, "updatedAt").text = _xml_safe(document.updated_at)

    body = etree.SubElement(root, "document")
    for block in document.body:
        _append_block(body, block)

    flat = etree.tostring(root, encoding="unicode")
    logger.debug(
        "[SERIALIZE] %d blocks -> %d chars", len(document.body), len(flat)
    )
    return pretty_print(flat)


def _xml_safe(text: str) -> str:
    return _XML_INVALID_CHARS.sub("", text)


# ---------------------------------------------------------------------------
# Tree walk
# ---------------------------------------------------------------------------


def _append_block(parent: etree._Element, block: Block | Item | Row | Cell) -> None:
    match block:
        case Heading(level=level, inline=inline):
            element = etree.SubElement(
                parent, "heading", level=str(clamp_heading_level(level))
            )
            _append_inlines(element, inline)
        case Paragraph(inline=inline):
            _append_inlines(etree.SubElement(parent, "paragraph"), inline)
        case ListBlock(ordered=ordered, items=items):
            element = etree.SubElement(
                parent, "list", ordered="true" if ordered else "false"
            )
            for item in items:
                _append_block(element, item)
        case Item(blocks=blocks):
            element = etree.SubElement(parent, "item")
            for child in blocks:
                _append_block(element, child)
        case CodeBlock(lang=lang, text=text):
            element = etree.SubElement(parent, "codeBlock", lang=_xml_safe(lang))
            element.text = _xml_safe(text)
        case Blockquote(blocks=blocks):
            element = etree.SubElement(parent, "blockquote")
            for child in blocks:
                _append_block(element, child)
        case Divider():
            etree.SubElement(parent, "divider")
        case Table(rows=rows):
            element = etree.SubElement(parent, "table")
            for row in rows:
                _append_block(element, row)
        case Row(cells=cells):
            element = etree.SubElement(parent, "row")
            for cell in cells:
                _append_block(element, cell)
        case Cell(inline=inline):
            _append_inlines(etree.SubElement(parent, "cell"), inline)
        case Image(src=src, alt=alt):
            etree.SubElement(parent, "image", src=_xml_safe(src), alt=_xml_safe(alt))


def _append_inlines(parent: etree._Element, inlines: tuple[Inline, ...]) -> None:
    for inline in inlines:
        _append_inline(parent, inline)


def _append_inline(parent: etree._Element, inline: Inline) -> None:
    match inline:
        case Text(text=text):
            _append_text(parent, _xml_safe(text))
        case Bold(children=children):
            _append_inlines(etree.SubElement(parent, "bold"), children)
        case Italic(children=children):
            _append_inlines(etree.SubElement(parent, "italic"), children)
        case Strike(children=children):
            _append_inlines(etree.SubElement(parent, "strike"), children)
        case Code(children=children):
            _append_inlines(etree.SubElement(parent, "code"), children)
        case Link(href=href, children=children):
            element = etree.SubElement(parent, "link", href=_xml_safe(href))
            _append_inlines(element, children)
        case Break():
            etree.SubElement(parent, "break")
        case Span(children=children):
            _append_inlines(etree.SubElement(parent, "span"), children)


def _append_text(parent: etree._Element, text: str) -> None:
    """Append text after the last child of *parent* (lxml text/tail model)."""
    if not text:
        return
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


# ---------------------------------------------------------------------------
# Pretty-printer
# ---------------------------------------------------------------------------


def pretty_print(xml_text: str) -> str:
    """Re-indent XML text, one element per line, two spaces per level.

    Works on the text alone, without parsing, so it also formats XML the user
    is still editing. Whitespace-only text between elements is dropped.
    Text-bearing elements (and any element with non-blank direct text) are
    copied verbatim onto a single line; their inner whitespace is content.
    Applying it to its own output changes nothing.

    Args:
        xml_text: XML text, pretty or flat.

    Returns:
        Formatted XML without a trailing newline.
    """
    tokens = _TOKEN.findall(xml_text)
    lines: list[str] = []
    depth = 0
    i = 0

    while i < len(tokens):
        token = tokens[i]
        i += 1

        if not token.startswith("<") or not token.endswith(">"):
            if token.strip():
                lines.append(INDENT * depth + token.strip())
            continue

        if token.startswith("</"):
            depth = max(0, depth - 1)
            lines.append(INDENT * depth + token)
            continue

        if token.startswith(("<?", "<!")) or token.endswith("/>"):
            lines.append(INDENT * depth + token)
            continue

        close = _matching_close(tokens, i - 1)
        if close is not None and _keeps_inline(tokens, i - 1, close):
            lines.append(INDENT * depth + "".join(tokens[i - 1 : close + 1]))
            i = close + 1
            continue

        lines.append(INDENT * depth + token)
        depth += 1

    return "\n".join(lines)


def _is_opening(token: str) -> bool:
    return (
        token.startswith("<")
        and token.endswith(">")
        and not token.startswith(("</", "<?", "<!"))
        and not token.endswith("/>")
    )


def _matching_close(tokens: list[str], start: int) -> int | None:
    """Index of the tag closing the element opened at *start*, if any."""
    depth = 0
    for index in range(start, len(tokens)):
        token = tokens[index]
        if _is_opening(token):
            depth += 1
        elif token.startswith("</") and token.endswith(">"):
            depth -= 1
            if depth == 0:
                return index
    return None


def _keeps_inline(tokens: list[str], start: int, close: int) -> bool:
    name = _TAG_NAME.match(tokens[start])
    if name is not None and name.group(1) in _TEXT_ELEMENTS:
        return True
    if close == start + 1:
        return True

    depth = 0
    for token in tokens[start + 1 : close]:
        if _is_opening(token):
            depth += 1
        elif token.startswith("</") and token.endswith(">"):
            depth -= 1
        elif not token.startswith("<") and depth == 0 and token.strip():
            return True
    return False
