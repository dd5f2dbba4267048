"""Import and export of text files.

Imports route by filename: anything that looks like NebulaXML goes through
the canonical parser, everything else is taken as authoring markup. Exports
are the current markup or XML text, unchanged, with a filename derived from
the document title.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum

from nebula.convert.parser import CanonicalParseError, xml_to_markdown
from nebula.convert.serializer import pretty_print

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "nebula"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9\-_. ]")


class ExportKind(StrEnum):
    """Which view an export carries."""

    XML = "xml"
    MARKDOWN = "markdown"


_EXTENSIONS = {
    ExportKind.XML: ".nebula.xml",
    ExportKind.MARKDOWN: ".md",
}

_MEDIA_TYPES = {
    ExportKind.XML: "application/xml;charset=utf-8",
    ExportKind.MARKDOWN: "text/markdown;charset=utf-8",
}


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing one file.

    Attributes:
        markdown: New authoring markup, or None when it must not change.
        xml: Pretty-printed XML to show when an XML import failed.
        error: User-facing parse error message, if any.
    """

    markdown: str | None = None
    xml: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ExportBlob:
    """A downloadable text blob."""

    filename: str
    media_type: str
    content: str


def is_canonical_filename(filename: str) -> bool:
    """True for names routed through the XML parser (``*.xml``, ``*nebula*``)."""
    name = filename.lower()
    return name.endswith(".xml") or "nebula" in name


def import_text(filename: str, text: str) -> ImportResult:
    """Import file contents by name.

    A failed XML import keeps the (pretty-printed) XML for display and
    reports the error; it never replaces the markup.
    """
    if not is_canonical_filename(filename):
        logger.info("Imported %s as markdown (%d chars)", filename, len(text))
        return ImportResult(markdown=text)

    try:
        markdown = xml_to_markdown(text)
    except CanonicalParseError as exc:
        logger.warning("XML import of %s failed: %s", filename, exc)
        return ImportResult(xml=pretty_print(text), error=str(exc))

    logger.info("Imported %s as NebulaXML", filename)
    return ImportResult(markdown=markdown)


def safe_filename(title: str, fallback: str = DEFAULT_FILENAME) -> str:
    """Strip characters outside ``[A-Za-z0-9-_. ]`` from a title."""
    return _UNSAFE_FILENAME_CHARS.sub("", title).strip() or fallback


def export_filename(
    title: str, kind: ExportKind, fallback: str = DEFAULT_FILENAME
) -> str:
    return safe_filename(title, fallback) + _EXTENSIONS[ExportKind(kind)]


def export_blob(
    title: str,
    kind: ExportKind,
    *,
    markdown: str,
    xml: str,
    fallback: str = DEFAULT_FILENAME,
) -> ExportBlob:
    """Package the markup or XML text verbatim for download."""
    kind = ExportKind(kind)
    content = xml if kind is ExportKind.XML else markdown
    return ExportBlob(
        filename=export_filename(title, kind, fallback),
        media_type=_MEDIA_TYPES[kind],
        content=content,
    )
