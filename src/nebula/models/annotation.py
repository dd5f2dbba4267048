"""Annotation, outline and persistence-record models.

These are plain dataclasses for in-memory use. Storage of records is owned
by an external key-value store; the engine only reads and writes the
fields listed on ``DocumentRecord``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

DEFAULT_MAX_QUOTE_LENGTH = 240


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Annotation:
    """A note anchored to a text quote in the rendered document.

    The anchor is a soft link: the quote is re-matched by substring search
    on every render and silently detaches when the text no longer contains it.

    Attributes:
        quote: Exact text to highlight.
        note: Free-form note attached to the quote.
        id: Unique identifier, carried by the highlight marker element.
        timestamp: ISO-8601 creation time.
    """

    quote: str
    note: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: str = field(default_factory=now_iso)


def new_annotation(
    quote: str, note: str = "", max_quote_length: int = DEFAULT_MAX_QUOTE_LENGTH
) -> Annotation | None:
    """Create an annotation from a user selection.

    Returns None when the selection is blank.
    """
    quote = quote.strip()[:max_quote_length]
    if not quote:
        return None
    return Annotation(quote=quote, note=note.strip())


@dataclass(frozen=True)
class OutlineEntry:
    """A heading found in the authoring markup.

    Attributes:
        id: Unique per extraction; not stable across edits.
        level: Heading level (number of ``#``).
        text: Heading text without markers.
        source_line: 1-based line number in the markup.
    """

    level: int
    text: str
    source_line: int
    id: str = field(default_factory=lambda: str(uuid4()))


@dataclass
class DocumentRecord:
    """A persisted document as held by the external store.

    Attributes:
        id: Opaque store key.
        name: Display name, used as the document title.
        markdown: Authoring markup, the source of truth.
        xml_cache: Last derived NebulaXML.
        created_at: ISO-8601 creation time.
        updated_at: ISO-8601 time of the last save.
        folder: Optional folder name.
        tags: Free-form tags.
        starred: Whether the user starred the document.
    """

    id: str
    name: str
    markdown: str = ""
    xml_cache: str = ""
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
    folder: str | None = None
    tags: list[str] = field(default_factory=list)
    starred: bool = False


@dataclass(frozen=True)
class DocumentUpdate:
    """Fields written back to the store on save.

    Attributes:
        id: Store key of the record.
        name: Document title.
        markdown: Authoring markup.
        xml_cache: NebulaXML derived from (or edited alongside) the markup.
        updated_at: ISO-8601 save time.
    """

    id: str
    name: str
    markdown: str
    xml_cache: str
    updated_at: str = field(default_factory=now_iso)
