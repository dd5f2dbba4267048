"""Canonical document tree for NebulaXML.

These are frozen dataclasses forming two closed variant sets: ``Block``
(document structure) and ``Inline`` (text-level formatting). Every
conversion in ``nebula.convert`` builds a fresh tree and dispatches over
these classes with ``match``; nothing mutates a tree after construction.
"""

from __future__ import annotations

from dataclasses import dataclass

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


def clamp_heading_level(level: int) -> int:
    """Clamp a heading level into the 1..6 range."""
    return max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, level))


# ---------------------------------------------------------------------------
# Inline nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    """A run of literal text."""

    text: str


@dataclass(frozen=True)
class Bold:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Italic:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Strike:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Code:
    """Inline code. Children are kept as inlines so nested markup survives."""

    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Link:
    href: str
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Break:
    """Hard line break."""


@dataclass(frozen=True)
class Span:
    """Fallback wrapper for inline elements outside the vocabulary."""

    children: tuple[Inline, ...] = ()


type Inline = Text | Bold | Italic | Strike | Code | Link | Break | Span


# ---------------------------------------------------------------------------
# Block nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Heading:
    level: int
    inline: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Paragraph:
    inline: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Item:
    """A list item.

    By convention the first block is a ``Paragraph`` acting as the item's
    label; any further blocks are nested content.
    """

    blocks: tuple[Block, ...] = ()


@dataclass(frozen=True)
class ListBlock:
    ordered: bool
    items: tuple[Item, ...] = ()


@dataclass(frozen=True)
class CodeBlock:
    """Verbatim code. ``text`` is never parsed for inline markup."""

    lang: str
    text: str


@dataclass(frozen=True)
class Blockquote:
    blocks: tuple[Block, ...] = ()


@dataclass(frozen=True)
class Divider:
    pass


@dataclass(frozen=True)
class Cell:
    inline: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Row:
    cells: tuple[Cell, ...] = ()


@dataclass(frozen=True)
class Table:
    """A table. Header and body rows are not distinguished."""

    rows: tuple[Row, ...] = ()


@dataclass(frozen=True)
class Image:
    src: str
    alt: str = ""


type Block = (
    Heading | Paragraph | ListBlock | CodeBlock | Blockquote | Divider | Table | Image
)


@dataclass(frozen=True)
class Document:
    """A whole NebulaXML document.

    Attributes:
        title: Document title (``meta/title``).
        updated_at: ISO-8601 timestamp (``meta/updatedAt``).
        body: Top-level blocks in order (``document`` children).
    """

    title: str
    updated_at: str
    body: tuple[Block, ...] = ()
