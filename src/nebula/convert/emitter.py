"""Canonical document tree to authoring markup.

One block becomes one markup fragment; top-level fragments are joined by a
single blank line and the result ends with exactly one newline.

Conventions (shared with ``nebula.render.bridge``):

- ATX headings (``## Title``), ``-`` bullets, ``1.`` ``2.`` ... numbering
- ``**bold**``, ``*italic*``, ``~~strike~~``, backtick code
- fenced code blocks with the language after the opening fence
- pipe tables whose first row is the header
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from nebula.models import (
    Block,
    Blockquote,
    Bold,
    Break,
    Cell,
    Code,
    CodeBlock,
    Divider,
    Heading,
    Image,
    Inline,
    Italic,
    Item,
    Link,
    ListBlock,
    Paragraph,
    Span,
    Strike,
    Table,
    Text,
    clamp_heading_level,
)

logger = logging.getLogger(__name__)

BULLET = "- "
FENCE = "```"
ITEM_INDENT = "  "


def emit(blocks: Iterable[Block]) -> str:
    """Emit authoring markup for a sequence of top-level blocks.

    Blocks that produce no text (an image without ``src``, an empty
    paragraph) are dropped rather than leaving extra blank lines.

    Args:
        blocks: Top-level blocks in document order.

    Returns:
        Markup ending in exactly one newline.
    """
    fragments = [fragment for fragment in map(emit_block, blocks) if fragment]
    markdown = "\n\n".join(fragments).strip() + "\n"
    logger.debug("[EMIT] %d fragments -> %d chars", len(fragments), len(markdown))
    return markdown


def emit_block(block: Block) -> str:
    """Emit one block, without surrounding blank lines."""
    match block:
        case Heading(level=level, inline=inline):
            level = clamp_heading_level(level)
            return f"{'#' * level} {emit_inlines(inline).strip()}".rstrip()
        case Paragraph(inline=inline):
            return emit_inlines(inline).strip()
        case ListBlock(ordered=ordered, items=items):
            return _emit_list(ordered, items)
        case CodeBlock(lang=lang, text=text):
            body = text.rstrip("\n")
            return f"{FENCE}{lang.strip()}\n{body}\n{FENCE}"
        case Blockquote(blocks=blocks):
            return _emit_blockquote(blocks)
        case Divider():
            return "---"
        case Table():
            return _emit_table(block)
        case Image(src=src, alt=alt):
            return f"![{alt}]({src})" if src else ""


def _join_blocks(blocks: Iterable[Block]) -> str:
    return "\n\n".join(fragment for fragment in map(emit_block, blocks) if fragment)


def _emit_blockquote(blocks: tuple[Block, ...]) -> str:
    inner = _join_blocks(blocks)
    return "\n".join(
        f"> {line}" if line.strip() else ">" for line in inner.split("\n")
    )


def _emit_list(ordered: bool, items: tuple[Item, ...]) -> str:
    lines = []
    for number, item in enumerate(items, start=1):
        marker = f"{number}. " if ordered else BULLET
        lines.append(marker + _emit_item(item))
    return "\n".join(lines)


def _emit_item(item: Item) -> str:
    """Label on the marker line; every following line indented two spaces.

    Nested blocks go through ``emit_block`` and are indented once more per
    nesting level, so deep lists stay aligned.
    """
    if not item.blocks:
        return ""
    label, *rest = item.blocks
    parts = [emit_block(label).strip()]
    parts.extend(
        fragment for fragment in (emit_block(b).strip() for b in rest) if fragment
    )
    text = "\n".join(parts)
    first, _, tail = text.partition("\n")
    if not tail:
        return first
    return first + "\n" + _indent(tail)


def _indent(text: str) -> str:
    return "\n".join(
        ITEM_INDENT + line if line.strip() else "" for line in text.split("\n")
    )


def _emit_table(table: Table) -> str:
    grid = [[_emit_cell(cell) for cell in row.cells] for row in table.rows]
    if not grid:
        return ""
    header, *body = grid
    rows = [header, ["---"] * len(header), *body]
    return "\n".join(f"| {' | '.join(cells)} |" for cells in rows)


def _emit_cell(cell: Cell) -> str:
    """One line of cell text with pipes escaped so columns stay put."""
    text = emit_inlines(cell.inline).strip().replace("\n", " ")
    return text.replace("|", r"\|")


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------


def emit_inlines(inlines: Iterable[Inline]) -> str:
    return "".join(emit_inline(inline) for inline in inlines)


def emit_inline(inline: Inline) -> str:
    match inline:
        case Text(text=text):
            return text
        case Bold(children=children):
            return _wrap("**", emit_inlines(children))
        case Italic(children=children):
            return _wrap("*", emit_inlines(children))
        case Strike(children=children):
            return _wrap("~~", emit_inlines(children))
        case Code(children=children):
            inner = emit_inlines(children).replace("`", r"\`")
            return f"`{inner}`" if inner else ""
        case Link(href=href, children=children):
            href = href.strip()
            inner = emit_inlines(children)
            return f"[{inner or href}]({href})" if href else inner
        case Break():
            return "\n"
        case Span(children=children):
            return emit_inlines(children)


def _wrap(marker: str, inner: str) -> str:
    return f"{marker}{inner}{marker}" if inner else ""
