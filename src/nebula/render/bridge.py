"""Render-surface HTML to authoring markup.

The live editing surface hands back its HTML after every edit; this module
turns that HTML straight into markdown without going through the canonical
tree. Output follows the same conventions as ``nebula.convert.emitter``
(ATX headings, ``-`` bullets, ``*``/``**`` emphasis, ``~~`` strike, fenced
code, newline for ``<br>``) so both paths converge on the next render.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from bs4 import Tag
from markdownify import ATX, MarkdownConverter
from selectolax.lexbor import LexborHTMLParser

from nebula.render.annotate import MARKER_ID_ATTR, MARKER_TAG

logger = logging.getLogger(__name__)

_LANGUAGE_CLASS = re.compile(r"language-([a-z0-9_+-]+)", re.IGNORECASE)
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")
_TRAILING_SPACES = re.compile(r"[ \t]+$", re.MULTILINE)
# markdown2 writes "<br />\n"; the newline is layout, not a second break.
_BREAK_NEWLINE = re.compile(r"(<br\s*/?>)\r?\n", re.IGNORECASE)


def _code_language(el: Tag) -> str:
    """Pick the fence language from a ``language-<id>`` class token."""
    candidates = [el]
    code = el.find("code")
    if code is not None:
        candidates.insert(0, code)
    for candidate in candidates:
        classes = candidate.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        for token in classes:
            match = _LANGUAGE_CLASS.fullmatch(token)
            if match:
                return match.group(1)
    return ""


class NebulaMarkdownConverter(MarkdownConverter):
    """markdownify converter tuned to the emitter's conventions."""

    def __init__(self, **options: Any) -> None:
        options.setdefault("heading_style", ATX)
        options.setdefault("bullets", "-")
        options.setdefault("strong_em_symbol", "*")
        options.setdefault("escape_asterisks", False)
        options.setdefault("escape_underscores", False)
        options.setdefault("code_language_callback", _code_language)
        super().__init__(**options)

    def convert_br(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if "_inline" in parent_tags:
            return " "
        return "\n"

    def convert_del(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if "_noformat" in parent_tags or not text.strip():
            return text
        return f"~~{text}~~"

    convert_s = convert_del


def html_to_markdown(html_content: str) -> str:
    """Convert render-surface HTML to authoring markup.

    Highlight markers and empty editing artefacts (``<div><br></div>``,
    empty paragraphs) are removed first.

    Args:
        html_content: HTML from the editing surface.

    Returns:
        Markdown ending in exactly one newline, or ``""`` for empty input.
    """
    if not html_content or not html_content.strip():
        return ""

    cleaned = _clean_surface_html(html_content)
    markdown = NebulaMarkdownConverter().convert(cleaned)
    markdown = _TRAILING_SPACES.sub("", markdown)
    markdown = _EXCESS_BLANK_LINES.sub("\n\n", markdown).strip()

    logger.debug(
        "[BRIDGE] html=%d chars -> markdown=%d chars", len(html_content), len(markdown)
    )
    return f"{markdown}\n" if markdown else ""


def _clean_surface_html(html_content: str) -> str:
    """Unwrap highlight markers and drop empty blocks left by editing.

    The newline markdown2 writes after each ``<br />`` is removed first, as
    ``parse_render_tree`` does, so a hard break stays a single newline.
    """
    tree = LexborHTMLParser(_BREAK_NEWLINE.sub(r"\1", html_content))

    for node in tree.css(f"{MARKER_TAG}[{MARKER_ID_ATTR}]"):
        node.unwrap()

    changed = True
    while changed:
        changed = False
        for node in tree.css("p, div"):
            if (node.text() or "").strip():
                continue
            if node.css_first("img, hr") is not None:
                continue
            if all(child.tag == "br" for child in node.iter()):
                node.decompose()
                changed = True

    body = tree.body
    if body is None:
        return html_content
    return body.inner_html or ""
