"""Markdown rendering and HTML sanitization.

Turns authoring markup into the sanitized HTML render tree that every
other component consumes:

- render_markdown: markdown2 rendering (GFM-ish extras) plus sanitization
- sanitize_html: strip executable content from an HTML fragment
- parse_render_tree: parse an HTML fragment into an lxml container element

Rendering is total: any input string produces some HTML.
"""

# Pattern: Functional Core (pure functions, no shared state)

from __future__ import annotations

import html as html_module
import logging
import re
from typing import TYPE_CHECKING

import markdown2
from lxml import etree
from lxml import html as lxml_html

from nebula.config import RenderOptions

if TYPE_CHECKING:
    from lxml.html import HtmlElement

logger = logging.getLogger(__name__)

# markdown2 extras; "highlightjs-lang" keeps fenced code as
# <code class="py language-py"> instead of pygments markup.
_EXTRAS: dict[str, object] = {
    "fenced-code-blocks": None,
    "highlightjs-lang": None,
    "tables": None,
    "strike": None,
    "cuddled-lists": None,
    # No emphasis inside words: snake_case_names stay literal.
    "middle-word-em": False,
}

# Elements removed together with their content.
_FORBIDDEN_TAGS = ("script", "style", "iframe", "object", "noscript")

# Void elements libxml2 parses as containers of the siblings that follow;
# only the tag itself is removed.
_FORBIDDEN_VOID_TAGS = ("embed",)

# Attributes that carry URLs.
_URL_ATTRS = ("href", "src", "action", "formaction")

_SCRIPT_URL = re.compile(r"^\s*(javascript|vbscript|data:text/html)", re.IGNORECASE)

CONTAINER_TAG = "div"


def render_markdown(markdown: str, options: RenderOptions | None = None) -> str:
    """Render authoring markup to sanitized HTML.

    Args:
        markdown: Authoring markup text (may be empty).
        options: Rendering options; defaults to safe rendering with hard breaks.

    Returns:
        HTML fragment (no ``<html>``/``<body>`` wrapper); ``""`` for blank
        markup.
    """
    options = options or RenderOptions()
    if not markdown or not markdown.strip():
        return ""

    extras = dict(_EXTRAS)
    if options.hard_breaks:
        extras["breaks"] = {"on_newline": True}

    safe_mode = None if options.allow_unsafe_html else "escape"
    raw_html = str(markdown2.markdown(markdown, safe_mode=safe_mode, extras=extras))

    logger.debug(
        "[RENDER] markdown=%d chars -> html=%d chars (unsafe=%s)",
        len(markdown),
        len(raw_html),
        options.allow_unsafe_html,
    )

    if options.allow_unsafe_html:
        return raw_html
    return sanitize_html(raw_html)


def sanitize_html(html_content: str) -> str:
    """Remove executable content from an HTML fragment.

    Removes script-like elements with their content, inline event handlers
    (``on*`` attributes) and ``javascript:`` style URLs. Text that followed a
    removed element is kept, and ``<embed>`` loses only its own tag.

    Args:
        html_content: HTML fragment.

    Returns:
        Sanitized HTML fragment.
    """
    if not html_content or not html_content.strip():
        return html_content

    container = _fragment(html_content)

    for tag in _FORBIDDEN_VOID_TAGS:
        for element in container.xpath(f".//{tag}"):
            element.drop_tag()

    for tag in _FORBIDDEN_TAGS:
        for element in container.xpath(f".//{tag}"):
            _remove_keeping_tail(element)

    for element in container.iter():
        if not isinstance(element.tag, str):
            continue
        attrs_to_remove = [
            attr for attr in element.attrib if attr.lower().startswith("on")
        ]
        for attr in attrs_to_remove:
            del element.attrib[attr]
        for attr in _URL_ATTRS:
            value = element.get(attr)
            if value is not None and _SCRIPT_URL.match(value):
                element.set(attr, "#")

    return inner_html(container)


def parse_render_tree(html_content: str) -> HtmlElement:
    """Parse an HTML fragment into a ``<div>`` container element.

    ``<br>`` elements rendered with a trailing newline (markdown2 emits
    ``<br />\\n``) lose that newline, so a hard break is represented by the
    element alone.

    Args:
        html_content: HTML fragment, possibly empty.

    Returns:
        A fresh container element owning the parsed nodes.
    """
    container = _fragment(html_content or "")
    for br in container.iter("br"):
        if br.tail and br.tail.startswith("\n"):
            br.tail = br.tail[1:] or None
    return container


def inner_html(element: HtmlElement) -> str:
    """Serialize the children of *element* (its text, children and tails)."""
    parts = [html_module.escape(element.text or "", quote=False)]
    parts.extend(
        lxml_html.tostring(child, encoding="unicode", with_tail=True)
        for child in element
    )
    return "".join(parts)


def _fragment(html_content: str) -> HtmlElement:
    return lxml_html.fragment_fromstring(html_content, create_parent=CONTAINER_TAG)


def _remove_keeping_tail(element: etree._Element) -> None:
    """Remove *element* from its parent, preserving its tail text."""
    parent = element.getparent()
    if parent is None:
        return
    if element.tail:
        prev = element.getprevious()
        if prev is not None:
            prev.tail = (prev.tail or "") + element.tail
        else:
            parent.text = (parent.text or "") + element.tail
    parent.remove(element)
