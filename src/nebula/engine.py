"""Conversion engine entry points.

Holds no state: every function takes the markup, title and options it
needs and returns freshly derived values. Sessions (``nebula.editor``) own
the "current document" and call in here on each change.

Per edit cycle, from the markup (the single source of truth):

    markdown --render--> HTML --annotate--> display HTML
                          |
                          +--import--> Document --serialize--> NebulaXML
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nebula.config import RenderOptions
from nebula.convert.importer import import_document
from nebula.convert.serializer import serialize
from nebula.editor.outline import (
    DEFAULT_WORDS_PER_MINUTE,
    count_words,
    estimate_reading_minutes,
    extract_outline,
)
from nebula.render.annotate import annotate_html
from nebula.render.markdown import parse_render_tree, render_markdown

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nebula.models import Annotation, Document, OutlineEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedViews:
    """Everything computed from one markup value.

    Attributes:
        html: Rendered, sanitized HTML with annotation highlights.
        xml: Pretty-printed NebulaXML of the markup.
        outline: Headings found in the markup.
        word_count: Prose word count.
        reading_minutes: Estimated reading time.
    """

    html: str
    xml: str
    outline: list[OutlineEntry] = field(default_factory=list)
    word_count: int = 0
    reading_minutes: int = 1


def markdown_to_document(
    markdown: str,
    title: str = "",
    options: RenderOptions | None = None,
    now: str | None = None,
) -> Document:
    """Render markup and import it as a canonical ``Document``.

    Args:
        markdown: Authoring markup.
        title: Document title; ``options.default_title`` when blank.
        options: Rendering options.
        now: ``updatedAt`` timestamp; defaults to the current time.
    """
    options = options or RenderOptions()
    html = render_markdown(markdown, options)
    return import_document(
        parse_render_tree(html),
        title=title.strip() or options.default_title,
        updated_at=now,
    )


def markdown_to_xml(
    markdown: str,
    title: str = "",
    options: RenderOptions | None = None,
    now: str | None = None,
) -> str:
    """Derive pretty-printed NebulaXML from authoring markup."""
    return serialize(markdown_to_document(markdown, title, options, now))


def derive(
    markdown: str,
    title: str = "",
    annotations: Sequence[Annotation] = (),
    options: RenderOptions | None = None,
    now: str | None = None,
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
) -> DerivedViews:
    """Compute every view of *markdown* for one edit cycle.

    Annotations affect only the display HTML, never the XML.
    """
    options = options or RenderOptions()
    html = render_markdown(markdown, options)
    document = import_document(
        parse_render_tree(html),
        title=title.strip() or options.default_title,
        updated_at=now,
    )
    words = count_words(markdown)

    views = DerivedViews(
        html=annotate_html(html, annotations),
        xml=serialize(document),
        outline=extract_outline(markdown),
        word_count=words,
        reading_minutes=estimate_reading_minutes(words, words_per_minute),
    )
    logger.debug(
        "[ENGINE] derived views: %d blocks, %d words, %d annotations",
        len(document.body),
        words,
        len(annotations),
    )
    return views
