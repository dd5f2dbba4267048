"""Text-quote highlight insertion into the render tree.

Re-applies saved annotations to a freshly rendered tree by substring search.
Each annotation claims the first occurrence of its quote inside a single
text node (depth-first order) and that occurrence is wrapped in a
``<mark>`` element carrying the annotation id.

Limitations (deliberate, the anchor is a soft link):
    - A quote spanning two text nodes (e.g. ``hello <b>world</b>``) is
      never found.
    - An annotation whose quote no longer occurs is skipped for that render.
    - Text already claimed by an earlier annotation is not searched again.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from lxml import html as lxml_html

from nebula.render.markdown import inner_html, parse_render_tree

if TYPE_CHECKING:
    from lxml.html import HtmlElement

    from nebula.models import Annotation

logger = logging.getLogger(__name__)

MARKER_TAG = "mark"
MARKER_ID_ATTR = "data-annotation-id"
MARKER_CLASS = "nebula-highlight"

# A text slot is where lxml keeps a text node: ``element.text`` ("text")
# or the text following an element, ``element.tail`` ("tail").
type _TextSlot = tuple[HtmlElement, str]


def annotate(root: HtmlElement, annotations: Sequence[Annotation]) -> HtmlElement:
    """Return a copy of *root* with each annotation's quote highlighted.

    Args:
        root: Render-tree container (as returned by ``parse_render_tree``).
            It is not modified.
        annotations: Annotations in priority order; earlier ones claim text
            first.

    Returns:
        A new tree with ``<mark class="nebula-highlight"
        data-annotation-id="...">`` elements inserted.
    """
    tree = copy.deepcopy(root)
    for annotation in annotations:
        quote = annotation.quote.strip()
        if not quote:
            continue
        if not _wrap_first_match(tree, quote, annotation.id):
            logger.debug(
                "Annotation %s quote not found in render; skipped", annotation.id
            )
    return tree


def annotate_html(html_content: str, annotations: Sequence[Annotation]) -> str:
    """String-in, string-out variant of ``annotate``.

    Returns *html_content* unchanged when there are no annotations.
    """
    if not annotations:
        return html_content
    return inner_html(annotate(parse_render_tree(html_content), annotations))


def detached_annotations(
    root: HtmlElement, annotations: Sequence[Annotation]
) -> list[Annotation]:
    """List the annotations that would not be highlighted in *root*."""
    annotated = annotate(root, annotations)
    attached = {
        marker.get(MARKER_ID_ATTR) for marker in _markers(annotated)
    }
    return [
        a for a in annotations if a.quote.strip() and a.id not in attached
    ]


def _markers(root: HtmlElement) -> Iterator[HtmlElement]:
    for element in root.iter(MARKER_TAG):
        if element.get(MARKER_ID_ATTR) is not None:
            yield element


def _is_marker(element: HtmlElement) -> bool:
    return element.tag == MARKER_TAG and element.get(MARKER_ID_ATTR) is not None


def _text_slots(element: HtmlElement) -> Iterator[_TextSlot]:
    """Yield text slots under *element* in depth-first document order.

    Text inside existing markers is skipped; a marker's tail is not.
    """
    yield element, "text"
    for child in element:
        if isinstance(child.tag, str) and not _is_marker(child):
            yield from _text_slots(child)
        yield child, "tail"


def _wrap_first_match(root: HtmlElement, quote: str, annotation_id: str) -> bool:
    for owner, slot in _text_slots(root):
        text = owner.text if slot == "text" else owner.tail
        if not text:
            continue
        start = text.find(quote)
        if start < 0:
            continue
        _split_slot(owner, slot, text, start, start + len(quote), annotation_id)
        return True
    return False


def _split_slot(
    owner: HtmlElement,
    slot: str,
    text: str,
    start: int,
    end: int,
    annotation_id: str,
) -> None:
    """Split a text slot into before / ``<mark>`` match / after."""
    marker = lxml_html.Element(
        MARKER_TAG, {"class": MARKER_CLASS, MARKER_ID_ATTR: annotation_id}
    )
    marker.text = text[start:end]
    marker.tail = text[end:] or None

    if slot == "text":
        owner.text = text[:start] or None
        owner.insert(0, marker)
    else:
        parent = owner.getparent()
        owner.tail = text[:start] or None
        parent.insert(parent.index(owner) + 1, marker)
