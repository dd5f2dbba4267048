"""Edit session: the caller-owned "current document".

The session holds the authoring markup (the single source of truth), the
title, the XML view text and the annotations. Every entry point funnels
back into ``set_markdown``:

- editing the markup directly
- editing the XML view (parsed, then emitted as markup)
- editing the rendered surface (bridged straight to markup)
- importing a file, replace-all

A failed XML edit keeps the user's XML text and the error but never
touches the markup.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nebula.config import EditorConfig, ExportConfig, RenderOptions
from nebula.convert.parser import CanonicalParseError, xml_to_markdown
from nebula.editor import find_replace
from nebula.editor.files import (
    ExportBlob,
    ExportKind,
    ImportResult,
    export_blob,
    import_text,
)
from nebula.engine import DerivedViews, derive, markdown_to_xml
from nebula.models import Annotation, DocumentUpdate, new_annotation
from nebula.render.bridge import html_to_markdown

if TYPE_CHECKING:
    from collections.abc import Callable

    from nebula.models import DocumentRecord

logger = logging.getLogger(__name__)


class EditSession:
    """In-memory state of one open document.

    Attributes:
        doc_id: Store key of the document.
        title: Document title (stored as the record name).
        markdown: Authoring markup.
        xml: Text of the XML view; derived from the markup unless the last
            XML edit failed to parse.
        xml_error: Message of the last failed XML edit or import.
        annotations: Annotations, most recent first.
        dirty: True when there are changes not yet saved.
        on_dirty: Called with ``doc_id`` after every change (autosave hook).
    """

    def __init__(
        self,
        doc_id: str,
        title: str = "",
        markdown: str = "",
        *,
        options: RenderOptions | None = None,
        editor: EditorConfig | None = None,
        export: ExportConfig | None = None,
    ) -> None:
        self.doc_id = doc_id
        self.title = title
        self.markdown = markdown
        self.options = options or RenderOptions()
        self.editor = editor or EditorConfig()
        self.export_config = export or ExportConfig()
        self.annotations: list[Annotation] = []
        self.xml = ""
        self.xml_error: str | None = None
        self.dirty = False
        self.on_dirty: Callable[[str], None] | None = None
        self._sync_xml()

    @classmethod
    def from_record(
        cls,
        record: DocumentRecord,
        *,
        options: RenderOptions | None = None,
        editor: EditorConfig | None = None,
        export: ExportConfig | None = None,
    ) -> EditSession:
        """Open a stored record. The XML view is re-derived from the markup."""
        session = cls(
            record.id,
            title=record.name,
            markdown=record.markdown,
            options=options,
            editor=editor,
            export=export,
        )
        logger.info("Opened document %s (%d chars)", record.id, len(record.markdown))
        return session

    # --- Entry points -----------------------------------------------------

    def set_markdown(self, markdown: str) -> None:
        self.markdown = markdown
        self._sync_xml()
        self._mark_dirty()

    def set_title(self, title: str) -> None:
        self.title = title
        self._sync_xml()
        self._mark_dirty()

    def apply_xml_edit(self, xml_text: str) -> bool:
        """Apply an edit made in the XML view.

        Returns:
            True when the XML parsed and the markup was replaced. On failure
            the XML text and ``xml_error`` are kept and the markup is not
            modified.
        """
        try:
            markdown = xml_to_markdown(xml_text)
        except CanonicalParseError as exc:
            self.xml = xml_text
            self.xml_error = str(exc)
            logger.debug("XML edit rejected for %s: %s", self.doc_id, exc)
            return False
        self.set_markdown(markdown)
        return True

    def apply_render_edit(self, html_content: str) -> None:
        """Apply an edit made on the rendered surface."""
        markdown = html_to_markdown(html_content)
        if not markdown.endswith("\n"):
            markdown += "\n"
        self.set_markdown(markdown)

    def import_file(self, filename: str, text: str) -> ImportResult:
        result = import_text(filename, text)
        if result.markdown is not None:
            self.set_markdown(result.markdown)
        else:
            self.xml = result.xml or ""
            self.xml_error = result.error
        return result

    def replace_all(
        self, term: str, replacement: str, *, case_sensitive: bool = False
    ) -> int:
        """Replace every occurrence in the markup; returns the count."""
        markdown, count = find_replace.replace_all(
            self.markdown, term, replacement, case_sensitive=case_sensitive
        )
        if count:
            self.set_markdown(markdown)
        return count

    # --- Annotations ------------------------------------------------------

    def add_annotation(self, quote: str, note: str = "") -> Annotation | None:
        """Annotate a selection. Blank selections are ignored."""
        annotation = new_annotation(
            quote, note, max_quote_length=self.editor.max_quote_length
        )
        if annotation is None:
            return None
        self.annotations.insert(0, annotation)
        self._mark_dirty()
        return annotation

    def remove_annotation(self, annotation_id: str) -> bool:
        before = len(self.annotations)
        self.annotations = [a for a in self.annotations if a.id != annotation_id]
        if len(self.annotations) == before:
            return False
        self._mark_dirty()
        return True

    # --- Outputs ----------------------------------------------------------

    def derive(self) -> DerivedViews:
        """Compute the display HTML, XML, outline and statistics."""
        return derive(
            self.markdown,
            self.title,
            self.annotations,
            self.options,
            words_per_minute=self.editor.words_per_minute,
        )

    def export(self, kind: ExportKind | str) -> ExportBlob:
        return export_blob(
            self.title,
            ExportKind(kind),
            markdown=self.markdown,
            xml=self.xml,
            fallback=self.export_config.fallback_filename,
        )

    def to_update(self) -> DocumentUpdate:
        """Snapshot the fields written back to the store."""
        return DocumentUpdate(
            id=self.doc_id,
            name=self.title,
            markdown=self.markdown,
            xml_cache=self.xml,
        )

    # --- Internals --------------------------------------------------------

    def _sync_xml(self) -> None:
        self.xml = markdown_to_xml(self.markdown, self.title, self.options)
        self.xml_error = None

    def _mark_dirty(self) -> None:
        self.dirty = True
        if self.on_dirty is not None:
            self.on_dirty(self.doc_id)
