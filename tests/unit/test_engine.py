"""Tests for the stateless conversion entry points."""

from __future__ import annotations

from nebula.config import RenderOptions
from nebula.engine import derive, markdown_to_document, markdown_to_xml
from nebula.models import Annotation, Heading, Paragraph
from tests.conftest import FIXED_NOW


class TestMarkdownToDocument:
    def test_blocks_and_meta(self) -> None:
        document = markdown_to_document("# Hi\n\nbody\n", "T", now=FIXED_NOW)

        assert document.title == "T"
        assert document.updated_at == FIXED_NOW
        assert isinstance(document.body[0], Heading)
        assert isinstance(document.body[1], Paragraph)

    def test_blank_title_falls_back(self) -> None:
        document = markdown_to_document("x\n", "   ")

        assert document.title == "Untitled"

    def test_fallback_title_from_options(self) -> None:
        options = RenderOptions(default_title="Draft")

        assert markdown_to_document("x\n", options=options).title == "Draft"


class TestMarkdownToXml:
    def test_full_document(self) -> None:
        """Output is the pretty-printed canonical form."""
        xml = markdown_to_xml("# Hi\n", "Notes", now=FIXED_NOW)

        assert xml == (
            '<nebula version="1.0">\n'
            "  <meta>\n"
            "    <title>Notes</title>\n"
            f"    <updatedAt>{FIXED_NOW}</updatedAt>\n"
            "  </meta>\n"
            "  <document>\n"
            '    <heading level="1">Hi</heading>\n'
            "  </document>\n"
            "</nebula>"
        )

    def test_empty_markup(self) -> None:
        xml = markdown_to_xml("", now=FIXED_NOW)

        assert "<document/>" in xml

    def test_deterministic(self, sample_markdown: str) -> None:
        first = markdown_to_xml(sample_markdown, "T", now=FIXED_NOW)
        second = markdown_to_xml(sample_markdown, "T", now=FIXED_NOW)

        assert first == second


class TestDerive:
    def test_all_views(self, sample_markdown: str) -> None:
        views = derive(sample_markdown, "T", now=FIXED_NOW)

        assert "<h1>Project Notes</h1>" in views.html
        assert views.xml == markdown_to_xml(sample_markdown, "T", now=FIXED_NOW)
        assert [entry.text for entry in views.outline] == ["Project Notes", "Tasks"]
        assert views.word_count > 0
        assert views.reading_minutes == 1

    def test_annotations_affect_html_only(self) -> None:
        annotation = Annotation(quote="world", id="a1")

        plain = derive("hello world\n", now=FIXED_NOW)
        marked = derive("hello world\n", annotations=[annotation], now=FIXED_NOW)

        assert 'data-annotation-id="a1"' in marked.html
        assert "data-annotation-id" not in plain.html
        assert marked.xml == plain.xml
