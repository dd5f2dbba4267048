"""Tests for file import routing and export blobs."""

from __future__ import annotations

import pytest

from nebula.editor.files import (
    ExportKind,
    export_blob,
    export_filename,
    import_text,
    is_canonical_filename,
    safe_filename,
)

VALID_XML = (
    '<nebula version="1.0"><meta><title>T</title><updatedAt>U</updatedAt></meta>'
    '<document><heading level="1">Hi</heading></document></nebula>'
)


class TestRouting:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("notes.xml", True),
            ("NOTES.XML", True),
            ("my-Nebula-export.txt", True),
            ("notes.md", False),
            ("notes.markdown", False),
            ("xml-notes.txt", False),
        ],
    )
    def test_is_canonical_filename(self, name: str, expected: bool) -> None:
        assert is_canonical_filename(name) is expected


class TestImportText:
    def test_markdown_passthrough(self) -> None:
        """Non-XML files are taken verbatim as markup."""
        result = import_text("notes.md", "# raw <b>text</b>\n")

        assert result.ok
        assert result.markdown == "# raw <b>text</b>\n"

    def test_xml_converted(self) -> None:
        result = import_text("doc.nebula.xml", VALID_XML)

        assert result.ok
        assert result.markdown == "# Hi\n"
        assert result.xml is None

    def test_failed_xml_keeps_pretty_text(self) -> None:
        """Invalid XML is kept for display; markup is not replaced."""
        result = import_text("bad.xml", "<foo><document/></foo>")

        assert not result.ok
        assert result.markdown is None
        assert result.error == "Root element must be <nebula>"
        assert result.xml == "<foo>\n  <document/>\n</foo>"


class TestExport:
    def test_safe_filename(self) -> None:
        assert safe_filename("My: Notes! (v2)") == "My Notes v2"

    def test_fallback_name(self) -> None:
        assert safe_filename("???") == "nebula"
        assert safe_filename("") == "nebula"

    def test_extensions(self) -> None:
        assert export_filename("Notes", ExportKind.XML) == "Notes.nebula.xml"
        assert export_filename("Notes", ExportKind.MARKDOWN) == "Notes.md"

    def test_xml_blob(self) -> None:
        blob = export_blob("Notes", "xml", markdown="# md\n", xml="<nebula/>")

        assert blob.filename == "Notes.nebula.xml"
        assert blob.media_type == "application/xml;charset=utf-8"
        assert blob.content == "<nebula/>"

    def test_markdown_blob(self) -> None:
        blob = export_blob("", ExportKind.MARKDOWN, markdown="# md\n", xml="")

        assert blob.filename == "nebula.md"
        assert blob.media_type == "text/markdown;charset=utf-8"
        assert blob.content == "# md\n"
