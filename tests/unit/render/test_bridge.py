"""Tests for the render-surface HTML to markup bridge."""

from __future__ import annotations

from nebula.render.bridge import html_to_markdown
from nebula.render.markdown import render_markdown


class TestHtmlToMarkdown:
    """html_to_markdown follows the emitter's conventions."""

    def test_heading_and_emphasis(self) -> None:
        """ATX headings, ** for bold, * for italic."""
        result = html_to_markdown(
            "<h2>Title</h2><p>Some <strong>bold</strong> and <em>it</em></p>"
        )

        assert result == "## Title\n\nSome **bold** and *it*\n"

    def test_strike(self) -> None:
        """del and s become ~~strike~~."""
        assert html_to_markdown("<p><del>gone</del> <s>old</s></p>") == (
            "~~gone~~ ~~old~~\n"
        )

    def test_bullets_use_dash(self) -> None:
        """Unordered lists use - bullets."""
        result = html_to_markdown("<ul><li>a</li><li>b</li></ul>")

        assert "- a" in result
        assert "- b" in result

    def test_code_block_language(self) -> None:
        """Fenced code keeps its language."""
        result = html_to_markdown(
            '<pre><code class="py language-py">x = 1\n</code></pre>'
        )

        assert "```py" in result
        assert "x = 1" in result

    def test_highlight_markers_unwrapped(self) -> None:
        """Annotation markers disappear, their text stays."""
        result = html_to_markdown(
            '<p>hello <mark class="nebula-highlight" data-annotation-id="a">'
            "world</mark></p>"
        )

        assert result == "hello world\n"

    def test_empty_editing_artefacts_removed(self) -> None:
        """<div><br></div> and empty paragraphs are dropped."""
        result = html_to_markdown("<p>text</p><div><br></div><p></p>")

        assert result == "text\n"

    def test_empty_input(self) -> None:
        """Empty HTML gives empty markup."""
        assert html_to_markdown("") == ""
        assert html_to_markdown("   ") == ""

    def test_ends_with_single_newline(self) -> None:
        """Output ends in exactly one newline."""
        result = html_to_markdown("<p>a</p><p>b</p>")

        assert result == "a\n\nb\n"

    def test_rendered_hard_break_stays_single_newline(self) -> None:
        """A hard break from the renderer converts back to one newline."""
        html = render_markdown("line1\nline2\n")

        assert html_to_markdown(html) == "line1\nline2\n"

    def test_rendered_document_converges(self) -> None:
        """Bridging rendered markup gives back the same markup."""
        markdown = "# Title\n\nfirst line\nsecond line\n\nnext paragraph\n"

        assert html_to_markdown(render_markdown(markdown)) == markdown
