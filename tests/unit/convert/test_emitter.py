"""Tests for canonical tree to markup emission."""

from __future__ import annotations

from nebula.convert.emitter import emit, emit_inline
from nebula.models import (
    Blockquote,
    Bold,
    Break,
    Cell,
    Code,
    CodeBlock,
    Divider,
    Heading,
    Image,
    Italic,
    Item,
    Link,
    ListBlock,
    Paragraph,
    Row,
    Span,
    Strike,
    Table,
    Text,
)


def _para(text: str) -> Paragraph:
    return Paragraph((Text(text),))


def _items(*texts: str) -> tuple[Item, ...]:
    return tuple(Item((_para(t),)) for t in texts)


class TestDocumentLayout:
    """Blocks are joined by one blank line and end with one newline."""

    def test_join_and_trailing_newline(self) -> None:
        assert emit([Heading(1, (Text("T"),)), _para("a"), Divider()]) == (
            "# T\n\na\n\n---\n"
        )

    def test_empty_document(self) -> None:
        assert emit([]) == "\n"

    def test_empty_fragments_dropped(self) -> None:
        """An image without src leaves no blank gap."""
        assert emit([_para("a"), Image(src=""), _para("b")]) == "a\n\nb\n"


class TestBlocks:
    def test_heading_levels_clamped(self) -> None:
        assert emit([Heading(9, (Text(" Deep "),))]) == "###### Deep\n"
        assert emit([Heading(0, (Text("Top"),))]) == "# Top\n"

    def test_ordered_list_numbers_sequentially(self) -> None:
        """Three items always give 1. 2. 3."""
        assert emit([ListBlock(ordered=True, items=_items("a", "b", "c"))]) == (
            "1. a\n2. b\n3. c\n"
        )

    def test_unordered_list(self) -> None:
        assert emit([ListBlock(ordered=False, items=_items("a", "b"))]) == (
            "- a\n- b\n"
        )

    def test_nested_lists_indent_recursively(self) -> None:
        """Each nesting level adds two spaces."""
        inner = ListBlock(
            ordered=False,
            items=(
                Item((_para("b"), ListBlock(ordered=True, items=_items("c")))),
            ),
        )
        outer = ListBlock(ordered=False, items=(Item((_para("a"), inner)),))

        assert emit([outer]) == "- a\n  - b\n    1. c\n"

    def test_empty_item(self) -> None:
        assert emit([ListBlock(ordered=False, items=(Item(()),))]) == "-\n"

    def test_blockquote_prefixes_lines(self) -> None:
        """Non-blank lines get "> ", blank lines get ">"."""
        assert emit([Blockquote((_para("one"), _para("two")))]) == (
            "> one\n>\n> two\n"
        )

    def test_table_header_separator(self) -> None:
        """First row is the header, followed by a --- separator row."""
        table = Table(
            (
                Row((Cell((Text("A"),)), Cell((Text("B"),)))),
                Row((Cell((Text("1"),)), Cell((Text("2"),)))),
            )
        )

        assert emit([table]) == "| A | B |\n| --- | --- |\n| 1 | 2 |\n"

    def test_code_block_verbatim(self) -> None:
        """Body is copied as-is under a fence with the language."""
        block = CodeBlock(lang="py", text='print("**not bold**")\n')

        assert emit([block]) == '```py\nprint("**not bold**")\n```\n'

    def test_image(self) -> None:
        assert emit([Image(src="a.png", alt="A")]) == "![A](a.png)\n"


class TestInlines:
    def test_formatting(self) -> None:
        paragraph = Paragraph(
            (
                Bold((Text("b"),)),
                Text(" "),
                Italic((Text("i"),)),
                Text(" "),
                Strike((Text("s"),)),
                Text(" "),
                Span((Text("sp"),)),
            )
        )

        assert emit([paragraph]) == "**b** *i* ~~s~~ sp\n"

    def test_code_escapes_backticks(self) -> None:
        assert emit_inline(Code((Text("a`b"),))) == "`a\\`b`"

    def test_link(self) -> None:
        assert emit_inline(Link("https://e.com", (Text("e"),))) == (
            "[e](https://e.com)"
        )

    def test_link_without_text_uses_href(self) -> None:
        assert emit_inline(Link(" https://e.com ", ())) == (
            "[https://e.com](https://e.com)"
        )

    def test_link_without_href_is_plain(self) -> None:
        assert emit_inline(Link("", (Text("just text"),))) == "just text"

    def test_break_is_newline(self) -> None:
        assert emit([Paragraph((Text("a"), Break(), Text("b")))]) == "a\nb\n"

    def test_empty_formatting_dropped(self) -> None:
        """Empty markers would be literal asterisks, so they emit nothing."""
        assert emit_inline(Bold(())) == ""
        assert emit_inline(Code(())) == ""
