"""Tests for render tree to canonical tree import."""

from __future__ import annotations

from nebula.convert.importer import import_blocks, import_document, merge_text
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
from nebula.render.markdown import parse_render_tree
from tests.conftest import render_tree


def _import(html: str):
    return import_blocks(parse_render_tree(html))


class TestBlockDispatch:
    """Block-level tags map to canonical blocks."""

    def test_bare_text_becomes_paragraph(self) -> None:
        """Top-level text is trimmed into a paragraph; blank text is dropped."""
        assert _import("  loose text  <p>a</p>\n\n") == (
            Paragraph((Text("loose text"),)),
            Paragraph((Text("a"),)),
        )

    def test_heading_levels(self) -> None:
        """h1..h6 keep their digit as level."""
        blocks = _import("<h1>One</h1><h6>Six</h6>")

        assert blocks == (
            Heading(level=1, inline=(Text("One"),)),
            Heading(level=6, inline=(Text("Six"),)),
        )

    def test_divider(self) -> None:
        assert _import("<hr>") == (Divider(),)

    def test_blockquote_children(self) -> None:
        """Blockquote content is imported as blocks."""
        assert _import("<blockquote>\n<p>q</p>\n</blockquote>") == (
            Blockquote((Paragraph((Text("q"),)),)),
        )

    def test_unknown_block_becomes_paragraph(self) -> None:
        """Tags outside the vocabulary degrade to a paragraph of inlines."""
        assert _import("<section>inline <b>x</b></section>") == (
            Paragraph((Text("inline "), Bold((Text("x"),)))),
        )

    def test_image_paragraph_becomes_image(self) -> None:
        """A paragraph holding only an image imports as an Image block."""
        assert _import('<p><img src="a.png" alt="A"></p>') == (
            Image(src="a.png", alt="A"),
        )

    def test_image_with_text_stays_inline(self) -> None:
        """An image next to text keeps the paragraph."""
        blocks = _import('<p>see <img src="a.png"></p>')

        assert isinstance(blocks[0], Paragraph)

    def test_inline_image_keeps_alt_text(self) -> None:
        """An image inside a sentence degrades to its alt text."""
        assert _import('<p>see <img src="a.png" alt="chart"> here</p>') == (
            Paragraph((Text("see "), Span((Text("chart"),)), Text(" here"))),
        )


class TestLists:
    """List items are inline-only or block-structured."""

    def test_inline_items_wrapped_in_paragraph(self) -> None:
        """Plain items get one synthetic paragraph."""
        assert _import("<ol><li>a</li><li><em>b</em></li></ol>") == (
            ListBlock(
                ordered=True,
                items=(
                    Item((Paragraph((Text("a"),)),)),
                    Item((Paragraph((Italic((Text("b"),)),)),)),
                ),
            ),
        )

    def test_block_items_imported_as_blocks(self) -> None:
        """Items with block children keep them as nested blocks."""
        blocks = _import("<ul><li><p>a</p><ul><li>b</li></ul></li></ul>")

        assert blocks == (
            ListBlock(
                ordered=False,
                items=(
                    Item(
                        (
                            Paragraph((Text("a"),)),
                            ListBlock(
                                ordered=False,
                                items=(Item((Paragraph((Text("b"),)),)),),
                            ),
                        )
                    ),
                ),
            ),
        )


class TestCodeBlocks:
    """Code blocks keep text verbatim."""

    def test_language_from_code_class(self) -> None:
        """language-<id> on the code element sets lang; one newline stripped."""
        blocks = _import(
            '<pre><code class="py language-py">x = "**y**"\n</code></pre>'
        )

        assert blocks == (CodeBlock(lang="py", text='x = "**y**"'),)

    def test_language_from_pre_class(self) -> None:
        """Falls back to a class on the pre element."""
        blocks = _import('<pre class="language-rb"><code>puts 1</code></pre>')

        assert blocks == (CodeBlock(lang="rb", text="puts 1"),)

    def test_no_language(self) -> None:
        assert _import("<pre><code>plain\n</code></pre>") == (
            CodeBlock(lang="", text="plain"),
        )


class TestTables:
    """Header and body rows both become rows."""

    def test_rows_and_cells(self) -> None:
        blocks = _import(
            "<table><thead><tr><th>A</th><th>B</th></tr></thead>"
            "<tbody><tr><td>1</td><td>2</td></tr></tbody></table>"
        )

        assert blocks == (
            Table(
                (
                    Row((Cell((Text("A"),)), Cell((Text("B"),)))),
                    Row((Cell((Text("1"),)), Cell((Text("2"),)))),
                )
            ),
        )

    def test_table_from_markup(self) -> None:
        """A pipe table imports as one table of 2 rows x 2 cells."""
        blocks = import_blocks(render_tree("| A | B |\n|---|---|\n| 1 | 2 |\n"))

        assert len(blocks) == 1
        table = blocks[0]
        assert isinstance(table, Table)
        assert [len(row.cells) for row in table.rows] == [2, 2]


class TestInlines:
    """Inline tags map to canonical inlines."""

    def test_inline_vocabulary(self) -> None:
        blocks = _import(
            '<p><strong>b</strong><i>i</i><del>d</del><s>s</s><code>c</code>'
            '<a href="/x">l</a><br><span>sp</span><u>u</u></p>'
        )

        assert blocks == (
            Paragraph(
                (
                    Bold((Text("b"),)),
                    Italic((Text("i"),)),
                    Strike((Text("d"),)),
                    Strike((Text("s"),)),
                    Code((Text("c"),)),
                    Link(href="/x", children=(Text("l"),)),
                    Break(),
                    Span((Text("sp"),)),
                    Span((Text("u"),)),
                )
            ),
        )

    def test_comments_skipped_and_text_merged(self) -> None:
        """Text around a comment becomes one run."""
        assert _import("<p>x<!-- note -->y</p>") == (Paragraph((Text("xy"),)),)

    def test_hard_break_from_markup(self) -> None:
        """A newline in markup becomes a Break between two text runs."""
        blocks = import_blocks(render_tree("one\ntwo\n"))

        assert blocks == (Paragraph((Text("one"), Break(), Text("two"))),)


class TestImportDocument:
    def test_wraps_blocks(self) -> None:
        """Title and timestamp are attached to the imported body."""
        document = import_document(
            parse_render_tree("<p>a</p>"), "Notes", "2025-01-01T00:00:00.000Z"
        )

        assert document.title == "Notes"
        assert document.updated_at == "2025-01-01T00:00:00.000Z"
        assert document.body == (Paragraph((Text("a"),)),)

    def test_default_timestamp(self) -> None:
        document = import_document(parse_render_tree(""), "T")

        assert document.updated_at.endswith("Z")
        assert document.body == ()


class TestMergeText:
    def test_merges_adjacent_runs_only(self) -> None:
        """Runs separated by another node stay separate."""
        assert merge_text([Text("a"), Text("b"), Break(), Text("c")]) == (
            Text("ab"),
            Break(),
            Text("c"),
        )
