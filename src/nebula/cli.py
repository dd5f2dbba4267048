"""Command-line interface for the conversion engine.

Usage:
    uv run nebula to-xml notes.md --title "Notes"
    uv run nebula to-markdown notes.nebula.xml
    uv run nebula validate notes.nebula.xml
    uv run nebula outline notes.md
    uv run nebula stats notes.md
    uv run nebula render notes.md
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.table import Table

from nebula import setup_logging
from nebula.config import RenderOptions, get_settings
from nebula.convert.parser import CanonicalParseError, validate_xml, xml_to_markdown
from nebula.editor.outline import (
    count_words,
    estimate_reading_minutes,
    extract_outline,
)
from nebula.engine import markdown_to_xml
from nebula.render.markdown import render_markdown

console = Console()


def _read(path: Path, con: Console) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        con.print(f"[red]Error:[/] cannot read {path}: {exc.strerror}")
        sys.exit(1)


def _write_output(text: str, output: Path | None, con: Console) -> None:
    if output is None:
        con.print(text, markup=False, highlight=False, soft_wrap=True)
        return
    output.write_text(text, encoding="utf-8")
    con.print(f"[green]Wrote[/] {output}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_to_xml(
    path: Path,
    *,
    title: str | None = None,
    output: Path | None = None,
    unsafe: bool = False,
    console: Console | None = None,
) -> None:
    """Convert authoring markup to NebulaXML."""
    con = console or globals()["console"]
    settings = get_settings()
    options = RenderOptions.from_settings(settings)
    if unsafe:
        options = replace(options, allow_unsafe_html=True)
    xml = markdown_to_xml(_read(path, con), title or path.stem, options)
    _write_output(xml, output, con)


def _cmd_to_markdown(
    path: Path,
    *,
    output: Path | None = None,
    console: Console | None = None,
) -> None:
    """Convert NebulaXML to authoring markup; exits 1 on invalid XML."""
    con = console or globals()["console"]
    try:
        markdown = xml_to_markdown(_read(path, con))
    except CanonicalParseError as exc:
        con.print(f"[red]Error:[/] {path}: {exc}")
        sys.exit(1)
    _write_output(markdown.rstrip("\n"), output, con)


def _cmd_validate(path: Path, *, console: Console | None = None) -> None:
    con = console or globals()["console"]
    result = validate_xml(_read(path, con))
    if result.ok:
        con.print(f"[green]{result.message}[/] {path}")
        return
    con.print(f"[red]{result.message}[/] {path}")
    sys.exit(1)


def _cmd_outline(path: Path, *, console: Console | None = None) -> None:
    """List headings as a Rich table."""
    con = console or globals()["console"]
    entries = extract_outline(_read(path, con))

    if not entries:
        con.print("[yellow]No headings found.[/]")
        return

    table = Table(title=f"Outline: {path.name}")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Level", justify="right")
    table.add_column("Heading", style="cyan")

    for entry in entries:
        indent = "  " * (entry.level - 1)
        table.add_row(str(entry.source_line), str(entry.level), indent + entry.text)

    con.print(table)


def _cmd_stats(path: Path, *, console: Console | None = None) -> None:
    con = console or globals()["console"]
    markdown = _read(path, con)
    words = count_words(markdown)
    minutes = estimate_reading_minutes(
        words, get_settings().editor.words_per_minute
    )
    headings = len(extract_outline(markdown))
    con.print(f"{path.name}: {words} words, ~{minutes} min read, {headings} headings")


def _cmd_render(
    path: Path,
    *,
    output: Path | None = None,
    console: Console | None = None,
) -> None:
    """Render authoring markup to sanitized HTML."""
    con = console or globals()["console"]
    options = RenderOptions.from_settings(get_settings())
    _write_output(render_markdown(_read(path, con), options), output, con)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nebula",
        description="Convert between Markdown and NebulaXML.",
    )
    parser.add_argument(
        "--log", action="store_true", help="Also write a detailed log file"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # to-xml
    to_xml_p = sub.add_parser("to-xml", help="Convert Markdown to NebulaXML")
    to_xml_p.add_argument("path", type=Path, help="Markdown file")
    to_xml_p.add_argument("--title", default=None, help="Title (default: file stem)")
    to_xml_p.add_argument("-o", "--output", type=Path, default=None)
    to_xml_p.add_argument(
        "--unsafe", action="store_true", help="Keep raw HTML unsanitized"
    )

    # to-markdown
    to_md_p = sub.add_parser("to-markdown", help="Convert NebulaXML to Markdown")
    to_md_p.add_argument("path", type=Path, help="NebulaXML file")
    to_md_p.add_argument("-o", "--output", type=Path, default=None)

    # validate
    validate_p = sub.add_parser("validate", help="Check a NebulaXML file")
    validate_p.add_argument("path", type=Path, help="NebulaXML file")

    # outline
    outline_p = sub.add_parser("outline", help="List the headings of a Markdown file")
    outline_p.add_argument("path", type=Path, help="Markdown file")

    # stats
    stats_p = sub.add_parser("stats", help="Word count and reading time")
    stats_p.add_argument("path", type=Path, help="Markdown file")

    # render
    render_p = sub.add_parser("render", help="Render Markdown to sanitized HTML")
    render_p.add_argument("path", type=Path, help="Markdown file")
    render_p.add_argument("-o", "--output", type=Path, default=None)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``nebula`` command."""
    args = _build_parser().parse_args(sys.argv[1:] if argv is None else argv)

    if args.log:
        app = get_settings().app
        setup_logging(app.log_dir, app.log_level)

    match args.command:
        case "to-xml":
            _cmd_to_xml(
                args.path, title=args.title, output=args.output, unsafe=args.unsafe
            )
        case "to-markdown":
            _cmd_to_markdown(args.path, output=args.output)
        case "validate":
            _cmd_validate(args.path)
        case "outline":
            _cmd_outline(args.path)
        case "stats":
            _cmd_stats(args.path)
        case "render":
            _cmd_render(args.path, output=args.output)
