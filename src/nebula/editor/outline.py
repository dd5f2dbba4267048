"""Outline and reading statistics derived from authoring markup.

Recomputed on every markup change; nothing here is persisted.
"""

from __future__ import annotations

import math
import re

from nebula.models import OutlineEntry

DEFAULT_WORDS_PER_MINUTE = 220

_HEADING_LINE = re.compile(r"^(#{1,6})\s+(.+?)\s*$")
_FENCE_LINE = re.compile(r"^\s*(```|~~~)")

_FENCED_CODE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]*`")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_MARKUP_PUNCTUATION = re.compile(r"[#>*_~\-]")
_WHITESPACE = re.compile(r"\s+")


def extract_outline(markdown: str) -> list[OutlineEntry]:
    """List ATX headings with their 1-based line numbers.

    Lines inside fenced code blocks are ignored, so a ``# comment`` in a
    shell snippet is not an outline entry.
    """
    entries: list[OutlineEntry] = []
    in_fence = False
    for number, line in enumerate(markdown.split("\n"), start=1):
        if _FENCE_LINE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = _HEADING_LINE.match(line)
        if match:
            entries.append(
                OutlineEntry(
                    level=len(match.group(1)),
                    text=match.group(2),
                    source_line=number,
                )
            )
    return entries


def count_words(markdown: str) -> int:
    """Count prose words, ignoring code, link targets and markup punctuation."""
    text = _FENCED_CODE.sub(" ", markdown)
    text = _INLINE_CODE.sub(" ", text)
    text = _LINK.sub(r"\1", text)
    text = _MARKUP_PUNCTUATION.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    if not text:
        return 0
    return len(text.split(" "))


def estimate_reading_minutes(
    word_count: int, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE
) -> int:
    """Reading time in whole minutes, never less than one.

    Halves round up (``330`` words at 220 wpm is 2 minutes).
    """
    return max(1, math.floor(word_count / words_per_minute + 0.5))
