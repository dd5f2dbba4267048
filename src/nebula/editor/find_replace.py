"""Literal find and replace over authoring markup.

The search term is always literal (regex metacharacters are escaped);
only case sensitivity is configurable.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """A found occurrence, as character offsets into the text."""

    start: int
    end: int


def _pattern(term: str, case_sensitive: bool) -> re.Pattern[str]:
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(re.escape(term), flags)


def find_all(text: str, term: str, *, case_sensitive: bool = False) -> list[Match]:
    """All non-overlapping occurrences of *term*; empty for an empty term."""
    if not term:
        return []
    pattern = _pattern(term, case_sensitive)
    return [Match(m.start(), m.end()) for m in pattern.finditer(text)]


def find_next(
    text: str, term: str, offset: int = 0, *, case_sensitive: bool = False
) -> Match | None:
    """First occurrence at or after *offset*, wrapping to the start.

    Args:
        text: Text to search.
        term: Literal search term.
        offset: Cursor position to search from.
        case_sensitive: Match case exactly.

    Returns:
        The match, or None when *term* is empty or does not occur.
    """
    if not term:
        return None
    pattern = _pattern(term, case_sensitive)
    offset = max(0, min(offset, len(text)))
    match = pattern.search(text, offset) or pattern.search(text)
    if match is None:
        return None
    return Match(match.start(), match.end())


def replace_all(
    text: str, term: str, replacement: str, *, case_sensitive: bool = False
) -> tuple[str, int]:
    """Replace every occurrence of *term* in one pass.

    The replacement is inserted literally (no group references).

    Returns:
        ``(new_text, count)``. With an empty term the text is unchanged.
    """
    if not term:
        return text, 0
    new_text, count = _pattern(term, case_sensitive).subn(lambda _: replacement, text)
    logger.debug("[FIND] replaced %d occurrence(s) of %r", count, term)
    return new_text, count
