"""Shared pytest fixtures for Nebula tests."""

from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING

import pytest

from nebula.config import get_settings
from nebula.render.markdown import parse_render_tree, render_markdown

if TYPE_CHECKING:
    from lxml.html import HtmlElement

FIXED_NOW = "2025-01-01T00:00:00.000Z"

SAMPLE_MARKDOWN = """\
# Project Notes

Intro with **bold**, *italic*, `code` and a [link](https://example.com).

## Tasks

- first
- second

Steps:

1. one
2. two
3. three

> Quoted text

```py
print("**not bold**")
```

---

| A | B |
|---|---|
| 1 | 2 |
"""


def render_tree(markdown: str) -> HtmlElement:
    """Render markup and parse it into a render-tree container."""
    return parse_render_tree(render_markdown(markdown))


@pytest.fixture
def sample_markdown() -> str:
    return SAMPLE_MARKDOWN


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None]:
    """Never let a cached Settings instance leak between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
