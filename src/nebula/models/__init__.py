"""Data models for Nebula documents, annotations and records."""

from nebula.models.annotation import (
    Annotation,
    DocumentRecord,
    DocumentUpdate,
    OutlineEntry,
    new_annotation,
    now_iso,
)
from nebula.models.document import (
    Block,
    Blockquote,
    Bold,
    Break,
    Cell,
    Code,
    CodeBlock,
    Divider,
    Document,
    Heading,
    Image,
    Inline,
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
    clamp_heading_level,
)

__all__ = [
    "Annotation",
    "Block",
    "Blockquote",
    "Bold",
    "Break",
    "Cell",
    "Code",
    "CodeBlock",
    "Divider",
    "Document",
    "DocumentRecord",
    "DocumentUpdate",
    "Heading",
    "Image",
    "Inline",
    "Italic",
    "Item",
    "Link",
    "ListBlock",
    "OutlineEntry",
    "Paragraph",
    "Row",
    "Span",
    "Strike",
    "Table",
    "Text",
    "clamp_heading_level",
    "new_annotation",
    "now_iso",
]
