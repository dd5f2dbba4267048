"""Conversions between the render tree, the canonical tree, NebulaXML and markup.

Each step is a pure function that builds a fresh tree or string:

- importer: render tree -> canonical tree
- serializer: canonical tree -> NebulaXML text
- parser: NebulaXML text -> canonical tree (validating)
- emitter: canonical tree -> authoring markup
"""

from nebula.convert.emitter import emit
from nebula.convert.importer import import_blocks, import_document
from nebula.convert.parser import (
    CanonicalParseError,
    InvalidRootError,
    MalformedXmlError,
    MissingBodyError,
    XmlValidation,
    parse_document,
    validate_xml,
    xml_to_markdown,
)
from nebula.convert.serializer import pretty_print, serialize

__all__ = [
    "CanonicalParseError",
    "InvalidRootError",
    "MalformedXmlError",
    "MissingBodyError",
    "XmlValidation",
    "emit",
    "import_blocks",
    "import_document",
    "parse_document",
    "pretty_print",
    "serialize",
    "validate_xml",
    "xml_to_markdown",
]
