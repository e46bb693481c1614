"""Public API for lossless XML parsing and serialization."""

from .adapters import from_lxml, to_lxml
from .parser import (
    LosslessXMLParser,
    ParseResult,
    parse,
    parse_document,
    parse_file,
    roundtrip,
    serialize,
    write_file,
)

__all__ = [
    "LosslessXMLParser",
    "ParseResult",
    "from_lxml",
    "parse",
    "parse_document",
    "parse_file",
    "roundtrip",
    "serialize",
    "to_lxml",
    "write_file",
]
