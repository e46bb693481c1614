"""Lossless XML.

A whole-document XML parser and serializer that round-trips files it did not
produce byte-for-byte, and lets callers edit the parsed tree through any of
three views of each element: the first child of a tag name, every child of a
tag name, or the ordered children list.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), serialize(), parse_file(), write_file()
- Level 2: Configured parser - LosslessXMLParser class
- Level 3: Pipeline stages - TagTokenizer, XMLTreeBuilder, XMLSerializer
"""

__version__ = "0.1.0"
__author__ = "Lossless XML Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Advanced configuration
from .api import (
    LosslessXMLParser,
    ParseResult,
    parse,
    parse_document,
    parse_file,
    roundtrip,
    serialize,
    write_file,
)

# Configuration classes for advanced usage
from .shared.config import ParserConfig

# Errors raised to callers
from .shared.errors import (
    InvalidRootMutationError,
    LosslessXMLError,
    MalformedInputError,
    SerializationError,
)

# Core tree object for all API levels
from .tree import XMLNode

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions (progressive disclosure entry point)
    "parse",
    "serialize",
    "parse_document",
    "parse_file",
    "write_file",
    "roundtrip",

    # Level 2: Advanced parser class
    "LosslessXMLParser",

    # Result objects and data structures
    "ParseResult",
    "XMLNode",

    # Configuration classes for advanced usage
    "ParserConfig",

    # Errors
    "LosslessXMLError",
    "MalformedInputError",
    "SerializationError",
    "InvalidRootMutationError",
]
