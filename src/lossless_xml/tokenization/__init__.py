"""Tokenization layer for lossless XML parsing.

Turns decoded document text into raw tag strings and raw tag strings into
structured descriptors.

Key Components:
    strip_comments: Removes comment spans before tokenization
    TagTokenizer: Splits text into raw tag strings
    parse_tag: Parses one raw tag into a TagDescriptor
"""

from .comments import strip_comments
from .tags import (
    AttributeValue,
    TagDescriptor,
    TagKind,
    parse_tag,
    unescape_value,
)
from .tokenizer import TagTokenizer, tokenize

__all__ = [
    "AttributeValue",
    "TagDescriptor",
    "TagKind",
    "TagTokenizer",
    "parse_tag",
    "strip_comments",
    "tokenize",
    "unescape_value",
]
