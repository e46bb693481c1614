"""Tag parser turning one raw tag string into a structured descriptor.

The parser is deliberately permissive: whitespace is skipped around attribute
names and ``=``, attributes without ``=`` become boolean attributes, and
duplicate attribute names keep the later value. Only quoting of attribute
values is enforced.
"""

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional, Tuple, Union

from lossless_xml.shared import UnexpectedDelimiterError

from .tokenizer import SPECIAL_OPEN

AttributeValue = Union[str, bool]

QUOTE_CHARS = ('"', "'")
DECLARATION_CHARS = ("?", "!")
SELF_CLOSE_MARK = "/"
PI_CLOSE_MARK = "?"
# Characters ending an attribute or tag name
_NAME_TERMINATORS = frozenset("=>/")

_ENTITY_PATTERN = re.compile(r"&(amp|quot|lt|gt|apos);")
_ENTITY_VALUES = {"amp": "&", "quot": '"', "lt": "<", "gt": ">", "apos": "'"}


class TagKind(Enum):
    """Kinds of raw tags recognised by the tag parser."""

    OPEN = auto()    # Start tag, self-closing tag or declaration
    CLOSE = auto()   # End tag: </name>
    RAW = auto()     # Special <![ ... ]]> block kept verbatim


@dataclass
class TagDescriptor:
    """Structured form of one raw tag."""

    kind: TagKind
    tag_name: str = ""
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)
    self_closing: bool = False
    start_chars: str = ""
    closing_decoration: str = ""
    raw_text: Optional[str] = None

    @property
    def is_raw(self) -> bool:
        """Check whether this descriptor is a verbatim raw-text block."""
        return self.kind is TagKind.RAW

    @property
    def is_close(self) -> bool:
        """Check whether this descriptor closes the current element."""
        return self.kind is TagKind.CLOSE


def unescape_value(value: str) -> str:
    """Decode the five fixed XML escapes in an attribute value.

    Examples:
        >>> unescape_value('a &amp;lt; b &quot;c&quot;')
        'a &lt; b "c"'
    """
    if "&" not in value:
        return value
    return _ENTITY_PATTERN.sub(lambda match: _ENTITY_VALUES[match.group(1)], value)


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def _parse_name(text: str, index: int) -> Tuple[str, int, bool]:
    """Read a tag or attribute name starting at ``index``.

    Returns:
        Tuple of (name, new index, whether whitespace preceded the name)
    """
    start = _skip_whitespace(text, index)
    spaced = start > index
    end = start
    while (
        end < len(text)
        and text[end] not in _NAME_TERMINATORS
        and not text[end].isspace()
    ):
        end += 1

    if end == start and end < len(text) and text[end] == SELF_CLOSE_MARK:
        return SELF_CLOSE_MARK, end + 1, spaced
    return text[start:end], end, spaced


def _parse_value(text: str, index: int) -> Tuple[AttributeValue, int]:
    """Read an optional ``=value`` part after an attribute name.

    Returns:
        Tuple of (value or True for a boolean attribute, new index)

    A value whose quote never closes runs to the end of the tag.

    Raises:
        UnexpectedDelimiterError: The value is not quoted
    """
    probe = _skip_whitespace(text, index)
    if probe >= len(text) or text[probe] != "=":
        return True, index

    index = _skip_whitespace(text, probe + 1)
    delimiter = text[index] if index < len(text) else ""
    if delimiter not in QUOTE_CHARS:
        raise UnexpectedDelimiterError(
            f"Unexpected value string character {delimiter!r} in {text!r}",
            offset=index,
        )

    end = text.find(delimiter, index + 1)
    if end < 0:
        end = len(text)
    return unescape_value(text[index + 1:end]), end + 1


def parse_tag(raw: str) -> TagDescriptor:
    """Parse one raw tag string produced by the tokenizer.

    Args:
        raw: Tag text from ``<`` to ``>`` inclusive

    Returns:
        TagDescriptor describing the tag

    Raises:
        UnexpectedDelimiterError: An attribute value is not properly quoted

    Examples:
        >>> descriptor = parse_tag('<unit id="1" veteran />')
        >>> descriptor.tag_name, descriptor.attributes, descriptor.self_closing
        ('unit', {'id': '1', 'veteran': True}, True)
        >>> parse_tag('</unit>').is_close
        True
    """
    if raw.startswith(SPECIAL_OPEN):
        return TagDescriptor(kind=TagKind.RAW, self_closing=True, raw_text=raw)

    # Drop the trailing '>' so names and values never run into it.
    body = raw[:-1] if raw.endswith(">") else raw
    index = 1

    if body[index:index + 1] == SELF_CLOSE_MARK:
        tag_name, _, _ = _parse_name(body, index + 1)
        return TagDescriptor(kind=TagKind.CLOSE, tag_name=tag_name)

    start_chars = ""
    self_closing = False
    if body[index:index + 1] in DECLARATION_CHARS:
        start_chars = body[index]
        self_closing = True
        index += 1

    tag_name, index, _ = _parse_name(body, index)
    attributes: Dict[str, AttributeValue] = {}
    closing_decoration = ""

    while index < len(body):
        name, index, spaced = _parse_name(body, index)
        if name == SELF_CLOSE_MARK:
            self_closing = True
            closing_decoration = (" " if spaced else "") + SELF_CLOSE_MARK
            break
        if not name:
            break
        if start_chars == PI_CLOSE_MARK and name == PI_CLOSE_MARK:
            remainder = body[_skip_whitespace(body, index):]
            if not remainder:
                closing_decoration = (" " if spaced else "") + PI_CLOSE_MARK
                break
        value, index = _parse_value(body, index)
        attributes[name] = value

    return TagDescriptor(
        kind=TagKind.OPEN,
        tag_name=tag_name,
        attributes=attributes,
        self_closing=self_closing,
        start_chars=start_chars,
        closing_decoration=closing_decoration,
    )
