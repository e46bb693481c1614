"""Tag tokenizer splitting a document into raw tag strings.

The grammar treats XML as a flat sequence of tags. Free text between tags is
discarded; textual payload is expected to arrive inside special
``<![ ... ]]>`` blocks, which are kept as single opaque tokens.
"""

import re
from typing import List, Optional

from lossless_xml.shared import (
    TokenizerConfig,
    UnexpectedNestingError,
    UnterminatedTagError,
    get_logger,
)
from lossless_xml.shared.errors import offset_to_line_column

from .comments import strip_comments

TAG_OPEN = "<"
TAG_CLOSE = ">"
SPECIAL_OPEN = "<!["
SPECIAL_CLOSE = "]]>"

# Length of source excerpt quoted in nesting errors
ERROR_EXCERPT_LENGTH = 40

# Normal tag up to the first '<' or '>' outside a quoted attribute value
_TAG_BODY = re.compile(r"""<(?:=\s*"[^"<]*"|=\s*'[^'<]*'|[^<>])*""")


class TagTokenizer:
    """Splits comment-free document text into raw tag strings.

    Each token is the exact source substring from ``<`` to the matching ``>``,
    or for a special tag from ``<![`` through the matching ``]]>``. A ``>``
    inside a quoted attribute value does not end the tag; a ``<`` there is
    still a nesting error. Attributes are not otherwise interpreted here.

    Error positions refer to the text after comment stripping.

    Examples:
        >>> TagTokenizer().tokenize('<a x="1">ignored<b/></a>')
        ['<a x="1">', '<b/>', '</a>']
        >>> TagTokenizer().tokenize('<a><![CDATA[<raw>]]></a>')
        ['<a>', '<![CDATA[<raw>]]>', '</a>']
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Tokenizer configuration (defaults used when omitted)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tag_tokenizer")

    def tokenize(self, text: str) -> List[str]:
        """Tokenize ``text`` into raw tag strings.

        Args:
            text: Decoded document text

        Returns:
            Ordered list of raw tag strings

        Raises:
            UnexpectedNestingError: A ``<`` appeared while a tag was open
            UnterminatedTagError: Input ended while a tag was open
        """
        if self.config.strip_comments:
            text = strip_comments(text)

        tags: List[str] = []
        position = 0
        length = len(text)

        while position < length:
            start = text.find(TAG_OPEN, position)
            if start < 0:
                break

            if text.startswith(SPECIAL_OPEN, start):
                end = text.find(SPECIAL_CLOSE, start + len(SPECIAL_OPEN))
                if end < 0:
                    raise self._error(
                        UnterminatedTagError,
                        "Special tag not closed before end of input",
                        text,
                        start,
                    )
                position = end + len(SPECIAL_CLOSE)
            else:
                end = _TAG_BODY.match(text, start).end()
                if end < length and text[end] == TAG_OPEN:
                    excerpt = text[end:end + ERROR_EXCERPT_LENGTH]
                    raise self._error(
                        UnexpectedNestingError,
                        f"Starting new tag with old tag still open: {excerpt!r}",
                        text,
                        end,
                    )
                if end >= length:
                    raise self._error(
                        UnterminatedTagError,
                        "Last tag not closed before end of input",
                        text,
                        start,
                    )
                position = end + len(TAG_CLOSE)

            tags.append(text[start:position])

        self.logger.debug(
            "Tokenization completed",
            extra={"tag_count": len(tags), "character_count": length}
        )
        return tags

    def _error(self, error_type, message: str, text: str, offset: int):
        location = offset_to_line_column(text, offset)
        self.logger.debug(
            "Tokenization failed",
            extra={"error": error_type.__name__, "offset": offset, **location}
        )
        return error_type(message, offset=offset, **location)


def tokenize(text: str, config: Optional[TokenizerConfig] = None) -> List[str]:
    """Tokenize ``text`` with a default :class:`TagTokenizer`."""
    return TagTokenizer(config).tokenize(text)
