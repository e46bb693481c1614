"""Comment stripping ahead of tokenization.

Comments are removed from the raw document before any tag is recognised, so
neither the tokenizer nor the tree ever sees them.
"""

from lossless_xml.shared import get_logger

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

logger = get_logger(__name__, None, "comment_stripper")


def strip_comments(text: str) -> str:
    """Remove every ``<!-- ... -->`` region from ``text``.

    A comment is entered at ``<!--`` and left at the first position where the
    three characters ending there read ``-->``; comments do not nest. An
    unterminated comment consumes the rest of the document.

    Args:
        text: Full document text

    Returns:
        Text with all comment spans removed and every other character kept

    Examples:
        >>> strip_comments('<a/><!-- note --><b/>')
        '<a/><b/>'
        >>> strip_comments('<a/><!-- open')
        '<a/>'
    """
    if COMMENT_OPEN not in text:
        return text

    pieces = []
    position = 0
    while True:
        start = text.find(COMMENT_OPEN, position)
        if start < 0:
            pieces.append(text[position:])
            break
        pieces.append(text[position:start])

        # The closing window may share the two dashes of the opener.
        end = text.find(COMMENT_CLOSE, start + 2)
        if end < 0:
            logger.debug(
                "Unterminated comment consumes remainder of document",
                extra={"offset": start, "discarded_characters": len(text) - start},
            )
            break
        position = end + len(COMMENT_CLOSE)

    return "".join(pieces)
