"""Exception hierarchy for lossless XML parsing and serialization.

Every failure raised by the core is unrecoverable for the current call: the
parser and serializer never retry or return partial results, they surface the
error to the caller which decides whether to abort.
"""

from typing import Any, Dict, Optional


class LosslessXMLError(Exception):
    """Base exception for all parser, serializer and archive errors."""


class MalformedInputError(LosslessXMLError):
    """Raised when the input text cannot be parsed.

    Carries the character offset of the problem and, when known, the 1-based
    line and column derived from it.
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.offset = offset
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)

    @property
    def position(self) -> Optional[Dict[str, int]]:
        """Position dictionary in the shape used by diagnostics."""
        if self.offset is None:
            return None
        position = {"offset": self.offset}
        if self.line is not None and self.column is not None:
            position["line"] = self.line
            position["column"] = self.column
        return position


class UnexpectedNestingError(MalformedInputError):
    """A new tag was opened while a previous tag was still open."""


class UnterminatedTagError(MalformedInputError):
    """End of input was reached while a tag was still open."""


class UnclosedDocumentError(MalformedInputError):
    """End of the tag sequence was reached with elements still open."""


class UnexpectedDelimiterError(MalformedInputError):
    """An attribute value was not delimited by a single or double quote."""


class SerializationError(LosslessXMLError):
    """Raised when a tree cannot be written back to text."""


class InvalidRootMutationError(SerializationError):
    """The synthetic document root was given attributes."""

    def __init__(self, attributes: Dict[str, Any]) -> None:
        self.attributes = dict(attributes)
        names = ", ".join(sorted(self.attributes))
        super().__init__(f"Document root cannot carry attributes: {names}")


class UnnamedNodeError(SerializationError):
    """A node without a tag name was reached through no alias naming it."""


class ArchiveError(LosslessXMLError):
    """Raised for archive reading and writing failures."""


class ArchiveMemberNotFoundError(ArchiveError):
    """No archive member matched the requested name or suffix."""

    def __init__(self, suffix: str, archive: Optional[str] = None) -> None:
        self.suffix = suffix
        self.archive = archive
        location = f" in {archive}" if archive else ""
        super().__init__(f"No archive member ending with '{suffix}'{location}")


def offset_to_line_column(text: str, offset: int) -> Dict[str, int]:
    """Convert a character offset into 1-based line and column numbers.

    Args:
        text: Text the offset refers to
        offset: Zero-based character offset (clamped to the text length)

    Returns:
        Dictionary with ``line`` and ``column`` keys
    """
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return {"line": line, "column": offset - line_start + 1}
