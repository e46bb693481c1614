"""Tests for the exception hierarchy and position helpers."""

import pytest

from lossless_xml.shared.errors import (
    ArchiveError,
    ArchiveMemberNotFoundError,
    InvalidRootMutationError,
    LosslessXMLError,
    MalformedInputError,
    SerializationError,
    UnclosedDocumentError,
    UnexpectedDelimiterError,
    UnexpectedNestingError,
    UnnamedNodeError,
    UnterminatedTagError,
    offset_to_line_column,
)


class TestErrorHierarchy:
    """Test exception classes and their relationships."""

    @pytest.mark.parametrize("error_type", [
        UnexpectedNestingError,
        UnterminatedTagError,
        UnclosedDocumentError,
        UnexpectedDelimiterError,
    ])
    def test_malformed_input_errors(self, error_type):
        """Test parse errors share the MalformedInputError base."""
        assert issubclass(error_type, MalformedInputError)
        assert issubclass(error_type, LosslessXMLError)

    def test_serialization_errors(self):
        """Test serialization errors share the SerializationError base."""
        assert issubclass(InvalidRootMutationError, SerializationError)
        assert issubclass(UnnamedNodeError, SerializationError)

    def test_position_in_message(self):
        """Test line and column are appended to the message."""
        error = UnterminatedTagError("Tag not closed", offset=7, line=2, column=3)

        assert str(error) == "Tag not closed (line 2, column 3)"
        assert error.position == {"offset": 7, "line": 2, "column": 3}

    def test_position_without_line(self):
        """Test position with only an offset."""
        error = UnexpectedDelimiterError("Bad value", offset=4)

        assert str(error) == "Bad value"
        assert error.position == {"offset": 4}

    def test_position_absent(self):
        """Test errors without any position."""
        assert UnclosedDocumentError("Unclosed").position is None

    def test_invalid_root_mutation_message(self):
        """Test the root mutation error lists the offending attributes."""
        error = InvalidRootMutationError({"b": "2", "a": "1"})

        assert error.attributes == {"a": "1", "b": "2"}
        assert "a, b" in str(error)

    def test_archive_member_not_found(self):
        """Test archive member error message and fields."""
        error = ArchiveMemberNotFoundError("TAGX.xml", "maps/arda.zip")

        assert isinstance(error, ArchiveError)
        assert error.suffix == "TAGX.xml"
        assert str(error) == "No archive member ending with 'TAGX.xml' in maps/arda.zip"


class TestOffsetToLineColumn:
    """Test conversion of offsets to line and column numbers."""

    def test_first_line(self):
        """Test offsets on the first line."""
        assert offset_to_line_column("<a><b>", 3) == {"line": 1, "column": 4}

    def test_later_line(self):
        """Test offsets after newlines."""
        text = "<a>\n  <b>\n"
        assert offset_to_line_column(text, 6) == {"line": 2, "column": 3}

    def test_offset_clamped(self):
        """Test offsets beyond the text are clamped to its end."""
        assert offset_to_line_column("ab", 10) == {"line": 1, "column": 3}
