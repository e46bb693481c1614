"""Tests for zip archives carrying XML members."""

import zipfile

import pytest

from lossless_xml.archive import XMLArchive, default_output_path
from lossless_xml.shared import ArchiveError, ArchiveMemberNotFoundError

MAP_XML = '<game>\n    <info name="Arda"/>\n</game>\n'


@pytest.fixture
def map_archive(tmp_path):
    """Create a map package with a directory entry, a binary member and XML."""
    path = tmp_path / "arda.zip"
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("arda/", b"")
        archive.writestr("arda/images/map.png", bytes(range(256)))
        archive.writestr("arda/games/arda_TAGX.xml", MAP_XML)
    return path


class TestDefaultOutputPath:
    """Test derived output paths."""

    def test_stem_suffix(self, tmp_path):
        """Test '-2' is appended to the stem."""
        assert default_output_path(tmp_path / "arda.zip") == tmp_path / "arda-2.zip"


class TestXMLArchive:
    """Test reading, replacing and writing archive members."""

    def test_open_and_find(self, map_archive):
        """Test members are listed and found by suffix."""
        archive = XMLArchive.open(map_archive)

        assert archive.names == [
            "arda/",
            "arda/images/map.png",
            "arda/games/arda_TAGX.xml",
        ]
        assert archive.find_member("TAGX.xml") == "arda/games/arda_TAGX.xml"
        assert archive.read_text("arda/games/arda_TAGX.xml") == MAP_XML

    def test_directory_entries_not_matched(self, map_archive):
        """Test directory entries never match a suffix."""
        with pytest.raises(ArchiveMemberNotFoundError):
            XMLArchive.open(map_archive).find_member("/")

    def test_member_not_found(self, map_archive):
        """Test missing members raise with the archive named."""
        archive = XMLArchive.open(map_archive)

        with pytest.raises(ArchiveMemberNotFoundError, match="arda.zip"):
            archive.find_member("units.xml")
        with pytest.raises(ArchiveMemberNotFoundError):
            archive.read_text("missing.xml")
        with pytest.raises(ArchiveMemberNotFoundError):
            archive.replace_text("missing.xml", "")

    def test_replace_and_save_default_path(self, map_archive):
        """Test saving next to the source with other members unchanged."""
        archive = XMLArchive.open(map_archive)
        archive.replace_text("arda/games/arda_TAGX.xml", MAP_XML.replace("Arda", "Arda - 2"))

        output = archive.save()

        assert output == map_archive.with_name("arda-2.zip")
        with zipfile.ZipFile(output) as written:
            assert written.namelist() == archive.names
            assert written.read("arda/images/map.png") == bytes(range(256))
            assert b"Arda - 2" in written.read("arda/games/arda_TAGX.xml")
            info = written.getinfo("arda/images/map.png")
            assert info.compress_type == zipfile.ZIP_DEFLATED
        with zipfile.ZipFile(map_archive) as original:
            assert original.read("arda/games/arda_TAGX.xml").decode() == MAP_XML

    def test_save_explicit_path(self, map_archive, tmp_path):
        """Test saving to a chosen path."""
        target = tmp_path / "out" / "copy.zip"
        target.parent.mkdir()

        assert XMLArchive.open(map_archive).save(target) == target
        assert zipfile.is_zipfile(target)

    def test_missing_archive(self, tmp_path):
        """Test a missing file raises ArchiveError."""
        with pytest.raises(ArchiveError, match="Cannot read archive"):
            XMLArchive.open(tmp_path / "missing.zip")

    def test_not_a_zip(self, tmp_path):
        """Test a non-zip file raises ArchiveError."""
        path = tmp_path / "fake.zip"
        path.write_text("not a zip")

        with pytest.raises(ArchiveError):
            XMLArchive.open(path)

    def test_save_without_source(self):
        """Test an archive built in memory needs an output path."""
        with pytest.raises(ArchiveError, match="Output path required"):
            XMLArchive({}, {}).save()
