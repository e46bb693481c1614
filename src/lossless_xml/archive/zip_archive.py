"""Zip archives carrying an XML member to be edited in place.

Map and game packages are distributed as zip files with one XML document
somewhere inside. :class:`XMLArchive` loads every member into memory, lets
one member's text be replaced, and writes a new archive where every other
member is copied with its original bytes and metadata.
"""

import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from lossless_xml.shared import ArchiveError, ArchiveMemberNotFoundError, get_logger

PathType = Union[str, Path]

DEFAULT_MEMBER_SUFFIX = ".xml"
OUTPUT_STEM_SUFFIX = "-2"


def default_output_path(path: PathType) -> Path:
    """Return the sibling path used when no output is given.

    Examples:
        >>> default_output_path("maps/arda.zip").as_posix()
        'maps/arda-2.zip'
    """
    path_obj = Path(path)
    return path_obj.with_name(f"{path_obj.stem}{OUTPUT_STEM_SUFFIX}{path_obj.suffix}")


class XMLArchive:
    """In-memory view of a zip archive with replaceable members."""

    def __init__(
        self,
        members: Dict[str, bytes],
        infos: Dict[str, zipfile.ZipInfo],
        source: Optional[Path] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self._members = members
        self._infos = infos
        self.source = source
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "archive")

    @classmethod
    def open(cls, path: PathType, correlation_id: Optional[str] = None) -> "XMLArchive":
        """Read every member of the archive at ``path``.

        Raises:
            ArchiveError: ``path`` is missing or not a zip archive
        """
        path_obj = Path(path)
        try:
            with zipfile.ZipFile(path_obj) as archive:
                infos = {info.filename: info for info in archive.infolist()}
                members = {name: archive.read(name) for name in infos}
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Cannot read archive {path_obj}: {e}") from e

        instance = cls(members, infos, path_obj, correlation_id)
        instance.logger.debug(
            "Archive loaded",
            extra={"archive": str(path_obj), "member_count": len(members)}
        )
        return instance

    @property
    def names(self) -> List[str]:
        """Member names in archive order."""
        return list(self._members)

    def find_member(self, suffix: str = DEFAULT_MEMBER_SUFFIX) -> str:
        """Return the first member name ending with ``suffix``.

        Directory entries are never matched.

        Raises:
            ArchiveMemberNotFoundError: No member ends with ``suffix``
        """
        for name in self._members:
            if name.endswith(suffix) and not name.endswith("/"):
                return name
        raise ArchiveMemberNotFoundError(
            suffix, str(self.source) if self.source else None
        )

    def read_text(self, name: str, encoding: str = "utf-8") -> str:
        """Decode member ``name`` as text."""
        if name not in self._members:
            raise ArchiveMemberNotFoundError(
                name, str(self.source) if self.source else None
            )
        return self._members[name].decode(encoding)

    def replace_text(self, name: str, text: str, encoding: str = "utf-8") -> None:
        """Replace the content of member ``name``; other members are untouched."""
        if name not in self._members:
            raise ArchiveMemberNotFoundError(
                name, str(self.source) if self.source else None
            )
        self._members[name] = text.encode(encoding)
        self.logger.debug(
            "Archive member replaced",
            extra={"member": name, "size": len(self._members[name])}
        )

    def save(self, path: Optional[PathType] = None) -> Path:
        """Write the archive to ``path`` (``<stem>-2.zip`` next to the source by default).

        Returns:
            The path written

        Raises:
            ArchiveError: No output path could be determined or writing failed
        """
        if path is None:
            if self.source is None:
                raise ArchiveError("Output path required for an archive without source")
            path = default_output_path(self.source)
        path_obj = Path(path)

        try:
            with zipfile.ZipFile(path_obj, "w") as archive:
                for name, data in self._members.items():
                    archive.writestr(self._infos[name], data)
        except OSError as e:
            raise ArchiveError(f"Cannot write archive {path_obj}: {e}") from e

        self.logger.info(
            "Archive written",
            extra={"archive": str(path_obj), "member_count": len(self._members)}
        )
        return path_obj
