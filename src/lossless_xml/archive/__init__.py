"""Zip archive access for XML documents shipped inside packages."""

from .zip_archive import DEFAULT_MEMBER_SUFFIX, XMLArchive, default_output_path

__all__ = ["DEFAULT_MEMBER_SUFFIX", "XMLArchive", "default_output_path"]
