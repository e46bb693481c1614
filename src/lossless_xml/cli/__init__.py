"""Command-line interface for lossless XML round-tripping and archive edits."""

from .main import main

__all__ = ["main"]
