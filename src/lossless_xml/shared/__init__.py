"""Shared utilities for lossless XML parsing.

This module provides the configuration objects, exception hierarchy,
diagnostic records and logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    SerializerConfig,
    TokenizerConfig,
    TreeConfig,
)
from .errors import (
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
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ArchiveError",
    "ArchiveMemberNotFoundError",
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "GlobalConfig",
    "InvalidRootMutationError",
    "LosslessXMLError",
    "MalformedInputError",
    "ParserConfig",
    "PerformanceMetrics",
    "SerializationError",
    "SerializerConfig",
    "TokenizerConfig",
    "TreeConfig",
    "UnclosedDocumentError",
    "UnexpectedDelimiterError",
    "UnexpectedNestingError",
    "UnnamedNodeError",
    "UnterminatedTagError",
    "configure_logging",
    "get_logger",
]
