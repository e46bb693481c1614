"""Public parse and serialize API with progressive disclosure.

Level 1 is a pair of module functions, :func:`parse` and :func:`serialize`,
which are all an editing collaborator needs: parse, mutate the returned tree
through its aliases, serialize. Level 2 is :class:`LosslessXMLParser`, which
binds one :class:`ParserConfig` and correlation ID to every call and exposes
:func:`parse_document` results with diagnostics and metrics.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from lossless_xml.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    MalformedInputError,
    ParserConfig,
    PerformanceMetrics,
    SerializationError,
    get_logger,
)
from lossless_xml.tokenization import TagTokenizer
from lossless_xml.tree import XMLNode, XMLSerializer, XMLTreeBuilder

PathType = Union[str, Path]

# Max length for content preview in logs
PREVIEW_LENGTH = 100
MS_PER_SECOND = 1000


@dataclass
class ParseResult:
    """Parsed tree together with diagnostics and performance information."""

    root: XMLNode
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    tag_count: int = 0
    correlation_id: Optional[str] = None

    @property
    def element_count(self) -> int:
        """Number of elements in document order, excluding the synthetic root."""
        return sum(1 for _ in self.root.iter_nodes()) - 1

    @property
    def max_depth(self) -> int:
        """Deepest element nesting level (top-level elements are depth 1)."""
        deepest = 0
        stack = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            deepest = max(deepest, depth)
            stack.extend((child, depth + 1) for child in node.element_children())
        return deepest

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    @property
    def has_warnings(self) -> bool:
        """Check if any accepted anomaly was reported at WARNING level."""
        return bool(self.get_diagnostics_by_severity(DiagnosticSeverity.WARNING))

    def to_dict(self) -> Dict[str, Any]:
        """Summarize the result as a JSON-friendly dictionary."""
        return {
            "element_count": self.element_count,
            "tag_count": self.tag_count,
            "max_depth": self.max_depth,
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
            "performance": self.performance.to_dict(),
        }


class LosslessXMLParser:
    """Parser and serializer sharing one configuration.

    Examples:
        >>> parser = LosslessXMLParser(ParserConfig.compact())
        >>> root = parser.parse('<game><info name="Arda"/></game>')
        >>> root["game"]["info"].set_attribute("name", "Arda - 2")
        >>> print(parser.serialize(root), end="")
        <game>
          <info name="Arda - 2"/>
        </game>
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults used when omitted)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "lossless_parser")

    def parse(self, text: str) -> XMLNode:
        """Parse ``text`` and return the synthetic root."""
        return self.parse_document(text).root

    def parse_document(self, text: str) -> ParseResult:
        """Parse ``text`` and return the root with diagnostics and metrics.

        Raises:
            UnexpectedNestingError: A tag was opened inside another tag
            UnterminatedTagError: Input ended inside a tag
            UnexpectedDelimiterError: An attribute value was not quoted
            UnclosedDocumentError: Elements were left open and the
                configuration requires a closed document
        """
        start_time = time.time()
        self.logger.debug(
            "Starting parse operation",
            extra={
                "content_length": len(text),
                "preview": (
                    text[:PREVIEW_LENGTH] + "..."
                    if len(text) > PREVIEW_LENGTH else text
                ),
            }
        )

        tokenizer = TagTokenizer(self.config.tokenizer, self.correlation_id)
        builder = XMLTreeBuilder(
            self.config.tree,
            self.correlation_id,
            enable_diagnostics=self.config.global_.enable_diagnostics,
        )
        try:
            tags = tokenizer.tokenize(text)
            root = builder.build(tags)
        except MalformedInputError as e:
            self.logger.error(
                "Parse operation failed",
                extra={"error": type(e).__name__, "position": e.position},
                exc_info=False,
            )
            raise

        performance = builder.performance
        performance.characters_processed = len(text)
        performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND

        result = ParseResult(
            root=root,
            diagnostics=list(builder.diagnostics),
            performance=performance,
            tag_count=len(tags),
            correlation_id=self.correlation_id,
        )
        self.logger.info(
            "Parse completed",
            extra={
                "tag_count": len(tags),
                "node_count": performance.nodes_built,
                "diagnostics_count": len(result.diagnostics),
                "processing_time_ms": performance.processing_time_ms,
            }
        )
        return result

    def serialize(self, root: XMLNode) -> str:
        """Serialize a tree produced by :meth:`parse` (possibly edited).

        Raises:
            InvalidRootMutationError: The synthetic root carries attributes
        """
        serializer = XMLSerializer(
            self.config.serializer, self.config.tree, self.correlation_id
        )
        try:
            text = serializer.serialize(root)
        except SerializationError as e:
            self.logger.error(
                "Serialize operation failed",
                extra={"error": type(e).__name__},
                exc_info=False,
            )
            raise

        self.logger.info(
            "Serialize completed",
            extra={"character_count": len(text)}
        )
        return text

    def roundtrip(self, text: str) -> str:
        """Parse and immediately serialize ``text``."""
        return self.serialize(self.parse(text))

    def parse_file(self, path: PathType, encoding: str = "utf-8") -> XMLNode:
        """Read and parse a file decoded with ``encoding``."""
        path_obj = Path(path)
        self.logger.debug(
            "Reading file",
            extra={"file_path": str(path_obj), "encoding": encoding}
        )
        return self.parse(path_obj.read_text(encoding=encoding))

    def write_file(
        self, root: XMLNode, path: PathType, encoding: str = "utf-8"
    ) -> None:
        """Serialize ``root`` and write it to ``path``."""
        text = self.serialize(root)
        # newline="" keeps the serializer's configured line endings.
        with Path(path).open("w", encoding=encoding, newline="") as file:
            file.write(text)


def parse(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> XMLNode:
    """Parse decoded XML text into an editable tree.

    Examples:
        >>> root = parse('<map><territory name="a"/><territory name="b"/></map>')
        >>> [t.get_attribute("name") for t in root["map"]["territorys"]]
        ['a', 'b']
    """
    return LosslessXMLParser(config, correlation_id).parse(text)


def parse_document(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse ``text`` and keep diagnostics and performance metrics."""
    return LosslessXMLParser(config, correlation_id).parse_document(text)


def serialize(
    root: XMLNode,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Serialize a (possibly edited) tree back to text."""
    return LosslessXMLParser(config, correlation_id).serialize(root)


def roundtrip(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Parse and serialize ``text`` without edits."""
    return LosslessXMLParser(config, correlation_id).roundtrip(text)


def parse_file(
    path: PathType,
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> XMLNode:
    """Read and parse an XML file."""
    return LosslessXMLParser(config, correlation_id).parse_file(path, encoding)


def write_file(
    root: XMLNode,
    path: PathType,
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> None:
    """Serialize a tree and write it to a file."""
    LosslessXMLParser(config, correlation_id).write_file(root, path, encoding)
