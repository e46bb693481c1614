"""Tree building from a raw tag sequence.

The builder walks the tag sequence with an explicit position index and an
explicit stack of open elements, so document depth is bounded by memory and
not by Python's recursion limit. Node identity and ordering are the same as a
recursive descent that registers each element under its parent when the
element completes.
"""

import time
from typing import List, Optional, Sequence

from lossless_xml.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    TreeConfig,
    UnclosedDocumentError,
    get_logger,
)
from lossless_xml.tokenization import TagDescriptor, parse_tag

from .node import XMLNode


class XMLTreeBuilder:
    """Builds an :class:`XMLNode` tree from raw tag strings.

    Examples:
        >>> root = XMLTreeBuilder().build(['<game>', '<unit id="1"/>', '</game>'])
        >>> root["game"]["unit"].attributes
        {'id': '1'}
        >>> root["game"]["unit"].reference_count
        3
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None,
        enable_diagnostics: bool = True
    ) -> None:
        """Initialize the tree builder.

        Args:
            config: Tree configuration (defaults used when omitted)
            correlation_id: Optional correlation ID for request tracking
            enable_diagnostics: Collect diagnostics for accepted anomalies
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.enable_diagnostics = enable_diagnostics
        self.logger = get_logger(__name__, correlation_id, "tree_builder")
        self.diagnostics: List[DiagnosticEntry] = []
        self.performance = PerformanceMetrics()

    def build(self, tags: Sequence[str]) -> XMLNode:
        """Build the document tree.

        Args:
            tags: Raw tag strings as produced by the tokenizer

        Returns:
            The synthetic root node

        Raises:
            UnexpectedDelimiterError: A tag has an unquoted attribute value
            UnclosedDocumentError: Elements are still open at the end and
                ``require_closed_document`` is set
        """
        start_time = time.time()
        self.diagnostics = []
        self.performance = PerformanceMetrics(tags_generated=len(tags))

        root = XMLNode()
        open_nodes: List[XMLNode] = []
        position = 0

        while position < len(tags):
            descriptor = parse_tag(tags[position])
            position += 1
            parent = open_nodes[-1] if open_nodes else root

            if descriptor.is_raw:
                parent.append_child(descriptor.raw_text)
                continue

            if descriptor.is_close:
                if not open_nodes:
                    self._add_diagnostic(
                        DiagnosticSeverity.INFO,
                        "Closing tag without open element ignored",
                        {"tag": descriptor.tag_name, "index": position - 1},
                    )
                    continue
                node = open_nodes.pop()
                if descriptor.tag_name != node.tag_name:
                    self._add_diagnostic(
                        DiagnosticSeverity.INFO,
                        "Mismatched closing tag accepted",
                        {
                            "expected": node.tag_name,
                            "found": descriptor.tag_name,
                            "index": position - 1,
                        },
                    )
                self._register(open_nodes[-1] if open_nodes else root, node)
                continue

            node = self._create_node(descriptor, position - 1)
            if node.self_closing:
                self._register(parent, node)
            else:
                open_nodes.append(node)

        if open_nodes:
            self._close_remaining(root, open_nodes)

        self.performance.processing_time_ms = (time.time() - start_time) * 1000
        self.logger.debug(
            "Tree building completed",
            extra={
                "tag_count": len(tags),
                "node_count": self.performance.nodes_built,
                "diagnostics_count": len(self.diagnostics),
            }
        )
        return root

    def _create_node(self, descriptor: TagDescriptor, index: int) -> XMLNode:
        attributes = dict(descriptor.attributes)
        if (
            self.config.drop_self_named_attributes
            and descriptor.tag_name in attributes
        ):
            del attributes[descriptor.tag_name]
            self._add_diagnostic(
                DiagnosticSeverity.DEBUG,
                "Attribute named like its tag dropped",
                {"tag": descriptor.tag_name, "index": index},
            )

        self.performance.nodes_built += 1
        return XMLNode(
            tag_name=descriptor.tag_name,
            attributes=attributes,
            self_closing=descriptor.self_closing,
            start_chars=descriptor.start_chars,
            closing_decoration=descriptor.closing_decoration,
        )

    def _register(self, parent: XMLNode, node: XMLNode) -> None:
        parent.register_child(
            node,
            suffix=self.config.plural_suffix,
            sentinel=self.config.alias_sentinel,
        )

    def _close_remaining(self, root: XMLNode, open_nodes: List[XMLNode]) -> None:
        names = [node.tag_name for node in open_nodes]
        if self.config.require_closed_document:
            raise UnclosedDocumentError(
                f"Document ended with unclosed elements: {', '.join(map(str, names))}"
            )

        self.logger.warning(
            "Document ended with unclosed elements",
            extra={"unclosed": names}
        )
        self._add_diagnostic(
            DiagnosticSeverity.WARNING,
            "Document ended with unclosed elements",
            {"unclosed": names},
        )
        while open_nodes:
            node = open_nodes.pop()
            self._register(open_nodes[-1] if open_nodes else root, node)

    def _add_diagnostic(self, severity, message, details) -> None:
        self.logger.debug(message, extra=details)
        if not self.enable_diagnostics:
            return
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component="tree_builder",
                details=details,
                correlation_id=self.correlation_id,
            )
        )


def build_tree(tags: Sequence[str], config: Optional[TreeConfig] = None) -> XMLNode:
    """Build a tree with a default :class:`XMLTreeBuilder`."""
    return XMLTreeBuilder(config).build(tags)
