"""Tests for building trees from raw tag sequences."""

import pytest

from lossless_xml.shared import (
    DiagnosticSeverity,
    TreeConfig,
    UnclosedDocumentError,
    UnexpectedDelimiterError,
)
from lossless_xml.tokenization import tokenize
from lossless_xml.tree import XMLTreeBuilder, build_tree


class TestXMLTreeBuilder:
    """Test tree construction and alias registration."""

    def test_builds_nested_elements(self):
        """Test elements are registered under their parents."""
        root = build_tree(tokenize('<game><info name="Arda"/><map></map></game>'))

        game = root["game"]
        assert root.tag_name is None
        assert root.children == [game]
        assert game["info"].attributes == {"name": "Arda"}
        assert game["map"].children == []
        assert [child.tag_name for child in game.children] == ["info", "map"]

    def test_reference_counts(self):
        """Test first children have three references and later ones two."""
        root = build_tree(tokenize("<map><t/><t/><t/></map>"))
        counts = [node.reference_count for node in root["map"]["ts"]]

        assert counts == [3, 2, 2]
        assert root["map"].reference_count == 3

    def test_node_flags_preserved(self):
        """Test self-closing form and prefix characters are stored."""
        root = build_tree(tokenize('<?xml version="1.0"?><a /><b></b>'))

        declaration = root["xml"]
        assert declaration.start_chars == "?"
        assert declaration.closing_decoration == "?"
        assert root["a"].self_closing is True
        assert root["a"].closing_decoration == " /"
        assert root["b"].self_closing is False

    def test_raw_blocks_become_children(self):
        """Test special blocks are appended to the current element's children."""
        root = build_tree(tokenize("<notes><![CDATA[text]]></notes>"))

        assert root["notes"].children == ["<![CDATA[text]]>"]
        assert list(root["notes"]) == []

    def test_self_named_attribute_dropped(self):
        """Test an attribute named like its tag is removed and reported."""
        builder = XMLTreeBuilder()
        root = builder.build(['<unit unit="x" id="1"/>'])

        assert root["unit"].attributes == {"id": "1"}
        assert builder.diagnostics[0].severity == DiagnosticSeverity.DEBUG

    def test_self_named_attribute_kept_when_configured(self):
        """Test the attribute survives when dropping is disabled."""
        builder = XMLTreeBuilder(TreeConfig(drop_self_named_attributes=False))
        root = builder.build(['<unit unit="x"/>'])

        assert root["unit"].attributes == {"unit": "x"}

    def test_mismatched_close_accepted(self):
        """Test a close tag closes the innermost element whatever its name."""
        builder = XMLTreeBuilder()
        root = builder.build(["<a>", "<b>", "</a>", "</b>"])

        assert root["a"]["b"].children == []
        assert [d.severity for d in builder.diagnostics] == [
            DiagnosticSeverity.INFO,
            DiagnosticSeverity.INFO,
        ]

    def test_stray_close_ignored(self):
        """Test a close tag with nothing open is ignored."""
        builder = XMLTreeBuilder()
        root = builder.build(["</x>", "<a/>"])

        assert [child.tag_name for child in root.children] == ["a"]
        assert builder.diagnostics[0].message == "Closing tag without open element ignored"

    def test_unclosed_document_lenient(self):
        """Test elements left open are registered with a warning."""
        builder = XMLTreeBuilder()
        root = builder.build(["<game>", "<map>", "<t/>"])

        assert root["game"]["map"]["t"].reference_count == 3
        assert builder.diagnostics[-1].severity == DiagnosticSeverity.WARNING
        assert builder.diagnostics[-1].details == {"unclosed": ["game", "map"]}

    def test_unclosed_document_strict(self):
        """Test strict configuration rejects unclosed documents."""
        builder = XMLTreeBuilder(TreeConfig(require_closed_document=True))

        with pytest.raises(UnclosedDocumentError, match="game"):
            builder.build(["<game>"])

    def test_diagnostics_disabled(self):
        """Test no diagnostics are collected when disabled."""
        builder = XMLTreeBuilder(enable_diagnostics=False)
        builder.build(["</x>", "<a>"])

        assert builder.diagnostics == []

    def test_bad_attribute_propagates(self):
        """Test tag parser errors reach the caller."""
        with pytest.raises(UnexpectedDelimiterError):
            build_tree(["<a x=1>", "</a>"])

    def test_performance_counts(self):
        """Test node and tag counters."""
        builder = XMLTreeBuilder()
        builder.build(["<a>", "<b/>", "<![CDATA[x]]>", "</a>"])

        assert builder.performance.tags_generated == 4
        assert builder.performance.nodes_built == 2

    def test_deep_nesting_without_recursion(self):
        """Test documents deeper than the recursion limit build."""
        depth = 3000
        tags = ["<d>"] * depth + ["</d>"] * depth
        node = build_tree(tags)

        for _ in range(depth):
            node = node["d"]
        assert node.children == []
