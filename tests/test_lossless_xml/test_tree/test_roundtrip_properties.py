"""Property tests for parse and serialize round trips.

Covers identity for canonically formatted documents, alias consistency,
removal through any single alias, self-closing fidelity, boolean attributes,
collision-safe pluralization and escaping.
"""

import pytest

from lossless_xml.shared import SerializerConfig
from lossless_xml.tokenization import tokenize
from lossless_xml.tree import XMLSerializer, build_tree, serialize_tree

GAME_DOCUMENT = """\
<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE game SYSTEM "game.dtd">
<game>
    <info name="Arda" version="1.0"/>
    <map>
        <territory name="Mordor" water/>
        <territory name="Gondor"/>
        <territory name="Rohan" />
    </map>
    <notes>
        <![CDATA[free <text> & more]]>
    </notes>
    <empty></empty>
</game>
"""


def _parse(text):
    return build_tree(tokenize(text))


def _territory_names(text):
    return [tag for tag in tokenize(text) if tag.startswith("<territory")]


class TestRoundTripIdentity:
    """Test canonically formatted documents come back byte for byte."""

    def test_game_document(self):
        """Test a document with declarations, raw text and all tag forms."""
        assert serialize_tree(_parse(GAME_DOCUMENT)) == GAME_DOCUMENT

    def test_comments_removed(self):
        """Test comments are the only difference after a round trip."""
        text = "<a>\n    <!-- note -->\n    <b/>\n</a>\n"
        assert serialize_tree(_parse(text)) == "<a>\n    <b/>\n</a>\n"

    def test_two_space_document_with_compact_indent(self):
        """Test documents indented with two spaces round trip with that width."""
        text = "<a>\n  <b>\n    <c/>\n  </b>\n</a>\n"
        serializer = XMLSerializer(SerializerConfig(indent_width=2))

        assert serializer.serialize(_parse(text)) == text

    def test_deep_document(self):
        """Test documents deeper than the recursion limit serialize."""
        depth = 3000
        text = "<d>" * depth + "</d>" * depth
        serializer = XMLSerializer(SerializerConfig(indent_width=0))
        output = serializer.serialize(_parse(text))

        assert output.count("<d>") == depth
        assert output.endswith("<d></d>\n" + "</d>\n" * (depth - 1))


class TestAliasConsistency:
    """Test the three views of each child agree after parsing."""

    def test_views_share_nodes(self):
        """Test singleton, plural and children hold the same objects."""
        game_map = _parse(GAME_DOCUMENT)["game"]["map"]
        territories = game_map["territorys"]

        assert game_map["territory"] is territories[0]
        assert territories == game_map.children
        assert game_map.alias_inconsistencies() == []


class TestPartialRemoval:
    """Test removing a parsed node from any one alias removes it from output."""

    @pytest.mark.parametrize("remove", [
        lambda m: m.aliases.pop("territory"),
        lambda m: m["territorys"].pop(0),
        lambda m: m.children.pop(0),
    ], ids=["singleton", "plural", "children"])
    def test_first_child_removed(self, remove):
        """Test the first territory disappears whichever alias loses it."""
        root = _parse(GAME_DOCUMENT)
        remove(root["game"]["map"])

        output = serialize_tree(root)
        assert _territory_names(output) == [
            '<territory name="Gondor"/>',
            '<territory name="Rohan" />',
        ]

    @pytest.mark.parametrize("remove", [
        lambda m: m["territorys"].pop(1),
        lambda m: m.children.pop(1),
    ], ids=["plural", "children"])
    def test_later_child_removed(self, remove):
        """Test a later territory disappears when removed from one alias."""
        root = _parse(GAME_DOCUMENT)
        remove(root["game"]["map"])

        output = serialize_tree(root)
        assert "Gondor" not in output
        assert "Mordor" in output and "Rohan" in output

    def test_removed_element_takes_subtree(self):
        """Test dropping an element drops its descendants."""
        root = _parse(GAME_DOCUMENT)
        del root["game"]["map"]

        output = serialize_tree(root)
        assert "<map>" not in output
        assert "territory" not in output


class TestSelfClosingFidelity:
    """Test the original self-closing spelling is written back."""

    @pytest.mark.parametrize("tag", ["<a/>", "<a />", '<a x="1"/>', '<a x="1" />'])
    def test_spelling_preserved(self, tag):
        """Test each spelling round trips."""
        assert serialize_tree(_parse(tag)) == tag + "\n"

    def test_declarations_preserved(self):
        """Test processing instructions and declarations keep their form."""
        text = '<?xml version="1.0" ?>\n<!DOCTYPE map>\n'
        assert serialize_tree(_parse(text)) == text


class TestBooleanAttributes:
    """Test attributes without values."""

    def test_boolean_attribute_round_trip(self):
        """Test boolean attributes are written without a value."""
        root = _parse("<opt checked disabled/>")

        assert root["opt"].attributes == {"checked": True, "disabled": True}
        assert serialize_tree(root) == "<opt checked disabled/>\n"


class TestPluralizationCollisions:
    """Test plural aliases never overwrite attributes or singletons."""

    def test_attribute_collision_round_trip(self):
        """Test a parent attribute named like the plural alias survives."""
        text = '<army units="2">\n    <unit id="1"/>\n    <unit id="2"/>\n</army>\n'
        root = _parse(text)

        assert root["army"].attributes == {"units": "2"}
        assert len(root["army"]["_units"]) == 2
        assert serialize_tree(root) == text

    def test_singleton_collision_round_trip(self):
        """Test a child tag named like another tag's plural alias."""
        text = "<list>\n    <items/>\n    <item/>\n    <item/>\n</list>\n"
        root = _parse(text)
        lst = root["list"]

        assert lst["items"].tag_name == "items"
        assert lst["_items"][0] is lst["item"]
        assert serialize_tree(root) == text

    def test_removal_through_prefixed_alias(self):
        """Test the prefixed plural alias counts toward reconciliation."""
        root = _parse('<army units="2"><unit id="1"/><unit id="2"/></army>')
        root["army"]["_units"].pop(0)

        assert 'id="1"' not in serialize_tree(root)


class TestEscaping:
    """Test attribute escapes round trip."""

    def test_escaped_values(self):
        """Test values with special characters come back escaped."""
        text = '<a title="Fish &amp; &quot;Chips&quot; &lt;3&gt;"/>\n'
        root = _parse(text)

        assert root["a"].attributes["title"] == 'Fish & "Chips" <3>'
        assert serialize_tree(root) == text
