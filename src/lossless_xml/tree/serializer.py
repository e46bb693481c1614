"""Alias-reconciling serializer writing an :class:`XMLNode` tree back to text.

A parsed element may be reachable from its parent through up to three
aliases, and callers edit those aliases independently. Before writing, the
serializer builds a :class:`ReconciliationPlan` that counts how many alias
slots and children entries still reach each node. A node is written only if
that count is at least the reference count it was registered with, so
removing a parsed node from any one of its aliases removes it from the
output. Each kept node is written exactly once.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from lossless_xml.shared import (
    InvalidRootMutationError,
    SerializerConfig,
    TreeConfig,
    UnnamedNodeError,
    get_logger,
)

from .node import ChildEntry, XMLNode

# Work item markers for the explicit emission stack
_ENTRY = 0
_LINE = 1


def escape_attribute(value: str) -> str:
    """Escape an attribute value for a double-quoted attribute.

    Examples:
        >>> escape_attribute('say "a" < b & c')
        'say &quot;a&quot; &lt; b &amp; c'
    """
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


@dataclass
class ReconciliationPlan:
    """Keep-or-drop decision for every node reachable from a root.

    ``visits`` maps ``id(node)`` to the number of alias slots and children
    entries referencing it; ``names`` maps ``id(node)`` to the tag name
    recovered from the first alias key it was reached through.
    """

    visits: Dict[int, int] = field(default_factory=dict)
    names: Dict[int, str] = field(default_factory=dict)
    nodes: List[XMLNode] = field(default_factory=list)

    def keeps(self, node: XMLNode) -> bool:
        """Check whether ``node`` is still referenced often enough to be written."""
        return self.visits.get(id(node), 0) >= node.effective_reference_count

    @property
    def dropped(self) -> List[XMLNode]:
        """Nodes reachable through some alias but removed from at least one."""
        return [node for node in self.nodes if not self.keeps(node)]


class XMLSerializer:
    """Writes a tree as indented, newline-terminated markup.

    Examples:
        >>> from lossless_xml.tree.builder import build_tree
        >>> root = build_tree(['<game>', '<unit id="1"/>', '</game>'])
        >>> print(XMLSerializer().serialize(root), end="")
        <game>
            <unit id="1"/>
        </game>
    """

    def __init__(
        self,
        config: Optional[SerializerConfig] = None,
        tree_config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the serializer.

        Args:
            config: Serializer configuration (defaults used when omitted)
            tree_config: Tree configuration used to map plural alias keys
                back to tag names
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or SerializerConfig()
        self.tree_config = tree_config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "serializer")

    def serialize(self, root: XMLNode) -> str:
        """Serialize ``root`` to text.

        A synthetic root (no tag name) writes only its contents; a tagged node
        is written as a fragment including itself. The tag name recovered from
        an alias key is used only for nodes without a tag name of their own.

        Raises:
            InvalidRootMutationError: The synthetic root carries attributes
            UnnamedNodeError: A node has no tag name and no alias names it
        """
        start_time = time.time()
        if root.is_root and root.attributes:
            raise InvalidRootMutationError(root.attributes)

        plan = self.reconcile(root)
        if root.is_root:
            top_level = self.ordered_entries(root, plan)
        else:
            top_level = [(root, None)]

        lines, written = self._emit(top_level, plan, always_keep=root)
        text = self.config.newline.join(lines)
        if lines:
            text += self.config.newline

        self.logger.debug(
            "Serialization completed",
            extra={
                "nodes_written": written,
                "nodes_dropped": len(plan.dropped),
                "character_count": len(text),
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return text

    def reconcile(self, root: XMLNode) -> ReconciliationPlan:
        """Count every alias slot and children entry reaching each node."""
        plan = ReconciliationPlan()
        seen: Set[int] = {id(root)}
        pending: List[XMLNode] = [root]

        while pending:
            parent = pending.pop()
            for target, name in self._references(parent):
                key = id(target)
                plan.visits[key] = plan.visits.get(key, 0) + 1
                if name is not None:
                    plan.names.setdefault(key, name)
                if key not in seen:
                    seen.add(key)
                    plan.nodes.append(target)
                    pending.append(target)
        return plan

    def _references(self, parent: XMLNode) -> List[Tuple[XMLNode, Optional[str]]]:
        references: List[Tuple[XMLNode, Optional[str]]] = []
        registered = {key: tag for tag, key in parent.plural_keys.items()}
        for key, value in parent.aliases.items():
            if isinstance(value, XMLNode):
                references.append((value, key))
            elif isinstance(value, list):
                singular = registered.get(key)
                if singular is None:
                    singular = self._singular_name(parent, key)
                references.extend(
                    (item, singular) for item in value if isinstance(item, XMLNode)
                )
        references.extend(
            (entry, None) for entry in parent.children if isinstance(entry, XMLNode)
        )
        return references

    def _singular_name(self, parent: XMLNode, key: str) -> str:
        """Undo the plural suffix and any sentinel a key collision would add.

        A leading sentinel is removed only while the shorter key is taken by
        an attribute or a singleton alias, so ``_privates`` stays ``_private``
        unless ``privates`` is occupied.
        """
        sentinel = self.tree_config.alias_sentinel
        name = key
        while name.startswith(sentinel):
            shorter = name[len(sentinel):]
            if not (
                shorter in parent.attributes
                or (shorter in parent.aliases
                    and not isinstance(parent.aliases[shorter], list))
            ):
                break
            name = shorter
        suffix = self.tree_config.plural_suffix
        if name.endswith(suffix):
            name = name[:-len(suffix)]
        return name

    def ordered_entries(
        self, parent: XMLNode, plan: ReconciliationPlan
    ) -> List[Tuple[ChildEntry, Optional[str]]]:
        """Children in order, then nodes reachable only through aliases."""
        entries: List[Tuple[ChildEntry, Optional[str]]] = []
        in_children: Set[int] = set()
        for entry in parent.children:
            if isinstance(entry, XMLNode):
                in_children.add(id(entry))
                entries.append((entry, plan.names.get(id(entry))))
            else:
                entries.append((entry, None))

        for target, _ in self._references(parent):
            key = id(target)
            if key not in in_children:
                in_children.add(key)
                entries.append((target, plan.names.get(key)))
        return entries

    def _emit(
        self,
        top_level: List[Tuple[ChildEntry, Optional[str]]],
        plan: ReconciliationPlan,
        always_keep: XMLNode,
    ) -> Tuple[List[str], int]:
        lines: List[str] = []
        written: Set[int] = set()
        indent_unit = self.config.indent

        def will_write(entry: ChildEntry) -> bool:
            if not isinstance(entry, XMLNode):
                return True
            return id(entry) not in written and (
                entry is always_keep or plan.keeps(entry)
            )

        stack: List[tuple] = [
            (_ENTRY, entry, name, 0) for entry, name in reversed(top_level)
        ]
        while stack:
            item = stack.pop()
            if item[0] == _LINE:
                lines.append(item[1])
                continue

            _, entry, override, depth = item
            indent = indent_unit * depth
            if not isinstance(entry, XMLNode):
                lines.append(indent + entry)
                continue
            if not will_write(entry):
                continue
            written.add(id(entry))

            # A node's own tag name wins over the alias-derived one.
            tag_name = entry.tag_name if entry.tag_name is not None else override
            if tag_name is None:
                raise UnnamedNodeError(
                    "Node has no tag name and is not reachable through a named alias"
                )
            open_tag = self._open_tag(entry, tag_name)
            if entry.self_closing:
                lines.append(indent + open_tag)
                continue

            close_tag = f"</{tag_name}>"
            children = self.ordered_entries(entry, plan)
            if self.config.collapse_empty_elements and not any(
                will_write(child) for child, _ in children
            ):
                lines.append(indent + open_tag + close_tag)
                continue

            lines.append(indent + open_tag)
            stack.append((_LINE, indent + close_tag))
            stack.extend(
                (_ENTRY, child, name, depth + 1) for child, name in reversed(children)
            )

        return lines, len(written)

    def _open_tag(self, node: XMLNode, tag_name: str) -> str:
        parts = ["<", node.start_chars, tag_name]
        for name, value in node.attributes.items():
            if value is True:
                parts.append(f" {name}")
            elif value is False or value is None:
                continue
            else:
                parts.append(f' {name}="{escape_attribute(str(value))}"')

        if node.self_closing:
            decoration = node.closing_decoration
            if not decoration and not node.start_chars:
                decoration = "/"
            parts.append(decoration)
        parts.append(">")
        return "".join(parts)


def serialize_tree(root: XMLNode, config: Optional[SerializerConfig] = None) -> str:
    """Serialize with a default :class:`XMLSerializer`."""
    return XMLSerializer(config).serialize(root)
