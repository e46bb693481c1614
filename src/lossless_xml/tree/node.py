"""Editable node model for lossless XML documents.

Every element is reachable from its parent through three independent views:

* the singleton alias ``parent["unit"]``: the first ``unit`` child seen,
* the plural alias ``parent["units"]``: every ``unit`` child in order,
* ``parent.children``: every child, elements and raw text, in document order.

All three hold the same :class:`XMLNode` object. They may be edited
independently; the serializer reconciles them when writing (see
:mod:`lossless_xml.tree.serializer`).
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from lossless_xml.tokenization.tags import AttributeValue

AliasValue = Union["XMLNode", List["XMLNode"]]
ChildEntry = Union["XMLNode", str]

DEFAULT_PLURAL_SUFFIX = "s"
DEFAULT_ALIAS_SENTINEL = "_"

_PATH_SEGMENT = re.compile(r"^(?P<key>[^\[\]]+)(?:\[(?P<index>-?\d+)\])?$")


@dataclass(eq=False)
class XMLNode:
    """One parsed element, or the synthetic document root.

    Nodes compare by identity: the same element registered under several
    aliases is one object, never a copy.

    Examples:
        >>> parent = XMLNode()
        >>> unit = XMLNode(tag_name="unit", attributes={"id": "1"})
        >>> parent.register_child(unit)
        3
        >>> parent["unit"] is parent["units"][0] is parent.children[0]
        True
    """

    tag_name: Optional[str] = None
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)
    children: List[ChildEntry] = field(default_factory=list)
    aliases: Dict[str, AliasValue] = field(default_factory=dict)
    plural_keys: Dict[str, str] = field(default_factory=dict)
    self_closing: bool = False
    start_chars: str = ""
    closing_decoration: str = ""
    reference_count: Optional[int] = None

    def __repr__(self) -> str:
        name = self.tag_name if self.tag_name is not None else "#root"
        return (
            f"XMLNode({name!r}, attributes={len(self.attributes)}, "
            f"children={len(self.children)}, reference_count={self.reference_count})"
        )

    @property
    def is_root(self) -> bool:
        """Check whether this is a synthetic root (no tag name)."""
        return self.tag_name is None

    @property
    def effective_reference_count(self) -> int:
        """Reference count used for emission; inserted nodes count as 1."""
        return self.reference_count if self.reference_count is not None else 1

    # Alias table access

    def __getitem__(self, key: str) -> AliasValue:
        return self.aliases[key]

    def __setitem__(self, key: str, value: AliasValue) -> None:
        self.aliases[key] = value

    def __delitem__(self, key: str) -> None:
        del self.aliases[key]

    def __contains__(self, key: object) -> bool:
        return key in self.aliases

    def __iter__(self) -> Iterator[str]:
        return iter(self.aliases)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the alias stored under ``key`` or ``default``."""
        return self.aliases.get(key, default)

    def first(self, tag_name: str) -> Optional["XMLNode"]:
        """Return the singleton alias for ``tag_name`` if it is a node."""
        value = self.aliases.get(tag_name)
        return value if isinstance(value, XMLNode) else None

    def all(self, tag_name: str) -> List["XMLNode"]:
        """Return the plural alias list for ``tag_name`` (empty if none)."""
        key = self.plural_keys.get(tag_name)
        value = self.aliases.get(key) if key is not None else None
        return value if isinstance(value, list) else []

    def plural_key_for(
        self,
        tag_name: str,
        suffix: str = DEFAULT_PLURAL_SUFFIX,
        sentinel: str = DEFAULT_ALIAS_SENTINEL,
    ) -> str:
        """Choose the alias key holding every ``tag_name`` child.

        The key is ``tag_name + suffix``. While that key is taken by a
        singleton alias or an attribute, ``sentinel`` is prefixed until a free
        slot or an existing list is found.
        """
        key = tag_name + suffix
        while key in self.attributes or (
            key in self.aliases and not isinstance(self.aliases[key], list)
        ):
            key = sentinel + key
        return key

    def register_child(
        self,
        child: "XMLNode",
        suffix: str = DEFAULT_PLURAL_SUFFIX,
        sentinel: str = DEFAULT_ALIAS_SENTINEL,
    ) -> int:
        """Install ``child`` under all default aliases and fix its reference count.

        1. The singleton alias, when no alias of that name exists yet.
        2. The plural alias, always.
        3. The children list, always.

        Returns:
            The reference count recorded on ``child`` (2 or 3)
        """
        tag_name = child.tag_name or ""
        count = 0

        if tag_name not in self.aliases:
            self.aliases[tag_name] = child
            count += 1

        key = self.plural_key_for(tag_name, suffix, sentinel)
        self.plural_keys.setdefault(tag_name, key)
        self.aliases.setdefault(key, []).append(child)
        count += 1

        self.children.append(child)
        count += 1

        child.reference_count = count
        return count

    def append_child(self, child: ChildEntry) -> None:
        """Append to ``children`` only.

        A fresh node appended this way has no reference count and is written
        once. Appending a parsed node here alone does not make it reappear.
        """
        self.children.append(child)

    def insert_child(self, index: int, child: ChildEntry) -> None:
        """Insert into ``children`` only at ``index``."""
        if not (0 <= index <= len(self.children)):
            raise IndexError("Child index out of range")
        self.children.insert(index, child)

    def remove(self, child: "XMLNode") -> bool:
        """Remove ``child`` from every alias of this node.

        Removing from any single alias already drops a parsed node from the
        output; this clears the others too so the tree reads consistently.

        Returns:
            True if ``child`` was found anywhere
        """
        found = False
        kept_children = [entry for entry in self.children if entry is not child]
        if len(kept_children) != len(self.children):
            self.children[:] = kept_children
            found = True

        for key in list(self.aliases):
            value = self.aliases[key]
            if value is child:
                del self.aliases[key]
                found = True
            elif isinstance(value, list) and any(item is child for item in value):
                value[:] = [item for item in value if item is not child]
                found = True
        return found

    # Derived views computed from the children list

    def element_children(self) -> List["XMLNode"]:
        """Return the node entries of ``children`` (raw text skipped)."""
        return [entry for entry in self.children if isinstance(entry, XMLNode)]

    def find_child(self, tag_name: str) -> Optional["XMLNode"]:
        """Find first entry of ``children`` with matching tag name."""
        for entry in self.children:
            if isinstance(entry, XMLNode) and entry.tag_name == tag_name:
                return entry
        return None

    def find_children(self, tag_name: str) -> List["XMLNode"]:
        """Find all entries of ``children`` with matching tag name."""
        return [
            entry for entry in self.children
            if isinstance(entry, XMLNode) and entry.tag_name == tag_name
        ]

    def by_tag_name(self) -> Dict[str, List["XMLNode"]]:
        """Group ``children`` by tag name, preserving document order."""
        groups: Dict[str, List[XMLNode]] = {}
        for entry in self.element_children():
            groups.setdefault(entry.tag_name or "", []).append(entry)
        return groups

    def alias_inconsistencies(self) -> List[str]:
        """Describe every tag whose aliases disagree with ``children``.

        For each tag name, the singleton alias and the first element of the
        plural alias must be the first same-named entry of ``children``.

        Returns:
            Human-readable descriptions; empty when the aliases agree
        """
        problems = []
        for tag_name, group in self.by_tag_name().items():
            first = group[0]
            singleton = self.aliases.get(tag_name)
            if isinstance(singleton, XMLNode) and singleton is not first:
                problems.append(
                    f"singleton alias '{tag_name}' is not the first '{tag_name}' child"
                )
            plural = self.all(tag_name)
            if plural and plural[0] is not first:
                key = self.plural_keys[tag_name]
                problems.append(
                    f"plural alias '{key}' does not start with the first '{tag_name}' child"
                )
        return problems

    def iter_nodes(self) -> Iterator["XMLNode"]:
        """Iterate over this node and its element descendants in document order.

        Follows ``children`` only, without recursion.
        """
        stack: List[XMLNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.element_children()))

    def resolve(self, path: str) -> "XMLNode":
        """Follow a ``/``-separated alias path from this node.

        Each segment names an alias key; a ``[n]`` suffix indexes into a
        plural alias list.

        Examples:
            >>> root = XMLNode()
            >>> game = XMLNode(tag_name="game")
            >>> root.register_child(game)
            3
            >>> root.resolve("game") is game
            True

        Raises:
            KeyError: A segment does not resolve to a node
        """
        node = self
        for segment in filter(None, path.split("/")):
            match = _PATH_SEGMENT.match(segment)
            if match is None:
                raise KeyError(f"Invalid path segment: {segment!r}")
            value = node.aliases.get(match.group("key"))
            index = match.group("index")
            if index is not None:
                if not isinstance(value, list):
                    raise KeyError(f"Alias {match.group('key')!r} is not a list")
                try:
                    value = value[int(index)]
                except IndexError as e:
                    raise KeyError(f"Index out of range in segment {segment!r}") from e
            if not isinstance(value, XMLNode):
                raise KeyError(f"Path segment {segment!r} does not name a node")
            node = value
        return node

    # Attributes

    def get_attribute(
        self, name: str, default: Optional[AttributeValue] = None
    ) -> Optional[AttributeValue]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: AttributeValue) -> None:
        """Set attribute value; ``True`` makes a boolean attribute."""
        if not isinstance(name, str) or not name:
            raise TypeError("Attribute name must be a non-empty string")
        if value is not True and not isinstance(value, str):
            raise TypeError("Attribute value must be a string or True")
        self.attributes[name] = value

    def has_attribute(self, name: str) -> bool:
        """Check if node has specific attribute."""
        return name in self.attributes

    def to_dict(self) -> Dict[str, Any]:
        """Convert the children-ordered tree to a dictionary representation."""
        result: Dict[str, Any] = {"tag": self.tag_name}
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.self_closing:
            result["self_closing"] = True
        if self.children:
            result["children"] = [
                entry.to_dict() if isinstance(entry, XMLNode) else entry
                for entry in self.children
            ]
        return result
