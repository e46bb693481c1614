"""Tree layer for lossless XML parsing.

Key Components:
    XMLNode: Editable node with singleton, plural and ordered-children views
    XMLTreeBuilder: Builds a node tree from raw tag strings
    XMLSerializer: Reconciles the three views and writes the tree as text
    ReconciliationPlan: Keep-or-drop decision computed before writing
"""

from .builder import XMLTreeBuilder, build_tree
from .node import AttributeValue, XMLNode
from .serializer import (
    ReconciliationPlan,
    XMLSerializer,
    escape_attribute,
    serialize_tree,
)

__all__ = [
    "AttributeValue",
    "ReconciliationPlan",
    "XMLNode",
    "XMLSerializer",
    "XMLTreeBuilder",
    "build_tree",
    "escape_attribute",
    "serialize_tree",
]
