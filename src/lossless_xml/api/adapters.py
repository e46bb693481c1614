"""Bridge between lossless trees and ``lxml.etree``.

The lossless tree is the one to edit and write back. lxml is useful next to
it for read-only XPath queries; the conversion here is one-way lossy
(boolean attributes, processing instructions and declarations do not survive
it) and :func:`from_lxml` goes back through text.
"""

import time
from typing import List, Optional, Set, Tuple

import lxml.etree as ET

from lossless_xml.shared import ParserConfig, get_logger
from lossless_xml.tree import ReconciliationPlan, XMLNode, XMLSerializer

from .parser import LosslessXMLParser

CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"


def _cdata_text(raw: str) -> Optional[str]:
    if raw.startswith(CDATA_OPEN) and raw.endswith(CDATA_CLOSE):
        return raw[len(CDATA_OPEN):-len(CDATA_CLOSE)]
    return None


def _document_element(
    root: XMLNode, serializer: XMLSerializer, plan: ReconciliationPlan
) -> XMLNode:
    if not root.is_root:
        return root
    for entry, _ in serializer.ordered_entries(root, plan):
        if (
            isinstance(entry, XMLNode)
            and not entry.start_chars
            and plan.keeps(entry)
            and (entry.tag_name is not None or id(entry) in plan.names)
        ):
            return entry
    raise ValueError("Tree has no document element")


def _append_text(element, previous, text: str) -> None:
    # lxml keeps text after a child element in that child's tail.
    if previous is None:
        element.text = (element.text or "") + text
    else:
        previous.tail = (previous.tail or "") + text


def to_lxml(
    root: XMLNode,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
):
    """Convert the document element of ``root`` to an ``lxml.etree`` element.

    The tree is reconciled first, so the lxml tree holds only the elements
    :func:`~lossless_xml.api.parser.serialize` would write, including nodes
    reachable only through aliases.
    Boolean attributes become ``name="name"``. CDATA blocks become text;
    other raw blocks and prefixed nodes (``<?...?>``, ``<!...>``) are skipped.

    Examples:
        >>> from lossless_xml.api.parser import parse
        >>> element = to_lxml(parse('<map><t name="a"/><t name="b"/></map>'))
        >>> element.xpath("//t/@name")
        ['a', 'b']

    Raises:
        ValueError: ``root`` has no document element
    """
    config = config or ParserConfig()
    logger = get_logger(__name__, correlation_id, "lxml_adapter")
    start_time = time.time()
    serializer = XMLSerializer(config.serializer, config.tree, correlation_id)
    plan = serializer.reconcile(root)
    document = _document_element(root, serializer, plan)

    lxml_root = ET.Element(
        document.tag_name if document.tag_name is not None else plan.names[id(document)]
    )
    converted: Set[int] = {id(document)}
    stack: List[Tuple[XMLNode, object]] = [(document, lxml_root)]
    while stack:
        node, element = stack.pop()
        for name, value in node.attributes.items():
            if value is True:
                element.set(name, name)
            elif isinstance(value, str):
                element.set(name, value)

        previous = None
        for entry, alias_name in serializer.ordered_entries(node, plan):
            if isinstance(entry, XMLNode):
                tag_name = entry.tag_name if entry.tag_name is not None else alias_name
                if (
                    entry.start_chars
                    or tag_name is None
                    or id(entry) in converted
                    or not plan.keeps(entry)
                ):
                    continue
                converted.add(id(entry))
                child = ET.SubElement(element, tag_name)
                stack.append((entry, child))
                previous = child
            else:
                text = _cdata_text(entry)
                if text is not None:
                    _append_text(element, previous, text)

    logger.debug(
        "Converted tree to lxml",
        extra={
            "element_count": len(converted),
            "nodes_dropped": len(plan.dropped),
            "processing_time_ms": (time.time() - start_time) * 1000,
        }
    )
    return lxml_root


def from_lxml(
    element,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> XMLNode:
    """Serialize an lxml element with lxml and parse the text losslessly.

    Raises:
        TypeError: ``element`` is not an lxml element
    """
    if not isinstance(element, ET._Element):
        raise TypeError("Expected an lxml element")
    text = ET.tostring(element, encoding="unicode")
    return LosslessXMLParser(config, correlation_id).parse(text)
