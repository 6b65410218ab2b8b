"""
DGML Writer
===========

Serializes a DirectedGraph into Directed Graph Markup Language.

Document shape::

    <DirectedGraph xmlns="http://schemas.microsoft.com/vs/2009/dgml">
      <Nodes/> <Links/> <Categories/> <Properties/> <Styles/>
    </DirectedGraph>

Link endpoints that are not declared nodes are reconciled here: they are
emitted as id-only Node elements after the declared nodes.
"""

from pathlib import Path
import re
from typing import Any, Optional
import xml.etree.ElementTree as ET

from graphweave.core.graph import DirectedGraph
from graphweave.core.schema import (
    PROPERTY_NAME_PATTERN,
    PropertyValue,
    Style,
    format_value,
)


DGML_NAMESPACE = "http://schemas.microsoft.com/vs/2009/dgml"

_PROPERTY_NAME = re.compile(PROPERTY_NAME_PATTERN)


def _attributes(
    fixed: dict[str, Optional[Any]],
    properties: Optional[dict[str, PropertyValue]] = None,
) -> dict[str, str]:
    """
    Fixed attributes first, then custom properties.

    A fixed attribute that is written wins over a property of the same
    name; an unset one leaves the name to the property.

    Raises
    ------
    ValueError
        If a property name is not a valid attribute name
    """
    attrs = {
        name: format_value(value)
        for name, value in fixed.items()
        if value is not None
    }
    for name, value in (properties or {}).items():
        if not _PROPERTY_NAME.fullmatch(name):
            raise ValueError(f"Property name {name!r} is not a valid attribute name")
        if name not in attrs:
            attrs[name] = format_value(value)
    return attrs


def _missing_endpoints(graph: DirectedGraph) -> list[str]:
    """Link endpoints without a node, in first-reference order."""
    known = {node.id for node in graph.nodes}
    missing: dict[str, None] = {}
    for link in graph.links:
        for endpoint in (link.source, link.target):
            if endpoint not in known:
                missing.setdefault(endpoint, None)
    return list(missing)


def _style_element(parent: ET.Element, style: Style) -> None:
    element = ET.SubElement(parent, "Style", _attributes({
        "TargetType": style.target_type.value,
        "GroupLabel": style.group_label,
        "ValueLabel": style.value_label,
    }))
    for condition in style.conditions:
        ET.SubElement(element, "Condition", {"Expression": condition.expression})
    for setter in style.setters:
        ET.SubElement(element, "Setter", _attributes({
            "Property": setter.property,
            "Value": setter.value,
            "Expression": setter.expression,
        }))


def to_element(graph: DirectedGraph) -> ET.Element:
    """
    Build the DGML element tree for a graph.

    Parameters
    ----------
    graph : DirectedGraph
        Completed graph

    Returns
    -------
    ET.Element
        Root ``DirectedGraph`` element
    """
    root = ET.Element("DirectedGraph", {"xmlns": DGML_NAMESPACE})

    nodes = ET.SubElement(root, "Nodes")
    for node in graph.nodes:
        ET.SubElement(nodes, "Node", _attributes(
            {"Id": node.id, "Label": node.label, "Category": node.category},
            node.properties,
        ))
    for node_id in _missing_endpoints(graph):
        ET.SubElement(nodes, "Node", {"Id": node_id})

    links = ET.SubElement(root, "Links")
    for link in graph.links:
        ET.SubElement(links, "Link", _attributes(
            {
                "Source": link.source,
                "Target": link.target,
                "Category": link.category,
                "Label": link.label,
            },
            link.properties,
        ))

    categories = ET.SubElement(root, "Categories")
    for category in graph.categories:
        ET.SubElement(categories, "Category", _attributes(
            {"Id": category.id, "Label": category.label, "BasedOn": category.based_on},
            category.properties,
        ))

    properties = ET.SubElement(root, "Properties")
    for declaration in graph.property_declarations:
        ET.SubElement(properties, "Property", _attributes({
            "Id": declaration.id,
            "DataType": declaration.data_type,
            "Label": declaration.label,
            "Description": declaration.description,
        }))

    styles = ET.SubElement(root, "Styles")
    for style in graph.styles:
        _style_element(styles, style)

    return root


def serialize(graph: DirectedGraph, indent: bool = True) -> bytes:
    """Serialize a graph to UTF-8 DGML bytes with an XML declaration."""
    root = to_element(graph)
    if indent:
        ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def write_dgml(graph: DirectedGraph, path: Path | str, indent: bool = True) -> Path:
    """
    Write a graph to a ``.dgml`` file.

    Returns
    -------
    Path
        The path written
    """
    target = Path(path)
    target.write_bytes(serialize(graph, indent=indent))
    print(f"[DGML] Wrote {graph.node_count} nodes, {graph.link_count} links to {target}")
    return target
