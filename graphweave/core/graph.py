"""
Directed Graph Model
====================

The single mutable aggregate a build produces.

Key Design Principles:
1. Identity-keyed upserts - a colliding fragment refines the stored entry
2. Only fields explicitly set on the new fragment overwrite stored values
3. Insertion order is first-insertion order and survives overwrites
4. Styles are additive and never deduplicated
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import networkx as nx
from pydantic import BaseModel, TypeAdapter

from graphweave.core.schema import (
    Category,
    Fragment,
    Link,
    LinkKey,
    Node,
    PropertyDeclaration,
    PropertyName,
    PropertyValue,
    Style,
)


WELL_KNOWN_PROPERTIES: frozenset[str] = frozenset({
    "Background",
    "Description",
    "FontFamily",
    "FontSize",
    "FontStyle",
    "FontWeight",
    "Foreground",
    "Group",
    "Icon",
    "IsContainment",
    "IsTag",
    "NodeRadius",
    "Reference",
    "Shape",
    "Stroke",
    "StrokeDashArray",
    "StrokeThickness",
    "Visibility",
})
"""
Attributes graph viewers understand without a PropertyDeclaration.

These are exempt from the undeclared-property check.
"""

_PROPERTY_NAME = TypeAdapter(PropertyName)
_PROPERTY_VALUE = TypeAdapter(PropertyValue)


@dataclass
class MergeRecord:
    """Outcome of merging one fragment into the graph."""

    kind: str
    key: Any
    status: str
    fields: list[str] = field(default_factory=list)

    @property
    def is_collision(self) -> bool:
        return self.status == "merged"

    def to_dict(self) -> dict[str, Any]:
        """Convert the record to a JSON-serializable dictionary."""
        return {
            "kind": self.kind,
            "key": list(self.key) if isinstance(self.key, tuple) else self.key,
            "status": self.status,
            "fields": list(self.fields),
        }


def _upsert(
    store: dict[Any, BaseModel],
    key: Any,
    fragment: BaseModel,
    kind: str,
) -> MergeRecord:
    """
    Insert or refine an identity-keyed entry.

    Fields present on ``fragment`` (``model_fields_set``) win; the
    ``properties`` mapping is merged key by key.
    """
    applied = sorted(fragment.model_fields_set)
    existing = store.get(key)

    if existing is None:
        store[key] = fragment.model_copy(deep=True)
        return MergeRecord(kind=kind, key=key, status="inserted", fields=applied)

    updates: dict[str, Any] = {}
    for name in applied:
        value = deepcopy(getattr(fragment, name))
        if name == "properties":
            value = {**existing.properties, **value}
        updates[name] = value

    # Reassigning an existing key keeps its position in the dict.
    store[key] = existing.model_copy(update=updates)
    return MergeRecord(kind=kind, key=key, status="merged", fields=applied)


class DirectedGraph:
    """
    In-memory directed-graph document.

    Holds nodes, links, categories and property declarations in
    first-insertion order, plus an append-only list of styles.

    Example
    -------
    >>> graph = DirectedGraph()
    >>> graph.merge_node(Node(id="a", label="Generic"))
    >>> graph.merge_node(Node(id="a", label="Specific"))
    >>> graph.get_node("a").label
    'Specific'
    """

    def __init__(self):
        self._nodes: dict[str, Node] = {}
        self._links: dict[LinkKey, Link] = {}
        self._categories: dict[str, Category] = {}
        self._properties: dict[str, PropertyDeclaration] = {}
        self._styles: list[Style] = []

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def links(self) -> tuple[Link, ...]:
        return tuple(self._links.values())

    @property
    def categories(self) -> tuple[Category, ...]:
        return tuple(self._categories.values())

    @property
    def property_declarations(self) -> tuple[PropertyDeclaration, ...]:
        return tuple(self._properties.values())

    @property
    def styles(self) -> tuple[Style, ...]:
        return tuple(self._styles)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def link_count(self) -> int:
        return len(self._links)

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by id."""
        return self._nodes.get(node_id)

    def get_link(
        self, source: str, target: str, category: Optional[str] = None
    ) -> Optional[Link]:
        """Get a link by its (source, target, category) identity."""
        return self._links.get((source, target, category))

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get a category by id."""
        return self._categories.get(category_id)

    def get_property_declaration(self, property_id: str) -> Optional[PropertyDeclaration]:
        """Get a property declaration by id."""
        return self._properties.get(property_id)

    # ------------------------------------------------------------------ #
    # Merging
    # ------------------------------------------------------------------ #

    def merge_node(self, node: Node) -> MergeRecord:
        """Upsert a node by id."""
        return _upsert(self._nodes, node.identity_key, node, "node")

    def merge_link(self, link: Link) -> MergeRecord:
        """Upsert a link by (source, target, category)."""
        return _upsert(self._links, link.identity_key, link, "link")

    def merge_category(self, category: Category) -> MergeRecord:
        """Upsert a category by id."""
        return _upsert(self._categories, category.identity_key, category, "category")

    def declare_property(self, declaration: PropertyDeclaration) -> MergeRecord:
        """Upsert a property declaration by id."""
        return _upsert(self._properties, declaration.identity_key, declaration, "property")

    def add_style(self, style: Style) -> MergeRecord:
        """Append a style. Styles are never deduplicated."""
        self._styles.append(style.model_copy(deep=True))
        return MergeRecord(
            kind="style",
            key=len(self._styles) - 1,
            status="inserted",
            fields=sorted(style.model_fields_set),
        )

    def merge_fragment(self, fragment: Union[Fragment, PropertyDeclaration]) -> MergeRecord:
        """Route any fragment to its merge operation."""
        if isinstance(fragment, Node):
            return self.merge_node(fragment)
        if isinstance(fragment, Link):
            return self.merge_link(fragment)
        if isinstance(fragment, Category):
            return self.merge_category(fragment)
        if isinstance(fragment, Style):
            return self.add_style(fragment)
        if isinstance(fragment, PropertyDeclaration):
            return self.declare_property(fragment)
        raise TypeError(f"Not a graph fragment: {type(fragment).__name__}")

    # ------------------------------------------------------------------ #
    # Property mutation
    # ------------------------------------------------------------------ #

    def set_node_property(self, node_id: str, name: str, value: PropertyValue) -> None:
        """
        Add or overwrite a custom property on an existing node.

        Raises
        ------
        KeyError
            If no node has this id
        pydantic.ValidationError
            If the name is not an XML name or the value kind is unsupported
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise KeyError(f"No node with id '{node_id}'")
        name = _PROPERTY_NAME.validate_python(name)
        value = _PROPERTY_VALUE.validate_python(value)
        self._nodes[node_id] = node.model_copy(
            update={"properties": {**node.properties, name: value}}
        )

    def set_link_property(self, link_key: LinkKey, name: str, value: PropertyValue) -> None:
        """
        Add or overwrite a custom property on an existing link.

        Raises
        ------
        KeyError
            If no link has this identity key
        pydantic.ValidationError
            If the name is not an XML name or the value kind is unsupported
        """
        link = self._links.get(tuple(link_key))
        if link is None:
            raise KeyError(f"No link with key {tuple(link_key)!r}")
        name = _PROPERTY_NAME.validate_python(name)
        value = _PROPERTY_VALUE.validate_python(value)
        self._links[link.identity_key] = link.model_copy(
            update={"properties": {**link.properties, name: value}}
        )

    # ------------------------------------------------------------------ #
    # Declaration checks
    # ------------------------------------------------------------------ #

    def used_properties(self) -> list[str]:
        """Custom property names in use, in first-use order."""
        seen: dict[str, None] = {}
        for element in (*self._nodes.values(), *self._links.values(), *self._categories.values()):
            for name in element.properties:
                seen.setdefault(name, None)
        return list(seen)

    def undeclared_properties(self) -> list[str]:
        """Custom property names in use that have no declaration."""
        return [
            name for name in self.used_properties()
            if name not in self._properties and name not in WELL_KNOWN_PROPERTIES
        ]

    def dangling_links(self) -> list[Link]:
        """Links whose source or target is not a node of this graph."""
        return [
            link for link in self._links.values()
            if link.source not in self._nodes or link.target not in self._nodes
        ]

    def validate(self) -> list[str]:
        """Return human-readable problems. Empty when the graph is consistent."""
        problems = [
            f"Property '{name}' is used but not declared"
            for name in self.undeclared_properties()
        ]
        for link in self.dangling_links():
            missing = [n for n in (link.source, link.target) if n not in self._nodes]
            problems.append(
                f"Link {link.source} -> {link.target} references undeclared "
                f"node(s): {', '.join(dict.fromkeys(missing))}"
            )
        return problems

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Build a networkx view of the graph.

        Nodes carry ``label``, ``category`` and their properties as
        attributes; links are keyed by category. Link endpoints that are not
        nodes appear as attribute-less nodes after the declared ones.
        """
        G = nx.MultiDiGraph()
        G.add_nodes_from(
            (node.id, {"label": node.label, "category": node.category, **node.properties})
            for node in self._nodes.values()
        )
        G.add_edges_from(
            (
                link.source,
                link.target,
                link.category,
                {"label": link.label, "category": link.category, **link.properties},
            )
            for link in self._links.values()
        )
        return G

    def to_dict(self) -> dict[str, Any]:
        """Ordered, JSON-safe dump of the whole graph."""
        return {
            "nodes": [n.model_dump(mode="json") for n in self._nodes.values()],
            "links": [link.model_dump(mode="json") for link in self._links.values()],
            "categories": [c.model_dump(mode="json") for c in self._categories.values()],
            "properties": [p.model_dump(mode="json") for p in self._properties.values()],
            "styles": [s.model_dump(mode="json") for s in self._styles],
        }

    def summary(self) -> dict[str, int]:
        """Element counts."""
        return {
            "nodes": len(self._nodes),
            "links": len(self._links),
            "categories": len(self._categories),
            "properties": len(self._properties),
            "styles": len(self._styles),
        }

    def __repr__(self) -> str:
        return (
            f"DirectedGraph(nodes={len(self._nodes)}, links={len(self._links)}, "
            f"categories={len(self._categories)}, styles={len(self._styles)})"
        )
