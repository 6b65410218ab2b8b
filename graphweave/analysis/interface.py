"""
Analysis Interface
==================

Defines the contract for whole-graph analyses.

Key Principle: Analyses decorate, they never restructure. They receive a
GraphDecorator instead of the graph itself, which can add properties,
declarations and styles but cannot delete or renumber anything.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Callable, Optional

import networkx as nx

from graphweave.core.config import DEFAULT_CONTAINMENT_CATEGORY
from graphweave.core.graph import DirectedGraph
from graphweave.core.schema import (
    Link,
    LinkKey,
    Node,
    PropertyDeclaration,
    PropertyValue,
    Style,
)


class GraphDecorator:
    """
    Narrow mutation capability over a DirectedGraph.

    Attributes
    ----------
    containment_category : str
        Link category that denotes parent/child grouping
    """

    def __init__(
        self,
        graph: DirectedGraph,
        containment_category: str = DEFAULT_CONTAINMENT_CATEGORY,
    ):
        self._graph = graph
        self.containment_category = containment_category

    @property
    def node_count(self) -> int:
        return self._graph.node_count

    @property
    def link_count(self) -> int:
        return self._graph.link_count

    def nodes(self) -> list[Node]:
        """Snapshot copies of the nodes, in graph order."""
        return [node.model_copy(deep=True) for node in self._graph.nodes]

    def links(self) -> list[Link]:
        """Snapshot copies of the links, in graph order."""
        return [link.model_copy(deep=True) for link in self._graph.links]

    def set_node_property(self, node_id: str, name: str, value: PropertyValue) -> None:
        """Add or overwrite a custom property on a node."""
        self._graph.set_node_property(node_id, name, value)

    def set_link_property(self, link_key: LinkKey, name: str, value: PropertyValue) -> None:
        """Add or overwrite a custom property on a link."""
        self._graph.set_link_property(link_key, name, value)

    def declare_property(self, declaration: PropertyDeclaration) -> None:
        """Register (or refine) a property declaration."""
        self._graph.declare_property(declaration)

    def add_style(self, style: Style) -> None:
        """Append a style."""
        self._graph.add_style(style)

    def to_networkx(self) -> nx.MultiDiGraph:
        """A fresh networkx view; changes to it do not reach the graph."""
        return self._graph.to_networkx()


class Analysis(ABC):
    """
    Abstract base class for all analyses.

    Subclass this to create custom analyses. Override ``decorate()`` and,
    when the analysis adds properties or styles, ``property_declarations()``
    and ``styles()``.

    Example
    -------
    >>> class FanOut(Analysis):
    ...     analysis_id = "fan_out"
    ...
    ...     def property_declarations(self):
    ...         return [PropertyDeclaration(id="FanOut", data_type="System.Int32")]
    ...
    ...     def decorate(self, graph: GraphDecorator) -> None:
    ...         view = graph.to_networkx()
    ...         for node in graph.nodes():
    ...             graph.set_node_property(node.id, "FanOut", view.out_degree(node.id))
    """

    # Must be set by subclasses
    analysis_id: str = "base_analysis"

    description: str = ""

    def property_declarations(self) -> list[PropertyDeclaration]:
        """Declarations registered before ``decorate`` runs."""
        return []

    def styles(self) -> list[Style]:
        """Styles appended before ``decorate`` runs."""
        return []

    @abstractmethod
    def decorate(self, graph: GraphDecorator) -> None:
        """
        Mutate the graph in place through the decorator.

        Parameters
        ----------
        graph : GraphDecorator
            Capability over the fully assembled graph, including the
            effects of every earlier analysis
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.analysis_id})"


class FunctionAnalysis(Analysis):
    """Analysis built from a plain decorator function."""

    def __init__(
        self,
        analysis_id: str,
        decorator: Callable[[GraphDecorator], None],
        properties: Iterable[PropertyDeclaration] = (),
        styles: Iterable[Style] = (),
        description: Optional[str] = None,
    ):
        self.analysis_id = analysis_id
        self.description = description or ""
        self._decorator = decorator
        self._properties = list(properties)
        self._styles = list(styles)

    def property_declarations(self) -> list[PropertyDeclaration]:
        return list(self._properties)

    def styles(self) -> list[Style]:
        return list(self._styles)

    def decorate(self, graph: GraphDecorator) -> None:
        self._decorator(graph)
