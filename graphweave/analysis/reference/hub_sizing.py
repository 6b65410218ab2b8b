"""
Hub Sizing Analysis
===================

Adds a numeric size hint to every node, proportional to how many links
touch it, so viewers can render high-degree nodes larger.
"""

from graphweave.analysis.interface import Analysis, GraphDecorator
from graphweave.core.schema import PropertyDeclaration


HUB_SIZE_PROPERTY = "HubSize"


class HubSizing(Analysis):
    """
    Degree-based node sizing.

    ``HubSize = base + factor * degree``, where degree counts incoming and
    outgoing links and a self-loop counts once. Link endpoints that are not
    nodes are not decorated.

    Example
    -------
    >>> analysis = HubSizing(factor=5.0, base=10.0)
    >>> builder = GraphBuilder(rules, analyses=[analysis])
    """

    analysis_id = "hub_sizing"
    description = "Size hint proportional to incident link count"

    def __init__(self, factor: float = 10.0, base: float = 0.0):
        """
        Initialize the analysis.

        Parameters
        ----------
        factor : float
            Size added per incident link. Must be positive.
        base : float
            Size of a node with no links
        """
        if factor <= 0:
            raise ValueError("factor must be positive")
        self.factor = float(factor)
        self.base = float(base)

    def property_declarations(self) -> list[PropertyDeclaration]:
        return [
            PropertyDeclaration(
                id=HUB_SIZE_PROPERTY,
                data_type="System.Double",
                label="Hub Size",
                description="Size hint derived from the number of incident links",
            )
        ]

    def decorate(self, graph: GraphDecorator) -> None:
        view = graph.to_networkx()
        for node in graph.nodes():
            # networkx counts a self-loop at both ends; it is one incident link.
            degree = view.degree(node.id) - view.number_of_edges(node.id, node.id)
            graph.set_node_property(node.id, HUB_SIZE_PROPERTY, self.base + self.factor * degree)
