"""
Reference Marking Analysis
==========================

Flags nodes that nothing refers to.

A node is referenced when at least one link targets it with a category
other than the containment category. Containment links only express
grouping, so being contained does not count as being referenced.
"""

from typing import Optional

from graphweave.analysis.interface import Analysis, GraphDecorator
from graphweave.core.schema import (
    Condition,
    ElementKind,
    PropertyDeclaration,
    Setter,
    Style,
)


IS_REFERENCED_PROPERTY = "IsReferenced"
UNREFERENCED_BACKGROUND = "#FFFF6347"


class ReferenceMarking(Analysis):
    """
    Boolean ``IsReferenced`` marker plus a style highlighting unreferenced
    nodes.

    Example
    -------
    >>> analysis = ReferenceMarking()
    >>> builder = GraphBuilder(rules, analyses=[analysis])
    """

    analysis_id = "reference_marking"
    description = "Marks nodes that are the target of a non-containment link"

    def __init__(
        self,
        containment_category: Optional[str] = None,
        background: str = UNREFERENCED_BACKGROUND,
    ):
        """
        Initialize the analysis.

        Parameters
        ----------
        containment_category : str, optional
            Link category to ignore. If None, the pipeline's configured
            containment category is used.
        background : str
            Background colour applied to unreferenced nodes
        """
        self.containment_category = containment_category
        self.background = background

    def property_declarations(self) -> list[PropertyDeclaration]:
        return [
            PropertyDeclaration(
                id=IS_REFERENCED_PROPERTY,
                data_type="System.Boolean",
                label="Is Referenced",
                description="True when a non-containment link targets the node",
            )
        ]

    def styles(self) -> list[Style]:
        return [
            Style(
                target_type=ElementKind.NODE,
                group_label="Unreferenced",
                value_label="True",
                conditions=[Condition.equals(IS_REFERENCED_PROPERTY, False)],
                setters=[Setter(property="Background", value=self.background)],
            )
        ]

    def decorate(self, graph: GraphDecorator) -> None:
        containment = self.containment_category or graph.containment_category
        referenced = {
            link.target for link in graph.links()
            if link.category != containment
        }
        for node in graph.nodes():
            graph.set_node_property(node.id, IS_REFERENCED_PROPERTY, node.id in referenced)
