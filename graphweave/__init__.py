"""
graphweave
==========

Turn collections of domain objects into a directed-graph document.

Rules match input objects by type and produce nodes, links, categories and
styles; the builder merges them into one DirectedGraph; analyses then
decorate the finished graph; the DGML writer serializes it.
"""

from graphweave.core import (
    AnalysisExecutionError,
    BuilderConfig,
    Category,
    Condition,
    DirectedGraph,
    ElementKind,
    GraphBuildError,
    IdentityCollisionWarning,
    Link,
    Node,
    PropertyDeclaration,
    RuleExecutionError,
    Setter,
    Style,
    UndeclaredPropertyError,
)
from graphweave.rules import (
    CategoryRule,
    LinkRule,
    NodeRule,
    Rule,
    RuleSet,
    StyleRule,
    dispatch,
)
from graphweave.analysis import Analysis, AnalysisPipeline, FunctionAnalysis, GraphDecorator
from graphweave.analysis.reference import HubSizing, ReferenceMarking
from graphweave.assembly import BuildReport, GraphBuilder, build
from graphweave.export import graph_fingerprint, serialize, write_dgml

__version__ = "0.1.0"

__all__ = [
    "DirectedGraph",
    "Node",
    "Link",
    "Category",
    "Style",
    "Condition",
    "Setter",
    "ElementKind",
    "PropertyDeclaration",
    "BuilderConfig",
    "GraphBuildError",
    "RuleExecutionError",
    "AnalysisExecutionError",
    "UndeclaredPropertyError",
    "IdentityCollisionWarning",
    "Rule",
    "NodeRule",
    "LinkRule",
    "CategoryRule",
    "StyleRule",
    "RuleSet",
    "dispatch",
    "Analysis",
    "FunctionAnalysis",
    "GraphDecorator",
    "AnalysisPipeline",
    "HubSizing",
    "ReferenceMarking",
    "GraphBuilder",
    "BuildReport",
    "build",
    "serialize",
    "write_dgml",
    "graph_fingerprint",
]
