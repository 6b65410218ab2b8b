"""
graphweave Core: Directed-Graph Document Model
==============================================

This package provides the typed fragments and the single mutable graph
aggregate that every build produces.

Public API:
- DirectedGraph: The graph document
- Node, Link, Category, Style, Condition, Setter: Graph fragments
- PropertyDeclaration: Custom property registration
- BuilderConfig: Builder settings
- GraphBuildError and subclasses: Build failures
"""

from graphweave.core.schema import (
    Category,
    Condition,
    ElementKind,
    Fragment,
    Link,
    Node,
    PropertyDeclaration,
    PropertyName,
    PropertyValue,
    Setter,
    Style,
    data_type_for,
    format_value,
)
from graphweave.core.graph import DirectedGraph, MergeRecord, WELL_KNOWN_PROPERTIES
from graphweave.core.config import BuilderConfig
from graphweave.core.errors import (
    AnalysisExecutionError,
    GraphBuildError,
    IdentityCollisionWarning,
    RuleExecutionError,
    UndeclaredPropertyError,
)

__all__ = [
    "DirectedGraph",
    "MergeRecord",
    "WELL_KNOWN_PROPERTIES",
    "Node",
    "Link",
    "Category",
    "Style",
    "Condition",
    "Setter",
    "ElementKind",
    "Fragment",
    "PropertyDeclaration",
    "PropertyName",
    "PropertyValue",
    "data_type_for",
    "format_value",
    "BuilderConfig",
    "GraphBuildError",
    "RuleExecutionError",
    "AnalysisExecutionError",
    "UndeclaredPropertyError",
    "IdentityCollisionWarning",
]
