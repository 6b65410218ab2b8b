"""
Build Errors
============

Failures raised while assembling or decorating a graph.

Execution errors abort the whole build; no partial graph is returned.
"""

import reprlib
from typing import Any, Optional


_object_repr = reprlib.Repr()
_object_repr.maxstring = 80
_object_repr.maxother = 80


def describe_object(obj: Any) -> str:
    """Short, bounded description of an input object for error messages."""
    return f"{type(obj).__name__} {_object_repr.repr(obj)}"


class GraphBuildError(Exception):
    """Base class for all build failures."""


class RuleExecutionError(GraphBuildError):
    """A rule's guard or production function raised during dispatch."""

    def __init__(self, rule_id: str, element_type: type, obj: Any, cause: BaseException):
        self.rule_id = rule_id
        self.element_type = element_type
        self.object_description = describe_object(obj)
        super().__init__(
            f"Rule '{rule_id}' for {element_type.__name__} failed on "
            f"{self.object_description}: {type(cause).__name__}: {cause}"
        )


class AnalysisExecutionError(GraphBuildError):
    """An analysis failed while decorating the assembled graph."""

    def __init__(
        self,
        analysis_id: str,
        node_count: int,
        link_count: int,
        cause: BaseException,
    ):
        self.analysis_id = analysis_id
        self.node_count = node_count
        self.link_count = link_count
        super().__init__(
            f"Analysis '{analysis_id}' failed on graph with {node_count} nodes, "
            f"{link_count} links: {type(cause).__name__}: {cause}"
        )


class UndeclaredPropertyError(GraphBuildError):
    """Custom properties are in use without a PropertyDeclaration."""

    def __init__(self, property_ids: list[str], message: Optional[str] = None):
        self.property_ids = list(property_ids)
        super().__init__(
            message or f"Undeclared custom properties: {', '.join(self.property_ids)}"
        )


class IdentityCollisionWarning(UserWarning):
    """Two fragments shared an identity key and the later one was merged in."""
