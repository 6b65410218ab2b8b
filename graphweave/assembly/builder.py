"""
Graph Builder
=============

Drives the dispatch engine over input collections and assembles one graph.

The builder:
1. Flattens input collections in argument order
2. Dispatches every object against the rule set
3. Merges fragments into a fresh DirectedGraph
4. Runs the analysis pipeline on the completed graph
5. Returns the graph and forgets it
"""

import os
import sys
import warnings
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Optional, Union

from graphweave.analysis.interface import Analysis
from graphweave.analysis.pipeline import AnalysisPipeline
from graphweave.core.config import BuilderConfig
from graphweave.core.errors import (
    GraphBuildError,
    IdentityCollisionWarning,
    UndeclaredPropertyError,
)
from graphweave.core.graph import DirectedGraph, MergeRecord
from graphweave.rules.dispatch import dispatch
from graphweave.rules.interface import Rule, RuleSet


_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__))) + os.sep


def _caller_stacklevel() -> int:
    """Stack level of the first frame outside graphweave, for warnings.warn."""
    frame = sys._getframe(1)
    level = 1
    while frame is not None and os.path.abspath(frame.f_code.co_filename).startswith(_PACKAGE_DIR):
        frame = frame.f_back
        level += 1
    return level


@dataclass
class BuildReport:
    """What happened during one build."""

    objects_processed: int = 0
    objects_without_fragments: int = 0
    fragments_produced: int = 0
    records: list[MergeRecord] = field(default_factory=list)
    analyses_run: list[str] = field(default_factory=list)

    @property
    def collisions(self) -> list[MergeRecord]:
        """Merge records where a fragment refined an existing entry."""
        return [r for r in self.records if r.is_collision]

    def to_dict(self) -> dict[str, Any]:
        """Convert the report to a JSON-serializable dictionary."""
        return {
            "objects_processed": self.objects_processed,
            "objects_without_fragments": self.objects_without_fragments,
            "fragments_produced": self.fragments_produced,
            "collisions": len(self.collisions),
            "records": [r.to_dict() for r in self.records],
            "analyses_run": list(self.analyses_run),
        }


class GraphBuilder:
    """
    Builds DirectedGraph documents from domain objects.

    Example
    -------
    >>> builder = GraphBuilder(rules, analyses=[HubSizing(), ReferenceMarking()])
    >>> graph = builder.build(components, calls)
    >>> graph.node_count
    3
    """

    def __init__(
        self,
        rules: Union[RuleSet, Iterable[Rule]],
        analyses: Iterable[Analysis] = (),
        config: Optional[BuilderConfig] = None,
    ):
        """
        Initialize the builder.

        Parameters
        ----------
        rules : RuleSet or iterable of Rule
            Transformation rules, in dispatch order
        analyses : iterable of Analysis
            Whole-graph decorators, in execution order
        config : BuilderConfig, optional
            Builder settings. Defaults to BuilderConfig().
        """
        self._rules = rules if isinstance(rules, RuleSet) else RuleSet(rules)
        self._config = config or BuilderConfig()
        self._pipeline = AnalysisPipeline(analyses, config=self._config)

    @property
    def config(self) -> BuilderConfig:
        return self._config

    @property
    def rule_count(self) -> int:
        """Number of registered rules."""
        return len(self._rules)

    @property
    def analysis_count(self) -> int:
        """Number of registered analyses."""
        return len(self._pipeline)

    def assemble(self, *collections: Iterable[Any]) -> tuple[DirectedGraph, BuildReport]:
        """
        Dispatch every object and merge the fragments. No analyses run.

        Parameters
        ----------
        *collections : Iterable
            One or more input sequences, flattened in argument order

        Returns
        -------
        tuple[DirectedGraph, BuildReport]
            The assembled graph and what happened while building it

        Raises
        ------
        ValueError
            If no collection is given
        RuleExecutionError
            If a rule's guard or production function raises
        """
        if not collections:
            raise ValueError("At least one input collection is required")

        graph = DirectedGraph()
        report = BuildReport()

        try:
            for obj in chain.from_iterable(collections):
                fragments = dispatch(obj, self._rules)
                report.objects_processed += 1

                if not fragments:
                    report.objects_without_fragments += 1
                    continue

                report.fragments_produced += len(fragments)
                for fragment in fragments:
                    record = graph.merge_fragment(fragment)
                    report.records.append(record)
                    if record.is_collision and self._config.warn_on_collision:
                        warnings.warn(
                            f"{record.kind} {record.key!r} merged fields {record.fields}",
                            IdentityCollisionWarning,
                            stacklevel=_caller_stacklevel(),
                        )
        except GraphBuildError as e:
            self._log(f"Build aborted after {report.objects_processed} objects: {e}")
            raise

        return graph, report

    def build(self, *collections: Iterable[Any]) -> DirectedGraph:
        """Assemble a graph from the collections, then run the analyses."""
        graph, _ = self.build_with_report(*collections)
        return graph

    def build_with_report(
        self, *collections: Iterable[Any]
    ) -> tuple[DirectedGraph, BuildReport]:
        """
        Build a graph and return it with its BuildReport.

        Raises
        ------
        RuleExecutionError
            If a rule fails during assembly
        AnalysisExecutionError
            If an analysis fails during decoration
        UndeclaredPropertyError
            If ``config.require_declarations`` is set and a custom property
            has no declaration
        """
        graph, report = self.assemble(*collections)
        report.analyses_run = self._pipeline.run(graph)

        if self._config.require_declarations:
            missing = graph.undeclared_properties()
            if missing:
                self._log(f"Undeclared properties: {missing}")
                raise UndeclaredPropertyError(missing)

        self._log(
            f"Built graph: {graph.node_count} nodes, {graph.link_count} links, "
            f"{len(graph.categories)} categories, {len(graph.styles)} styles "
            f"from {report.objects_processed} objects "
            f"({len(report.collisions)} merged fragments)"
        )
        return graph, report

    def _log(self, message: str) -> None:
        if self._config.verbose:
            print(f"[GraphBuilder] {message}")

    def __repr__(self) -> str:
        return f"GraphBuilder(rules={self.rule_count}, analyses={self.analysis_count})"


def build(
    rules: Union[RuleSet, Iterable[Rule]],
    *collections: Iterable[Any],
    analyses: Iterable[Analysis] = (),
    config: Optional[BuilderConfig] = None,
) -> DirectedGraph:
    """
    Build a graph in one call.

    ``build(rules, [a], [b])`` and ``build(rules, [a, b])`` produce the same
    graph.
    """
    return GraphBuilder(rules, analyses=analyses, config=config).build(*collections)
