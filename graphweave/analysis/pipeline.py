"""
Analysis Pipeline
=================

Runs analyses in caller order against a completed graph.

For each analysis the pipeline:
1. Merges its property declarations
2. Appends its styles
3. Invokes its decorator

There is no isolation: every analysis sees what earlier ones added.
"""

from collections.abc import Iterable
from typing import Optional

from graphweave.analysis.interface import Analysis, GraphDecorator
from graphweave.core.config import BuilderConfig
from graphweave.core.errors import AnalysisExecutionError
from graphweave.core.graph import DirectedGraph


class AnalysisPipeline:
    """Ordered sequence of analyses."""

    def __init__(
        self,
        analyses: Iterable[Analysis] = (),
        config: Optional[BuilderConfig] = None,
    ):
        self._analyses: list[Analysis] = []
        self._config = config or BuilderConfig()
        for analysis in analyses:
            self.add(analysis)

    @property
    def analyses(self) -> tuple[Analysis, ...]:
        return tuple(self._analyses)

    def add(self, analysis: Analysis) -> None:
        """
        Append an analysis.

        Raises
        ------
        ValueError
            If an analysis with the same id is already in the pipeline
        """
        if not isinstance(analysis, Analysis):
            raise TypeError(f"Expected an Analysis, got {type(analysis).__name__}")
        if any(a.analysis_id == analysis.analysis_id for a in self._analyses):
            raise ValueError(f"Analysis '{analysis.analysis_id}' already registered")
        self._analyses.append(analysis)

    def run(self, graph: DirectedGraph) -> list[str]:
        """
        Decorate ``graph`` with every analysis, in order.

        Returns
        -------
        list[str]
            Ids of the analyses that ran

        Raises
        ------
        AnalysisExecutionError
            If an analysis fails; later analyses do not run
        """
        decorator = GraphDecorator(
            graph,
            containment_category=self._config.containment_category,
        )
        ran: list[str] = []

        for analysis in self._analyses:
            self._log(f"Running '{analysis.analysis_id}'")
            try:
                for declaration in analysis.property_declarations():
                    graph.declare_property(declaration)
                for style in analysis.styles():
                    graph.add_style(style)
                analysis.decorate(decorator)
            except Exception as e:
                self._log(f"Analysis '{analysis.analysis_id}' raised: {e}")
                raise AnalysisExecutionError(
                    analysis.analysis_id,
                    graph.node_count,
                    graph.link_count,
                    e,
                ) from e
            ran.append(analysis.analysis_id)

        return ran

    def _log(self, message: str) -> None:
        if self._config.verbose:
            print(f"[AnalysisPipeline] {message}")

    def __len__(self) -> int:
        return len(self._analyses)

    def __repr__(self) -> str:
        return f"AnalysisPipeline(analyses={[a.analysis_id for a in self._analyses]})"
