"""
graphweave Analyses
===================

Whole-graph decorators that run after assembly.

Public API:
- Analysis: Abstract base class for analyses
- FunctionAnalysis: Analysis wrapping a plain function
- GraphDecorator: Capability handed to analyses
- AnalysisPipeline: Ordered analysis runner
"""

from graphweave.analysis.interface import (
    Analysis,
    FunctionAnalysis,
    GraphDecorator,
)
from graphweave.analysis.pipeline import AnalysisPipeline

__all__ = [
    "Analysis",
    "FunctionAnalysis",
    "GraphDecorator",
    "AnalysisPipeline",
]
