"""
Graph assembly: drives rules over input collections and runs analyses.
"""

from graphweave.assembly.builder import BuildReport, GraphBuilder, build

__all__ = [
    "GraphBuilder",
    "BuildReport",
    "build",
]
