"""
Deterministic graph fingerprints.
"""

from __future__ import annotations

import hashlib
import json

from graphweave.core.graph import DirectedGraph


def graph_fingerprint(
    graph: DirectedGraph,
    *,
    namespace: str = "graphweave.graph.v1",
    prefix: str = "graph",
) -> str:
    """
    Generate a stable id from the full graph content.

    Element order is part of the content: two graphs with the same
    elements in a different order get different fingerprints.
    """
    blob = json.dumps(graph.to_dict(), separators=(",", ":"), ensure_ascii=True)
    digest = hashlib.sha256(f"{namespace}|{blob}".encode("utf-8")).hexdigest()[:16]
    return f"{prefix}_{digest}"
