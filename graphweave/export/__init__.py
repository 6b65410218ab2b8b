"""
Output collaborators: DGML serialization and graph fingerprints.
"""

from graphweave.export.dgml import DGML_NAMESPACE, serialize, to_element, write_dgml
from graphweave.export.fingerprint import graph_fingerprint

__all__ = [
    "DGML_NAMESPACE",
    "to_element",
    "serialize",
    "write_dgml",
    "graph_fingerprint",
]
