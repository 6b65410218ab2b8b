"""
Reference Analyses
==================

Example analysis implementations demonstrating the contract:
- HubSizing: degree-proportional size hint
- ReferenceMarking: is-referenced flag with a highlighting style
"""

from graphweave.analysis.reference.hub_sizing import HUB_SIZE_PROPERTY, HubSizing
from graphweave.analysis.reference.reference_marking import (
    IS_REFERENCED_PROPERTY,
    ReferenceMarking,
)

__all__ = [
    "HubSizing",
    "ReferenceMarking",
    "HUB_SIZE_PROPERTY",
    "IS_REFERENCED_PROPERTY",
]
