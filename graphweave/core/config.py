"""
Builder Configuration
=====================

JSON-loadable settings for the graph builder and its analysis pipeline.
"""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict


DEFAULT_CONTAINMENT_CATEGORY = "Contains"


class BuilderConfig(BaseModel):
    """
    Settings shared by the assembler and the analysis pipeline.

    Example
    -------
    >>> config = BuilderConfig(warn_on_collision=True, verbose=False)
    >>> config.containment_category
    'Contains'
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    containment_category: str = DEFAULT_CONTAINMENT_CATEGORY
    """Link category that denotes parent/child grouping."""

    warn_on_collision: bool = False
    """Emit IdentityCollisionWarning for every merged fragment."""

    require_declarations: bool = False
    """Fail the build when a custom property has no declaration."""

    verbose: bool = True
    """Print lifecycle messages."""

    @classmethod
    def from_json_file(cls, path: Path | str) -> "BuilderConfig":
        """Load configuration from a JSON file."""
        with open(path) as f:
            config = json.load(f)
        return cls.model_validate(config)
