"""
graphweave Rules
================

Typed transformation rules and the dispatch engine that fires them.

Public API:
- Rule: Abstract base class for rules
- NodeRule, LinkRule, CategoryRule, StyleRule: Function-backed rules
- RuleSet: Ordered rule registry with decorator helpers
- dispatch: Run every applicable rule against one object
"""

from graphweave.rules.interface import (
    CategoryRule,
    FragmentKind,
    LinkRule,
    NodeRule,
    Rule,
    RuleSet,
    StyleRule,
)
from graphweave.rules.dispatch import dispatch

__all__ = [
    "Rule",
    "NodeRule",
    "LinkRule",
    "CategoryRule",
    "StyleRule",
    "FragmentKind",
    "RuleSet",
    "dispatch",
]
