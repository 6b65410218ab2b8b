"""
Dispatch Engine
===============

Matches one object against a rule set and collects the fragments.
"""

from collections.abc import Iterable
from typing import Any

from graphweave.core.errors import RuleExecutionError
from graphweave.core.schema import Fragment
from graphweave.rules.interface import Rule


def dispatch(obj: Any, rules: Iterable[Rule]) -> list[Fragment]:
    """
    Run every applicable rule against ``obj``.

    Rules are evaluated in registration order and every match fires, so a
    node rule and a category rule for the same type both contribute.

    Parameters
    ----------
    obj : Any
        Input object
    rules : Iterable[Rule]
        Registered rules, in order

    Returns
    -------
    list[Fragment]
        Concatenated fragments; empty when no rule matches

    Raises
    ------
    RuleExecutionError
        If a guard or production function raises
    """
    fragments: list[Fragment] = []

    for rule in rules:
        try:
            if not rule.applies_to(obj):
                continue
            fragments.extend(rule.produce(obj))
        except Exception as exc:
            raise RuleExecutionError(rule.rule_id, rule.element_type, obj, exc) from exc

    return fragments
