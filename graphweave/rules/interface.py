"""
Rule Interface
==============

Defines the contract for typed transformation rules.

Key Principle: A rule declares the concrete type it accepts. It never
touches the graph; it only turns one input object into fragments that the
builder merges.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel

from graphweave.core.schema import Category, Fragment, Link, Node, Style


Guard = Callable[[Any], bool]


class FragmentKind(str, Enum):
    """The fragment kind a rule produces."""

    NODE = "node"
    LINK = "link"
    CATEGORY = "category"
    STYLE = "style"


def _always(obj: Any) -> bool:
    return True


class Rule(ABC):
    """
    Abstract base class for all rules.

    A rule applies to an object when the object is an instance of
    ``element_type`` (subclasses included) and the guard accepts it.

    Example
    -------
    >>> class ServiceRule(Rule):
    ...     kind = FragmentKind.NODE
    ...     fragment_type = Node
    ...
    ...     def build(self, obj):
    ...         return Node(id=obj.name, label=obj.name)
    >>> rule = ServiceRule(Service)
    """

    # Must be set by subclasses
    kind: FragmentKind
    fragment_type: type
    allows_many: bool = False

    def __init__(
        self,
        element_type: type,
        guard: Optional[Guard] = None,
        rule_id: Optional[str] = None,
    ):
        """
        Initialize the rule.

        Parameters
        ----------
        element_type : type
            Concrete type this rule matches
        guard : Callable, optional
            Extra acceptance predicate; defaults to always true
        rule_id : str, optional
            Identifier used in error messages
        """
        if not isinstance(element_type, type):
            raise TypeError(f"element_type must be a class, got {element_type!r}")

        self.element_type = element_type
        self.guard = guard or _always
        self.rule_id = rule_id or self._default_rule_id()

    @abstractmethod
    def build(self, obj: Any) -> Any:
        """
        Produce fragment(s) for one object.

        This method MUST be:
        1. Deterministic - same input produces same output
        2. Side-effect free - don't modify external state
        """
        ...

    def applies_to(self, obj: Any) -> bool:
        """Check the declared type first, then the guard."""
        return isinstance(obj, self.element_type) and bool(self.guard(obj))

    def produce(self, obj: Any) -> list[Fragment]:
        """
        Invoke ``build`` and normalize its result into a list.

        Raises
        ------
        TypeError
            If a produced value is not of this rule's fragment kind
        """
        result = self.build(obj)
        if result is None:
            return []

        if isinstance(result, self.fragment_type):
            fragments = [result]
        elif self.allows_many and isinstance(result, Iterable) and not isinstance(result, (str, bytes, BaseModel)):
            fragments = list(result)
        else:
            raise TypeError(
                f"{self.kind.value} rule returned {type(result).__name__}, "
                f"expected {self._expected()}"
            )

        for i, fragment in enumerate(fragments):
            if not isinstance(fragment, self.fragment_type):
                raise TypeError(
                    f"{self.kind.value} rule returned {type(fragment).__name__} "
                    f"at position {i}, expected {self.fragment_type.__name__}"
                )
        return fragments

    def _expected(self) -> str:
        name = self.fragment_type.__name__
        return f"{name} or a sequence of {name}" if self.allows_many else name

    def _default_rule_id(self) -> str:
        return f"{self.kind.value}:{self.element_type.__name__}:{type(self).__name__}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.rule_id}, type={self.element_type.__name__})"


class _FunctionRule(Rule):
    """Rule backed by a plain production function."""

    def __init__(
        self,
        element_type: type,
        build: Callable[[Any], Any],
        guard: Optional[Guard] = None,
        rule_id: Optional[str] = None,
    ):
        self._build = build
        super().__init__(element_type, guard=guard, rule_id=rule_id)

    def build(self, obj: Any) -> Any:
        return self._build(obj)

    def _default_rule_id(self) -> str:
        name = getattr(self._build, "__name__", type(self._build).__name__)
        return f"{self.kind.value}:{self.element_type.__name__}:{name}"


class NodeRule(_FunctionRule):
    """``(object) -> Node`` or ``(object) -> sequence of Node``."""

    kind = FragmentKind.NODE
    fragment_type = Node
    allows_many = True


class LinkRule(_FunctionRule):
    """``(object) -> Link`` or ``(object) -> sequence of Link``."""

    kind = FragmentKind.LINK
    fragment_type = Link
    allows_many = True


class CategoryRule(_FunctionRule):
    """``(object) -> Category``."""

    kind = FragmentKind.CATEGORY
    fragment_type = Category


class StyleRule(_FunctionRule):
    """``(object) -> Style``. Most styles come from analyses instead."""

    kind = FragmentKind.STYLE
    fragment_type = Style


RULE_TYPES: dict[FragmentKind, type[_FunctionRule]] = {
    FragmentKind.NODE: NodeRule,
    FragmentKind.LINK: LinkRule,
    FragmentKind.CATEGORY: CategoryRule,
    FragmentKind.STYLE: StyleRule,
}


class RuleSet:
    """
    Ordered registry of rules.

    Registration order is dispatch order.

    Example
    -------
    >>> rules = RuleSet()
    >>> @rules.node(Component)
    ... def component_node(c):
    ...     return Node(id=c.name, label=c.name)
    >>> @rules.link(Call)
    ... def call_link(call):
    ...     return Link(source=call.caller, target=call.callee)
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: list[Rule] = []
        self.extend(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def register(self, rule: Rule) -> Rule:
        """Append a rule and return it."""
        if not isinstance(rule, Rule):
            raise TypeError(f"Expected a Rule, got {type(rule).__name__}")
        self._rules.append(rule)
        return rule

    def extend(self, rules: Iterable[Rule]) -> None:
        """Append several rules in order."""
        for rule in rules:
            self.register(rule)

    def rules_for(self, obj: Any) -> list[Rule]:
        """Rules that apply to ``obj``, in registration order."""
        return [rule for rule in self._rules if rule.applies_to(obj)]

    def node(self, element_type: type, guard: Optional[Guard] = None, rule_id: Optional[str] = None):
        """Decorator registering a function as a NodeRule."""
        return self._decorator(FragmentKind.NODE, element_type, guard, rule_id)

    def link(self, element_type: type, guard: Optional[Guard] = None, rule_id: Optional[str] = None):
        """Decorator registering a function as a LinkRule."""
        return self._decorator(FragmentKind.LINK, element_type, guard, rule_id)

    def category(self, element_type: type, guard: Optional[Guard] = None, rule_id: Optional[str] = None):
        """Decorator registering a function as a CategoryRule."""
        return self._decorator(FragmentKind.CATEGORY, element_type, guard, rule_id)

    def style(self, element_type: type, guard: Optional[Guard] = None, rule_id: Optional[str] = None):
        """Decorator registering a function as a StyleRule."""
        return self._decorator(FragmentKind.STYLE, element_type, guard, rule_id)

    def _decorator(
        self,
        kind: FragmentKind,
        element_type: type,
        guard: Optional[Guard],
        rule_id: Optional[str],
    ):
        def register(fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
            self.register(RULE_TYPES[kind](element_type, fn, guard=guard, rule_id=rule_id))
            return fn

        return register

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __repr__(self) -> str:
        return f"RuleSet(rules={len(self._rules)})"
