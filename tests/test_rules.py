"""
Rule and Dispatch Tests
=======================

Test suite for the rule interface, the rule registry, and the dispatch
engine.
"""

from dataclasses import dataclass

import pytest

from graphweave.core.errors import RuleExecutionError
from graphweave.core.schema import Category, ElementKind, Link, Node, Setter, Style
from graphweave.rules.dispatch import dispatch
from graphweave.rules.interface import (
    CategoryRule,
    FragmentKind,
    LinkRule,
    NodeRule,
    Rule,
    RuleSet,
    StyleRule,
)


# ============================================================================
# Domain objects
# ============================================================================


@dataclass
class Component:
    name: str
    layer: str = "service"


@dataclass
class Database(Component):
    engine: str = "postgres"


@dataclass
class Call:
    caller: str
    callee: str


def component_node(c: Component) -> Node:
    return Node(id=c.name, label=c.name, category=c.layer)


# ============================================================================
# Rule Tests
# ============================================================================


class TestRule:
    """Tests for rule matching and fragment normalization."""

    def test_applies_to_declared_type(self):
        rule = NodeRule(Component, component_node)
        assert rule.applies_to(Component("a"))
        assert not rule.applies_to(Call("a", "b"))

    def test_applies_to_subtype(self):
        rule = NodeRule(Component, component_node)
        assert rule.applies_to(Database("db"))

    def test_guard_filters(self):
        rule = NodeRule(Component, component_node, guard=lambda c: c.layer == "data")
        assert rule.applies_to(Component("db", layer="data"))
        assert not rule.applies_to(Component("api"))

    def test_single_fragment_normalized_to_list(self):
        rule = NodeRule(Component, component_node)
        assert rule.produce(Component("a")) == [Node(id="a", label="a", category="service")]

    def test_many_fragments(self):
        rule = NodeRule(Component, lambda c: [Node(id=c.name), Node(id=f"{c.name}.port")])
        assert [n.id for n in rule.produce(Component("a"))] == ["a", "a.port"]

    def test_generator_of_fragments(self):
        rule = LinkRule(Call, lambda call: (Link(source=call.caller, target=t) for t in call.callee.split(",")))
        assert len(rule.produce(Call("a", "b,c"))) == 2

    def test_none_means_no_fragments(self):
        rule = NodeRule(Component, lambda c: None)
        assert rule.produce(Component("a")) == []

    def test_wrong_fragment_kind_rejected(self):
        rule = NodeRule(Component, lambda c: Link(source=c.name, target="x"))
        with pytest.raises(TypeError):
            rule.produce(Component("a"))

    def test_wrong_kind_inside_sequence_rejected(self):
        rule = NodeRule(Component, lambda c: [Node(id=c.name), Category(id="c")])
        with pytest.raises(TypeError, match="position 1"):
            rule.produce(Component("a"))

    def test_category_rule_is_single_valued(self):
        rule = CategoryRule(Component, lambda c: [Category(id=c.layer)])
        with pytest.raises(TypeError):
            rule.produce(Component("a"))

    def test_style_rule(self):
        style = Style(target_type=ElementKind.NODE, setters=[Setter(property="Background", value="Red")])
        rule = StyleRule(Component, lambda c: style)
        assert rule.kind == FragmentKind.STYLE
        assert rule.produce(Component("a")) == [style]

    def test_default_rule_id(self):
        assert NodeRule(Component, component_node).rule_id == "node:Component:component_node"

    def test_explicit_rule_id(self):
        assert NodeRule(Component, component_node, rule_id="components").rule_id == "components"

    def test_element_type_must_be_a_class(self):
        with pytest.raises(TypeError):
            NodeRule(Component("a"), component_node)

    def test_custom_rule_subclass(self):
        class UpperRule(Rule):
            kind = FragmentKind.NODE
            fragment_type = Node

            def build(self, obj):
                return Node(id=obj.name.upper())

        rule = UpperRule(Component)
        assert rule.rule_id == "node:Component:UpperRule"
        assert rule.produce(Component("a"))[0].id == "A"


class TestRuleSet:
    """Tests for the ordered rule registry."""

    def test_decorators_register_in_order(self):
        rules = RuleSet()

        @rules.node(Component)
        def node(c):
            return Node(id=c.name)

        @rules.category(Component)
        def category(c):
            return Category(id=c.layer)

        @rules.link(Call)
        def link(call):
            return Link(source=call.caller, target=call.callee)

        assert len(rules) == 3
        assert [r.kind for r in rules] == [FragmentKind.NODE, FragmentKind.CATEGORY, FragmentKind.LINK]
        # The decorated function is returned unchanged.
        assert node(Component("x")).id == "x"

    def test_style_decorator(self):
        rules = RuleSet()

        @rules.style(Component, guard=lambda c: c.layer == "data")
        def data_style(c):
            return Style(target_type=ElementKind.NODE, setters=[Setter(property="Shape", value="Cylinder")])

        assert isinstance(rules.rules[0], StyleRule)
        assert rules.rules_for(Component("a")) == []
        assert len(rules.rules_for(Component("db", layer="data"))) == 1

    def test_register_rejects_non_rules(self):
        with pytest.raises(TypeError):
            RuleSet().register(component_node)

    def test_construct_from_rules(self):
        rules = RuleSet([NodeRule(Component, component_node)])
        assert len(rules) == 1


# ============================================================================
# Dispatch Tests
# ============================================================================


class TestDispatch:
    """Tests for the dispatch engine."""

    def test_no_match_yields_nothing(self):
        rules = RuleSet([NodeRule(Component, component_node)])
        assert dispatch(Call("a", "b"), rules) == []

    def test_empty_rule_set(self):
        assert dispatch(Component("a"), RuleSet()) == []

    def test_all_matching_rules_fire_in_order(self):
        rules = RuleSet([
            NodeRule(Component, component_node),
            CategoryRule(Component, lambda c: Category(id=c.layer)),
            LinkRule(Call, lambda call: Link(source=call.caller, target=call.callee)),
            NodeRule(Component, lambda c: Node(id=c.name, label="refined")),
        ])

        fragments = dispatch(Component("a"), rules)
        assert [type(f).__name__ for f in fragments] == ["Node", "Category", "Node"]
        assert fragments[2].label == "refined"

    def test_production_error_wrapped(self):
        def explode(c):
            raise RuntimeError("boom")

        rules = RuleSet([NodeRule(Component, explode)])

        with pytest.raises(RuleExecutionError) as exc_info:
            dispatch(Component("svc-a"), rules)

        error = exc_info.value
        assert error.rule_id == "node:Component:explode"
        assert error.element_type is Component
        assert "svc-a" in error.object_description
        assert isinstance(error.__cause__, RuntimeError)
        assert "boom" in str(error)

    def test_guard_error_propagates(self):
        rules = RuleSet([NodeRule(Component, component_node, guard=lambda c: c.missing)])

        with pytest.raises(RuleExecutionError) as exc_info:
            dispatch(Component("a"), rules)

        assert isinstance(exc_info.value.__cause__, AttributeError)

    def test_invalid_fragment_is_a_rule_error(self):
        rules = RuleSet([NodeRule(Component, lambda c: Node(id=""))])
        with pytest.raises(RuleExecutionError):
            dispatch(Component("a"), rules)

    def test_wrong_kind_is_a_rule_error(self):
        rules = RuleSet([LinkRule(Call, lambda call: Node(id=call.caller))])
        with pytest.raises(RuleExecutionError) as exc_info:
            dispatch(Call("a", "b"), rules)
        assert isinstance(exc_info.value.__cause__, TypeError)
