"""
Export Tests
============

Test suite for the DGML writer and graph fingerprints.
"""

from dataclasses import dataclass
import xml.etree.ElementTree as ET

import pytest

from graphweave.analysis.reference import HubSizing, ReferenceMarking
from graphweave.assembly.builder import GraphBuilder
from graphweave.core.config import BuilderConfig
from graphweave.core.errors import RuleExecutionError
from graphweave.core.graph import DirectedGraph
from graphweave.core.schema import (
    Category,
    Condition,
    ElementKind,
    Link,
    Node,
    PropertyDeclaration,
    Setter,
    Style,
)
from graphweave.export.dgml import DGML_NAMESPACE, serialize, to_element, write_dgml
from graphweave.export.fingerprint import graph_fingerprint
from graphweave.rules.interface import RuleSet


def tag(name: str) -> str:
    return f"{{{DGML_NAMESPACE}}}{name}"


# ============================================================================
# Fixtures
# ============================================================================


@dataclass
class Component:
    name: str


@dataclass
class Call:
    caller: str
    callee: str


@pytest.fixture
def decorated() -> DirectedGraph:
    """X -> Y -> Z with both reference analyses applied."""
    rules = RuleSet()

    @rules.node(Component)
    def component_node(c):
        return Node(id=c.name, label=c.name, category="Component")

    @rules.link(Call)
    def call_link(call):
        return Link(source=call.caller, target=call.callee, category="Calls")

    @rules.category(Component)
    def component_category(c):
        return Category(id="Component", label="Component")

    builder = GraphBuilder(
        rules,
        analyses=[HubSizing(), ReferenceMarking()],
        config=BuilderConfig(verbose=False),
    )
    return builder.build(
        [Component("X"), Component("Y"), Component("Z")],
        [Call("X", "Y"), Call("Y", "Z")],
    )


@pytest.fixture
def parsed(decorated) -> ET.Element:
    return ET.fromstring(serialize(decorated))


# ============================================================================
# Document Structure Tests
# ============================================================================


class TestDocument:
    """Tests for the overall DGML layout."""

    def test_xml_declaration(self, decorated):
        assert serialize(decorated).startswith(b"<?xml version='1.0' encoding='utf-8'?>")

    def test_root_and_sections(self, parsed):
        assert parsed.tag == tag("DirectedGraph")
        assert [child.tag for child in parsed] == [
            tag("Nodes"),
            tag("Links"),
            tag("Categories"),
            tag("Properties"),
            tag("Styles"),
        ]

    def test_empty_graph_has_all_sections(self):
        root = ET.fromstring(serialize(DirectedGraph()))
        assert len(root) == 5
        assert all(len(section) == 0 for section in root)

    def test_unindented_output(self, decorated):
        compact = serialize(decorated, indent=False)
        assert b"\n  <Nodes>" not in compact
        assert ET.fromstring(compact).tag == tag("DirectedGraph")

    def test_to_element_is_unnamespaced_tree(self, decorated):
        root = to_element(decorated)
        assert root.tag == "DirectedGraph"
        assert root.get("xmlns") == DGML_NAMESPACE


# ============================================================================
# Element Tests
# ============================================================================


class TestElements:
    """Tests for per-element attributes."""

    def test_nodes_in_graph_order(self, parsed):
        nodes = parsed.find(tag("Nodes"))
        assert [n.get("Id") for n in nodes] == ["X", "Y", "Z"]

    def test_node_attributes(self, parsed):
        x = parsed.find(tag("Nodes"))[0]
        assert x.get("Label") == "X"
        assert x.get("Category") == "Component"
        assert x.get("HubSize") == "10.0"
        assert x.get("IsReferenced") == "False"

        y = parsed.find(tag("Nodes"))[1]
        assert y.get("HubSize") == "20.0"
        assert y.get("IsReferenced") == "True"

    def test_links(self, parsed):
        links = parsed.find(tag("Links"))
        assert [(link.get("Source"), link.get("Target"), link.get("Category")) for link in links] == [
            ("X", "Y", "Calls"),
            ("Y", "Z", "Calls"),
        ]
        assert links[0].get("Label") is None

    def test_categories(self, parsed):
        categories = parsed.find(tag("Categories"))
        assert [(c.get("Id"), c.get("Label")) for c in categories] == [("Component", "Component")]

    def test_property_declarations(self, parsed):
        declarations = {
            p.get("Id"): p.get("DataType")
            for p in parsed.find(tag("Properties"))
        }
        assert declarations == {"HubSize": "System.Double", "IsReferenced": "System.Boolean"}

    def test_style(self, parsed):
        styles = parsed.find(tag("Styles"))
        assert len(styles) == 1
        style = styles[0]
        assert style.get("TargetType") == "Node"
        assert style.get("GroupLabel") == "Unreferenced"
        assert style.find(tag("Condition")).get("Expression") == "IsReferenced='False'"
        setter = style.find(tag("Setter"))
        assert setter.get("Property") == "Background"
        assert setter.get("Value") is not None

    def test_setter_expression(self):
        graph = DirectedGraph()
        graph.add_style(Style(
            target_type=ElementKind.LINK,
            conditions=[Condition(expression="HasCategory('Calls')")],
            setters=[Setter(property="StrokeThickness", expression="Weight * 2")],
        ))

        setter = ET.fromstring(serialize(graph)).find(tag("Styles"))[0].find(tag("Setter"))
        assert setter.get("Expression") == "Weight * 2"
        assert setter.get("Value") is None

    def test_fixed_attribute_wins_over_property(self):
        graph = DirectedGraph()
        graph.merge_node(Node(id="a", label="A", properties={"Label": "shadow", "Owner": "core"}))

        node = ET.fromstring(serialize(graph)).find(tag("Nodes"))[0]
        assert node.get("Label") == "A"
        assert node.get("Owner") == "core"

    def test_property_fills_unset_fixed_attribute(self):
        graph = DirectedGraph()
        graph.merge_node(Node(id="a", properties={"Label": "shown"}))

        node = ET.fromstring(serialize(graph)).find(tag("Nodes"))[0]
        assert node.get("Label") == "shown"

    def test_invalid_property_name_is_rejected(self):
        node = Node(id="a")
        node.properties["has space"] = 1
        graph = DirectedGraph()
        graph.merge_node(node)

        with pytest.raises(ValueError, match="has space"):
            serialize(graph)

    def test_rule_with_invalid_property_name_fails_build(self):
        rules = RuleSet()
        rules.node(Component)(lambda c: Node(id=c.name, properties={"has space": 1}))

        with pytest.raises(RuleExecutionError):
            GraphBuilder(rules, config=BuilderConfig(verbose=False)).build([Component("a")])

    def test_property_declaration_optional_fields(self):
        graph = DirectedGraph()
        graph.declare_property(PropertyDeclaration(id="Owner"))

        prop = ET.fromstring(serialize(graph)).find(tag("Properties"))[0]
        assert prop.get("DataType") == "System.String"
        assert prop.get("Label") is None
        assert prop.get("Description") is None


class TestDanglingEndpoints:
    """Link endpoints without nodes are reconciled on write."""

    def test_missing_endpoint_emitted_as_node(self):
        graph = DirectedGraph()
        graph.merge_node(Node(id="a", label="A"))
        graph.merge_link(Link(source="a", target="ghost"))
        graph.merge_link(Link(source="phantom", target="ghost"))

        nodes = ET.fromstring(serialize(graph)).find(tag("Nodes"))
        assert [n.get("Id") for n in nodes] == ["a", "ghost", "phantom"]
        assert dict(nodes[1].attrib) == {"Id": "ghost"}

    def test_graph_itself_is_unchanged(self):
        graph = DirectedGraph()
        graph.merge_link(Link(source="a", target="b"))
        serialize(graph)
        assert graph.node_count == 0


class TestWriteDgml:
    """Tests for file output."""

    def test_file_matches_serialize(self, decorated, tmp_path):
        target = write_dgml(decorated, tmp_path / "graph.dgml")

        assert target.read_bytes() == serialize(decorated)

    def test_accepts_str_path(self, decorated, tmp_path, capsys):
        target = write_dgml(decorated, str(tmp_path / "graph.dgml"))

        assert target.exists()
        assert "[DGML] Wrote 3 nodes, 2 links" in capsys.readouterr().out


# ============================================================================
# Fingerprint Tests
# ============================================================================


class TestFingerprint:
    """Tests for deterministic graph ids."""

    def test_format(self, decorated):
        fingerprint = graph_fingerprint(decorated)
        assert fingerprint.startswith("graph_")
        assert len(fingerprint) == len("graph_") + 16

    def test_content_change(self):
        first, second = DirectedGraph(), DirectedGraph()
        first.merge_node(Node(id="a"))
        second.merge_node(Node(id="a", label="A"))

        assert graph_fingerprint(first) != graph_fingerprint(second)

    def test_order_change(self):
        first, second = DirectedGraph(), DirectedGraph()
        first.merge_node(Node(id="a"))
        first.merge_node(Node(id="b"))
        second.merge_node(Node(id="b"))
        second.merge_node(Node(id="a"))

        assert graph_fingerprint(first) != graph_fingerprint(second)

    def test_namespace_and_prefix(self, decorated):
        assert graph_fingerprint(decorated, namespace="other") != graph_fingerprint(decorated)
        assert graph_fingerprint(decorated, prefix="run").startswith("run_")
