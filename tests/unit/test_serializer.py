"""Unit tests for the serializer module."""

import pytest

from flowsync.errors import UnknownShapeError
from flowsync.models import BorderStyle, Edge, EdgeStyle, GraphModel, Node, NodeStyle
from flowsync.parser import parse_diagram
from flowsync.serializer import (
    format_width,
    serialize_edge,
    serialize_edge_style,
    serialize_model,
    serialize_node,
    serialize_node_style,
)
from flowsync.shapes import Shape


class TestLines:
    """Tests for single-line serialization."""

    def test_node_line(self):
        """Test a node line with shape brackets."""
        assert serialize_node(Node("A", "Start", Shape.RHOMBUS)) == "    A{Start}"

    def test_node_line_indent(self):
        """Test a custom indent."""
        assert serialize_node(Node("A", "Start"), indent="") == "A[Start]"

    def test_unknown_shape(self):
        """Test that an unregistered shape raises."""
        with pytest.raises(UnknownShapeError):
            serialize_node(Node("A", "x", "blob"))

    def test_edge_line(self):
        """Test an unlabelled edge."""
        assert serialize_edge(Edge("edge_A_B", "A", "B")) == "    A --> B"

    def test_labelled_edge_line(self):
        """Test the pipe segment."""
        assert serialize_edge(Edge("edge_A_B", "A", "B", "yes")) == "    A -->|yes| B"

    def test_node_style_line(self):
        """Test the default style line layout."""
        assert serialize_node_style("A", NodeStyle()) == (
            "    style A stroke-width:1px,stroke:#000000,color:#000000,fill:#ffffff"
        )

    def test_dashed_style_line(self):
        """Test that a dashed border adds stroke-dasharray."""
        line = serialize_node_style("A", NodeStyle(border_style=BorderStyle.DASHED))
        assert line.endswith(",fill:#ffffff,stroke-dasharray:5 5")

    def test_edge_style_line(self):
        """Test the linkStyle line layout."""
        assert serialize_edge_style(2, EdgeStyle("#f00", "#00f")) == (
            "    linkStyle 2 stroke:#f00,color:#00f"
        )

    def test_format_width(self):
        """Test width formatting."""
        assert format_width(1.0) == "1px"
        assert format_width(3) == "3px"
        assert format_width(0.5) == "0.5px"

    def test_format_width_fixed_point(self):
        """Test that tiny widths are not written in exponent notation."""
        assert format_width(1e-05) == "0.00001px"
        assert format_width(2.25) == "2.25px"

    def test_small_width_reads_back(self):
        """Test a tiny border width through a style line."""
        style = NodeStyle(border_width=1e-05)
        line = serialize_node_style("A", style)
        diagram = parse_diagram("flowchart TD\n    A[x]\n" + line)
        assert diagram.nodes[0].style == style


class TestSerializeModel:
    """Tests for whole-model serialization."""

    def test_layout(self):
        """Test line order: header, nodes, edges, styles."""
        model = GraphModel(
            nodes=(
                Node("A", "Start", style=NodeStyle(background_color="#f9f")),
                Node("B", "End"),
            ),
            edges=(Edge("edge_A_B", "A", "B", style=EdgeStyle("#f00", "#000000")),),
        )
        assert serialize_model(model).split("\n") == [
            "flowchart TD",
            "    A[Start]",
            "    B[End]",
            "    A --> B",
            "    style A stroke-width:1px,stroke:#000000,color:#000000,fill:#f9f",
            "    linkStyle 0 stroke:#f00,color:#000000",
        ]

    def test_placeholders_not_declared(self):
        """Test that edge-only nodes get no declaration line."""
        model = parse_diagram("flowchart TD\n    A[a]\n    A --> X").model
        assert "X[" not in serialize_model(model)

    def test_parse_reproduces_model(self, styled_diagram):
        """Test that parsing serialized text gives the same model."""
        text = serialize_model(styled_diagram.model, header="flowchart LR")
        assert text.startswith("flowchart LR\n")
        assert parse_diagram(text).model == styled_diagram.model

    def test_styled_placeholder_round_trips(self):
        """Test that a styled edge-only node survives serialization."""
        model = parse_diagram(
            "flowchart TD\n    A --> B\n    style B stroke-width:2.5px,stroke-dasharray:5 5"
        ).model
        assert parse_diagram(serialize_model(model)).model == model
