"""Unit tests for the parser module."""

from flowsync.errors import DiagnosticKind
from flowsync.lexer import Header, LineClassifier
from flowsync.models import BorderStyle, Edge, EdgeStyle, Node, NodeStyle
from flowsync.parser import (
    Parser,
    apply_edge_properties,
    apply_node_properties,
    parse_diagram,
    reconcile_nodes,
)
from flowsync.shapes import Shape


class TestParserBasic:
    """Basic parsing tests."""

    def test_parse_nodes(self, parser, simple_text):
        """Test that node declarations become nodes."""
        diagram = parser.parse(simple_text)
        assert diagram.nodes == (Node("A", "Start"), Node("B", "End"))
        assert diagram.edges == ()

    def test_parse_edges(self, connected_text):
        """Test that edge lines become edges."""
        diagram = parse_diagram(connected_text)
        assert diagram.edges == (Edge("edge_A_B", "A", "B"),)

    def test_shapes_decoded(self, styled_diagram):
        """Test that node shapes come from the shape table."""
        shapes = [node.shape for node in styled_diagram.nodes]
        assert shapes == [Shape.RECTANGLE, Shape.RHOMBUS, Shape.CIRCLE]

    def test_edge_label(self, styled_diagram):
        """Test that pipe labels are kept."""
        assert styled_diagram.edges[1].label == "yes"

    def test_lines_preserved_verbatim(self, mixed_text):
        """Test that parsing keeps every line as written."""
        diagram = parse_diagram(mixed_text)
        assert diagram.text == mixed_text
        assert len(diagram.lines) == 8

    def test_empty_text(self):
        """Test parsing empty text."""
        diagram = parse_diagram("")
        assert diagram.lines == ()
        assert diagram.nodes == ()
        assert diagram.is_empty

    def test_trailing_newline_kept(self, simple_text):
        """Test that a trailing newline survives as a blank line."""
        diagram = parse_diagram(simple_text + "\n")
        assert diagram.lines[-1] == ""
        assert diagram.text == simple_text + "\n"

    def test_redeclared_node_keeps_position(self):
        """Test that a second declaration updates the first in place."""
        diagram = parse_diagram("flowchart TD\n    A[One]\n    B[Two]\n    A((Three))")
        assert diagram.model.node_ids() == ("A", "B")
        assert diagram.nodes[0] == Node("A", "Three", Shape.CIRCLE)


class TestPlaceholders:
    """Tests for nodes referenced only by edges."""

    def test_undeclared_target(self):
        """Test that an undeclared endpoint is synthesized."""
        diagram = parse_diagram("flowchart TD\n    A[Start]\n    A --> X")
        assert diagram.nodes[1] == Node("X", "X", declared=False)

    def test_inline_shape_does_not_declare(self):
        """Test that an inline target shape leaves the node undeclared."""
        diagram = parse_diagram("flowchart TD\n    A --> B[End]")
        assert diagram.model.node_ids() == ("A", "B")
        assert all(not node.declared for node in diagram.nodes)
        assert diagram.nodes[1].label == "B"

    def test_placeholders_follow_declared_nodes(self):
        """Test placeholder ordering by first reference."""
        diagram = parse_diagram("flowchart TD\n    Z --> Y\n    A[a]")
        assert diagram.model.node_ids() == ("A", "Z", "Y")

    def test_reconcile_reuses_previous_placeholder(self):
        """Test that a known placeholder keeps its style."""
        styled = Node("X", "X", style=NodeStyle(background_color="#f00"), declared=False)
        nodes = reconcile_nodes([], [Edge("edge_A_X", "A", "X")], previous=[styled])
        assert nodes[1] is styled


class TestStyles:
    """Tests for style and linkStyle application."""

    def test_node_style(self):
        """Test that a style line overwrites node style fields."""
        diagram = parse_diagram(
            "flowchart TD\n    A[x]\n    style A stroke:#333,stroke-width:2px,color:#fff,fill:#f9f"
        )
        assert diagram.nodes[0].style == NodeStyle(
            text_color="#fff",
            background_color="#f9f",
            border_color="#333",
            border_width=2.0,
        )

    def test_style_before_declaration(self):
        """Test that style lines apply regardless of position."""
        diagram = parse_diagram("flowchart TD\n    style A fill:#f00\n    A[x]")
        assert diagram.nodes[0].style.background_color == "#f00"

    def test_partial_style_keeps_defaults(self):
        """Test that unnamed fields keep their default."""
        diagram = parse_diagram("flowchart TD\n    A[x]\n    style A fill:#f00")
        assert diagram.nodes[0].style == NodeStyle(background_color="#f00")

    def test_dashed_border(self):
        """Test the stroke-dasharray property."""
        style = apply_node_properties(NodeStyle(), {"stroke-dasharray": "5 5"})
        assert style.border_style is BorderStyle.DASHED
        style = apply_node_properties(style, {"stroke-dasharray": "none"})
        assert style.border_style is BorderStyle.SOLID

    def test_bad_width_ignored(self):
        """Test that an unparseable width leaves the width alone."""
        style = apply_node_properties(NodeStyle(), {"stroke-width": "thick"})
        assert style.border_width == 1.0

    def test_fractional_width(self):
        """Test a width without the px unit."""
        style = apply_node_properties(NodeStyle(), {"stroke-width": "0.5"})
        assert style.border_width == 0.5

    def test_link_styles_are_positional(self, styled_diagram):
        """Test that linkStyle N styles the Nth edge line."""
        colors = [edge.style.line_color for edge in styled_diagram.edges]
        assert colors == ["#ff0000", "#00ff00", "#0000ff"]

    def test_edge_properties(self):
        """Test stroke and color mapping for edges."""
        style = apply_edge_properties(EdgeStyle(), {"stroke": "#111", "color": "#222"})
        assert style == EdgeStyle("#111", "#222")

    def test_unwritable_color_ignored(self):
        """Test that a color containing whitespace keeps the default."""
        diagram = parse_diagram("flowchart TD\n    A[x]\n    style A fill:a b,stroke:#333")
        assert diagram.nodes[0].style == NodeStyle(border_color="#333")
        style = apply_edge_properties(EdgeStyle(), {"stroke": "a b", "color": "#222"})
        assert style == EdgeStyle(label_color="#222")

    def test_style_for_placeholder(self):
        """Test that an edge-only node can be styled."""
        diagram = parse_diagram("flowchart TD\n    A --> B\n    style B fill:#0f0")
        assert diagram.nodes[1].style.background_color == "#0f0"


class TestDiagnostics:
    """Tests for non-fatal parse diagnostics."""

    def test_header_recorded(self, parser, simple_text):
        """Test that the first header is returned."""
        result = parser.parse_with_diagnostics(simple_text)
        assert result.header == Header("flowchart", "TD", 0)
        assert result.diagnostics == []

    def test_malformed_edge(self, parser):
        """Test that an unsupported arrow line is reported."""
        result = parser.parse_with_diagnostics("flowchart TD\n    A --> B --> C")
        assert result.diagram.edges == ()
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.MALFORMED_EDGE]
        assert result.diagnostics[0].line_number == 1

    def test_unrecognized_shape(self, parser):
        """Test that a broken shape is reported and the line kept."""
        result = parser.parse_with_diagnostics("flowchart TD\n    A[Start")
        assert result.diagram.nodes == ()
        assert result.diagram.lines[1] == "    A[Start"
        assert result.diagnostics[0].kind is DiagnosticKind.UNRECOGNIZED_SHAPE

    def test_semicolon_terminated_lines(self, parser):
        """Test that statements ending in a semicolon are not reported."""
        result = parser.parse_with_diagnostics("flowchart TD;\n    A[Start];\n    A --> B;")
        assert result.diagnostics == []
        assert [edge.id for edge in result.diagram.edges] == ["edge_A_B"]
        assert result.diagram.nodes[0] == Node("A", "Start")

    def test_style_for_unknown_node(self, parser):
        """Test that a style for a missing node is ignored and reported."""
        result = parser.parse_with_diagnostics("flowchart TD\n    style Q fill:#f00")
        assert result.diagram.nodes == ()
        assert result.diagnostics[0].kind is DiagnosticKind.UNKNOWN_ELEMENT

    def test_link_style_out_of_range(self, parser):
        """Test that a linkStyle beyond the last edge is ignored and reported."""
        result = parser.parse_with_diagnostics(
            "flowchart TD\n    A --> B\n    linkStyle 1 stroke:#f00"
        )
        assert result.diagram.edges[0].style == EdgeStyle()
        assert result.diagnostics[0].line_number == 2

    def test_comments_are_quiet(self, parser, mixed_text):
        """Test that comments and other syntax produce no diagnostics."""
        result = parser.parse_with_diagnostics(mixed_text)
        assert result.diagnostics == []

    def test_diagnostic_str(self, parser):
        """Test the diagnostic message format."""
        result = parser.parse_with_diagnostics("flowchart TD\n    A --> B --> C")
        assert str(result.diagnostics[0]).startswith("malformed_edge (line 1):")


class TestDuplicateEdges:
    """Tests for edges repeated between the same pair of nodes."""

    def test_duplicate_ids_discriminated(self):
        """Test that later duplicates get a sequence suffix."""
        diagram = parse_diagram("flowchart TD\n    A --> B\n    A --> B\n    A --> B")
        assert [edge.id for edge in diagram.edges] == [
            "edge_A_B",
            "edge_A_B_1",
            "edge_A_B_2",
        ]

    def test_reverse_edge_is_distinct(self):
        """Test that direction is part of the identity."""
        diagram = parse_diagram("flowchart TD\n    A --> B\n    B --> A")
        assert [edge.id for edge in diagram.edges] == ["edge_A_B", "edge_B_A"]


class TestParserInstance:
    """Tests for Parser configuration."""

    def test_custom_classifier(self):
        """Test that the parser uses the classifier it was given."""

        class NoEdges(LineClassifier):
            def _classify_edge(self, stripped, line_number):
                return None

        diagram = Parser(NoEdges()).parse("flowchart TD\n    A --> B")
        assert diagram.edges == ()
