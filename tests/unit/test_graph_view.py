"""Unit tests for the graph module."""

import networkx as nx

from flowsync.graph import DiagramGraph, to_networkx
from flowsync.parser import parse_diagram


class TestToNetworkx:
    """Tests for the networkx conversion."""

    def test_nodes_and_attributes(self, styled_diagram):
        """Test that nodes carry their label and shape."""
        graph = to_networkx(styled_diagram.model)
        assert isinstance(graph, nx.MultiDiGraph)
        assert list(graph.nodes) == ["A", "B", "C"]
        assert graph.nodes["B"]["label"] == "Check"

    def test_parallel_edges_kept(self):
        """Test that duplicate edges are separate multigraph edges."""
        model = parse_diagram("flowchart TD\n    A --> B\n    A -->|x| B").model
        graph = to_networkx(model)
        assert graph.number_of_edges("A", "B") == 2
        assert graph["A"]["B"]["edge_A_B_1"]["label"] == "x"
        assert graph["A"]["B"]["edge_A_B_1"]["position"] == 1


class TestDiagramGraph:
    """Tests for graph queries."""

    def test_incident_edges_in_text_order(self, styled_diagram):
        """Test incoming and outgoing edges of a node."""
        graph = DiagramGraph(styled_diagram.model)
        assert graph.incident_edge_ids("A") == ["edge_A_B", "edge_C_A"]

    def test_incident_edges_self_loop(self):
        """Test that a self loop is reported once."""
        graph = DiagramGraph(parse_diagram("flowchart TD\n    A --> A").model)
        assert graph.incident_edge_ids("A") == ["edge_A_A"]

    def test_incident_edges_unknown_node(self, styled_diagram):
        """Test an id that is not in the graph."""
        assert DiagramGraph(styled_diagram.model).incident_edge_ids("Z") == []

    def test_neighbours(self, styled_diagram):
        """Test successors and predecessors."""
        graph = DiagramGraph(styled_diagram.model)
        assert graph.get_successors("B") == ["C"]
        assert graph.get_predecessors("B") == ["A"]
        assert graph.get_successors("Z") == []

    def test_roots_and_leaves(self):
        """Test nodes without incoming or outgoing edges."""
        model = parse_diagram("flowchart TD\n    A --> B\n    B --> C\n    D[alone]").model
        graph = DiagramGraph(model)
        assert graph.get_roots() == ["D", "A"]
        assert graph.get_leaves() == ["D", "C"]

    def test_cycles(self, styled_diagram):
        """Test cycle detection and the topological fallback."""
        graph = DiagramGraph(styled_diagram.model)
        assert graph.has_cycle()
        assert graph.topological_sort() == ["A", "B", "C"]

    def test_topological_sort(self):
        """Test ordering of an acyclic diagram."""
        model = parse_diagram("flowchart TD\n    C --> B\n    B --> A").model
        graph = DiagramGraph(model)
        assert not graph.has_cycle()
        assert graph.topological_sort() == ["C", "B", "A"]
