"""Unit tests for the ids module."""

from flowsync.ids import next_node_id, next_node_id_from_lines, used_ids


class TestNextNodeId:
    """Tests for node id allocation."""

    def test_fills_gap(self):
        """Test that the smallest free number is reused."""
        text = "flowchart TD\n    node1[A]\n    node3[B]"
        assert next_node_id(text) == "node2"

    def test_empty_text(self):
        """Test allocation on an empty diagram."""
        assert next_node_id("") == "node1"

    def test_sequential(self):
        """Test allocation after a contiguous run."""
        assert next_node_id("flowchart TD\n    node1[A]\n    node2[B]") == "node3"

    def test_other_ids_ignored(self):
        """Test that ids without the prefix do not matter."""
        assert next_node_id("flowchart TD\n    A[x]\n    node01[y]") == "node1"

    def test_edge_references_count_as_used(self):
        """Test that an id only used by an edge is not handed out."""
        assert next_node_id("flowchart TD\n    node1 --> X") == "node2"

    def test_comments_ignored(self):
        """Test that ids in comment lines are free."""
        assert next_node_id("flowchart TD\n    %% node1[A]") == "node1"

    def test_custom_prefix(self):
        """Test allocation with another prefix."""
        lines = ["flowchart TD", "    step1[a]"]
        assert next_node_id_from_lines(lines, prefix="step") == "step2"


class TestUsedIds:
    """Tests for collecting used ids."""

    def test_collects_declarations_and_endpoints(self):
        """Test that both node lines and edge endpoints are collected."""
        lines = ["flowchart TD", "    A[x]", "    B --> C[y]", "    style D fill:#fff"]
        assert used_ids(lines) == {"A", "B", "C"}
