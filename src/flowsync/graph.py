"""
Graph module for diagram models.

Provides a networkx view of a GraphModel for structural queries: incident
edges (used by node deletion), neighbours, roots, leaves and cycles.
"""

from typing import List

import networkx as nx

from .models import GraphModel


def to_networkx(model: GraphModel) -> nx.MultiDiGraph:
    """
    Build a networkx multigraph from a model.

    Parallel edges between the same pair of nodes are kept apart by using the
    edge id as the multigraph key.

    Args:
        model: The diagram model.

    Returns:
        MultiDiGraph with node attributes ``label``, ``shape``, ``declared``
        and edge attributes ``label``, ``position``.
    """
    graph = nx.MultiDiGraph()
    for node in model.nodes:
        graph.add_node(
            node.id, label=node.label, shape=node.shape, declared=node.declared
        )
    for position, edge in enumerate(model.edges):
        graph.add_edge(
            edge.source, edge.target, key=edge.id, label=edge.label, position=position
        )
    return graph


class DiagramGraph:
    """Directed graph queries over a diagram model."""

    def __init__(self, model: GraphModel):
        self.model = model
        self.graph = to_networkx(model)

    def incident_edge_ids(self, node_id: str) -> List[str]:
        """Ids of edges starting or ending at ``node_id``, in text order."""
        if node_id not in self.graph:
            return []
        keys = {key for _, _, key in self.graph.out_edges(node_id, keys=True)}
        keys.update(key for _, _, key in self.graph.in_edges(node_id, keys=True))
        return [edge.id for edge in self.model.edges if edge.id in keys]

    def get_successors(self, node_id: str) -> List[str]:
        """Get all nodes that this node points to."""
        if node_id not in self.graph:
            return []
        return list(self.graph.successors(node_id))

    def get_predecessors(self, node_id: str) -> List[str]:
        """Get all nodes that point to this node."""
        if node_id not in self.graph:
            return []
        return list(self.graph.predecessors(node_id))

    def get_roots(self) -> List[str]:
        """Get nodes with no incoming edges."""
        return [n for n in self.graph.nodes if self.graph.in_degree(n) == 0]

    def get_leaves(self) -> List[str]:
        """Get nodes with no outgoing edges."""
        return [n for n in self.graph.nodes if self.graph.out_degree(n) == 0]

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self.graph)

    def topological_sort(self) -> List[str]:
        """
        Return node ids in topological order.

        Falls back to declaration order when the graph has a cycle.
        """
        try:
            return list(nx.topological_sort(self.graph))
        except nx.NetworkXUnfeasible:
            return list(self.graph.nodes)
