"""
Data models for diagram synchronization.

This module contains the value types shared by the parser, the serializer and
the mutator. All of them are frozen dataclasses: a mutation never edits a
model in place, it builds a new one with ``dataclasses.replace``.

Classes:
    BorderStyle: Enumerated node border styles.
    NodeStyle: Visual style of a node (colors, border).
    EdgeStyle: Visual style of an edge (line and label colors).
    Node: A graph vertex declared (or referenced) in the diagram text.
    Edge: A connection declared by an edge line.
    GraphModel: Ordered node and edge collections derived from the text.
    Diagram: Text lines plus the model derived from them.
"""

import math
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

from .shapes import Shape

DEFAULT_TEXT_COLOR = "#000000"
DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_BORDER_COLOR = "#000000"
DEFAULT_BORDER_WIDTH = 1.0
DEFAULT_LINE_COLOR = "#6b7280"
DEFAULT_LABEL_COLOR = "#000000"

# Style property values are written unquoted into a key:value,key:value list
COLOR_PATTERN = re.compile(r"[^,:;\s]*")


def is_valid_color(value: str) -> bool:
    """True if ``value`` can be written as a style property and read back."""
    return isinstance(value, str) and COLOR_PATTERN.fullmatch(value) is not None


def _check_colors(style, names) -> None:
    for name in names:
        value = getattr(style, name)
        if not is_valid_color(value):
            raise ValueError(f"{name} must not contain , : ; or whitespace, got {value!r}")


class BorderStyle(Enum):
    """Node border line styles."""

    SOLID = "solid"
    DASHED = "dashed"


@dataclass(frozen=True)
class NodeStyle:
    """
    Visual style of a node, written as a ``style <id> ...`` line.

    Attributes:
        text_color: Label color (``color``).
        background_color: Fill color (``fill``).
        border_color: Border color (``stroke``).
        border_width: Border width in pixels (``stroke-width``).
        border_style: Solid or dashed border (``stroke-dasharray``).
    """

    text_color: str = DEFAULT_TEXT_COLOR
    background_color: str = DEFAULT_BACKGROUND_COLOR
    border_color: str = DEFAULT_BORDER_COLOR
    border_width: float = DEFAULT_BORDER_WIDTH
    border_style: BorderStyle = BorderStyle.SOLID

    def __post_init__(self):
        if not math.isfinite(self.border_width) or self.border_width < 0:
            raise ValueError(f"border_width must be a finite number >= 0, got {self.border_width}")
        _check_colors(self, ("text_color", "background_color", "border_color"))

    @property
    def is_default(self) -> bool:
        return self == NodeStyle()


@dataclass(frozen=True)
class EdgeStyle:
    """
    Visual style of an edge, written as a ``linkStyle <index> ...`` line.

    Attributes:
        line_color: Stroke color of the connector (``stroke``).
        label_color: Color of the edge label (``color``).
    """

    line_color: str = DEFAULT_LINE_COLOR
    label_color: str = DEFAULT_LABEL_COLOR

    def __post_init__(self):
        _check_colors(self, ("line_color", "label_color"))

    @property
    def is_default(self) -> bool:
        return self == EdgeStyle()


@dataclass(frozen=True)
class Node:
    """
    A graph vertex.

    Attributes:
        id: Identifier token, unique within a diagram.
        label: Text shown inside the shape.
        shape: Node shape.
        style: Visual style.
        declared: False for nodes that only appear as an edge endpoint; such
            nodes exist in the model but have no declaration line yet.
    """

    id: str
    label: str
    shape: Shape = Shape.RECTANGLE
    style: NodeStyle = field(default_factory=NodeStyle)
    declared: bool = True


@dataclass(frozen=True)
class Edge:
    """
    A directed connection between two node ids.

    Attributes:
        id: Derived from source and target (see ``edge_id``).
        source: Source node id.
        target: Target node id (may not be declared).
        label: Optional text written between pipes on the arrow.
        style: Visual style.
    """

    id: str
    source: str
    target: str
    label: str = ""
    style: EdgeStyle = field(default_factory=EdgeStyle)


def edge_id(source: str, target: str, occurrence: int = 0) -> str:
    """
    Build the identity of an edge.

    The first edge between a pair of nodes is ``edge_<source>_<target>``;
    later duplicates of the same pair get ``_<occurrence>`` appended.
    """
    base = f"edge_{source}_{target}"
    if occurrence:
        return f"{base}_{occurrence}"
    return base


def next_edge_id(edges: Iterable[Edge], source: str, target: str) -> str:
    """Id for a new edge appended after ``edges``."""
    occurrence = sum(1 for e in edges if e.source == source and e.target == target)
    return edge_id(source, target, occurrence)


@dataclass(frozen=True)
class GraphModel:
    """
    Structured view of a diagram.

    Edge order is text order: the position of an edge in ``edges`` is its
    link-style index.
    """

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, id_: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == id_:
                return edge
        return None

    def edge_index(self, id_: str) -> int:
        """Link-style index of an edge, or -1 if absent."""
        for index, edge in enumerate(self.edges):
            if edge.id == id_:
                return index
        return -1

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(node.id for node in self.nodes)


@dataclass(frozen=True)
class Diagram:
    """
    Diagram text (the source of truth) plus the model derived from it.

    Attributes:
        lines: Text lines in order, without line terminators.
        model: Nodes and edges reproducible by re-parsing ``lines``.
    """

    lines: Tuple[str, ...] = ()
    model: GraphModel = field(default_factory=GraphModel)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self.model.nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self.model.edges

    @property
    def is_empty(self) -> bool:
        return not any(line.strip() for line in self.lines)


def split_lines(text: str) -> Tuple[str, ...]:
    """Split diagram text into lines; empty text has no lines."""
    if text == "":
        return ()
    return tuple(text.split("\n"))


def reindex_edges(edges: Iterable[Edge]) -> Tuple[Edge, ...]:
    """Recompute edge ids after edges were removed or reordered."""
    result = []
    for edge in edges:
        new_id = next_edge_id(result, edge.source, edge.target)
        result.append(edge if edge.id == new_id else replace(edge, id=new_id))
    return tuple(result)
