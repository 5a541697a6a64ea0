"""
Serializer for diagram text.

Pure formatting functions that turn model values into canonical text lines.
Every function is deterministic given its input, and the parser reads back
exactly what these functions write.
"""

from decimal import Decimal
from typing import List

from .models import BorderStyle, Edge, EdgeStyle, GraphModel, Node, NodeStyle
from .shapes import encode

INDENT = "    "
DEFAULT_HEADER = "flowchart TD"
DASH_PATTERN = "5 5"


def format_width(width: float) -> str:
    """Format a border width in pixels, e.g. ``1px`` or ``0.5px``."""
    if float(width).is_integer():
        return f"{int(width)}px"
    # fixed-point, never exponent notation such as 1e-05
    return f"{Decimal(repr(float(width))):f}px"


def serialize_node(node: Node, indent: str = INDENT) -> str:
    """``    id[label]`` with the node's shape brackets."""
    return f"{indent}{node.id}{encode(node.shape, node.label)}"


def serialize_edge(edge: Edge, indent: str = INDENT) -> str:
    """``    source -->|label| target``; the pipe segment only when labelled."""
    line = f"{indent}{edge.source} -->"
    if edge.label:
        line += f"|{edge.label}|"
    return f"{line} {edge.target}"


def serialize_node_style(node_id: str, style: NodeStyle, indent: str = INDENT) -> str:
    """``    style <id> stroke-width:<w>,stroke:<border>,color:<color>,fill:<bg>``"""
    properties = [
        f"stroke-width:{format_width(style.border_width)}",
        f"stroke:{style.border_color}",
        f"color:{style.text_color}",
        f"fill:{style.background_color}",
    ]
    if style.border_style is BorderStyle.DASHED:
        properties.append(f"stroke-dasharray:{DASH_PATTERN}")
    return f"{indent}style {node_id} {','.join(properties)}"


def serialize_edge_style(index: int, style: EdgeStyle, indent: str = INDENT) -> str:
    """``    linkStyle <index> stroke:<color>,color:<labelColor>``"""
    return f"{indent}linkStyle {index} stroke:{style.line_color},color:{style.label_color}"


def serialize_model(model: GraphModel, header: str = DEFAULT_HEADER) -> str:
    """
    Render a whole model as diagram text.

    Layout is header, node lines, edge lines, then style and link-style lines.
    Nodes that are only edge endpoints get no declaration line, and default
    styles are not written, so parsing the result reproduces ``model``.

    Args:
        model: Nodes and edges to write.
        header: Diagram header line.

    Returns:
        Diagram text.
    """
    lines: List[str] = [header]
    lines.extend(serialize_node(node) for node in model.nodes if node.declared)
    lines.extend(serialize_edge(edge) for edge in model.edges)
    lines.extend(
        serialize_node_style(node.id, node.style)
        for node in model.nodes
        if not node.style.is_default
    )
    lines.extend(
        serialize_edge_style(index, edge.style)
        for index, edge in enumerate(model.edges)
        if not edge.style.is_default
    )
    return "\n".join(lines)
