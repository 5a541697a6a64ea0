"""
flowsync - Keep flowchart text and its graph model in lock-step

A Python library for editing a flowchart both as description-language text
and as a structured graph of nodes and edges, without ever losing unrelated
lines of the text.

Example:
    >>> from flowsync import CreateEdge, apply, parse_diagram
    >>> diagram = parse_diagram('''flowchart TD
    ...     A[Start]
    ...     B[End]''')
    >>> result = apply(diagram, CreateEdge("A", "B"))
    >>> print(result.diagram.text)
    flowchart TD
        A[Start]
        B[End]
        A --> B

Session Example:
    >>> session = EditorSession.from_query("?code=flowchart%20LR")
    >>> session.dispatch(CreateNode(Shape.CIRCLE, "Hi")).created_id
    'node1'
"""

from .errors import (
    Diagnostic,
    DiagnosticKind,
    FlowSyncError,
    RenderError,
    UnknownShapeError,
)
from .graph import DiagramGraph, to_networkx
from .ids import next_node_id
from .lexer import (
    EdgeDecl,
    Header,
    LineClassifier,
    LinkStyleDecl,
    NodeDecl,
    Other,
    StyleDecl,
    classify_line,
)
from .models import (
    BorderStyle,
    Diagram,
    Edge,
    EdgeStyle,
    GraphModel,
    Node,
    NodeStyle,
)
from .mutator import (
    CreateEdge,
    CreateNode,
    DeleteEdge,
    DeleteNode,
    MutationResult,
    Mutator,
    UpdateEdge,
    UpdateNode,
    apply,
)
from .parser import ParseResult, Parser, parse_diagram
from .preview import ShapePreviewRenderer, render_shape_preview
from .serializer import (
    serialize_edge,
    serialize_edge_style,
    serialize_model,
    serialize_node,
    serialize_node_style,
)
from .session import (
    BoundingBox,
    EditorSession,
    HitTestOverlay,
    RenderCoordinator,
    RenderOutcome,
    RenderRequest,
)
from .shapes import SHAPE_TABLE, Shape, ShapeSymbol, decode, encode, shape_catalogue
from .templates import (
    DIAGRAM_TEMPLATES,
    DIAGRAM_TYPES,
    share_link,
    text_from_query,
    validate_diagram_text,
)

__version__ = "0.1.0"

__all__ = [
    # Main API
    "parse_diagram",
    "apply",
    "EditorSession",
    # Model
    "Diagram",
    "GraphModel",
    "Node",
    "Edge",
    "NodeStyle",
    "EdgeStyle",
    "BorderStyle",
    # Shapes
    "Shape",
    "ShapeSymbol",
    "SHAPE_TABLE",
    "shape_catalogue",
    "decode",
    "encode",
    # Parsing
    "Parser",
    "ParseResult",
    "LineClassifier",
    "classify_line",
    "Header",
    "NodeDecl",
    "EdgeDecl",
    "StyleDecl",
    "LinkStyleDecl",
    "Other",
    "next_node_id",
    # Mutations
    "Mutator",
    "MutationResult",
    "CreateNode",
    "CreateEdge",
    "UpdateNode",
    "UpdateEdge",
    "DeleteNode",
    "DeleteEdge",
    # Serializer
    "serialize_node",
    "serialize_edge",
    "serialize_node_style",
    "serialize_edge_style",
    "serialize_model",
    # Graph queries
    "DiagramGraph",
    "to_networkx",
    # Rendering collaboration
    "RenderCoordinator",
    "RenderRequest",
    "RenderOutcome",
    "BoundingBox",
    "HitTestOverlay",
    # Templates and links
    "DIAGRAM_TEMPLATES",
    "DIAGRAM_TYPES",
    "text_from_query",
    "share_link",
    "validate_diagram_text",
    # Previews
    "ShapePreviewRenderer",
    "render_shape_preview",
    # Errors
    "FlowSyncError",
    "UnknownShapeError",
    "RenderError",
    "Diagnostic",
    "DiagnosticKind",
]
