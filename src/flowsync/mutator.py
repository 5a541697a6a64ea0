"""
Incremental mutations of a diagram.

Structured edits (drop a shape, connect two nodes, save the edit dialog,
delete an element) patch the diagram text and the model together instead of
re-parsing everything. Each operation takes a Diagram and returns a new one;
the result is always identical to what parsing the new text would produce.

When an operation cannot find the line it has to change it does nothing: the
original Diagram is returned together with a diagnostic, so the text is never
left half-edited.

Example:
    >>> diagram = parse_diagram("flowchart TD\\n    A[Start]\\n    B[End]")
    >>> result = apply(diagram, CreateEdge("A", "B"))
    >>> result.diagram.lines[-1]
    '    A --> B'
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .errors import Diagnostic, DiagnosticKind
from .graph import DiagramGraph
from .ids import DEFAULT_PREFIX, next_node_id_from_lines
from .lexer import EdgeDecl, LinkStyleDecl, NodeDecl, StyleDecl, classify_line
from .linkstyle import edge_locations, locate_edge, remove_edges, replace_link_style
from .models import (
    Diagram,
    Edge,
    EdgeStyle,
    GraphModel,
    Node,
    NodeStyle,
    next_edge_id,
    reindex_edges,
)
from .parser import apply_edge_properties, apply_node_properties, reconcile_nodes
from .serializer import (
    DEFAULT_HEADER,
    INDENT,
    serialize_edge,
    serialize_edge_style,
    serialize_node,
    serialize_node_style,
)
from .shapes import Shape

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"\w+")
DEFAULT_LABEL = "New Node"


@dataclass(frozen=True)
class CreateNode:
    shape: Union[Shape, str] = Shape.RECTANGLE
    label: Optional[str] = None


@dataclass(frozen=True)
class CreateEdge:
    source: str
    target: str


@dataclass(frozen=True)
class UpdateNode:
    id: str
    label: str
    shape: Union[Shape, str] = Shape.RECTANGLE
    style: NodeStyle = field(default_factory=NodeStyle)


@dataclass(frozen=True)
class UpdateEdge:
    id: str
    label: str = ""
    style: EdgeStyle = field(default_factory=EdgeStyle)


@dataclass(frozen=True)
class DeleteNode:
    id: str


@dataclass(frozen=True)
class DeleteEdge:
    """
    Delete one edge line.

    ``source`` and ``target`` default to those of the model edge ``id``;
    ``label``, when given, must match the edge line too.
    """

    id: str
    source: Optional[str] = None
    target: Optional[str] = None
    label: Optional[str] = None


Operation = Union[CreateNode, CreateEdge, UpdateNode, UpdateEdge, DeleteNode, DeleteEdge]


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of applying an operation.

    Attributes:
        diagram: The new diagram, or the unchanged input on failure.
        diagnostic: Why the operation was a no-op, if it was.
        created_id: Id of the node or edge created by the operation.
    """

    diagram: Diagram
    diagnostic: Optional[Diagnostic] = None
    created_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None


class Mutator:
    """
    Applies structured edit operations to diagrams.

    Example:
        >>> mutator = Mutator(header="flowchart LR")
        >>> result = mutator.apply(parse_diagram(""), CreateNode(Shape.CIRCLE, "Hi"))
        >>> result.diagram.text
        'flowchart LR\\n    node1((Hi))'
    """

    def __init__(
        self,
        indent: str = INDENT,
        header: str = DEFAULT_HEADER,
        default_label: str = DEFAULT_LABEL,
        id_prefix: str = DEFAULT_PREFIX,
    ):
        """
        Initialize the mutator.

        Args:
            indent: Indentation for lines the mutator writes.
            header: Header line written when creating into an empty diagram.
            default_label: Label for CreateNode without an explicit label.
            id_prefix: Prefix of allocated node ids (``node1``, ``node2``...).
        """
        self.indent = indent
        self.header = header
        self.default_label = default_label
        self.id_prefix = id_prefix
        self._handlers: Dict[type, Callable[[Diagram, Operation], MutationResult]] = {
            CreateNode: self.create_node,
            CreateEdge: self.create_edge,
            UpdateNode: self.update_node,
            UpdateEdge: self.update_edge,
            DeleteNode: self.delete_node,
            DeleteEdge: self.delete_edge,
        }

    def apply(self, diagram: Diagram, operation: Operation) -> MutationResult:
        """
        Apply one operation.

        Args:
            diagram: Current diagram.
            operation: One of the operation records of this module.

        Returns:
            MutationResult holding the new diagram or the original plus a
            diagnostic.

        Raises:
            TypeError: If ``operation`` is not a known operation type.
            UnknownShapeError: If the operation names an unregistered shape.
        """
        handler = self._handlers.get(type(operation))
        if handler is None:
            raise TypeError(f"Unsupported operation: {operation!r}")
        result = handler(diagram, operation)
        if result.ok:
            logger.debug("Applied %s", operation)
        else:
            logger.warning("%s left the diagram unchanged: %s", operation, result.diagnostic)
        return result

    # -- creation ---------------------------------------------------------

    def create_node(self, diagram: Diagram, op: CreateNode) -> MutationResult:
        shape = Shape.coerce(op.shape)
        label = self.default_label if op.label is None else op.label
        lines = self._start_lines(diagram)

        node_id = next_node_id_from_lines(lines, self.id_prefix)
        node = Node(id=node_id, label=label, shape=shape)
        if not _node_line_reads_back(node):
            return _unwritable_label(diagram, node)
        lines.insert(_append_index(lines), serialize_node(node, self.indent))

        declared = [n for n in diagram.nodes if n.declared] + [node]
        model = self._model(declared, diagram.edges, diagram.nodes, lines)
        return MutationResult(_diagram(lines, model), created_id=node_id)

    def create_edge(self, diagram: Diagram, op: CreateEdge) -> MutationResult:
        for node_id in (op.source, op.target):
            if not IDENTIFIER_PATTERN.fullmatch(node_id or ""):
                return _failed(
                    diagram,
                    DiagnosticKind.MALFORMED_EDGE,
                    f"'{node_id}' is not a valid node id",
                )
        lines = self._start_lines(diagram)

        edge = Edge(
            id=next_edge_id(diagram.edges, op.source, op.target),
            source=op.source,
            target=op.target,
        )
        edge = self._link_styled_from_text(edge, len(diagram.edges), lines)
        lines.insert(_append_index(lines), serialize_edge(edge, self.indent))

        edges = diagram.edges + (edge,)
        declared = [n for n in diagram.nodes if n.declared]
        model = self._model(declared, edges, diagram.nodes, lines)
        return MutationResult(_diagram(lines, model), created_id=edge.id)

    # -- updates ----------------------------------------------------------

    def update_node(self, diagram: Diagram, op: UpdateNode) -> MutationResult:
        shape = Shape.coerce(op.shape)
        current = diagram.model.get_node(op.id)
        lines = list(diagram.lines)
        decl_numbers = _node_decl_numbers(lines, op.id)
        if current is None and not decl_numbers:
            return _failed(
                diagram, DiagnosticKind.LINE_NOT_FOUND, f"No node line for '{op.id}'"
            )

        node = Node(id=op.id, label=op.label, shape=shape, style=op.style)
        stale = [
            number for number in decl_numbers if not _declares(lines[number], shape, op.label)
        ]
        if (stale or not decl_numbers) and not _node_line_reads_back(node):
            return _unwritable_label(diagram, node)
        for number in stale:
            lines[number] = serialize_node(node, _indent_of(lines[number]))

        if decl_numbers:
            declared = [node if n.id == op.id else n for n in diagram.nodes if n.declared]
        else:
            # Edge-only node: editing it writes its declaration line
            lines.insert(_append_index(lines), serialize_node(node, self.indent))
            declared = [n for n in diagram.nodes if n.declared] + [node]

        self._write_node_style(lines, node)
        model = self._model(declared, diagram.edges, diagram.nodes, lines)
        return MutationResult(_diagram(lines, model))

    def update_edge(self, diagram: Diagram, op: UpdateEdge) -> MutationResult:
        edge = diagram.model.get_edge(op.id)
        if edge is None:
            return _failed(
                diagram, DiagnosticKind.LINE_NOT_FOUND, f"No edge with id '{op.id}'"
            )
        lines = list(diagram.lines)
        location = locate_edge(lines, edge.source, edge.target, id_=edge.id)
        if location is None:
            return _failed(
                diagram, DiagnosticKind.LINE_NOT_FOUND, f"No edge line for '{op.id}'"
            )

        decl = location.decl
        if (decl.label or "") != op.label:
            # Inline shapes on the endpoints are kept as written
            written = replace(
                edge, source=decl.source_raw, target=decl.target_raw, label=op.label
            )
            line = serialize_edge(written, _indent_of(lines[location.line_number]))
            if not _edge_line_reads_back(line, edge, op.label):
                return _failed(
                    diagram,
                    DiagnosticKind.MALFORMED_EDGE,
                    f"Label {op.label!r} cannot be written on an edge line",
                )
            lines[location.line_number] = line
        lines = replace_link_style(
            lines,
            location.position,
            serialize_edge_style(location.position, op.style, self.indent),
        )

        updated = replace(edge, label=op.label, style=op.style)
        edges = tuple(updated if e.id == edge.id else e for e in diagram.edges)
        return MutationResult(_diagram(lines, replace(diagram.model, edges=edges)))

    # -- deletion ---------------------------------------------------------

    def delete_node(self, diagram: Diagram, op: DeleteNode) -> MutationResult:
        lines = list(diagram.lines)
        owned = [
            number
            for number, line in enumerate(lines)
            if _references_node(line, number, op.id)
        ]
        incident = [
            location.position
            for location in edge_locations(lines)
            if op.id in (location.decl.source, location.decl.target)
        ]
        if not owned and not incident:
            return _failed(
                diagram, DiagnosticKind.LINE_NOT_FOUND, f"No lines for node '{op.id}'"
            )

        lines = remove_edges(lines, incident)
        lines = [
            line
            for number, line in enumerate(lines)
            if not _references_node(line, number, op.id)
        ]

        removed = set(DiagramGraph(diagram.model).incident_edge_ids(op.id))
        edges = reindex_edges(e for e in diagram.edges if e.id not in removed)
        declared = [n for n in diagram.nodes if n.declared and n.id != op.id]
        previous = [n for n in diagram.nodes if n.id != op.id]
        model = self._model(declared, edges, previous, lines)
        return MutationResult(_diagram(lines, model))

    def delete_edge(self, diagram: Diagram, op: DeleteEdge) -> MutationResult:
        edge = diagram.model.get_edge(op.id)
        source, target = op.source, op.target
        if edge is not None:
            source = edge.source if source is None else source
            target = edge.target if target is None else target
        if source is None or target is None:
            return _failed(
                diagram, DiagnosticKind.LINE_NOT_FOUND, f"No edge with id '{op.id}'"
            )

        lines = list(diagram.lines)
        id_ = op.id if edge is not None else None
        location = locate_edge(lines, source, target, label=op.label, id_=id_)
        if location is None:
            return _failed(
                diagram,
                DiagnosticKind.LINE_NOT_FOUND,
                f"No edge line for {source} --> {target}",
            )

        lines = remove_edges(lines, [location.position])
        edges = reindex_edges(
            e for position, e in enumerate(diagram.edges) if position != location.position
        )
        declared = [n for n in diagram.nodes if n.declared]
        model = self._model(declared, edges, diagram.nodes, lines)
        return MutationResult(_diagram(lines, model))

    # -- helpers ----------------------------------------------------------

    def _start_lines(self, diagram: Diagram) -> List[str]:
        if diagram.is_empty:
            return [self.header]
        return list(diagram.lines)

    def _write_node_style(self, lines: List[str], node: Node) -> None:
        """Make the node's style lines say ``node.style``, editing in place."""
        numbers = [
            number
            for number, line in enumerate(lines)
            if _is_style_for(line, number, node.id)
        ]
        if not numbers:
            if not node.style.is_default:
                lines.insert(
                    _append_index(lines),
                    serialize_node_style(node.id, node.style, self.indent),
                )
            return

        if _effective_node_style(lines, numbers) == node.style:
            return
        first = numbers[0]
        lines[first] = serialize_node_style(node.id, node.style, _indent_of(lines[first]))
        for number in reversed(numbers[1:]):
            del lines[number]

    def _styled_from_text(self, node: Node, lines: Sequence[str]) -> Node:
        """Apply style lines already present for a fresh node id."""
        numbers = [
            number for number, line in enumerate(lines) if _is_style_for(line, number, node.id)
        ]
        if not numbers:
            return node
        return replace(node, style=_effective_node_style(lines, numbers))

    def _link_styled_from_text(self, edge: Edge, position: int, lines: Sequence[str]) -> Edge:
        """Apply ``linkStyle`` lines already present for a fresh edge position."""
        style = edge.style
        for number, line in enumerate(lines):
            decl = classify_line(line, number)
            if isinstance(decl, LinkStyleDecl) and decl.index == position:
                style = apply_edge_properties(style, decl.as_dict())
        return replace(edge, style=style)

    def _model(
        self,
        declared: Sequence[Node],
        edges: Sequence[Edge],
        previous: Sequence[Node],
        lines: Sequence[str],
    ) -> GraphModel:
        """Node list with placeholders for edge endpoints, styled from text."""
        known = {n.id for n in previous}
        nodes = [
            n if n.id in known else self._styled_from_text(n, lines)
            for n in reconcile_nodes(declared, edges, previous)
        ]
        return GraphModel(nodes=tuple(nodes), edges=tuple(edges))


def _diagram(lines: Iterable[str], model: GraphModel) -> Diagram:
    return Diagram(lines=tuple(lines), model=model)


def _failed(diagram: Diagram, kind: DiagnosticKind, message: str) -> MutationResult:
    return MutationResult(diagram, Diagnostic(kind, message))


def _breaks_line(text: str) -> bool:
    return "\n" in text or "\r" in text


def _node_line_reads_back(node: Node) -> bool:
    """True if the declaration line for ``node`` classifies back to the same node."""
    if _breaks_line(node.label):
        return False
    decl = classify_line(serialize_node(node))
    if not isinstance(decl, NodeDecl) or decl.id != node.id:
        return False
    decoded = decl.decoded
    return (decoded.shape, decoded.label) == (node.shape, node.label)


def _edge_line_reads_back(line: str, edge: Edge, label: str) -> bool:
    if _breaks_line(label):
        return False
    decl = classify_line(line)
    return (
        isinstance(decl, EdgeDecl)
        and (decl.source, decl.target) == (edge.source, edge.target)
        and (decl.label or "") == label
    )


def _unwritable_label(diagram: Diagram, node: Node) -> MutationResult:
    return _failed(
        diagram,
        DiagnosticKind.UNRECOGNIZED_SHAPE,
        f"Label {node.label!r} cannot be written as a {node.shape.value} node",
    )


def _append_index(lines: Sequence[str]) -> int:
    """Insert position after the last non-blank line."""
    for number in range(len(lines) - 1, -1, -1):
        if lines[number].strip():
            return number + 1
    return len(lines)


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _node_decl_numbers(lines: Sequence[str], node_id: str) -> List[int]:
    numbers = []
    for number, line in enumerate(lines):
        decl = classify_line(line, number)
        if isinstance(decl, NodeDecl) and decl.id == node_id:
            numbers.append(number)
    return numbers


def _declares(line: str, shape: Shape, label: str) -> bool:
    decoded = classify_line(line).decoded
    return (decoded.shape, decoded.label) == (shape, label)


def _is_style_for(line: str, number: int, node_id: str) -> bool:
    decl = classify_line(line, number)
    return isinstance(decl, StyleDecl) and decl.node_id == node_id


def _references_node(line: str, number: int, node_id: str) -> bool:
    """Declaration and style lines owned by ``node_id``."""
    decl = classify_line(line, number)
    if isinstance(decl, NodeDecl):
        return decl.id == node_id
    if isinstance(decl, StyleDecl):
        return decl.node_id == node_id
    return False


def _effective_node_style(lines: Sequence[str], numbers: Sequence[int]) -> NodeStyle:
    style = NodeStyle()
    for number in numbers:
        style = apply_node_properties(style, classify_line(lines[number], number).as_dict())
    return style


_default_mutator = Mutator()


def apply(diagram: Diagram, operation: Operation) -> MutationResult:
    """Apply an operation with the default mutator settings."""
    return _default_mutator.apply(diagram, operation)
