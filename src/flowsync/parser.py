"""
Parser module for diagram text.

Builds the structured graph model from classified lines. Parsing never fails:
lines it does not understand are kept verbatim in the diagram and reported as
diagnostics.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import Diagnostic, DiagnosticKind
from .lexer import (
    EdgeDecl,
    Header,
    LineClassifier,
    LinkStyleDecl,
    NodeDecl,
    Other,
    StyleDecl,
    looks_like_edge,
)
from .models import (
    BorderStyle,
    Diagram,
    Edge,
    EdgeStyle,
    GraphModel,
    Node,
    NodeStyle,
    edge_id,
    is_valid_color,
    split_lines,
)

logger = logging.getLogger(__name__)

WIDTH_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)(?:px)?$")
SHAPE_ATTEMPT_PATTERN = re.compile(r"^\w+[\[\(\{>]")


@dataclass
class ParseResult:
    """Result of parsing diagram text."""

    diagram: Diagram = field(default_factory=Diagram)
    header: Optional[Header] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)


def _color_changes(properties: Mapping[str, str], fields: Mapping[str, str]) -> Dict[str, str]:
    changes = {}
    for key, name in fields.items():
        value = properties.get(key)
        if value is None:
            continue
        if is_valid_color(value):
            changes[name] = value
        else:
            logger.debug("Ignoring %s value %r", key, value)
    return changes


def apply_node_properties(style: NodeStyle, properties: Mapping[str, str]) -> NodeStyle:
    """
    Overwrite the fields of ``style`` named by ``properties``.

    Recognised keys are ``stroke``, ``stroke-width``, ``color``, ``fill`` and
    ``stroke-dasharray``. Unknown keys, unparseable widths and colors that
    could not be written back are ignored.
    """
    changes = _color_changes(
        properties, {"stroke": "border_color", "color": "text_color", "fill": "background_color"}
    )
    if "stroke-width" in properties:
        match = WIDTH_PATTERN.match(properties["stroke-width"])
        if match:
            changes["border_width"] = float(match.group(1))
    if "stroke-dasharray" in properties:
        dashes = properties["stroke-dasharray"].strip()
        dashed = dashes not in ("", "0", "none")
        changes["border_style"] = BorderStyle.DASHED if dashed else BorderStyle.SOLID
    return replace(style, **changes)


def apply_edge_properties(style: EdgeStyle, properties: Mapping[str, str]) -> EdgeStyle:
    """Overwrite ``line_color`` (``stroke``) and ``label_color`` (``color``)."""
    changes = _color_changes(properties, {"stroke": "line_color", "color": "label_color"})
    return replace(style, **changes)


def node_from_decl(decl: NodeDecl) -> Node:
    decoded = decl.decoded
    return Node(id=decl.id, label=decoded.label, shape=decoded.shape)


def placeholder_node(node_id: str) -> Node:
    """Model-only node for an id that is referenced by an edge but not declared."""
    return Node(id=node_id, label=node_id, declared=False)


def build_edges(decls: Sequence[EdgeDecl]) -> List[Edge]:
    """Edges in declaration order, with duplicate pairs discriminated."""
    seen: Dict[tuple, int] = {}
    edges = []
    for decl in decls:
        pair = (decl.source, decl.target)
        occurrence = seen.get(pair, 0)
        seen[pair] = occurrence + 1
        edges.append(
            Edge(
                id=edge_id(decl.source, decl.target, occurrence),
                source=decl.source,
                target=decl.target,
                label=decl.label or "",
            )
        )
    return edges


def reconcile_nodes(
    declared: Sequence[Node],
    edges: Sequence[Edge],
    previous: Sequence[Node] = (),
) -> List[Node]:
    """
    Complete a node list with placeholders for undeclared edge endpoints.

    Declared nodes keep their order; placeholders follow in the order their
    ids are first referenced by ``edges``. A placeholder that already exists
    in ``previous`` is reused so that its style survives.
    """
    nodes = list(declared)
    known = {node.id for node in nodes}
    kept = {node.id: node for node in previous if not node.declared}
    for edge in edges:
        for node_id in (edge.source, edge.target):
            if node_id not in known:
                known.add(node_id)
                nodes.append(kept.get(node_id) or placeholder_node(node_id))
    return nodes


class Parser:
    """Parses diagram text into a Diagram (lines plus graph model)."""

    def __init__(self, classifier: Optional[LineClassifier] = None):
        self.classifier = classifier or LineClassifier()

    def parse(self, input_text: str) -> Diagram:
        """
        Parse diagram text.

        Args:
            input_text: Complete diagram text.

        Returns:
            Diagram whose model is derived from the text.
        """
        return self.parse_with_diagnostics(input_text).diagram

    def parse_with_diagnostics(self, input_text: str) -> ParseResult:
        """
        Parse diagram text and report non-fatal problems.

        Single pass over the classified lines collecting declarations, then
        style lines are applied by node id and link-style lines by edge
        position.

        Args:
            input_text: Complete diagram text.

        Returns:
            ParseResult with the diagram, its header and any diagnostics.
        """
        lines = split_lines(input_text)
        classified = [
            self.classifier.classify(line, number) for number, line in enumerate(lines)
        ]
        result = ParseResult()

        declared: Dict[str, Node] = {}
        edge_decls: List[EdgeDecl] = []
        styles: List[StyleDecl] = []
        link_styles: List[LinkStyleDecl] = []

        for line in classified:
            if isinstance(line, Header):
                if result.header is None:
                    result.header = line
            elif isinstance(line, NodeDecl):
                # A repeated declaration updates the node in place
                declared[line.id] = node_from_decl(line)
            elif isinstance(line, EdgeDecl):
                edge_decls.append(line)
            elif isinstance(line, StyleDecl):
                styles.append(line)
            elif isinstance(line, LinkStyleDecl):
                link_styles.append(line)
            else:
                self._check_other(line, result.diagnostics)

        edges = build_edges(edge_decls)
        nodes = reconcile_nodes(list(declared.values()), edges)
        nodes = self._apply_styles(nodes, styles, result.diagnostics)
        edges = self._apply_link_styles(edges, link_styles, result.diagnostics)

        result.diagram = Diagram(
            lines=lines, model=GraphModel(nodes=tuple(nodes), edges=tuple(edges))
        )
        logger.debug(
            "Parsed %d lines into %d nodes and %d edges",
            len(lines),
            len(nodes),
            len(edges),
        )
        return result

    def _check_other(self, line: Other, diagnostics: List[Diagnostic]) -> None:
        stripped = line.text.strip()
        if looks_like_edge(stripped):
            diagnostics.append(
                Diagnostic(
                    DiagnosticKind.MALFORMED_EDGE,
                    f"Not a supported edge declaration: {stripped}",
                    line.line_number,
                )
            )
        elif SHAPE_ATTEMPT_PATTERN.match(stripped):
            diagnostics.append(
                Diagnostic(
                    DiagnosticKind.UNRECOGNIZED_SHAPE,
                    f"Unrecognized node shape: {stripped}",
                    line.line_number,
                )
            )

    def _apply_styles(
        self,
        nodes: List[Node],
        styles: List[StyleDecl],
        diagnostics: List[Diagnostic],
    ) -> List[Node]:
        index = {node.id: position for position, node in enumerate(nodes)}
        for decl in styles:
            position = index.get(decl.node_id)
            if position is None:
                diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.UNKNOWN_ELEMENT,
                        f"Style for unknown node '{decl.node_id}'",
                        decl.line_number,
                    )
                )
                continue
            node = nodes[position]
            nodes[position] = replace(
                node, style=apply_node_properties(node.style, decl.as_dict())
            )
        return nodes

    def _apply_link_styles(
        self,
        edges: List[Edge],
        link_styles: List[LinkStyleDecl],
        diagnostics: List[Diagnostic],
    ) -> List[Edge]:
        for decl in link_styles:
            if decl.index >= len(edges):
                diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.UNKNOWN_ELEMENT,
                        f"linkStyle {decl.index} has no matching edge",
                        decl.line_number,
                    )
                )
                continue
            edge = edges[decl.index]
            edges[decl.index] = replace(
                edge, style=apply_edge_properties(edge.style, decl.as_dict())
            )
        return edges


def parse_diagram(input_text: str) -> Diagram:
    """
    Convenience function to parse diagram text.

    Args:
        input_text: Complete diagram text.

    Returns:
        Diagram with lines and model.
    """
    parser = Parser()
    return parser.parse(input_text)
