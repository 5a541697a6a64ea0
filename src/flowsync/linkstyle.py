"""
Link-style index bookkeeping.

A ``linkStyle N ...`` directive styles the Nth edge line of the diagram
(0-based, top to bottom). Edges have no stable handle in the text, so every
edit that adds, moves or removes an edge line has to keep those indices
pointing at the same edges. The helpers here locate edge lines by position
and renumber link-style lines after deletions.
"""

import re
from bisect import bisect_left
from dataclasses import dataclass
from typing import Collection, Dict, List, Optional, Sequence, Tuple

from .lexer import EdgeDecl, LinkStyleDecl, classify_line
from .models import edge_id

LINK_STYLE_INDEX_PATTERN = re.compile(r"^(\s*linkStyle\s+)(\d+)")


@dataclass(frozen=True)
class EdgeLocation:
    """
    Where an edge is written.

    Attributes:
        line_number: Index of the edge line in the diagram lines.
        position: Link-style index of the edge (its rank among edge lines).
        decl: The classified edge line.
        id: Edge id derived from the line and its duplicate count.
    """

    line_number: int
    position: int
    decl: EdgeDecl
    id: str


def edge_locations(lines: Sequence[str]) -> List[EdgeLocation]:
    """All edge lines in text order."""
    locations = []
    seen: Dict[Tuple[str, str], int] = {}
    for number, line in enumerate(lines):
        decl = classify_line(line, number)
        if not isinstance(decl, EdgeDecl):
            continue
        pair = (decl.source, decl.target)
        occurrence = seen.get(pair, 0)
        seen[pair] = occurrence + 1
        locations.append(
            EdgeLocation(
                line_number=number,
                position=len(locations),
                decl=decl,
                id=edge_id(decl.source, decl.target, occurrence),
            )
        )
    return locations


def locate_edge(
    lines: Sequence[str],
    source: str,
    target: str,
    label: Optional[str] = None,
    id_: Optional[str] = None,
) -> Optional[EdgeLocation]:
    """
    Find the first edge line matching ``source`` and ``target``.

    Args:
        lines: Diagram lines.
        source: Source node id.
        target: Target node id.
        label: If given, the edge label must also match.
        id_: If given, the derived edge id must also match; this selects
            one of several edges between the same pair of nodes.

    Returns:
        The location, or None if no edge line matches.
    """
    for location in edge_locations(lines):
        decl = location.decl
        if decl.source != source or decl.target != target:
            continue
        if label is not None and (decl.label or "") != label:
            continue
        if id_ is not None and location.id != id_:
            continue
        return location
    return None


def link_style_line_numbers(lines: Sequence[str], index: int) -> List[int]:
    """Line numbers of every ``linkStyle <index>`` directive."""
    return [
        number
        for number, line in enumerate(lines)
        if _link_style_index(line, number) == index
    ]


def renumber_link_style(line: str, new_index: int) -> str:
    """Rewrite the index of a link-style line, keeping everything else."""
    return LINK_STYLE_INDEX_PATTERN.sub(
        lambda match: f"{match.group(1)}{new_index}", line, count=1
    )


def remove_edges(lines: Sequence[str], positions: Collection[int]) -> List[str]:
    """
    Remove edge lines by link-style index and keep the indices consistent.

    In a single pass over the lines: the edge lines at ``positions`` are
    dropped, their ``linkStyle`` directives are dropped, and every other
    ``linkStyle k`` is renumbered to ``k`` minus the number of removed
    positions below ``k``. All remaining lines keep their relative order.

    Args:
        lines: Diagram lines.
        positions: Link-style indices of the edges to remove.

    Returns:
        The new line list.
    """
    removed = sorted(set(positions))
    removed_set = set(removed)
    result = []
    edge_position = -1
    for number, line in enumerate(lines):
        decl = classify_line(line, number)
        if isinstance(decl, EdgeDecl):
            edge_position += 1
            if edge_position in removed_set:
                continue
        elif isinstance(decl, LinkStyleDecl):
            if decl.index in removed_set:
                continue
            shift = bisect_left(removed, decl.index)
            if shift:
                line = renumber_link_style(line, decl.index - shift)
        result.append(line)
    return result


def replace_link_style(
    lines: Sequence[str], position: int, style_line: str
) -> List[str]:
    """
    Replace the link-style directive of the edge at ``position``.

    Existing ``linkStyle <position>`` lines are removed first, then
    ``style_line`` is inserted directly after the edge line.
    """
    result = [
        line
        for number, line in enumerate(lines)
        if _link_style_index(line, number) != position
    ]
    locations = edge_locations(result)
    if position >= len(locations):
        raise IndexError(f"No edge at link-style index {position}")
    result.insert(locations[position].line_number + 1, style_line)
    return result


def _link_style_index(line: str, number: int) -> Optional[int]:
    decl = classify_line(line, number)
    if isinstance(decl, LinkStyleDecl):
        return decl.index
    return None
