"""
Node id allocation.

New node ids are derived from the current text on every call; there is no
persisted counter, so ids freed by a deletion are reused before higher
numbers are handed out.
"""

from typing import Iterable, Set

from .lexer import EdgeDecl, NodeDecl, classify_lines
from .models import split_lines

DEFAULT_PREFIX = "node"


def used_ids(lines: Iterable[str]) -> Set[str]:
    """Ids declared by node lines or referenced by edge lines."""
    ids: Set[str] = set()
    for line in classify_lines(lines):
        if isinstance(line, NodeDecl):
            ids.add(line.id)
        elif isinstance(line, EdgeDecl):
            ids.add(line.source)
            ids.add(line.target)
    return ids


def next_node_id_from_lines(lines: Iterable[str], prefix: str = DEFAULT_PREFIX) -> str:
    """Return ``prefix`` + the smallest positive integer not already in use."""
    taken = used_ids(lines)
    counter = 1
    while f"{prefix}{counter}" in taken:
        counter += 1
    return f"{prefix}{counter}"


def next_node_id(text: str, prefix: str = DEFAULT_PREFIX) -> str:
    """
    Allocate the next free node id for a diagram.

    Example:
        >>> next_node_id("flowchart TD\\n    node1[A]\\n    node3[B]")
        'node2'
    """
    return next_node_id_from_lines(split_lines(text), prefix)
