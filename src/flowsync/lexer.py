"""
Line classifier for flowchart diagram text.

Each line of diagram text is classified into exactly one variant of a closed
set:

- ``Header``        ``flowchart TD``, ``graph LR``, ``sequenceDiagram`` ...
- ``NodeDecl``      ``A[Start]``, ``B((Round))``
- ``EdgeDecl``      ``A --> B``, ``A -->|yes| B{Check}``
- ``StyleDecl``     ``style A stroke:#333,fill:#fff``
- ``LinkStyleDecl`` ``linkStyle 0 stroke:#f00,color:#000``
- ``Other``         anything else (comments, blank lines, unsupported syntax)

Classification is total: it never raises, and unsupported lines are kept as
``Other`` so they can be passed through verbatim.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .shapes import OPEN_CHARS, DecodedShape, decode, match_shape

ARROW = "-->"

Properties = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class Header:
    keyword: str
    direction: Optional[str]
    line_number: int = 0


@dataclass(frozen=True)
class NodeDecl:
    id: str
    shape_text: str
    line_number: int = 0

    @property
    def decoded(self) -> DecodedShape:
        return decode(self.shape_text)


@dataclass(frozen=True)
class EdgeDecl:
    """
    An edge line. ``source_raw`` and ``target_raw`` are the endpoints as
    written, including any inline shape suffix; ``source`` and ``target``
    are the bare node ids.
    """

    source: str
    target: str
    label: Optional[str] = None
    target_raw: str = ""
    source_raw: str = ""
    line_number: int = 0


@dataclass(frozen=True)
class StyleDecl:
    node_id: str
    properties: Properties = ()
    line_number: int = 0

    def as_dict(self) -> Dict[str, str]:
        return dict(self.properties)


@dataclass(frozen=True)
class LinkStyleDecl:
    index: int
    properties: Properties = ()
    line_number: int = 0

    def as_dict(self) -> Dict[str, str]:
        return dict(self.properties)


@dataclass(frozen=True)
class Other:
    text: str
    line_number: int = 0


Line = Union[Header, NodeDecl, EdgeDecl, StyleDecl, LinkStyleDecl, Other]


def parse_properties(text: str) -> Properties:
    """
    Parse a ``key:value,key:value`` property list.

    Entries without a colon are skipped; keys and values are stripped.
    """
    pairs: List[Tuple[str, str]] = []
    for chunk in text.strip().rstrip(";").split(","):
        key, sep, value = chunk.partition(":")
        if not sep:
            continue
        key = key.strip()
        if key:
            pairs.append((key, value.strip()))
    return tuple(pairs)


class LineClassifier:
    """Classifies single lines of diagram text."""

    FLOWCHART_HEADER_PATTERN = re.compile(
        r"^(flowchart|graph)(?:\s+(TB|TD|BT|RL|LR))?\s*;?$"
    )
    OTHER_HEADER_PATTERN = re.compile(
        r"^(sequenceDiagram|classDiagram|stateDiagram(?:-v2)?|gitGraph"
        r"|erDiagram|journey|gantt)\s*$"
    )
    STYLE_PATTERN = re.compile(r"^style\s+(\w+)\s+(.+)$")
    LINK_STYLE_PATTERN = re.compile(r"^linkStyle\s+(\d+)\s+(.+)$")
    EDGE_PATTERN = re.compile(
        r"^(?P<source>\w+)(?P<source_shape>[\[\(\{>].*?)?\s*-->\s*"
        r"(?:\|(?P<label>[^|]*)\|)?\s*"
        r"(?P<target>\w+)(?P<target_shape>[\[\(\{>].*?)?\s*$"
    )
    NODE_PATTERN = re.compile(r"^(\w+)(.+)$")

    def classify(self, line: str, line_number: int = 0) -> Line:
        """
        Classify one line of diagram text.

        Args:
            line: The line; surrounding whitespace and one trailing
                statement separator ``;`` are ignored.
            line_number: 0-based index of the line in the diagram.

        Returns:
            Exactly one of the line variants. Never raises.
        """
        stripped = line.strip()
        if stripped.endswith(";"):
            stripped = stripped[:-1].rstrip()

        match = self.FLOWCHART_HEADER_PATTERN.match(stripped)
        if match:
            return Header(match.group(1), match.group(2), line_number)
        match = self.OTHER_HEADER_PATTERN.match(stripped)
        if match:
            return Header(match.group(1), None, line_number)

        match = self.STYLE_PATTERN.match(stripped)
        if match:
            return StyleDecl(
                match.group(1), parse_properties(match.group(2)), line_number
            )

        match = self.LINK_STYLE_PATTERN.match(stripped)
        if match:
            return LinkStyleDecl(
                int(match.group(1)), parse_properties(match.group(2)), line_number
            )

        edge = self._classify_edge(stripped, line_number)
        if edge is not None:
            return edge

        match = self.NODE_PATTERN.match(stripped)
        if match and match.group(2)[0] in OPEN_CHARS:
            if match_shape(match.group(2)) is not None:
                return NodeDecl(match.group(1), match.group(2), line_number)

        return Other(line, line_number)

    def _classify_edge(self, stripped: str, line_number: int) -> Optional[EdgeDecl]:
        match = self.EDGE_PATTERN.match(stripped)
        if not match:
            return None

        # Inline shapes must be well formed, otherwise the line is not an edge
        for group in ("source_shape", "target_shape"):
            suffix = match.group(group)
            if suffix and match_shape(suffix.strip()) is None:
                return None

        source = match.group("source")
        source_raw = source + (match.group("source_shape") or "")
        target = match.group("target")
        target_raw = target + (match.group("target_shape") or "")
        return EdgeDecl(
            source=source,
            target=target,
            label=match.group("label"),
            target_raw=target_raw.strip(),
            source_raw=source_raw.strip(),
            line_number=line_number,
        )


_classifier = LineClassifier()


def classify_line(line: str, line_number: int = 0) -> Line:
    """Classify a single line with the default classifier."""
    return _classifier.classify(line, line_number)


def classify_lines(lines: Iterable[str]) -> List[Line]:
    """Classify every line, numbering from 0."""
    return [_classifier.classify(line, number) for number, line in enumerate(lines)]


def looks_like_edge(line: str) -> bool:
    """True for lines that use the arrow token, classified as edges or not."""
    return ARROW in line
