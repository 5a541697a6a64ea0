"""
Shape symbol table for flowchart nodes.

Every node shape is written in the description language as a bracket pair
around the label, e.g. ``A[Start]`` or ``B{Decide?}``. The table below maps a
shape to its start and end symbols in both directions.

The table is ordered: several encodings are prefix/suffix subsets of others
(``(((`` contains ``((`` which contains ``(``), so decoding walks the table in
order and the first full match wins.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import UnknownShapeError


class Shape(Enum):
    """Node shapes supported by the flowchart subset."""

    RECTANGLE = "rectangle"
    ROUNDED = "rounded"
    STADIUM = "stadium"
    SUBROUTINE = "subroutine"
    CYLINDER = "cylinder"
    CIRCLE = "circle"
    ASYMMETRIC = "asymmetric"
    RHOMBUS = "rhombus"
    HEXAGON = "hexagon"
    PARALLELOGRAM = "parallelogram"
    PARALLELOGRAM_ALT = "parallelogram-alt"
    TRAPEZOID = "trapezoid"
    TRAPEZOID_ALT = "trapezoid-alt"
    DOUBLE_CIRCLE = "double-circle"

    @classmethod
    def coerce(cls, value: Union["Shape", str]) -> "Shape":
        """Return ``value`` as a Shape, accepting the shape's string name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownShapeError(value) from None


@dataclass(frozen=True)
class ShapeSymbol:
    """
    One entry of the shape table.

    Attributes:
        shape: The shape this entry encodes.
        name: Display name for shape pickers.
        start: Opening bracket sequence.
        end: Closing bracket sequence.
    """

    shape: Shape
    name: str
    start: str
    end: str

    @property
    def example(self) -> str:
        return f"node{self.start}text{self.end}"

    def matches(self, text: str) -> bool:
        """True if ``text`` is fully enclosed by this entry's brackets."""
        return (
            len(text) >= len(self.start) + len(self.end)
            and text.startswith(self.start)
            and text.endswith(self.end)
        )

    def wrap(self, label: str) -> str:
        return f"{self.start}{label}{self.end}"

    def unwrap(self, text: str) -> str:
        return text[len(self.start) : len(text) - len(self.end)]


# Decoding order. Longer encodings must precede the shorter ones they contain.
SHAPE_TABLE: Tuple[ShapeSymbol, ...] = (
    ShapeSymbol(Shape.DOUBLE_CIRCLE, "Double Circle", "(((", ")))"),
    ShapeSymbol(Shape.CIRCLE, "Circle", "((", "))"),
    ShapeSymbol(Shape.STADIUM, "Stadium", "([", "])"),
    ShapeSymbol(Shape.CYLINDER, "Cylinder", "[(", ")]"),
    ShapeSymbol(Shape.SUBROUTINE, "Subroutine", "[[", "]]"),
    ShapeSymbol(Shape.HEXAGON, "Hexagon", "{{", "}}"),
    ShapeSymbol(Shape.TRAPEZOID, "Trapezoid", "[/", "\\]"),
    ShapeSymbol(Shape.TRAPEZOID_ALT, "Trapezoid Alt", "[\\", "/]"),
    ShapeSymbol(Shape.PARALLELOGRAM, "Parallelogram", "[/", "/]"),
    ShapeSymbol(Shape.PARALLELOGRAM_ALT, "Parallelogram Alt", "[\\", "\\]"),
    ShapeSymbol(Shape.ASYMMETRIC, "Asymmetric", ">", "]"),
    ShapeSymbol(Shape.RHOMBUS, "Rhombus", "{", "}"),
    ShapeSymbol(Shape.ROUNDED, "Rounded", "(", ")"),
    ShapeSymbol(Shape.RECTANGLE, "Rectangle", "[", "]"),
)

_BY_SHAPE = {entry.shape: entry for entry in SHAPE_TABLE}

# First characters that can open a shape; used by the line classifier.
OPEN_CHARS = frozenset(entry.start[0] for entry in SHAPE_TABLE)


@dataclass(frozen=True)
class DecodedShape:
    """Result of decoding bracketed node text."""

    shape: Shape
    label: str
    recognized: bool = True


def match_shape(text: str) -> Optional[ShapeSymbol]:
    """Return the first table entry whose brackets enclose ``text``, if any."""
    for entry in SHAPE_TABLE:
        if entry.matches(text):
            return entry
    return None


def decode(text: str) -> DecodedShape:
    """
    Decode bracketed node text into a shape and label.

    Never fails: text that matches no entry decodes to a rectangle whose
    label is the text itself, with ``recognized`` set to False.

    Args:
        text: Node text following the id, e.g. ``"((Hi))"``.

    Returns:
        DecodedShape with the shape and the unwrapped label.
    """
    entry = match_shape(text)
    if entry is None:
        return DecodedShape(Shape.RECTANGLE, text, recognized=False)
    return DecodedShape(entry.shape, entry.unwrap(text))


def symbol_for(shape: Union[Shape, str]) -> ShapeSymbol:
    """Look up the table entry for a shape, raising UnknownShapeError."""
    entry = _BY_SHAPE.get(Shape.coerce(shape))
    if entry is None:
        raise UnknownShapeError(shape)
    return entry


def encode(shape: Union[Shape, str], label: str) -> str:
    """
    Encode a label with the bracket pair of ``shape``.

    Raises:
        UnknownShapeError: If the shape is not in the table.
    """
    return symbol_for(shape).wrap(label)


def shape_catalogue(query: Optional[str] = None) -> Tuple[ShapeSymbol, ...]:
    """
    Read-only view of the table in picker order (enum declaration order).

    Args:
        query: If given, keep only entries whose display name contains it,
            ignoring case. An empty query keeps everything.
    """
    entries = tuple(_BY_SHAPE[shape] for shape in Shape)
    if not query:
        return entries
    needle = query.lower()
    return tuple(entry for entry in entries if needle in entry.name.lower())
