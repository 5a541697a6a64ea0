"""
Errors and diagnostics for flowsync.

Two kinds of problems exist in the engine:

- Programming errors (an unregistered shape handed to the encoder, a renderer
  that blows up) are raised as ``FlowSyncError`` subclasses.
- Data problems in the diagram text (a malformed edge line, an element that
  cannot be located for a mutation) are never raised. They are returned to the
  caller as ``Diagnostic`` records so the text is never left half-edited.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FlowSyncError(Exception):
    """Base class for all flowsync exceptions."""

    pass


class UnknownShapeError(FlowSyncError, ValueError):
    """Raised when a shape is not registered in the shape table."""

    def __init__(self, shape):
        self.shape = shape
        super().__init__(f"Unknown shape: {shape!r}")


class RenderError(FlowSyncError):
    """Raised when the renderer reports a failure for a diagram revision."""

    def __init__(self, revision: int, reason: str):
        self.revision = revision
        self.reason = reason
        super().__init__(f"Render of revision {revision} failed: {reason}")


class DiagnosticKind(Enum):
    """Non-fatal problem categories surfaced to callers."""

    UNRECOGNIZED_SHAPE = "unrecognized_shape"
    LINE_NOT_FOUND = "line_not_found"
    MALFORMED_EDGE = "malformed_edge"
    UNKNOWN_ELEMENT = "unknown_element"


@dataclass(frozen=True)
class Diagnostic:
    """
    A non-fatal problem found while parsing or mutating a diagram.

    Attributes:
        kind: Category of the problem.
        message: Human readable description.
        line_number: 0-based line index the problem refers to, if any.
    """

    kind: DiagnosticKind
    message: str
    line_number: Optional[int] = None

    def __str__(self) -> str:
        if self.line_number is None:
            return f"{self.kind.value}: {self.message}"
        return f"{self.kind.value} (line {self.line_number}): {self.message}"
