"""
Editing session: the single writer for a diagram.

All edits go through one ``EditorSession``: full text edits re-parse the
diagram, structured edits are applied by the Mutator. Every accepted change
gets a new revision number and is handed to the renderer.

Rendering is asynchronous and owned by an external collaborator. The session
never waits for it: a ``RenderCoordinator`` accepts the outcome for the newest
revision only (stale renders are discarded, never merged) and signals
completion to subscribers such as the ``HitTestOverlay``. Overlays read node
and edge identities from rendered geometry and route gestures back through
``EditorSession.dispatch``; they never touch text or model directly.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from .errors import Diagnostic, RenderError
from .models import Diagram, Edge, Node
from .mutator import CreateEdge, MutationResult, Mutator, Operation
from .parser import Parser
from .templates import DEFAULT_DIAGRAM_TYPE, template_for, text_from_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderRequest:
    revision: int
    text: str


@dataclass(frozen=True)
class RenderOutcome:
    """
    What the renderer reports back for a request.

    Exactly one of ``tree`` and ``error`` is set. The tree is opaque to the
    engine; only a LayoutReporter looks inside it.
    """

    revision: int
    tree: Any = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class Renderer(Protocol):
    """Renders complete diagram text, reporting the outcome via ``done``."""

    def submit(
        self, request: RenderRequest, done: Callable[[RenderOutcome], None]
    ) -> None:
        """Start rendering; call ``done`` once, now or later."""
        ...


@dataclass(frozen=True)
class BoundingBox:
    """Screen-space rectangle of a rendered element."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


class LayoutReporter(Protocol):
    """Reads element geometry out of a rendered tree."""

    def node_boxes(self, tree: Any) -> Mapping[str, BoundingBox]:
        """Node id to bounding box."""
        ...

    def edge_boxes(self, tree: Any) -> Mapping[str, BoundingBox]:
        """Edge id to bounding box of its path or label."""
        ...


RenderListener = Callable[[RenderOutcome], None]


class RenderCoordinator:
    """
    Tracks in-flight renders and publishes the newest completed one.

    Attributes:
        latest_revision: Revision of the most recent request.
        current: Last accepted successful outcome, if any.
        last_error: Error of the last accepted failed outcome, if any.
    """

    def __init__(self, renderer: Optional[Renderer] = None):
        self.renderer = renderer
        self.latest_revision = -1
        self.current: Optional[RenderOutcome] = None
        self.last_error: Optional[RenderError] = None
        self._listeners: List[RenderListener] = []

    def subscribe(self, listener: RenderListener) -> Callable[[], None]:
        """Register for render-completion signals; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def request(self, revision: int, text: str) -> None:
        self.latest_revision = revision
        if self.renderer is None:
            return
        self.renderer.submit(RenderRequest(revision, text), self.complete)

    def complete(self, outcome: RenderOutcome) -> bool:
        """
        Accept a renderer outcome.

        Returns:
            True if the outcome was for the latest revision and was published,
            False if it was stale and discarded.
        """
        if outcome.revision != self.latest_revision:
            logger.debug(
                "Discarding stale render %d (latest is %d)",
                outcome.revision,
                self.latest_revision,
            )
            return False

        if outcome.failed:
            self.last_error = RenderError(outcome.revision, outcome.error)
            logger.warning("%s", self.last_error)
        else:
            self.current = outcome
            self.last_error = None

        for listener in list(self._listeners):
            listener(outcome)
        return True


ChangeListener = Callable[[Diagram], None]


class EditorSession:
    """
    Owns the current diagram and serializes every edit to it.

    Example:
        >>> session = EditorSession("flowchart TD\\n    A[Start]\\n    B[End]")
        >>> session.dispatch(CreateEdge("A", "B")).ok
        True
        >>> session.text.splitlines()[-1]
        '    A --> B'
    """

    def __init__(
        self,
        text: Optional[str] = None,
        template: str = DEFAULT_DIAGRAM_TYPE,
        renderer: Optional[Renderer] = None,
        mutator: Optional[Mutator] = None,
        parser: Optional[Parser] = None,
    ):
        """
        Initialize the session.

        Args:
            text: Initial diagram text; the template is used when empty.
            template: Diagram type whose template seeds an empty session.
            renderer: Optional renderer notified of every new revision.
            mutator: Mutator for structured edits.
            parser: Parser for full text edits.
        """
        self.parser = parser or Parser()
        self.mutator = mutator or Mutator()
        self.renders = RenderCoordinator(renderer)
        self.revision = 0
        self.diagnostics: List[Diagnostic] = []
        self._listeners: List[ChangeListener] = []
        self._diagram = Diagram()
        self.set_text(text or template_for(template))

    @classmethod
    def from_query(cls, query: str, **kwargs) -> "EditorSession":
        """Start a session from the ``code`` parameter of a shared link."""
        return cls(text_from_query(query), **kwargs)

    @property
    def diagram(self) -> Diagram:
        return self._diagram

    @property
    def text(self) -> str:
        return self._diagram.text

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register for diagram changes; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def set_text(self, text: str) -> List[Diagnostic]:
        """Replace the whole text (user typed in the editor) and re-parse."""
        result = self.parser.parse_with_diagnostics(text)
        self.diagnostics = result.diagnostics
        self._commit(result.diagram)
        return result.diagnostics

    def dispatch(self, operation: Operation) -> MutationResult:
        """Apply a structured edit. Failed edits leave the session untouched."""
        result = self.mutator.apply(self._diagram, operation)
        if result.ok and result.diagram != self._diagram:
            self._commit(result.diagram)
        return result

    def node_properties(self, node_id: str) -> Optional[Node]:
        """Current node values, e.g. to pre-fill an edit dialog."""
        return self._diagram.model.get_node(node_id)

    def edge_properties(self, edge_id: str) -> Optional[Edge]:
        return self._diagram.model.get_edge(edge_id)

    def _commit(self, diagram: Diagram) -> None:
        self._diagram = diagram
        self.revision += 1
        self.renders.request(self.revision, diagram.text)
        for listener in list(self._listeners):
            listener(diagram)


class HitTestOverlay:
    """
    Maps pointer positions on the rendered diagram to node and edge ids.

    Geometry is re-queried after every render-completion signal. Clicking
    a node selects it; clicking the same node again deselects it; clicking
    a second node connects the two with a new edge.
    """

    def __init__(self, session: EditorSession, reporter: LayoutReporter):
        self.session = session
        self.reporter = reporter
        self.selected_node: Optional[str] = None
        self._node_boxes: Dict[str, BoundingBox] = {}
        self._edge_boxes: Dict[str, BoundingBox] = {}
        self._unsubscribe = session.renders.subscribe(self._on_render)
        if session.renders.current is not None:
            self._on_render(session.renders.current)

    def close(self) -> None:
        self._unsubscribe()

    def _on_render(self, outcome: RenderOutcome) -> None:
        if outcome.failed:
            self._node_boxes, self._edge_boxes = {}, {}
            return
        self._node_boxes = dict(self.reporter.node_boxes(outcome.tree))
        self._edge_boxes = dict(self.reporter.edge_boxes(outcome.tree))
        if self.selected_node not in self._node_boxes:
            self.selected_node = None

    def node_at(self, x: float, y: float) -> Optional[str]:
        for node_id, box in self._node_boxes.items():
            if box.contains(x, y):
                return node_id
        return None

    def edge_at(self, x: float, y: float) -> Optional[str]:
        for edge_id, box in self._edge_boxes.items():
            if box.contains(x, y):
                return edge_id
        return None

    def click(self, x: float, y: float) -> Optional[MutationResult]:
        """
        Handle a click on the rendered diagram.

        Returns:
            The result of the CreateEdge dispatched by a second node click,
            otherwise None.
        """
        node_id = self.node_at(x, y)
        if node_id is None:
            return None
        if self.selected_node is None:
            self.selected_node = node_id
            return None
        if self.selected_node == node_id:
            self.selected_node = None
            return None

        source, self.selected_node = self.selected_node, None
        return self.session.dispatch(CreateEdge(source, node_id))
