"""
Starter templates, shareable links and basic text validation.

A diagram starts either from a template for its diagram type or from text
carried in the ``code`` query parameter of a shared link.
"""

from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import parse_qs, quote, urlsplit

DIAGRAM_TEMPLATES: Dict[str, str] = {
    "Flowchart": "flowchart LR",
    "Sequence": (
        "sequenceDiagram\n"
        "    Alice->>John: Hello John, how are you?\n"
        "    John-->>Alice: Great!\n"
        "    Alice->>John: See you later!"
    ),
    "Class": (
        "classDiagram\n"
        "    class Animal {\n"
        "        +name: string\n"
        "        +makeSound(): void\n"
        "    }"
    ),
    "State": (
        "stateDiagram-v2\n"
        "    [*] --> Still\n"
        "    Still --> Moving\n"
        "    Moving --> Still\n"
        "    Moving --> Crash\n"
        "    Crash --> [*]"
    ),
    "Git Graph": (
        "gitGraph\n"
        "    commit\n"
        "    commit\n"
        "    branch develop\n"
        "    commit\n"
        "    commit\n"
        "    checkout main\n"
        "    commit"
    ),
    "Entity Relationship": (
        "erDiagram\n"
        "    CUSTOMER ||--o{ ORDER : places\n"
        "    ORDER ||--|{ LINE-ITEM : contains"
    ),
    "User Journey": (
        "journey\n"
        "    title My working day\n"
        "    section Go to work\n"
        "        Make tea: 5: Me\n"
        "        Go upstairs: 3: Me\n"
        "        Do work: 1: Me, Cat"
    ),
    "Gantt Chart": (
        "gantt\n"
        "    title A Gantt Diagram\n"
        "    section Section\n"
        "    A task           :a1, 2014-01-01, 30d\n"
        "    Another task     :after a1, 20d"
    ),
}

DIAGRAM_TYPES = tuple(DIAGRAM_TEMPLATES)
DEFAULT_DIAGRAM_TYPE = "Flowchart"

# Required first-line keywords per diagram type (matched case-insensitively)
_HEADER_PREFIXES = {
    "flowchart": ("flowchart", "graph"),
    "sequence": ("sequenceDiagram",),
}


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


def template_for(diagram_type: str = DEFAULT_DIAGRAM_TYPE) -> str:
    """
    Return the starter text for a diagram type.

    Raises:
        KeyError: If the diagram type has no template.
    """
    return DIAGRAM_TEMPLATES[diagram_type]


def text_from_query(query: str, diagram_type: str = DEFAULT_DIAGRAM_TYPE) -> str:
    """
    Extract diagram text from a URL or query string.

    The ``code`` parameter is URL-decoded; without one the template for
    ``diagram_type`` is returned.

    Args:
        query: Either a full URL or just its query part (``code=...``).
        diagram_type: Template used when no code is present.

    Returns:
        Diagram text.
    """
    if "://" in query or query.startswith("/"):
        query = urlsplit(query).query
    values = parse_qs(query.lstrip("?"), keep_blank_values=False).get("code")
    if values:
        return values[0]
    return template_for(diagram_type)


def share_link(base_url: str, text: str) -> str:
    """Build a link whose ``code`` parameter carries the diagram text."""
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}code={quote(text, safe='')}"


def validate_diagram_text(text: str, diagram_type: str = DEFAULT_DIAGRAM_TYPE) -> ValidationResult:
    """
    Check diagram text before handing it to the renderer.

    Empty text is invalid, and flowchart and sequence text must start with
    their type declaration. Other diagram types are not checked further.
    """
    if not text.strip():
        return ValidationResult(False, "Diagram text cannot be empty")

    first_line = text.strip().split("\n")[0].strip().lower()
    prefixes = _HEADER_PREFIXES.get(diagram_type.lower())
    if prefixes and not first_line.startswith(tuple(p.lower() for p in prefixes)):
        return ValidationResult(
            False,
            f'{diagram_type} must start with a "{prefixes[0]}" declaration',
        )
    return ValidationResult(True)
