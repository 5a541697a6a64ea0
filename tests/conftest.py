"""Pytest configuration and shared fixtures for flowsync tests."""

import pytest

from flowsync import Parser, parse_diagram


@pytest.fixture
def simple_text():
    """Two declared nodes, no edges."""
    return "flowchart TD\n    A[Start]\n    B[End]"


@pytest.fixture
def connected_text():
    """Two declared nodes joined by one edge."""
    return "flowchart TD\n    A[Start]\n    B[End]\n    A --> B"


@pytest.fixture
def styled_text():
    """Three edges, each with its own linkStyle line."""
    return """flowchart TD
    A[Start]
    B{Check}
    C((Done))
    A --> B
    B -->|yes| C
    C --> A
    linkStyle 0 stroke:#ff0000,color:#000000
    linkStyle 1 stroke:#00ff00,color:#000000
    linkStyle 2 stroke:#0000ff,color:#000000"""


@pytest.fixture
def mixed_text():
    """Text with comments, blank lines and unsupported syntax."""
    return """flowchart LR
    %% entry point
    A[Start] --> B{Ready?}

    B -->|yes| C([Go])
    B -.-> D
    style A fill:#f9f,stroke:#333,stroke-width:4px
    click A callback"""


@pytest.fixture
def parser():
    """Fresh Parser instance."""
    return Parser()


@pytest.fixture
def simple_diagram(simple_text):
    return parse_diagram(simple_text)


@pytest.fixture
def styled_diagram(styled_text):
    return parse_diagram(styled_text)
