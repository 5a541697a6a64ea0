#!/usr/bin/env python3
"""
Demo script for flowsync.

Walks through structured edits on a flowchart and prints the diagram text
after each one, the way an editor would see it.
"""

import sys

from flowsync import (
    CreateEdge,
    CreateNode,
    DeleteEdge,
    DeleteNode,
    EdgeStyle,
    EditorSession,
    NodeStyle,
    Shape,
    ShapePreviewRenderer,
    UpdateEdge,
    UpdateNode,
    apply,
    parse_diagram,
    share_link,
)


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def show(diagram):
    print(diagram.text)
    print(f"\n  nodes: {', '.join(diagram.model.node_ids()) or '-'}")
    print(f"  edges: {', '.join(edge.id for edge in diagram.edges) or '-'}")


def demo_1():
    """Demo 1: Building a diagram from nothing"""
    print_header("Demo 1: Building a Diagram")

    diagram = parse_diagram("")
    for operation in (
        CreateNode(Shape.STADIUM, "Start"),
        CreateNode(Shape.RHOMBUS, "Valid?"),
        CreateNode(Shape.CYLINDER, "Store"),
        CreateEdge("node1", "node2"),
        CreateEdge("node2", "node3"),
    ):
        diagram = apply(diagram, operation).diagram
    show(diagram)


def demo_2():
    """Demo 2: Editing a hand-written diagram"""
    print_header("Demo 2: Editing Hand-Written Text")

    diagram = parse_diagram(
        """flowchart LR
    %% kept exactly as written
    A[Order] --> B{Paid?}
    B -->|yes| C([Ship])
    click A callback"""
    )
    diagram = apply(
        diagram,
        UpdateNode("B", "Payment received?", Shape.HEXAGON, NodeStyle(background_color="#fef3c7")),
    ).diagram
    diagram = apply(diagram, UpdateEdge("edge_B_C", "paid", EdgeStyle("#16a34a"))).diagram
    show(diagram)


def demo_3():
    """Demo 3: Deleting and link-style renumbering"""
    print_header("Demo 3: Deletions")

    diagram = parse_diagram(
        """flowchart TD
    A --> B
    B --> C
    C --> D
    linkStyle 0 stroke:#ef4444,color:#000000
    linkStyle 1 stroke:#22c55e,color:#000000
    linkStyle 2 stroke:#3b82f6,color:#000000"""
    )
    print("Deleting B --> C:\n")
    diagram = apply(diagram, DeleteEdge("edge_B_C")).diagram
    show(diagram)

    print("\nDeleting node D:\n")
    show(apply(diagram, DeleteNode("D")).diagram)


def demo_4():
    """Demo 4: Failed edits leave the text alone"""
    print_header("Demo 4: Diagnostics")

    diagram = parse_diagram("flowchart TD\n    A[Start]")
    result = apply(diagram, DeleteNode("Missing"))
    print(f"ok: {result.ok}")
    print(f"diagnostic: {result.diagnostic}")
    print(f"unchanged: {result.diagram is diagram}")


def demo_5():
    """Demo 5: Sessions and share links"""
    print_header("Demo 5: Sessions")

    session = EditorSession()
    session.dispatch(CreateNode(Shape.CIRCLE, "Hi"))
    session.dispatch(CreateNode(label="There"))
    session.dispatch(CreateEdge("node1", "node2"))
    print(session.text)
    print(f"\nrevision: {session.revision}")
    print(f"link: {share_link('https://example.com/edit', session.text)}")


def demo_6():
    """Demo 6: Shape palette image"""
    print_header("Demo 6: Shape Palette")

    path = ShapePreviewRenderer().save_palette("shapes.png")
    print(f"Saved shape palette to {path}")


def main():
    """Main demo function."""
    demos = [
        ("Building", demo_1),
        ("Editing", demo_2),
        ("Deletions", demo_3),
        ("Diagnostics", demo_4),
        ("Sessions", demo_5),
        ("Palette", demo_6),
    ]

    print("\n" + "=" * 70)
    print("  FLOWSYNC - DEMONSTRATION")
    print("=" * 70)
    print("\nPress Enter after each demo to continue...")

    for title, demo_func in demos:
        input("\n[Press Enter to continue]")
        demo_func()

    print("\n" + "=" * 70)
    print("  Thank you for trying flowsync!")
    print("=" * 70)
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nDemo interrupted. Goodbye!")
        sys.exit(0)
