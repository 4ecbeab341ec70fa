"""
Static plots of step snapshots -- one figure per step, or a multi-page PDF
walkthrough of a whole step list.

Layout follows the interactive viewer: each level sits LEVEL_GAP units below
its parent and children are offset horizontally by an amount that starts at
ROOT_OFFSET and shrinks by OFFSET_DECAY per level.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.patches import Circle

from step_recorder import Step
from tree_node import NodeSnapshot

NODE_RADIUS = 18.0
LEVEL_GAP = 80.0
ROOT_OFFSET = 150.0
OFFSET_DECAY = 0.7
MARGIN = 40.0

NODE_FILL = {"red": "#d62728", "black": "#222222"}
DEFAULT_FILL = "white"
HIGHLIGHT = "#f4a300"
EDGE_COLOR = "#555555"
SEVERITY_COLORS = {"info": "black", "warning": "#c77c00", "error": "#b00020"}


def layout(
    snapshot: Optional[NodeSnapshot],
) -> Tuple[List[NodeSnapshot], np.ndarray, List[Tuple[int, int]]]:
    """Place every node of a snapshot.

    Returns:
        nodes: Snapshots in preorder
        positions: (n, 2) array of x, y coordinates; the root sits at the origin, deeper levels at negative y
        edges: (parent_index, child_index) pairs into ``nodes``
    """
    nodes: List[NodeSnapshot] = []
    coords: List[Tuple[float, float]] = []
    edges: List[Tuple[int, int]] = []
    if snapshot is None:
        return nodes, np.zeros((0, 2)), edges

    stack: List[Tuple[NodeSnapshot, float, float, float, int]] = [(snapshot, 0.0, 0.0, ROOT_OFFSET, -1)]
    while stack:
        node, x, y, offset, parent_index = stack.pop()
        index = len(nodes)
        nodes.append(node)
        coords.append((x, y))
        if parent_index >= 0:
            edges.append((parent_index, index))
        if node.right is not None:
            stack.append((node.right, x + offset, y - LEVEL_GAP, offset * OFFSET_DECAY, index))
        if node.left is not None:
            stack.append((node.left, x - offset, y - LEVEL_GAP, offset * OFFSET_DECAY, index))
    return nodes, np.array(coords), edges


def draw_step(step: Step, ax: Optional[Axes] = None) -> Axes:
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))

    nodes, positions, edges = layout(step.tree)
    highlighted = set(step.highlighted_nodes)
    highlighted_edges = set(step.highlighted_edges)

    for parent_index, child_index in edges:
        parent, child = nodes[parent_index], nodes[child_index]
        active = f"{parent.id}->{child.id}" in highlighted_edges
        segment = positions[[parent_index, child_index]]
        ax.plot(
            segment[:, 0],
            segment[:, 1],
            color=HIGHLIGHT if active else EDGE_COLOR,
            linewidth=3 if active else 1.5,
            zorder=1,
        )

    for node, (x, y) in zip(nodes, positions):
        fill = NODE_FILL.get(node.color, DEFAULT_FILL)
        is_highlighted = node.id in highlighted
        ax.add_patch(
            Circle(
                (x, y),
                NODE_RADIUS,
                facecolor=fill,
                edgecolor=HIGHLIGHT if is_highlighted else "black",
                linewidth=3 if is_highlighted else 1.5,
                zorder=2,
            )
        )
        ax.text(
            x, y, str(node.value),
            ha="center", va="center", fontsize=10, fontweight="bold",
            color="white" if node.color else "black", zorder=3,
        )
        if node.balance_factor is not None:
            ax.text(x + NODE_RADIUS, y + NODE_RADIUS, f"{node.balance_factor:+d}", fontsize=7, color="gray")

    if len(nodes) == 0:
        ax.text(0.5, 0.5, "(empty)", ha="center", va="center", transform=ax.transAxes, color="gray")
    else:
        low = positions.min(axis=0) - MARGIN
        high = positions.max(axis=0) + MARGIN
        ax.set_xlim(low[0], high[0])
        ax.set_ylim(low[1], high[1])
        ax.set_aspect("equal")

    ax.set_title(step.description, color=SEVERITY_COLORS.get(step.severity, "black"))
    footer = [step.explanation]
    if step.array_snapshot is not None:
        footer.append(f"Array: {list(step.array_snapshot)}")
    if step.sorted_elements is not None:
        footer.append(f"Sorted: {list(step.sorted_elements)}")
    if step.rule_broken:
        footer.append(f"Rule broken: {step.rule_broken}")
    ax.text(0.5, -0.02, "\n".join(footer), ha="center", va="top", fontsize=9, transform=ax.transAxes)
    ax.axis("off")
    return ax


def save_walkthrough(steps: Sequence[Step], path: Union[str, Path], title: Optional[str] = None) -> int:
    """Write one PDF page per step (plus a title page when ``title`` is given).

    Returns:
        Number of step pages written
    """
    with PdfPages(path) as pdf:
        if title is not None:
            fig = plt.figure(figsize=(11, 8.5))
            fig.text(0.5, 0.6, title, fontsize=32, ha="center", fontweight="bold")
            fig.text(0.5, 0.45, f"{len(steps)} steps", fontsize=18, ha="center", style="italic")
            pdf.savefig(fig)
            plt.close(fig)

        for number, step in enumerate(steps, start=1):
            fig, ax = plt.subplots(figsize=(11, 8.5))
            draw_step(step, ax)
            fig.suptitle(f"Step {number} of {len(steps)} - {step.type.upper()}", fontsize=14)
            pdf.savefig(fig)
            plt.close(fig)
    return len(steps)
