"""
visualize.py
------------
Static matplotlib preview of every floor: painted cells as squares, the
walkway graph drawn on top (primary edges solid, secondary dashed), and
optionally the cell labels.

    gridpainter plot snapshot.json [--annotate] [--save PNGFILE]
"""
import math

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle

from . import connectivity


def make_axes(n_floors):
    # 1 axes, or a ceil(sqrt) grid depending on count
    if n_floors <= 1:
        fig, ax = plt.subplots(figsize=(8, 8))
        return fig, [ax]
    r = math.ceil(math.sqrt(n_floors))
    c = math.ceil(n_floors / r)
    fig, axs = plt.subplots(r, c, figsize=(4 * c, 4 * r))
    return fig, list(np.ravel(axs))


def plot_floor(ax, floor, annotate=False):
    cells = floor.cells
    for (row, col), color in cells.items():
        ax.add_patch(Rectangle((col, row), 1, 1, facecolor=color, edgecolor="none", alpha=0.8))

    for a, b, kind in connectivity.connection_segments(cells):
        (r0, c0), (r1, c1) = a, b
        style = "-" if kind == "primary" else "--"
        ax.plot([c0 + 0.5, c1 + 0.5], [r0 + 0.5, r1 + 0.5], style,
                linewidth=0.8, color="black", zorder=2)

    corners = connectivity.sharp_corners(cells)
    if corners:
        ax.scatter([c + 0.5 for _, c in corners], [r + 0.5 for r, _ in corners],
                   s=6, color="red", zorder=3)

    if annotate:
        for (row, col), labels in floor.labels.items():
            ax.text(col + 0.5, row + 0.5, ", ".join(labels), fontsize=6,
                    ha="center", va="center")

    keys = set(cells) | set(floor.labels)
    if keys:
        rows = [r for r, _ in keys]
        cols = [c for _, c in keys]
        ax.set_xlim(min(cols) - 1, max(cols) + 2)
        ax.set_ylim(max(rows) + 2, min(rows) - 1)   # row 0 at the top
    ax.set_aspect("equal")
    ax.axis("off")


def plot_floors(store, annotate=False, save=None):
    floors = store.floors_sorted()
    fig, axes = make_axes(len(floors))
    for ax, floor in zip(axes, floors):
        ax.set_title(f"Floor {floor.number}: {floor.name}", fontsize=10)
        plot_floor(ax, floor, annotate=annotate)

    # Hide any leftover empty axes
    for ax in axes[len(floors):]:
        ax.axis("off")

    fig.tight_layout()

    if save:
        fig.savefig(save, dpi=300)
        print(f"Saved to {save}")
    else:
        plt.show()
    return fig
