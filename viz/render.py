import os

import numpy as np
import matplotlib.pyplot as plt

from planners.base import Cell

# --- Colors ----------------------------------------------------------------
CELL_COLORS = {
    Cell.EMPTY: (1.0, 1.0, 1.0),
    Cell.WALL: (0.2, 0.2, 0.2),
    Cell.OPEN: (0.62, 0.80, 0.98),
    Cell.CLOSED: (0.78, 0.78, 0.90),
    Cell.PATH: (1.0, 0.80, 0.20),
    Cell.START: (0.20, 0.80, 0.20),
    Cell.END: (0.90, 0.20, 0.20),
    Cell.PREPROCESS: (0.85, 0.70, 0.95),
}


def _cells_to_rgb(cells: np.ndarray) -> np.ndarray:
    lut = np.array([CELL_COLORS[Cell(i)] for i in range(len(Cell))], dtype=float)
    return lut[cells.astype(np.int64)]


def _markers(ax, start, goal):
    ax.plot(start[1], start[0], marker="*", markersize=10, markeredgecolor="k", markerfacecolor="lime", lw=0)
    ax.text(start[1] + 0.2, start[0] - 0.2, "S", color="k", fontsize=8)
    ax.plot(goal[1], goal[0], marker="*", markersize=10, markeredgecolor="k", markerfacecolor="red", lw=0)
    ax.text(goal[1] + 0.2, goal[0] - 0.2, "G", color="k", fontsize=8)


def render_grid(grid, ax=None, title=None):
    """Render a GridMap: free white, walls dark gray, start/goal stars."""
    H, W = grid.shape
    if ax is None:
        _, ax = plt.subplots(figsize=(max(W / 5, 2), max(H / 5, 2)), dpi=120)
    rgb = np.ones((H, W, 3), dtype=float)
    rgb[grid.walls] = 0.2
    ax.imshow(rgb, interpolation="nearest", origin="upper")
    ax.set_xticks([]); ax.set_yticks([])
    _markers(ax, grid.start, grid.goal)
    if title:
        ax.set_title(title, fontsize=10)
    return ax


def render_snapshot(snapshot, ax=None, title=None, show_counters=True):
    """
    Render a planner Snapshot.

    Layers:
      - one color per cell category (see CELL_COLORS)
      - start (green star), goal (red star)
      - optional counters line under the title
    """
    H, W = snapshot.rows, snapshot.cols
    if ax is None:
        _, ax = plt.subplots(figsize=(max(W / 5, 2), max(H / 5, 2)), dpi=120)
    if snapshot.cells.size == 0:
        ax.set_xticks([]); ax.set_yticks([])
        ax.set_title(title or snapshot.status, fontsize=10)
        return ax

    ax.imshow(_cells_to_rgb(snapshot.grid()), interpolation="nearest", origin="upper")
    ax.set_xticks([]); ax.set_yticks([])
    _markers(ax, divmod(snapshot.start, W), divmod(snapshot.goal, W))

    lines = [title] if title else []
    if show_counters:
        lines.append(
            f"steps={snapshot.steps} explored={snapshot.nodes_explored} "
            f"found={int(snapshot.found)} cost={snapshot.path_cost}"
        )
    if lines:
        ax.set_title("\n".join(lines), fontsize=8)
    return ax


def save_snapshot(snapshot, path, title=None):
    fig, ax = plt.subplots(figsize=(max(4, snapshot.cols / 4), max(4, snapshot.rows / 4)), dpi=140)
    render_snapshot(snapshot, ax=ax, title=title)
    fig.tight_layout()
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
