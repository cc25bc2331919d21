# -*- coding: utf-8 -*-
"""
Stepping contract shared by every planner.

    state = planner.init(grid)      # pure given the map
    while planner.step(state):      # one bounded unit of work per call
        ...                         # read state.snapshot between steps

`step` returns True while more work is pending and False once the state is
terminal; calling it again on a terminal state is a no-op returning False.
Failure is state: "no path", a rejected map and a skipped planner all end in
a terminal snapshot with `found == False` (the latter two set `status`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence

import numpy as np

from gridmaps.grid import GridMap
from .config import DEFAULT_LIMITS, Limits

_logger = logging.getLogger(__name__)

INF = float("inf")


class Cell(IntEnum):
    EMPTY = 0
    WALL = 1
    OPEN = 2        # frontier / reached
    CLOSED = 3      # expanded / visited
    PATH = 4
    START = 5
    END = 6
    PREPROCESS = 7  # touched by an offline preprocessing phase


CELL_CHARS = {
    Cell.EMPTY: ".",
    Cell.WALL: "#",
    Cell.OPEN: "+",
    Cell.CLOSED: "-",
    Cell.PATH: "*",
    Cell.START: "S",
    Cell.END: "G",
    Cell.PREPROCESS: "~",
}


@dataclass
class Snapshot:
    """Externally readable progress of one planner instance."""
    rows: int
    cols: int
    cells: np.ndarray                       # flat int8 array of Cell values
    start: int = -1
    goal: int = -1
    done: bool = False
    found: bool = False
    steps: int = 0
    nodes_explored: int = 0
    relaxations: int = 0
    path_len: int = 0
    path_cost: float = 0
    status: str = ""
    path: List[int] = field(default_factory=list)

    @classmethod
    def from_grid(cls, grid: GridMap) -> "Snapshot":
        cells = np.where(grid.flat_walls(), Cell.WALL, Cell.EMPTY).astype(np.int8)
        snap = cls(grid.rows, grid.cols, cells, grid.start_node, grid.goal_node)
        snap.cells[snap.start] = Cell.START
        snap.cells[snap.goal] = Cell.END
        return snap

    @classmethod
    def rejected(cls, grid: GridMap, status: str) -> "Snapshot":
        rows, cols = max(grid.rows, 0), max(grid.cols, 0)
        return cls(rows, cols, np.zeros(0, dtype=np.int8), done=True, status=status)

    # ------------------------------------------------------------------ #
    def mark(self, node: int, category: Cell) -> None:
        """Colour a cell, leaving the start and end categories untouched."""
        if node != self.start and node != self.goal:
            self.cells[node] = category

    def finish(self, found: bool = False, status: str = "") -> None:
        self.done = True
        self.found = found
        if status:
            self.status = status

    def set_path(self, nodes: Sequence[int], cost: float) -> None:
        """Record a start→goal cell sequence and make the snapshot terminal."""
        self.path = list(nodes)
        for node in self.path:
            self.mark(node, Cell.PATH)
        self.path_len = len(self.path)
        self.path_cost = cost
        self.finish(found=True)

    def clear_path(self, category: Cell = Cell.CLOSED) -> None:
        self.cells[self.cells == Cell.PATH] = category
        self.path = []
        self.path_len = 0
        self.path_cost = 0
        self.done = False
        self.found = False

    def grid(self) -> np.ndarray:
        return self.cells.reshape(self.rows, self.cols)

    def to_ascii(self) -> str:
        if self.cells.size == 0:
            return ""
        g = self.grid()
        return "\n".join("".join(CELL_CHARS[Cell(v)] for v in row) for row in g)


class TerminalState:
    """State returned by init when no stepping is needed (rejected, skipped, trivial)."""

    def __init__(self, snapshot: Snapshot, grid: Optional[GridMap] = None):
        self.snapshot = snapshot
        self.grid = grid


class SteppingPlanner:
    """
    Capability shared by all planners: `name`, `max_nodes`, `init`, `step`.

    Subclasses implement `_setup(grid, snapshot) -> state` and `_advance(state)`.
    A state object must expose `.snapshot`; everything else on it is private
    bookkeeping owned by that one instance.
    """
    name = "planner"
    max_nodes = 0  # 0 = unlimited

    def __init__(self, limits: Limits = DEFAULT_LIMITS):
        self.limits = limits

    def init(self, grid: GridMap):
        reason = grid.validate(self.limits.max_rows, self.limits.max_cols)
        if reason is not None:
            _logger.info("%s rejected map '%s': %s", self.name, grid.name, reason)
            return TerminalState(Snapshot.rejected(grid, f"invalid: {reason}"), grid)

        snap = Snapshot.from_grid(grid)
        cap = self.max_nodes
        if cap and grid.n_nodes > cap:
            _logger.info("%s skipped map '%s': %d nodes > %d", self.name, grid.name, grid.n_nodes, cap)
            snap.finish(status=f"skipped: {grid.n_nodes} nodes exceeds {cap}")
            return TerminalState(snap, grid)

        if grid.start == grid.goal:
            snap.set_path([grid.start_node], 0)
            return TerminalState(snap, grid)

        return self._setup(grid, snap)

    def step(self, state) -> bool:
        snap = state.snapshot
        if snap.done:
            return False
        snap.steps += 1
        self._advance(state)
        return not snap.done

    # ------------------------------------------------------------------ #
    def _setup(self, grid: GridMap, snap: Snapshot):
        raise NotImplementedError

    def _advance(self, state) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


# ---------------------------------------------------------------------- #
# Path helpers

def trace_parents(parent: np.ndarray, goal: int) -> List[int]:
    """Follow parent pointers from goal until -1; returns start→goal order."""
    out = []
    cur = int(goal)
    while cur != -1:
        out.append(cur)
        cur = int(parent[cur])
    out.reverse()
    return out


def straight_cells(a: int, b: int, cols: int) -> List[int]:
    """Cells strictly after a up to and including b on a row or column line."""
    ar, ac = divmod(a, cols)
    br, bc = divmod(b, cols)
    dr = (br > ar) - (br < ar)
    dc = (bc > ac) - (bc < ac)
    out = []
    r, c = ar, ac
    while (r, c) != (br, bc):
        r += dr
        c += dc
        out.append(r * cols + c)
    return out


def join_straight(waypoints: Sequence[int], cols: int) -> List[int]:
    """Expand row/column-aligned waypoints into a contiguous cell path."""
    if not waypoints:
        return []
    cells = [int(waypoints[0])]
    for a, b in zip(waypoints[:-1], waypoints[1:]):
        cells.extend(straight_cells(int(a), int(b), cols))
    return cells


def run_to_completion(planner: SteppingPlanner, grid: GridMap, max_steps: Optional[int] = None):
    """Init and step until terminal (or until max_steps); returns the state."""
    state = planner.init(grid)
    n = 0
    while planner.step(state):
        n += 1
        if max_steps is not None and n >= max_steps:
            break
    return state
