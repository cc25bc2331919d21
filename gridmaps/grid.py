# -*- coding: utf-8 -*-
"""
Immutable grid map used by every planner.

Grid convention (same as the rest of the package):
- `walls[r, c] == True` means the cell is blocked, False means free.
- Node id = r * cols + c; every bookkeeping array is indexed by node id.
- 4-connected moves use the order up, down, left, right.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

Coord = Tuple[int, int]

# up, down, left, right
DR4 = (-1, 1, 0, 0)
DC4 = (0, 0, -1, 1)

# cardinals first, then diagonals (NW, NE, SW, SE)
DR8 = (-1, 1, 0, 0, -1, -1, 1, 1)
DC8 = (0, 0, -1, 1, -1, 1, -1, 1)


@dataclass(frozen=True)
class GridMap:
    """Rectangular occupancy grid with a start and an end cell."""
    rows: int
    cols: int
    walls: np.ndarray          # (rows, cols) bool, read-only
    start: Coord
    goal: Coord
    name: str = "unnamed"

    def __post_init__(self):
        walls = np.asarray(self.walls, dtype=bool)
        if walls.shape != (self.rows, self.cols):
            raise ValueError(
                f"Wall mask shape {walls.shape} does not match {self.rows}x{self.cols}"
            )
        walls = walls.copy()
        walls.setflags(write=False)
        object.__setattr__(self, "walls", walls)
        object.__setattr__(self, "start", (int(self.start[0]), int(self.start[1])))
        object.__setattr__(self, "goal", (int(self.goal[0]), int(self.goal[1])))

    # ------------------------------------------------------------------ #
    @classmethod
    def from_mask(cls, rows: int, cols: int, start: Coord, goal: Coord,
                  mask: Sequence[int], name: str = "unnamed") -> "GridMap":
        """Build from a flat row-major 0/1 mask (0 = open, 1 = wall)."""
        flat = np.asarray(mask, dtype=np.int64).ravel()
        if flat.size != rows * cols:
            raise ValueError(f"Mask has {flat.size} cells, expected {rows * cols}")
        return cls(rows, cols, (flat != 0).reshape(rows, cols), start, goal, name)

    @classmethod
    def open(cls, rows: int, cols: int, start: Coord, goal: Coord,
             name: str = "open") -> "GridMap":
        return cls(rows, cols, np.zeros((rows, cols), dtype=bool), start, goal, name)

    # ------------------------------------------------------------------ #
    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def n_nodes(self) -> int:
        return self.rows * self.cols

    @property
    def start_node(self) -> int:
        return self.node_id(*self.start)

    @property
    def goal_node(self) -> int:
        return self.node_id(*self.goal)

    def node_id(self, r: int, c: int) -> int:
        return r * self.cols + c

    def coords(self, node: int) -> Coord:
        return divmod(node, self.cols)

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def passable(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols and not self.walls[r, c]

    def flat_walls(self) -> np.ndarray:
        return self.walls.ravel()

    def open_count(self) -> int:
        return int(self.n_nodes - np.count_nonzero(self.walls))

    def neighbors(self, node: int) -> Iterator[int]:
        """Open 4-connected neighbours of `node`, in up/down/left/right order."""
        r, c = divmod(node, self.cols)
        for d in range(4):
            nr, nc = r + DR4[d], c + DC4[d]
            if self.passable(nr, nc):
                yield nr * self.cols + nc

    def edges(self) -> List[Tuple[int, int]]:
        """Directed 4-connected edge list over open cells (row-major order)."""
        out: List[Tuple[int, int]] = []
        for r in range(self.rows):
            for c in range(self.cols):
                if self.walls[r, c]:
                    continue
                u = self.node_id(r, c)
                for v in self.neighbors(u):
                    out.append((u, v))
        return out

    # ------------------------------------------------------------------ #
    def validate(self, max_rows: int, max_cols: int) -> Optional[str]:
        """Return a rejection reason, or None when the map can be searched."""
        if self.rows <= 0 or self.cols <= 0:
            return "empty map"
        if self.rows > max_rows or self.cols > max_cols:
            return f"map {self.rows}x{self.cols} exceeds {max_rows}x{max_cols}"
        if not self.in_bounds(*self.start):
            return f"start {self.start} outside map"
        if not self.in_bounds(*self.goal):
            return f"goal {self.goal} outside map"
        if self.walls[self.start]:
            return f"start {self.start} is a wall"
        if self.walls[self.goal]:
            return f"goal {self.goal} is a wall"
        return None

    def with_walls(self, walls: np.ndarray) -> "GridMap":
        return GridMap(self.rows, self.cols, walls, self.start, self.goal, self.name)

    def to_ascii(self) -> str:
        lines = []
        for r in range(self.rows):
            row = []
            for c in range(self.cols):
                if (r, c) == self.start:
                    row.append("S")
                elif (r, c) == self.goal:
                    row.append("G")
                else:
                    row.append("#" if self.walls[r, c] else ".")
            lines.append("".join(row))
        return "\n".join(lines)


def manhattan(r1: int, c1: int, r2: int, c2: int) -> int:
    return abs(r1 - r2) + abs(c1 - c2)


def line_of_sight(walls: np.ndarray, a: Coord, b: Coord) -> bool:
    """Bresenham line-of-sight; endpoint `a` is not tested, every other cell is."""
    rows, cols = walls.shape
    r0, c0 = a
    r1, c1 = b
    dr = abs(r1 - r0)
    dc = abs(c1 - c0)
    sr = 1 if r0 < r1 else -1
    sc = 1 if c0 < c1 else -1
    err = dr - dc
    r, c = r0, c0
    while r != r1 or c != c1:
        e2 = 2 * err
        if e2 > -dc:
            err -= dc
            r += sr
        if e2 < dr:
            err += dr
            c += sc
        if not (0 <= r < rows and 0 <= c < cols) or walls[r, c]:
            return False
    return True


def bresenham(a: Coord, b: Coord) -> List[Coord]:
    """Cells on the Bresenham line from a to b, both endpoints included."""
    r0, c0 = a
    r1, c1 = b
    dr = abs(r1 - r0)
    dc = abs(c1 - c0)
    sr = 1 if r0 < r1 else -1
    sc = 1 if c0 < c1 else -1
    err = dr - dc
    r, c = r0, c0
    cells = [(r, c)]
    while r != r1 or c != c1:
        e2 = 2 * err
        if e2 > -dc:
            err -= dc
            r += sr
        if e2 < dr:
            err += dr
            c += sc
        cells.append((r, c))
    return cells
