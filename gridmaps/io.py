# -*- coding: utf-8 -*-
"""
Plain-text map files.

Format:
    # optional comment lines start with ';'
    GRID <rows> <cols> <start_r> <start_c> <goal_r> <goal_c>   (optional header)
    ..#.....
    S.#...G.

Cells: '#' or '1' = wall, '.' or '0' = open, 'S' = start, 'G' = goal.
Without a header the start/goal come from the 'S'/'G' cells; if those are
missing too, start=(0,0) and goal=(rows-1, cols-1).
"""

from __future__ import annotations

import os
from typing import List, Optional

import numpy as np

from .grid import Coord, GridMap

WALL_CHARS = "#1"
OPEN_CHARS = ".0"


def parse_map(text: str, name: str = "unnamed") -> GridMap:
    lines = [ln.strip() for ln in text.splitlines()]
    lines = [ln for ln in lines if ln and not ln.startswith(";")]
    if not lines:
        raise ValueError("Map text is empty")

    start: Optional[Coord] = None
    goal: Optional[Coord] = None
    header = lines[0].split()
    has_header = header[0] == "GRID"
    if has_header:
        if len(header) != 7:
            raise ValueError(f"Bad header '{lines[0]}', expected GRID rows cols sr sc gr gc")
        rows, cols, sr, sc, gr, gc = map(int, header[1:])
        start, goal = (sr, sc), (gr, gc)
        body = lines[1:]
        if len(body) != rows:
            raise ValueError(f"Header says {rows} rows, found {len(body)}")
    else:
        body = lines
        rows = len(body)
        cols = len(body[0])

    walls = np.zeros((rows, cols), dtype=bool)
    for r, row in enumerate(body):
        if len(row) != cols:
            raise ValueError(f"Row {r} has {len(row)} cells, expected {cols}")
        for c, ch in enumerate(row):
            if ch in WALL_CHARS:
                walls[r, c] = True
            elif ch in OPEN_CHARS:
                continue
            elif ch == "S":
                if not has_header:
                    start = (r, c)
            elif ch == "G":
                if not has_header:
                    goal = (r, c)
            else:
                raise ValueError(f"Unknown cell character {ch!r} at ({r}, {c})")

    if start is None:
        start = (0, 0)
    if goal is None:
        goal = (rows - 1, cols - 1)
    return GridMap(rows, cols, walls, start, goal, name)


def load_map(path: str) -> GridMap:
    with open(path, "r") as f:
        text = f.read()
    return parse_map(text, name=os.path.splitext(os.path.basename(path))[0])


def save_map(grid: GridMap, path: str) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    lines: List[str] = [
        f"GRID {grid.rows} {grid.cols} {grid.start[0]} {grid.start[1]} {grid.goal[0]} {grid.goal[1]}"
    ]
    for r in range(grid.rows):
        lines.append("".join("#" if grid.walls[r, c] else "." for c in range(grid.cols)))
    with open(path, "w") as f:
        f.write("\n".join(lines) + "\n")
