#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
generator.py
------------
Random occupancy-grid maps for exercising the planners.

- Obstacles are rectangles and small random blobs stamped onto an empty grid
  until a target density is reached.
- Reachability is decided with connected-component labelling of free space
  (scipy.ndimage.label, 4-connected), which matches planner movement.
- `ensure` controls the outcome: "any", "path" (start and goal connected) or
  "no_path" (shortest route is cut with small bars until disconnected).
- Reproducible through an explicit np.random.Generator.
"""

from __future__ import annotations

from collections import deque
from typing import List, Optional, Tuple

import numpy as np
from scipy.ndimage import label as cc_label

from .grid import DC4, DR4, Coord, GridMap

# 4-connected structuring element for free-space labelling
_STRUCT_4 = np.array([[0, 1, 0],
                      [1, 1, 1],
                      [0, 1, 0]], dtype=np.uint8)


def free_components(walls: np.ndarray) -> Tuple[np.ndarray, int]:
    """Label 4-connected free-space components (0 = wall, 1..K = component)."""
    labels, num = cc_label((~walls).astype(np.uint8), structure=_STRUCT_4)
    return labels, int(num)


def connected(walls: np.ndarray, a: Coord, b: Coord) -> bool:
    if walls[a] or walls[b]:
        return False
    labels, _ = free_components(walls)
    return labels[a] == labels[b]


def _bfs_path(walls: np.ndarray, a: Coord, b: Coord) -> Optional[List[Coord]]:
    H, W = walls.shape
    parent = {a: None}
    dq = deque([a])
    while dq:
        cur = dq.popleft()
        if cur == b:
            path = []
            while cur is not None:
                path.append(cur)
                cur = parent[cur]
            path.reverse()
            return path
        r, c = cur
        for d in range(4):
            nxt = (r + DR4[d], c + DC4[d])
            if 0 <= nxt[0] < H and 0 <= nxt[1] < W and not walls[nxt] and nxt not in parent:
                parent[nxt] = cur
                dq.append(nxt)
    return None


def _random_blob(rng: np.random.Generator, n_min: int, n_max: int) -> np.ndarray:
    n = int(rng.integers(n_min, n_max + 1))
    side = n + 2
    canvas = np.zeros((side, side), dtype=bool)
    cells = [(side // 2, side // 2)]
    canvas[cells[0]] = True
    while len(cells) < n:
        br, bc = cells[int(rng.integers(0, len(cells)))]
        d = int(rng.integers(0, 4))
        nr, nc = br + DR4[d], bc + DC4[d]
        if 0 <= nr < side and 0 <= nc < side and not canvas[nr, nc]:
            canvas[nr, nc] = True
            cells.append((nr, nc))
    ys, xs = np.where(canvas)
    return canvas[ys.min():ys.max() + 1, xs.min():xs.max() + 1]


def generate_map(
    rows: int = 30,
    cols: int = 30,
    *,
    density: float = 0.2,
    start: Coord = (0, 0),
    goal: Optional[Coord] = None,
    ensure: str = "any",
    rect_size: Tuple[Tuple[int, int], Tuple[int, int]] = ((1, 4), (1, 6)),
    blob_cells: Tuple[int, int] = (3, 10),
    rng: Optional[np.random.Generator] = None,
    max_attempts: int = 50,
    name: str = "random",
) -> GridMap:
    """
    Create a random map.

    ensure:
        "any"     : no guarantee about path existence.
        "path"    : start and goal are 4-connected (re-rolls, then carves).
        "no_path" : start and goal are disconnected (cuts the shortest route).
    """
    if ensure not in ("any", "path", "no_path"):
        raise ValueError(f"Unknown ensure mode '{ensure}'")
    if goal is None:
        goal = (rows - 1, cols - 1)
    rng = rng or np.random.default_rng()
    density = float(np.clip(density, 0.0, 0.9))
    target = int(round(density * rows * cols))

    walls = np.zeros((rows, cols), dtype=bool)
    for _ in range(max_attempts):
        walls = np.zeros((rows, cols), dtype=bool)
        tries = 0
        while int(walls.sum()) < target and tries < 20 * rows * cols:
            tries += 1
            if rng.random() < 0.6:
                (h0, h1), (w0, w1) = rect_size
                mask = np.ones((int(rng.integers(h0, h1 + 1)), int(rng.integers(w0, w1 + 1))), dtype=bool)
            else:
                mask = _random_blob(rng, blob_cells[0], blob_cells[1])
            mr, mc = mask.shape
            if mr > rows or mc > cols:
                continue
            r0 = int(rng.integers(0, rows - mr + 1))
            c0 = int(rng.integers(0, cols - mc + 1))
            walls[r0:r0 + mr, c0:c0 + mc] |= mask
        walls[start] = False
        walls[goal] = False
        if ensure != "path" or connected(walls, start, goal):
            break
    else:
        # carve an L-shaped route as a last resort
        r0, c0 = start
        r1, c1 = goal
        walls[r0, min(c0, c1):max(c0, c1) + 1] = False
        walls[min(r0, r1):max(r0, r1) + 1, c1] = False

    if ensure == "no_path" and start != goal:
        for _ in range(rows * cols):
            path = _bfs_path(walls, start, goal)
            if path is None or len(path) <= 2:
                break
            # block a cell in the middle of the route (never the endpoints)
            walls[path[len(path) // 2]] = True

    return GridMap(rows, cols, walls, start, goal, name)
