#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
metrics.py
----------
Checks and summaries over planner snapshots.

What's inside
-------------
- path_is_valid(): contiguity, wall and endpoint checks for a reported path
- path_cost(): cost of a cell sequence (unit cardinal, sqrt(2) diagonal)
- summarize(): flat dict of a snapshot's counters
"""

from __future__ import annotations

import math
from typing import Any, Dict, Sequence

from gridmaps.grid import GridMap
from planners.base import Snapshot


def path_is_valid(grid: GridMap, path: Sequence[int], diagonal: bool = False) -> bool:
    """
    True when `path` runs from start to goal over open cells, each move to a
    4-neighbour (or, with diagonal=True, an 8-neighbour without corner cutting).
    """
    if not path or path[0] != grid.start_node or path[-1] != grid.goal_node:
        return False
    walls = grid.walls
    for node in path:
        r, c = grid.coords(node)
        if not grid.in_bounds(r, c) or walls[r, c]:
            return False
    for a, b in zip(path[:-1], path[1:]):
        ar, ac = grid.coords(a)
        br, bc = grid.coords(b)
        dr, dc = abs(ar - br), abs(ac - bc)
        if dr + dc == 1:
            continue
        if diagonal and dr == 1 and dc == 1:
            if walls[ar, bc] or walls[br, ac]:
                return False
            continue
        return False
    return True


def path_cost(grid: GridMap, path: Sequence[int]) -> float:
    total = 0.0
    for a, b in zip(path[:-1], path[1:]):
        ar, ac = grid.coords(a)
        br, bc = grid.coords(b)
        total += math.hypot(ar - br, ac - bc)
    return total


def summarize(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        "done": snapshot.done,
        "found": snapshot.found,
        "steps": snapshot.steps,
        "nodes_explored": snapshot.nodes_explored,
        "relaxations": snapshot.relaxations,
        "path_len": snapshot.path_len,
        "path_cost": snapshot.path_cost,
        "status": snapshot.status,
    }
