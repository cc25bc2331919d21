#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Theta* (any-angle A* with line-of-sight shortcuts) as a step machine.
- Expands 8 neighbours; a diagonal move needs both adjacent cardinal cells free.
- Before relaxing a neighbour, tests line of sight from the expanding node's
  parent. If clear (and cheaper) the neighbour hangs directly off that parent
  at straight-line cost; otherwise it falls back to the standard relaxation.
- Costs and heuristic are Euclidean; path_cost is reported as a float.
- The reported path rasterizes each parent segment with Bresenham.
"""

from __future__ import annotations

import math

import numpy as np

from gridmaps.grid import DC8, DR8, GridMap, bresenham, line_of_sight
from .base import INF, Cell, Snapshot, SteppingPlanner, trace_parents
from .heap import MinHeap


class ThetaStarState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        n = grid.n_nodes
        self.grid = grid
        self.snapshot = snapshot
        self.heap = MinHeap()
        self.cost = np.full(n, INF)
        self.parent = np.full(n, -1, dtype=np.int64)
        self.closed = np.zeros(n, dtype=bool)


class ThetaStarPlanner(SteppingPlanner):
    name = "Theta*"

    @staticmethod
    def _h(grid: GridMap, r: int, c: int) -> float:
        return math.hypot(r - grid.goal[0], c - grid.goal[1])

    def _setup(self, grid: GridMap, snap: Snapshot) -> ThetaStarState:
        st = ThetaStarState(grid, snap)
        start = grid.start_node
        st.cost[start] = 0.0
        st.heap.push(start, self._h(grid, *grid.start))
        return st

    def _relax(self, st: ThetaStarState, nb: int, via: int, new_g: float) -> bool:
        if new_g >= st.cost[nb]:
            return False
        st.snapshot.relaxations += 1
        st.cost[nb] = new_g
        st.parent[nb] = via
        nr, nc = divmod(nb, st.grid.cols)
        st.heap.push(nb, new_g + self._h(st.grid, nr, nc))
        st.snapshot.mark(nb, Cell.OPEN)
        return True

    def _advance(self, st: ThetaStarState) -> None:
        snap, grid = st.snapshot, st.grid
        if not st.heap:
            snap.finish()
            return

        _, node = st.heap.pop()
        if st.closed[node]:
            return  # stale duplicate
        st.closed[node] = True
        snap.nodes_explored += 1
        snap.mark(node, Cell.CLOSED)

        if node == grid.goal_node:
            snap.set_path(self._rasterize(grid, trace_parents(st.parent, node)), float(st.cost[node]))
            return

        cols = grid.cols
        r, c = divmod(node, cols)
        par = int(st.parent[node])
        for d in range(8):
            nr, nc = r + DR8[d], c + DC8[d]
            if not grid.passable(nr, nc):
                continue
            # no corner cutting on diagonal moves
            if d >= 4 and (grid.walls[nr, c] or grid.walls[r, nc]):
                continue
            nb = nr * cols + nc
            if st.closed[nb]:
                continue

            if par >= 0:
                pr, pc = divmod(par, cols)
                if line_of_sight(grid.walls, (pr, pc), (nr, nc)):
                    if self._relax(st, nb, par, st.cost[par] + math.hypot(nr - pr, nc - pc)):
                        continue
            self._relax(st, nb, node, st.cost[node] + math.hypot(nr - r, nc - c))

    @staticmethod
    def _rasterize(grid: GridMap, waypoints):
        cols = grid.cols
        cells = [waypoints[0]]
        for a, b in zip(waypoints[:-1], waypoints[1:]):
            for (r, c) in bresenham(divmod(a, cols), divmod(b, cols))[1:]:
                cells.append(r * cols + c)
        return cells
