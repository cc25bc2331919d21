# -*- coding: utf-8 -*-
"""
Rectangular Symmetry Reduction.

Preprocessing carves the walkable area into empty rectangles, one per step:
from the first unassigned open cell (row-major) extend right while cells are
open and unassigned, then extend down while the whole row segment is. Only
rectangle perimeters are searchable, plus start, goal and the row and column
through each of them inside their own rectangle.

Query: A* where a move from a searchable cell walks straight in one of the
four directions until it meets the next searchable cell. Inside a rectangle
that is a macro-edge across the interior; on the perimeter it is one step.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Tuple

import numpy as np

from gridmaps.grid import DC4, DR4, GridMap, manhattan
from .base import INF, Cell, Snapshot, SteppingPlanner, join_straight, trace_parents
from .heap import MinHeap

_logger = logging.getLogger(__name__)


class RSRState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        n = grid.n_nodes
        self.grid = grid
        self.snapshot = snapshot
        self.rect_id = np.full((grid.rows, grid.cols), -1, dtype=np.int64)
        self.rects: List[Tuple[int, int, int, int]] = []   # top, left, bottom, right
        self.searchable = np.zeros((grid.rows, grid.cols), dtype=bool)
        self.scan = 0
        self.searching = False
        self.heap = MinHeap()
        self.cost = np.full(n, INF)
        self.parent = np.full(n, -1, dtype=np.int64)
        self.closed = np.zeros(n, dtype=bool)


class RSRPlanner(SteppingPlanner):
    name = "RSR"

    def _setup(self, grid: GridMap, snap: Snapshot) -> RSRState:
        return RSRState(grid, snap)

    def _advance(self, st: RSRState) -> None:
        if not st.searching:
            self._next_rectangle(st)
        else:
            self._search(st)

    # ------------------------------------------------------------------ #
    def _next_rectangle(self, st: RSRState) -> None:
        grid = st.grid
        walls = grid.walls
        n = grid.n_nodes
        while st.scan < n:
            r, c = divmod(st.scan, grid.cols)
            if not walls[r, c] and st.rect_id[r, c] < 0:
                break
            st.scan += 1
        if st.scan >= n:
            self._start_search(st)
            return

        top, left = divmod(st.scan, grid.cols)
        right = left
        while right + 1 < grid.cols and not walls[top, right + 1] and st.rect_id[top, right + 1] < 0:
            right += 1
        bottom = top
        while bottom + 1 < grid.rows:
            seg_walls = walls[bottom + 1, left:right + 1]
            seg_ids = st.rect_id[bottom + 1, left:right + 1]
            if seg_walls.any() or (seg_ids >= 0).any():
                break
            bottom += 1

        st.rect_id[top:bottom + 1, left:right + 1] = len(st.rects)
        st.rects.append((top, left, bottom, right))
        st.searchable[top, left:right + 1] = True
        st.searchable[bottom, left:right + 1] = True
        st.searchable[top:bottom + 1, left] = True
        st.searchable[top:bottom + 1, right] = True
        for r in range(top, bottom + 1):
            for c in (left, right):
                st.snapshot.mark(grid.node_id(r, c), Cell.PREPROCESS)
        for c in range(left, right + 1):
            st.snapshot.mark(grid.node_id(top, c), Cell.PREPROCESS)
            st.snapshot.mark(grid.node_id(bottom, c), Cell.PREPROCESS)

    def _start_search(self, st: RSRState) -> None:
        grid = st.grid
        for (r, c) in (grid.start, grid.goal):
            top, left, bottom, right = st.rects[st.rect_id[r, c]]
            st.searchable[r, left:right + 1] = True
            st.searchable[top:bottom + 1, c] = True
        _logger.debug("rsr: %d rectangles, %d searchable cells",
                      len(st.rects), int(st.searchable.sum()))
        st.searching = True
        start = grid.start_node
        st.cost[start] = 0
        st.heap.push(start, self._h(grid, start))

    # ------------------------------------------------------------------ #
    @staticmethod
    def _h(grid: GridMap, node: int) -> int:
        r, c = divmod(node, grid.cols)
        return manhattan(r, c, grid.goal[0], grid.goal[1])

    @staticmethod
    def _moves(st: RSRState, node: int) -> Iterator[Tuple[int, int]]:
        """(neighbour, cost) pairs: the first searchable cell along each direction."""
        grid = st.grid
        r0, c0 = divmod(node, grid.cols)
        for d in range(4):
            r, c, k = r0, c0, 0
            while True:
                r += DR4[d]
                c += DC4[d]
                k += 1
                if not grid.passable(r, c):
                    break
                if st.searchable[r, c]:
                    yield grid.node_id(r, c), k
                    break

    def _search(self, st: RSRState) -> None:
        snap, grid = st.snapshot, st.grid
        if not st.heap:
            snap.finish()
            return
        _, u = st.heap.pop()
        if st.closed[u]:
            return
        st.closed[u] = True
        snap.nodes_explored += 1
        snap.mark(u, Cell.CLOSED)

        if u == grid.goal_node:
            waypoints = trace_parents(st.parent, u)
            snap.set_path(join_straight(waypoints, grid.cols), int(st.cost[u]))
            return

        for v, w in self._moves(st, u):
            if st.closed[v]:
                continue
            ng = st.cost[u] + w
            if ng < st.cost[v]:
                snap.relaxations += 1
                st.cost[v] = ng
                st.parent[v] = u
                st.heap.push(v, ng + self._h(grid, v))
                snap.mark(v, Cell.OPEN)
