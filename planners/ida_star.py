# -*- coding: utf-8 -*-
"""
IDA* with an explicit frame stack.

Each frame is [node, g, next_direction]. A step either advances the top
frame's direction cursor (pushing a child when f = g + h stays within the
threshold) or pops an exhausted frame. When the stack empties the threshold
rises to the smallest f that exceeded it and the search restarts from the
start; no such f means there is no path. Nodes already on the current path
are never pushed again.
"""

from __future__ import annotations

import logging

import numpy as np

from gridmaps.grid import DC4, DR4, GridMap, manhattan
from .base import INF, Cell, Snapshot, SteppingPlanner

_logger = logging.getLogger(__name__)


class IDAStarState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        self.grid = grid
        self.snapshot = snapshot
        self.stack = []
        self.on_path = np.zeros(grid.n_nodes, dtype=bool)
        self.threshold = 0
        self.next_threshold = INF
        self.iterations = 0


class IDAStarPlanner(SteppingPlanner):
    name = "IDA*"

    @staticmethod
    def _h(grid: GridMap, node: int) -> int:
        r, c = divmod(node, grid.cols)
        return manhattan(r, c, grid.goal[0], grid.goal[1])

    def _setup(self, grid: GridMap, snap: Snapshot) -> IDAStarState:
        st = IDAStarState(grid, snap)
        st.threshold = self._h(grid, grid.start_node)
        self._restart(st)
        return st

    @staticmethod
    def _restart(st: IDAStarState) -> None:
        start = st.grid.start_node
        st.stack = [[start, 0, 0]]
        st.on_path[:] = False
        st.on_path[start] = True
        st.next_threshold = INF
        st.iterations += 1

    def _advance(self, st: IDAStarState) -> None:
        snap, grid = st.snapshot, st.grid

        if not st.stack:
            if st.next_threshold == INF:
                snap.finish()
                return
            st.threshold = st.next_threshold
            _logger.debug("ida* iteration %d, threshold %s", st.iterations + 1, st.threshold)
            cells = snap.cells
            cells[(cells == Cell.OPEN) | (cells == Cell.CLOSED)] = Cell.EMPTY
            self._restart(st)
            return

        frame = st.stack[-1]
        node, g, d = frame
        if d >= 4:
            st.stack.pop()
            st.on_path[node] = False
            snap.mark(node, Cell.CLOSED)
            return

        frame[2] = d + 1
        r, c = divmod(node, grid.cols)
        nr, nc = r + DR4[d], c + DC4[d]
        if not grid.passable(nr, nc):
            return
        nb = nr * grid.cols + nc
        if st.on_path[nb]:
            return

        ng = g + 1
        f = ng + self._h(grid, nb)
        if f > st.threshold:
            st.next_threshold = min(st.next_threshold, f)
            return

        snap.relaxations += 1
        snap.nodes_explored += 1
        st.stack.append([nb, ng, 0])
        st.on_path[nb] = True
        snap.mark(nb, Cell.OPEN)
        if nb == grid.goal_node:
            snap.set_path([fr[0] for fr in st.stack], ng)
