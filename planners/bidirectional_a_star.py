# -*- coding: utf-8 -*-
"""
Bidirectional A*: a forward frontier from the start (h = Manhattan to goal)
and a backward frontier from the goal (h = Manhattan to start), expanded in
alternation one node per step.

`mu` is the best start→goal cost seen through a node reached by both sides.
The search stops once a meeting node exists and neither frontier can still
offer a key below `mu`.
"""

from __future__ import annotations

import logging

import numpy as np

from gridmaps.grid import GridMap, manhattan
from .base import INF, Cell, Snapshot, SteppingPlanner, trace_parents
from .heap import MinHeap

_logger = logging.getLogger(__name__)


class _Side:
    def __init__(self, n: int, root: int, target):
        self.heap = MinHeap()
        self.cost = np.full(n, INF)
        self.parent = np.full(n, -1, dtype=np.int64)
        self.closed = np.zeros(n, dtype=bool)
        self.target = target
        self.cost[root] = 0


class BidirectionalState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        n = grid.n_nodes
        self.grid = grid
        self.snapshot = snapshot
        self.fwd = _Side(n, grid.start_node, grid.goal)
        self.bwd = _Side(n, grid.goal_node, grid.start)
        self.mu = INF
        self.meet = -1
        self.forward_turn = True


class BidirectionalAStarPlanner(SteppingPlanner):
    name = "Bidirectional A*"

    @staticmethod
    def _h(grid: GridMap, node: int, target) -> int:
        r, c = divmod(node, grid.cols)
        return manhattan(r, c, target[0], target[1])

    def _setup(self, grid: GridMap, snap: Snapshot) -> BidirectionalState:
        st = BidirectionalState(grid, snap)
        st.fwd.heap.push(grid.start_node, self._h(grid, grid.start_node, grid.goal))
        st.bwd.heap.push(grid.goal_node, self._h(grid, grid.goal_node, grid.start))
        return st

    def _met(self, st: BidirectionalState, node: int) -> None:
        total = st.fwd.cost[node] + st.bwd.cost[node]
        if total < st.mu:
            st.mu = total
            st.meet = node

    def _finish(self, st: BidirectionalState) -> None:
        snap = st.snapshot
        if st.meet < 0:
            snap.finish()
            return
        head = trace_parents(st.fwd.parent, st.meet)
        tail = trace_parents(st.bwd.parent, st.meet)[::-1]
        _logger.debug("bidirectional search met at %d, mu=%s", st.meet, st.mu)
        snap.set_path(head + tail[1:], int(st.mu))

    def _advance(self, st: BidirectionalState) -> None:
        snap, grid = st.snapshot, st.grid
        fwd, bwd = st.fwd, st.bwd

        if not fwd.heap or not bwd.heap:
            # one side exhausted its component
            self._finish(st)
            return
        if st.meet >= 0 and min(fwd.heap.peek_priority(), bwd.heap.peek_priority()) >= st.mu:
            self._finish(st)
            return

        side, other = (fwd, bwd) if st.forward_turn else (bwd, fwd)
        st.forward_turn = not st.forward_turn

        _, node = side.heap.pop()
        if side.closed[node]:
            return  # stale duplicate
        side.closed[node] = True
        snap.nodes_explored += 1
        snap.mark(node, Cell.CLOSED)
        if other.cost[node] < INF:
            self._met(st, node)

        new_g = side.cost[node] + 1
        for nb in grid.neighbors(node):
            if side.closed[nb] or new_g >= side.cost[nb]:
                continue
            snap.relaxations += 1
            side.cost[nb] = new_g
            side.parent[nb] = node
            side.heap.push(nb, new_g + self._h(grid, nb, side.target))
            snap.mark(nb, Cell.OPEN)
            if other.cost[nb] < INF:
                self._met(st, nb)
