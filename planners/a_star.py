#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
A* as a step machine (4-connected, unit edges, Manhattan heuristic).

One step pops the minimum f = g + h entry. A stale duplicate (node already
closed) is dropped; otherwise the node is closed and its neighbours relaxed.
Success when the goal is popped, failure when the heap runs dry.
"""

from __future__ import annotations

import numpy as np

from gridmaps.grid import GridMap, manhattan
from .base import INF, Cell, Snapshot, SteppingPlanner, trace_parents
from .heap import MinHeap


class AStarState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        n = grid.n_nodes
        self.grid = grid
        self.snapshot = snapshot
        self.heap = MinHeap()
        self.cost = np.full(n, INF)
        self.parent = np.full(n, -1, dtype=np.int64)
        self.closed = np.zeros(n, dtype=bool)


class AStarPlanner(SteppingPlanner):
    name = "A*"

    def _h(self, grid: GridMap, node: int) -> int:
        r, c = divmod(node, grid.cols)
        return manhattan(r, c, grid.goal[0], grid.goal[1])

    def _setup(self, grid: GridMap, snap: Snapshot) -> AStarState:
        st = AStarState(grid, snap)
        start = grid.start_node
        st.cost[start] = 0
        st.heap.push(start, self._h(grid, start))
        return st

    def _advance(self, st: AStarState) -> None:
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
            snap.set_path(trace_parents(st.parent, node), int(st.cost[node]))
            return

        new_g = st.cost[node] + 1
        for nb in grid.neighbors(node):
            if st.closed[nb]:
                continue
            if new_g < st.cost[nb]:
                snap.relaxations += 1
                st.cost[nb] = new_g
                st.parent[nb] = node
                st.heap.push(nb, new_g + self._h(grid, nb))
                snap.mark(nb, Cell.OPEN)
