# -*- coding: utf-8 -*-
"""
Flow field: integrate cost backward from the goal, then follow the field.

Phases, each resumable:
  1. integrate: Dijkstra from the goal, one pop per step;
  2. field: one step assigns every reachable cell the cardinal direction
     of its cheapest neighbour (ties resolved up, down, left, right);
  3. walk: one cell per step from the start along the field.
An unreachable start ends the run after phase 1 with no path.
"""

from __future__ import annotations

import logging

import numpy as np

from gridmaps.grid import DC4, DR4, GridMap
from .base import INF, Cell, Snapshot, SteppingPlanner
from .heap import MinHeap

_logger = logging.getLogger(__name__)

INTEGRATE, FIELD, WALK = "integrate", "field", "walk"


class FlowFieldState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        self.grid = grid
        self.snapshot = snapshot
        self.phase = INTEGRATE
        self.heap = MinHeap()
        self.cost = np.full(grid.n_nodes, INF)
        self.closed = np.zeros(grid.n_nodes, dtype=bool)
        self.direction = np.full(grid.n_nodes, -1, dtype=np.int8)
        self.walk = []


def direction_field(cost: np.ndarray, rows: int, cols: int) -> np.ndarray:
    """Index into (up, down, left, right) of each cell's cheapest neighbour, -1 if none is cheaper."""
    grid_cost = cost.reshape(rows, cols)
    pad = np.full((rows + 2, cols + 2), INF)
    pad[1:-1, 1:-1] = grid_cost
    stacked = np.stack([
        pad[1 + DR4[d]:1 + DR4[d] + rows, 1 + DC4[d]:1 + DC4[d] + cols] for d in range(4)
    ])
    best = np.argmin(stacked, axis=0)
    best_cost = np.take_along_axis(stacked, best[None], axis=0)[0]
    field = np.where((best_cost < grid_cost) & np.isfinite(grid_cost), best, -1)
    return field.astype(np.int8).ravel()


class FlowFieldPlanner(SteppingPlanner):
    name = "Flow Field"

    def _setup(self, grid: GridMap, snap: Snapshot) -> FlowFieldState:
        st = FlowFieldState(grid, snap)
        st.cost[grid.goal_node] = 0
        st.heap.push(grid.goal_node, 0)
        return st

    def _advance(self, st: FlowFieldState) -> None:
        if st.phase == INTEGRATE:
            self._integrate(st)
        elif st.phase == FIELD:
            st.direction = direction_field(st.cost, st.grid.rows, st.grid.cols)
            st.phase = WALK
            st.walk = [st.grid.start_node]
        else:
            self._walk(st)

    def _integrate(self, st: FlowFieldState) -> None:
        snap, grid = st.snapshot, st.grid
        if not st.heap:
            reached = int(np.count_nonzero(st.closed))
            _logger.debug("flow field integrated %d cells", reached)
            if st.cost[grid.start_node] == INF:
                snap.finish()
            else:
                st.phase = FIELD
            return

        d, u = st.heap.pop()
        if st.closed[u]:
            return
        st.closed[u] = True
        snap.nodes_explored += 1
        snap.mark(u, Cell.CLOSED)
        nd = d + 1
        for v in grid.neighbors(u):
            if not st.closed[v] and nd < st.cost[v]:
                snap.relaxations += 1
                st.cost[v] = nd
                st.heap.push(v, nd)
                snap.mark(v, Cell.OPEN)

    def _walk(self, st: FlowFieldState) -> None:
        snap, grid = st.snapshot, st.grid
        cur = st.walk[-1]
        if cur == grid.goal_node:
            snap.set_path(st.walk, int(st.cost[grid.start_node]))
            return
        d = st.direction[cur]
        r, c = divmod(cur, grid.cols)
        nxt = (r + DR4[d]) * grid.cols + (c + DC4[d])
        st.walk.append(nxt)
        snap.mark(nxt, Cell.PATH)
        if nxt == grid.goal_node:
            snap.set_path(st.walk, int(st.cost[grid.start_node]))
