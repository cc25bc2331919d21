# -*- coding: utf-8 -*-
"""
Subgoal graphs on 4-connected grids.

Preprocessing:
  1. Subgoals are open cells at obstacle corners: cells whose two cardinal
     neighbours toward a diagonal are both blocked (the map border counts
     as blocked), and cells whose diagonal neighbour is blocked while both
     shared cardinals are open. Start and goal join as virtual subgoals.
  2. One step per subgoal links it to every subgoal it reaches by a
     monotone (Manhattan-length) path inside their bounding box; such a
     pair is at exactly Manhattan distance on the grid.
Query: A* over the subgoal graph, one pop per step. Each edge is turned
back into cells by retracing a monotone path.
"""

from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np

from gridmaps.grid import GridMap, manhattan
from .base import INF, Cell, Snapshot, SteppingPlanner
from .heap import MinHeap

_logger = logging.getLogger(__name__)


def corner_cells(walls: np.ndarray) -> np.ndarray:
    """Boolean mask of open cells sitting at an obstacle corner."""
    rows, cols = walls.shape
    pad = np.ones((rows + 2, cols + 2), dtype=bool)
    pad[1:-1, 1:-1] = walls
    free = ~walls
    out = np.zeros_like(free)

    def shifted(dr, dc):
        return pad[1 + dr:1 + dr + rows, 1 + dc:1 + dc + cols]

    for dr in (-1, 1):
        for dc in (-1, 1):
            vert, horiz, diag = shifted(dr, 0), shifted(0, dc), shifted(dr, dc)
            out |= vert & horiz
            out |= diag & ~vert & ~horiz
    return out & free


def quadrant_reach(free: np.ndarray, r0: int, c0: int, sr: int, sc: int) -> np.ndarray:
    """Cells reachable from (r0, c0) moving only by sr along rows and sc along columns."""
    rows, cols = free.shape
    reach = np.zeros_like(free)
    if not free[r0, c0]:
        return reach
    row_order = range(r0, rows) if sr > 0 else range(r0, -1, -1)
    col_idx = np.arange(c0, cols) if sc > 0 else np.arange(c0, -1, -1)
    pos = np.arange(col_idx.size)
    above = np.zeros(col_idx.size, dtype=bool)
    above[0] = True
    for r in row_order:
        o = free[r, col_idx]
        last_wall = np.maximum.accumulate(np.where(o, -1, pos))
        last_seed = np.maximum.accumulate(np.where(o & above, pos, -1))
        row = o & (last_seed > last_wall)
        if not row.any():
            break
        reach[r, col_idx] = row
        above = row
    return reach


def monotone_cells(free: np.ndarray, a: int, b: int, cols: int) -> List[int]:
    """Cells of one monotone path from node a to node b (both included)."""
    ar, ac = divmod(a, cols)
    br, bc = divmod(b, cols)
    sr = 1 if br >= ar else -1
    sc = 1 if bc >= ac else -1
    reach = quadrant_reach(free, ar, ac, sr, sc)
    r, c = br, bc
    out = [b]
    while (r, c) != (ar, ac):
        if r != ar and reach[r - sr, c]:
            r -= sr
        else:
            c -= sc
        out.append(r * cols + c)
    out.reverse()
    return out


class SubgoalState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        self.grid = grid
        self.snapshot = snapshot
        self.free = ~np.asarray(grid.walls)
        mask = corner_cells(grid.walls)
        mask[grid.start] = True
        mask[grid.goal] = True
        self.subgoals = [int(v) for v in np.flatnonzero(mask.ravel())]
        self.sub_r = np.array([v // grid.cols for v in self.subgoals], dtype=np.int64)
        self.sub_c = np.array([v % grid.cols for v in self.subgoals], dtype=np.int64)
        self.edges: Dict[int, Dict[int, int]] = {v: {} for v in self.subgoals}
        self.next_index = 0
        self.searching = False
        self.heap = MinHeap()
        self.cost: Dict[int, float] = {}
        self.parent: Dict[int, int] = {}
        self.closed = set()


class SubgoalGraphPlanner(SteppingPlanner):
    name = "Subgoal"

    def _setup(self, grid: GridMap, snap: Snapshot) -> SubgoalState:
        st = SubgoalState(grid, snap)
        for v in st.subgoals:
            snap.mark(v, Cell.PREPROCESS)
        return st

    def _advance(self, st: SubgoalState) -> None:
        if not st.searching:
            self._connect_next(st)
        else:
            self._search(st)

    def _connect_next(self, st: SubgoalState) -> None:
        i = st.next_index
        st.next_index += 1
        if i < len(st.subgoals):
            grid = st.grid
            s = st.subgoals[i]
            r, c = divmod(s, grid.cols)
            reach = np.zeros_like(st.free)
            for sr in (-1, 1):
                for sc in (-1, 1):
                    reach |= quadrant_reach(st.free, r, c, sr, sc)
            hits = np.flatnonzero(reach[st.sub_r, st.sub_c])
            for j in hits[hits > i]:
                t = st.subgoals[j]
                d = abs(int(st.sub_r[j]) - r) + abs(int(st.sub_c[j]) - c)
                st.edges[s][t] = d
                st.edges[t][s] = d
            return

        n_edges = sum(len(e) for e in st.edges.values()) // 2
        _logger.debug("subgoal graph: %d subgoals, %d edges", len(st.subgoals), n_edges)
        st.searching = True
        start = st.grid.start_node
        st.cost[start] = 0
        st.heap.push(start, self._h(st.grid, start))

    @staticmethod
    def _h(grid: GridMap, node: int) -> int:
        r, c = divmod(node, grid.cols)
        return manhattan(r, c, grid.goal[0], grid.goal[1])

    def _search(self, st: SubgoalState) -> None:
        snap, grid = st.snapshot, st.grid
        if not st.heap:
            snap.finish()
            return
        _, u = st.heap.pop()
        if u in st.closed:
            return
        st.closed.add(u)
        snap.nodes_explored += 1
        snap.mark(u, Cell.CLOSED)

        if u == grid.goal_node:
            chain = [u]
            while chain[-1] != grid.start_node:
                chain.append(st.parent[chain[-1]])
            chain.reverse()
            cells = [chain[0]]
            for a, b in zip(chain[:-1], chain[1:]):
                cells.extend(monotone_cells(st.free, a, b, grid.cols)[1:])
            snap.set_path(cells, int(st.cost[u]))
            return

        gu = st.cost[u]
        for v, w in st.edges[u].items():
            if v in st.closed:
                continue
            ng = gu + w
            if ng < st.cost.get(v, INF):
                snap.relaxations += 1
                st.cost[v] = ng
                st.parent[v] = u
                st.heap.push(v, ng + self._h(grid, v))
                snap.mark(v, Cell.OPEN)
