# -*- coding: utf-8 -*-
"""
Floyd-Warshall over the walkable cells.

Open cells are compressed to dense ids 0..V-1 and the V x V distance and
next-hop matrices are numpy arrays. One step processes one intermediate
vertex k for every (i, j) pair at once; the step after the last k reads the
start→goal answer off the matrices. Memory is O(V^2), so the planner
reports "skipped" for maps above `Limits.floyd_warshall_max_nodes` cells.

After completion `distance` and `path` answer any pair without searching.
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from gridmaps.grid import GridMap
from .base import INF, Cell, Snapshot, SteppingPlanner

_logger = logging.getLogger(__name__)


class FloydWarshallState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        self.grid = grid
        self.snapshot = snapshot
        self.nodes = np.flatnonzero(~grid.flat_walls())
        self.dense = np.full(grid.n_nodes, -1, dtype=np.int64)
        self.dense[self.nodes] = np.arange(self.nodes.size)

        v = self.nodes.size
        self.dist = np.full((v, v), INF)
        self.next = np.full((v, v), -1, dtype=np.int64)
        diag = np.arange(v)
        self.dist[diag, diag] = 0
        self.next[diag, diag] = diag
        for a, b in grid.edges():
            i, j = self.dense[a], self.dense[b]
            self.dist[i, j] = 1
            self.next[i, j] = j
        self.k = 0


class FloydWarshallPlanner(SteppingPlanner):
    name = "Floyd-Warshall"

    @property
    def max_nodes(self) -> int:
        return self.limits.floyd_warshall_max_nodes

    def _setup(self, grid: GridMap, snap: Snapshot) -> FloydWarshallState:
        return FloydWarshallState(grid, snap)

    def _advance(self, st: FloydWarshallState) -> None:
        snap, grid = st.snapshot, st.grid
        if st.k >= st.nodes.size:
            self._conclude(st)
            return

        k = st.k
        cand = st.dist[:, k, None] + st.dist[None, k, :]
        mask = cand < st.dist
        snap.relaxations += int(np.count_nonzero(mask))
        st.dist = np.where(mask, cand, st.dist)
        st.next = np.where(mask, st.next[:, k, None], st.next)
        st.k += 1

        snap.nodes_explored += 1
        s = st.dense[grid.start_node]
        reached = st.nodes[st.dist[s] < INF]
        fresh = reached[snap.cells[reached] == Cell.EMPTY]
        snap.cells[fresh] = Cell.OPEN
        snap.mark(int(st.nodes[k]), Cell.CLOSED)

    def _conclude(self, st: FloydWarshallState) -> None:
        snap, grid = st.snapshot, st.grid
        _logger.debug("floyd-warshall finished %d intermediate vertices", st.k)
        cost = st.dist[st.dense[grid.start_node], st.dense[grid.goal_node]]
        if cost == INF:
            snap.finish()
            return
        snap.set_path(path(st, grid.start_node, grid.goal_node), int(cost))


def _completed(state) -> FloydWarshallState:
    if not isinstance(state, FloydWarshallState) or state.k < state.nodes.size:
        raise ValueError("Floyd-Warshall matrices are not complete for this state")
    return state


def distance(state, a: int, b: int) -> float:
    """Shortest distance between node ids a and b (inf when either is a wall or unreachable)."""
    st = _completed(state)
    i, j = st.dense[a], st.dense[b]
    if i < 0 or j < 0:
        return INF
    return float(st.dist[i, j])


def path(state, a: int, b: int) -> List[int]:
    """Node ids from a to b following next-hop pointers; empty when unreachable."""
    st = _completed(state)
    i, j = int(st.dense[a]), int(st.dense[b])
    if i < 0 or j < 0 or st.dist[i, j] == INF:
        return []
    out = [int(st.nodes[i])]
    while i != j:
        i = int(st.next[i, j])
        out.append(int(st.nodes[i]))
    return out
