# -*- coding: utf-8 -*-
"""
Bellman-Ford over the directed 4-connected edge list.

One step is one full pass relaxing every edge. Passes stop early once a pass
changes nothing, and never exceed node_count - 1. A closing check pass looks
for an edge that still relaxes; with unit weights it cannot fire, but it is
kept as the negative-cycle guard for weighted maps.
"""

from __future__ import annotations

import logging

import numpy as np

from gridmaps.grid import GridMap
from .base import INF, Cell, Snapshot, SteppingPlanner, trace_parents

_logger = logging.getLogger(__name__)


class BellmanFordState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        n = grid.n_nodes
        self.grid = grid
        self.snapshot = snapshot
        edges = grid.edges()
        self.src = np.array([u for u, _ in edges], dtype=np.int64)
        self.dst = np.array([v for _, v in edges], dtype=np.int64)
        self.weight = np.ones(len(edges))
        self.dist = np.full(n, INF)
        self.parent = np.full(n, -1, dtype=np.int64)
        self.passes = 0
        self.max_passes = max(grid.open_count() - 1, 0)


class BellmanFordPlanner(SteppingPlanner):
    name = "Bellman-Ford"

    def _setup(self, grid: GridMap, snap: Snapshot) -> BellmanFordState:
        st = BellmanFordState(grid, snap)
        st.dist[grid.start_node] = 0
        return st

    def _advance(self, st: BellmanFordState) -> None:
        snap = st.snapshot
        if st.passes >= st.max_passes:
            self._conclude(st)
            return

        st.passes += 1
        changed = False
        dist, parent = st.dist, st.parent
        for i in range(st.src.size):
            u = st.src[i]
            du = dist[u]
            if du == INF:
                continue
            v = st.dst[i]
            cand = du + st.weight[i]
            if cand < dist[v]:
                if dist[v] == INF:
                    snap.nodes_explored += 1
                    snap.mark(v, Cell.OPEN)
                dist[v] = cand
                parent[v] = u
                snap.relaxations += 1
                changed = True

        if not changed:
            _logger.debug("bellman-ford converged after %d passes", st.passes)
            self._conclude(st)

    def _conclude(self, st: BellmanFordState) -> None:
        snap, grid = st.snapshot, st.grid
        # negative-cycle guard
        reach = st.dist[st.src] < INF
        if np.any(st.dist[st.src][reach] + st.weight[reach] < st.dist[st.dst][reach]):
            _logger.warning("bellman-ford found a negative cycle on map '%s'", grid.name)
            snap.finish(status="negative cycle")
            return

        for node in np.flatnonzero(st.dist < INF):
            snap.mark(int(node), Cell.CLOSED)
        goal = grid.goal_node
        if st.dist[goal] < INF:
            snap.set_path(trace_parents(st.parent, goal), int(st.dist[goal]))
        else:
            snap.finish()
