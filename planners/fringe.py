# -*- coding: utf-8 -*-
"""
Fringe Search: IDA*'s threshold iterations without discarding the frontier.

The frontier lives in two ordered lists. One step looks at the head of
"now": a node whose f exceeds the threshold is deferred to "later", any
other node is expanded and its improved children are pushed to the front of
"now". When "now" runs dry, "later" is promoted and the threshold rises to
the smallest deferred f. Deferral and promotion each count as a step.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

import numpy as np

from gridmaps.grid import GridMap, manhattan
from .base import INF, Cell, Snapshot, SteppingPlanner, trace_parents

_logger = logging.getLogger(__name__)


class FringeState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        n = grid.n_nodes
        self.grid = grid
        self.snapshot = snapshot
        self.now: "OrderedDict[int, None]" = OrderedDict()
        self.later: "OrderedDict[int, None]" = OrderedDict()
        self.cost = np.full(n, INF)
        self.parent = np.full(n, -1, dtype=np.int64)
        self.threshold = 0
        self.next_threshold = INF


class FringePlanner(SteppingPlanner):
    name = "Fringe"

    @staticmethod
    def _h(grid: GridMap, node: int) -> int:
        r, c = divmod(node, grid.cols)
        return manhattan(r, c, grid.goal[0], grid.goal[1])

    def _setup(self, grid: GridMap, snap: Snapshot) -> FringeState:
        st = FringeState(grid, snap)
        start = grid.start_node
        st.cost[start] = 0
        st.now[start] = None
        st.threshold = self._h(grid, start)
        return st

    def _advance(self, st: FringeState) -> None:
        snap, grid = st.snapshot, st.grid

        if not st.now:
            if not st.later or st.next_threshold == INF:
                snap.finish()
                return
            st.now, st.later = st.later, OrderedDict()
            st.threshold = st.next_threshold
            st.next_threshold = INF
            _logger.debug("fringe threshold raised to %s", st.threshold)
            return

        node, _ = st.now.popitem(last=False)
        f = st.cost[node] + self._h(grid, node)
        if f > st.threshold:
            st.later[node] = None
            st.next_threshold = min(st.next_threshold, f)
            return

        snap.nodes_explored += 1
        snap.mark(node, Cell.CLOSED)
        if node == grid.goal_node:
            snap.set_path(trace_parents(st.parent, node), int(st.cost[node]))
            return

        new_g = st.cost[node] + 1
        for nb in reversed(list(grid.neighbors(node))):
            if new_g >= st.cost[nb]:
                continue
            snap.relaxations += 1
            st.cost[nb] = new_g
            st.parent[nb] = node
            st.later.pop(nb, None)
            st.now[nb] = None
            st.now.move_to_end(nb, last=False)
            snap.mark(nb, Cell.OPEN)
