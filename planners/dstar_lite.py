# -*- coding: utf-8 -*-
"""
D* Lite: incremental replanning, searching backward from the goal.

Every node carries g (current estimate) and rhs (one-step lookahead over its
successors); it is consistent when g == rhs. Queue keys are
(min(g, rhs) + h(start, u) + km, min(g, rhs)). Entries are never updated in
place: a popped entry whose node is already consistent, or whose key is
higher than the node's current key, is dropped; one whose key is lower is
pushed back with the fresh key. Both count as a step.

The state owns a private copy of the wall mask. `notify_wall_toggled` and
`move_start` change it (or the agent position) between steps and the search
resumes from where it stopped rather than starting over.
"""

from __future__ import annotations

import logging
from typing import Iterator, Tuple

import numpy as np

from gridmaps.grid import DC4, DR4, GridMap, manhattan
from .base import INF, Cell, Snapshot, SteppingPlanner
from .heap import MinHeap

_logger = logging.getLogger(__name__)

Key = Tuple[float, float]


class DStarLiteState:
    def __init__(self, grid: GridMap, snapshot: Snapshot):
        n = grid.n_nodes
        self.grid = grid
        self.snapshot = snapshot
        self.walls = np.array(grid.walls, dtype=bool)
        self.g = np.full(n, INF)
        self.rhs = np.full(n, INF)
        self.heap = MinHeap()
        self.km = 0
        self.start = grid.start_node
        self.goal = grid.goal_node

    def open_neighbors(self, node: int) -> Iterator[int]:
        rows, cols = self.walls.shape
        r, c = divmod(node, cols)
        for d in range(4):
            nr, nc = r + DR4[d], c + DC4[d]
            if 0 <= nr < rows and 0 <= nc < cols and not self.walls[nr, nc]:
                yield nr * cols + nc


class DStarLitePlanner(SteppingPlanner):
    name = "D* Lite"

    # ------------------------------------------------------------------ #
    @staticmethod
    def _h(st: DStarLiteState, a: int, b: int) -> int:
        cols = st.grid.cols
        ar, ac = divmod(a, cols)
        br, bc = divmod(b, cols)
        return manhattan(ar, ac, br, bc)

    def _key(self, st: DStarLiteState, u: int) -> Key:
        m = min(st.g[u], st.rhs[u])
        return (m + self._h(st, st.start, u) + st.km, m)

    def _update_vertex(self, st: DStarLiteState, u: int) -> None:
        if u != st.goal:
            best = INF
            for s in st.open_neighbors(u):
                best = min(best, st.g[s] + 1)
            if best < st.rhs[u]:
                st.snapshot.relaxations += 1
            st.rhs[u] = best
        if st.g[u] != st.rhs[u]:
            st.heap.push(u, self._key(st, u))
            st.snapshot.mark(u, Cell.OPEN)

    # ------------------------------------------------------------------ #
    def _setup(self, grid: GridMap, snap: Snapshot) -> DStarLiteState:
        st = DStarLiteState(grid, snap)
        st.rhs[st.goal] = 0
        st.heap.push(st.goal, self._key(st, st.goal))
        return st

    def _advance(self, st: DStarLiteState) -> None:
        snap = st.snapshot
        start = st.start
        if not st.heap or (st.heap.peek_priority() >= self._key(st, start)
                           and st.g[start] == st.rhs[start]):
            self._conclude(st)
            return

        k_old, u = st.heap.pop()
        if st.g[u] == st.rhs[u]:
            return  # consistent already
        k_new = self._key(st, u)
        if k_old < k_new:
            st.heap.push(u, k_new)
            return
        if k_old > k_new:
            return  # superseded by a lower entry

        snap.nodes_explored += 1
        if st.g[u] > st.rhs[u]:
            st.g[u] = st.rhs[u]
            snap.mark(u, Cell.CLOSED)
            for p in st.open_neighbors(u):
                self._update_vertex(st, p)
        else:
            st.g[u] = INF
            self._update_vertex(st, u)
            for p in st.open_neighbors(u):
                self._update_vertex(st, p)

    def _conclude(self, st: DStarLiteState) -> None:
        snap = st.snapshot
        if st.g[st.start] == INF:
            snap.finish()
            return
        path = [st.start]
        cur = st.start
        limit = st.grid.n_nodes
        while cur != st.goal and len(path) <= limit:
            best, best_cost = -1, INF
            for s in st.open_neighbors(cur):
                if st.g[s] + 1 < best_cost:
                    best, best_cost = s, st.g[s] + 1
            if best < 0:
                break
            cur = best
            path.append(cur)
        if cur != st.goal:
            _logger.warning("d* lite could not descend g from %d", st.start)
            snap.finish()
            return
        snap.set_path(path, int(st.g[st.start]))

    # ------------------------------------------------------------------ #
    # External events

    def notify_wall_toggled(self, state, node: int) -> bool:
        """Flip the wall bit of `node` and requeue what it affects.

        Returns False (nothing changed) for the start, the goal, a cell out
        of bounds, or a state that has no running search.
        """
        if not isinstance(state, DStarLiteState):
            return False
        st = state
        if not 0 <= node < st.grid.n_nodes or node in (st.start, st.goal):
            return False

        r, c = divmod(node, st.grid.cols)
        st.walls[r, c] = not st.walls[r, c]
        snap = st.snapshot
        if st.walls[r, c]:
            st.g[node] = INF
            st.rhs[node] = INF
            snap.cells[node] = Cell.WALL
        else:
            snap.cells[node] = Cell.EMPTY
            self._update_vertex(st, node)
        for p in st.open_neighbors(node):
            self._update_vertex(st, p)

        _logger.debug("d* lite wall toggled at %s", (r, c))
        snap.clear_path()
        snap.status = ""
        return True

    def toggle_wall(self, state, r: int, c: int) -> bool:
        if not isinstance(state, DStarLiteState) or not state.grid.in_bounds(r, c):
            return False
        return self.notify_wall_toggled(state, state.grid.node_id(r, c))

    def move_start(self, state, node: int) -> bool:
        """Move the agent to an adjacent open cell and keep the old queue valid via km.

        Stepping onto the goal ends the run as found with a one-cell path; the
        goal cell keeps its end category.
        """
        if not isinstance(state, DStarLiteState):
            return False
        st = state
        if node not in set(st.open_neighbors(st.start)):
            return False
        st.km += self._h(st, st.start, node)
        snap = st.snapshot
        old = st.start
        st.start = node
        snap.start = node
        snap.cells[old] = Cell.END if old == st.goal else Cell.CLOSED
        snap.clear_path()
        if node == st.goal:
            snap.set_path([node], 0)
        else:
            snap.cells[node] = Cell.START
        _logger.debug("d* lite start moved %d -> %d, km=%s", old, node, st.km)
        return True
