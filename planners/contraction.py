# -*- coding: utf-8 -*-
"""
Contraction Hierarchies.

Preprocessing (resumable, one batch of contractions per step):
  - nodes are ordered lazily by edge difference (shortcuts needed minus
    edges removed), ties broken by node id;
  - contracting v links every pair of its uncontracted neighbours (u, w)
    with a shortcut u-w of cost c(u,v) + c(v,w) unless a witness path of at
    most `Limits.witness_hops` hops avoiding v is no longer than that;
  - v keeps its adjacency at contraction time as its upward edges, and
    every shortcut remembers its midpoint for unpacking.

Query: bidirectional Dijkstra over upward edges only. `mu` is the best
meeting cost; the query stops once both frontiers are at or above it.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

import numpy as np

from gridmaps.grid import GridMap
from .base import INF, Cell, Snapshot, SteppingPlanner
from .heap import MinHeap

_logger = logging.getLogger(__name__)

Adjacency = Dict[int, Dict[int, float]]


def _pair(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)


class Hierarchy:
    """Overlay graph being contracted, plus the upward graph it produces."""

    def __init__(self, grid: GridMap, witness_hops: int = 2):
        self.witness_hops = witness_hops
        self.adj: Adjacency = {}
        for node in np.flatnonzero(~grid.flat_walls()):
            node = int(node)
            self.adj[node] = {nb: 1 for nb in grid.neighbors(node)}
        self.up: Adjacency = {}
        self.mids: Dict[Tuple[int, int], int] = {}
        self.rank: Dict[int, int] = {}

    def _has_witness(self, u: int, w: int, skip: int, limit: float) -> bool:
        best = {u: 0}
        frontier = {u: 0}
        for _ in range(self.witness_hops):
            nxt = {}
            for x, dx in frontier.items():
                for y, wxy in self.adj[x].items():
                    if y == skip:
                        continue
                    d = dx + wxy
                    if d <= limit and d < best.get(y, INF):
                        best[y] = d
                        nxt[y] = d
            frontier = nxt
        return best.get(w, INF) <= limit

    def _shortcuts(self, v: int) -> List[Tuple[int, int, float]]:
        nbs = sorted(self.adj[v])
        out = []
        for i, u in enumerate(nbs):
            for w in nbs[i + 1:]:
                cost = self.adj[v][u] + self.adj[v][w]
                if not self._has_witness(u, w, v, cost):
                    out.append((u, w, cost))
        return out

    def edge_difference(self, v: int) -> int:
        return len(self._shortcuts(v)) - len(self.adj[v])

    def contract(self, v: int) -> int:
        """Rank v next; returns the number of shortcuts added or improved."""
        added = 0
        for u, w, cost in self._shortcuts(v):
            if cost < self.adj[u].get(w, INF):
                self.adj[u][w] = cost
                self.adj[w][u] = cost
                self.mids[_pair(u, w)] = v
                added += 1
        self.up[v] = dict(self.adj[v])
        for u in self.adj[v]:
            del self.adj[u][v]
        del self.adj[v]
        self.rank[v] = len(self.rank)
        return added

    def unpack(self, nodes: List[int]) -> List[int]:
        """Expand an overlay node sequence into grid cells."""
        if not nodes:
            return []
        out = [nodes[0]]
        for a, b in zip(nodes[:-1], nodes[1:]):
            stack = [(a, b)]
            while stack:
                x, y = stack.pop()
                m = self.mids.get(_pair(x, y))
                if m is None:
                    out.append(y)
                else:
                    stack.append((m, y))
                    stack.append((x, m))
        return out


class UpwardQuery:
    """Resumable bidirectional upward Dijkstra between two overlay nodes."""

    def __init__(self, up: Adjacency, source: int, target: int):
        self.up = up
        self.dist = ({source: 0}, {target: 0})
        self.parent = ({source: -1}, {target: -1})
        self.settled = (set(), set())
        self.heaps = (MinHeap(), MinHeap())
        self.heaps[0].push(source, 0)
        self.heaps[1].push(target, 0)
        self.turn = 0
        self.mu = INF
        self.meet = -1

    @property
    def finished(self) -> bool:
        f, b = self.heaps
        return min(f.peek_priority(), b.peek_priority()) >= self.mu

    def _touch(self, node: int) -> None:
        total = self.dist[0].get(node, INF) + self.dist[1].get(node, INF)
        if total < self.mu:
            self.mu = total
            self.meet = node

    def advance(self, snap: Snapshot = None) -> None:
        """Settle (or discard) one entry from the side whose turn it is."""
        side = self.turn
        if not self.heaps[side]:
            side = 1 - side
        self.turn = 1 - self.turn

        d, x = self.heaps[side].pop()
        if x in self.settled[side]:
            return
        self.settled[side].add(x)
        dist, parent = self.dist[side], self.parent[side]
        if snap is not None:
            snap.nodes_explored += 1
            snap.mark(x, Cell.CLOSED)
        self._touch(x)
        for y, w in self.up.get(x, {}).items():
            nd = d + w
            if nd < dist.get(y, INF):
                dist[y] = nd
                parent[y] = x
                self.heaps[side].push(y, nd)
                if snap is not None:
                    snap.relaxations += 1
                    snap.mark(y, Cell.OPEN)
                self._touch(y)

    def overlay_path(self) -> List[int]:
        if self.meet < 0:
            return []
        head = []
        cur = self.meet
        while cur != -1:
            head.append(cur)
            cur = self.parent[0][cur]
        head.reverse()
        cur = self.parent[1][self.meet]
        while cur != -1:
            head.append(cur)
            cur = self.parent[1][cur]
        return head


class ContractionState:
    def __init__(self, grid: GridMap, snapshot: Snapshot, witness_hops: int):
        self.grid = grid
        self.snapshot = snapshot
        self.hierarchy = Hierarchy(grid, witness_hops)
        self.order = MinHeap()
        self.batch = 1
        self.query = None


class ContractionHierarchiesPlanner(SteppingPlanner):
    name = "CH"

    @property
    def max_nodes(self) -> int:
        return self.limits.contraction_max_nodes

    def _setup(self, grid: GridMap, snap: Snapshot) -> ContractionState:
        st = ContractionState(grid, snap, self.limits.witness_hops)
        h = st.hierarchy
        for v in sorted(h.adj):
            st.order.push(v, h.edge_difference(v))
        total = len(h.adj)
        st.batch = max(total // self.limits.ch_batch_divisor, self.limits.ch_min_batch)
        return st

    def _advance(self, st: ContractionState) -> None:
        if st.query is None:
            self._contract_batch(st)
            return
        q, snap = st.query, st.snapshot
        if q.finished:
            if q.meet < 0:
                snap.finish()
            else:
                snap.set_path(st.hierarchy.unpack(q.overlay_path()), int(q.mu))
            return
        q.advance(snap)

    def _contract_batch(self, st: ContractionState) -> None:
        h, snap = st.hierarchy, st.snapshot
        done = 0
        while st.order and done < st.batch:
            prio, v = st.order.pop()
            if v in h.rank:
                continue
            ed = h.edge_difference(v)
            # stale priority: requeue unless it still beats the next entry
            if ed > prio and ed > st.order.peek_priority():
                st.order.push(v, ed)
                continue
            snap.relaxations += h.contract(v)
            snap.mark(v, Cell.PREPROCESS)
            done += 1

        if not st.order:
            _logger.debug("contraction finished: %d nodes, %d shortcuts",
                          len(h.rank), len(h.mids))
            st.query = UpwardQuery(h.up, st.grid.start_node, st.grid.goal_node)


def query(state: ContractionState, a: int, b: int) -> Tuple[float, List[int]]:
    """Run a full upward query between node ids a and b on a finished hierarchy."""
    if not isinstance(state, ContractionState) or state.query is None:
        raise ValueError("contraction hierarchy is not built for this state")
    h = state.hierarchy
    if a not in h.up or b not in h.up:
        return INF, []
    if a == b:
        return 0, [a]
    q = UpwardQuery(h.up, a, b)
    while not q.finished:
        q.advance()
    return q.mu, h.unpack(q.overlay_path())
