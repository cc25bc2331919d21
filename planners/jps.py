# -*- coding: utf-8 -*-
"""
Jump Point Search restricted to 4-connected moves.

Expansion pops a jump point and fires a straight ray in each cardinal
direction. A ray stops and yields a new jump point when
- it reaches the goal,
- a horizontal ray passes a forced neighbour (a side cell that is open while
  the cell behind it is blocked),
- a vertical ray passes a forced neighbour, or a horizontal probe from the
  current cell would itself stop.
Jump cost is the number of cells the ray traversed, so g stays the exact
grid distance and the Manhattan heuristic stays admissible.
"""

from __future__ import annotations

from typing import Optional

from gridmaps.grid import DC4, DR4, GridMap
from .a_star import AStarPlanner, AStarState
from .base import Cell, Snapshot, join_straight, trace_parents


class JPSPlanner(AStarPlanner):
    name = "JPS"

    def _horizontal(self, grid: GridMap, r: int, c: int, dc: int,
                    snap: Optional[Snapshot] = None) -> int:
        """Scan along a row from (r, c) exclusive; returns a jump point or -1."""
        passable = grid.passable
        goal = grid.goal
        while True:
            c += dc
            if not passable(r, c):
                return -1
            node = grid.node_id(r, c)
            if snap is not None and snap.cells[node] == Cell.EMPTY:
                snap.mark(node, Cell.OPEN)
            if (r, c) == goal:
                return node
            if (passable(r - 1, c) and not passable(r - 1, c - dc)) or \
                    (passable(r + 1, c) and not passable(r + 1, c - dc)):
                return node

    def _vertical(self, grid: GridMap, r: int, c: int, dr: int,
                  snap: Snapshot) -> int:
        passable = grid.passable
        goal = grid.goal
        while True:
            r += dr
            if not passable(r, c):
                return -1
            node = grid.node_id(r, c)
            if snap.cells[node] == Cell.EMPTY:
                snap.mark(node, Cell.OPEN)
            if (r, c) == goal:
                return node
            if (passable(r, c - 1) and not passable(r - dr, c - 1)) or \
                    (passable(r, c + 1) and not passable(r - dr, c + 1)):
                return node
            if self._horizontal(grid, r, c, 1) >= 0 or self._horizontal(grid, r, c, -1) >= 0:
                return node

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
            waypoints = trace_parents(st.parent, node)
            snap.set_path(join_straight(waypoints, grid.cols), int(st.cost[node]))
            return

        r, c = divmod(node, grid.cols)
        for d in range(4):
            if DR4[d] == 0:
                jp = self._horizontal(grid, r, c, DC4[d], snap)
            else:
                jp = self._vertical(grid, r, c, DR4[d], snap)
            if jp < 0 or st.closed[jp]:
                continue
            jr, jc = divmod(jp, grid.cols)
            new_g = st.cost[node] + abs(jr - r) + abs(jc - c)
            if new_g < st.cost[jp]:
                snap.relaxations += 1
                st.cost[jp] = new_g
                st.parent[jp] = node
                st.heap.push(jp, new_g + self._h(grid, jp))
                snap.mark(jp, Cell.OPEN)
