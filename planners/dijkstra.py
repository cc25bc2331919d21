#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dijkstra step machine: A* with h = 0, so the heap is ordered by g alone.
"""

from __future__ import annotations

from gridmaps.grid import GridMap
from .a_star import AStarPlanner


class DijkstraPlanner(AStarPlanner):
    name = "Dijkstra"

    def _h(self, grid: GridMap, node: int) -> int:
        return 0
