#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
reference.py
------------
Reference shortest paths for cross-checking the stepping planners.

Everything here runs to completion in one call on scipy.sparse.csgraph:
the grid is turned into a sparse unit-weight adjacency over node ids
(r * cols + c) and handed to its Dijkstra / Floyd-Warshall routines.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import dijkstra, shortest_path

from gridmaps.grid import GridMap


def adjacency(grid: GridMap, walls: Optional[np.ndarray] = None) -> csr_matrix:
    """Sparse 4-connected unit-weight adjacency over all node ids."""
    if walls is not None:
        grid = grid.with_walls(walls)
    edges = grid.edges()
    n = grid.n_nodes
    if not edges:
        return csr_matrix((n, n))
    src, dst = zip(*edges)
    data = np.ones(len(edges))
    return csr_matrix((data, (np.array(src), np.array(dst))), shape=(n, n))


def shortest_distance(grid: GridMap, a: Optional[int] = None, b: Optional[int] = None,
                      walls: Optional[np.ndarray] = None) -> float:
    """Distance between node ids a and b (defaults: start and goal); inf when unreachable."""
    a = grid.start_node if a is None else a
    b = grid.goal_node if b is None else b
    if a == b:
        return 0.0
    dist = dijkstra(adjacency(grid, walls), directed=True, indices=a, unweighted=True)
    return float(dist[b])


def shortest_path_nodes(grid: GridMap, a: Optional[int] = None, b: Optional[int] = None) -> List[int]:
    """One shortest node sequence from a to b, or [] when unreachable."""
    a = grid.start_node if a is None else a
    b = grid.goal_node if b is None else b
    dist, pred = dijkstra(adjacency(grid), directed=True, indices=a,
                          unweighted=True, return_predecessors=True)
    if not np.isfinite(dist[b]):
        return []
    out = [b]
    while out[-1] != a:
        out.append(int(pred[out[-1]]))
    out.reverse()
    return out


def distance_matrix(grid: GridMap) -> np.ndarray:
    """All-pairs distances over node ids (rows/columns of walls are inf off the diagonal)."""
    return shortest_path(adjacency(grid), method="FW", directed=True, unweighted=True)
