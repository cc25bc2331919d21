# -*- coding: utf-8 -*-
"""
Evaluation utilities: a scipy reference oracle and snapshot metrics.
"""

from __future__ import annotations

from .metrics import path_cost, path_is_valid, summarize
from .reference import adjacency, distance_matrix, shortest_distance, shortest_path_nodes

__all__ = [
    "adjacency",
    "distance_matrix",
    "path_cost",
    "path_is_valid",
    "shortest_distance",
    "shortest_path_nodes",
    "summarize",
]
