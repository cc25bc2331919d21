# -*- coding: utf-8 -*-
"""
Planner limits.

Every planner takes an optional `limits=` argument; DEFAULT_LIMITS is used
otherwise. The CLI maps its flags onto these fields.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Limits:
    max_rows: int = 100
    max_cols: int = 100
    # O(V^2) matrices: refuse above this many map cells
    floyd_warshall_max_nodes: int = 2500
    # contraction keeps an overlay graph plus shortcut midpoints
    contraction_max_nodes: int = 2500
    # contractions per step = max(total // ch_batch_divisor, ch_min_batch)
    ch_batch_divisor: int = 50
    ch_min_batch: int = 10
    # witness search explores at most this many hops
    witness_hops: int = 2


DEFAULT_LIMITS = Limits()
