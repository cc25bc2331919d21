# -*- coding: utf-8 -*-
"""
Binary min-heap over (priority, node) pairs.

There is no decrease-key: a cheaper priority for a queued node is pushed as a
second entry and the caller discards the stale one when it pops (node already
closed, or cached priority no longer equal to the authoritative value).
Ties are broken by node id so runs are deterministic.
"""

from __future__ import annotations

import heapq
from typing import Any, List, Tuple


class MinHeap:
    __slots__ = ("_data",)

    def __init__(self):
        self._data: List[Tuple[Any, int]] = []

    def push(self, node: int, priority: Any) -> None:
        heapq.heappush(self._data, (priority, node))

    def pop(self) -> Tuple[Any, int]:
        """Remove and return (priority, node) with the smallest priority."""
        return heapq.heappop(self._data)

    def peek_priority(self, default: Any = float("inf")) -> Any:
        return self._data[0][0] if self._data else default

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)
