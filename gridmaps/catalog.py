# -*- coding: utf-8 -*-
"""Named maps shipped with the package."""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from .grid import GridMap

# Classic 20x20 benchmark grid, start (0,0), goal (19,19).
_CLASSIC_20 = (
    "00000100000000100000",
    "01100101101100101100",
    "01000000100100000100",
    "00011100100001110000",
    "00000100001000010010",
    "11000001101010000110",
    "00010000100010010000",
    "01010110000100010100",
    "01000000010101000001",
    "00001010010001001000",
    "01101010000010001010",
    "00000000101000100000",
    "00110100101001100100",
    "00000100000000000100",
    "11000001010100010000",
    "00010001000100000010",
    "01010100001001001010",
    "01000100100001000000",
    "00000000100100010100",
    "00100010000100000000",
)


def classic() -> GridMap:
    mask = [int(ch) for row in _CLASSIC_20 for ch in row]
    return GridMap.from_mask(20, 20, (0, 0), (19, 19), mask, name="classic")


def wide_open(rows: int = 30, cols: int = 30) -> GridMap:
    return GridMap.open(rows, cols, (0, 0), (rows - 1, cols - 1), name="wide_open")


def corridor(n: int = 20) -> GridMap:
    """L-shaped 1-cell corridor: row 0 then the last column, everything else walls."""
    walls = np.ones((n, n), dtype=bool)
    walls[0, :] = False
    walls[:, n - 1] = False
    return GridMap(n, n, walls, (0, 0), (n - 1, n - 1), name="corridor")


def bottleneck(rows: int = 30, cols: int = 30) -> GridMap:
    """Vertical wall across the middle with a single one-cell gap."""
    walls = np.zeros((rows, cols), dtype=bool)
    mid = cols // 2
    walls[:, mid] = True
    walls[rows // 2, mid] = False
    return GridMap(rows, cols, walls, (0, 0), (rows - 1, cols - 1), name="bottleneck")


def split(rows: int = 20, cols: int = 20) -> GridMap:
    """Complete vertical wall separating start from goal; no path exists."""
    walls = np.zeros((rows, cols), dtype=bool)
    walls[:, cols // 2] = True
    return GridMap(rows, cols, walls, (0, 0), (rows - 1, cols - 1), name="split")


NAMED_MAPS: Dict[str, Callable[[], GridMap]] = {
    "classic": classic,
    "wide_open": wide_open,
    "corridor": corridor,
    "bottleneck": bottleneck,
    "split": split,
}


def get_map(name: str) -> GridMap:
    key = name.strip().lower()
    if key not in NAMED_MAPS:
        raise ValueError(f"Unknown map '{name}'. Available: {sorted(NAMED_MAPS)}")
    return NAMED_MAPS[key]()
