# -*- coding: utf-8 -*-
"""
Grid maps: model, text IO, named maps and random generation.
"""

from __future__ import annotations

from .grid import GridMap, Coord, manhattan, line_of_sight, bresenham, DR4, DC4, DR8, DC8
from .io import parse_map, load_map, save_map
from .catalog import NAMED_MAPS, get_map
from .generator import generate_map, connected, free_components

__all__ = [
    "GridMap",
    "Coord",
    "manhattan",
    "line_of_sight",
    "bresenham",
    "DR4", "DC4", "DR8", "DC8",
    "parse_map",
    "load_map",
    "save_map",
    "NAMED_MAPS",
    "get_map",
    "generate_map",
    "connected",
    "free_components",
]
