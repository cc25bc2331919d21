# -*- coding: utf-8 -*-
"""Static matplotlib rendering of maps and planner snapshots."""

from .render import CELL_COLORS, render_grid, render_snapshot, save_snapshot

__all__ = ["CELL_COLORS", "render_grid", "render_snapshot", "save_snapshot"]
