# -*- coding: utf-8 -*-
"""
Command-line entry points (run with `python -m cli.<name>`):

- run_planner : run one planner, a list, or all of them on a map and print
                the grid and counters (optional PNG / CSV output)
"""
__all__ = [
    "run_planner",
]
