#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
run_planner.py
--------------
Run one planner (or all of them) to completion on a map and print the
resulting grid and counters.

Map source (pick one; default is the classic 20x20 map):
    --map FILE          text map (see gridmaps.io)
    --named NAME        bundled map: classic, wide_open, bottleneck, corridor, split
    --random 30x30      random map, with --density / --seed / --ensure

Example:
    python -m cli.run_planner --named corridor --planner all
    python -m cli.run_planner --random 40x40 --density 0.25 --seed 3 \
        --planner "D* Lite" --png out/dstar.png
    python -m cli.run_planner --named bottleneck --planner all --csv results/bottleneck.csv

Grid legend: S start, G goal, # wall, + frontier, - visited, * path, ~ preprocessing.
"""

from __future__ import annotations

import argparse
import csv
import logging
import os
from typing import List, Optional, Tuple

import numpy as np

from gridmaps import generate_map, get_map, load_map
from gridmaps.grid import GridMap
from planners import PLANNER_CLASSES, get_planner, run_to_completion
from planners.config import Limits
from eval.metrics import summarize

# -------------------- helpers -------------------- #

def _parse_size(s: str) -> Tuple[int, int]:
    token = s.strip().lower()
    if "x" not in token:
        raise ValueError(f"Bad size '{token}', expected like 30x30")
    h, w = token.split("x")
    return int(h), int(w)


def _load_grid(args) -> GridMap:
    if args.map:
        return load_map(args.map)
    if args.random:
        rows, cols = _parse_size(args.random)
        return generate_map(rows, cols, density=args.density, ensure=args.ensure,
                            rng=np.random.default_rng(args.seed),
                            name=f"random_{rows}x{cols}_s{args.seed}")
    return get_map(args.named or "classic")


def _select(names: str, limits: Limits):
    if names.strip().lower() == "all":
        return [cls(limits=limits) for cls in PLANNER_CLASSES]
    return [get_planner(tok.strip(), limits) for tok in names.split(",") if tok.strip()]


def _print_result(planner, state) -> None:
    snap = state.snapshot
    print(f"== {planner.name} ==")
    if snap.status:
        print(f"status: {snap.status}")
    text = snap.to_ascii()
    if text:
        print(text)
    print(
        f"found={int(snap.found)} done={int(snap.done)} steps={snap.steps} "
        f"explored={snap.nodes_explored} relaxations={snap.relaxations} "
        f"path_len={snap.path_len} path_cost={snap.path_cost}"
    )
    print()


def _png_path(base: str, name: str, many: bool) -> str:
    if not many:
        return base
    root, ext = os.path.splitext(base)
    slug = "".join(ch if ch.isalnum() else "_" for ch in name.lower()).strip("_")
    return f"{root}_{slug}{ext or '.png'}"


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run step-resumable grid planners on a map.")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--map", type=str, default=None, help="Path to a text map file")
    src.add_argument("--named", type=str, default=None, help="Bundled map name")
    src.add_argument("--random", type=str, default=None, help="Random map size, e.g. 30x30")
    ap.add_argument("--density", type=float, default=0.2, help="Obstacle density for --random")
    ap.add_argument("--seed", type=int, default=0, help="RNG seed for --random")
    ap.add_argument("--ensure", type=str, default="any", choices=["any", "path", "no_path"],
                    help="Path guarantee for --random")
    ap.add_argument("--planner", type=str, default="A*",
                    help="Planner name or index, comma-separated list, or 'all'")
    ap.add_argument("--max-steps", type=int, default=None, help="Stop each run after this many steps")
    ap.add_argument("--max-size", type=int, default=100, help="Largest accepted rows/cols")
    ap.add_argument("--matrix-max-nodes", type=int, default=2500,
                    help="Node ceiling for Floyd-Warshall and CH")
    ap.add_argument("--png", type=str, default=None, help="Write a rendering (suffixed per planner)")
    ap.add_argument("--csv", type=str, default=None, help="Write one summary row per planner")
    ap.add_argument("--quiet", action="store_true", help="Print counters only")
    ap.add_argument("--log-level", type=str, default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")

    limits = Limits(max_rows=args.max_size, max_cols=args.max_size,
                    floyd_warshall_max_nodes=args.matrix_max_nodes,
                    contraction_max_nodes=args.matrix_max_nodes)
    grid = _load_grid(args)
    planners = _select(args.planner, limits)

    print(f"[map] {grid.name} {grid.rows}x{grid.cols} start={grid.start} goal={grid.goal}")
    rows = []
    for planner in planners:
        state = run_to_completion(planner, grid, max_steps=args.max_steps)
        if args.quiet:
            s = state.snapshot
            print(f"{planner.name:>18}: found={int(s.found)} steps={s.steps} "
                  f"explored={s.nodes_explored} cost={s.path_cost} {s.status}")
        else:
            _print_result(planner, state)
        row = {"planner": planner.name, "map": grid.name}
        row.update(summarize(state.snapshot))
        rows.append(row)

        if args.png:
            from viz.render import save_snapshot
            out = _png_path(args.png, planner.name, len(planners) > 1)
            save_snapshot(state.snapshot, out, title=f"{planner.name} on {grid.name}")
            print(f"[png] {out}")

    if args.csv and rows:
        folder = os.path.dirname(args.csv)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(args.csv, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0]))
            writer.writeheader()
            writer.writerows(rows)
        print(f"[csv] {args.csv}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
