#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os, sys, math
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np
import pytest

from gridmaps import GridMap, generate_map, get_map
from gridmaps.catalog import corridor, split
from planners import PLANNER_CLASSES, PLANNERS, get_planner, run_to_completion
from planners.config import Limits
from eval.metrics import path_cost, path_is_valid
from eval.reference import shortest_distance

NAMES = [cls.name for cls in PLANNER_CLASSES]
# any-angle: costs are Euclidean, not grid distances
EXACT = [n for n in NAMES if n != "Theta*"]


def _run(name, grid, limits=None):
    planner = get_planner(name) if limits is None else get_planner(name, limits)
    state = run_to_completion(planner, grid)
    return planner, state, state.snapshot


def _maps_for(name):
    if name == "IDA*":
        # iterative deepening re-walks every path under the threshold
        return [generate_map(7, 7, density=0.2, ensure="path", rng=np.random.default_rng(s))
                for s in range(4)]
    maps = [generate_map(15, 15, density=0.25, ensure="path", rng=np.random.default_rng(s))
            for s in range(4)]
    maps += [get_map("classic"), get_map("bottleneck")]
    return maps


# -------------------- scenarios -------------------- #

@pytest.mark.parametrize("name", NAMES)
def test_corridor_scenario(name):
    _, _, snap = _run(name, corridor(20))
    assert snap.done and snap.found
    assert snap.path_cost == 38
    assert snap.path_len == 39
    assert snap.path[0] == 0 and snap.path[-1] == 399


@pytest.mark.parametrize("name", NAMES)
def test_separating_wall_scenario(name):
    _, _, snap = _run(name, split(4, 4))
    assert snap.done and not snap.found
    assert snap.path_len == 0
    assert snap.path == []


@pytest.mark.parametrize("name", [n for n in NAMES if n != "IDA*"])
def test_separating_wall_large(name):
    _, _, snap = _run(name, split(20, 20))
    assert snap.done and not snap.found
    assert snap.path_len == 0


@pytest.mark.parametrize("name", NAMES)
def test_start_equals_goal(name):
    planner = get_planner(name)
    state = planner.init(GridMap.open(5, 5, (2, 2), (2, 2)))
    snap = state.snapshot
    assert snap.done and snap.found
    assert snap.path_cost == 0
    assert snap.path_len == 1
    assert planner.step(state) is False
    assert snap.steps == 0


# -------------------- optimality -------------------- #

@pytest.mark.parametrize("name", EXACT)
def test_cost_matches_reference(name):
    for grid in _maps_for(name):
        ref = shortest_distance(grid)
        _, _, snap = _run(name, grid)
        assert snap.done
        assert snap.found == math.isfinite(ref), grid.name
        if snap.found:
            assert snap.path_cost == ref, (name, grid.name)
            assert snap.path_len == ref + 1
            assert path_is_valid(grid, snap.path)


@pytest.mark.parametrize("name", [n for n in NAMES if n != "IDA*"])
def test_no_path_maps(name):
    for seed in range(3):
        grid = generate_map(12, 12, density=0.2, ensure="no_path", rng=np.random.default_rng(50 + seed))
        _, _, snap = _run(name, grid)
        assert snap.done and not snap.found
        assert snap.path_len == 0


def test_theta_star_any_angle():
    for grid in _maps_for("Theta*"):
        ref = shortest_distance(grid)
        _, _, snap = _run("Theta*", grid)
        assert snap.found == math.isfinite(ref)
        if not snap.found:
            continue
        euclid = math.hypot(grid.start[0] - grid.goal[0], grid.start[1] - grid.goal[1])
        assert euclid - 1e-9 <= snap.path_cost <= ref + 1e-9
        # straight segments never cost more than their rasterized cells
        assert snap.path_cost <= path_cost(grid, snap.path) + 1e-9
        assert snap.path[0] == grid.start_node and snap.path[-1] == grid.goal_node
        for a, b in zip(snap.path[:-1], snap.path[1:]):
            ar, ac = grid.coords(a)
            br, bc = grid.coords(b)
            assert max(abs(ar - br), abs(ac - bc)) == 1
        assert not any(grid.walls[grid.coords(v)] for v in snap.path)


def test_theta_star_straight_line_on_open_map():
    _, _, snap = _run("Theta*", GridMap.open(10, 10, (0, 0), (9, 9)))
    assert snap.found
    assert snap.path_cost == pytest.approx(math.hypot(9, 9))
    assert path_cost(GridMap.open(10, 10, (0, 0), (9, 9)), snap.path) == pytest.approx(snap.path_cost)
    assert snap.path_len == 10


# -------------------- stepping contract -------------------- #

@pytest.mark.parametrize("name", NAMES)
def test_step_after_done_is_noop(name):
    planner, state, snap = _run(name, get_map("classic") if name != "IDA*" else corridor(8))
    assert snap.done
    before = (snap.cells.copy(), snap.steps, snap.nodes_explored, snap.relaxations,
              snap.path_len, snap.path_cost, snap.found, list(snap.path))
    for _ in range(3):
        assert planner.step(state) is False
    after = (snap.cells.copy(), snap.steps, snap.nodes_explored, snap.relaxations,
             snap.path_len, snap.path_cost, snap.found, list(snap.path))
    assert np.array_equal(before[0], after[0])
    assert before[1:] == after[1:]


@pytest.mark.parametrize("name", NAMES)
def test_runs_are_deterministic(name):
    grid = generate_map(8, 8, density=0.2, ensure="path", rng=np.random.default_rng(3))
    p1, p2 = get_planner(name), get_planner(name)
    s1, s2 = p1.init(grid), p2.init(grid)
    while True:
        more1, more2 = p1.step(s1), p2.step(s2)
        assert more1 == more2
        assert np.array_equal(s1.snapshot.cells, s2.snapshot.cells)
        assert s1.snapshot.steps == s2.snapshot.steps
        if not more1:
            break


@pytest.mark.parametrize("name", NAMES)
def test_step_counts_and_endpoint_colours(name):
    grid = corridor(10)
    planner = get_planner(name)
    state = planner.init(grid)
    snap = state.snapshot
    assert not snap.done
    n = 0
    while planner.step(state):
        n += 1
        assert snap.cells[grid.start_node] == 5
        assert snap.cells[grid.goal_node] == 6
    assert snap.steps == n + 1
    assert snap.nodes_explored > 0


def test_max_steps_stops_early():
    state = run_to_completion(get_planner("Dijkstra"), get_map("classic"), max_steps=5)
    assert state.snapshot.steps == 5
    assert not state.snapshot.done


def test_instances_do_not_share_state():
    grid = get_map("classic")
    planner = get_planner("A*")
    a = planner.init(grid)
    b = planner.init(grid)
    for _ in range(10):
        planner.step(a)
    assert b.snapshot.steps == 0
    assert b.snapshot.nodes_explored == 0


# -------------------- rejected / skipped -------------------- #

@pytest.mark.parametrize("name", NAMES)
def test_invalid_maps_are_rejected(name):
    planner = get_planner(name)
    for grid in (GridMap.open(3, 3, (3, 0), (2, 2)),
                 GridMap.open(3, 3, (0, 0), (0, 5)),
                 GridMap.from_mask(2, 2, (0, 0), (1, 1), [0, 0, 0, 1])):
        state = planner.init(grid)
        snap = state.snapshot
        assert snap.done and not snap.found
        assert snap.status.startswith("invalid")
        assert snap.cells.size == 0
        assert planner.step(state) is False


def test_size_ceiling():
    limits = Limits(max_rows=10, max_cols=10)
    planner = get_planner("A*", limits)
    snap = planner.init(GridMap.open(11, 5, (0, 0), (1, 1))).snapshot
    assert snap.done and snap.status.startswith("invalid")
    snap = planner.init(GridMap.open(10, 10, (0, 0), (9, 9))).snapshot
    assert not snap.done


@pytest.mark.parametrize("name", ["Floyd-Warshall", "CH"])
def test_capped_planners_skip(name):
    limits = Limits(floyd_warshall_max_nodes=50, contraction_max_nodes=50)
    planner = get_planner(name, limits)
    assert planner.max_nodes == 50
    state = planner.init(GridMap.open(10, 10, (0, 0), (9, 9)))
    snap = state.snapshot
    assert snap.done and not snap.found
    assert snap.status.startswith("skipped")
    assert snap.grid().shape == (10, 10)
    assert planner.step(state) is False


def test_only_matrix_planners_are_capped():
    for name in NAMES:
        cap = get_planner(name).max_nodes
        if name in ("Floyd-Warshall", "CH"):
            assert cap == 2500
        else:
            assert cap == 0


# -------------------- registry -------------------- #

def test_registry_order_and_lookup():
    assert NAMES == ["Dijkstra", "A*", "Bellman-Ford", "Floyd-Warshall", "IDA*", "JPS",
                     "Theta*", "Bidirectional A*", "Fringe", "D* Lite", "CH", "Subgoal",
                     "RSR", "Flow Field"]
    assert list(PLANNERS) == NAMES
    assert get_planner(0).name == "Dijkstra"
    assert get_planner("3").name == "Floyd-Warshall"
    assert get_planner("a_star").name == "A*"
    assert get_planner("ASTAR").name == "A*"
    assert get_planner("d*-lite").name == "D* Lite"
    assert get_planner("ida_star").name == "IDA*"
    assert get_planner("bidirectional_a_star").name == "Bidirectional A*"
    assert get_planner("flow-field").name == "Flow Field"
    assert get_planner("contraction hierarchies").name == "CH"
    with pytest.raises(ValueError):
        get_planner("warp drive")
    with pytest.raises(ValueError):
        get_planner(len(NAMES))
