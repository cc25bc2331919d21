#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os, sys, math
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np

from gridmaps import GridMap, generate_map, get_map
from gridmaps.catalog import corridor
from planners import get_planner, run_to_completion
from planners.base import Cell
from planners.contraction import Hierarchy, query
from planners.flow_field import direction_field
from planners.subgoal import corner_cells, monotone_cells, quadrant_reach
from eval.metrics import path_is_valid
from eval.reference import distance_matrix


# -------------------- Contraction Hierarchies -------------------- #

def test_ch_query_matches_reference_for_many_pairs():
    for seed in range(3):
        grid = generate_map(10, 10, density=0.25, ensure="any", rng=np.random.default_rng(seed))
        state = run_to_completion(get_planner("CH"), grid)
        ref = distance_matrix(grid)
        rng = np.random.default_rng(seed)
        open_nodes = np.flatnonzero(~grid.flat_walls())
        for _ in range(150):
            a, b = (int(x) for x in rng.choice(open_nodes, size=2))
            mu, cells = query(state, a, b)
            assert mu == ref[a, b]
            if math.isfinite(mu):
                assert len(cells) == mu + 1
                assert cells[0] == a and cells[-1] == b
                for u, v in zip(cells[:-1], cells[1:]):
                    assert abs(u // 10 - v // 10) + abs(u % 10 - v % 10) == 1
            else:
                assert cells == []


def test_ch_preprocessing_is_batched():
    grid = GridMap.open(20, 20, (0, 0), (19, 19))
    planner = get_planner("CH")
    state = planner.init(grid)
    planner.step(state)
    h = state.hierarchy
    # max(400 // 50, 10) contractions per step
    assert len(h.rank) == 10
    assert (state.snapshot.cells == Cell.PREPROCESS).sum() >= 8
    while state.query is None:
        planner.step(state)
    assert len(h.rank) == 400
    assert sorted(h.rank.values()) == list(range(400))


def test_ch_upward_edges_point_to_higher_rank():
    grid = get_map("classic")
    state = run_to_completion(get_planner("CH"), grid)
    h = state.hierarchy
    for v, edges in h.up.items():
        for u in edges:
            assert h.rank[u] > h.rank[v]
    for (a, b), m in h.mids.items():
        assert h.rank[m] < h.rank[a] and h.rank[m] < h.rank[b]


def test_hierarchy_unpacks_shortcuts():
    grid = corridor(5)
    h = Hierarchy(grid)
    # contract the corridor interior so the ends get linked by shortcuts
    for v in (1, 2, 3, 9, 14):
        h.contract(v)
    assert h.adj[0][4] == 4
    assert h.unpack([0, 4]) == [0, 1, 2, 3, 4]
    assert h.adj[4][19] == 3
    assert h.unpack([0, 4, 19]) == [0, 1, 2, 3, 4, 9, 14, 19]


# -------------------- Subgoal graphs -------------------- #

def test_corner_cells():
    walls = np.zeros((5, 5), dtype=bool)
    walls[2, 2] = True
    corners = corner_cells(walls)
    # the four diagonal neighbours of a single obstacle
    for rc in [(1, 1), (1, 3), (3, 1), (3, 3)]:
        assert corners[rc]
    # map corners (border counts as blocked)
    for rc in [(0, 0), (0, 4), (4, 0), (4, 4)]:
        assert corners[rc]
    assert not corners[2, 0] and not corners[0, 2]
    assert not corners[2, 2]


def test_quadrant_reach_and_monotone_cells():
    walls = np.zeros((4, 4), dtype=bool)
    walls[1, 0:3] = True
    free = ~walls
    reach = quadrant_reach(free, 0, 0, 1, 1)
    assert reach[0].all()
    assert reach[1, 3] and not reach[1, 0]
    assert not reach[3, 0]
    assert reach[3, 3]
    cells = monotone_cells(free, 0, 15, 4)
    assert cells[0] == 0 and cells[-1] == 15
    assert len(cells) == 7
    assert 7 in cells


def test_subgoal_graph_marks_preprocessing_then_searches():
    grid = get_map("bottleneck")
    planner = get_planner("Subgoal")
    state = planner.init(grid)
    assert (state.snapshot.cells == Cell.PREPROCESS).sum() > 0
    assert grid.start_node in state.subgoals and grid.goal_node in state.subgoals
    while planner.step(state):
        pass
    assert state.searching
    assert state.snapshot.found
    assert path_is_valid(grid, state.snapshot.path)


# -------------------- RSR -------------------- #

def test_rsr_rectangles_partition_open_cells():
    grid = generate_map(15, 15, density=0.25, ensure="path", rng=np.random.default_rng(4))
    state = run_to_completion(get_planner("RSR"), grid)
    assert state.searching
    ids = state.rect_id
    assert np.array_equal(ids >= 0, ~grid.walls)
    for k, (top, left, bottom, right) in enumerate(state.rects):
        block = ids[top:bottom + 1, left:right + 1]
        assert (block == k).all()
        assert (ids == k).sum() == block.size


def test_rsr_open_map_is_one_rectangle():
    grid = GridMap.open(12, 12, (3, 3), (8, 9))
    planner = get_planner("RSR")
    state = planner.init(grid)
    planner.step(state)
    assert state.rects == [(0, 0, 11, 11)]
    while planner.step(state):
        pass
    snap = state.snapshot
    assert snap.found and snap.path_cost == 11
    assert path_is_valid(grid, snap.path)
    # interior cells away from the start/goal crosses are never expanded
    assert snap.cells[5 * 12 + 5] != Cell.CLOSED


# -------------------- Flow Field -------------------- #

def test_direction_field_points_downhill():
    grid = get_map("classic")
    state = run_to_completion(get_planner("Flow Field"), grid)
    cost = state.cost
    field = state.direction
    dr, dc = (-1, 1, 0, 0), (0, 0, -1, 1)
    for node in np.flatnonzero(np.isfinite(cost)):
        if node == grid.goal_node:
            assert field[node] == -1
            continue
        d = field[node]
        r, c = divmod(int(node), grid.cols)
        nxt = (r + dr[d]) * grid.cols + (c + dc[d])
        assert cost[nxt] == cost[node] - 1


def test_direction_field_tie_break_order():
    cost = np.array([2.0, 1.0,
                     1.0, 0.0])
    field = direction_field(cost, 2, 2)
    # cell 0 has two cheaper neighbours: down beats right
    assert field[0] == 1
    assert field[3] == -1


def test_flow_field_walk_is_one_cell_per_step():
    grid = corridor(6)
    planner = get_planner("Flow Field")
    state = planner.init(grid)
    while state.phase != "walk":
        planner.step(state)
    before = state.snapshot.steps
    while planner.step(state):
        pass
    assert state.snapshot.steps - before == 10
    assert state.snapshot.path_len == 11


# -------------------- Fringe / bidirectional / JPS -------------------- #

def test_fringe_counts_deferrals_and_promotions():
    # wall hanging from the top edge: the goal is 9 away by heuristic, 27 by path
    walls = np.zeros((10, 10), dtype=bool)
    walls[0:9, 5] = True
    grid = GridMap(10, 10, walls, (0, 0), (0, 9))
    state = run_to_completion(get_planner("Fringe"), grid)
    snap = state.snapshot
    assert snap.found and snap.path_cost == 27
    assert state.threshold == 27
    assert snap.steps > snap.nodes_explored


def test_bidirectional_meets_in_the_middle():
    grid = GridMap.open(9, 9, (4, 0), (4, 8))
    state = run_to_completion(get_planner("Bidirectional A*"), grid)
    assert state.snapshot.found
    assert state.mu == 8
    assert state.fwd.cost[state.meet] + state.bwd.cost[state.meet] == 8


def test_jps_expands_fewer_nodes_than_astar_on_open_map():
    grid = GridMap.open(30, 30, (0, 0), (29, 29))
    jps = run_to_completion(get_planner("JPS"), grid).snapshot
    astar = run_to_completion(get_planner("A*"), grid).snapshot
    assert jps.path_cost == astar.path_cost == 58
    assert jps.nodes_explored < astar.nodes_explored
