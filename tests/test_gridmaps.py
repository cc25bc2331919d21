#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np
import pytest

from gridmaps import GridMap, generate_map, get_map, load_map, parse_map, save_map, connected
from gridmaps.catalog import NAMED_MAPS
from gridmaps.grid import bresenham, line_of_sight, manhattan


def test_from_mask_layout_and_node_ids():
    g = GridMap.from_mask(2, 3, (0, 0), (1, 2), [0, 1, 0,
                                                 0, 0, 0])
    assert g.walls[0, 1] and not g.walls[1, 1]
    assert g.n_nodes == 6
    assert g.start_node == 0 and g.goal_node == 5
    assert g.coords(4) == (1, 1)
    assert g.node_id(1, 2) == 5
    # up, down, left, right order
    assert list(g.neighbors(4)) == [3, 5]
    assert list(g.neighbors(0)) == [3]


def test_from_mask_rejects_wrong_length():
    with pytest.raises(ValueError):
        GridMap.from_mask(2, 2, (0, 0), (1, 1), [0, 0, 0])


def test_walls_are_read_only_copy():
    walls = np.zeros((3, 3), dtype=bool)
    g = GridMap(3, 3, walls, (0, 0), (2, 2))
    walls[1, 1] = True
    assert not g.walls[1, 1]
    with pytest.raises(ValueError):
        g.walls[0, 1] = True


def test_validate_reasons():
    assert GridMap.open(3, 3, (0, 0), (2, 2)).validate(100, 100) is None
    assert "outside" in GridMap.open(3, 3, (3, 0), (2, 2)).validate(100, 100)
    assert "outside" in GridMap.open(3, 3, (0, 0), (2, -1)).validate(100, 100)
    assert "exceeds" in GridMap.open(12, 4, (0, 0), (2, 2)).validate(10, 10)
    walled = GridMap.from_mask(2, 2, (0, 0), (1, 1), [1, 0, 0, 0])
    assert "wall" in walled.validate(100, 100)
    empty = GridMap(0, 0, np.zeros((0, 0), dtype=bool), (0, 0), (0, 0))
    assert empty.validate(100, 100) == "empty map"


def test_edges_are_directed_pairs():
    g = GridMap.open(2, 2, (0, 0), (1, 1))
    edges = g.edges()
    assert len(edges) == 8
    assert (0, 1) in edges and (1, 0) in edges
    assert (0, 3) not in edges


def test_line_of_sight_and_bresenham():
    walls = np.zeros((5, 5), dtype=bool)
    assert line_of_sight(walls, (0, 0), (4, 4))
    walls[2, 2] = True
    assert not line_of_sight(walls, (0, 0), (4, 4))
    assert line_of_sight(walls, (0, 0), (0, 4))
    cells = bresenham((0, 0), (0, 3))
    assert cells == [(0, 0), (0, 1), (0, 2), (0, 3)]
    assert manhattan(0, 0, 3, 4) == 7


def test_parse_map_with_markers():
    g = parse_map("""
        ; a comment
        S.#.
        ..#G
        ....
    """, name="tiny")
    assert (g.rows, g.cols) == (3, 4)
    assert g.start == (0, 0) and g.goal == (1, 3)
    assert g.walls[0, 2] and g.walls[1, 2]
    assert g.name == "tiny"


def test_parse_map_header_and_errors():
    g = parse_map("GRID 2 3 1 0 0 2\n010\n000\n")
    assert g.start == (1, 0) and g.goal == (0, 2)
    assert g.walls[0, 1]
    with pytest.raises(ValueError):
        parse_map("..x\n...")
    with pytest.raises(ValueError):
        parse_map("...\n..")
    with pytest.raises(ValueError):
        parse_map("GRID 3 3 0 0 2 2\n...\n...")
    with pytest.raises(ValueError):
        parse_map("; only comments\n")


def test_save_and_load_keep_map(tmp_path):
    g = get_map("classic")
    path = os.path.join(str(tmp_path), "maps", "classic.map")
    save_map(g, path)
    back = load_map(path)
    assert back.name == "classic"
    assert back.start == g.start and back.goal == g.goal
    assert np.array_equal(back.walls, g.walls)


def test_named_maps():
    assert set(NAMED_MAPS) >= {"classic", "wide_open", "bottleneck", "corridor", "split"}
    classic = get_map("classic")
    assert classic.shape == (20, 20)
    assert classic.open_count() < 400
    assert connected(classic.walls, classic.start, classic.goal)
    corridor = get_map("corridor")
    assert corridor.open_count() == 39
    assert connected(corridor.walls, corridor.start, corridor.goal)
    assert not connected(get_map("split").walls, (0, 0), (19, 19))
    bottleneck = get_map("bottleneck")
    assert connected(bottleneck.walls, bottleneck.start, bottleneck.goal)
    with pytest.raises(ValueError):
        get_map("nope")


def test_generate_map_path_guarantee():
    for seed in range(5):
        rng = np.random.default_rng(seed)
        g = generate_map(25, 25, density=0.3, ensure="path", rng=rng)
        assert not g.walls[g.start] and not g.walls[g.goal]
        assert connected(g.walls, g.start, g.goal)


def test_generate_map_no_path_guarantee():
    for seed in range(5):
        rng = np.random.default_rng(100 + seed)
        g = generate_map(20, 20, density=0.2, ensure="no_path", rng=rng)
        assert not g.walls[g.start] and not g.walls[g.goal]
        assert not connected(g.walls, g.start, g.goal)


def test_generate_map_is_reproducible():
    a = generate_map(15, 15, density=0.25, rng=np.random.default_rng(7))
    b = generate_map(15, 15, density=0.25, rng=np.random.default_rng(7))
    assert np.array_equal(a.walls, b.walls)
    with pytest.raises(ValueError):
        generate_map(5, 5, ensure="sometimes")
