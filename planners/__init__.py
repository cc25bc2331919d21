# -*- coding: utf-8 -*-
"""
Step-resumable grid planners with a unified API:

    planner = get_planner("A*")          # or an index into PLANNERS
    state = planner.init(grid)           # GridMap -> state with .snapshot
    while planner.step(state):
        ...

Registry order is the host's display order.
"""

from __future__ import annotations

import re
from typing import Dict, List, Type, Union

from .a_star import AStarPlanner
from .base import Cell, Snapshot, SteppingPlanner, run_to_completion
from .bellman_ford import BellmanFordPlanner
from .bidirectional_a_star import BidirectionalAStarPlanner
from .config import DEFAULT_LIMITS, Limits
from .contraction import ContractionHierarchiesPlanner
from .dijkstra import DijkstraPlanner
from .dstar_lite import DStarLitePlanner
from .flow_field import FlowFieldPlanner
from .floyd_warshall import FloydWarshallPlanner
from .fringe import FringePlanner
from .ida_star import IDAStarPlanner
from .jps import JPSPlanner
from .rsr import RSRPlanner
from .subgoal import SubgoalGraphPlanner
from .theta_star import ThetaStarPlanner

PLANNER_CLASSES: List[Type[SteppingPlanner]] = [
    DijkstraPlanner,
    AStarPlanner,
    BellmanFordPlanner,
    FloydWarshallPlanner,
    IDAStarPlanner,
    JPSPlanner,
    ThetaStarPlanner,
    BidirectionalAStarPlanner,
    FringePlanner,
    DStarLitePlanner,
    ContractionHierarchiesPlanner,
    SubgoalGraphPlanner,
    RSRPlanner,
    FlowFieldPlanner,
]

# Mapping used by factories/CLIs
PLANNERS: Dict[str, Type[SteppingPlanner]] = {cls.name: cls for cls in PLANNER_CLASSES}

_ALIASES = {
    "astar": "A*",
    "bidirectionalastar": "Bidirectional A*",
    "bidir": "Bidirectional A*",
    "idastar": "IDA*",
    "thetastar": "Theta*",
    "dstarlite": "D* Lite",
    "contractionhierarchies": "CH",
    "subgoalgraph": "Subgoal",
    "rectangularsymmetryreduction": "RSR",
    "fringesearch": "Fringe",
    "flowfield": "Flow Field",
    "bf": "Bellman-Ford",
    "fw": "Floyd-Warshall",
}


def _normalize(name: str) -> str:
    return re.sub(r"[^a-z0-9*]", "", name.lower()).replace("*", "star")


_LOOKUP = {_normalize(k): v for k, v in PLANNERS.items()}
_LOOKUP.update({_normalize(k): PLANNERS[v] for k, v in _ALIASES.items()})


def get_planner(name_or_index: Union[str, int], limits: Limits = DEFAULT_LIMITS) -> SteppingPlanner:
    """Instantiate a planner by registry name (case and punctuation ignored) or index."""
    if isinstance(name_or_index, int):
        if not 0 <= name_or_index < len(PLANNER_CLASSES):
            raise ValueError(f"Planner index {name_or_index} out of range 0..{len(PLANNER_CLASSES) - 1}")
        return PLANNER_CLASSES[name_or_index](limits=limits)
    key = str(name_or_index)
    if key.isdigit():
        return get_planner(int(key), limits)
    cls = _LOOKUP.get(_normalize(key))
    if cls is None:
        raise ValueError(f"Unknown planner '{name_or_index}'. Options: {list(PLANNERS)}")
    return cls(limits=limits)


def all_planners(limits: Limits = DEFAULT_LIMITS) -> List[SteppingPlanner]:
    return [cls(limits=limits) for cls in PLANNER_CLASSES]


__all__ = [
    "AStarPlanner",
    "BellmanFordPlanner",
    "BidirectionalAStarPlanner",
    "Cell",
    "ContractionHierarchiesPlanner",
    "DEFAULT_LIMITS",
    "DStarLitePlanner",
    "DijkstraPlanner",
    "FloydWarshallPlanner",
    "FlowFieldPlanner",
    "FringePlanner",
    "IDAStarPlanner",
    "JPSPlanner",
    "Limits",
    "PLANNERS",
    "PLANNER_CLASSES",
    "RSRPlanner",
    "Snapshot",
    "SteppingPlanner",
    "SubgoalGraphPlanner",
    "ThetaStarPlanner",
    "all_planners",
    "get_planner",
    "run_to_completion",
]
