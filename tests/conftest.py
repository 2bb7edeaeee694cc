import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
CODE_DIR = ROOT_DIR / "code"
if str(CODE_DIR) not in sys.path:
    sys.path.insert(0, str(CODE_DIR))

from level_config import LevelConfig
from level_geometry import LocalFrame, vec3
from polygon_metrics import PolygonMetricsTable, polygon_vertices, port_positions
from room_graph import RoomGraph


@pytest.fixture
def make_config() -> Callable[..., LevelConfig]:
    def _make_config(**overrides) -> LevelConfig:
        kwargs = dict(
            room_count=8,
            min_edge_count=3,
            max_edge_count=6,
            side_length=10.0,
            room_spacing=1.0,
            incline_max=0.5,
            height=10.0,
            random_seed=11,
        )
        kwargs.update(overrides)
        return LevelConfig(**kwargs)

    return _make_config


@pytest.fixture
def metrics_table() -> PolygonMetricsTable:
    return PolygonMetricsTable(side_length=10.0, max_edge_count=8)


@pytest.fixture
def add_room(metrics_table: PolygonMetricsTable) -> Callable[..., object]:
    """Register a room with ``edge_count`` sides centered at ``center`` on a graph."""

    def _add_room(graph: RoomGraph, center, edge_count: int = 4):
        frame = LocalFrame.at(vec3(*center))
        metrics = metrics_table[edge_count]
        return graph.register_room(
            frame.position,
            polygon_vertices(frame, metrics),
            port_positions(frame, metrics),
            metrics,
        )

    return _add_room

