"""Precomputed regular-polygon metrics and ring generators."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping

from level_constants import MIN_EDGE_COUNT, polygon_name
from level_errors import InvalidConfiguration
from level_geometry import LocalFrame, Vector3


@dataclass(frozen=True)
class PolygonMetrics:
    """Shape constants for a regular polygon with a fixed side length."""

    edge_count: int
    side_length: float
    circumradius: float
    inradius: float
    angular_step: float
    half_step: float
    name: str

    @classmethod
    def compute(cls, edge_count: int, side_length: float) -> PolygonMetrics:
        if edge_count < MIN_EDGE_COUNT:
            raise InvalidConfiguration(
                f"Polygon rooms need at least {MIN_EDGE_COUNT} edges, got {edge_count}"
            )
        half_step = math.pi / edge_count
        return cls(
            edge_count=edge_count,
            side_length=side_length,
            circumradius=0.5 * side_length / math.sin(half_step),
            inradius=0.5 * side_length / math.tan(half_step),
            angular_step=2.0 * half_step,
            half_step=half_step,
            name=polygon_name(edge_count),
        )


class PolygonMetricsTable(Mapping[int, PolygonMetrics]):
    """Read-only lookup of :class:`PolygonMetrics` for every allowed edge count."""

    def __init__(self, side_length: float, max_edge_count: int, min_edge_count: int = MIN_EDGE_COUNT) -> None:
        if side_length <= 0:
            raise InvalidConfiguration("Polygon side length must be positive")
        if min_edge_count < MIN_EDGE_COUNT:
            raise InvalidConfiguration(
                f"Minimum edge count must be at least {MIN_EDGE_COUNT}, got {min_edge_count}"
            )
        if max_edge_count < min_edge_count:
            raise InvalidConfiguration(
                f"Maximum edge count {max_edge_count} is below minimum {min_edge_count}"
            )
        self.side_length = float(side_length)
        self.min_edge_count = min_edge_count
        self.max_edge_count = max_edge_count
        self._metrics: Dict[int, PolygonMetrics] = {
            edge_count: PolygonMetrics.compute(edge_count, self.side_length)
            for edge_count in range(min_edge_count, max_edge_count + 1)
        }

    def __getitem__(self, edge_count: int) -> PolygonMetrics:
        try:
            return self._metrics[edge_count]
        except KeyError as exc:
            raise InvalidConfiguration(
                f"Edge count {edge_count} outside configured range "
                f"[{self.min_edge_count}, {self.max_edge_count}]"
            ) from exc

    def __iter__(self) -> Iterator[int]:
        return iter(self._metrics)

    def __len__(self) -> int:
        return len(self._metrics)

    @property
    def largest_circumradius(self) -> float:
        return self._metrics[self.max_edge_count].circumradius


def polygon_vertices(frame: LocalFrame, metrics: PolygonMetrics) -> List[Vector3]:
    """Return the floor ring for a room placed at ``frame``.

    Index 0 is the frame origin (the floor center); corners follow at angles
    ``half_step + i * angular_step`` measured from the frame's forward axis
    toward its right axis, so that every port sits on an edge midpoint.
    """
    vertices = [frame.position]
    for i in range(metrics.edge_count):
        angle = metrics.half_step + i * metrics.angular_step
        x = math.sin(angle) * metrics.circumradius
        z = math.cos(angle) * metrics.circumradius
        vertices.append(frame.transform_point(x, 0.0, z))
    return vertices


def port_positions(frame: LocalFrame, metrics: PolygonMetrics) -> List[Vector3]:
    """Return one port per edge midpoint; port 0 lies straight along the frame's forward axis."""
    positions = []
    for i in range(metrics.edge_count):
        angle = metrics.angular_step * i
        x = math.sin(angle) * metrics.inradius
        z = math.cos(angle) * metrics.inradius
        positions.append(frame.transform_point(x, 0.0, z))
    return positions
