"""Randomized incremental placement of polygon rooms connected through paired ports."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from level_config import LevelConfig
from level_errors import PlacementExhausted
from level_geometry import LocalFrame, Vector3, distance, normalize, vec3
from level_models import Port, Room
from polygon_metrics import PolygonMetrics, PolygonMetricsTable, polygon_vertices, port_positions
from room_graph import RoomGraph

logger = logging.getLogger(__name__)


class PlacementState(Enum):
    """States of the per-room retry loop."""

    SAMPLING = "sampling"  # Drawing an anchor port and a shape for the next room.
    VALIDATING = "validating"  # Checking the candidate's bounding circle against placed rooms.
    COMMITTED = "committed"  # Candidate accepted, room registered and ports paired.
    EXHAUSTED = "exhausted"  # Attempt cap reached or no open ports left; placement aborted.


@dataclass(frozen=True)
class PlacementStep:
    """One state transition of the placement search, reported to the host between ticks."""

    state: PlacementState
    room_index: int
    attempt: int
    port_index: Optional[int] = None


@dataclass
class PlacementCandidate:
    """A would-be room branching out of ``anchor_port``."""

    anchor_port: Port
    anchor_room: Room
    metrics: PolygonMetrics
    center: Vector3


class PlacementEngine:
    """Places ``config.room_count`` rooms so that they form a tree of paired ports.

    Every random draw comes from ``rng`` in a fixed order (pool shuffle, edge
    count, height offset), so a seed fully determines the layout. Rejected
    candidates never undo earlier work: the anchor port simply goes back into
    the open pool and the loop samples again.
    """

    def __init__(
        self,
        config: LevelConfig,
        rng: random.Random,
        metrics_table: Optional[PolygonMetricsTable] = None,
    ) -> None:
        self.config = config
        self.rng = rng
        self.metrics_table = metrics_table or PolygonMetricsTable(
            config.side_length,
            config.max_edge_count,
            config.min_edge_count,
        )
        self.graph = RoomGraph(spatial_cell_size=2.0 * self.metrics_table.largest_circumradius)
        self.state = PlacementState.SAMPLING
        self.attempts = 0
        self.rejections = 0
        self._open_ports: List[int] = []
        self._started = False

    @property
    def open_ports(self) -> Tuple[int, ...]:
        return tuple(self._open_ports)

    # ------------------------------------------------------------------
    # Public lifecycle
    # ------------------------------------------------------------------
    def place_all(self) -> RoomGraph:
        """Run the whole search and return the finished graph."""
        for _ in self.steps():
            pass
        return self.graph

    def steps(self) -> Iterator[PlacementStep]:
        """Run the search lazily, yielding after every state transition."""
        if self._started:
            raise RuntimeError("PlacementEngine can only run once; create a new engine to regenerate")
        self._started = True

        root = self._place_root()
        self.state = PlacementState.COMMITTED
        yield PlacementStep(PlacementState.COMMITTED, root.index, 0)

        for room_index in range(1, self.config.room_count):
            yield from self._place_next_room(room_index)

        logger.info(
            "Placed %d rooms in %d attempts (%d rejected)",
            len(self.graph.rooms),
            self.attempts,
            self.rejections,
        )
        self._open_ports = []

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _random_edge_count(self) -> int:
        return self.rng.randint(self.config.min_edge_count, self.config.max_edge_count)

    def _random_height_delta(self) -> float:
        max_delta = self.config.max_height_offset
        return self.rng.uniform(-max_delta, max_delta)

    def _build_room(self, frame: LocalFrame, metrics: PolygonMetrics) -> Room:
        return self.graph.register_room(
            frame.position,
            polygon_vertices(frame, metrics),
            port_positions(frame, metrics),
            metrics,
        )

    def _place_root(self) -> Room:
        metrics = self.metrics_table[self._random_edge_count()]
        room = self._build_room(LocalFrame.at(vec3(0.0, 0.0, 0.0)), metrics)
        self._open_ports.extend(room.port_indices)
        return room

    def _take_random_open_port(self) -> Port:
        self.rng.shuffle(self._open_ports)
        return self.graph.port(self._open_ports.pop(0))

    def _sample_candidate(self) -> PlacementCandidate:
        port = self._take_random_open_port()
        anchor_room = self.graph.native_room(port)
        direction = normalize(port.position - anchor_room.floor_center)
        metrics = self.metrics_table[self._random_edge_count()]
        center = port.position + direction * (metrics.inradius + self.config.room_spacing)
        center = center + vec3(0.0, self._random_height_delta(), 0.0)
        return PlacementCandidate(
            anchor_port=port,
            anchor_room=anchor_room,
            metrics=metrics,
            center=center,
        )

    def _is_valid_candidate(self, candidate: PlacementCandidate) -> bool:
        return self.graph.is_valid_room_position(
            candidate.center,
            candidate.metrics.circumradius,
            candidate.anchor_room,
        )

    def _commit_candidate(self, candidate: PlacementCandidate) -> Room:
        frame = LocalFrame.facing(candidate.center, candidate.anchor_room.floor_center)
        room = self._build_room(frame, candidate.metrics)
        new_ports = self.graph.ports_of(room)

        # The new port closest to the anchor is the one facing it; min() keeps the first on ties.
        port_to_close = min(
            new_ports,
            key=lambda port: distance(port.position, candidate.anchor_port.position),
        )
        self._open_ports.extend(port.index for port in new_ports if port is not port_to_close)
        self.graph.pair_ports(port_to_close, candidate.anchor_port)
        return room

    def _place_next_room(self, room_index: int) -> Iterator[PlacementStep]:
        cap = self.config.max_placement_attempts
        failed = 0
        while True:
            if not self._open_ports:
                self.state = PlacementState.EXHAUSTED
                raise PlacementExhausted(room_index, failed, "no open ports left")
            if cap is not None and failed >= cap:
                self.state = PlacementState.EXHAUSTED
                raise PlacementExhausted(room_index, failed)

            self.state = PlacementState.SAMPLING
            candidate = self._sample_candidate()
            self.attempts += 1
            yield PlacementStep(PlacementState.SAMPLING, room_index, failed, candidate.anchor_port.index)

            self.state = PlacementState.VALIDATING
            valid = self._is_valid_candidate(candidate)
            yield PlacementStep(PlacementState.VALIDATING, room_index, failed, candidate.anchor_port.index)

            if not valid:
                self._open_ports.append(candidate.anchor_port.index)
                self.rejections += 1
                failed += 1
                logger.debug(
                    "Room %d: candidate from port %d rejected (attempt %d)",
                    room_index,
                    candidate.anchor_port.index,
                    failed,
                )
                continue

            room = self._commit_candidate(candidate)
            self.state = PlacementState.COMMITTED
            yield PlacementStep(PlacementState.COMMITTED, room.index, failed, candidate.anchor_port.index)
            return


def place_rooms(config: LevelConfig, rng: random.Random) -> RoomGraph:
    """Convenience wrapper running a fresh :class:`PlacementEngine` to completion."""
    return PlacementEngine(config, rng).place_all()
