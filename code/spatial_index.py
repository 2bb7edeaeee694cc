"""Spatial index over room bounding circles to accelerate overlap lookups."""

from __future__ import annotations

import math
from typing import Dict, Iterator, List, Optional, Set, Tuple

from level_geometry import Vector3
from level_models import Room

Cell = Tuple[int, int]


class SpatialIndex:
    """Buckets room centers on a uniform xz grid.

    Queries return exactly the rooms a full scan would report: candidates are
    gathered from every cell within ``radius + largest stored radius`` on the
    ground plane, then confirmed with the room's own 3D circle test.
    """

    def __init__(self, cell_size: float) -> None:
        if cell_size <= 0:
            raise ValueError("SpatialIndex cell_size must be positive")
        self.cell_size = float(cell_size)
        self._cell_to_rooms: Dict[Cell, List[Room]] = {}
        self._room_to_cell: Dict[int, Cell] = {}
        self._largest_radius = 0.0

    def __len__(self) -> int:
        return len(self._room_to_cell)

    def _cell_for(self, x: float, z: float) -> Cell:
        return (math.floor(x / self.cell_size), math.floor(z / self.cell_size))

    def add_room(self, room: Room) -> None:
        """Record ``room`` under the cell containing its floor center."""
        if room.index in self._room_to_cell:
            raise ValueError(f"Room {room.index} is already indexed")
        cell = self._cell_for(room.floor_center[0], room.floor_center[2])
        self._cell_to_rooms.setdefault(cell, []).append(room)
        self._room_to_cell[room.index] = cell
        self._largest_radius = max(self._largest_radius, room.circumradius)

    def _iter_cells_near(self, center: Vector3, reach: float) -> Iterator[Cell]:
        min_x, min_z = self._cell_for(center[0] - reach, center[2] - reach)
        max_x, max_z = self._cell_for(center[0] + reach, center[2] + reach)
        for cx in range(min_x, max_x + 1):
            for cz in range(min_z, max_z + 1):
                yield (cx, cz)

    def overlapping_rooms(
        self,
        center: Vector3,
        circumradius: float,
        *,
        ignore_rooms: Optional[Set[int]] = None,
    ) -> List[Room]:
        """Return indexed rooms whose bounding circle intersects the given one, by room index."""
        ignore_rooms = ignore_rooms or set()
        reach = circumradius + self._largest_radius
        hits: List[Room] = []
        for cell in self._iter_cells_near(center, reach):
            for room in self._cell_to_rooms.get(cell, ()):
                if room.index in ignore_rooms:
                    continue
                if room.intersects(center, circumradius):
                    hits.append(room)
        hits.sort(key=lambda room: room.index)
        return hits

    def is_area_clear(
        self,
        center: Vector3,
        circumradius: float,
        *,
        ignore_rooms: Optional[Set[int]] = None,
    ) -> bool:
        """Return True if no indexed room other than the ignored ones overlaps the circle."""
        return not self.overlapping_rooms(center, circumradius, ignore_rooms=ignore_rooms)

    def clear(self) -> None:
        """Remove all cached data."""
        self._cell_to_rooms.clear()
        self._room_to_cell.clear()
        self._largest_radius = 0.0
