"""Core dataclasses describing rooms and ports of a generated level."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from level_geometry import Vector3, circles_intersect

if TYPE_CHECKING:
    from polygon_mesh import PolyMesh


@dataclass(eq=False)
class Port:
    """Connection point on a room's perimeter, addressed by its index in the room graph."""

    index: int
    position: Vector3
    native_room_index: int
    connected_room_index: Optional[int] = None
    sister_port_index: Optional[int] = None
    has_built_tunnel: bool = False

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float)
        self.position.setflags(write=False)

    @property
    def has_connection(self) -> bool:
        return self.sister_port_index is not None

    def connect(self, sister: Port) -> None:
        """Record ``sister`` as this port's partner. Pairing happens once per port."""
        if sister is self or sister.index == self.index:
            raise ValueError(f"Cannot connect port {self.index} to itself")
        if self.has_connection:
            raise ValueError(
                f"Port {self.index} is already paired with port {self.sister_port_index}"
            )
        self.sister_port_index = sister.index
        self.connected_room_index = sister.native_room_index


@dataclass(eq=False)
class Room:
    """A regular polygon room; vertices and port membership never change once created."""

    index: int
    floor_center: Vector3
    floor_vertices: Tuple[Vector3, ...]
    port_indices: Tuple[int, ...]
    edge_count: int
    inradius: float
    circumradius: float
    name: str = ""
    mesh: Optional[PolyMesh] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.floor_center = np.asarray(self.floor_center, dtype=float)
        self.floor_center.setflags(write=False)
        vertices = []
        for vertex in self.floor_vertices:
            array = np.array(vertex, dtype=float)
            array.setflags(write=False)
            vertices.append(array)
        self.floor_vertices = tuple(vertices)
        self.port_indices = tuple(self.port_indices)
        if len(self.floor_vertices) != self.edge_count + 1:
            raise ValueError(
                f"Room {self.index} needs {self.edge_count + 1} floor vertices, got {len(self.floor_vertices)}"
            )
        if len(self.port_indices) != self.edge_count:
            raise ValueError(
                f"Room {self.index} needs {self.edge_count} ports, got {len(self.port_indices)}"
            )

    @property
    def corners(self) -> Tuple[Vector3, ...]:
        """Perimeter vertices without the center entry at index 0."""
        return self.floor_vertices[1:]

    def intersects(self, center: Vector3, circumradius: float) -> bool:
        """Returns True if a would-be room at ``center`` overlaps this room's bounding circle."""
        return circles_intersect(self.floor_center, self.circumradius, center, circumradius)
