"""Arena holding the rooms and ports of a level, addressed by stable indices."""

from __future__ import annotations

import itertools
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

import networkx as nx

from level_constants import DEFAULT_SIDE_LENGTH
from level_errors import GenerationError
from level_geometry import Bounds3, Vector3
from level_models import Port, Room
from polygon_metrics import PolygonMetrics
from spatial_index import SpatialIndex

RoomRef = Union[Room, int]
PortRef = Union[Port, int]
GraphEdge = Tuple[int, int, int, int]


class RoomGraph:
    """Stores the rooms, ports and port pairings of a generated level.

    Rooms are nodes, paired ports are edges. Placement only ever attaches a
    new room to one existing room, so a finished graph is a tree.
    """

    def __init__(self, spatial_cell_size: float = 2.0 * DEFAULT_SIDE_LENGTH) -> None:
        self.rooms: List[Room] = []
        self.ports: List[Port] = []
        self.spatial_index = SpatialIndex(spatial_cell_size)
        self.seed: Optional[int] = None
        self.bounds: Optional[Bounds3] = None

    def __len__(self) -> int:
        return len(self.rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(self.rooms)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def register_room(
        self,
        floor_center: Vector3,
        floor_vertices: Sequence[Vector3],
        port_positions: Sequence[Vector3],
        metrics: PolygonMetrics,
    ) -> Room:
        room_index = len(self.rooms)
        first_port = len(self.ports)
        ports = [
            Port(index=first_port + offset, position=position, native_room_index=room_index)
            for offset, position in enumerate(port_positions)
        ]
        room = Room(
            index=room_index,
            floor_center=floor_center,
            floor_vertices=tuple(floor_vertices),
            port_indices=tuple(port.index for port in ports),
            edge_count=metrics.edge_count,
            inradius=metrics.inradius,
            circumradius=metrics.circumradius,
            name=metrics.name,
        )
        self.ports.extend(ports)
        self.rooms.append(room)
        self.spatial_index.add_room(room)
        return room

    def pair_ports(self, port_a: PortRef, port_b: PortRef) -> None:
        """Connect two ports of different rooms, updating both sides symmetrically."""
        a = self.port(port_a)
        b = self.port(port_b)
        if a is b:
            raise ValueError(f"Cannot connect port {a.index} to itself")
        if a.native_room_index == b.native_room_index:
            raise ValueError(
                f"Ports {a.index} and {b.index} both belong to room {a.native_room_index}"
            )
        if a.has_connection or b.has_connection:
            raise ValueError(f"Ports {a.index} and {b.index} must both be unpaired")
        a.connect(b)
        b.connect(a)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def room(self, ref: RoomRef) -> Room:
        idx = ref.index if isinstance(ref, Room) else ref
        if not (0 <= idx < len(self.rooms)):
            raise IndexError(f"Room index {idx} out of range")
        return self.rooms[idx]

    def port(self, ref: PortRef) -> Port:
        idx = ref.index if isinstance(ref, Port) else ref
        if not (0 <= idx < len(self.ports)):
            raise IndexError(f"Port index {idx} out of range")
        return self.ports[idx]

    def ports_of(self, room: RoomRef) -> List[Port]:
        return [self.ports[idx] for idx in self.room(room).port_indices]

    def native_room(self, port: PortRef) -> Room:
        return self.rooms[self.port(port).native_room_index]

    def connected_room(self, port: PortRef) -> Optional[Room]:
        idx = self.port(port).connected_room_index
        return None if idx is None else self.rooms[idx]

    def sister_port(self, port: PortRef) -> Optional[Port]:
        idx = self.port(port).sister_port_index
        return None if idx is None else self.ports[idx]

    def paired_ports(self) -> Iterator[Port]:
        return (port for port in self.ports if port.has_connection)

    def neighbors(self, room: RoomRef) -> List[Room]:
        """Rooms reachable through one of ``room``'s paired ports."""
        return [
            self.rooms[port.connected_room_index]
            for port in self.ports_of(room)
            if port.connected_room_index is not None
        ]

    def is_leaf(self, room: RoomRef) -> bool:
        """A room is a leaf when exactly one of its ports is paired."""
        return sum(1 for port in self.ports_of(room) if port.has_connection) == 1

    def leaves(self) -> List[Room]:
        return [room for room in self.rooms if self.is_leaf(room)]

    def edges(self) -> List[GraphEdge]:
        """One ``(room_a, room_b, port_a, port_b)`` entry per pair, ordered by the lower port index."""
        result: List[GraphEdge] = []
        for port in self.paired_ports():
            sister_idx = port.sister_port_index
            if sister_idx is None or sister_idx < port.index:
                continue
            sister = self.ports[sister_idx]
            result.append((port.native_room_index, sister.native_room_index, port.index, sister.index))
        return result

    # ------------------------------------------------------------------
    # Read-only queries for downstream consumers
    # ------------------------------------------------------------------
    def room_centers(self) -> List[Vector3]:
        return [room.floor_center for room in self.rooms]

    def room_shape(self, room: RoomRef) -> Tuple[int, float]:
        target = self.room(room)
        return target.edge_count, target.inradius

    def room_mesh(self, room: RoomRef):
        return self.room(room).mesh

    # ------------------------------------------------------------------
    # Overlap tests
    # ------------------------------------------------------------------
    def intersects_any(
        self,
        center: Vector3,
        circumradius: float,
        *,
        ignore_rooms: Optional[Set[int]] = None,
    ) -> bool:
        """Full scan over every room; the spatial index must always agree with this."""
        ignore_rooms = ignore_rooms or set()
        return any(
            room.intersects(center, circumradius)
            for room in self.rooms
            if room.index not in ignore_rooms
        )

    def is_valid_room_position(self, center: Vector3, circumradius: float, anchor: Optional[RoomRef]) -> bool:
        """Validate a would-be room, allowing contact with the room it branches from only."""
        ignore_rooms: Set[int] = set()
        if anchor is not None:
            ignore_rooms.add(self.room(anchor).index)
        return self.spatial_index.is_area_clear(center, circumradius, ignore_rooms=ignore_rooms)

    # ------------------------------------------------------------------
    # Graph analysis
    # ------------------------------------------------------------------
    def to_networkx(self) -> nx.Graph:
        graph = nx.Graph()
        for room in self.rooms:
            graph.add_node(room.index, edge_count=room.edge_count)
        for room_a, room_b, port_a, port_b in self.edges():
            graph.add_edge(room_a, room_b, ports=(port_a, port_b))
        return graph

    def validate(self) -> None:
        """Raise :class:`GenerationError` if any structural invariant of the level is broken."""
        if not self.rooms:
            raise GenerationError("Room graph is empty")

        for room in self.rooms:
            if len(room.port_indices) != room.edge_count:
                raise GenerationError(
                    f"Room {room.index} has {len(room.port_indices)} ports for {room.edge_count} edges"
                )
            for port in self.ports_of(room):
                if port.native_room_index != room.index:
                    raise GenerationError(
                        f"Port {port.index} listed on room {room.index} belongs to room {port.native_room_index}"
                    )

        for port in self.ports:
            if (port.sister_port_index is None) != (port.connected_room_index is None):
                raise GenerationError(f"Port {port.index} is half paired")
            sister = self.sister_port(port)
            if sister is None:
                continue
            if sister.sister_port_index != port.index:
                raise GenerationError(f"Port {port.index} pairing with {sister.index} is not symmetric")
            if port.connected_room_index != sister.native_room_index:
                raise GenerationError(
                    f"Port {port.index} reports room {port.connected_room_index} but its sister lives in room {sister.native_room_index}"
                )

        graph = self.to_networkx()
        if graph.number_of_edges() != len(self.rooms) - 1 or not nx.is_tree(graph):
            raise GenerationError(
                f"Room graph is not a tree: {len(self.rooms)} rooms, {graph.number_of_edges()} connections"
            )

        for room_a, room_b in itertools.combinations(self.rooms, 2):
            if graph.has_edge(room_a.index, room_b.index):
                continue
            if room_a.intersects(room_b.floor_center, room_b.circumradius):
                raise GenerationError(f"Rooms {room_a.index} and {room_b.index} overlap")

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data summary of the layout, suitable for comparisons between runs."""
        return {
            "seed": self.seed,
            "centers": [tuple(float(v) for v in room.floor_center) for room in self.rooms],
            "edge_counts": [room.edge_count for room in self.rooms],
            "pairings": [(port.index, port.sister_port_index) for port in self.paired_ports()],
        }

