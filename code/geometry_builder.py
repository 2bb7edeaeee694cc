"""Turns a finished room graph into floor, wall, ceiling and tunnel meshes."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from level_constants import GEOMETRY_EPSILON, NORMAL_MATCH_COS, TUNNEL_SKIP_DISTANCE
from level_errors import DegenerateGeometry, GeometryError
from level_geometry import DOWN, UP, Bounds3, distance, normalize
from level_models import Port, Room
from polygon_mesh import Face, PolyMesh, Surface
from room_graph import RoomGraph

logger = logging.getLogger(__name__)


class RoomMeshBuilder:
    """Builds one mesh per room and opens a half-tunnel at every paired port.

    Meshes face the room interior: the floor normal points up, walls point at
    the room center and the ceiling points down. The builder reads the graph
    but never changes pairings or room membership.
    """

    def __init__(self, graph: RoomGraph, height: float, *, floor_only: bool = False) -> None:
        if height <= 0:
            raise ValueError("RoomMeshBuilder height must be positive")
        self.graph = graph
        self.height = float(height)
        self.floor_only = floor_only

    def build_all(self) -> int:
        """Build every room mesh, then every tunnel. Returns the number of tunnels opened."""
        for room in self.graph.rooms:
            self.build_room(room)
        if self.floor_only:
            return 0
        return self.build_tunnels()

    def build_room(self, room: Room) -> PolyMesh:
        if room.mesh is not None:
            raise GeometryError("Room mesh already built", room_index=room.index)
        mesh = self.build_floor(room)
        if not self.floor_only:
            self.build_walls_and_ceiling(room, mesh)
        room.mesh = mesh
        return mesh

    # ------------------------------------------------------------------
    # Room shell
    # ------------------------------------------------------------------
    def build_floor(self, room: Room) -> PolyMesh:
        """Fan-triangulate the floor around vertex 0 and merge the fan into one face."""
        if room.circumradius <= GEOMETRY_EPSILON:
            raise DegenerateGeometry("Room has a zero circumradius", room_index=room.index)

        # A regular n-gon is n identical isosceles triangles laid out leg to leg around the center.
        triangles = []
        for i in range(room.edge_count):
            j = i + 1
            if j == room.edge_count:
                j = 0
            triangles.append((0, i + 1, j + 1))

        mesh = PolyMesh.from_polygons(room.floor_vertices, triangles, name=room.name)
        floor = mesh.merge_faces(list(mesh.faces))
        if mesh.face_area(floor) <= GEOMETRY_EPSILON:
            raise DegenerateGeometry("Room floor has no area", room_index=room.index)
        floor.tag(Surface.FLOOR)
        return mesh

    def build_walls_and_ceiling(self, room: Room, mesh: PolyMesh) -> None:
        # Walls: only the polygon's rim, never the spokes of the floor fan.
        rim = mesh.open_edges()
        if len(rim) != room.edge_count:
            raise DegenerateGeometry(
                f"Expected {room.edge_count} floor boundary edges, found {len(rim)}",
                room_index=room.index,
            )
        top_edges, walls = mesh.extrude_edges(rim)
        mesh.translate_vertices((idx for edge in top_edges for idx in edge), UP * self.height)
        for wall in walls:
            wall.tag(Surface.WALL)

        # Ceiling: extrude the top loop in place and weld the copies into one vertex.
        cap_edges, _ = mesh.extrude_edges(top_edges)
        cap_vertices = []
        for edge in cap_edges:
            for idx in edge:
                if idx not in cap_vertices:
                    cap_vertices.append(idx)
        mesh.merge_vertices(cap_vertices)

        cap_faces = [
            face
            for face in mesh.untagged_faces()
            if float(np.dot(mesh.face_normal(face), DOWN)) >= NORMAL_MATCH_COS
        ]
        if not cap_faces:
            raise GeometryError("Could not find the ceiling cap", room_index=room.index)
        mesh.merge_faces(cap_faces).tag(Surface.CEILING)

        leftover = mesh.untagged_faces()
        if leftover:
            raise GeometryError(
                f"{len(leftover)} faces left without a surface after building the shell",
                room_index=room.index,
            )

    # ------------------------------------------------------------------
    # Tunnels
    # ------------------------------------------------------------------
    def build_tunnels(self) -> int:
        built = 0
        for port in self.graph.paired_ports():
            if port.has_built_tunnel:
                continue
            if self.open_port(port):
                built += 1
        return built

    def find_port_wall(self, port: Port) -> Face:
        """Return the wall face ``port`` sits on: the one whose normal points from the port at the center."""
        room = self.graph.native_room(port)
        if room.mesh is None:
            raise GeometryError("Room mesh has not been built", room_index=room.index, port_position=port.position)
        port_to_center = normalize(room.floor_center - port.position)
        if not port_to_center.any():
            raise DegenerateGeometry(
                "Port coincides with its room center",
                room_index=room.index,
                port_position=port.position,
            )
        for face in room.mesh.surface_faces(Surface.WALL):
            if float(np.dot(room.mesh.face_normal(face), port_to_center)) >= NORMAL_MATCH_COS:
                return face
        raise GeometryError(
            "No wall faces this port",
            room_index=room.index,
            port_position=port.position,
        )

    def open_port(self, port: Port) -> bool:
        """Build this port's half of the tunnel toward its sister; False when the rooms touch."""
        sister = self.graph.sister_port(port)
        if sister is None:
            raise GeometryError(
                "Cannot open a tunnel from an unpaired port",
                room_index=port.native_room_index,
                port_position=port.position,
            )
        room = self.graph.native_room(port)
        wall = self.find_port_wall(port)

        gap = distance(sister.position, port.position)
        if gap < TUNNEL_SKIP_DISTANCE:
            logger.debug("Room %d: port %d touches its sister, no tunnel needed", room.index, port.index)
            return False

        mesh = room.mesh
        assert mesh is not None
        for side in mesh.extrude_face(wall):
            side.tag(Surface.TUNNEL)
        # Go half way; the sister room builds the other half.
        mesh.translate_vertices(wall.indices, 0.5 * (sister.position - port.position))
        mesh.delete_face(wall)
        port.has_built_tunnel = True
        return True


def level_bounds(graph: RoomGraph, padding: float = 0.0) -> Bounds3:
    """Axis-aligned box around every built room mesh, grown by ``padding``."""
    bounds: Optional[Bounds3] = None
    for room in graph.rooms:
        if room.mesh is None:
            continue
        mesh_bounds = room.mesh.bounds()
        bounds = mesh_bounds if bounds is None else bounds.encapsulate(mesh_bounds)
    if bounds is None:
        raise ValueError("No room meshes have been built")
    return bounds.expand(padding)
