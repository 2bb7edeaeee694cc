"""Editable polygon mesh with the handful of modelling operations rooms need.

Faces are vertex-index loops. The mesh stays consistently oriented: every
interior edge ``a -> b`` of one face appears as ``b -> a`` in its neighbour,
which is what lets :meth:`PolyMesh.open_edges` find the outline of a surface.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from level_constants import GEOMETRY_EPSILON
from level_geometry import Bounds3, Vector3

Edge = Tuple[int, int]


class Surface(Enum):
    """Surface attribute assigned to every face; doubles as the material slot."""

    FLOOR = 0
    WALL = 1
    CEILING = 2
    TUNNEL = 3


@dataclass(eq=False)
class Face:
    """An ordered loop of vertex indices plus its surface attribute."""

    indices: Tuple[int, ...]
    surface: Optional[Surface] = None

    def __post_init__(self) -> None:
        self.indices = tuple(int(i) for i in self.indices)
        if len(self.indices) < 3:
            raise ValueError(f"A face needs at least 3 vertices, got {len(self.indices)}")

    def edges(self) -> List[Edge]:
        count = len(self.indices)
        return [(self.indices[i], self.indices[(i + 1) % count]) for i in range(count)]

    def tag(self, surface: Surface) -> None:
        """Assign the surface attribute; a face is tagged exactly once."""
        if self.surface is not None and self.surface is not surface:
            raise ValueError(f"Face already tagged {self.surface.name}, cannot retag as {surface.name}")
        self.surface = surface


class PolyMesh:
    """Vertex positions plus polygonal faces, modelled after an editable game-engine mesh."""

    def __init__(self, positions: Sequence[Sequence[float]], faces: Iterable[Face] = (), name: str = "") -> None:
        self.positions = np.array(positions, dtype=float).reshape(-1, 3)
        self.faces: List[Face] = list(faces)
        self.name = name

    @classmethod
    def from_polygons(
        cls,
        positions: Sequence[Sequence[float]],
        polygons: Iterable[Sequence[int]],
        name: str = "",
    ) -> PolyMesh:
        return cls(positions, [Face(tuple(polygon)) for polygon in polygons], name=name)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def face_positions(self, face: Face) -> np.ndarray:
        return self.positions[list(face.indices)]

    def _area_vector(self, face: Face) -> Vector3:
        points = self.face_positions(face)
        return np.cross(points, np.roll(points, -1, axis=0)).sum(axis=0)

    def face_normal(self, face: Face) -> Vector3:
        """Unit normal by Newell's method; degenerate faces return the zero vector."""
        area_vector = self._area_vector(face)
        norm = float(np.linalg.norm(area_vector))
        if norm < GEOMETRY_EPSILON:
            return np.zeros(3)
        return area_vector / norm

    def face_area(self, face: Face) -> float:
        return 0.5 * float(np.linalg.norm(self._area_vector(face)))

    def face_center(self, face: Face) -> Vector3:
        return self.face_positions(face).mean(axis=0)

    def open_edges(self, faces: Optional[Iterable[Face]] = None) -> List[Edge]:
        """Directed edges of ``faces`` (default: all) with no opposite edge anywhere in the mesh."""
        all_edges = {edge for face in self.faces for edge in face.edges()}
        source = self.faces if faces is None else faces
        return [
            (a, b)
            for face in source
            for a, b in face.edges()
            if (b, a) not in all_edges
        ]

    def surface_faces(self, surface: Surface) -> List[Face]:
        return [face for face in self.faces if face.surface is surface]

    def untagged_faces(self) -> List[Face]:
        return [face for face in self.faces if face.surface is None]

    def surface_counts(self) -> Dict[Surface, int]:
        counts = Counter(face.surface for face in self.faces if face.surface is not None)
        return {surface: counts.get(surface, 0) for surface in Surface}

    def used_vertex_indices(self) -> List[int]:
        return sorted({idx for face in self.faces for idx in face.indices})

    def bounds(self) -> Bounds3:
        used = self.used_vertex_indices()
        if not used:
            raise ValueError(f"Mesh {self.name!r} has no faces")
        return Bounds3.from_points(self.positions[used])

    # ------------------------------------------------------------------
    # Editing operations
    # ------------------------------------------------------------------
    def add_vertices(self, points: Sequence[Sequence[float]]) -> List[int]:
        first = len(self.positions)
        self.positions = np.vstack([self.positions, np.asarray(points, dtype=float).reshape(-1, 3)])
        return list(range(first, len(self.positions)))

    def translate_vertices(self, indices: Iterable[int], offset: Sequence[float]) -> None:
        unique = sorted(set(indices))
        self.positions[unique] += np.asarray(offset, dtype=float)

    def merge_faces(self, faces: Sequence[Face]) -> Face:
        """Replace ``faces`` with one face bounded by their shared outline."""
        if not faces:
            raise ValueError("Cannot merge an empty face set")
        edge_set = {edge for face in faces for edge in face.edges()}
        outline = [
            (a, b)
            for face in faces
            for a, b in face.edges()
            if (b, a) not in edge_set
        ]
        if not outline:
            raise ValueError("Faces to merge have no outer boundary")

        next_vertex: Dict[int, int] = {}
        for a, b in outline:
            if a in next_vertex:
                raise ValueError(f"Merged outline branches at vertex {a}")
            next_vertex[a] = b

        start = outline[0][0]
        loop = [start]
        current = next_vertex[start]
        while current != start:
            loop.append(current)
            if len(loop) > len(outline):
                raise ValueError("Merged outline does not close")
            current = next_vertex[current]
        if len(loop) != len(outline):
            raise ValueError("Faces to merge do not share a single outline")

        surfaces = {face.surface for face in faces}
        merged = Face(tuple(loop), surfaces.pop() if len(surfaces) == 1 else None)
        position = self.faces.index(faces[0])
        doomed = {id(face) for face in faces}
        self.faces = [face for face in self.faces if id(face) not in doomed]
        self.faces.insert(min(position, len(self.faces)), merged)
        return merged

    def extrude_edges(self, edges: Sequence[Edge]) -> Tuple[List[Edge], List[Face]]:
        """Extrude open edges as one group with zero distance.

        Each source vertex gets one coincident copy shared by all edges that
        use it, and every edge ``a -> b`` gains the quad ``(b, a, a', b')``.
        Returns the new edges ``(a', b')`` and the new quads.
        """
        copies: Dict[int, int] = {}
        for a, b in edges:
            for source in (a, b):
                if source not in copies:
                    copies[source] = self.add_vertices([self.positions[source]])[0]

        new_edges: List[Edge] = []
        new_faces: List[Face] = []
        for a, b in edges:
            a2, b2 = copies[a], copies[b]
            quad = Face((b, a, a2, b2))
            self.faces.append(quad)
            new_faces.append(quad)
            new_edges.append((a2, b2))
        return new_edges, new_faces

    def extrude_face(self, face: Face) -> List[Face]:
        """Detach ``face`` onto a coincident copy of its ring, bridging the gap with side quads."""
        ring = face.indices
        copies = self.add_vertices(self.positions[list(ring)])
        count = len(ring)
        sides: List[Face] = []
        for i in range(count):
            j = (i + 1) % count
            side = Face((ring[i], ring[j], copies[j], copies[i]))
            self.faces.append(side)
            sides.append(side)
        face.indices = tuple(copies)
        return sides

    def merge_vertices(self, indices: Sequence[int]) -> int:
        """Weld ``indices`` into the first of them, placed at their centroid.

        Faces that collapse below three distinct vertices are removed.
        """
        if not indices:
            raise ValueError("Cannot merge an empty vertex set")
        keep = indices[0]
        self.positions[keep] = self.positions[list(indices)].mean(axis=0)
        remap = {idx: keep for idx in indices}

        survivors: List[Face] = []
        for face in self.faces:
            loop: List[int] = []
            for idx in face.indices:
                mapped = remap.get(idx, idx)
                if not loop or loop[-1] != mapped:
                    loop.append(mapped)
            while len(loop) > 1 and loop[0] == loop[-1]:
                loop.pop()
            if len(set(loop)) < 3:
                continue
            face.indices = tuple(loop)
            survivors.append(face)
        self.faces = survivors
        return keep

    def delete_face(self, face: Face) -> None:
        try:
            self.faces.remove(face)
        except ValueError as exc:
            raise ValueError("Face does not belong to this mesh") from exc
