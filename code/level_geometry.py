"""Vector, frame and bounds helpers shared by placement and mesh building."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np

from level_constants import GEOMETRY_EPSILON

Vector3 = np.ndarray

UP: Vector3 = np.array([0.0, 1.0, 0.0])
DOWN: Vector3 = np.array([0.0, -1.0, 0.0])


def vec3(x: float, y: float, z: float) -> Vector3:
    return np.array([float(x), float(y), float(z)])


def length(v: Vector3) -> float:
    return float(np.linalg.norm(v))


def distance(a: Vector3, b: Vector3) -> float:
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


def normalize(v: Vector3) -> Vector3:
    """Return ``v`` scaled to unit length; vectors shorter than epsilon come back as zero."""
    ln = length(v)
    if ln < GEOMETRY_EPSILON:
        return np.zeros(3)
    return np.asarray(v, dtype=float) / ln


def horizontal(v: Vector3) -> Vector3:
    """Project ``v`` onto the xz ground plane."""
    return np.array([v[0], 0.0, v[2]])


def circles_intersect(center_a: Vector3, radius_a: float, center_b: Vector3, radius_b: float) -> bool:
    """Bounding-circle overlap test: strict, so tangent circles do not intersect."""
    return distance(center_a, center_b) < radius_a + radius_b


@dataclass(frozen=True)
class LocalFrame:
    """Level, yaw-only frame: local +z is ``forward``, +x is ``right``, +y is world up."""

    origin: Tuple[float, float, float]
    forward: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    right: Tuple[float, float, float] = (1.0, 0.0, 0.0)

    @classmethod
    def at(cls, origin: Vector3) -> LocalFrame:
        return cls(origin=tuple(float(v) for v in origin))

    @classmethod
    def facing(cls, origin: Vector3, target: Vector3) -> LocalFrame:
        """Frame at ``origin`` whose forward axis points at ``target`` in the ground plane."""
        forward = normalize(horizontal(np.asarray(target) - np.asarray(origin)))
        if not forward.any():
            return cls.at(origin)
        right = np.array([forward[2], 0.0, -forward[0]])
        return cls(
            origin=tuple(float(v) for v in origin),
            forward=tuple(float(v) for v in forward),
            right=tuple(float(v) for v in right),
        )

    @property
    def position(self) -> Vector3:
        return np.array(self.origin)

    def transform_point(self, x: float, y: float, z: float) -> Vector3:
        """Map a local-space point into world space."""
        return (
            np.array(self.origin)
            + x * np.array(self.right)
            + y * UP
            + z * np.array(self.forward)
        )


@dataclass(frozen=True)
class Bounds3:
    """Axis-aligned box given by inclusive minimum and maximum corners."""

    minimum: Tuple[float, float, float]
    maximum: Tuple[float, float, float]

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> Bounds3:
        array = np.asarray(list(points), dtype=float)
        if array.size == 0:
            raise ValueError("Bounds3 requires at least one point")
        return cls(
            minimum=tuple(float(v) for v in array.min(axis=0)),
            maximum=tuple(float(v) for v in array.max(axis=0)),
        )

    @property
    def size(self) -> Tuple[float, float, float]:
        return tuple(hi - lo for lo, hi in zip(self.minimum, self.maximum))  # type: ignore[return-value]

    @property
    def center(self) -> Tuple[float, float, float]:
        return tuple((lo + hi) * 0.5 for lo, hi in zip(self.minimum, self.maximum))  # type: ignore[return-value]

    def encapsulate(self, other: Bounds3) -> Bounds3:
        return Bounds3(
            minimum=tuple(min(a, b) for a, b in zip(self.minimum, other.minimum)),
            maximum=tuple(max(a, b) for a, b in zip(self.maximum, other.maximum)),
        )

    def expand(self, margin: float) -> Bounds3:
        """Return a box grown outward by ``margin`` on all sides."""
        if margin == 0:
            return self
        return Bounds3(
            minimum=tuple(v - margin for v in self.minimum),
            maximum=tuple(v + margin for v in self.maximum),
        )

    def contains(self, point: Sequence[float]) -> bool:
        return all(lo <= p <= hi for lo, p, hi in zip(self.minimum, point, self.maximum))
