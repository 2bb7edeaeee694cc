"""Exceptions raised while generating a level."""

from __future__ import annotations

from typing import Optional, Sequence


class LevelGenerationError(Exception):
    """Base class for every failure reported by the level generator."""


class InvalidConfiguration(LevelGenerationError, ValueError):
    """Raised before any work starts when the requested parameters cannot be honoured."""


class PlacementExhausted(LevelGenerationError):
    """Raised when the placement search runs out of attempts for a single room."""

    def __init__(self, room_index: int, attempts: int, reason: str = "attempt cap reached") -> None:
        self.room_index = room_index
        self.attempts = attempts
        self.reason = reason
        super().__init__(
            f"Could not place room {room_index} after {attempts} attempts ({reason})"
        )


class GeometryError(LevelGenerationError):
    """Raised when mesh construction for a room cannot proceed."""

    def __init__(
        self,
        message: str,
        *,
        room_index: Optional[int] = None,
        port_position: Optional[Sequence[float]] = None,
    ) -> None:
        self.room_index = room_index
        self.port_position = None if port_position is None else tuple(float(v) for v in port_position)
        details = []
        if room_index is not None:
            details.append(f"room {room_index}")
        if self.port_position is not None:
            details.append("port at ({:.3f}, {:.3f}, {:.3f})".format(*self.port_position))
        suffix = f" [{', '.join(details)}]" if details else ""
        super().__init__(f"{message}{suffix}")


class DegenerateGeometry(GeometryError):
    """Raised when a room's vertex ring collapses before it can be extruded."""


class GenerationError(LevelGenerationError):
    """Raised when a finished room graph breaks one of its structural invariants."""


class GenerationFailed(LevelGenerationError):
    """Single aggregated error naming the stage of a generation run that failed."""

    def __init__(self, stage: str, seed: Optional[int], cause: BaseException) -> None:
        self.stage = stage
        self.seed = seed
        self.cause = cause
        super().__init__(f"Level generation failed during {stage} (seed={seed}): {cause}")
