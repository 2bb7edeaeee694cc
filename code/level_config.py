"""Configuration container for the polygon level generator."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from level_constants import (
    DEFAULT_BOUNDS_PADDING,
    DEFAULT_HEIGHT,
    DEFAULT_INCLINE_MAX,
    DEFAULT_MAX_EDGE_COUNT,
    DEFAULT_MAX_PLACEMENT_ATTEMPTS,
    DEFAULT_ROOM_SPACING,
    DEFAULT_SIDE_LENGTH,
    MIN_EDGE_COUNT,
)
from level_errors import InvalidConfiguration


@dataclass
class LevelConfig:
    """Aggregates all tunable parameters for level generation."""

    # Number of rooms to place; every one of them ends up in the level.
    room_count: int
    min_edge_count: int = MIN_EDGE_COUNT
    max_edge_count: int = DEFAULT_MAX_EDGE_COUNT
    # Length of every side of every polygon room.
    side_length: float = DEFAULT_SIDE_LENGTH
    # Horizontal gap left between the ports of two connected rooms.
    room_spacing: float = DEFAULT_ROOM_SPACING
    # Largest rise over run of a tunnel; bounds the height offset between connected rooms.
    incline_max: float = DEFAULT_INCLINE_MAX
    height: float = DEFAULT_HEIGHT
    random_seed: int | None = None
    # Failed attempts allowed while placing one room; None retries forever.
    max_placement_attempts: Optional[int] = DEFAULT_MAX_PLACEMENT_ATTEMPTS
    floor_only: bool = False
    collect_metrics: bool = False
    bounds_padding: float = DEFAULT_BOUNDS_PADDING

    def __post_init__(self) -> None:
        self.room_count = _whole_number("room_count", self.room_count)
        self.min_edge_count = _whole_number("min_edge_count", self.min_edge_count)
        self.max_edge_count = _whole_number("max_edge_count", self.max_edge_count)
        self.side_length = _finite("side_length", self.side_length)
        self.room_spacing = _finite("room_spacing", self.room_spacing)
        self.incline_max = _finite("incline_max", self.incline_max)
        self.height = _finite("height", self.height)
        self.bounds_padding = _finite("bounds_padding", self.bounds_padding)
        if self.max_placement_attempts is not None:
            self.max_placement_attempts = _whole_number(
                "max_placement_attempts", self.max_placement_attempts
            )

        if self.room_count <= 0:
            raise InvalidConfiguration("LevelConfig room_count must be positive")
        if self.min_edge_count < MIN_EDGE_COUNT:
            raise InvalidConfiguration(
                f"LevelConfig min_edge_count must be at least {MIN_EDGE_COUNT}"
            )
        if self.max_edge_count < self.min_edge_count:
            raise InvalidConfiguration(
                "LevelConfig edge count range is empty (max_edge_count < min_edge_count)"
            )
        if self.side_length <= 0:
            raise InvalidConfiguration("LevelConfig side_length must be positive")
        if self.room_spacing < 0:
            raise InvalidConfiguration("LevelConfig room_spacing cannot be negative")
        if not (0.0 <= self.incline_max <= 1.0):
            raise InvalidConfiguration("LevelConfig incline_max must lie within [0, 1]")
        if self.height <= 0:
            raise InvalidConfiguration("LevelConfig height must be positive")
        if self.max_placement_attempts is not None and self.max_placement_attempts <= 0:
            raise InvalidConfiguration(
                "LevelConfig max_placement_attempts must be positive or None"
            )
        if self.bounds_padding < 0:
            raise InvalidConfiguration("LevelConfig bounds_padding cannot be negative")

    @classmethod
    def from_edge_count_range(cls, room_count: int, edge_count_range: Tuple[int, int], **kwargs) -> LevelConfig:
        try:
            min_edges, max_edges = edge_count_range
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(
                f"edge_count_range must be a (min, max) pair, got {edge_count_range!r}"
            ) from exc
        return cls(room_count=room_count, min_edge_count=min_edges, max_edge_count=max_edges, **kwargs)

    @property
    def edge_count_range(self) -> Tuple[int, int]:
        return self.min_edge_count, self.max_edge_count

    @property
    def max_height_offset(self) -> float:
        return self.incline_max * self.room_spacing


def _whole_number(name: str, value) -> int:
    try:
        converted = int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidConfiguration(f"LevelConfig {name} must be a whole number, got {value!r}") from exc
    if converted != value:
        raise InvalidConfiguration(f"LevelConfig {name} must be a whole number, got {value!r}")
    return converted


def _finite(name: str, value) -> float:
    try:
        converted = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"LevelConfig {name} must be a number, got {value!r}") from exc
    if not math.isfinite(converted):
        raise InvalidConfiguration(f"LevelConfig {name} must be finite, got {value!r}")
    return converted
