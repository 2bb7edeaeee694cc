"""LevelGenerator sequences room placement, mesh building and tunnel opening."""

from __future__ import annotations

import logging
import random
from time import perf_counter
from typing import Any, Callable, Optional, Tuple

from geometry_builder import RoomMeshBuilder, level_bounds
from level_config import LevelConfig
from level_errors import GenerationFailed, InvalidConfiguration, LevelGenerationError
from metrics import GenerationMetrics
from polygon_metrics import PolygonMetricsTable
from room_graph import RoomGraph
from room_placement import PlacementEngine

logger = logging.getLogger(__name__)

MAX_RANDOM_SEED = 1_000_000


class LevelGenerator:
    """Manages the overall process of generating a level from a config."""

    def __init__(self, config: LevelConfig) -> None:
        self.config = config
        seed = config.random_seed
        if seed is None:
            # Pick a seed and report it so a failing run can be replayed.
            seed = random.randint(0, MAX_RANDOM_SEED)
            logger.info("No seed configured, using random seed %d", seed)
        self.seed = seed
        self.rng = random.Random(seed)
        self.metrics = GenerationMetrics() if config.collect_metrics else None
        # Built up front so configuration problems surface before any stage runs.
        self.metrics_table = PolygonMetricsTable(
            config.side_length,
            config.max_edge_count,
            config.min_edge_count,
        )
        self.graph: Optional[RoomGraph] = None

    def _run_stage(self, name: str, func: Callable[..., Tuple[Any, int]], *args, **kwargs) -> Any:
        """Run one stage, timing it and folding any failure into a single GenerationFailed."""
        start = perf_counter()
        try:
            result, items = func(*args, **kwargs)
        except InvalidConfiguration:
            raise
        except (LevelGenerationError, ValueError) as exc:
            logger.error("Stage %s failed with seed %d: %s", name, self.seed, exc)
            raise GenerationFailed(name, self.seed, exc) from exc
        if self.metrics is not None:
            self.metrics.record_stage_run(name, perf_counter() - start, items)
        return result

    def _place_rooms(self) -> Tuple[RoomGraph, int]:
        engine = PlacementEngine(self.config, self.rng, self.metrics_table)
        graph = engine.place_all()
        if self.metrics is not None:
            self.metrics.placement_attempts += engine.attempts
            self.metrics.placement_rejections += engine.rejections
        return graph, len(graph.rooms)

    @staticmethod
    def _build_shells(builder: RoomMeshBuilder) -> Tuple[None, int]:
        faces = 0
        for room in builder.graph.rooms:
            faces += builder.build_room(room).face_count
        return None, faces

    @staticmethod
    def _open_tunnels(builder: RoomMeshBuilder) -> Tuple[None, int]:
        return None, builder.build_tunnels()

    @staticmethod
    def _validate(graph: RoomGraph) -> Tuple[None, int]:
        graph.validate()
        return None, len(graph.rooms)

    def generate(self) -> RoomGraph:
        """Generate the level and return its room graph, with a mesh attached to every room."""
        if self.graph is not None:
            raise RuntimeError("LevelGenerator already produced a level; create a new one to regenerate")

        graph = self._run_stage("placement", self._place_rooms)
        graph.seed = self.seed

        builder = RoomMeshBuilder(graph, self.config.height, floor_only=self.config.floor_only)
        self._run_stage("geometry", self._build_shells, builder)
        if not self.config.floor_only:
            self._run_stage("tunnels", self._open_tunnels, builder)
        self._run_stage("validation", self._validate, graph)

        graph.bounds = level_bounds(graph, self.config.bounds_padding)
        self.graph = graph
        logger.info(
            "Generated level with %d rooms and %d connections (seed %d)",
            len(graph.rooms),
            len(graph.edges()),
            self.seed,
        )
        return graph


def generate_level(
    room_count: int,
    edge_count_range: Tuple[int, int],
    side_length: float,
    room_spacing: float,
    incline_max: float,
    height: float,
    seed: Optional[int],
    **options: Any,
) -> RoomGraph:
    """Generate a level in one call; identical arguments and seed give an identical level."""
    config = LevelConfig.from_edge_count_range(
        room_count,
        edge_count_range,
        side_length=side_length,
        room_spacing=room_spacing,
        incline_max=incline_max,
        height=height,
        random_seed=seed,
        **options,
    )
    return LevelGenerator(config).generate()
