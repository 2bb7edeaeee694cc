#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging

from level_config import LevelConfig
from level_constants import (
    DEFAULT_HEIGHT,
    DEFAULT_INCLINE_MAX,
    DEFAULT_MAX_EDGE_COUNT,
    DEFAULT_ROOM_SPACING,
    DEFAULT_SIDE_LENGTH,
    MIN_EDGE_COUNT,
)
from level_generator import LevelGenerator
from level_renderer import print_level
from polygon_mesh import Surface


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a polygon-room level and print a top-down map.")
    parser.add_argument("--rooms", type=int, default=12, help="Number of rooms to place (default: 12)")
    parser.add_argument("--min-edges", type=int, default=MIN_EDGE_COUNT, help="Fewest sides a room may have")
    parser.add_argument("--max-edges", type=int, default=DEFAULT_MAX_EDGE_COUNT, help="Most sides a room may have")
    parser.add_argument("--side-length", type=float, default=DEFAULT_SIDE_LENGTH)
    parser.add_argument("--spacing", type=float, default=DEFAULT_ROOM_SPACING, help="Gap between connected ports")
    parser.add_argument("--incline", type=float, default=DEFAULT_INCLINE_MAX, help="Largest tunnel rise over run")
    parser.add_argument("--height", type=float, default=DEFAULT_HEIGHT, help="Wall height")
    parser.add_argument("--seed", type=int, default=None, help="Random seed; picked at random when omitted")
    parser.add_argument("--floor-only", action="store_true", help="Build floors only (no walls or tunnels)")
    parser.add_argument("--width", type=int, default=100, help="Map width in characters")
    parser.add_argument("--rows", type=int, default=45, help="Map height in characters")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log placement details")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = LevelConfig(
        room_count=args.rooms,
        min_edge_count=args.min_edges,
        max_edge_count=args.max_edges,
        side_length=args.side_length,
        room_spacing=args.spacing,
        incline_max=args.incline,
        height=args.height,
        random_seed=args.seed,
        floor_only=args.floor_only,
        collect_metrics=True,
    )
    generator = LevelGenerator(config)
    # Print the seed before generating, so a failing run can be reproduced with --seed.
    print(f"Using random seed {generator.seed}")
    graph = generator.generate()

    tunnels = sum(1 for port in graph.ports if port.has_built_tunnel)
    print(
        f"Placed {len(graph.rooms)} rooms, {len(graph.edges())} connections,"
        f" {tunnels} half-tunnels, {len(graph.leaves())} leaves"
    )
    for room in graph.rooms:
        counts = room.mesh.surface_counts() if room.mesh is not None else {}
        surfaces = ", ".join(f"{surface.name.lower()}={counts.get(surface, 0)}" for surface in Surface)
        print(f"  Room {room.index:3d}: {room.name:<10} neighbors {[n.index for n in graph.neighbors(room)]} ({surfaces})")
    if generator.metrics is not None:
        for name, stage in generator.metrics.snapshot().items():
            print(f"  Stage {name}: {stage['total_time'] * 1000:.1f}ms, {stage['total_items']} items")
        print(
            f"  Placement attempts: {generator.metrics.placement_attempts}"
            f" ({generator.metrics.placement_rejections} rejected)"
        )
    print()
    print_level(graph, args.width, args.rows)


if __name__ == "__main__":
    main()
