#!/usr/bin/env python3

# This file performs multiple runs of level generation, collecting and reporting metrics.
# Used for testing both performance of the placement search and the shape of resulting levels.

from __future__ import annotations

import argparse
from collections import Counter
import datetime
from dataclasses import dataclass
import json
import math
import os
import random
import time
from typing import Any, Dict, List

import networkx as nx
import numpy as np

from level_config import LevelConfig
from level_generator import LevelGenerator
from room_graph import RoomGraph

# Larger levels and a wider edge count range than the main.py defaults.
DEFAULT_CONFIG_KWARGS = dict(
    room_count=40,
    min_edge_count=3,
    max_edge_count=8,
    side_length=10.0,
    room_spacing=2.0,
    incline_max=0.5,
    height=10.0,
    collect_metrics=True,
)

DEFAULT_MAX_ATTEMPTS_PER_ROOM = 5.0

PERCENTILES = (50, 90, 99)


def build_config(seed: int, room_count: int) -> LevelConfig:
    kwargs = dict(DEFAULT_CONFIG_KWARGS)
    kwargs["room_count"] = room_count
    return LevelConfig(random_seed=seed, **kwargs)  # type: ignore[arg-type]


@dataclass
class GenerationRunResult:
    seed: int
    duration: float
    total_rooms: int
    attempts: int
    rejections: int
    attempts_per_room: float
    shape_evenness: float
    leaf_fraction: float
    graph_diameter: int
    max_degree: int
    vertical_span: float
    shape_counts: Counter[int]
    stage_metrics: Dict[str, Dict[str, float | int]]


def shape_evenness(shape_counts: Counter[int], shape_total: int) -> float:
    """Shannon entropy of the edge counts used, normalised by the number of shapes on offer.

    1.0 means every allowed polygon appears equally often; 0.0 means one shape only.
    """
    rooms = sum(shape_counts.values())
    if rooms == 0 or shape_total < 2:
        return 1.0
    entropy = -sum((count / rooms) * math.log(count / rooms) for count in shape_counts.values())
    return entropy / math.log(shape_total)


def summarize(values: List[float]) -> Dict[str, float]:
    data = np.asarray(values, dtype=float)
    summary = {
        "mean": float(data.mean()),
        "min": float(data.min()),
        "max": float(data.max()),
    }
    for pct, value in zip(PERCENTILES, np.percentile(data, PERCENTILES)):
        summary[f"p{pct}"] = float(value)
    return summary


def run_single_generation(seed: int, room_count: int) -> GenerationRunResult:
    """Run one level generation with the provided seed and collect metrics."""
    config = build_config(seed, room_count)
    generator = LevelGenerator(config)

    start = time.perf_counter()
    graph = generator.generate()
    end = time.perf_counter()

    total_rooms = len(graph.rooms)
    network = graph.to_networkx()
    degrees = [degree for _, degree in network.degree()]
    shape_counts: Counter[int] = Counter(room.edge_count for room in graph.rooms)

    metrics = generator.metrics
    attempts = metrics.placement_attempts if metrics else 0
    # The root room is placed without a search.
    searched_rooms = max(total_rooms - 1, 1)

    return GenerationRunResult(
        seed=seed,
        duration=end - start,
        total_rooms=total_rooms,
        attempts=attempts,
        rejections=metrics.placement_rejections if metrics else 0,
        attempts_per_room=attempts / searched_rooms,
        shape_evenness=shape_evenness(shape_counts, config.max_edge_count - config.min_edge_count + 1),
        leaf_fraction=len(graph.leaves()) / total_rooms,
        graph_diameter=int(nx.diameter(network)) if total_rooms >= 2 else 0,
        max_degree=max(degrees) if degrees else 0,
        vertical_span=vertical_span(graph),
        shape_counts=shape_counts,
        stage_metrics=metrics.snapshot() if metrics else {},
    )


def vertical_span(graph: RoomGraph) -> float:
    heights = [room.floor_center[1] for room in graph.rooms]
    return float(max(heights) - min(heights))


def run_benchmark(num_runs: int, seed: int | None, room_count: int) -> List[GenerationRunResult]:
    """Run the generator multiple times and collect run-level metrics."""
    rng = random.Random(seed)
    return [run_single_generation(rng.randint(0, 1_000_000), room_count) for _ in range(num_runs)]


def stage_time_totals(results: List[GenerationRunResult]) -> Dict[str, float]:
    totals: Counter[str] = Counter()
    for result in results:
        for name, metrics in result.stage_metrics.items():
            totals[name] += float(metrics.get("total_time", 0.0))
    return dict(totals)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the level generator multiple times and report timing and shape statistics."
    )
    parser.add_argument("-n", "--runs", type=int, default=20, help="Number of level generations (default: 20)")
    parser.add_argument(
        "--rooms",
        type=int,
        default=DEFAULT_CONFIG_KWARGS["room_count"],
        help="Rooms per generated level",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional seed for the benchmark harness RNG; keeps run seeds reproducible",
    )
    parser.add_argument(
        "--max-attempts-per-room",
        type=float,
        default=DEFAULT_MAX_ATTEMPTS_PER_ROOM,
        help="Placement attempts per room above which a run counts as slow",
    )
    parser.add_argument("--run-description", type=str, default="", help="Free text stored with the report")
    args = parser.parse_args()

    if args.runs <= 0:
        raise SystemExit("Number of runs must be a positive integer")
    if args.rooms <= 0:
        raise SystemExit("Room count must be a positive integer")

    results = run_benchmark(args.runs, args.seed, args.rooms)

    for idx, result in enumerate(results, start=1):
        print(
            f"Run {idx:02d}: {result.duration * 1000:.1f}ms (seed {result.seed}) | rooms {result.total_rooms}"
            f" | attempts {result.attempts} ({result.attempts_per_room:.2f}/room, {result.rejections} rejected)"
            f" | diameter {result.graph_diameter} | leaves {result.leaf_fraction:.1%}"
        )

    columns = {
        "generation_time": [r.duration for r in results],
        "attempts_per_room": [r.attempts_per_room for r in results],
        "shape_evenness": [r.shape_evenness for r in results],
        "leaf_fraction": [r.leaf_fraction for r in results],
        "graph_diameter": [float(r.graph_diameter) for r in results],
        "max_degree": [float(r.max_degree) for r in results],
        "vertical_span": [r.vertical_span for r in results],
    }
    aggregated = {key: summarize(values) for key, values in columns.items()}
    slow_runs = [r.seed for r in results if r.attempts_per_room > args.max_attempts_per_room]

    print()
    for key, summary in aggregated.items():
        print(f"{key}: " + ", ".join(f"{name}={value:.4g}" for name, value in summary.items()))
    print(f"Slow runs (> {args.max_attempts_per_room:g} attempts/room): {len(slow_runs)} {slow_runs}")

    shape_totals: Counter[int] = Counter()
    for result in results:
        shape_totals.update(result.shape_counts)
    print("Edge count distribution: " + ", ".join(
        f"{edges}={count}" for edges, count in sorted(shape_totals.items())
    ))
    stage_totals = stage_time_totals(results)
    print("Stage time totals: " + ", ".join(
        f"{name}={seconds * 1000:.1f}ms" for name, seconds in sorted(stage_totals.items())
    ))

    timestamp = datetime.datetime.now(datetime.timezone.utc)
    benchmarks_dir = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "benchmarks"))
    os.makedirs(benchmarks_dir, exist_ok=True)
    output_path = os.path.join(benchmarks_dir, f"benchmark-{timestamp.strftime('%Y%m%dT%H%M%SZ')}.json")

    report: Dict[str, Any] = {
        "timestamp": timestamp.replace(microsecond=0).isoformat(),
        "run_description": args.run_description,
        "parameters": {"runs": args.runs, "rooms": args.rooms, "seed": args.seed},
        "aggregated_results": aggregated,
        "slow_run_seeds": slow_runs,
        "edge_count_distribution": {str(edges): count for edges, count in sorted(shape_totals.items())},
        "stage_time_totals": stage_totals,
        "results": [
            {
                "seed": r.seed,
                "total_time_seconds": r.duration,
                "num_rooms": r.total_rooms,
                "attempts": r.attempts,
                "graph_diameter": r.graph_diameter,
                "leaf_fraction": r.leaf_fraction,
            }
            for r in results
        ],
    }
    with open(output_path, "w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2, sort_keys=True)
        handle.write("\n")

    print(f"\nSaved benchmark results to {os.path.relpath(output_path)}")


if __name__ == "__main__":
    main()
