"""Helpers for collecting instrumentation data during level generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class StageMetrics:
    """Aggregated metrics for a single generation stage across invocations."""

    name: str
    invocations: int = 0
    total_time: float = 0.0
    total_items: int = 0

    def record(self, duration: float, items: int) -> None:
        self.invocations += 1
        self.total_time += duration
        self.total_items += items

    def to_dict(self) -> Dict[str, float | int]:
        average_time = self.total_time / self.invocations if self.invocations else 0.0
        average_items = self.total_items / self.invocations if self.invocations else 0.0
        return {
            "invocations": self.invocations,
            "total_time": self.total_time,
            "average_time": average_time,
            "total_items": self.total_items,
            "average_items": average_items,
        }


@dataclass
class GenerationMetrics:
    """Container for stage metrics recorded during a generation run."""

    stages: Dict[str, StageMetrics] = field(default_factory=dict)
    placement_attempts: int = 0
    placement_rejections: int = 0

    def record_stage_run(self, name: str, duration: float, items: int) -> None:
        metrics = self.stages.get(name)
        if metrics is None:
            metrics = StageMetrics(name=name)
            self.stages[name] = metrics
        metrics.record(duration, items)

    def snapshot(self) -> Dict[str, Dict[str, float | int]]:
        return {name: metrics.to_dict() for name, metrics in self.stages.items()}
