from collections import Counter

import pytest

from benchmark_generation import run_single_generation, shape_evenness, summarize


def test_shape_evenness_spans_single_shape_to_uniform():
    assert shape_evenness(Counter({4: 10}), 4) == pytest.approx(0.0)
    assert shape_evenness(Counter({3: 5, 4: 5, 5: 5, 6: 5}), 4) == pytest.approx(1.0)
    assert 0.0 < shape_evenness(Counter({3: 9, 4: 1}), 4) < 0.5


def test_summarize_reports_percentiles():
    summary = summarize([1.0, 2.0, 3.0, 4.0, 5.0])

    assert summary["mean"] == pytest.approx(3.0)
    assert summary["p50"] == pytest.approx(3.0)
    assert (summary["min"], summary["max"]) == (1.0, 5.0)


def test_run_single_generation_collects_level_shape():
    result = run_single_generation(seed=4, room_count=6)

    assert result.total_rooms == 6
    assert sum(result.shape_counts.values()) == 6
    assert result.attempts >= 5
    assert 0.0 < result.leaf_fraction < 1.0
    assert "placement" in result.stage_metrics
