import math

import numpy as np
import pytest

from level_errors import InvalidConfiguration
from level_geometry import LocalFrame, distance, vec3
from polygon_metrics import PolygonMetrics, PolygonMetricsTable, polygon_vertices, port_positions


@pytest.mark.parametrize(
    "edge_count,circumradius,inradius,name",
    [
        (3, 5.773503, 2.886751, "Triangle"),
        (4, 7.071068, 5.0, "Square"),
        (6, 10.0, 8.660254, "Hexagon"),
        (10, 16.180340, 15.388418, "Decagon"),
        (12, 19.318517, 18.660254, "12-sided polygon"),
    ],
)
def test_polygon_metrics_match_regular_polygon_formulas(edge_count, circumradius, inradius, name):
    metrics = PolygonMetrics.compute(edge_count, 10.0)

    assert metrics.circumradius == pytest.approx(circumradius, abs=1e-5)
    assert metrics.inradius == pytest.approx(inradius, abs=1e-5)
    assert metrics.angular_step == pytest.approx(2 * math.pi / edge_count)
    assert metrics.half_step == pytest.approx(math.pi / edge_count)
    assert metrics.name == name


def test_metrics_table_covers_inclusive_range_and_rejects_outside():
    table = PolygonMetricsTable(side_length=4.0, max_edge_count=7, min_edge_count=4)

    assert sorted(table) == [4, 5, 6, 7]
    assert len(table) == 4
    assert table[5].side_length == 4.0
    assert table.largest_circumradius == pytest.approx(table[7].circumradius)
    with pytest.raises(InvalidConfiguration):
        table[3]
    with pytest.raises(InvalidConfiguration):
        table[8]


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(side_length=0.0, max_edge_count=6),
        dict(side_length=10.0, max_edge_count=6, min_edge_count=2),
        dict(side_length=10.0, max_edge_count=4, min_edge_count=5),
    ],
)
def test_metrics_table_rejects_invalid_parameters(kwargs):
    with pytest.raises(InvalidConfiguration):
        PolygonMetricsTable(**kwargs)


def test_square_vertices_and_ports_at_origin():
    metrics = PolygonMetrics.compute(4, 10.0)
    frame = LocalFrame.at(vec3(0, 0, 0))

    vertices = polygon_vertices(frame, metrics)
    ports = port_positions(frame, metrics)

    expected_vertices = [(0, 0, 0), (5, 0, 5), (5, 0, -5), (-5, 0, -5), (-5, 0, 5)]
    expected_ports = [(0, 0, 5), (5, 0, 0), (0, 0, -5), (-5, 0, 0)]
    for actual, expected in zip(vertices, expected_vertices):
        assert actual == pytest.approx(np.array(expected, dtype=float), abs=1e-9)
    for actual, expected in zip(ports, expected_ports):
        assert actual == pytest.approx(np.array(expected, dtype=float), abs=1e-9)


@pytest.mark.parametrize("edge_count", [3, 4, 5, 6, 7, 8])
def test_every_port_sits_on_the_midpoint_of_its_edge(edge_count):
    metrics = PolygonMetrics.compute(edge_count, 10.0)
    frame = LocalFrame.facing(vec3(3.0, 2.0, -4.0), vec3(-10.0, 2.0, 7.0))

    vertices = polygon_vertices(frame, metrics)
    ports = port_positions(frame, metrics)

    assert len(vertices) == edge_count + 1
    assert len(ports) == edge_count
    corners = vertices[1:]
    for k, port in enumerate(ports):
        # Port k lies between corner k and corner k+1, corner 0 meaning the last corner.
        midpoint = 0.5 * (corners[k - 1] + corners[k])
        assert port == pytest.approx(midpoint, abs=1e-9)
        assert distance(port, frame.position) == pytest.approx(metrics.inradius)
    for corner in corners:
        assert distance(corner, frame.position) == pytest.approx(metrics.circumradius)
        assert corner[1] == pytest.approx(2.0)


def test_port_zero_points_along_frame_forward():
    metrics = PolygonMetrics.compute(5, 10.0)
    frame = LocalFrame.facing(vec3(0, 0, 0), vec3(10, 0, 0))

    ports = port_positions(frame, metrics)

    assert ports[0] == pytest.approx(np.array([metrics.inradius, 0.0, 0.0]), abs=1e-9)
