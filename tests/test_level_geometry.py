import numpy as np
import pytest

from level_geometry import (
    Bounds3,
    LocalFrame,
    circles_intersect,
    distance,
    horizontal,
    normalize,
    vec3,
)


def test_normalize_returns_unit_vector_and_zero_for_tiny_input():
    assert normalize(vec3(3, 0, 4)) == pytest.approx(np.array([0.6, 0.0, 0.8]))
    assert not normalize(vec3(0, 0, 0)).any()
    assert not normalize(vec3(1e-9, 0, 0)).any()


def test_horizontal_drops_height():
    assert horizontal(vec3(1, 5, -2)) == pytest.approx(np.array([1.0, 0.0, -2.0]))


@pytest.mark.parametrize(
    "center_b,radius_b,expected",
    [
        ((3, 0, 0), 2.0, True),
        ((5, 0, 0), 2.0, False),  # Tangent circles do not intersect.
        ((0, 4, 0), 1.5, True),
        ((10, 0, 0), 2.0, False),
    ],
)
def test_circles_intersect_is_strict(center_b, radius_b, expected):
    assert circles_intersect(vec3(0, 0, 0), 3.0, vec3(*center_b), radius_b) is expected


def test_local_frame_facing_is_level_and_right_handed():
    frame = LocalFrame.facing(vec3(0, 1, 0), vec3(0, 7, -4))

    assert np.array(frame.forward) == pytest.approx(np.array([0.0, 0.0, -1.0]))
    assert np.array(frame.right) == pytest.approx(np.array([-1.0, 0.0, 0.0]))
    assert frame.transform_point(0, 0, 2) == pytest.approx(np.array([0.0, 1.0, -2.0]))
    assert frame.transform_point(1, 3, 0) == pytest.approx(np.array([-1.0, 4.0, 0.0]))


def test_local_frame_facing_itself_falls_back_to_identity():
    frame = LocalFrame.facing(vec3(2, 0, 2), vec3(2, 5, 2))

    assert frame == LocalFrame.at(vec3(2, 0, 2))


def test_bounds_from_points_encapsulate_and_expand():
    a = Bounds3.from_points([vec3(0, 0, 0), vec3(2, 1, 3)])
    b = Bounds3.from_points([vec3(-1, 0.5, 1)])

    merged = a.encapsulate(b)
    grown = merged.expand(1.0)

    assert merged.minimum == (-1.0, 0.0, 0.0)
    assert merged.maximum == (2.0, 1.0, 3.0)
    assert merged.size == (3.0, 1.0, 3.0)
    assert merged.center == (0.5, 0.5, 1.5)
    assert grown.minimum == (-2.0, -1.0, -1.0)
    assert grown.contains((2.5, 1.9, -0.5))
    assert not merged.contains((2.5, 0.0, 0.0))
    with pytest.raises(ValueError):
        Bounds3.from_points([])


def test_distance_is_euclidean():
    assert distance(vec3(1, 2, 3), vec3(4, 6, 3)) == pytest.approx(5.0)
