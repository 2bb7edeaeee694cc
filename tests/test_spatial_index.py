import random

import pytest

from level_geometry import vec3
from room_graph import RoomGraph
from spatial_index import SpatialIndex


def test_spatial_index_matches_full_scan(add_room):
    rng = random.Random(3)
    graph = RoomGraph(spatial_cell_size=12.0)
    for _ in range(60):
        center = (rng.uniform(-120, 120), rng.uniform(-4, 4), rng.uniform(-120, 120))
        add_room(graph, center, edge_count=rng.randint(3, 8))

    for _ in range(300):
        center = vec3(rng.uniform(-140, 140), rng.uniform(-4, 4), rng.uniform(-140, 140))
        radius = rng.uniform(1.0, 15.0)
        ignore = {rng.randrange(len(graph.rooms))}

        expected = [
            room.index
            for room in graph.rooms
            if room.index not in ignore and room.intersects(center, radius)
        ]
        found = graph.spatial_index.overlapping_rooms(center, radius, ignore_rooms=ignore)

        assert [room.index for room in found] == expected
        assert graph.spatial_index.is_area_clear(center, radius, ignore_rooms=ignore) is (
            not graph.intersects_any(center, radius, ignore_rooms=ignore)
        )


def test_spatial_index_rejects_duplicates_and_clears(add_room):
    graph = RoomGraph()
    room = add_room(graph, (0, 0, 0))

    with pytest.raises(ValueError):
        graph.spatial_index.add_room(room)

    graph.spatial_index.clear()
    assert len(graph.spatial_index) == 0
    assert graph.spatial_index.is_area_clear(vec3(0, 0, 0), 5.0)


def test_spatial_index_requires_positive_cell_size():
    with pytest.raises(ValueError):
        SpatialIndex(0.0)
