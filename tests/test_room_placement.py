import random

import networkx as nx
import numpy as np
import pytest

from level_errors import PlacementExhausted
from level_geometry import horizontal, length
from room_graph import RoomGraph
from room_placement import PlacementEngine, PlacementState, place_rooms


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_placement_produces_non_overlapping_tree(make_config, seed):
    config = make_config(room_count=15, min_edge_count=3, max_edge_count=8, random_seed=seed)

    graph = place_rooms(config, random.Random(seed))

    assert len(graph.rooms) == 15
    assert len(graph.edges()) == 14
    assert nx.is_tree(graph.to_networkx())
    for room in graph.rooms:
        assert 3 <= room.edge_count <= 8
        assert len(room.port_indices) == room.edge_count
    for port in graph.paired_ports():
        assert graph.sister_port(graph.sister_port(port)) is port
    graph.validate()


def test_root_room_is_first_draw_and_sits_at_origin(make_config):
    config = make_config(room_count=1, min_edge_count=3, max_edge_count=8)
    expected_edges = random.Random(42).randint(3, 8)

    graph = place_rooms(config, random.Random(42))

    assert len(graph.rooms) == 1
    assert graph.rooms[0].edge_count == expected_edges
    assert graph.rooms[0].floor_center == pytest.approx(np.zeros(3))
    assert graph.edges() == []
    assert not any(port.has_connection for port in graph.ports)


def test_new_rooms_face_their_anchor_through_port_zero(make_config):
    config = make_config(room_count=10, room_spacing=3.0, incline_max=0.5)

    graph = place_rooms(config, random.Random(9))

    for room in graph.rooms[1:]:
        facing_port = graph.port(room.port_indices[0])
        sister = graph.sister_port(facing_port)
        assert sister is not None
        assert sister.native_room_index < room.index
        # Paired ports are exactly room_spacing apart on the ground plane.
        assert length(horizontal(facing_port.position - sister.position)) == pytest.approx(3.0)
        assert abs(facing_port.position[1] - sister.position[1]) <= config.max_height_offset + 1e-9


def test_zero_incline_keeps_level_flat(make_config):
    config = make_config(room_count=10, incline_max=0.0)

    graph = place_rooms(config, random.Random(5))

    assert all(room.floor_center[1] == 0.0 for room in graph.rooms)


def test_same_seed_gives_identical_layout(make_config):
    config = make_config(room_count=12)

    first = place_rooms(config, random.Random(77)).snapshot()
    second = place_rooms(config, random.Random(77)).snapshot()

    assert first == second


def test_steps_report_state_machine_transitions(make_config):
    config = make_config(room_count=4)
    engine = PlacementEngine(config, random.Random(1))

    steps = list(engine.steps())

    assert steps[0].state is PlacementState.COMMITTED
    assert steps[0].room_index == 0
    committed = [step for step in steps if step.state is PlacementState.COMMITTED]
    assert [step.room_index for step in committed] == [0, 1, 2, 3]
    sampling = [step for step in steps if step.state is PlacementState.SAMPLING]
    assert len(sampling) == engine.attempts
    assert engine.attempts - engine.rejections == 3
    assert engine.state is PlacementState.COMMITTED
    assert engine.open_ports == ()


def test_open_pool_holds_root_ports_before_second_room(make_config):
    engine = PlacementEngine(make_config(room_count=3), random.Random(8))
    steps = engine.steps()

    next(steps)

    assert sorted(engine.open_ports) == list(engine.graph.rooms[0].port_indices)


def test_engine_runs_only_once(make_config):
    engine = PlacementEngine(make_config(room_count=2), random.Random(0))
    engine.place_all()

    with pytest.raises(RuntimeError):
        engine.place_all()


def test_attempt_cap_raises_placement_exhausted(make_config, monkeypatch):
    monkeypatch.setattr(RoomGraph, "is_valid_room_position", lambda self, *args, **kwargs: False)
    engine = PlacementEngine(make_config(room_count=3, max_placement_attempts=5), random.Random(2))

    with pytest.raises(PlacementExhausted) as excinfo:
        engine.place_all()

    assert excinfo.value.room_index == 1
    assert excinfo.value.attempts == 5
    assert engine.state is PlacementState.EXHAUSTED
    assert engine.rejections == 5
    # Rejected anchors go back into the pool.
    assert sorted(engine.open_ports) == list(engine.graph.rooms[0].port_indices)


def test_empty_pool_raises_placement_exhausted(make_config):
    engine = PlacementEngine(make_config(room_count=3), random.Random(2))
    steps = engine.steps()
    next(steps)
    engine._open_ports.clear()

    with pytest.raises(PlacementExhausted, match="no open ports"):
        next(steps)
    assert engine.state is PlacementState.EXHAUSTED
