import pytest

from level_generator import generate_level
from level_geometry import vec3
from level_renderer import PORT_CHAR, point_in_convex_polygon, print_level, render_level
from room_graph import RoomGraph

SQUARE = [vec3(5, 0, 5), vec3(5, 0, -5), vec3(-5, 0, -5), vec3(-5, 0, 5)]


@pytest.mark.parametrize(
    "x,z,expected",
    [
        (0.0, 0.0, True),
        (4.9, -4.9, True),
        (5.0, 0.0, True),
        (5.1, 0.0, False),
        (-6.0, 6.0, False),
    ],
)
def test_point_in_convex_polygon(x, z, expected):
    assert point_in_convex_polygon(x, z, SQUARE) is expected


def test_single_room_renders_filled_square():
    graph = generate_level(1, (4, 4), 10.0, 1.0, 0.5, 10.0, seed=0)

    lines = render_level(graph, width=20, height=10)

    assert len(lines) == 10
    assert all(len(line) == 20 for line in lines)
    assert lines[5][10] == "O"
    assert PORT_CHAR not in "".join(lines)


def test_connected_rooms_show_port_markers(capsys):
    graph = generate_level(6, (3, 6), 10.0, 3.0, 0.5, 10.0, seed=4)

    lines = render_level(graph, width=60, height=30)
    print_level(graph, width=60, height=30)

    text = "".join(lines)
    assert PORT_CHAR in text
    assert "X" in text
    assert capsys.readouterr().out.splitlines() == lines


def test_render_rejects_empty_graph():
    with pytest.raises(ValueError):
        render_level(RoomGraph())
