"""Render a generated level as a top-down ASCII map."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from level_constants import TUNNEL_SKIP_DISTANCE
from level_geometry import Vector3, distance
from room_graph import RoomGraph

ROOM_CHARS = "OX/LNMW123456789"
PORT_CHAR = '█'
TUNNEL_CHAR = '░'
# Terminal cells are roughly twice as tall as they are wide.
CELL_ASPECT = 2.0


def point_in_convex_polygon(x: float, z: float, corners: Sequence[Vector3]) -> bool:
    """True if (x, z) lies inside or on the xz projection of a convex polygon."""
    sign = 0
    count = len(corners)
    for i in range(count):
        ax, az = float(corners[i][0]), float(corners[i][2])
        bx, bz = float(corners[(i + 1) % count][0]), float(corners[(i + 1) % count][2])
        cross = (bx - ax) * (z - az) - (bz - az) * (x - ax)
        if cross == 0:
            continue
        current = 1 if cross > 0 else -1
        if sign == 0:
            sign = current
        elif current != sign:
            return False
    return True


class LevelRenderer:
    """Projects rooms, ports and tunnels onto a fixed-size character grid."""

    def __init__(self, graph: RoomGraph, width: int = 80, height: int = 40) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("LevelRenderer width and height must be positive")
        if not graph.rooms:
            raise ValueError("Cannot render an empty level")
        self.graph = graph
        self.width = width
        self.height = height
        self.grid: List[List[str]] = [[" "] * width for _ in range(height)]

        xs = [float(corner[0]) for room in graph.rooms for corner in room.corners]
        zs = [float(corner[2]) for room in graph.rooms for corner in room.corners]
        self.min_x, self.max_z = min(xs), max(zs)
        span_x = max(xs) - self.min_x
        span_z = self.max_z - min(zs)
        self.cell_width = max(span_x / width, span_z / (height * CELL_ASPECT), 1e-9)
        self.cell_height = self.cell_width * CELL_ASPECT

    def _cell_center(self, col: int, row: int) -> Tuple[float, float]:
        return (
            self.min_x + (col + 0.5) * self.cell_width,
            self.max_z - (row + 0.5) * self.cell_height,
        )

    def _to_cell(self, point: Vector3) -> Tuple[int, int]:
        col = int((float(point[0]) - self.min_x) / self.cell_width)
        row = int((self.max_z - float(point[2])) / self.cell_height)
        return min(max(col, 0), self.width - 1), min(max(row, 0), self.height - 1)

    def draw(self) -> List[str]:
        """Render rooms, then tunnels between paired ports, then the ports themselves."""
        for room in self.graph.rooms:
            room_char = ROOM_CHARS[room.index % len(ROOM_CHARS)]
            for row in range(self.height):
                for col in range(self.width):
                    x, z = self._cell_center(col, row)
                    if point_in_convex_polygon(x, z, room.corners):
                        self.grid[row][col] = room_char

        for _, _, port_a, port_b in self.graph.edges():
            start = self.graph.port(port_a).position
            end = self.graph.port(port_b).position
            gap = distance(start, end)
            if gap < TUNNEL_SKIP_DISTANCE:
                continue
            steps = max(2, int(gap / min(self.cell_width, self.cell_height)) * 2)
            for step in range(steps + 1):
                col, row = self._to_cell(start + (end - start) * (step / steps))
                if self.grid[row][col] == " ":
                    self.grid[row][col] = TUNNEL_CHAR

        for port in self.graph.paired_ports():
            col, row = self._to_cell(port.position)
            self.grid[row][col] = PORT_CHAR

        return ["".join(row) for row in self.grid]


def render_level(graph: RoomGraph, width: int = 80, height: int = 40) -> List[str]:
    return LevelRenderer(graph, width, height).draw()


def print_level(graph: RoomGraph, width: int = 80, height: int = 40, horizontal_sep: str = "") -> None:
    """Prints the ASCII map to the console."""
    for line in render_level(graph, width, height):
        print(horizontal_sep.join(line))
