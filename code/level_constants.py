"""Shared constants for the polygon level generator."""

from __future__ import annotations

MIN_EDGE_COUNT = 3
DEFAULT_MAX_EDGE_COUNT = 6
DEFAULT_SIDE_LENGTH = 10.0
DEFAULT_HEIGHT = 10.0
DEFAULT_ROOM_SPACING = 1.0
DEFAULT_INCLINE_MAX = 0.5  # Rise over run of a connecting tunnel.
DEFAULT_BOUNDS_PADDING = 20.0

# Failed attempts allowed per room before placement gives up; keeps impossible configs finite.
DEFAULT_MAX_PLACEMENT_ATTEMPTS = 10_000

# Faces whose normals agree to within this cosine are treated as facing the same way.
NORMAL_MATCH_COS = 0.99
# Paired ports closer than this need no tunnel.
TUNNEL_SKIP_DISTANCE = 0.02
GEOMETRY_EPSILON = 1e-6

POLYGON_NAMES = {
    3: "Triangle",
    4: "Square",
    5: "Pentagon",
    6: "Hexagon",
    7: "Heptagon",
    8: "Octagon",
    9: "Nonagon",
    10: "Decagon",
}


def polygon_name(edge_count: int) -> str:
    return POLYGON_NAMES.get(edge_count, f"{edge_count}-sided polygon")
