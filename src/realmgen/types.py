"""Grid coordinate types and neighbor offsets."""

import math
from typing import Iterable, Iterator

# (x, y) grid coordinate. Signed so neighbor arithmetic may step off the grid
# before being bounds-checked.
Coord = tuple[int, int]

# Height sample streamed by the sampler: (x, y, height)
HeightSample = tuple[int, int, float]

# Coordinate system: +X is East, +Y is South.
# Order is fixed: N, NE, E, SE, S, SW, W, NW. Growth determinism depends on it.
NEIGHBORS_8: tuple[Coord, ...] = (
    (0, -1),
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
)

# Lateral-only moves: N, E, S, W
NEIGHBORS_4: tuple[Coord, ...] = (
    (0, -1),
    (1, 0),
    (0, 1),
    (-1, 0),
)

# Slack allowed past the current growth radius so diagonal steps still count.
RADIUS_TOLERANCE = math.sqrt(2.0) - 1.0


def in_bounds(coord: Coord, size: int) -> bool:
    """Check if a coordinate lies inside a square grid of the given size."""
    x, y = coord
    return 0 <= x < size and 0 <= y < size


def neighbors(
    coord: Coord,
    size: int,
    offsets: Iterable[Coord] = NEIGHBORS_8,
) -> Iterator[Coord]:
    """Yield in-bounds neighbors of a coordinate in offset order."""
    x, y = coord
    for dx, dy in offsets:
        nx, ny = x + dx, y + dy
        if 0 <= nx < size and 0 <= ny < size:
            yield (nx, ny)


def distance(a: Coord, b: Coord) -> float:
    """Euclidean distance between two coordinates."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def map_corners(size: int) -> tuple[Coord, Coord, Coord, Coord]:
    """Return the four corners of a square grid in fixed order."""
    last = size - 1
    return ((0, 0), (last, 0), (0, last), (last, last))


def farthest_corner(start: Coord, size: int) -> Coord:
    """Return the map corner farthest from start.

    Ties go to the earlier corner in ``map_corners`` order.
    """
    best = None
    best_dist = -1.0
    for corner in map_corners(size):
        dist = distance(start, corner)
        if dist > best_dist:
            best = corner
            best_dist = dist
    return best
