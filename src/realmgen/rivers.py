"""River routing: weighted grid A* and river carving.

Rivers are routed from an interior start to the farthest map corner over a
randomized cost field, clipped where they leave open land, thickened, and
stamped into the cell kind grid.
"""

import heapq
import itertools
from dataclasses import dataclass
from enum import Enum

import numpy as np
import structlog
from numpy.typing import NDArray

from .cell_types import CellKind
from .types import NEIGHBORS_4, NEIGHBORS_8, Coord, farthest_corner, neighbors

logger = structlog.get_logger()


class MoveMode(str, Enum):
    """Move sets available to the pathfinder."""

    LATERAL = "lateral"
    OMNI = "omni"

    @property
    def offsets(self) -> tuple[Coord, ...]:
        return NEIGHBORS_4 if self is MoveMode.LATERAL else NEIGHBORS_8


def _manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def _chebyshev(a: Coord, b: Coord) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def make_cost_field(
    size: int,
    bound: int,
    rng: np.random.Generator,
) -> NDArray[np.int32]:
    """Random per-cell traversal costs in [1, bound].

    Args:
        size: Grid width and height.
        bound: Highest cost. Values below 1 are treated as 1.
        rng: Random number generator.

    Returns:
        Cost array indexed [y, x].
    """
    bound = max(1, bound)
    return rng.integers(1, bound + 1, size=(size, size), dtype=np.int32)


def find_path(
    start: Coord,
    goal: Coord,
    cost: NDArray[np.int32],
    obstacles: set[Coord],
    mode: MoveMode = MoveMode.LATERAL,
) -> list[Coord] | None:
    """Find the cheapest path between two cells with A*.

    Entering a cell costs that cell's entry in ``cost``. Ties between equal
    f-scores are broken by insertion order into the open heap.

    Args:
        start: Start cell.
        goal: Goal cell.
        cost: Positive traversal costs indexed [y, x].
        obstacles: Cells that may not be entered.
        mode: Move set. LATERAL allows the four axis-aligned moves only.

    Returns:
        Cells from start to goal inclusive, or None if the goal is
        unreachable.
    """
    height, width = cost.shape
    for x, y in (start, goal):
        if not (0 <= x < width and 0 <= y < height):
            return None
    if start in obstacles or goal in obstacles:
        return None
    if start == goal:
        return [start]

    heuristic = _manhattan if mode is MoveMode.LATERAL else _chebyshev
    offsets = mode.offsets
    counter = itertools.count()

    open_heap: list[tuple[int, int, Coord]] = [
        (heuristic(start, goal), next(counter), start)
    ]
    g_score: dict[Coord, int] = {start: 0}
    came_from: dict[Coord, Coord] = {}
    closed: set[Coord] = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            return _reconstruct(came_from, current)
        closed.add(current)

        cx, cy = current
        current_g = g_score[current]
        for dx, dy in offsets:
            nx, ny = cx + dx, cy + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            neighbor = (nx, ny)
            if neighbor in closed or neighbor in obstacles:
                continue

            tentative = current_g + int(cost[ny, nx])
            if tentative < g_score.get(neighbor, tentative + 1):
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                heapq.heappush(
                    open_heap,
                    (tentative + heuristic(neighbor, goal), next(counter), neighbor),
                )

    return None


def _reconstruct(came_from: dict[Coord, Coord], current: Coord) -> list[Coord]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def clip_to_open(path: list[Coord], open_set: set[Coord]) -> list[Coord]:
    """Keep the leading part of a path that stays on open cells."""
    clipped: list[Coord] = []
    for cell in path:
        if cell not in open_set:
            break
        clipped.append(cell)
    return clipped


def thicken_path(path: list[Coord], size: int) -> set[Coord]:
    """Path cells plus their in-bounds 8-neighbors."""
    thick: set[Coord] = set()
    for cell in path:
        thick.add(cell)
        thick.update(neighbors(cell, size))
    return thick


@dataclass(frozen=True)
class River:
    """A carved river."""

    start: Coord
    goal: Coord
    path: tuple[Coord, ...]  # clipped centerline, start first
    cells: frozenset[Coord]  # every cell stamped as river


class RiverPlanner:
    """Routes and carves rivers over a shared cost field and obstacle set."""

    def __init__(
        self,
        size: int,
        cost: NDArray[np.int32],
        obstacles: set[Coord] | None = None,
        mode: MoveMode = MoveMode.LATERAL,
    ):
        self.size = size
        self.cost = cost
        self.obstacles: set[Coord] = obstacles if obstacles is not None else set()
        self.mode = mode

    def plan(self, start: Coord) -> list[Coord] | None:
        """Route from start to the farthest map corner."""
        goal = farthest_corner(start, self.size)
        return find_path(start, goal, self.cost, self.obstacles, self.mode)

    def carve(
        self,
        start: Coord,
        open_set: set[Coord],
        ocean: set[Coord],
        kinds: NDArray[np.uint8],
    ) -> River | None:
        """Route a river and stamp it into the map.

        The route is cut at the first cell that is not open land. Every
        kept cell and its neighbors become river, limited to open land and
        ocean so earlier rivers and claimed regions are left alone. Land
        cells taken by the river become obstacles for later rivers.

        Args:
            start: River source, normally an open cell.
            open_set: Open land cells. Carved cells are removed from it.
            ocean: Cells that were water before any river was carved.
            kinds: Cell kind grid indexed [y, x]. Carved cells become RIVER.

        Returns:
            The carved River, or None if no route exists.
        """
        goal = farthest_corner(start, self.size)
        route = self.plan(start)
        if route is None:
            logger.debug("river_skipped", reason="no_path", start=start, goal=goal)
            return None

        path = clip_to_open(route, open_set)
        if not path:
            logger.debug("river_skipped", reason="start_not_open", start=start)
            return None

        cells = {
            cell
            for cell in thicken_path(path, self.size)
            if cell in open_set or cell in ocean
        }

        for cell in cells:
            x, y = cell
            open_set.discard(cell)
            kinds[y, x] = CellKind.RIVER
            if cell not in ocean:
                self.obstacles.add(cell)

        logger.debug(
            "river_routed",
            start=start,
            goal=goal,
            route_length=len(route),
            kept=len(path),
            cells=len(cells),
        )
        return River(start=start, goal=goal, path=tuple(path), cells=frozenset(cells))
