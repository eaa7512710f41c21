"""Tests for river routing and carving."""

import numpy as np

from realmgen.cell_types import CellKind
from realmgen.rivers import (
    MoveMode,
    RiverPlanner,
    clip_to_open,
    find_path,
    make_cost_field,
    thicken_path,
)
from realmgen.types import NEIGHBORS_4, NEIGHBORS_8


def _uniform(size: int) -> np.ndarray:
    return np.ones((size, size), dtype=np.int32)


def _path_cost(path, cost) -> int:
    return sum(int(cost[y, x]) for x, y in path[1:])


class TestFindPath:
    """Tests for weighted A* search."""

    def test_straight_line_length(self) -> None:
        """Uniform costs give a shortest lateral path."""
        path = find_path((0, 0), (5, 5), _uniform(6), set())

        assert path[0] == (0, 0)
        assert path[-1] == (5, 5)
        assert len(path) == 11

    def test_lateral_moves_only(self) -> None:
        """Consecutive cells differ by exactly one axis step."""
        path = find_path((1, 4), (6, 0), _uniform(8), set())

        for (ax, ay), (bx, by) in zip(path, path[1:]):
            assert abs(ax - bx) + abs(ay - by) == 1

    def test_omni_takes_diagonals(self) -> None:
        """Eight-way moves cut the corner."""
        path = find_path((0, 0), (5, 5), _uniform(6), set(), mode=MoveMode.OMNI)
        assert path == [(i, i) for i in range(6)]

    def test_prefers_cheap_corridor(self) -> None:
        """The path follows the cheap row and column around expensive ground.

            1 1 1 1 1
            9 9 9 9 1
            9 9 9 9 1
            9 9 9 9 1
            9 9 9 9 1
        """
        cost = np.full((5, 5), 9, dtype=np.int32)
        cost[0, :] = 1
        cost[:, 4] = 1

        path = find_path((0, 0), (4, 4), cost, set())

        assert path == [
            (0, 0), (1, 0), (2, 0), (3, 0), (4, 0),
            (4, 1), (4, 2), (4, 3), (4, 4),
        ]
        assert _path_cost(path, cost) == 8

    def test_path_is_cheapest(self) -> None:
        """A* cost matches an exhaustive Dijkstra over the grid."""
        cost = np.random.default_rng(9).integers(1, 6, size=(7, 7), dtype=np.int32)
        path = find_path((0, 6), (6, 0), cost, set())

        # Plain Dijkstra by repeated relaxation
        best = np.full((7, 7), np.iinfo(np.int64).max, dtype=np.int64)
        best[6, 0] = 0
        changed = True
        while changed:
            changed = False
            for y in range(7):
                for x in range(7):
                    for dx, dy in NEIGHBORS_4:
                        nx, ny = x + dx, y + dy
                        if 0 <= nx < 7 and 0 <= ny < 7 and best[y, x] < best[ny, nx]:
                            candidate = best[y, x] + cost[ny, nx]
                            if candidate < best[ny, nx]:
                                best[ny, nx] = candidate
                                changed = True

        assert _path_cost(path, cost) == best[0, 6]

    def test_routes_around_wall(self) -> None:
        """Obstacles force a detour through the gap."""
        wall = {(2, y) for y in range(4)}
        path = find_path((0, 0), (4, 0), _uniform(5), wall)

        assert (2, 4) in path
        assert not wall & set(path)
        assert len(path) == 13

    def test_unreachable_returns_none(self) -> None:
        """A full wall means no path."""
        wall = {(2, y) for y in range(5)}
        assert find_path((0, 0), (4, 0), _uniform(5), wall) is None

    def test_blocked_endpoints(self) -> None:
        """Start or goal inside obstacles means no path."""
        assert find_path((0, 0), (4, 4), _uniform(5), {(4, 4)}) is None
        assert find_path((0, 0), (4, 4), _uniform(5), {(0, 0)}) is None

    def test_out_of_bounds(self) -> None:
        """Endpoints off the grid mean no path."""
        assert find_path((0, 0), (5, 0), _uniform(5), set()) is None
        assert find_path((-1, 0), (2, 2), _uniform(5), set()) is None

    def test_start_is_goal(self) -> None:
        """A path to itself is a single cell."""
        assert find_path((3, 3), (3, 3), _uniform(5), set()) == [(3, 3)]

    def test_deterministic(self) -> None:
        """Equal-cost ties resolve the same way every time."""
        cost = _uniform(12)
        first = find_path((1, 1), (10, 9), cost, set())
        assert all(find_path((1, 1), (10, 9), cost, set()) == first for _ in range(3))

    def test_move_mode_offsets(self) -> None:
        """Modes expose their move sets."""
        assert MoveMode.LATERAL.offsets == NEIGHBORS_4
        assert MoveMode.OMNI.offsets == NEIGHBORS_8


class TestHelpers:
    """Tests for cost fields and path post-processing."""

    def test_cost_field_bounds(self, rng) -> None:
        """Costs lie in [1, bound]."""
        cost = make_cost_field(16, 8, rng)

        assert cost.shape == (16, 16)
        assert cost.dtype == np.int32
        assert cost.min() >= 1
        assert cost.max() <= 8

    def test_cost_field_low_bound(self, rng) -> None:
        """A bound below one yields uniform unit costs."""
        assert (make_cost_field(4, 0, rng) == 1).all()

    def test_cost_field_deterministic(self) -> None:
        """Same RNG seed gives the same field."""
        a = make_cost_field(10, 5, np.random.default_rng(3))
        b = make_cost_field(10, 5, np.random.default_rng(3))
        np.testing.assert_array_equal(a, b)

    def test_clip_to_open(self) -> None:
        """Clipping keeps the prefix up to the first closed cell."""
        path = [(0, 0), (1, 0), (2, 0), (3, 0)]
        assert clip_to_open(path, {(0, 0), (1, 0), (3, 0)}) == [(0, 0), (1, 0)]
        assert clip_to_open(path, {(1, 0)}) == []
        assert clip_to_open(path, set(path)) == path

    def test_thicken_at_corner(self) -> None:
        """Thickening stays on the grid."""
        assert thicken_path([(0, 0)], 5) == {(0, 0), (1, 0), (0, 1), (1, 1)}

    def test_thicken_interior(self) -> None:
        """An interior cell thickens to its 3x3 block."""
        thick = thicken_path([(2, 2)], 5)
        assert thick == {(x, y) for y in range(1, 4) for x in range(1, 4)}


class TestRiverPlanner:
    """Tests for carving rivers into a map.

    The map is 10x10 with land on x < 7 and ocean on x >= 7.
    """

    SIZE = 10

    def _world(self):
        land = {(x, y) for y in range(self.SIZE) for x in range(7)}
        ocean = {(x, y) for y in range(self.SIZE) for x in range(7, self.SIZE)}
        kinds = np.full((self.SIZE, self.SIZE), CellKind.GRASS, dtype=np.uint8)
        kinds[:, 7:] = CellKind.SHALLOW_WATER
        planner = RiverPlanner(self.SIZE, _uniform(self.SIZE))
        return planner, land, ocean, kinds

    def test_plan_targets_farthest_corner(self) -> None:
        """plan() routes to the farthest corner."""
        planner, _, _, _ = self._world()
        path = planner.plan((2, 5))
        assert path[0] == (2, 5)
        assert path[-1] == (9, 0)

    def test_carve_stamps_river(self) -> None:
        """Carving removes land from the open set and marks it RIVER."""
        planner, land, ocean, kinds = self._world()
        open_set = set(land)

        river = planner.carve((2, 5), open_set, ocean, kinds)

        assert river is not None
        assert river.start == (2, 5)
        assert river.goal == (9, 0)
        assert river.path[0] == (2, 5)
        assert all(cell in land for cell in river.path)
        assert set(river.path) <= river.cells
        assert river.cells <= land | ocean
        assert not river.cells & open_set
        assert open_set | (river.cells - ocean) == land
        assert planner.obstacles == set(river.cells - ocean)
        for x, y in river.cells:
            assert kinds[y, x] == CellKind.RIVER

    def test_path_stops_at_water(self) -> None:
        """The kept centerline ends at the last land cell before the sea."""
        planner, land, ocean, kinds = self._world()
        river = planner.carve((2, 5), set(land), ocean, kinds)

        last_x, _ = river.path[-1]
        assert last_x == 6

    def test_second_river_avoids_first(self) -> None:
        """Rivers only share cells that were ocean."""
        planner, land, ocean, kinds = self._world()
        open_set = set(land)

        first = planner.carve((2, 5), open_set, ocean, kinds)
        second = planner.carve((0, 9), open_set, ocean, kinds)

        assert second is not None
        assert (first.cells & second.cells) <= ocean
        assert not set(second.path) & (first.cells - ocean)
        assert open_set | planner.obstacles == land

    def test_carve_from_ocean_skipped(self) -> None:
        """A start that is not open land carves nothing."""
        planner, land, ocean, kinds = self._world()
        open_set = set(land)
        before = kinds.copy()

        assert planner.carve((8, 5), open_set, ocean, kinds) is None
        assert open_set == land
        assert not planner.obstacles
        np.testing.assert_array_equal(kinds, before)

    def test_blocked_river_skipped(self) -> None:
        """A start walled in by obstacles carves nothing."""
        planner, land, ocean, kinds = self._world()
        planner.obstacles.update({(x, 2) for x in range(self.SIZE)})
        open_set = set(land)

        # Start (2, 5) wants corner (9, 0), across the wall
        assert planner.carve((2, 5), open_set, ocean, kinds) is None
        assert open_set == land
