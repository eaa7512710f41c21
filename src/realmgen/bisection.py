"""Space bisection tiler: recursive two-way flood fill partitioning.

Repeatedly splits a pool of cells in two by growing two fronts from
random starts until both stall. Halves that are still larger than the
target tile size are queued as new pools. Recursion is replaced by an
explicit queue of pending pools.
"""

from collections import deque
from dataclasses import dataclass, field

import numpy as np

from .exceptions import NotSeededError
from .types import NEIGHBORS_8, Coord

# Bounding-box draws tried before falling back to a sorted-pool draw
_MAX_REJECTION_TRIES = 32


@dataclass
class BisectionFront:
    """One side of a two-way split."""

    cells: set[Coord] = field(default_factory=set)
    frontier: deque[Coord] = field(default_factory=deque)

    def start(self, cell: Coord) -> None:
        self.cells.add(cell)
        self.frontier.append(cell)


@dataclass
class BisectionStep:
    """Cells claimed during one call, plus tiles finalized by it."""

    claimed: tuple[list[Coord], list[Coord]] = field(
        default_factory=lambda: ([], [])
    )
    finished: list[frozenset[Coord]] = field(default_factory=list)


class SpaceBisectionTiler:
    """Splits a pool into tiles no larger than ``desired_tile_size``.

    The first pool is shared with the caller and mutated in place.
    """

    def __init__(self, desired_tile_size: int, random_pick_threshold: float = 0.5):
        self.desired_tile_size = max(1, desired_tile_size)
        self.random_pick_threshold = random_pick_threshold

        self.pool: set[Coord] = set()
        self.tiles: list[frozenset[Coord]] = []
        # Every set produced by a split, oversized ones included
        self.history: list[frozenset[Coord]] = []
        self.should_reset_animation = False

        self._loaded = False
        self._root_pool: set[Coord] | None = None
        self._capacity = 0
        self._bounds = (0, 0, 0, 0)
        self._pending: deque[set[Coord]] = deque()
        self._fronts: tuple[BisectionFront, BisectionFront] | None = None
        self._turn = 0
        self._owner: dict[Coord, int] = {}

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def pending(self) -> int:
        """Number of oversized pools waiting to be split."""
        return len(self._pending)

    @property
    def all_done(self) -> bool:
        """True once every cell sits in a tile no larger than the target."""
        return (
            self._loaded
            and not self.pool
            and self._fronts is None
            and not self._pending
        )

    @property
    def assigned_count(self) -> int:
        """Cells taken out of the root pool so far."""
        count = sum(len(tile) for tile in self.tiles)
        count += sum(len(pool) for pool in self._pending)
        if self._fronts is not None:
            count += sum(len(front.cells) for front in self._fronts)
        if self.pool is not self._root_pool:
            count += len(self.pool)
        return count

    def load(self, pool: set[Coord]) -> None:
        """Attach the root pool to split."""
        self._root_pool = pool
        self._pending.clear()
        self._fronts = None
        self.tiles = []
        self.history = []
        self._owner = {}
        self._load_pool(pool)
        self._loaded = True

    def tile_of(self, coord: Coord) -> int | None:
        """Index of the finished tile owning a cell, or None."""
        return self._owner.get(coord)

    def step(self, rng: np.random.Generator, n: int) -> BisectionStep:
        """Advance the split by up to n front expansions.

        Args:
            rng: Random number generator used to pick front starts.
            n: Maximum number of front expansions.

        Returns:
            BisectionStep with claimed cells per front and newly finished
            tiles.

        Raises:
            NotSeededError: If no pool was loaded.
        """
        if not self._loaded:
            raise NotSeededError("Space bisection stepped before loading a pool")

        result = BisectionStep()
        budget = n

        while budget > 0:
            if self._fronts is None:
                if not self.pool:
                    if not self._pending:
                        break
                    self._load_pool(self._pending.popleft())
                for side, cell in enumerate(self._start_round(rng)):
                    result.claimed[side].append(cell)
                continue

            side = self._turn
            self._turn = 1 - self._turn
            budget -= 1

            cell = self._expand(self._fronts[side])
            if cell is not None:
                result.claimed[side].append(cell)

            if not self._fronts[0].frontier and not self._fronts[1].frontier:
                result.finished.extend(self._end_round())

        return result

    def _load_pool(self, pool: set[Coord]) -> None:
        self.pool = pool
        self._capacity = len(pool)
        if pool:
            xs = [x for x, _ in pool]
            ys = [y for _, y in pool]
            self._bounds = (min(xs), min(ys), max(xs), max(ys))
        self.should_reset_animation = True

    def _pick(self, rng: np.random.Generator) -> Coord:
        cell = None
        if len(self.pool) > self.random_pick_threshold * self._capacity:
            # Capped: a sparse pool in a wide bounding box rarely gets hit
            min_x, min_y, max_x, max_y = self._bounds
            for _ in range(_MAX_REJECTION_TRIES):
                candidate = (
                    int(rng.integers(min_x, max_x + 1)),
                    int(rng.integers(min_y, max_y + 1)),
                )
                if candidate in self.pool:
                    cell = candidate
                    break

        if cell is None:
            ordered = sorted(self.pool)
            cell = ordered[int(rng.integers(len(ordered)))]

        self.pool.remove(cell)
        return cell

    def _start_round(self, rng: np.random.Generator) -> list[Coord]:
        fronts = (BisectionFront(), BisectionFront())
        starts: list[Coord] = []
        for front in fronts:
            if not self.pool:
                break
            cell = self._pick(rng)
            front.start(cell)
            starts.append(cell)
        self._fronts = fronts
        self._turn = 0
        return starts

    def _expand(self, front: BisectionFront) -> Coord | None:
        """Claim one pool cell next to the oldest frontier cell that has one."""
        while front.frontier:
            cx, cy = front.frontier[0]
            for dx, dy in NEIGHBORS_8:
                neighbor = (cx + dx, cy + dy)
                if neighbor in self.pool:
                    self.pool.remove(neighbor)
                    front.cells.add(neighbor)
                    front.frontier.append(neighbor)
                    return neighbor
            front.frontier.popleft()
        return None

    def _end_round(self) -> list[frozenset[Coord]]:
        finished: list[frozenset[Coord]] = []
        for front in self._fronts:
            if not front.cells:
                continue
            tile = frozenset(front.cells)
            self.history.append(tile)
            if len(tile) > self.desired_tile_size:
                self._pending.append(set(front.cells))
            else:
                index = len(self.tiles)
                self.tiles.append(tile)
                for cell in tile:
                    self._owner[cell] = index
                finished.append(tile)
        self._fronts = None
        return finished
