"""Region growth tiler: multi-seed, radius-expanding flood fill.

Every seed grows a region outward one radius step at a time, all regions
in lockstep, until the open set is partitioned. Work is bounded per call
so a host loop can animate growth as it happens.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from .exceptions import InvalidGridSizeError, NotSeededError, RealmGenError
from .types import NEIGHBORS_8, RADIUS_TOLERANCE, Coord

# Absorbs float error so a diagonal step at radius 1 is within sqrt(2)
_RADIUS_EPSILON = 1e-9


class TilerState(str, Enum):
    """Lifecycle of a region growth pass."""

    UNINITIALIZED = "uninitialized"
    SEEDING = "seeding"
    GROWING = "growing"
    DONE = "done"


@dataclass
class GrowthRegion:
    """A region claimed by a single seed."""

    seed: Coord
    cells: set[Coord]
    # Ordered for iteration, mirrored in a set for membership
    frontier: list[Coord] = field(default_factory=list)
    frontier_set: set[Coord] = field(default_factory=set)
    # Radius of the last pass this region was stepped in
    radius: int = 0

    @property
    def growing(self) -> bool:
        """Whether the region can still claim cells."""
        return bool(self.frontier)


class RegionGrowthTiler:
    """Partitions an open set of cells into compact regions around seeds.

    The open set is shared with the caller and mutated in place: claimed
    cells are removed from it as they join a region.
    """

    def __init__(self, size: int, desired_points: int):
        if size <= 0:
            raise InvalidGridSizeError(f"Grid size must be positive, got {size}")

        self.size = size
        self.desired_points = desired_points
        self.state = TilerState.UNINITIALIZED
        self.open_set: set[Coord] = set()
        self.regions: list[GrowthRegion] = []
        self.current_radius = 1

        self._initial_desired = desired_points
        self._initial_open_count = 0
        self._owner: dict[Coord, int] = {}
        self._seeded_once = False

    @property
    def is_done(self) -> bool:
        return self.state is TilerState.DONE

    @property
    def seeds(self) -> list[Coord]:
        """Seed of each region, in region index order."""
        return [region.seed for region in self.regions]

    def load(self, open_set: set[Coord]) -> None:
        """Attach the open set to partition and get ready for seeding."""
        self.open_set = open_set
        self.regions = []
        self.current_radius = 1
        self._owner = {}
        self._initial_desired = self.desired_points
        self._initial_open_count = len(open_set)
        self._seeded_once = False
        self.state = TilerState.SEEDING

    def seed_random(self, rng: np.random.Generator) -> list[Coord]:
        """Place seeds uniformly at random on open cells.

        Draws ``desired_points`` distinct cells without replacement,
        clamped to the number of open cells.

        Args:
            rng: Random number generator.

        Returns:
            The seeds placed, in region index order. Empty if seeding was
            not expected in the current state.
        """
        if not self._ready_for_seeding():
            return []

        count = min(self.desired_points, len(self.open_set))
        seeds: list[Coord] = []
        if count > 0:
            # Sorted so the draw doesn't depend on set iteration order
            candidates = sorted(self.open_set)
            picks = rng.choice(len(candidates), size=count, replace=False)
            seeds = [candidates[int(i)] for i in picks]

        return self._plant(seeds)

    def seed_grid(
        self,
        rng: np.random.Generator,
        density: int,
        intensity: float = 0.0,
    ) -> list[Coord]:
        """Place seeds on a regular lattice intersected with the open set.

        Args:
            rng: Random number generator.
            density: Lattice spacing in cells.
            intensity: Max length of the random offset applied to each
                lattice point. Moved points that leave the open set fall
                back to the original lattice point.

        Returns:
            The seeds placed, in region index order.
        """
        if not self._ready_for_seeding():
            return []

        density = max(1, int(density))
        offset = density // 2
        taken: set[Coord] = set()
        seeds: list[Coord] = []

        for y in range(offset, self.size, density):
            for x in range(offset, self.size, density):
                point = (x, y)
                if point not in self.open_set:
                    continue

                if intensity > 0:
                    angle = rng.uniform(0.0, 2.0 * math.pi)
                    magnitude = rng.uniform(0.0, intensity)
                    moved = (
                        x + int(round(magnitude * math.cos(angle))),
                        y + int(round(magnitude * math.sin(angle))),
                    )
                    if moved in self.open_set and moved not in taken:
                        point = moved

                if point in taken:
                    continue
                taken.add(point)
                seeds.append(point)

        self.desired_points = len(seeds)
        if not self._seeded_once:
            self._initial_desired = len(seeds)
        return self._plant(seeds)

    def step(self) -> list[list[Coord]]:
        """Grow every region by one radius step.

        Returns:
            Newly claimed cells for each region, in region index order.

        Raises:
            NotSeededError: If no seeding has happened yet.
        """
        if self.state in (TilerState.UNINITIALIZED, TilerState.SEEDING):
            raise NotSeededError("Region growth stepped before seeding")

        deltas: list[list[Coord]] = [[] for _ in self.regions]
        if self.state is TilerState.DONE:
            return deltas

        limit = self.current_radius + RADIUS_TOLERANCE + _RADIUS_EPSILON
        open_set = self.open_set

        for index, region in enumerate(self.regions):
            if not region.frontier:
                continue

            region.radius = self.current_radius
            sx, sy = region.seed
            next_frontier: list[Coord] = []
            next_set: set[Coord] = set()
            claimed = deltas[index]

            for cell in region.frontier:
                cx, cy = cell
                deferred = False
                for dx, dy in NEIGHBORS_8:
                    neighbor = (cx + dx, cy + dy)
                    if neighbor not in open_set:
                        continue
                    if math.hypot(neighbor[0] - sx, neighbor[1] - sy) > limit:
                        # Reachable later, once the radius catches up
                        deferred = True
                        continue
                    open_set.remove(neighbor)
                    region.cells.add(neighbor)
                    self._owner[neighbor] = index
                    next_frontier.append(neighbor)
                    next_set.add(neighbor)
                    claimed.append(neighbor)

                if deferred and cell not in next_set:
                    next_frontier.append(cell)
                    next_set.add(cell)

            region.frontier = next_frontier
            region.frontier_set = next_set

        self.current_radius += 1

        if not any(region.growing for region in self.regions):
            self.state = TilerState.DONE

        return deltas

    def step_n(self, n: int) -> list[list[Coord]]:
        """Run up to n growth steps, merging the per-region deltas."""
        deltas: list[list[Coord]] = [[] for _ in self.regions]
        for _ in range(n):
            if self.state is TilerState.DONE:
                break
            for merged, claimed in zip(deltas, self.step()):
                merged.extend(claimed)
        return deltas

    def continue_with_open_set(self) -> bool:
        """Prepare to re-seed cells the finished pass could not reach.

        Finished regions are kept. The seed count is scaled by the fraction
        of the original open set that is still unclaimed.

        Returns:
            True if the tiler went back to seeding, False if there was
            nothing to continue with.
        """
        if self.state is not TilerState.DONE or not self.open_set:
            return False

        for region in self.regions:
            region.frontier.clear()
            region.frontier_set.clear()
        self.current_radius = 1

        remaining = len(self.open_set)
        fraction = remaining / max(1, self._initial_open_count)
        scaled = int(round(self._initial_desired * fraction))
        self.desired_points = min(max(scaled, 1), remaining)

        self.state = TilerState.SEEDING
        return True

    def region_of(self, coord: Coord) -> int | None:
        """Index of the region owning a cell, or None."""
        return self._owner.get(coord)

    def finished_regions(self) -> list[frozenset[Coord]]:
        """Snapshot of every region's cells."""
        return [frozenset(region.cells) for region in self.regions]

    def _ready_for_seeding(self) -> bool:
        if self.state is TilerState.UNINITIALIZED:
            raise RealmGenError("Load an open set before seeding")
        return self.state is TilerState.SEEDING

    def _plant(self, seeds: list[Coord]) -> list[Coord]:
        for seed in seeds:
            self.open_set.discard(seed)
            index = len(self.regions)
            self.regions.append(
                GrowthRegion(
                    seed=seed,
                    cells={seed},
                    frontier=[seed],
                    frontier_set={seed},
                )
            )
            self._owner[seed] = index

        self._seeded_once = True
        self.state = TilerState.GROWING if seeds else TilerState.DONE
        return list(seeds)


def extract_border(cells: set[Coord] | frozenset[Coord]) -> set[Coord]:
    """Cells of a region with at least one 8-neighbor outside the region."""
    border: set[Coord] = set()
    for x, y in cells:
        for dx, dy in NEIGHBORS_8:
            if (x + dx, y + dy) not in cells:
                border.add((x, y))
                break
    return border


def label_grid(
    regions: list[set[Coord]] | list[frozenset[Coord]],
    size: int,
) -> NDArray[np.int32]:
    """Rasterize regions to a grid of region indices (-1 = unassigned)."""
    labels = np.full((size, size), -1, dtype=np.int32)
    for index, cells in enumerate(regions):
        for x, y in cells:
            labels[y, x] = index
    return labels


def region_masks(
    regions: list[set[Coord]] | list[frozenset[Coord]],
    size: int,
) -> tuple[NDArray[np.bool_], NDArray[np.bool_]]:
    """Build filled and outline masks for a set of regions.

    A cell is on the outline when any cell of its 3x3 neighborhood
    belongs to a different region, is unassigned, or is off the grid.

    Args:
        regions: Region cell sets.
        size: Grid width and height.

    Returns:
        Tuple of (filled mask, outline mask), both indexed [y, x].
    """
    labels = label_grid(regions, size)
    filled = labels >= 0

    footprint = np.ones((3, 3), dtype=bool)
    low = ndimage.minimum_filter(labels, footprint=footprint, mode="constant", cval=-1)
    high = ndimage.maximum_filter(labels, footprint=footprint, mode="constant", cval=-1)
    outline = filled & ((low != labels) | (high != labels))

    return filled, outline
