"""Map generation session: sequences the generators one bounded step at a time."""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import structlog
from numpy.typing import NDArray

from .bisection import BisectionStep, SpaceBisectionTiler
from .cell_types import CellKind, classify_height
from .config import MapConfig
from .exceptions import InvalidGridSizeError
from .heights import HeightSampler
from .regions import RegionGrowthTiler, TilerState
from .rivers import River, RiverPlanner, make_cost_field
from .types import Coord, HeightSample, in_bounds

logger = structlog.get_logger()


class Phase(str, Enum):
    """Stages of map generation, in order."""

    HEIGHTS = "heights"
    RIVERS = "rivers"
    REGIONS = "regions"
    DONE = "done"


@dataclass
class SessionStep:
    """Output of one session step, handed to consumers."""

    phase: Phase
    samples: list[HeightSample] = field(default_factory=list)
    river: River | None = None
    region_deltas: list[list[Coord]] = field(default_factory=list)
    bisection: BisectionStep | None = None


@dataclass(frozen=True)
class CellInfo:
    """What is known about a single cell."""

    coord: Coord
    kind: CellKind
    height: float
    region: int | None
    is_river: bool


@dataclass(frozen=True)
class PartitionCounts:
    """Where the habitable cells currently are."""

    open: int
    regions: int
    rivers: int
    habitable: int

    @property
    def total(self) -> int:
        return self.open + self.regions + self.rivers

    @property
    def balanced(self) -> bool:
        """True when no habitable cell is missing or counted twice."""
        return self.total == self.habitable


class MapSession:
    """Owns all per-map state and steps the generators in order.

    One RNG is created from the configured seed and threaded through every
    randomized call, so a seed always reproduces the same map as long as
    the session is stepped to completion.
    """

    def __init__(self, config: MapConfig | None = None):
        config = config or MapConfig()
        if config.size <= 0:
            raise InvalidGridSizeError(f"Grid size must be positive, got {config.size}")

        self.config = config
        self.size = config.size
        self.rng = np.random.default_rng(config.seed)

        heights = config.heights
        self.sampler = HeightSampler(
            self.size,
            heights.batch_size,
            config.seed,
            octaves=heights.octaves,
            gain=heights.gain,
            lacunarity=heights.lacunarity,
            frequency=heights.frequency,
        )

        self.heights: NDArray[np.float64] = np.full(
            (self.size, self.size), np.nan, dtype=np.float64
        )
        self.kinds: NDArray[np.uint8] = np.full(
            (self.size, self.size), CellKind.DEEP_WATER, dtype=np.uint8
        )

        self.open_set: set[Coord] = set()
        self.ocean: set[Coord] = set()
        self.habitable_count = 0

        self.cost = make_cost_field(self.size, config.rivers.cost_bound, self.rng)
        self.planner = RiverPlanner(self.size, self.cost)
        self.rivers: list[River] = []
        self.river_target = 0
        self._rivers_attempted = 0
        self._river_cells: set[Coord] = set()

        self.growth: RegionGrowthTiler | None = None
        self.bisection: SpaceBisectionTiler | None = None
        if config.tiler == "growth":
            self.growth = RegionGrowthTiler(self.size, config.regions.desired_points)
        else:
            self.bisection = SpaceBisectionTiler(
                config.bisection.desired_tile_size,
                config.bisection.random_pick_threshold,
            )
        self._grid_seeded = False

        self.phase = Phase.HEIGHTS
        self.steps_taken = 0

    @property
    def is_done(self) -> bool:
        return self.phase is Phase.DONE

    @property
    def obstacles(self) -> set[Coord]:
        """Cells carved out of land by rivers."""
        return self.planner.obstacles

    def step(self) -> SessionStep:
        """Do one bounded unit of work for the current phase.

        Stepping a finished session is a no-op.
        """
        if self.phase is Phase.DONE:
            return SessionStep(phase=Phase.DONE)

        self.steps_taken += 1
        if self.phase is Phase.HEIGHTS:
            return self._step_heights()
        if self.phase is Phase.RIVERS:
            return self._step_rivers()
        return self._step_regions()

    def run(self, max_steps: int | None = None) -> int:
        """Step until done or until max_steps steps were taken.

        Returns:
            Number of steps taken by this call.
        """
        taken = 0
        while not self.is_done:
            if max_steps is not None and taken >= max_steps:
                break
            self.step()
            taken += 1
        return taken

    def territories(self) -> list[frozenset[Coord]]:
        """Snapshot of the region (or tile) cell sets produced so far."""
        if self.growth is not None:
            return self.growth.finished_regions()
        return list(self.bisection.tiles)

    def lookup(self, coord: Coord) -> CellInfo | None:
        """Describe a cell, or None if it is off the grid or not sampled yet."""
        if not in_bounds(coord, self.size):
            return None
        x, y = coord
        height = float(self.heights[y, x])
        if np.isnan(height):
            return None

        if self.growth is not None:
            region = self.growth.region_of(coord)
        else:
            region = self.bisection.tile_of(coord)

        return CellInfo(
            coord=coord,
            kind=CellKind(int(self.kinds[y, x])),
            height=height,
            region=region,
            is_river=coord in self._river_cells,
        )

    def partition_counts(self) -> PartitionCounts:
        """Count habitable cells by where they currently are."""
        if self.growth is not None:
            in_regions = sum(len(region.cells) for region in self.growth.regions)
        else:
            in_regions = self.bisection.assigned_count
        return PartitionCounts(
            open=len(self.open_set),
            regions=in_regions,
            rivers=len(self.planner.obstacles),
            habitable=self.habitable_count,
        )

    def _step_heights(self) -> SessionStep:
        samples = self.sampler.next_batch()
        classification = self.config.classification
        for x, y, height in samples:
            self.heights[y, x] = height
            self.kinds[y, x] = classify_height(height, classification)

        if self.sampler.is_done:
            self._finish_heights()

        return SessionStep(phase=Phase.HEIGHTS, samples=samples)

    def _finish_heights(self) -> None:
        for y in range(self.size):
            for x in range(self.size):
                if CellKind(int(self.kinds[y, x])).is_water:
                    self.ocean.add((x, y))
                else:
                    self.open_set.add((x, y))
        self.habitable_count = len(self.open_set)

        rivers = self.config.rivers
        low = max(0, rivers.river_count_min)
        high = max(low, rivers.river_count_max)
        self.river_target = int(self.rng.integers(low, high + 1))

        logger.info(
            "heights_complete",
            land=len(self.open_set),
            water=len(self.ocean),
            river_target=self.river_target,
        )
        self.phase = Phase.RIVERS

    def _step_rivers(self) -> SessionStep:
        # Rivers rise inland, never on the map edge
        last = self.size - 1
        candidates = sorted(
            (x, y) for x, y in self.open_set if 0 < x < last and 0 < y < last
        )
        if self._rivers_attempted >= self.river_target or not candidates:
            self.phase = Phase.REGIONS
            return SessionStep(phase=Phase.RIVERS)

        self._rivers_attempted += 1
        start = candidates[int(self.rng.integers(len(candidates)))]

        river = self.planner.carve(start, self.open_set, self.ocean, self.kinds)
        if river is not None:
            self.rivers.append(river)
            self._river_cells.update(river.cells)
            logger.info(
                "river_carved",
                index=len(self.rivers) - 1,
                start=river.start,
                goal=river.goal,
                length=len(river.path),
                cells=len(river.cells),
            )
        else:
            logger.info("river_skipped", start=start)

        if self._rivers_attempted >= self.river_target:
            self.phase = Phase.REGIONS

        return SessionStep(phase=Phase.RIVERS, river=river)

    def _step_regions(self) -> SessionStep:
        if self.growth is not None:
            return self._step_growth()
        return self._step_bisection()

    def _step_growth(self) -> SessionStep:
        tiler = self.growth
        regions = self.config.regions

        if tiler.state is TilerState.UNINITIALIZED:
            tiler.load(self.open_set)

        if tiler.state is TilerState.SEEDING:
            first_region = len(tiler.regions)
            # Leftover islands are always re-seeded at random
            if regions.seeding == "grid" and not self._grid_seeded:
                self._grid_seeded = True
                seeds = tiler.seed_grid(
                    self.rng, regions.grid_density, regions.grid_intensity
                )
            else:
                seeds = tiler.seed_random(self.rng)

            deltas: list[list[Coord]] = [[] for _ in tiler.regions]
            for offset, seed in enumerate(seeds):
                deltas[first_region + offset].append(seed)

            logger.info(
                "regions_seeded",
                seeds=len(seeds),
                regions=len(tiler.regions),
                open=len(self.open_set),
            )
        else:
            deltas = tiler.step_n(regions.steps_per_call)

        if tiler.is_done:
            if regions.continue_leftovers and tiler.continue_with_open_set():
                logger.info(
                    "regions_continued",
                    open=len(self.open_set),
                    desired_points=tiler.desired_points,
                )
            else:
                self._finish()

        return SessionStep(phase=Phase.REGIONS, region_deltas=deltas)

    def _step_bisection(self) -> SessionStep:
        tiler = self.bisection
        if not tiler.loaded:
            tiler.load(self.open_set)

        result = tiler.step(self.rng, self.config.bisection.steps_per_call)
        if tiler.all_done:
            self._finish()

        return SessionStep(phase=Phase.REGIONS, bisection=result)

    def _finish(self) -> None:
        self.phase = Phase.DONE
        logger.info(
            "session_done",
            steps=self.steps_taken,
            territories=len(self.territories()),
            rivers=len(self.rivers),
            leftover_open=len(self.open_set),
        )
