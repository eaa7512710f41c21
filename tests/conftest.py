"""Shared test fixtures for map generation tests."""

from typing import Callable

import numpy as np
import pytest

from realmgen.config import HeightConfig, MapConfig, RegionConfig, RiverConfig
from realmgen.types import Coord


@pytest.fixture
def rng() -> np.random.Generator:
    """Deterministic random generator."""
    return np.random.default_rng(1234)


@pytest.fixture
def make_open() -> Callable[[int], set[Coord]]:
    """Factory for a fully open square grid of cells."""

    def _make(size: int) -> set[Coord]:
        return {(x, y) for y in range(size) for x in range(size)}

    return _make


@pytest.fixture
def two_islands() -> set[Coord]:
    """Two disconnected 3x3 islands on a 9x9 grid.

        X X X . . . . . .
        X X X . . . . . .
        X X X . . . . . .
        . . . . . . . . .
        . . . . . . . . .
        . . . . . . . . .
        . . . . . . X X X
        . . . . . . X X X
        . . . . . . X X X
    """
    cells = {(x, y) for y in range(3) for x in range(3)}
    cells |= {(x, y) for y in range(6, 9) for x in range(6, 9)}
    return cells


@pytest.fixture
def small_config() -> MapConfig:
    """Small map that generates quickly."""
    return MapConfig(
        seed=7,
        size=24,
        heights=HeightConfig(batch_size=100),
        regions=RegionConfig(desired_points=4),
        rivers=RiverConfig(river_count_min=1, river_count_max=2, cost_bound=4),
    )
