"""Cell kinds derived from sampled heights."""

from enum import IntEnum

import numpy as np
from numpy.typing import NDArray

from .config import ClassificationConfig


class CellKind(IntEnum):
    """Map cell kinds, stored as uint8 in the kind grid."""

    DEEP_WATER = 0
    SHALLOW_WATER = 1
    RIVER = 2
    SAND = 3
    GRASS = 4
    FOREST = 5
    MOUNTAIN = 6

    @property
    def is_water(self) -> bool:
        """Whether this kind counts as water."""
        return self in _WATER_KINDS

    @property
    def color(self) -> tuple[int, int, int]:
        """RGB color used by visual consumers."""
        return _COLORS[self]


_WATER_KINDS = frozenset({
    CellKind.DEEP_WATER,
    CellKind.SHALLOW_WATER,
    CellKind.RIVER,
})

_COLORS: dict[CellKind, tuple[int, int, int]] = {
    CellKind.DEEP_WATER: (24, 52, 110),
    CellKind.SHALLOW_WATER: (48, 96, 168),
    CellKind.RIVER: (64, 128, 200),
    CellKind.SAND: (210, 196, 140),
    CellKind.GRASS: (96, 160, 72),
    CellKind.FOREST: (48, 112, 56),
    CellKind.MOUNTAIN: (128, 120, 112),
}


def classify_height(height: float, config: ClassificationConfig) -> CellKind:
    """Classify a single height sample."""
    water_level = config.water_level
    if height < water_level - config.deep_water_depth:
        return CellKind.DEEP_WATER
    if height < water_level:
        return CellKind.SHALLOW_WATER
    if height < water_level + config.sand_band:
        return CellKind.SAND
    if height >= config.mountain_level:
        return CellKind.MOUNTAIN
    if height >= config.forest_level:
        return CellKind.FOREST
    return CellKind.GRASS


def classify_heights(
    heights: NDArray[np.float64],
    config: ClassificationConfig,
) -> NDArray[np.uint8]:
    """Classify a height array into cell kinds (vectorized).

    Args:
        heights: Height field of any shape.
        config: Classification thresholds.

    Returns:
        Array of CellKind values as uint8, same shape as ``heights``.
    """
    water_level = config.water_level
    kinds = np.full(heights.shape, CellKind.GRASS, dtype=np.uint8)

    # Later assignments take precedence, mirroring classify_height order
    kinds[heights >= config.forest_level] = CellKind.FOREST
    kinds[heights >= config.mountain_level] = CellKind.MOUNTAIN
    kinds[heights < water_level + config.sand_band] = CellKind.SAND
    kinds[heights < water_level] = CellKind.SHALLOW_WATER
    kinds[heights < water_level - config.deep_water_depth] = CellKind.DEEP_WATER

    return kinds
