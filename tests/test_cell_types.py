"""Tests for cell kind classification."""

import numpy as np

from realmgen.cell_types import CellKind, classify_height, classify_heights
from realmgen.config import ClassificationConfig


class TestCellKind:
    """Tests for CellKind properties."""

    def test_water_kinds(self) -> None:
        """Ocean and river kinds are water."""
        assert CellKind.DEEP_WATER.is_water
        assert CellKind.SHALLOW_WATER.is_water
        assert CellKind.RIVER.is_water

    def test_land_kinds(self) -> None:
        """Land kinds are not water."""
        for kind in (CellKind.SAND, CellKind.GRASS, CellKind.FOREST, CellKind.MOUNTAIN):
            assert not kind.is_water

    def test_every_kind_has_color(self) -> None:
        """Each kind maps to an RGB triple."""
        for kind in CellKind:
            assert len(kind.color) == 3
            assert all(0 <= channel <= 255 for channel in kind.color)

    def test_values_fit_uint8(self) -> None:
        """Kinds fit the uint8 kind grid."""
        assert all(0 <= kind.value <= 255 for kind in CellKind)


class TestClassifyHeight:
    """Tests for height thresholds."""

    def test_thresholds(self) -> None:
        """Each band maps to its kind."""
        config = ClassificationConfig()
        assert classify_height(-0.5, config) == CellKind.DEEP_WATER
        assert classify_height(-0.05, config) == CellKind.SHALLOW_WATER
        assert classify_height(0.0, config) == CellKind.SAND
        assert classify_height(0.1, config) == CellKind.GRASS
        assert classify_height(0.3, config) == CellKind.FOREST
        assert classify_height(0.6, config) == CellKind.MOUNTAIN

    def test_water_level_shifts_coast(self) -> None:
        """Raising the water level floods low land."""
        config = ClassificationConfig(water_level=0.2)
        assert classify_height(0.1, config).is_water

    def test_vectorized_matches_scalar(self) -> None:
        """Array classification agrees with the scalar version."""
        config = ClassificationConfig()
        heights = np.linspace(-1.0, 1.0, 401)
        kinds = classify_heights(heights, config)

        assert kinds.dtype == np.uint8
        expected = [classify_height(float(h), config) for h in heights]
        assert [CellKind(int(k)) for k in kinds] == expected
