"""Map generation configuration models and TOML loading."""

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class HeightConfig(BaseModel):
    """Height sampling parameters."""

    batch_size: int = Field(default=1024, gt=0, description="Cells sampled per step")
    octaves: int = Field(default=5, description="Number of fBm octaves")
    gain: float = Field(default=0.6, description="Amplitude multiplier per octave")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    frequency: float = Field(default=1.0, description="Base noise frequency")


class ClassificationConfig(BaseModel):
    """Height thresholds for cell kinds."""

    water_level: float = Field(
        default=0.0, description="Heights below this are water"
    )
    deep_water_depth: float = Field(
        default=0.15, description="Depth below water level for deep water"
    )
    sand_band: float = Field(
        default=0.04, description="Height band above water level for sand"
    )
    forest_level: float = Field(
        default=0.22, description="Heights above this are forest"
    )
    mountain_level: float = Field(
        default=0.42, description="Heights above this are mountain"
    )


class RegionConfig(BaseModel):
    """Region growth tiler parameters."""

    seeding: Literal["random", "grid"] = Field(
        default="random", description="Seed placement strategy"
    )
    desired_points: int = Field(default=12, description="Seeds for random placement")
    grid_density: int = Field(default=16, description="Lattice spacing for grid seeding")
    grid_intensity: float = Field(
        default=4.0, description="Max random offset applied to lattice seeds"
    )
    steps_per_call: int = Field(default=1, gt=0, description="Growth passes per step")
    continue_leftovers: bool = Field(
        default=True, description="Re-seed open cells left on unreached islands"
    )


class BisectionConfig(BaseModel):
    """Space bisection tiler parameters."""

    desired_tile_size: int = Field(default=64, description="Max cells per tile")
    steps_per_call: int = Field(
        default=256, gt=0, description="Front expansions per step"
    )
    random_pick_threshold: float = Field(
        default=0.5,
        description="Pool fraction above which starts are rejection sampled",
    )


class RiverConfig(BaseModel):
    """River carving parameters."""

    river_count_min: int = Field(default=1, description="Minimum number of rivers")
    river_count_max: int = Field(default=3, description="Maximum number of rivers")
    cost_bound: int = Field(
        default=8, description="Upper bound of random per-cell traversal cost"
    )


class MapConfig(BaseModel):
    """Complete map generation configuration."""

    seed: int = Field(default=42, description="Random seed for reproducibility")
    size: int = Field(default=128, description="Grid width and height in cells")
    tiler: Literal["growth", "bisection"] = Field(
        default="growth", description="Partitioner used for territories"
    )

    heights: HeightConfig = Field(default_factory=HeightConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    regions: RegionConfig = Field(default_factory=RegionConfig)
    bisection: BisectionConfig = Field(default_factory=BisectionConfig)
    rivers: RiverConfig = Field(default_factory=RiverConfig)


def load_config(config_path: Path) -> MapConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed MapConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return MapConfig.model_validate(data)
