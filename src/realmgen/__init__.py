"""Incremental procedural map generation.

Streams a noise height field, carves rivers with A*, and partitions the
remaining land into territories, each in small resumable steps.
"""

from .bisection import BisectionStep, SpaceBisectionTiler
from .cell_types import CellKind, classify_height, classify_heights
from .config import (
    BisectionConfig,
    ClassificationConfig,
    HeightConfig,
    MapConfig,
    RegionConfig,
    RiverConfig,
    load_config,
)
from .exceptions import (
    InvalidBatchSizeError,
    InvalidGridSizeError,
    NotSeededError,
    RealmGenError,
)
from .heights import HeightSampler
from .noise import FractalNoise
from .regions import (
    GrowthRegion,
    RegionGrowthTiler,
    TilerState,
    extract_border,
    label_grid,
    region_masks,
)
from .rivers import MoveMode, River, RiverPlanner, find_path, make_cost_field
from .session import CellInfo, MapSession, PartitionCounts, Phase, SessionStep
from .types import Coord, HeightSample, farthest_corner, map_corners
from .validation import ValidationResult, validate_session

__all__ = [
    # Types
    "Coord",
    "HeightSample",
    "farthest_corner",
    "map_corners",
    # Config
    "BisectionConfig",
    "ClassificationConfig",
    "HeightConfig",
    "MapConfig",
    "RegionConfig",
    "RiverConfig",
    "load_config",
    # Heights
    "FractalNoise",
    "HeightSampler",
    "CellKind",
    "classify_height",
    "classify_heights",
    # Regions
    "GrowthRegion",
    "RegionGrowthTiler",
    "TilerState",
    "extract_border",
    "label_grid",
    "region_masks",
    # Bisection
    "BisectionStep",
    "SpaceBisectionTiler",
    # Rivers
    "MoveMode",
    "River",
    "RiverPlanner",
    "find_path",
    "make_cost_field",
    # Session
    "CellInfo",
    "MapSession",
    "PartitionCounts",
    "Phase",
    "SessionStep",
    # Validation
    "ValidationResult",
    "validate_session",
    # Exceptions
    "RealmGenError",
    "InvalidBatchSizeError",
    "InvalidGridSizeError",
    "NotSeededError",
]
