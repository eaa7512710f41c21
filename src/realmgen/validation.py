"""Post-generation validation of a map session."""

import logging

from .session import MapSession
from .types import RADIUS_TOLERANCE, distance

logger = logging.getLogger(__name__)

# Float slack for the radius bound check
_RADIUS_EPSILON = 1e-9


class ValidationResult:
    """Result of map validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_session(session: MapSession) -> ValidationResult:
    """Validate a session's generated state against its invariants.

    Can be called at any point; checks that need finished height sampling
    are skipped until then.

    Args:
        session: Session to inspect.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    if session.sampler.is_done:
        _check_partition(session, result)
        _check_exclusive_membership(session, result)
        _check_radius_bound(session, result)
        _check_river_paths(session, result)
        _check_river_overlap(session, result)
        _check_leftovers(session, result)

    if result.passed:
        logger.info("Map validation passed")
    else:
        logger.warning(f"Map validation failed with {len(result.errors)} errors")
        for error in result.errors:
            logger.error(f"  - {error}")

    for warning in result.warnings:
        logger.warning(f"  - {warning}")

    return result


def _check_partition(session: MapSession, result: ValidationResult) -> None:
    """Check that habitable cells are neither lost nor duplicated."""
    counts = session.partition_counts()
    if not counts.balanced:
        result.add_error(
            f"Partition mismatch: open {counts.open} + regions {counts.regions} "
            f"+ rivers {counts.rivers} != habitable {counts.habitable}"
        )


def _check_exclusive_membership(session: MapSession, result: ValidationResult) -> None:
    """Check no cell sits in two of open set, territories and river cells."""
    seen = set(session.open_set)
    duplicates = len(seen & session.obstacles)
    seen |= session.obstacles

    for territory in session.territories():
        duplicates += len(seen & territory)
        seen |= territory

    if duplicates > 0:
        result.add_error(f"{duplicates} cells belong to more than one set")


def _check_radius_bound(session: MapSession, result: ValidationResult) -> None:
    """Check every grown cell lies within its region's last radius."""
    tiler = session.growth
    if tiler is None:
        return

    outside = 0
    for region in tiler.regions:
        limit = region.radius + RADIUS_TOLERANCE + _RADIUS_EPSILON
        for cell in region.cells:
            if distance(cell, region.seed) > limit:
                outside += 1

    if outside > 0:
        result.add_error(f"{outside} region cells lie beyond the growth radius")


def _check_river_paths(session: MapSession, result: ValidationResult) -> None:
    """Check river centerlines are 4-connected and avoid earlier rivers."""
    earlier: set = set()
    for index, river in enumerate(session.rivers):
        path = river.path
        if path[0] != river.start:
            result.add_error(f"River {index} does not begin at its start cell")

        for a, b in zip(path, path[1:]):
            if abs(a[0] - b[0]) + abs(a[1] - b[1]) != 1:
                result.add_error(f"River {index} has a non-lateral step {a} -> {b}")
                break

        crossed = earlier.intersection(path)
        if crossed:
            result.add_error(f"River {index} runs through {len(crossed)} earlier river cells")

        earlier |= river.cells - session.ocean


def _check_river_overlap(session: MapSession, result: ValidationResult) -> None:
    """Check rivers only share cells that were water before carving."""
    rivers = session.rivers
    for i in range(len(rivers)):
        for j in range(i + 1, len(rivers)):
            shared = (rivers[i].cells & rivers[j].cells) - session.ocean
            if shared:
                result.add_error(
                    f"Rivers {i} and {j} share {len(shared)} cells that were land"
                )


def _check_leftovers(session: MapSession, result: ValidationResult) -> None:
    """Warn about open cells left once generation is finished."""
    if session.is_done and session.open_set:
        result.add_warning(f"{len(session.open_set)} open cells left unassigned")
