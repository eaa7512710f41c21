"""Custom exceptions for map generation."""


class RealmGenError(Exception):
    """Base exception for map generation errors."""

    pass


class InvalidGridSizeError(RealmGenError):
    """Raised when a grid is requested with a non-positive size."""

    pass


class NotSeededError(RealmGenError):
    """Raised when a tiler is stepped before it was seeded or loaded."""

    pass


class InvalidBatchSizeError(RealmGenError):
    """Raised when a sampler is created with a batch size below one."""

    pass
