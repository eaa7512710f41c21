"""Streaming height sampler.

Hands out (x, y, height) triples for every cell of a square grid in
caller-sized batches, so the full field can be built a little at a time.
"""

from collections import deque
from typing import Callable

from .exceptions import InvalidBatchSizeError, InvalidGridSizeError
from .noise import FractalNoise
from .types import Coord, HeightSample


class HeightSampler:
    """Row-major queue of grid cells mapped through seeded fractal noise."""

    def __init__(
        self,
        size: int,
        batch_size: int,
        seed: int,
        octaves: int = 5,
        gain: float = 0.6,
        lacunarity: float = 2.0,
        frequency: float = 1.0,
    ):
        if size <= 0:
            raise InvalidGridSizeError(f"Grid size must be positive, got {size}")
        if batch_size < 1:
            # Empty batches signal exhaustion
            raise InvalidBatchSizeError(f"Batch size must be positive, got {batch_size}")

        self.size = size
        self.batch_size = batch_size
        self.noise = FractalNoise(
            seed,
            octaves=octaves,
            gain=gain,
            lacunarity=lacunarity,
            frequency=frequency,
        )
        self._remaining: deque[Coord] = deque(
            (x, y) for y in range(size) for x in range(size)
        )

    @property
    def remaining(self) -> int:
        """Number of cells not yet sampled."""
        return len(self._remaining)

    @property
    def is_done(self) -> bool:
        """True once every cell has been handed out."""
        return not self._remaining

    def set_noise(self, callback: Callable[[FractalNoise], None]) -> None:
        """Let the caller adjust noise parameters in place."""
        callback(self.noise)

    def next_batch(self, n: int | None = None) -> list[HeightSample]:
        """Sample the next n queued cells.

        Args:
            n: Cells to sample. Defaults to the configured batch size.
                Clamped to what is left.

        Returns:
            List of (x, y, height) triples. Empty once the queue is exhausted.
        """
        if n is None:
            n = self.batch_size
        n = min(max(n, 0), len(self._remaining))

        ratio = self.size * self.noise.frequency
        batch: list[HeightSample] = []
        for _ in range(n):
            x, y = self._remaining.popleft()
            batch.append((x, y, self.noise.sample(x / ratio, y / ratio)))
        return batch

    def drain_all(self) -> list[HeightSample]:
        """Sample every remaining cell at once."""
        return self.next_batch(len(self._remaining))
