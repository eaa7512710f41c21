"""Fractal noise built on OpenSimplex gradient noise.

Provides a point-sampled fBm (fractal Brownian motion) so heights can be
produced one coordinate at a time instead of as a whole grid.
"""

import numpy as np
from numpy.typing import NDArray
from opensimplex import OpenSimplex


class FractalNoise:
    """Seeded fBm noise function.

    Sums ``octaves`` layers of simplex noise. Each layer multiplies the
    sample frequency by ``lacunarity`` and the amplitude by ``gain``. The
    sum is normalized by the total amplitude so output stays roughly in
    [-1, 1].
    """

    def __init__(
        self,
        seed: int,
        octaves: int = 5,
        gain: float = 0.6,
        lacunarity: float = 2.0,
        frequency: float = 1.0,
    ):
        self.seed = seed
        self.octaves = octaves
        self.gain = gain
        self.lacunarity = lacunarity
        self.frequency = frequency
        self._simplex = OpenSimplex(seed)

    def sample(self, x: float, y: float) -> float:
        """Sample the noise at a point.

        Args:
            x: X position in noise space (before frequency scaling).
            y: Y position in noise space (before frequency scaling).

        Returns:
            Noise value, roughly in range [-1, 1].
        """
        x *= self.frequency
        y *= self.frequency

        total = 0.0
        amplitude = 1.0
        max_amplitude = 0.0

        for i in range(self.octaves):
            # Offset each octave so layers don't share a lattice origin
            total += amplitude * self._simplex.noise2(x + i * 31.7, y - i * 17.3)
            max_amplitude += amplitude
            x *= self.lacunarity
            y *= self.lacunarity
            amplitude *= self.gain

        if max_amplitude == 0.0:
            return 0.0
        return total / max_amplitude

    def sample_grid(self, size: int) -> NDArray[np.float64]:
        """Sample a full square grid, scaled the same way the sampler does.

        Args:
            size: Grid width and height.

        Returns:
            2D array of heights indexed [y, x].
        """
        ratio = size * self.frequency
        result = np.empty((size, size), dtype=np.float64)
        for y in range(size):
            for x in range(size):
                result[y, x] = self.sample(x / ratio, y / ratio)
        return result
