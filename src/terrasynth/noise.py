"""Gradient noise and fractal Brownian motion.

Provides the classic 2-D gradient ("improved Perlin") noise driven by a
GradientTable, and an fBm synthesizer that layers octaves of it into a value
renormalized to [-1, 1]. Every function accepts scalars or numpy arrays; the
scalar entry points go through the same array code so both give identical
results.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import FBMParameters
from .gradient import TABLE_SIZE, GradientTable


def fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3.

    First and second derivatives vanish at t=0 and t=1.
    """
    return t * t * t * (t * (t * 6 - 15) + 10)


def lerp(
    a: NDArray[np.float64], b: NDArray[np.float64], t: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Linear interpolation: t=0 gives a, t=1 gives b."""
    return a + t * (b - a)


def grad(
    hashed: NDArray[np.int64], x: NDArray[np.float64], y: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Dot product of a hashed corner gradient with the offset (x, y).

    The low two bits pick the gradient: bit 1 chooses whether x or y plays
    the first role, bit 0 flips the sign of the first term and bit 1 flips
    the sign of the second.

    Args:
        hashed: Corner hash values from the permutation table.
        x: X offset from the corner.
        y: Y offset from the corner.

    Returns:
        Gradient contribution for each corner.
    """
    h = hashed & 3
    u = np.where(h < 2, x, y)
    v = np.where(h < 2, y, x)
    return np.where(h & 1, -u, u) + np.where(h & 2, -v, v)


class NoiseField:
    """Stateless 2-D gradient noise over a borrowed GradientTable.

    Output is continuous, deterministic for a given table, and never
    clamped. With this gradient set the natural range is [-1, 1].
    """

    def __init__(self, table: GradientTable):
        self.table = table

    def evaluate(self, x: float, y: float) -> float:
        """Evaluate noise at a single point."""
        return float(self.evaluate_array(x, y))

    def evaluate_array(self, xs: ArrayLike, ys: ArrayLike) -> NDArray[np.float64]:
        """Evaluate noise at every (x, y) pair.

        Args:
            xs: X coordinates (any shape broadcastable against ys).
            ys: Y coordinates.

        Returns:
            Noise values with the broadcast shape of the inputs. Non-finite
            coordinates give NaN.
        """
        x, y = np.broadcast_arrays(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )
        p = self.table.table

        # Lattice cell; floor keeps noise continuous across zero
        x_floor = np.floor(x)
        y_floor = np.floor(y)
        xi = _cell_index(x_floor)
        yi = _cell_index(y_floor)

        # Position within the cell (0 to 1)
        xf = x - x_floor
        yf = y - y_floor

        u = fade(xf)
        v = fade(yf)

        # Hash the four corners
        a = p[xi] + yi
        aa = p[a]
        ab = p[a + 1]
        b = p[xi + 1] + yi
        ba = p[b]
        bb = p[b + 1]

        # Along x on both rows, then along y
        return lerp(
            lerp(grad(p[aa], xf, yf), grad(p[ba], xf - 1, yf), u),
            lerp(grad(p[ab], xf, yf - 1), grad(p[bb], xf - 1, yf - 1), u),
            v,
        )


def _cell_index(floored: NDArray[np.float64]) -> NDArray[np.int64]:
    """Lattice index masked into the table; non-finite coordinates map to 0.

    The offsets of a non-finite coordinate are NaN, so the noise value
    comes out NaN rather than failing on an out-of-range lookup.
    """
    finite = np.isfinite(floored)
    return np.where(finite, np.mod(np.where(finite, floored, 0.0), TABLE_SIZE), 0).astype(
        np.int64
    )


class FractalSynthesizer:
    """Sums octaves of a NoiseField into fractal Brownian motion."""

    def __init__(self, noise: NoiseField):
        self.noise = noise

    def sample(self, x: float, y: float, params: FBMParameters) -> float:
        """Sample fBm at a single point.

        Raises:
            ConfigurationError: If the parameters are invalid.
        """
        return float(self.sample_array(x, y, params))

    def sample_array(
        self, xs: ArrayLike, ys: ArrayLike, params: FBMParameters
    ) -> NDArray[np.float64]:
        """Sample fBm at every (x, y) pair.

        Each octave adds ``noise(x * frequency, y * frequency) * amplitude``,
        then amplitude is multiplied by persistence and frequency by
        lacunarity. The sum is divided by the total amplitude, which keeps
        the result inside [-1, 1] for any positive persistence, including
        the single-octave case.

        Args:
            xs: X coordinates.
            ys: Y coordinates.
            params: fBm parameters.

        Returns:
            fBm values with the broadcast shape of the inputs.

        Raises:
            ConfigurationError: If octaves < 1 or scale <= 0.
        """
        params.check()

        x = np.asarray(xs, dtype=np.float64)
        y = np.asarray(ys, dtype=np.float64)
        value = np.zeros(np.broadcast_shapes(x.shape, y.shape), dtype=np.float64)

        amplitude = 1.0
        frequency = params.scale
        max_amplitude = 0.0

        for _ in range(params.octaves):
            value += self.noise.evaluate_array(x * frequency, y * frequency) * amplitude
            max_amplitude += amplitude
            amplitude *= params.persistence
            frequency *= params.lacunarity

        return value / max_amplitude


def octave_weights(params: FBMParameters) -> list[float]:
    """Normalized amplitude of each octave; sums to 1 for positive persistence."""
    params.check()
    amplitudes = [params.persistence**i for i in range(params.octaves)]
    total = sum(amplitudes)
    return [a / total for a in amplitudes]
