"""Height-field sampling over a regular world-space grid."""

import math
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import ArrayLike, NDArray

from .config import FBMParameters, GridSpec
from .exceptions import BuildCancelledError, ConfigurationError
from .noise import FractalSynthesizer

logger = structlog.get_logger()

# Row bands handed out per worker; more bands smooths out uneven scheduling
BANDS_PER_WORKER = 4


@dataclass(frozen=True, eq=False)
class HeightField:
    """Immutable snapshot of a sampled height grid.

    Heights are stored flat in raster order, sample (column, row) at index
    ``row * width + column``. ``observed_min`` and ``observed_max`` are the
    true extrema of ``heights``.
    """

    width: int
    depth: int
    heights: NDArray[np.float64]
    observed_min: float
    observed_max: float

    def __post_init__(self) -> None:
        if self.heights.shape != (self.width * self.depth,):
            raise ValueError(
                f"expected {self.width * self.depth} heights for a "
                f"{self.width}x{self.depth} grid, got shape {self.heights.shape}"
            )
        self.heights.flags.writeable = False

    @classmethod
    def from_heights(cls, heights: ArrayLike, width: int, depth: int) -> "HeightField":
        """Build a field from raw raster-order heights, scanning for bounds.

        The heights are copied, so later changes to the input do not leak in.
        """
        flat = np.array(heights, dtype=np.float64).ravel()
        if flat.size == 0:
            raise ValueError("height field must contain at least one sample")
        return cls(
            width=width,
            depth=depth,
            heights=flat,
            observed_min=float(flat.min()),
            observed_max=float(flat.max()),
        )

    @property
    def span(self) -> float:
        return self.observed_max - self.observed_min

    @property
    def is_flat(self) -> bool:
        return self.observed_max == self.observed_min

    def as_grid(self) -> NDArray[np.float64]:
        """Read-only (depth, width) view of the heights."""
        return self.heights.reshape(self.depth, self.width)

    def at(self, column: int, row: int) -> float:
        """Height of the sample at (column, row)."""
        if not (0 <= column < self.width and 0 <= row < self.depth):
            raise IndexError(
                f"sample ({column}, {row}) outside {self.width}x{self.depth} grid"
            )
        return float(self.heights[row * self.width + column])

    def __len__(self) -> int:
        return self.heights.size


class CancelToken:
    """Thread-safe flag used to abandon an in-flight build."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise BuildCancelledError("height-field build was superseded")


def grid_coordinates(grid: GridSpec) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """World-space X and Z of every grid column and row.

    Column c maps to ``origin_x + extent_x * c / (resolution_x - 1)``, so the
    first and last samples sit on the edges of the extent.

    Args:
        grid: Grid specification.

    Returns:
        Tuple of (xs, zs) with lengths resolution_x and resolution_z.

    Raises:
        ConfigurationError: If the grid is invalid.
    """
    grid.check()
    columns = np.arange(grid.resolution_x, dtype=np.float64)
    rows = np.arange(grid.resolution_z, dtype=np.float64)
    xs = grid.origin_x + grid.extent_x * columns / (grid.resolution_x - 1)
    zs = grid.origin_z + grid.extent_z * rows / (grid.resolution_z - 1)
    return xs, zs


class HeightFieldBuilder:
    """Samples a FractalSynthesizer over a grid into a HeightField.

    Rows are split into contiguous bands and sampled on a thread pool. Each
    band writes its own slice of one flat array and reports its own
    extrema, which are then reduced into the field's bounds.
    """

    def __init__(self, synthesizer: FractalSynthesizer, workers: int | None = None):
        self.synthesizer = synthesizer
        self.workers = workers if workers is not None else min(8, os.cpu_count() or 1)
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")

    def build(
        self,
        grid: GridSpec,
        params: FBMParameters,
        height_scale: float = 1.0,
        cancel: CancelToken | None = None,
    ) -> HeightField:
        """Sample the grid and return a fresh HeightField.

        All inputs are validated before any sampling starts, so a failed
        build never exposes a partial field.

        Args:
            grid: Grid placement and resolution.
            params: fBm parameters.
            height_scale: Vertical multiplier applied to every sample.
            cancel: Optional token; once cancelled, the build stops at the
                next row band.

        Returns:
            New HeightField.

        Raises:
            ConfigurationError: If the grid, parameters, or scale is invalid.
            BuildCancelledError: If the token was cancelled mid-build.
        """
        grid.check()
        params.check()
        if not math.isfinite(height_scale):
            raise ConfigurationError(f"height_scale must be finite, got {height_scale}")

        start_time = time.time()
        width, depth = grid.resolution_x, grid.resolution_z
        xs, zs = grid_coordinates(grid)
        heights = np.empty(width * depth, dtype=np.float64)

        def sample_band(band: tuple[int, int]) -> tuple[float, float]:
            if cancel is not None:
                cancel.raise_if_cancelled()
            first, last = band
            block = (
                self.synthesizer.sample_array(xs[None, :], zs[first:last, None], params)
                * height_scale
            )
            heights[first * width : last * width] = block.ravel()
            return float(block.min()), float(block.max())

        bands = _row_bands(depth, self.workers * BANDS_PER_WORKER)
        if self.workers == 1 or len(bands) == 1:
            extrema = [sample_band(band) for band in bands]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                extrema = list(pool.map(sample_band, bands))

        observed_min = min(lo for lo, _ in extrema)
        observed_max = max(hi for _, hi in extrema)

        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "height_field_built",
            width=width,
            depth=depth,
            observed_min=observed_min,
            observed_max=observed_max,
            bands=len(bands),
            duration_ms=round(duration_ms, 2),
        )

        return HeightField(
            width=width,
            depth=depth,
            heights=heights,
            observed_min=observed_min,
            observed_max=observed_max,
        )


def _row_bands(depth: int, count: int) -> list[tuple[int, int]]:
    """Split rows 0..depth into at most ``count`` contiguous (first, last) bands."""
    count = max(1, min(count, depth))
    edges = np.linspace(0, depth, count + 1).round().astype(int)
    return [
        (int(first), int(last))
        for first, last in zip(edges[:-1], edges[1:])
        if last > first
    ]
