"""Terrain generation entry points."""

from typing import Sequence

import numpy as np
import structlog
from numpy.typing import NDArray

from .classification import (
    BiomeBand,
    band_indices,
    classify_field,
    normalize_field,
    validate_bands,
)
from .config import FBMParameters, GridSpec, TerrainConfig
from .gradient import GradientTable
from .heightfield import CancelToken, HeightField, HeightFieldBuilder
from .noise import FractalSynthesizer, NoiseField

logger = structlog.get_logger()


class Generator:
    """Seeded noise stack ready to build height fields.

    The gradient table is built once at construction and shared read-only
    by every build, so a Generator can serve concurrent builds.
    """

    def __init__(self, table: GradientTable, workers: int | None = None):
        self.table = table
        self.noise = NoiseField(table)
        self.synthesizer = FractalSynthesizer(self.noise)
        self.builder = HeightFieldBuilder(self.synthesizer, workers=workers)

    @property
    def seed(self) -> int | None:
        return self.table.seed

    @classmethod
    def from_config(cls, config: TerrainConfig, workers: int | None = None) -> "Generator":
        return cls(GradientTable.build(config.seed), workers=workers)

    def sample(self, x: float, z: float, params: FBMParameters) -> float:
        """fBm value at a single world-space point, in [-1, 1]."""
        return self.synthesizer.sample(x, z, params)

    def build_height_field(
        self,
        grid: GridSpec,
        params: FBMParameters,
        height_scale: float = 1.0,
        cancel: CancelToken | None = None,
    ) -> HeightField:
        """Build a HeightField for the grid.

        Raises:
            ConfigurationError: If the grid or parameters are invalid.
            BuildCancelledError: If ``cancel`` fires mid-build.
        """
        return self.builder.build(grid, params, height_scale=height_scale, cancel=cancel)


def create_generator(seed: int, workers: int | None = None) -> Generator:
    """Create a Generator whose gradient table is shuffled by ``seed``."""
    logger.debug("generator_created", seed=seed)
    return Generator(GradientTable.build(seed), workers=workers)


class GenerationResult:
    """Result of terrain generation: heights plus per-sample colors."""

    def __init__(
        self,
        field: HeightField,
        colors: NDArray[np.float64],
        config: TerrainConfig,
    ):
        self.field = field
        self.colors = colors
        self.config = config


def generate_terrain(config: TerrainConfig, workers: int | None = None) -> GenerationResult:
    """Generate a height field and its band colors from configuration.

    Args:
        config: Terrain configuration.
        workers: Thread count for sampling (default: up to 8).

    Returns:
        GenerationResult with the field and a (depth, width, 3) color array.

    Raises:
        ConfigurationError: If the grid, fBm parameters, or bands are invalid.
    """
    validate_bands(config.bands)

    grid = config.grid
    logger.info(
        "terrain_generation_started",
        seed=config.seed,
        width=grid.resolution_x,
        depth=grid.resolution_z,
        octaves=config.fbm.octaves,
    )

    generator = Generator.from_config(config, workers=workers)
    field = generator.build_height_field(grid, config.fbm, config.height_scale)
    colors = classify_field(field, config.bands)

    _log_field_stats(field, config.bands)

    return GenerationResult(field=field, colors=colors, config=config)


def _log_field_stats(field: HeightField, bands: Sequence[BiomeBand]) -> None:
    """Log height range and band coverage of a field."""
    logger.info(
        "height_field_stats",
        samples=len(field),
        observed_min=round(field.observed_min, 4),
        observed_max=round(field.observed_max, 4),
        flat=field.is_flat,
    )

    idx = band_indices(normalize_field(field), bands)
    counts = np.bincount(idx, minlength=len(bands))

    for i, band in enumerate(bands):
        pct = counts[i] / len(field) * 100
        logger.info(
            "band_coverage",
            band=band.name or f"band_{i}",
            samples=int(counts[i]),
            percent=round(pct, 1),
        )
