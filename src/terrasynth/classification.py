"""Elevation band classification: normalized height to interpolated color."""

from typing import TYPE_CHECKING, NamedTuple, Sequence

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .heightfield import HeightField


class Color(NamedTuple):
    """Linear RGB color with channels in [0, 1]."""

    r: float
    g: float
    b: float

    def to_rgb8(self) -> tuple[int, int, int]:
        """Convert to 8-bit channels."""
        return (
            int(round(self.r * 255)),
            int(round(self.g * 255)),
            int(round(self.b * 255)),
        )


class BiomeBand(BaseModel):
    """One sub-interval of normalized height and its color ramp."""

    model_config = ConfigDict(frozen=True)

    threshold_start: float = Field(description="Normalized height where band starts")
    threshold_end: float = Field(description="Normalized height where band ends")
    color_start: Color = Field(description="Color at threshold_start")
    color_end: Color = Field(description="Color at threshold_end")
    name: str = Field(default="", description="Human-readable band name")


DEEP_WATER = Color(0.04, 0.12, 0.28)
WATER = Color(0.10, 0.24, 0.50)
SAND = Color(0.76, 0.70, 0.50)
GRASS = Color(0.22, 0.48, 0.18)
FOREST = Color(0.10, 0.30, 0.10)
ROCK = Color(0.45, 0.42, 0.38)
SNOW = Color(0.92, 0.95, 1.00)

DEFAULT_BANDS: tuple[BiomeBand, ...] = (
    BiomeBand(threshold_start=0.0, threshold_end=0.18,
              color_start=DEEP_WATER, color_end=WATER, name="deep_water"),
    BiomeBand(threshold_start=0.18, threshold_end=0.25,
              color_start=WATER, color_end=SAND, name="water"),
    BiomeBand(threshold_start=0.25, threshold_end=0.38,
              color_start=SAND, color_end=GRASS, name="sand"),
    BiomeBand(threshold_start=0.38, threshold_end=0.58,
              color_start=GRASS, color_end=FOREST, name="grass"),
    BiomeBand(threshold_start=0.58, threshold_end=0.72,
              color_start=FOREST, color_end=ROCK, name="forest"),
    BiomeBand(threshold_start=0.72, threshold_end=0.88,
              color_start=ROCK, color_end=SNOW, name="rock"),
    BiomeBand(threshold_start=0.88, threshold_end=1.0,
              color_start=SNOW, color_end=SNOW, name="snow"),
)


def validate_bands(bands: Sequence[BiomeBand]) -> None:
    """Check that bands partition [0, 1] in order with no gaps or overlaps.

    Raises:
        ConfigurationError: If the band list is empty, does not span [0, 1],
            has a gap or overlap between neighbours, or has an empty band.
    """
    if not bands:
        raise ConfigurationError("band list is empty")
    if bands[0].threshold_start != 0.0:
        raise ConfigurationError(
            f"first band must start at 0, got {bands[0].threshold_start}"
        )
    if bands[-1].threshold_end != 1.0:
        raise ConfigurationError(
            f"last band must end at 1, got {bands[-1].threshold_end}"
        )
    for i, band in enumerate(bands):
        if not band.threshold_end > band.threshold_start:
            raise ConfigurationError(
                f"band {i} has non-positive width "
                f"[{band.threshold_start}, {band.threshold_end}]"
            )
        if i > 0 and band.threshold_start != bands[i - 1].threshold_end:
            kind = "gap" if band.threshold_start > bands[i - 1].threshold_end else "overlap"
            raise ConfigurationError(
                f"{kind} between band {i - 1} (ends {bands[i - 1].threshold_end}) "
                f"and band {i} (starts {band.threshold_start})"
            )


def normalize_height(height: float, observed_min: float, observed_max: float) -> float:
    """Map a height into [0, 1] against the observed range.

    A flat range (max == min) maps every height to 0.
    """
    if observed_max == observed_min:
        return 0.0
    t = (height - observed_min) / (observed_max - observed_min)
    return min(max(t, 0.0), 1.0)


def band_index(t: float, bands: Sequence[BiomeBand]) -> int:
    """Index of the band containing normalized height t.

    A boundary value belongs to the band that ends there; t=1 belongs to
    the last band.
    """
    for i, band in enumerate(bands):
        if t <= band.threshold_end:
            return i
    return len(bands) - 1


def normalize_field(field: "HeightField") -> NDArray[np.float64]:
    """Normalized height of every sample of a field, flat fields mapping to 0."""
    if field.is_flat:
        return np.zeros_like(field.heights)
    return np.clip((field.heights - field.observed_min) / field.span, 0.0, 1.0)


def band_indices(t: NDArray[np.float64], bands: Sequence[BiomeBand]) -> NDArray[np.intp]:
    """Vectorized ``band_index`` over an array of normalized heights."""
    ends = np.array([b.threshold_end for b in bands])
    return np.minimum(np.searchsorted(ends, t, side="left"), len(bands) - 1)


def classify(
    height: float,
    observed_min: float,
    observed_max: float,
    bands: Sequence[BiomeBand] = DEFAULT_BANDS,
) -> Color:
    """Color for a height given the observed bounds of its field.

    Args:
        height: Raw height value.
        observed_min: True minimum of the field the height came from.
        observed_max: True maximum of the field the height came from.
        bands: Ordered bands covering [0, 1].

    Returns:
        Color interpolated within the band containing the normalized height.

    Raises:
        ConfigurationError: If the bands do not partition [0, 1].
    """
    validate_bands(bands)
    t = normalize_height(height, observed_min, observed_max)
    band = bands[band_index(t, bands)]
    f = (t - band.threshold_start) / (band.threshold_end - band.threshold_start)
    return Color(
        *(c0 * (1.0 - f) + c1 * f for c0, c1 in zip(band.color_start, band.color_end))
    )


def classify_field(
    field: "HeightField",
    bands: Sequence[BiomeBand] = DEFAULT_BANDS,
) -> NDArray[np.float64]:
    """Classify every sample of a height field against its own bounds.

    Vectorized equivalent of calling ``classify`` per sample.

    Args:
        field: Height field to color.
        bands: Ordered bands covering [0, 1].

    Returns:
        Array of shape (depth, width, 3) with RGB channels in [0, 1].
    """
    validate_bands(bands)

    t = normalize_field(field)
    idx = band_indices(t, bands)

    starts = np.array([b.threshold_start for b in bands])
    ends = np.array([b.threshold_end for b in bands])
    color_starts = np.array([b.color_start for b in bands], dtype=np.float64)
    color_ends = np.array([b.color_end for b in bands], dtype=np.float64)

    f = ((t - starts[idx]) / (ends[idx] - starts[idx]))[:, None]
    colors = color_starts[idx] * (1.0 - f) + color_ends[idx] * f

    return colors.reshape(field.depth, field.width, 3)
