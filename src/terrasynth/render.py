"""Preview images of height fields: one pixel per sample."""

from typing import Sequence

import numpy as np
from PIL import Image

from .classification import (
    DEFAULT_BANDS,
    BiomeBand,
    Color,
    classify_field,
    normalize_field,
)
from .heightfield import HeightField

# Ramp used when band coloring is off
RAMP_LOW = Color(0.05, 0.22, 0.12)
RAMP_HIGH = Color(0.90, 0.92, 0.95)


def render_preview(
    field: HeightField,
    bands: Sequence[BiomeBand] = DEFAULT_BANDS,
) -> Image.Image:
    """Render the field colored by elevation band.

    Row 0 of the field is the top row of the image.

    Args:
        field: Height field to render.
        bands: Ordered bands covering [0, 1].

    Returns:
        RGB image of size (width, depth).
    """
    colors = classify_field(field, bands)
    pixels = np.clip(np.rint(colors * 255), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels)


def render_height_ramp(field: HeightField) -> Image.Image:
    """Render normalized height on a single lowland-to-peak ramp, ignoring bands.

    The lowest sample is RAMP_LOW and the highest RAMP_HIGH.
    """
    t = normalize_field(field).reshape(field.depth, field.width, 1)
    low = np.array(RAMP_LOW, dtype=np.float64)
    high = np.array(RAMP_HIGH, dtype=np.float64)
    colors = low * (1.0 - t) + high * t
    pixels = np.clip(np.rint(colors * 255), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels)
