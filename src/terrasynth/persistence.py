"""Height-field persistence: save and load generated fields."""

import json
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import structlog

from .config import TerrainConfig
from .exceptions import MapFormatError
from .heightfield import HeightField

logger = structlog.get_logger()

FORMAT_VERSION = 1


def save_height_field(
    path: Path,
    field: HeightField,
    config: TerrainConfig | None = None,
) -> Path:
    """Save a height field to disk.

    Uses numpy's compressed .npz format. Heights are stored as a
    (depth, width) grid alongside JSON metadata.

    Args:
        path: Output path (should end with .npz).
        field: Height field to save.
        config: Configuration used to generate the field, if known.

    Returns:
        Path actually written.
    """
    # numpy writes to <path>.npz when the suffix is missing
    if path.suffix != ".npz":
        path = path.with_suffix(path.suffix + ".npz")

    metadata = {
        "version": FORMAT_VERSION,
        "width": field.width,
        "depth": field.depth,
        "observed_min": field.observed_min,
        "observed_max": field.observed_max,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
    if config is not None:
        metadata["seed"] = config.seed
        metadata["config"] = config.model_dump(mode="json")

    np.savez_compressed(
        path,
        heights=field.as_grid(),
        metadata=json.dumps(metadata).encode("utf-8"),
    )

    file_size = path.stat().st_size / 1024
    logger.info("height_field_saved", path=str(path), size_kb=round(file_size, 1))
    return path


def load_height_field(path: Path) -> tuple[HeightField, dict]:
    """Load a height field from disk.

    Bounds are recomputed from the stored heights rather than trusted from
    the metadata.

    Args:
        path: Path to .npz file.

    Returns:
        Tuple of (HeightField, metadata dict).

    Raises:
        FileNotFoundError: If file doesn't exist.
        MapFormatError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Height field file not found: {path}")

    with np.load(path) as data:
        if "heights" not in data:
            raise MapFormatError("Invalid height field file: missing 'heights' array")
        heights = data["heights"]

        metadata: dict = {}
        if "metadata" in data:
            try:
                metadata = json.loads(data["metadata"].tobytes().decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                raise MapFormatError(f"Invalid height field metadata: {e}") from e

    if heights.ndim != 2 or heights.shape[0] < 1 or heights.shape[1] < 1:
        raise MapFormatError(
            f"Invalid height field file: expected a 2-D grid, got shape {heights.shape}"
        )

    depth, width = heights.shape
    field = HeightField.from_heights(heights, width=width, depth=depth)

    logger.info("height_field_loaded", path=str(path), width=width, depth=depth)
    return field, metadata
