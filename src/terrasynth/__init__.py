"""Procedural height-field synthesis.

This package implements seeded gradient noise, fractal Brownian motion
layering, grid sampling into immutable height fields, and classification of
normalized heights into colored elevation bands.
"""

from .classification import (
    DEFAULT_BANDS,
    BiomeBand,
    Color,
    classify,
    classify_field,
    normalize_height,
    validate_bands,
)
from .config import FBMParameters, GridSpec, TerrainConfig, load_config
from .exceptions import (
    BuildCancelledError,
    ConfigurationError,
    MapFormatError,
    TerrainSynthError,
)
from .generator import GenerationResult, Generator, create_generator, generate_terrain
from .gradient import GradientTable
from .heightfield import CancelToken, HeightField, HeightFieldBuilder
from .noise import FractalSynthesizer, NoiseField
from .persistence import load_height_field, save_height_field
from .regeneration import HeightFieldRegenerator
from .validation import ValidationResult, validate_height_field

__all__ = [
    # Noise
    "GradientTable",
    "NoiseField",
    "FractalSynthesizer",
    # Configuration
    "FBMParameters",
    "GridSpec",
    "TerrainConfig",
    "load_config",
    # Height fields
    "HeightField",
    "HeightFieldBuilder",
    "CancelToken",
    "HeightFieldRegenerator",
    # Generator
    "Generator",
    "GenerationResult",
    "create_generator",
    "generate_terrain",
    # Classification
    "BiomeBand",
    "Color",
    "DEFAULT_BANDS",
    "classify",
    "classify_field",
    "normalize_height",
    "validate_bands",
    # Persistence and validation
    "load_height_field",
    "save_height_field",
    "ValidationResult",
    "validate_height_field",
    # Exceptions
    "TerrainSynthError",
    "ConfigurationError",
    "BuildCancelledError",
    "MapFormatError",
]
