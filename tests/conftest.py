"""Shared test fixtures for height-field tests."""

import pytest

from terrasynth.config import FBMParameters, GridSpec
from terrasynth.generator import Generator, create_generator
from terrasynth.gradient import GradientTable
from terrasynth.noise import FractalSynthesizer, NoiseField


@pytest.fixture
def table() -> GradientTable:
    """Gradient table for seed 42."""
    return GradientTable.build(42)


@pytest.fixture
def noise(table: GradientTable) -> NoiseField:
    """Noise field over the seed-42 table."""
    return NoiseField(table)


@pytest.fixture
def synthesizer(noise: NoiseField) -> FractalSynthesizer:
    """fBm synthesizer over the seed-42 noise field."""
    return FractalSynthesizer(noise)


@pytest.fixture
def generator() -> Generator:
    """Seed-42 generator sampling on a single thread."""
    return create_generator(42, workers=1)


@pytest.fixture
def params() -> FBMParameters:
    """Default fBm parameters."""
    return FBMParameters()


@pytest.fixture
def small_grid() -> GridSpec:
    """16x16 grid over the default 60x60 extent."""
    return GridSpec(resolution_x=16, resolution_z=16)
