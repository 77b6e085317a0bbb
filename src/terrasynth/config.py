"""Height-field synthesis configuration models and TOML loading."""

import math
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .classification import DEFAULT_BANDS, BiomeBand
from .exceptions import ConfigurationError

# TOML configs shipped inside the package
CONFIGS_DIR = Path(__file__).parent / "configs"
CONFIG_SUFFIX = ".toml"


class FBMParameters(BaseModel):
    """Fractal Brownian motion parameters shared by every sample of a build."""

    model_config = ConfigDict(frozen=True)

    octaves: int = Field(default=6, description="Number of noise layers to sum")
    persistence: float = Field(
        default=0.5, description="Amplitude multiplier per octave"
    )
    lacunarity: float = Field(
        default=2.0, description="Frequency multiplier per octave"
    )
    scale: float = Field(default=0.04, description="Base spatial frequency")

    def check(self) -> None:
        """Validate the parameters before any sampling happens.

        Raises:
            ConfigurationError: If octaves < 1 or scale <= 0.
        """
        if self.octaves < 1:
            raise ConfigurationError(f"octaves must be >= 1, got {self.octaves}")
        if not self.scale > 0:
            raise ConfigurationError(f"scale must be > 0, got {self.scale}")


class GridSpec(BaseModel):
    """World-space placement and sample counts of a height grid."""

    model_config = ConfigDict(frozen=True)

    origin_x: float = Field(default=-30.0, description="World X of column 0")
    origin_z: float = Field(default=-30.0, description="World Z of row 0")
    extent_x: float = Field(default=60.0, description="World width covered")
    extent_z: float = Field(default=60.0, description="World depth covered")
    resolution_x: int = Field(default=129, description="Samples along X")
    resolution_z: int = Field(default=129, description="Samples along Z")

    def check(self) -> None:
        """Validate the grid before any sampling happens.

        Raises:
            ConfigurationError: If a resolution is below 2, or an origin or
                extent is not a usable number.
        """
        if self.resolution_x < 2 or self.resolution_z < 2:
            raise ConfigurationError(
                "resolution must be >= 2 along both axes, got "
                f"{self.resolution_x}x{self.resolution_z}"
            )
        for name in ("origin_x", "origin_z", "extent_x", "extent_z"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be finite")
        if self.extent_x < 0 or self.extent_z < 0:
            raise ConfigurationError(
                f"extent must be non-negative, got {self.extent_x}x{self.extent_z}"
            )

    @property
    def sample_count(self) -> int:
        return self.resolution_x * self.resolution_z


class TerrainConfig(BaseModel):
    """Complete terrain synthesis configuration."""

    seed: int = Field(default=42, description="Seed for the gradient table")
    grid: GridSpec = Field(default_factory=GridSpec)
    fbm: FBMParameters = Field(default_factory=FBMParameters)
    height_scale: float = Field(
        default=18.0, description="Vertical multiplier applied to every sample"
    )
    bands: list[BiomeBand] = Field(
        default_factory=lambda: list(DEFAULT_BANDS),
        description="Ordered color bands covering [0, 1]",
    )

    # Output options
    preview_path: str | None = Field(
        default=None, description="PNG preview path (None = disabled)"
    )


def load_config(config_path: Path) -> TerrainConfig:
    """Parse a TOML file into a TerrainConfig.

    Tables and keys missing from the file keep their model defaults.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the TOML is malformed.
        pydantic.ValidationError: If a value has the wrong type.
    """
    data = tomllib.loads(Path(config_path).read_text(encoding="utf-8"))
    return TerrainConfig.model_validate(data)


def find_config(name: str) -> Path:
    """Resolve a ``--config`` argument to a file.

    Anything that looks like a path (contains a separator or ends in
    ``.toml``) is taken literally. A bare name is looked up among the
    configs bundled inside the package, with or without the suffix.

    Raises:
        FileNotFoundError: If nothing matches.
    """
    if _looks_like_path(name):
        path = Path(name)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {name}")
        return path

    for candidate in (CONFIGS_DIR / f"{name}{CONFIG_SUFFIX}", CONFIGS_DIR / name):
        if candidate.is_file():
            return candidate

    bundled = ", ".join(list_configs()) or "none"
    raise FileNotFoundError(f"No bundled config named '{name}' (bundled: {bundled})")


def list_configs() -> list[str]:
    """Names of the configs bundled with the package."""
    return sorted(path.stem for path in CONFIGS_DIR.glob(f"*{CONFIG_SUFFIX}"))


def _looks_like_path(name: str) -> bool:
    return "/" in name or os.sep in name or name.endswith(CONFIG_SUFFIX)
