"""Tests for configuration models and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

import terrasynth
from terrasynth.classification import DEFAULT_BANDS, Color, validate_bands
from terrasynth.config import (
    CONFIGS_DIR,
    FBMParameters,
    GridSpec,
    TerrainConfig,
    find_config,
    list_configs,
    load_config,
)
from terrasynth.exceptions import ConfigurationError


class TestFBMParameters:
    """Tests for FBMParameters."""

    def test_defaults(self) -> None:
        params = FBMParameters()
        assert params.octaves == 6
        assert params.persistence == 0.5
        assert params.lacunarity == 2.0
        assert params.scale == 0.04
        params.check()

    def test_frozen(self) -> None:
        params = FBMParameters()
        with pytest.raises(ValidationError):
            params.octaves = 3

    @pytest.mark.parametrize("octaves", [0, -1])
    def test_rejects_octaves(self, octaves: int) -> None:
        with pytest.raises(ConfigurationError, match="octaves"):
            FBMParameters(octaves=octaves).check()

    @pytest.mark.parametrize("scale", [0.0, -0.5, float("nan")])
    def test_rejects_scale(self, scale: float) -> None:
        with pytest.raises(ConfigurationError, match="scale"):
            FBMParameters(scale=scale).check()


class TestGridSpec:
    """Tests for GridSpec."""

    def test_defaults(self) -> None:
        grid = GridSpec()
        assert (grid.origin_x, grid.origin_z) == (-30.0, -30.0)
        assert (grid.extent_x, grid.extent_z) == (60.0, 60.0)
        assert grid.sample_count == 129 * 129
        grid.check()

    def test_minimum_resolution(self) -> None:
        GridSpec(resolution_x=2, resolution_z=2).check()
        with pytest.raises(ConfigurationError, match="resolution"):
            GridSpec(resolution_x=2, resolution_z=1).check()

    def test_rejects_non_finite(self) -> None:
        with pytest.raises(ConfigurationError, match="origin_z"):
            GridSpec(origin_z=float("inf")).check()

    def test_rejects_negative_extent(self) -> None:
        with pytest.raises(ConfigurationError, match="extent"):
            GridSpec(extent_z=-5.0).check()


class TestTerrainConfig:
    """Tests for TerrainConfig."""

    def test_defaults(self) -> None:
        config = TerrainConfig()
        assert config.seed == 42
        assert config.height_scale == 18.0
        assert config.bands == list(DEFAULT_BANDS)
        assert config.preview_path is None


class TestLoadConfig:
    """Tests for TOML config loading."""

    def test_load_partial(self, tmp_path: Path) -> None:
        """Unspecified fields keep their defaults."""
        path = tmp_path / "partial.toml"
        path.write_text("seed = 9\n\n[fbm]\noctaves = 3\n")
        config = load_config(path)
        assert config.seed == 9
        assert config.fbm.octaves == 3
        assert config.fbm.scale == 0.04
        assert config.grid == GridSpec()

    def test_load_bands(self, tmp_path: Path) -> None:
        path = tmp_path / "bands.toml"
        path.write_text(
            "[[bands]]\n"
            "threshold_start = 0.0\n"
            "threshold_end = 1.0\n"
            "color_start = [0.0, 0.0, 0.0]\n"
            "color_end = [1.0, 1.0, 1.0]\n"
        )
        config = load_config(path)
        assert len(config.bands) == 1
        assert config.bands[0].color_end == Color(1.0, 1.0, 1.0)

    def test_invalid_type(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text('seed = "not a number"\n')
        with pytest.raises(ValidationError):
            load_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_shipped_default(self) -> None:
        config = load_config(CONFIGS_DIR / "default.toml")
        assert config == TerrainConfig()

    def test_shipped_islands(self) -> None:
        config = load_config(CONFIGS_DIR / "islands.toml")
        assert config.seed == 7
        assert [band.name for band in config.bands] == ["ocean", "beach", "jungle", "peak"]
        validate_bands(config.bands)
        config.grid.check()
        config.fbm.check()


class TestFindConfig:
    """Tests for find_config."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "mine.toml"
        path.write_text("seed = 1\n")
        assert find_config(str(path)) == path

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            find_config(str(tmp_path / "missing.toml"))

    def test_unknown_name(self) -> None:
        with pytest.raises(FileNotFoundError, match="no-such-config"):
            find_config("no-such-config")

    def test_bundled_configs_live_in_package(self) -> None:
        """Bundled configs resolve inside the installed package directory."""
        package_dir = Path(terrasynth.__file__).parent
        assert CONFIGS_DIR == package_dir / "configs"
        assert find_config("islands") == package_dir / "configs" / "islands.toml"
        assert find_config("default").is_file()

    def test_list_configs(self) -> None:
        assert {"default", "islands"} <= set(list_configs())

    def test_name_with_suffix_is_a_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A bare file name ending in .toml is resolved against the working directory."""
        monkeypatch.chdir(tmp_path)
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            find_config("islands.toml")
        (tmp_path / "islands.toml").write_text("seed = 3\n")
        assert load_config(find_config("islands.toml")).seed == 3
