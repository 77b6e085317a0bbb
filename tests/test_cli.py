"""Tests for the command-line interface."""

from pathlib import Path

import pytest
import structlog

from terrasynth.cli import build_parser, main
from terrasynth.persistence import load_height_field


@pytest.fixture(autouse=True)
def reset_structlog():
    """main() configures structlog globally; undo it after each test."""
    yield
    structlog.reset_defaults()


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.config is None
        assert args.seed is None
        assert args.output == "saves/heightfield.npz"
        assert not args.verbose


class TestMain:
    """Tests for running the CLI end to end."""

    def test_generates_field_and_preview(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output = tmp_path / "out" / "field.npz"
        preview = tmp_path / "out" / "preview.png"
        main([
            "--seed", "11",
            "--resolution", "12",
            "--octaves", "3",
            "--output", str(output),
            "--preview", str(preview),
        ])

        assert output.exists()
        assert preview.exists()

        field, metadata = load_height_field(output)
        assert (field.width, field.depth) == (12, 12)
        assert metadata["seed"] == 11
        assert metadata["config"]["fbm"]["octaves"] == 3

        printed = capsys.readouterr().out
        assert "Generating 12x12 height field with seed 11" in printed

    def test_config_file(self, tmp_path: Path) -> None:
        config_path = tmp_path / "small.toml"
        config_path.write_text(
            "seed = 5\nheight_scale = 2.0\n\n[grid]\nresolution_x = 6\nresolution_z = 4\n"
        )
        output = tmp_path / "field.npz"
        main(["--config", str(config_path), "--output", str(output)])

        field, metadata = load_height_field(output)
        assert (field.width, field.depth) == (6, 4)
        assert metadata["seed"] == 5
        assert -2.0 <= field.observed_min <= field.observed_max <= 2.0

    def test_invalid_octaves_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([
                "--resolution", "4",
                "--octaves", "0",
                "--output", str(tmp_path / "never.npz"),
            ])
        assert exc_info.value.code == 2
        assert not (tmp_path / "never.npz").exists()

    def test_missing_config_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--config", str(tmp_path / "absent.toml")])

    def test_bundled_config_by_name(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """``--config islands`` finds the config shipped with the package."""
        monkeypatch.chdir(tmp_path)
        main(["--config", "islands", "--resolution", "8", "--output", "field.npz"])

        field, metadata = load_height_field(tmp_path / "field.npz")
        assert (field.width, field.depth) == (8, 8)
        assert metadata["seed"] == 7
        # islands.toml enables a preview relative to the working directory
        assert (tmp_path / "saves" / "islands.png").exists()

    def test_ramp_preview(self, tmp_path: Path) -> None:
        """``--ramp`` draws the preview without band colors."""
        from PIL import Image

        from terrasynth.render import RAMP_HIGH, RAMP_LOW

        preview = tmp_path / "ramp.png"
        main([
            "--resolution", "6",
            "--output", str(tmp_path / "field.npz"),
            "--preview", str(preview),
            "--ramp",
        ])

        with Image.open(preview) as image:
            colors = {color for _, color in image.getcolors()}
        assert RAMP_LOW.to_rgb8() in colors
        assert RAMP_HIGH.to_rgb8() in colors
