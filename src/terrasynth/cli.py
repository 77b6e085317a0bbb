"""Command-line interface for height-field generation."""

import argparse
import logging
import time
from pathlib import Path

import structlog


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a procedural height field with elevation bands"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path or name of a TOML config file (default: built-in defaults)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Gradient table seed")
    parser.add_argument(
        "--resolution",
        type=int,
        default=None,
        help="Samples per axis (overrides both grid resolutions)",
    )
    parser.add_argument("--octaves", type=int, default=None, help="fBm octaves")
    parser.add_argument(
        "--persistence", type=float, default=None, help="Amplitude multiplier per octave"
    )
    parser.add_argument(
        "--lacunarity", type=float, default=None, help="Frequency multiplier per octave"
    )
    parser.add_argument("--scale", type=float, default=None, help="Base frequency")
    parser.add_argument(
        "--height-scale", type=float, default=None, help="Vertical multiplier"
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="saves/heightfield.npz",
        help="Output path (default: saves/heightfield.npz)",
    )
    parser.add_argument(
        "--preview",
        type=str,
        default=None,
        help="Write a band-colored PNG preview to this path (optional)",
    )
    parser.add_argument(
        "--ramp",
        action="store_true",
        help="Color the preview with a single height ramp instead of bands",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for height-field generation."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
    logger = structlog.get_logger()

    # Import here to avoid slow startup for --help
    from .config import TerrainConfig, find_config, load_config
    from .exceptions import ConfigurationError
    from .generator import generate_terrain
    from .persistence import save_height_field
    from .render import render_height_ramp, render_preview
    from .validation import validate_height_field

    if args.config:
        try:
            config_path = find_config(args.config)
        except FileNotFoundError as e:
            parser.error(str(e))
        config = load_config(config_path)
        logger.info("config_loaded", path=str(config_path))
    else:
        config = TerrainConfig()

    config = _apply_overrides(config, args)

    print(
        f"Generating {config.grid.resolution_x}x{config.grid.resolution_z} "
        f"height field with seed {config.seed}"
    )

    start_time = time.time()
    try:
        result = generate_terrain(config)
    except ConfigurationError as e:
        parser.error(str(e))
    gen_time = time.time() - start_time

    print(f"Generation complete in {gen_time:.2f}s")
    print(
        f"Height range: [{result.field.observed_min:.3f}, "
        f"{result.field.observed_max:.3f}]"
    )

    validate_height_field(result.field)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    written = save_height_field(output_path, result.field, config)
    print(f"Saved to {written}")

    preview = args.preview or config.preview_path
    if preview:
        preview_path = Path(preview)
        preview_path.parent.mkdir(parents=True, exist_ok=True)
        if args.ramp:
            image = render_height_ramp(result.field)
        else:
            image = render_preview(result.field, config.bands)
        image.save(preview_path)
        print(f"Preview written to {preview_path}")


def _apply_overrides(config, args: argparse.Namespace):
    """Return a copy of config with any CLI overrides applied."""
    fbm_updates = {
        key: value
        for key, value in (
            ("octaves", args.octaves),
            ("persistence", args.persistence),
            ("lacunarity", args.lacunarity),
            ("scale", args.scale),
        )
        if value is not None
    }
    grid_updates = {}
    if args.resolution is not None:
        grid_updates = {"resolution_x": args.resolution, "resolution_z": args.resolution}

    updates: dict = {
        "fbm": config.fbm.model_copy(update=fbm_updates),
        "grid": config.grid.model_copy(update=grid_updates),
    }
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.height_scale is not None:
        updates["height_scale"] = args.height_scale
    return config.model_copy(update=updates)


if __name__ == "__main__":
    main()
