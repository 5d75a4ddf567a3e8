"""Entry point for ``python -m fallgrain``.

Loads the default YAML config, builds a simulation engine with the
built-in and data-driven materials, and opens a Pygame window to paint
and watch particles fall.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pathlib

from fallgrain.simulation.config import SimulationConfig
from fallgrain.simulation.engine import SimulationEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def sound_root(config: SimulationConfig, config_path: pathlib.Path) -> pathlib.Path:
    """Return the directory contact sounds resolve against.

    Sounds are named by the rule source, so its directory wins; without
    one the config file's directory is used.
    """
    if config.materials_path is not None:
        return pathlib.Path(config.materials_path).parent
    return config_path.parent


def main() -> None:
    """Parse CLI args, create engine, launch renderer."""
    parser = argparse.ArgumentParser(
        prog="fallgrain",
        description="Fallgrain - falling-sand particle simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--materials",
        type=pathlib.Path,
        default=None,
        help="JSON rule source overriding the config's materials_path",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="RNG seed overriding the config (default: from config)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Target frames per second (default: 60)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    overrides: dict[str, object] = {}
    if args.materials is not None:
        overrides["materials_path"] = str(args.materials)
    if args.seed is not None:
        overrides["seed"] = args.seed
    if overrides:
        config = dataclasses.replace(config, **overrides)

    engine = SimulationEngine(config=config)

    # Imported late so the engine stays usable without a display
    from fallgrain.ui.pygame_client import PygameRenderer

    renderer = PygameRenderer(
        engine=engine,
        sound_root=sound_root(config, args.config),
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
