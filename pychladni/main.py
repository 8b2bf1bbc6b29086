#!/usr/bin/env python3
"""
Command line entry point.

Usage:
    pychladni [options]
    python -m pychladni [options]
"""

import argparse
import logging
import sys
from typing import Optional, Sequence, Tuple

from pychladni.app import ChladniApp
from pychladni.chladni_params import PRESETS
from pychladni.config import SimulationConfig, load_theme
from pychladni.logging_config import setup_logging
from pychladni.palette import ColorPalette

logger = logging.getLogger(__name__)


def parse_size(value: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"window size must be positive, got {value!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    p = argparse.ArgumentParser(
        prog="pychladni",
        description="Animated Chladni plate: particles settling on the nodal lines of a vibrating plate",
    )
    p.add_argument("--size", type=parse_size, default=(defaults.window_width, defaults.window_height),
                   help="window size as WIDTHxHEIGHT (default: %(default)s)")
    p.add_argument("--particles", type=int, default=defaults.num_particles)
    p.add_argument("--scale", type=float, default=defaults.canvas_scale,
                   help="window pixels per simulation cell")
    p.add_argument("--preset", type=int, default=defaults.initial_preset + 1,
                   choices=range(1, len(PRESETS) + 1), help="harmonic preset (1-%d)" % len(PRESETS))
    p.add_argument("--frequency", type=float, default=None, help="override the preset's spatial frequency")
    p.add_argument("--period", type=float, default=defaults.bake_period, help="seconds between schedule ticks")
    p.add_argument("--fps", type=int, default=defaults.fps)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--theme", type=str, default=None, help="JSON file of named colours")
    p.add_argument("--debug", action="store_true", help="start with the vibration field visible")
    p.add_argument("--no-sweep", action="store_true", help="never respawn particles that drift off the plate")
    p.add_argument("--frames", type=int, default=None, help="run N frames without a window and exit")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--log-file", type=str, default=None)
    return p


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    if args.particles < 0:
        raise ValueError("--particles must be non-negative")
    if args.scale <= 0 or args.period <= 0 or args.fps <= 0:
        raise ValueError("--scale, --period and --fps must be positive")
    if args.frequency is not None and args.frequency <= 0:
        raise ValueError("--frequency must be positive")
    return SimulationConfig(
        num_particles=args.particles,
        canvas_scale=args.scale,
        window_width=args.size[0],
        window_height=args.size[1],
        fps=args.fps,
        bake_period=args.period,
        debug=args.debug,
        sweep_enabled=not args.no_sweep,
        initial_preset=args.preset - 1,
        frequency=args.frequency,
        seed=args.seed,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    try:
        config = config_from_args(args)
        palette = ColorPalette.from_theme(load_theme(args.theme))
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 2

    app = ChladniApp(config, palette)
    if args.frames is not None:
        app.run_headless(args.frames)
    else:
        app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
