"""
Command-Line Interface

Compile scene files to GLSL, print editor records in GLSL notation and
sample scenes onto grids from the command line.
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from . import config
from .compiler import compile_scene
from .errors import SceneError
from .grid import sample_levelset_2d, save_npy
from .notation import to_glsl
from .shader import fragment_source

logger = logging.getLogger(__name__)


def _load(path: str) -> Any:
    """Read a JSON document from *path* (``-`` for stdin)."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _cmd_compile(args: argparse.Namespace) -> int:
    policy = "raise" if args.strict else None
    compiled = compile_scene(_load(args.scene), unknown_operators=policy)
    if args.shader:
        print(fragment_source(compiled, coordinate=args.coordinate))
    else:
        print(compiled(args.coordinate))
    return 0


def _cmd_notation(args: argparse.Namespace) -> int:
    print(to_glsl(_load(args.node)))
    return 0


def _cmd_sample(args: argparse.Namespace) -> int:
    compiled = compile_scene(_load(args.scene))
    x0, x1, y0, y1 = args.bounds
    nx, ny = args.resolution
    phi = sample_levelset_2d(compiled, ((x0, x1), (y0, y1)), (nx, ny))
    save_npy(args.output, phi)
    logger.info("wrote %s with shape %s", args.output, phi.shape)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scene2glsl",
        description="Compile SDF scene trees to GLSL distance expressions",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=config.LOG_LEVEL,
        help=f"Logging level (default: {config.LOG_LEVEL})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Compile command
    comp_parser = subparsers.add_parser("compile", help="Compile a scene to a GLSL expression")
    comp_parser.add_argument("scene", help="Scene JSON file, or - for stdin")
    comp_parser.add_argument(
        "--coordinate", "-c",
        type=str,
        default=config.COORDINATE,
        help=f"Query-point variable name (default: {config.COORDINATE})",
    )
    comp_parser.add_argument(
        "--shader",
        action="store_true",
        help="Emit a complete fragment shader instead of the bare expression",
    )
    comp_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on unknown operators at compile time",
    )
    comp_parser.set_defaults(func=_cmd_compile)

    # Notation command
    not_parser = subparsers.add_parser("notation", help="Print a record tree in GLSL notation")
    not_parser.add_argument("node", help="Record JSON file, or - for stdin")
    not_parser.set_defaults(func=_cmd_notation)

    # Sample command
    (x0, x1), (y0, y1) = config.DEFAULT_BOUNDS
    smp_parser = subparsers.add_parser("sample", help="Sample a scene on a 2-D grid")
    smp_parser.add_argument("scene", help="Scene JSON file, or - for stdin")
    smp_parser.add_argument("output", help="Output .npy path")
    smp_parser.add_argument(
        "--bounds",
        type=float,
        nargs=4,
        metavar=("X0", "X1", "Y0", "Y1"),
        default=[x0, x1, y0, y1],
        help="Domain extents (default: %(default)s)",
    )
    smp_parser.add_argument(
        "--resolution",
        type=int,
        nargs=2,
        metavar=("NX", "NY"),
        default=list(config.DEFAULT_RESOLUTION),
        help="Cells along each axis (default: %(default)s)",
    )
    smp_parser.set_defaults(func=_cmd_sample)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except (SceneError, OSError, json.JSONDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
