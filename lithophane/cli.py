"""Command-line interface: image in, lithophane STL out."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from lithophane import __version__
from lithophane.exceptions import (
    DegenerateGeometryError,
    ExpressionError,
    ImageLoadError,
    MeshGenerationError,
)
from lithophane.io.writers import save_stl
from lithophane.mesh.builder import LithophaneBuilder
from lithophane.mesh.extrusion import DEFAULT_BLACK_DEPTH, DEFAULT_WHITE_DEPTH

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_cli_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Attach stderr and optional file handlers to the package logger.

    Replaces handlers from an earlier call, so repeated runs in one process
    do not duplicate output.

    Args:
        verbose: Log at DEBUG instead of WARNING.
        log_file: Also write the log to this file, replacing its contents.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    package_logger = logging.getLogger("lithophane")
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lithophane",
        description=(
            "Convert an image to a lithophane STL. The backing surface is given by "
            "three expressions over the pixel column x, row y, image width w and height h."
        ),
    )
    parser.add_argument("-i", "--input", required=True, help="Input image file (PNG, JPG, etc.)")
    parser.add_argument("-o", "--output", required=True, help="Output STL file path")
    parser.add_argument("x_expression", help="Expression for the X coordinate, e.g. 'x'")
    parser.add_argument("y_expression", help="Expression for the Y coordinate, e.g. 'y'")
    parser.add_argument("z_expression", help="Expression for the Z coordinate, e.g. '0'")
    parser.add_argument(
        "--white-depth", type=float, default=DEFAULT_WHITE_DEPTH,
        help=f"Extrusion depth of white pixels (default: {DEFAULT_WHITE_DEPTH})",
    )
    parser.add_argument(
        "--black-depth", type=float, default=DEFAULT_BLACK_DEPTH,
        help=f"Extrusion depth of black pixels (default: {DEFAULT_BLACK_DEPTH})",
    )
    parser.add_argument(
        "--preview", type=int, metavar="STEP",
        help="Write only the backing surface, sampling every STEP pixels",
    )
    parser.add_argument(
        "--overwrite", action="store_true",
        help="Replace the output file if it already exists",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("--log-file", metavar="PATH", help="Also write the log to PATH")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        configure_cli_logging(args.verbose, args.log_file)
    except OSError as e:
        print(f'Error opening log file "{args.log_file}": {e}', file=sys.stderr)
        return 1

    output = Path(args.output)
    if output.exists() and not args.overwrite:
        print(f'Error opening output file "{output}": file already exists', file=sys.stderr)
        return 1
    if args.preview is not None and args.preview < 1:
        print("Error: preview step must be at least 1", file=sys.stderr)
        return 1

    builder = LithophaneBuilder()

    try:
        builder.load_image(args.input)
    except ImageLoadError as e:
        print(f'Error opening image file "{args.input}": {e}', file=sys.stderr)
        return 1

    try:
        builder.set_expressions(args.x_expression, args.y_expression, args.z_expression)
        builder.set_depths(args.white_depth, args.black_depth)
    except (ExpressionError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.preview is not None:
            mesh = builder.build_preview(step=args.preview)
        else:
            mesh = builder.build()
    except DegenerateGeometryError as e:
        print(f"Error generating lithophane: {e}", file=sys.stderr)
        return 1

    try:
        save_stl(mesh, output, overwrite=args.overwrite)
    except MeshGenerationError as e:
        print(f'Error saving lithophane to "{output}": {e}', file=sys.stderr)
        return 1

    logger.info("Wrote %d triangles to %s", len(mesh), output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
