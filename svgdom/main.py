#!/usr/bin/env python3
"""
svgdom - Command-line entry point

Loads an SVG or JSON document, optionally narrows it down and bakes
transforms into the geometry, then writes SVG, JSON or a raster image.

Run with: python -m svgdom.main drawing.svg --transform "rotate(45)" -o out.svg
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.document import Svg
from .core.errors import SvgError, SvgIOError
from .core.matrix import Matrix
from .io.loader import from_json_file, from_svg_document

logger = logging.getLogger(__name__)

RASTER_SUFFIXES = ('.png', '.jpg', '.jpeg', '.bmp', '.gif', '.tif', '.tiff', '.webp')


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="svgdom",
        description="Inspect, transform and convert SVG documents.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("input", help="Input file (.svg or .json)")
    parser.add_argument(
        "--output", "-o",
        help="Output file (printed to stdout for svg/json when omitted)",
    )
    parser.add_argument(
        "--format", "-f",
        choices=("svg", "json", "png"),
        help="Output format (guessed from the output suffix when omitted)",
    )
    parser.add_argument(
        "--transform", "-t",
        help="Base transform applied to every element, e.g. 'rotate(45) scale(2)'",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Bake element transforms into coordinates (implied by --transform)",
    )
    parser.add_argument(
        "--omit-transform",
        action="store_true",
        help="Leave transform attributes out of the output",
    )
    parser.add_argument("--find-type", help="Keep only elements of this type")
    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Search inside groups with --find-type",
    )
    parser.add_argument("--find-id", help="Keep only the element with this id")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(argv)


def output_format(args: argparse.Namespace) -> str:
    if args.format:
        return args.format
    if args.output:
        suffix = Path(args.output).suffix.lower()
        if suffix == '.json':
            return 'json'
        if suffix in RASTER_SUFFIXES:
            return 'png'
    return 'svg'


async def run(args: argparse.Namespace) -> int:
    """Execute the command described by `args`."""
    if Path(args.input).suffix.lower() == '.json':
        svg = await from_json_file(args.input)
    else:
        svg = await from_svg_document(args.input)

    if args.find_id:
        element = svg.find_by_id(args.find_id)
        if element is None:
            logger.error(f"No element with id {args.find_id!r}")
            return 1
        svg = Svg([element])

    if args.find_type:
        svg = svg.find_by_type(args.find_type, args.recursive)
        logger.info(f"Found {len(svg)} <{args.find_type}> elements")

    if args.transform or args.apply:
        matrix = Matrix.parse(args.transform) if args.transform else None
        svg = await svg.apply_matrix(matrix)

    fmt = output_format(args)
    if fmt == 'png':
        path = await svg.save_png(args.output)
        print(path)
    elif fmt == 'json':
        text = json.dumps(svg.to_json(args.omit_transform), indent=2)
        if args.output:
            _write_output(args.output, text)
        else:
            print(text)
    else:
        if args.output:
            await svg.save(args.output, omit_transform=args.omit_transform)
        else:
            print(svg.to_string(True, args.omit_transform))

    return 0


def _write_output(path: str, text: str) -> None:
    try:
        Path(path).write_text(text, encoding='utf-8')
    except OSError as e:
        raise SvgIOError(f"Cannot write {path}", path=path, cause=e) from e
    logger.info(f"Saved JSON to {path}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the svgdom command."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        return asyncio.run(run(args))
    except SvgError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
