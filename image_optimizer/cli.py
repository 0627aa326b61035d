#!/usr/bin/env python3
"""
Batch Image Optimizer - command line interface.

Walks a folder tree and writes converted, resized and compressed copies of
every JPEG, PNG, WebP and SVG image into a mirrored output folder.
"""

import argparse
import logging
import sys
from typing import List, Optional

from image_optimizer import __version__
from image_optimizer.errors import ImageOptimizerError
from image_optimizer.options import (
    ASPECT_CHOICES,
    DEFAULT_ASPECT,
    DEFAULT_FOLDER,
    DEFAULT_FORMAT,
    DEFAULT_HEIGHT,
    DEFAULT_QUALITY,
    DEFAULT_SOURCE,
    DEFAULT_WIDTH,
    SUPPORTED_FORMATS,
    RunOptions,
)
from image_optimizer.orchestrator import optimize_images

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    # -h is the height flag, so help is only available as --help.
    parser = argparse.ArgumentParser(
        prog='optimize-images',
        description='Optimize every image in a folder tree',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
  %(prog)s
  %(prog)s photos -f webp -q 70
  %(prog)s photos -w 1920 -h 1080 -a crop -o web_images
  %(prog)s photos --no-preserve-format --show-table
        """
    )

    parser.add_argument('source', nargs='?', default=DEFAULT_SOURCE,
                        help=f'Folder to optimize (default: {DEFAULT_SOURCE})')
    parser.add_argument('-f', '--format', default=DEFAULT_FORMAT.value,
                        help=f'Output format: {", ".join(SUPPORTED_FORMATS)} '
                             f'(default: {DEFAULT_FORMAT.value})')
    parser.add_argument('-q', '--quality', type=int, default=DEFAULT_QUALITY,
                        help=f'Image quality 1-100 (default: {DEFAULT_QUALITY})')
    parser.add_argument('-w', '--width', type=int, default=DEFAULT_WIDTH,
                        help='Output width in pixels (default: original width)')
    parser.add_argument('-h', '--height', type=int, default=DEFAULT_HEIGHT,
                        help='Output height in pixels (default: original height)')
    parser.add_argument('-a', '--aspect', default=DEFAULT_ASPECT,
                        help=f'Aspect fit mode: {", ".join(ASPECT_CHOICES)} (default: {DEFAULT_ASPECT})')
    parser.add_argument('-o', '--folder', default=DEFAULT_FOLDER,
                        help=f'Output folder for optimized images (default: {DEFAULT_FOLDER})')
    parser.add_argument('--preserve-format', action=argparse.BooleanOptionalAction, default=True,
                        help='Keep each file\'s own format when the output format is the default')
    parser.add_argument('--show-table', action='store_true',
                        help='Print a per-file results table')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log every step')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--help', action='help',
                        help='Show this help message and exit')
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def options_from_args(args: argparse.Namespace) -> RunOptions:
    """Build RunOptions from parsed arguments. Raises ValidationError."""
    return RunOptions(
        target_format=args.format,
        quality=args.quality,
        width=args.width,
        height=args.height,
        aspect_mode=args.aspect,
        output_root=args.folder,
        preserve_original_format=args.preserve_format,
        show_report=args.show_table,
        source_root=args.source,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main function with command line interface."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        options = options_from_args(args)
        optimize_images(options)
    except ImageOptimizerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
