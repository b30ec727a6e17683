"""Command-line interface for hierquant."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from PIL import Image

from hierquant.palette import FORMATS, format_palette, render_swatch
from hierquant.pixel_source import load_image
from hierquant.quantizer import HierarchicalQuantizer, render_quantized
from hierquant.types import QuantizationError, QuantizerConfig


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="hierquant",
        description="Extract dominant colors with hierarchical PCA splitting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hierquant photo.jpg
  hierquant photo.jpg --colors 5 --format json
  hierquant photo.png -c 12 --swatch palette.png --quantized posterized.png
        """,
    )

    parser.add_argument("input", help="Input image file path")

    parser.add_argument(
        "-c",
        "--colors",
        type=int,
        default=8,
        help="Number of dominant colors to extract (default: 8)",
    )

    parser.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default="hex",
        help="Palette output format (default: hex)",
    )

    parser.add_argument(
        "--swatch",
        default=None,
        help="Optional PNG path for a palette swatch strip",
    )

    parser.add_argument(
        "--quantized",
        default=None,
        help="Optional PNG path for the image repainted with the palette",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress to stderr"
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        config = QuantizerConfig(n_colors=parsed.colors)
        source = load_image(parsed.input)
        result = HierarchicalQuantizer(config).quantize_with_details(source)

        print(format_palette(result.colors, parsed.format))

        if parsed.swatch:
            render_swatch(result.colors, parsed.swatch)

        if parsed.quantized:
            output_path = Path(parsed.quantized)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            Image.fromarray(render_quantized(result)).save(output_path)

        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (QuantizationError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
