"""Palette formatting and swatch rendering."""
import json
import logging
from pathlib import Path
from typing import Sequence, Union

import numpy as np
from PIL import Image

from hierquant.types import Color

logger = logging.getLogger(__name__)

FORMATS = ("hex", "rgb", "json")


def to_hex(color: Color) -> str:
    """Hex code of a color, alpha ignored."""
    r, g, b = color[:3]
    return f"#{r:02x}{g:02x}{b:02x}"


def format_palette(colors: Sequence[Color], fmt: str = "hex") -> str:
    """Render colors as text, one color per line for hex and rgb.

    Args:
        colors: Colors as (r, g, b) or (r, g, b, a) tuples
        fmt: One of "hex", "rgb" or "json"

    Returns:
        Formatted palette
    """
    if fmt == "hex":
        return "\n".join(to_hex(c) for c in colors)
    if fmt == "rgb":
        return "\n".join(f"{c[0]} {c[1]} {c[2]}" for c in colors)
    if fmt == "json":
        return json.dumps([{"hex": to_hex(c), "rgb": [int(v) for v in c[:3]]} for c in colors])
    raise ValueError(f"Unknown palette format {fmt!r}, expected one of {FORMATS}")


def render_swatch(
    colors: Sequence[Color], output_path: Union[str, Path], size: int = 64
) -> Path:
    """Save a horizontal strip of size x size squares, one per color."""
    if not colors:
        raise ValueError("Cannot render an empty palette")

    strip = np.zeros((size, size * len(colors), 3), dtype=np.uint8)
    for i, color in enumerate(colors):
        strip[:, i * size:(i + 1) * size] = color[:3]

    output_path = Path(output_path)
    Image.fromarray(strip).save(output_path)
    logger.info(f"Swatch saved to {output_path}")
    return output_path
