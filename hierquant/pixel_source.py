"""Pixel sources: the read-only image interface the quantizer consumes."""
import logging
from pathlib import Path
from typing import Optional, Protocol, Tuple, Union, runtime_checkable

import numpy as np
from PIL import Image
from PIL import ImageOps

from hierquant.types import QuantizationError

logger = logging.getLogger(__name__)

# Pillow modes holding more than 8 bits per sample
WIDE_GRAY_MODES = ("I;16", "I;16L", "I;16B", "I;16N", "I")


@runtime_checkable
class PixelSource(Protocol):
    """Read-only image with integer RGBA channels in [0, max_value].

    An alpha of 0 marks a fully transparent pixel.
    """

    width: int
    height: int
    max_value: int

    def color_at(self, x: int, y: int) -> Tuple[int, int, int, int]:
        ...


class ArrayPixelSource:
    """Pixel source backed by an (H, W, 3) or (H, W, 4) numpy array."""

    def __init__(self, array: np.ndarray, max_value: Optional[int] = None):
        if not isinstance(array, np.ndarray):
            raise ValueError("Input must be a numpy array")

        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Input must be HxWx3 or HxWx4 array, got shape {array.shape}")

        if np.issubdtype(array.dtype, np.floating):
            # Floats are taken to be in [0, 1]
            array = np.round(np.clip(array, 0.0, 1.0) * 65535).astype(np.uint16)
            max_value = 65535
        elif max_value is None:
            max_value = 255 if array.dtype == np.uint8 else 65535

        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), max_value, dtype=array.dtype)
            array = np.concatenate([array, alpha], axis=2)

        self.height, self.width = array.shape[:2]
        self.max_value = int(max_value)
        self._pixels = np.ascontiguousarray(array)

    def color_at(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def to_array(self) -> np.ndarray:
        """All pixels as an (H*W, 4) array in row-major order."""
        return self._pixels.reshape(-1, 4)

    def __repr__(self) -> str:
        return f"ArrayPixelSource({self.width}x{self.height}, max_value={self.max_value})"


def read_pixels(source: PixelSource) -> Tuple[np.ndarray, int]:
    """Read every pixel of a source in row-major order.

    Args:
        source: Any pixel source

    Returns:
        Tuple of (pixels, max_value) where pixels is an (H*W, 4) float64 array
    """
    to_array = getattr(source, "to_array", None)
    if to_array is not None:
        pixels = np.asarray(to_array(), dtype=np.float64)
    else:
        pixels = np.empty((source.width * source.height, 4), dtype=np.float64)
        for y in range(source.height):
            for x in range(source.width):
                pixels[y * source.width + x] = source.color_at(x, y)
    return pixels, int(getattr(source, "max_value", 65535))


def load_image(path: Union[str, Path]) -> ArrayPixelSource:
    """
    Load an image file as a pixel source.

    The image is EXIF-transposed. 16-bit grayscale images (modes I;16*
    and I) keep their depth as uint16 with max_value 65535; everything else
    is converted to 8-bit RGBA. Pillow decodes multi-channel 16-bit PNGs to
    8 bits per channel, so those arrive here already downsampled.
    Transparency is kept so fully transparent pixels stay out of the
    statistics.

    Args:
        path: Path to image file

    Returns:
        ArrayPixelSource over the decoded image

    Raises:
        FileNotFoundError: If file doesn't exist
        QuantizationError: If file cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise QuantizationError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            if img.mode in WIDE_GRAY_MODES:
                gray = np.clip(np.array(img, dtype=np.int64), 0, 65535).astype(np.uint16)
                alpha = np.full_like(gray, 65535)
                array = np.stack([gray, gray, gray, alpha], axis=-1)
                max_value = 65535
            else:
                if img.mode != "RGBA":
                    img = img.convert("RGBA")
                array = np.array(img, dtype=np.uint8)
                max_value = 255
    except (IOError, OSError) as e:
        raise QuantizationError(f"Failed to load image {path}: {e}") from e

    logger.info(f"Loaded {path} ({array.shape[1]}x{array.shape[0]})")
    return ArrayPixelSource(array, max_value=max_value)
