"""Per-class color statistics: pixel conversion, mean and covariance."""
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from hierquant.linalg import Mat3x3, Vec3x1, multiply
from hierquant.pixel_source import PixelSource, read_pixels
from hierquant.types import ClassMap, ColorVector, EmptyClassError


class PixelData(NamedTuple):
    """Normalized pixels of an image in row-major order."""

    vectors: np.ndarray  # (N, 3) float64 in [0, 1]
    transparent: np.ndarray  # (N,) bool
    width: int
    height: int


@dataclass
class ClassStatistics:
    """Mean, population covariance and live pixel count of one class."""

    mean: Vec3x1
    covariance: Mat3x3
    count: int


def convert_color(
    rgba: Sequence[int], max_value: int = 65535
) -> Tuple[Optional[ColorVector], bool]:
    """Convert one RGBA pixel to a normalized color vector.

    Args:
        rgba: Channel values (r, g, b, a) in [0, max_value]
        max_value: Largest representable channel value

    Returns:
        Tuple of (vector, is_transparent). The vector is None when the
        pixel's alpha is exactly zero.
    """
    r, g, b, a = rgba
    if a == 0:
        return None, True
    return np.array([r, g, b], dtype=np.float64) / float(max_value), False


def convert_pixels(rgba: np.ndarray, max_value: int = 65535) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorized convert_color over an (N, 4) array.

    Transparent rows keep their scaled values in the returned vectors;
    callers filter them out with the mask.
    """
    rgba = np.asarray(rgba, dtype=np.float64)
    vectors = rgba[:, :3] / float(max_value)
    transparent = rgba[:, 3] == 0
    return vectors, transparent


def load_pixel_data(source: PixelSource) -> PixelData:
    """Read and normalize every pixel of a source once."""
    rgba, max_value = read_pixels(source)
    vectors, transparent = convert_pixels(rgba, max_value)
    return PixelData(vectors, transparent, source.width, source.height)


def as_pixel_data(source: Union[PixelData, PixelSource]) -> PixelData:
    """Pass pixel data through, or read it from a pixel source."""
    if isinstance(source, PixelData):
        return source
    return load_pixel_data(source)


def compute_mean_and_covariance(
    source: Union[PixelData, PixelSource], class_map: ClassMap, class_id: int
) -> ClassStatistics:
    """Mean vector and population covariance of the live pixels of a class.

    Pixels are visited in row-major order; pixels labelled with another
    class and transparent pixels are skipped. The covariance is
    E[v vT] - E[v] E[v]T. A class whose live pixels all share one color
    gets that color as its mean and an exactly zero covariance.

    Args:
        source: Pixel source or pixel data already read from one
        class_map: Flat row-major array of class labels
        class_id: Class to summarize

    Returns:
        ClassStatistics for the class

    Raises:
        EmptyClassError: If the class has no live pixels
    """
    data = as_pixel_data(source)
    labels = np.asarray(class_map).reshape(-1)

    selected = data.vectors[(labels == class_id) & ~data.transparent]
    n = len(selected)
    if n == 0:
        raise EmptyClassError(f"class {class_id} has no live pixels")

    covariance = Mat3x3()

    if np.any(selected != selected[0]):
        mean = Vec3x1(selected.sum(axis=0) / n)
        second_moment = Mat3x3((selected.T @ selected) / n)
        covariance.sub(second_moment, multiply(mean, mean.T))
    else:
        mean = Vec3x1(selected[0])

    return ClassStatistics(mean=mean, covariance=covariance, count=n)
