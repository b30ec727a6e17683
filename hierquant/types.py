"""Common types, configuration and exceptions for hierquant."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

# Type aliases
ColorVector = np.ndarray
ClassMap = np.ndarray
RGBA = Tuple[int, int, int, int]
Color = Union[Tuple[int, int, int], Tuple[int, int, int, int]]

# Label given to transparent pixels; never a node's class id
EXCLUDED_CLASS = 0
ROOT_CLASS = 1


@dataclass
class QuantizerConfig:
    """Configuration for the hierarchical PCA quantizer."""

    # Number of dominant colors to extract
    n_colors: int = 8

    # Optional cap on requested colors, bounds the O(count * pixels) work
    max_colors: Optional[int] = None

    def __post_init__(self):
        if self.n_colors < 1:
            raise ValueError(f"n_colors must be >= 1, got {self.n_colors}")
        if self.max_colors is None:
            return
        if self.n_colors > self.max_colors:
            raise ValueError(
                f"n_colors must be <= max_colors ({self.max_colors}), got {self.n_colors}"
            )
        if self.n_colors > self.max_colors // 2:
            import warnings

            warnings.warn(
                f"n_colors={self.n_colors} is close to the cap of {self.max_colors}; "
                "images rarely hold that many separable color clusters."
            )


class QuantizationError(Exception):
    """Base exception for quantization errors."""

    pass


class FactorizationError(QuantizationError):
    """Eigen decomposition of a covariance matrix failed."""

    pass


class DimensionMismatch(QuantizationError):
    """Operands of a fixed-size matrix operation have incompatible shapes."""

    pass


class NoEligibleLeafError(QuantizationError):
    """No leaf can be split further; the image has fewer color clusters than requested."""

    pass


class EmptyClassError(QuantizationError):
    """Statistics were requested for a class with no live pixels."""

    pass
