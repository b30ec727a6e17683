"""Hierarchical PCA color quantizer."""
import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from hierquant.linalg import Vec3x1
from hierquant.pixel_source import PixelSource
from hierquant.splitting import partition, select_split_target
from hierquant.statistics import PixelData, compute_mean_and_covariance, load_pixel_data
from hierquant.tree import ColorNode, collect_leaves, create_node, next_class_id
from hierquant.types import (
    EXCLUDED_CLASS,
    RGBA,
    ROOT_CLASS,
    ClassMap,
    NoEligibleLeafError,
    QuantizerConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class QuantizationResult:
    """Dominant colors together with the tree and labels that produced them."""

    colors: List[RGBA]
    root: ColorNode
    leaves: List[ColorNode]  # same order as colors
    class_map: ClassMap  # (H, W) labels, EXCLUDED_CLASS for transparent pixels

    @property
    def palette(self) -> np.ndarray:
        """Colors as an (n, 3) uint8 array."""
        return np.array([c[:3] for c in self.colors], dtype=np.uint8).reshape(-1, 3)


def mean_to_rgba(mean: Vec3x1) -> RGBA:
    """Scale a normalized mean color to 8-bit channels, truncating, fully opaque."""
    # Rounding first keeps values like 39.9999999999 from truncating to 39
    scaled = np.round(mean.ravel() * 255.0, 9)
    channels = np.clip(np.trunc(scaled), 0, 255).astype(int)
    r, g, b = (int(c) for c in channels)
    return r, g, b, 255


class HierarchicalQuantizer:
    """Extracts dominant colors by recursive PCA splits in RGB space."""

    def __init__(self, config: Optional[QuantizerConfig] = None):
        """Initialize quantizer with configuration.

        Args:
            config: Quantizer configuration. Uses defaults if None.
        """
        self.config = config or QuantizerConfig()

    def quantize(self, source: PixelSource, count: Optional[int] = None) -> List[RGBA]:
        """Dominant colors of an image, most populous first.

        Args:
            source: Image to quantize
            count: Number of colors (defaults to config.n_colors)

        Returns:
            List of (r, g, b, 255) tuples

        Raises:
            ValueError: If count is out of range
            QuantizationError: If quantization fails
        """
        return self.quantize_with_details(source, count).colors

    def quantize_with_details(
        self, source: PixelSource, count: Optional[int] = None
    ) -> QuantizationResult:
        """Like quantize, but also returns the class tree and label map."""
        count = self.config.n_colors if count is None else count
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        if self.config.max_colors is not None and count > self.config.max_colors:
            raise ValueError(f"count must be <= {self.config.max_colors}, got {count}")

        data = load_pixel_data(source)
        logger.info(f"Quantizing {data.width}x{data.height} image to {count} colors")

        class_map = np.where(data.transparent, EXCLUDED_CLASS, ROOT_CLASS).astype(np.int32)
        root = create_node(ROOT_CLASS)
        self._update_statistics(data, class_map, root)

        for step in range(count - 1):
            target = select_split_target(root)
            left_id = next_class_id(root)
            right_id = left_id + 1
            partition(data, class_map, left_id, right_id, target)

            if target.left.pixel_count == 0 or target.right.pixel_count == 0:
                raise NoEligibleLeafError(
                    f"split {step + 1} of class {target.class_id} left one side empty; "
                    f"the image has fewer than {count} distinguishable colors"
                )

            self._update_statistics(data, class_map, target.left)
            self._update_statistics(data, class_map, target.right)

        leaves = collect_leaves(root)
        colors = [mean_to_rgba(leaf.mean) for leaf in leaves]
        logger.info(f"Extracted {len(colors)} colors")

        return QuantizationResult(
            colors=colors,
            root=root,
            leaves=leaves,
            class_map=class_map.reshape(data.height, data.width),
        )

    @staticmethod
    def _update_statistics(data: PixelData, class_map: ClassMap, node: ColorNode) -> None:
        stats = compute_mean_and_covariance(data, class_map, node.class_id)
        node.mean = stats.mean
        node.covariance = stats.covariance
        node.pixel_count = stats.count


def quantize(source: PixelSource, count: int) -> List[RGBA]:
    """Dominant colors of an image using a default quantizer."""
    return HierarchicalQuantizer().quantize(source, count)


def render_quantized(result: QuantizationResult) -> np.ndarray:
    """Paint every pixel with the color of its class.

    Returns:
        (H, W, 4) uint8 image; transparent pixels stay (0, 0, 0, 0)
    """
    labels = result.class_map
    image = np.zeros(labels.shape + (4,), dtype=np.uint8)
    for leaf, color in zip(result.leaves, result.colors):
        image[labels == leaf.class_id] = color
    return image
