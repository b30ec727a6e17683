"""Split selection and PCA partitioning of color classes."""
import logging
from typing import Optional, Union

import numpy as np

from hierquant.linalg import Vec1x3, dominant_eigenpair, multiply
from hierquant.pixel_source import PixelSource
from hierquant.statistics import PixelData, as_pixel_data
from hierquant.tree import ColorNode, iter_leaves
from hierquant.types import ClassMap, NoEligibleLeafError

logger = logging.getLogger(__name__)


def select_split_target(root: ColorNode) -> ColorNode:
    """
    Pick the leaf with the largest color variance.

    A tree that is still a single node returns its root. Otherwise leaves
    with a NaN in their covariance are filtered out, as are leaves with no
    positive variance (all pixels one color), and the leaf with the largest
    dominant eigenvalue wins. Ties go to the leaf visited first.

    Args:
        root: Root of the class tree

    Returns:
        The leaf to split next

    Raises:
        FactorizationError: If a covariance cannot be decomposed
        NoEligibleLeafError: If no leaf can be split
    """
    if root.is_leaf:
        return root

    best: Optional[ColorNode] = None
    best_value = 0.0

    for leaf in iter_leaves(root):
        if leaf.covariance.has_nan():
            logger.warning(f"Class {leaf.class_id}: NaN in covariance, skipping")
            continue

        value, _ = dominant_eigenpair(leaf.covariance)
        if value <= 0.0:
            logger.debug(f"Class {leaf.class_id}: no variance left, skipping")
            continue

        if best is None or value > best_value:
            best, best_value = leaf, value

    if best is None:
        raise NoEligibleLeafError(
            "no class can be split further; the image has fewer distinguishable colors than requested"
        )

    logger.debug(f"Selected class {best.class_id} (eigenvalue={best_value:.6g})")
    return best


def orient_axis(axis: Vec1x3) -> Vec1x3:
    """Flip axis so its largest-magnitude component is positive.

    The eigen solver may return either sign; orienting first makes the
    partition independent of that choice.
    """
    values = axis.ravel()
    if values[int(np.argmax(np.abs(values)))] < 0:
        return Vec1x3(-values)
    return axis


def partition(
    source: Union[PixelData, PixelSource],
    class_map: ClassMap,
    left_id: int,
    right_id: int,
    node: ColorNode,
    axis: Optional[Vec1x3] = None,
) -> ColorNode:
    """
    Split a leaf in two along the dominant eigenvector of its covariance.

    Every live pixel labelled node.class_id is projected onto the axis and
    relabelled left_id when the projection is <= the projection of the
    class mean, right_id otherwise. Transparent pixels are never relabelled.

    Args:
        source: Pixel source or pixel data already read from one
        class_map: Contiguous array of class labels, updated in place
        left_id: Class id for the new left child
        right_id: Class id for the new right child
        node: Leaf to split
        axis: Split direction; defaults to the dominant eigenvector

    Returns:
        The split node, with both children's pixel_count filled in

    Raises:
        FactorizationError: If the covariance cannot be decomposed
    """
    data = as_pixel_data(source)
    if not class_map.flags.c_contiguous:
        raise ValueError("class_map must be a contiguous array")
    labels = class_map.reshape(-1)

    if axis is None:
        _, axis = dominant_eigenpair(node.covariance)
    axis = orient_axis(axis)
    threshold = multiply(axis, node.mean)

    node.split(left_id, right_id)

    members = np.flatnonzero((labels == node.class_id) & ~data.transparent)
    projections = data.vectors[members] @ axis.ravel()
    to_left = projections <= threshold

    labels[members[to_left]] = left_id
    labels[members[~to_left]] = right_id
    node.left.pixel_count = int(np.count_nonzero(to_left))
    node.right.pixel_count = len(members) - node.left.pixel_count

    logger.debug(
        f"Split class {node.class_id} -> {left_id} ({node.left.pixel_count} px), "
        f"{right_id} ({node.right.pixel_count} px)"
    )
    return node
