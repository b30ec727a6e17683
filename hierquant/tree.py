"""Binary tree of color classes."""
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from hierquant.linalg import Mat3x3, Vec3x1


@dataclass(eq=False)
class ColorNode:
    """One color class. A node is a leaf until it is split."""

    class_id: int
    mean: Vec3x1 = field(default_factory=Vec3x1)
    covariance: Mat3x3 = field(default_factory=Mat3x3)
    pixel_count: int = 0
    left: Optional["ColorNode"] = None
    right: Optional["ColorNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def split(self, left_id: int, right_id: int) -> None:
        """Attach two fresh leaf children."""
        if not self.is_leaf:
            raise ValueError(f"class {self.class_id} has already been split")
        self.left = create_node(left_id)
        self.right = create_node(right_id)


def create_node(class_id: int) -> ColorNode:
    """Leaf with zero mean, covariance and count."""
    return ColorNode(class_id=class_id)


def is_leaf(node: ColorNode) -> bool:
    return node.is_leaf


def iter_nodes(root: ColorNode) -> Iterator[ColorNode]:
    """Depth-first pre-order traversal, left child before right."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        # Push right first so left is visited first
        if node.right is not None:
            stack.append(node.right)
        if node.left is not None:
            stack.append(node.left)


def iter_leaves(root: ColorNode) -> Iterator[ColorNode]:
    """Current leaves in traversal order."""
    return (node for node in iter_nodes(root) if node.is_leaf)


def collect_leaves(root: ColorNode) -> List[ColorNode]:
    """Leaves sorted by descending pixel count; ties keep traversal order."""
    return sorted(iter_leaves(root), key=lambda node: node.pixel_count, reverse=True)


def next_class_id(root: ColorNode) -> int:
    """Largest class id anywhere in the tree plus one."""
    return max(node.class_id for node in iter_nodes(root)) + 1
