"""Fixed-size linear algebra for RGB statistics.

Only the shapes the quantizer needs are provided: a 3x3 matrix and 3x1 / 1x3
vectors. Each type wraps a float64 numpy array of fixed shape so operations
can write into an existing receiver, like the covariance matrix stored on a
tree node.
"""
from typing import Callable, Tuple, Union

import numpy as np
from scipy import linalg as sla

from hierquant.types import DimensionMismatch, FactorizationError


class FixedMatrix:
    """Base class for the fixed-shape matrix types."""

    shape: Tuple[int, int] = (0, 0)

    def __init__(self, values=None):
        if values is None:
            self.data = np.zeros(self.shape, dtype=np.float64)
            return
        data = np.array(values, dtype=np.float64)
        if data.size != self.shape[0] * self.shape[1]:
            raise DimensionMismatch(
                f"{type(self).__name__} needs {self.shape[0] * self.shape[1]} values, got {data.size}"
            )
        self.data = data.reshape(self.shape)

    @property
    def rows(self) -> int:
        return self.shape[0]

    @property
    def cols(self) -> int:
        return self.shape[1]

    def at(self, i: int, j: int) -> float:
        return float(self.data[i, j])

    def set(self, value: float) -> None:
        """Fill every entry with value."""
        self.data.fill(value)

    def add(self, a: "FixedMatrix", b: "FixedMatrix") -> None:
        """Store a + b in this matrix. The receiver may be a or b."""
        self._check_same(a, b)
        np.add(a.data, b.data, out=self.data)

    def sub(self, a: "FixedMatrix", b: "FixedMatrix") -> None:
        """Store a - b in this matrix. The receiver may be a or b."""
        self._check_same(a, b)
        np.subtract(a.data, b.data, out=self.data)

    def mul(self, a: "FixedMatrix", b: "FixedMatrix") -> None:
        """Store the matrix product a . b in this matrix."""
        if a.cols != b.rows or (a.rows, b.cols) != self.shape:
            raise DimensionMismatch(
                f"cannot store {a.rows}x{a.cols} . {b.rows}x{b.cols} in a {self.rows}x{self.cols}"
            )
        # Copy through a temporary so the receiver may alias an operand
        self.data[...] = a.data @ b.data

    def apply(self, f: Callable[[int, int, float], float]) -> "FixedMatrix":
        """Return a new matrix with f(row, col, value) applied to every entry."""
        out = type(self)()
        for i in range(self.rows):
            for j in range(self.cols):
                out.data[i, j] = f(i, j, float(self.data[i, j]))
        return out

    def transpose(self) -> "FixedMatrix":
        return _wrap(self.data.T.copy())

    @property
    def T(self) -> "FixedMatrix":
        return self.transpose()

    def has_nan(self) -> bool:
        return bool(np.isnan(self.data).any())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data.tolist()})"

    def _check_same(self, a: "FixedMatrix", b: "FixedMatrix") -> None:
        if a.shape != self.shape or b.shape != self.shape:
            raise DimensionMismatch(
                f"element-wise operation needs {self.shape} operands, got {a.shape} and {b.shape}"
            )


class Mat3x3(FixedMatrix):
    """3x3 matrix."""

    shape = (3, 3)


class Vec3x1(FixedMatrix):
    """Column vector with 3 rows."""

    shape = (3, 1)

    def ravel(self) -> np.ndarray:
        return self.data[:, 0].copy()


class Vec1x3(FixedMatrix):
    """Row vector with 3 columns."""

    shape = (1, 3)

    def ravel(self) -> np.ndarray:
        return self.data[0, :].copy()


_TYPES_BY_SHAPE = {
    Mat3x3.shape: Mat3x3,
    Vec3x1.shape: Vec3x1,
    Vec1x3.shape: Vec1x3,
}


def _wrap(data: np.ndarray) -> FixedMatrix:
    try:
        cls = _TYPES_BY_SHAPE[data.shape]
    except KeyError:
        raise DimensionMismatch(f"no fixed-size type for shape {data.shape}") from None
    return cls(data)


def multiply(a: FixedMatrix, b: FixedMatrix) -> Union[FixedMatrix, float]:
    """Matrix product of two fixed-size operands.

    3x3 . 3x1 gives a Vec3x1, 3x1 . 1x3 gives a Mat3x3 (outer product) and
    1x3 . 3x1 gives a plain float (inner product).

    Raises:
        DimensionMismatch: If the inner dimensions differ
    """
    if a.cols != b.rows:
        raise DimensionMismatch(
            f"cannot multiply {a.rows}x{a.cols} by {b.rows}x{b.cols}"
        )
    product = a.data @ b.data
    if product.shape == (1, 1):
        return float(product[0, 0])
    return _wrap(product)


def symmetric_eigen_decomposition(m: Mat3x3) -> Tuple[np.ndarray, np.ndarray]:
    """Eigenvalues and eigenvectors of a real symmetric 3x3 matrix.

    Args:
        m: Symmetric matrix (only the lower triangle is read)

    Returns:
        Tuple of (eigenvalues, eigenvectors)
        - eigenvalues: (3,) array in ascending order
        - eigenvectors: (3, 3) array, column k is the unit eigenvector of eigenvalue k

    Raises:
        FactorizationError: If the matrix is not finite or the solver does not converge
    """
    if not np.all(np.isfinite(m.data)):
        raise FactorizationError(f"cannot factorize non-finite matrix {m.data.tolist()}")
    try:
        values, vectors = sla.eigh(m.data)
    except (sla.LinAlgError, ValueError) as e:
        raise FactorizationError(f"eigen decomposition failed: {e}") from e
    return values, vectors


def dominant_eigenpair(m: Mat3x3) -> Tuple[float, Vec1x3]:
    """Largest eigenvalue of m and its eigenvector as a row vector.

    Ties go to the first index in the solver's ascending order, so the
    result is deterministic for a given matrix.
    """
    values, vectors = symmetric_eigen_decomposition(m)
    idx = int(np.argmax(values))
    return float(values[idx]), Vec1x3(vectors[:, idx])
