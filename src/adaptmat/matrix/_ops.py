"""High-Level Matrix Operations.

Functional entry points over the matrix classes:
- Construction (from_2d, from_coo, zeros, identity), all returning the
  adaptive Matrix
- Cross-platform conversions (numpy, scipy)

Example:
    >>> from adaptmat.matrix import from_2d, to_numpy
    >>> M = from_2d([[1, 0], [0, 0]])
    >>> to_numpy(M)
    array([[1., 0.],
           [0., 0.]])
"""

from typing import Any, Iterable, Optional, Sequence

import numpy as np

from .._error import MatrixTypeError
from ._base import MatrixBase, _as_array, is_matrix_like
from ._csr import CSRMatrix
from ._matrix import Matrix

__all__ = [
    # Construction
    'from_2d',
    'from_coo',
    'zeros',
    'identity',

    # Cross-platform
    'from_numpy',
    'from_scipy',
    'to_numpy',
    'to_scipy',

    # Type checking
    'is_matrix_like',
]


# =============================================================================
# Construction
# =============================================================================

def from_2d(values: Sequence[Sequence[float]], threshold: Optional[float] = None) -> Matrix:
    """Adaptive matrix from a rectangular nested sequence."""
    return Matrix.from_2d(values, threshold)


def from_coo(
    rows: int,
    cols: int,
    entries: Iterable[Any],
    threshold: Optional[float] = None,
) -> Matrix:
    """Adaptive matrix from (row, col, value) triplets."""
    return Matrix.from_coo(rows, cols, entries, threshold)


def zeros(rows: int, cols: int, threshold: Optional[float] = None) -> Matrix:
    """Adaptive all-zero matrix."""
    return Matrix.zeros(rows, cols, threshold)


def identity(n: int, threshold: Optional[float] = None) -> Matrix:
    """Adaptive n x n identity matrix."""
    return Matrix.identity(n, threshold)


# =============================================================================
# Cross-Platform Conversion
# =============================================================================

def from_numpy(array: Any, threshold: Optional[float] = None) -> Matrix:
    """Adaptive matrix from a 2-D numpy array (copied)."""
    return Matrix.from_numpy(array, threshold)


def from_scipy(mat: Any, threshold: Optional[float] = None) -> Matrix:
    """Adaptive matrix from any scipy.sparse matrix (copied).

    Raises:
        ImportError: If scipy is not installed.
    """
    return Matrix.from_scipy(mat, threshold)


def to_numpy(mat: Any) -> np.ndarray:
    """2-D ndarray copy of any matrix-like object."""
    if not is_matrix_like(mat):
        raise MatrixTypeError(f"Expected a matrix, got {type(mat).__name__}")
    return _as_array(mat)


def to_scipy(mat: Any) -> Any:
    """scipy.sparse.csr_matrix copy of any matrix-like object.

    Raises:
        ImportError: If scipy is not installed.
    """
    if not is_matrix_like(mat):
        raise MatrixTypeError(f"Expected a matrix, got {type(mat).__name__}")
    if isinstance(mat, MatrixBase):
        impl = mat._representation()
        if isinstance(impl, CSRMatrix):
            return impl.to_scipy()
    return CSRMatrix.from_dense(mat).to_scipy()
