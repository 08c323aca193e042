"""Adaptive Matrix.

This module provides Matrix, a facade that owns exactly one representation
(DenseMatrix or CSRMatrix) and picks between them from the data's density.

Design Philosophy:
    Callers should not need to know which representation is active. The
    facade decides at construction, forwards every operation to the active
    representation and rewraps the result in a new Matrix sharing the same
    threshold.

Backend Decision:
    density = nnz / (rows * cols)   (0 when rows * cols == 0)
    CSR if density <= threshold, DENSE otherwise. Default threshold is 0.2
    (see adaptmat.set_default_threshold).

    The decision runs at every construction entry point and again on an
    explicit repack(). Results of arithmetic are trusted as produced by the
    underlying algorithm (CSR * CSR stays CSR, CSR * Dense is dense) and are
    not re-decided.

Example:
    >>> M = Matrix.from_2d([[1, 0, 0, 0], [0, 0, 0, 2], [0, 0, 0, 0], [0, 0, 3, 0]])
    >>> M.backend
    <Backend.CSR: 'csr'>
    >>> for j in range(4):
    ...     M.set(2, j, 1.0)
    >>> M.repack().backend
    <Backend.DENSE: 'dense'>
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Union

import numpy as np

from .._config import _resolve_threshold
from .._error import DimensionMismatchError, MatrixTypeError
from ._backend import Backend, choose_backend
from ._base import MatrixBase, is_scalar, unwrap
from ._coo import Entry, aggregate_entries, check_entries_in_bounds, coerce_entries
from ._csr import CSRMatrix
from ._dense import DenseMatrix, _check_dim

__all__ = ['Matrix']

logger = logging.getLogger("adaptmat.matrix")


def _build(rows: int, cols: int, entries: List[Entry], threshold: float) -> MatrixBase:
    """Build the representation the threshold asks for from compact entries."""
    backend = choose_backend(rows, cols, len(entries), threshold)
    if backend is Backend.CSR:
        return CSRMatrix.from_coo(rows, cols, entries)
    dense = DenseMatrix(rows, cols)
    for e in entries:
        dense.data[e.row * cols + e.col] = e.value
    return dense


class Matrix(MatrixBase):
    """Matrix with automatic Dense / CSR backend selection.

    Attributes:
        backend: Active backend (Backend.CSR or Backend.DENSE).
        impl: Active representation.
        threshold: Density threshold used by construction and repack().

    Note:
        Backend choice is not revisited on set(); call repack() after bulk
        mutation.
    """

    __slots__ = ('_impl', '_threshold')

    def __init__(self, impl: MatrixBase, threshold: Optional[float] = None):
        """Wrap an existing representation.

        A bare DenseMatrix or CSRMatrix is adopted: the facade takes it
        over and the caller should not mutate it afterwards. Another Matrix
        is copied, so two facades never share a representation.

        Note:
            Prefer the factory methods; see also wrap().

        Raises:
            TypeError: If impl is not a DenseMatrix or CSRMatrix.
        """
        if isinstance(impl, Matrix):
            impl = impl._impl.copy()
        impl = unwrap(impl)
        if not isinstance(impl, (DenseMatrix, CSRMatrix)):
            raise MatrixTypeError(
                f"Matrix wraps DenseMatrix or CSRMatrix, got {type(impl).__name__}"
            )
        self._impl = impl
        self._threshold = _resolve_threshold(threshold)

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @staticmethod
    def choose_backend(
        rows: int,
        cols: int,
        nnz: int,
        threshold: Optional[float] = None,
    ) -> Backend:
        """Backend the density rule picks for the given fill."""
        return choose_backend(rows, cols, nnz, threshold)

    @classmethod
    def wrap(cls, impl: MatrixBase, threshold: Optional[float] = None) -> 'Matrix':
        """Wrap a representation without re-deciding the backend.

        Wrapping another Matrix copies its representation.
        """
        return cls(impl, threshold)

    @classmethod
    def zeros(cls, rows: int, cols: int, threshold: Optional[float] = None) -> 'Matrix':
        """All-zero matrix (density 0, always CSR)."""
        return cls(CSRMatrix.zeros(rows, cols), threshold)

    @classmethod
    def identity(cls, n: int, threshold: Optional[float] = None) -> 'Matrix':
        """n x n identity; CSR once 1/n <= threshold."""
        n = _check_dim(n, "n")
        return cls.from_coo(n, n, [Entry(i, i, 1.0) for i in range(n)], threshold)

    @classmethod
    def from_2d(
        cls,
        values: Sequence[Sequence[float]],
        threshold: Optional[float] = None,
    ) -> 'Matrix':
        """Build from a rectangular nested sequence.

        Raises:
            DimensionMismatchError: If rows differ in length.
        """
        threshold = _resolve_threshold(threshold)
        rows = len(values)
        cols = len(values[0]) if rows > 0 else 0
        entries = []
        for i, row in enumerate(values):
            if len(row) != cols:
                raise DimensionMismatchError(
                    f"Row {i} has length {len(row)}, expected {cols}"
                )
            for j, v in enumerate(row):
                if v != 0:
                    entries.append((i, j, v))
        return cls(_build(rows, cols, coerce_entries(entries), threshold), threshold)

    @classmethod
    def from_coo(
        cls,
        rows: int,
        cols: int,
        entries: Iterable[Any],
        threshold: Optional[float] = None,
    ) -> 'Matrix':
        """Build from (row, col, value) triplets.

        Duplicate positions are summed and exact zeros dropped before the
        density estimate, so both backends hold the same values.

        Raises:
            IndexOutOfBoundsError: If any entry lies outside the shape.
        """
        threshold = _resolve_threshold(threshold)
        rows = _check_dim(rows, "rows")
        cols = _check_dim(cols, "cols")
        coerced = coerce_entries(entries)
        check_entries_in_bounds(coerced, rows, cols)
        return cls(_build(rows, cols, aggregate_entries(coerced), threshold), threshold)

    @classmethod
    def from_numpy(cls, array: Any, threshold: Optional[float] = None) -> 'Matrix':
        """Build from a 2-D array-like (copied)."""
        dense = DenseMatrix.from_numpy(array)
        return cls(dense, threshold).repack()

    @classmethod
    def from_scipy(cls, mat: Any, threshold: Optional[float] = None) -> 'Matrix':
        """Build from a scipy.sparse matrix (copied)."""
        return cls(CSRMatrix.from_scipy(mat), threshold).repack()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def rows(self) -> int:
        return self._impl.rows

    @property
    def cols(self) -> int:
        return self._impl.cols

    @property
    def nnz(self) -> int:
        return self._impl.nnz

    @property
    def backend(self) -> Backend:
        """Active backend."""
        return self._impl.backend

    @property
    def impl(self) -> MatrixBase:
        """Active representation."""
        return self._impl

    @property
    def threshold(self) -> float:
        return self._threshold

    def _representation(self) -> MatrixBase:
        return self._impl

    def _rewrap(self, result: Any) -> Any:
        if isinstance(result, (DenseMatrix, CSRMatrix)):
            return Matrix(result, self._threshold)
        return result

    # =========================================================================
    # Delegation
    # =========================================================================

    def get(self, i: int, j: int) -> float:
        return self._impl.get(i, j)

    def set(self, i: int, j: int, value: float) -> None:
        self._impl.set(i, j, value)

    def add(self, other: MatrixBase) -> 'Matrix':
        return self._rewrap(self._impl.add(unwrap(other)))

    def sub(self, other: MatrixBase) -> 'Matrix':
        return self._rewrap(self._impl.sub(unwrap(other)))

    def mul(self, other: Union[float, MatrixBase]) -> 'Matrix':
        if is_scalar(other):
            return self._rewrap(self._impl.mul(other))
        return self._rewrap(self._impl.mul(unwrap(other)))

    def transpose(self) -> 'Matrix':
        return self._rewrap(self._impl.transpose())

    def matvec(self, x: Any) -> np.ndarray:
        return self._impl.matvec(x)

    def to_dense(self) -> DenseMatrix:
        return self._impl.to_dense()

    def to_coo(self) -> List[Entry]:
        return self._impl.to_coo()

    def copy(self) -> 'Matrix':
        """Deep copy with the same backend and threshold."""
        return Matrix(self._impl.copy(), self._threshold)

    # =========================================================================
    # Repack
    # =========================================================================

    def repack(self) -> 'Matrix':
        """Re-apply the backend decision to the current contents.

        Counts non-zeros (buffer length for CSR, non-zero cells for dense)
        and converts only when the decision disagrees with the active
        backend.

        Returns:
            self (for chaining).
        """
        rows, cols = self.rows, self.cols
        target = choose_backend(rows, cols, self._impl.nnz, self._threshold)
        current = self._impl.backend
        if target is current:
            return self

        if target is Backend.CSR:
            self._impl = CSRMatrix.from_dense(self._impl)
        else:
            self._impl = self._impl.to_dense()
        logger.debug(
            f"Repacked {rows}x{cols} matrix from {current.value} to {target.value} "
            f"(nnz={self._impl.nnz}, threshold={self._threshold})"
        )
        return self

    def __repr__(self) -> str:
        return (
            f"Matrix(shape={self.shape}, nnz={self.nnz}, "
            f"backend={self.backend.value}, threshold={self._threshold})"
        )
