"""
DenseMatrix - Row-major dense matrix.

Storage is a single contiguous 1-D numpy buffer of length ``rows * cols``;
element (i, j) lives at offset ``i * cols + j``.

DenseMatrix is the reference implementation and the fallback target for
every operation that lacks a sparse-specific path. Any operand that is not
dense is densified before the dense kernel runs, so results are always
DenseMatrix instances.

Every result owns a freshly allocated buffer; ``to_dense()`` copies.

Example:
    >>> A = DenseMatrix.from_2d([[1, 2], [3, 4]])
    >>> A.mul(A).to_list()
    [[7.0, 10.0], [15.0, 22.0]]
"""

from __future__ import annotations

import logging
from operator import index as _as_index
from typing import Any, List, Optional, Sequence, Union

import numpy as np

from .._config import _get_real_dtype
from .._error import DimensionMismatchError, InvalidStructureError, MatrixTypeError
from ._backend import Backend
from ._base import (
    MatrixBase,
    as_vector,
    check_index,
    check_matmul_shape,
    check_same_shape,
    is_matrix_like,
    is_scalar,
    unwrap,
)
from ._coo import Entry

__all__ = ['DenseMatrix', 'as_dense']

logger = logging.getLogger("adaptmat.matrix")


def _check_dim(value: Any, name: str) -> int:
    try:
        value = _as_index(value)
    except TypeError:
        raise InvalidStructureError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidStructureError(f"{name} must be non-negative, got {value}")
    return value


class DenseMatrix(MatrixBase):
    """
    Dense matrix backed by a flat row-major buffer.

    Attributes:
        rows: Number of rows
        cols: Number of columns
        data: The underlying 1-D buffer (length rows * cols)
    """

    __slots__ = ("_rows", "_cols", "_data")

    def __init__(self, rows: int, cols: int, data: Optional[Any] = None):
        """
        Create a dense matrix.

        Args:
            rows: Number of rows (integer >= 0)
            cols: Number of columns (integer >= 0)
            data: Optional buffer with rows * cols values in row-major
                order. It is always copied into a new buffer of the
                configured dtype, so later writes to ``data`` do not reach
                the matrix. Zero-filled when omitted.

        Raises:
            InvalidStructureError: If the shape is invalid or the buffer
                length differs from rows * cols.
        """
        self._rows = _check_dim(rows, "rows")
        self._cols = _check_dim(cols, "cols")
        n = self._rows * self._cols
        dtype = _get_real_dtype()

        if data is None:
            self._data = np.zeros(n, dtype=dtype)
            return

        buf = np.array(data, dtype=dtype).reshape(-1)
        if buf.shape[0] != n:
            raise InvalidStructureError(
                f"Data size mismatch: expected {n} values, got {buf.shape[0]}"
            )
        self._data = buf

    @classmethod
    def _adopt(cls, rows: int, cols: int, buf: np.ndarray) -> "DenseMatrix":
        """Take ownership of a freshly computed flat buffer without copying."""
        out = cls.__new__(cls)
        out._rows = rows
        out._cols = cols
        out._data = buf.astype(_get_real_dtype(), copy=False).reshape(-1)
        return out

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "DenseMatrix":
        """Create an all-zero matrix."""
        return cls(rows, cols)

    @classmethod
    def identity(cls, n: int) -> "DenseMatrix":
        """Create the n x n identity matrix."""
        out = cls(n, n)
        out._data[:: n + 1] = 1.0
        return out

    @classmethod
    def from_2d(cls, values: Sequence[Sequence[float]]) -> "DenseMatrix":
        """
        Create from a rectangular nested sequence.

        Raises:
            DimensionMismatchError: If rows differ in length.
        """
        rows = len(values)
        cols = len(values[0]) if rows > 0 else 0
        for r, row in enumerate(values):
            if len(row) != cols:
                raise DimensionMismatchError(
                    f"Row {r} has length {len(row)}, expected {cols}"
                )
        out = cls(rows, cols)
        if rows and cols:
            out._data[:] = np.asarray(values, dtype=out._data.dtype).reshape(-1)
        return out

    @classmethod
    def from_numpy(cls, array: Any) -> "DenseMatrix":
        """Create from a 2-D array-like (always copies)."""
        arr = np.asarray(array, dtype=_get_real_dtype())
        if arr.ndim != 2:
            raise DimensionMismatchError(f"Expected a 2-D array, got ndim={arr.ndim}")
        return cls(arr.shape[0], arr.shape[1], arr.reshape(-1))

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def rows(self) -> int:
        """Number of rows."""
        return self._rows

    @property
    def cols(self) -> int:
        """Number of columns."""
        return self._cols

    @property
    def data(self) -> np.ndarray:
        """Row-major buffer (mutations are visible to this matrix)."""
        return self._data

    @property
    def nnz(self) -> int:
        """Number of non-zero cells."""
        return int(np.count_nonzero(self._data))

    @property
    def backend(self) -> Backend:
        return Backend.DENSE

    # =========================================================================
    # Element Access
    # =========================================================================

    def _offset(self, i: int, j: int) -> int:
        i, j = check_index(i, j, self._rows, self._cols)
        return i * self._cols + j

    def get(self, i: int, j: int) -> float:
        """Return A[i, j]."""
        return float(self._data[self._offset(i, j)])

    def set(self, i: int, j: int, value: float) -> None:
        """Write A[i, j] = value."""
        if not is_scalar(value):
            raise MatrixTypeError(f"Matrix values must be real numbers, got {value!r}")
        self._data[self._offset(i, j)] = value

    def row(self, i: int) -> np.ndarray:
        """Copy of row i."""
        check_index(i, 0, self._rows, 1)
        start = i * self._cols
        return self._data[start:start + self._cols].copy()

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def add(self, other: MatrixBase) -> "DenseMatrix":
        """
        Elementwise A + B.

        Returns:
            DenseMatrix (non-dense operands are densified first)

        Raises:
            DimensionMismatchError: If shapes differ
        """
        check_same_shape(self, other, "add")
        rhs = as_dense(other)
        return DenseMatrix._adopt(self._rows, self._cols, self._data + rhs._data)

    def sub(self, other: MatrixBase) -> "DenseMatrix":
        """
        Elementwise A - B.

        Raises:
            DimensionMismatchError: If shapes differ
        """
        check_same_shape(self, other, "sub")
        rhs = as_dense(other)
        return DenseMatrix._adopt(self._rows, self._cols, self._data - rhs._data)

    def mul(self, other: Union[float, MatrixBase]) -> "DenseMatrix":
        """
        Scalar multiple or matrix product.

        The matrix product runs an i-k-j loop that skips zero multiplicands.

        Raises:
            DimensionMismatchError: If self.cols != other.rows
            TypeError: If other is neither a real number nor a matrix
        """
        if is_scalar(other):
            return DenseMatrix._adopt(self._rows, self._cols, self._data * other)
        if not is_matrix_like(other):
            raise MatrixTypeError(f"Cannot multiply DenseMatrix by {type(other).__name__}")

        check_matmul_shape(self, other)
        rhs = as_dense(other)
        inner, out_cols = self._cols, rhs._cols

        out = np.zeros(self._rows * out_cols, dtype=self._data.dtype)
        a = self._data.reshape(self._rows, inner)
        b = rhs._data.reshape(inner, out_cols)
        c = out.reshape(self._rows, out_cols)
        for i in range(self._rows):
            arow = a[i]
            for k in np.flatnonzero(arow):
                c[i] += arow[k] * b[k]
        return DenseMatrix._adopt(self._rows, out_cols, out)

    def transpose(self) -> "DenseMatrix":
        """Index-remap copy: out[j, i] = A[i, j]."""
        remapped = self._data.reshape(self._rows, self._cols).T.copy()
        return DenseMatrix._adopt(self._cols, self._rows, remapped.reshape(-1))

    def matvec(self, x: Any) -> np.ndarray:
        """
        y = A x.

        Raises:
            DimensionMismatchError: If len(x) != cols
        """
        vec = as_vector(x, self._cols)
        y = np.zeros(self._rows, dtype=self._data.dtype)
        a = self._data.reshape(self._rows, self._cols)
        for i in range(self._rows):
            y[i] = np.dot(a[i], vec)
        return y

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_dense(self) -> "DenseMatrix":
        """Independent copy (never aliases this buffer)."""
        return DenseMatrix._adopt(self._rows, self._cols, self._data.copy())

    def copy(self) -> "DenseMatrix":
        """Deep copy."""
        return self.to_dense()

    def to_coo(self) -> List[Entry]:
        """Non-zero cells as entries, row-major."""
        if self._cols == 0:
            return []
        flat = np.flatnonzero(self._data)
        return [
            Entry(int(k // self._cols), int(k % self._cols), float(self._data[k]))
            for k in flat
        ]


def as_dense(obj: Any) -> DenseMatrix:
    """
    Return a DenseMatrix view of any matrix-like operand.

    DenseMatrix operands are returned unchanged (read-only use), facades are
    unwrapped, and everything else goes through ``to_dense()``. Objects from
    outside this package whose ``to_dense()`` is not a DenseMatrix are read
    element by element.
    """
    obj = unwrap(obj)
    if isinstance(obj, DenseMatrix):
        return obj
    if isinstance(obj, MatrixBase):
        logger.debug(f"Densifying {obj.backend.value} operand {obj.shape}")
        return obj.to_dense()

    dense = obj.to_dense()
    if isinstance(dense, DenseMatrix):
        return dense
    out = DenseMatrix(obj.rows, obj.cols)
    for i in range(obj.rows):
        for j in range(obj.cols):
            out._data[i * obj.cols + j] = obj.get(i, j)
    return out
