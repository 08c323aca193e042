"""CSR (Compressed Sparse Row) Matrix.

This module provides CSRMatrix, the sparse engine of adaptmat.

Storage:
    values:    non-zero entries, row-major then column-ascending
    col_index: column of each entry (same length and order as values)
    row_ptr:   length rows + 1; row r occupies [row_ptr[r], row_ptr[r+1])

Invariants (hold after every construction or mutation):
    1. len(values) == len(col_index) == nnz
    2. row_ptr is non-decreasing, row_ptr[0] == 0, row_ptr[rows] == nnz
    3. col_index is strictly increasing inside each row
    4. no entry holds an exact zero produced by cancellation
    5. every column index lies in [0, cols)

Direct buffer construction checks 1 and 2 eagerly; 3 is the caller's
responsibility on that path. Every other constructor and every operation
produces buffers satisfying all five.

Fast Paths:
    CSR + CSR, CSR - CSR  -> CSR    (row-wise sorted merge)
    CSR * CSR             -> CSR    (Gustavson sparse accumulation)
    CSR * Dense           -> Dense  (sparse-times-dense kernel)
    CSR * scalar          -> CSR    (values scaled, structure copied)

Anything else densifies: CSR + other goes through DenseMatrix.add, and
CSR * other densifies the operand and uses the CSR * Dense kernel.

Example:
    >>> A = CSRMatrix.from_coo(2, 3, [(0, 0, 1), (0, 2, 2), (1, 1, 3)])
    >>> B = CSRMatrix.from_coo(3, 2, [(0, 0, 5), (2, 0, 7), (2, 1, -1), (1, 1, 1)])
    >>> A.mul(B).to_list()
    [[19.0, -2.0], [0.0, 3.0]]
"""

import logging
import operator
from typing import Any, Callable, Iterable, List, Tuple, Union

import numpy as np

from .._config import _get_index_dtype, _get_real_dtype
from .._error import InvalidStructureError, MatrixTypeError
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
from ._coo import (
    Entry,
    aggregate_entries,
    check_entries_in_bounds,
    coerce_entries,
    entries_from_arrays,
)
from ._dense import DenseMatrix, _check_dim, as_dense

__all__ = ['CSRMatrix']

logger = logging.getLogger("adaptmat.matrix")


class CSRMatrix(MatrixBase):
    """Compressed Sparse Row matrix.

    Attributes:
        rows: Number of rows.
        cols: Number of columns.
        nnz: Number of stored entries.
        values: Non-zero values buffer.
        col_index: Column index buffer.
        row_ptr: Row offset buffer (length rows + 1).

    Note:
        ``set`` rebuilds every buffer and costs O(nnz log nnz). Build once
        with ``from_coo`` when many scattered writes are needed.
    """

    __slots__ = ('_rows', '_cols', '_values', '_col_index', '_row_ptr')

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(
        self,
        rows: int,
        cols: int,
        values: Any,
        col_index: Any,
        row_ptr: Any,
    ):
        """Initialize from raw buffers.

        Note:
            Prefer the factory methods (from_coo, from_dense, zeros).

        Args:
            rows: Number of rows.
            cols: Number of columns.
            values: Non-zero values.
            col_index: Column index per value.
            row_ptr: Row offsets, length rows + 1.

            All three are copied, so the caller keeps no handle on the
            matrix storage.

        Raises:
            InvalidStructureError: If lengths or row offsets are inconsistent.
        """
        self._rows = _check_dim(rows, "rows")
        self._cols = _check_dim(cols, "cols")
        self._values = np.array(values, dtype=_get_real_dtype()).reshape(-1)
        self._col_index = np.array(col_index, dtype=_get_index_dtype()).reshape(-1)
        self._row_ptr = np.array(row_ptr, dtype=_get_index_dtype()).reshape(-1)
        self._validate()

    def _validate(self) -> None:
        """Check length and prefix consistency of the buffers."""
        nnz = self._values.shape[0]
        if self._col_index.shape[0] != nnz:
            raise InvalidStructureError(
                f"values/col_index size mismatch: {nnz} vs {self._col_index.shape[0]}"
            )
        if self._row_ptr.shape[0] != self._rows + 1:
            raise InvalidStructureError(
                f"row_ptr size mismatch: expected {self._rows + 1}, got {self._row_ptr.shape[0]}"
            )
        if self._row_ptr[0] != 0 or self._row_ptr[-1] != nnz:
            raise InvalidStructureError(
                f"row_ptr inconsistent: row_ptr[0]={self._row_ptr[0]}, "
                f"row_ptr[-1]={self._row_ptr[-1]}, nnz={nnz}"
            )
        if self._rows > 0 and np.any(np.diff(self._row_ptr) < 0):
            raise InvalidStructureError("row_ptr must be non-decreasing")

    @classmethod
    def _pruned(cls, rows: int, cols: int, values: Any, col_index: Any, row_ptr: Any) -> 'CSRMatrix':
        """Build from column-sorted rows, dropping every value that is zero
        once cast to the configured real dtype."""
        values = np.asarray(values, dtype=_get_real_dtype())
        col_index = np.asarray(col_index, dtype=_get_index_dtype())
        row_ptr = np.asarray(row_ptr, dtype=_get_index_dtype())
        keep = values != 0.0
        if not keep.all():
            row_of = np.repeat(np.arange(rows), np.diff(row_ptr))
            counts = np.bincount(row_of[keep], minlength=rows)
            row_ptr = np.concatenate(([0], np.cumsum(counts)))
            values = values[keep]
            col_index = col_index[keep]
        return cls(rows, cols, values, col_index, row_ptr)

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_coo(
        cls,
        rows: int,
        cols: int,
        entries: Iterable[Any],
    ) -> 'CSRMatrix':
        """Build from (row, col, value) triplets.

        Entries may arrive in any order and may repeat a position; repeated
        positions are summed and positions whose value is exactly zero are
        not stored.

        Args:
            rows: Number of rows.
            cols: Number of columns.
            entries: Iterable of triplets (tuples, Entry or i/j/v dicts).

        Returns:
            New CSRMatrix.

        Raises:
            IndexOutOfBoundsError: If any entry lies outside the shape. No
                structure is built in that case.
        """
        rows = _check_dim(rows, "rows")
        cols = _check_dim(cols, "cols")
        coerced = coerce_entries(entries)
        check_entries_in_bounds(coerced, rows, cols)
        compact = aggregate_entries(coerced)

        # Counting pass, then prefix sum.
        row_ptr = [0] * (rows + 1)
        for e in compact:
            row_ptr[e.row + 1] += 1
        for r in range(rows):
            row_ptr[r + 1] += row_ptr[r]

        nnz = row_ptr[rows]
        values = np.empty(nnz, dtype=_get_real_dtype())
        col_index = np.empty(nnz, dtype=_get_index_dtype())
        cursor = row_ptr[:-1]
        for e in compact:
            k = cursor[e.row]
            cursor[e.row] += 1
            values[k] = e.value
            col_index[k] = e.col

        # Values that underflow at the configured precision are dropped here.
        return cls._pruned(rows, cols, values, col_index, row_ptr)

    @classmethod
    def from_dense(cls, dense: Any) -> 'CSRMatrix':
        """Build from a dense matrix (or any matrix-like object).

        Scans row-major and keeps every non-zero cell.
        """
        src = as_dense(dense)
        return cls.from_coo(src.rows, src.cols, src.to_coo())

    @classmethod
    def from_2d(cls, values: List[List[float]]) -> 'CSRMatrix':
        """Build from a rectangular nested sequence."""
        return cls.from_dense(DenseMatrix.from_2d(values))

    @classmethod
    def zeros(cls, rows: int, cols: int) -> 'CSRMatrix':
        """Create a matrix with no stored entries."""
        rows = _check_dim(rows, "rows")
        return cls(rows, cols, [], [], [0] * (rows + 1))

    @classmethod
    def identity(cls, n: int) -> 'CSRMatrix':
        """Create the n x n identity matrix."""
        n = _check_dim(n, "n")
        return cls(n, n, [1.0] * n, list(range(n)), list(range(n + 1)))

    @classmethod
    def from_scipy(cls, mat: Any) -> 'CSRMatrix':
        """Create from any scipy.sparse matrix (data is copied).

        Duplicates are summed and explicit zeros dropped.

        Raises:
            ImportError: If scipy is not installed.
            TypeError: If ``mat`` is not a scipy sparse matrix.
        """
        try:
            import scipy.sparse as sp
        except ImportError:
            raise ImportError("scipy required for from_scipy()")

        if not sp.issparse(mat):
            raise MatrixTypeError(f"Expected a scipy.sparse matrix, got {type(mat).__name__}")

        coo = mat.tocoo()
        entries = entries_from_arrays(coo.row, coo.col, coo.data)
        return cls.from_coo(coo.shape[0], coo.shape[1], entries)

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
    def nnz(self) -> int:
        """Number of stored entries."""
        return int(self._values.shape[0])

    @property
    def backend(self) -> Backend:
        return Backend.CSR

    @property
    def values(self) -> np.ndarray:
        """Non-zero values buffer."""
        return self._values

    @property
    def col_index(self) -> np.ndarray:
        """Column index buffer."""
        return self._col_index

    @property
    def row_ptr(self) -> np.ndarray:
        """Row offset buffer."""
        return self._row_ptr

    # =========================================================================
    # Element Access
    # =========================================================================

    def get(self, i: int, j: int) -> float:
        """Return A[i, j] (0.0 when not stored).

        Binary search inside row i's sorted column slice.
        """
        i, j = check_index(i, j, self._rows, self._cols)
        start = int(self._row_ptr[i])
        end = int(self._row_ptr[i + 1])
        k = start + int(np.searchsorted(self._col_index[start:end], j))
        if k < end and self._col_index[k] == j:
            return float(self._values[k])
        return 0.0

    def set(self, i: int, j: int, value: float) -> None:
        """Write A[i, j] = value by rebuilding the whole structure.

        All entries are materialised as COO, the target is replaced or
        appended, exact zeros are filtered and the buffers are rebuilt.
        """
        i, j = check_index(i, j, self._rows, self._cols)
        if not is_scalar(value):
            raise MatrixTypeError(f"Matrix values must be real numbers, got {value!r}")

        entries = self.to_coo()
        for pos, e in enumerate(entries):
            if e.row == i and e.col == j:
                entries[pos] = Entry(i, j, float(value))
                break
        else:
            entries.append(Entry(i, j, float(value)))

        rebuilt = CSRMatrix.from_coo(
            self._rows, self._cols, [e for e in entries if e.value != 0.0]
        )
        logger.debug(f"CSR set({i}, {j}) rebuilt {self.shape} with nnz={rebuilt.nnz}")
        self._values = rebuilt._values
        self._col_index = rebuilt._col_index
        self._row_ptr = rebuilt._row_ptr

    def row(self, i: int) -> Tuple[np.ndarray, np.ndarray]:
        """Copies of row i's (col_index, values) slices."""
        check_index(i, 0, self._rows, 1)
        start, end = int(self._row_ptr[i]), int(self._row_ptr[i + 1])
        return self._col_index[start:end].copy(), self._values[start:end].copy()

    def row_nnz(self, i: int) -> int:
        """Number of stored entries in row i."""
        check_index(i, 0, self._rows, 1)
        return int(self._row_ptr[i + 1] - self._row_ptr[i])

    # =========================================================================
    # Add / Sub
    # =========================================================================

    def _merge(self, other: 'CSRMatrix', combine: Callable[[float, float], float]) -> 'CSRMatrix':
        """Row-wise sorted merge of two CSR matrices.

        Columns present on one side only are passed through (the right side
        through ``combine(0, b)``) and matching columns are combined. Output
        rows come out column-sorted; zeros, including stored zeros carried
        over from an operand, are dropped when the result is built.
        """
        a_ptr, a_col, a_val = self._row_ptr.tolist(), self._col_index.tolist(), self._values.tolist()
        b_ptr, b_col, b_val = other._row_ptr.tolist(), other._col_index.tolist(), other._values.tolist()

        out_ptr = [0] * (self._rows + 1)
        out_col: List[int] = []
        out_val: List[float] = []

        for i in range(self._rows):
            a, a_end = a_ptr[i], a_ptr[i + 1]
            b, b_end = b_ptr[i], b_ptr[i + 1]
            while a < a_end or b < b_end:
                if b >= b_end or (a < a_end and a_col[a] < b_col[b]):
                    out_col.append(a_col[a])
                    out_val.append(a_val[a])
                    a += 1
                elif a >= a_end or b_col[b] < a_col[a]:
                    out_col.append(b_col[b])
                    out_val.append(combine(0.0, b_val[b]))
                    b += 1
                else:
                    out_col.append(a_col[a])
                    out_val.append(combine(a_val[a], b_val[b]))
                    a += 1
                    b += 1
            out_ptr[i + 1] = len(out_col)

        return CSRMatrix._pruned(self._rows, self._cols, out_val, out_col, out_ptr)

    def add(self, other: MatrixBase) -> MatrixBase:
        """A + B.

        Returns:
            CSRMatrix when B is CSR, DenseMatrix otherwise.

        Raises:
            DimensionMismatchError: If shapes differ.
        """
        check_same_shape(self, other, "add")
        rhs = unwrap(other)
        if getattr(rhs, 'backend', None) is Backend.CSR:
            return self._merge(rhs, operator.add)
        return self.to_dense().add(rhs)

    def sub(self, other: MatrixBase) -> MatrixBase:
        """A - B.

        Returns:
            CSRMatrix when B is CSR, DenseMatrix otherwise.

        Raises:
            DimensionMismatchError: If shapes differ.
        """
        check_same_shape(self, other, "sub")
        rhs = unwrap(other)
        if getattr(rhs, 'backend', None) is Backend.CSR:
            return self._merge(rhs, operator.sub)
        return self.to_dense().sub(rhs)

    # =========================================================================
    # Multiplication
    # =========================================================================

    def mul(self, other: Union[float, MatrixBase]) -> MatrixBase:
        """Scalar multiple or matrix product.

        Returns:
            CSRMatrix for a scalar or a CSR operand, DenseMatrix otherwise.

        Raises:
            DimensionMismatchError: If self.cols != other.rows.
            TypeError: If other is neither a real number nor a matrix.
        """
        if is_scalar(other):
            return self._scale(other)
        if not is_matrix_like(other):
            raise MatrixTypeError(f"Cannot multiply CSRMatrix by {type(other).__name__}")

        check_matmul_shape(self, other)
        rhs = unwrap(other)
        backend = getattr(rhs, 'backend', None)
        if backend is Backend.CSR:
            return self._mul_csr(rhs)
        return self._mul_dense(as_dense(rhs))

    def _scale(self, factor: float) -> 'CSRMatrix':
        # A zero factor keeps the structure (stored zeros are not pruned).
        return CSRMatrix(
            self._rows,
            self._cols,
            self._values * factor,
            self._col_index,
            self._row_ptr,
        )

    def _mul_dense(self, other: DenseMatrix) -> DenseMatrix:
        """For every stored (i, k, a), accumulate a * B[k, :] into row i."""
        out_cols = other.cols
        out = np.zeros(self._rows * out_cols, dtype=_get_real_dtype())
        b = other.data.reshape(self._cols, out_cols)
        c = out.reshape(self._rows, out_cols)
        for i in range(self._rows):
            start, end = int(self._row_ptr[i]), int(self._row_ptr[i + 1])
            for k in range(start, end):
                c[i] += self._values[k] * b[self._col_index[k]]
        return DenseMatrix._adopt(self._rows, out_cols, out)

    def _mul_csr(self, other: 'CSRMatrix') -> 'CSRMatrix':
        """Gustavson row-wise product.

        Row i of the result accumulates a * B[k, :] for every stored
        (i, k, a) into a dict keyed by column. Zero partial products are
        skipped. When the row is complete its columns are sorted, entries
        that summed to exact zero are pruned and the row is appended, so the
        output satisfies every CSR invariant without a global sort.
        """
        a_ptr, a_col, a_val = self._row_ptr.tolist(), self._col_index.tolist(), self._values.tolist()
        b_ptr, b_col, b_val = other._row_ptr.tolist(), other._col_index.tolist(), other._values.tolist()

        out_ptr = [0] * (self._rows + 1)
        out_col: List[int] = []
        out_val: List[float] = []

        for i in range(self._rows):
            acc = {}
            for kk in range(a_ptr[i], a_ptr[i + 1]):
                a = a_val[kk]
                if a == 0.0:
                    continue
                k = a_col[kk]
                for t in range(b_ptr[k], b_ptr[k + 1]):
                    prod = a * b_val[t]
                    if prod == 0.0:
                        continue
                    j = b_col[t]
                    acc[j] = acc.get(j, 0.0) + prod

            for j in sorted(acc):
                v = acc[j]
                if v != 0.0:
                    out_col.append(j)
                    out_val.append(v)
            out_ptr[i + 1] = len(out_col)

        # A nonzero double may still underflow at float32.
        return CSRMatrix._pruned(self._rows, other.cols, out_val, out_col, out_ptr)

    # =========================================================================
    # Transpose / Matvec
    # =========================================================================

    def transpose(self) -> 'CSRMatrix':
        """Re-emit every (i, j, v) as (j, i, v) and rebuild from COO."""
        swapped = [Entry(e.col, e.row, e.value) for e in self.to_coo()]
        return CSRMatrix.from_coo(self._cols, self._rows, swapped)

    def matvec(self, x: Any) -> np.ndarray:
        """y = A x over stored entries only.

        Raises:
            DimensionMismatchError: If len(x) != cols.
        """
        vec = as_vector(x, self._cols)
        y = np.zeros(self._rows, dtype=_get_real_dtype())
        for i in range(self._rows):
            start, end = int(self._row_ptr[i]), int(self._row_ptr[i + 1])
            if end > start:
                y[i] = np.dot(self._values[start:end], vec[self._col_index[start:end]])
        return y

    # =========================================================================
    # Conversion
    # =========================================================================

    def _row_of_entry(self) -> np.ndarray:
        return np.repeat(np.arange(self._rows, dtype=_get_index_dtype()), np.diff(self._row_ptr))

    def to_dense(self) -> DenseMatrix:
        """Scatter stored entries into a fresh zero buffer."""
        out = np.zeros(self._rows * self._cols, dtype=_get_real_dtype())
        if self.nnz:
            out[self._row_of_entry() * self._cols + self._col_index] = self._values
        return DenseMatrix._adopt(self._rows, self._cols, out)

    def to_coo(self) -> List[Entry]:
        """Stored entries in row-major, column-ascending order."""
        return [
            Entry(int(i), int(j), float(v))
            for i, j, v in zip(self._row_of_entry(), self._col_index, self._values)
        ]

    def to_scipy(self) -> Any:
        """Convert to scipy.sparse.csr_matrix (buffers are copied).

        Raises:
            ImportError: If scipy is not installed.
        """
        try:
            import scipy.sparse as sp
        except ImportError:
            raise ImportError("scipy required for to_scipy()")

        return sp.csr_matrix(
            (self._values.copy(), self._col_index.copy(), self._row_ptr.copy()),
            shape=self.shape,
        )

    def copy(self) -> 'CSRMatrix':
        """Deep copy."""
        return CSRMatrix(
            self._rows,
            self._cols,
            self._values,
            self._col_index,
            self._row_ptr,
        )

    def check_invariants(self, check_zeros: bool = True) -> None:
        """Verify every CSR invariant, including sorted columns per row.

        Args:
            check_zeros: Also reject stored exact zeros.

        Raises:
            InvalidStructureError: On the first violation found.
        """
        self._validate()
        if self.nnz and (self._col_index.min() < 0 or self._col_index.max() >= self._cols):
            raise InvalidStructureError("column index out of range")
        for i in range(self._rows):
            start, end = int(self._row_ptr[i]), int(self._row_ptr[i + 1])
            if end - start > 1 and np.any(np.diff(self._col_index[start:end]) <= 0):
                raise InvalidStructureError(f"row {i} columns are not strictly increasing")
        if check_zeros and np.any(self._values == 0.0):
            raise InvalidStructureError("stored exact zero")
