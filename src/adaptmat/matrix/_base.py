"""
Matrix Base Class

This module defines the capability contract every matrix representation
must satisfy, so the engine can treat representations polymorphically.

Type Hierarchy:

    MatrixBase (ABC)
    ├── DenseMatrix - Flat row-major buffer
    ├── CSRMatrix   - Compressed Sparse Row
    └── Matrix      - Adaptive facade over one of the two above

Dispatch:

    Fast paths are chosen from the operand's ``backend`` tag, which is one of
    the closed set {Backend.DENSE, Backend.CSR}. Any operand that does not
    carry a tag with a fast path is densified and handled by the dense
    kernels, so every combination of operands stays correct.

Required Members (subclasses must implement):
    rows, cols, nnz, backend,
    get(i, j), set(i, j, v), add(B), sub(B), mul(scalar | B),
    transpose(), matvec(x), to_dense()

Derived Members (provided here):
    shape, size, density, to_numpy(), to_list(), to_coo(), allclose(),
    operators (+, -, unary -, * by scalar, @), .T, m[i, j], ==
"""

from abc import ABC, abstractmethod
from numbers import Complex, Real
from operator import index as _as_index
from typing import Any, List, Tuple, Union, TYPE_CHECKING

import numpy as np

from .._config import _get_real_dtype
from .._error import DimensionMismatchError, IndexOutOfBoundsError, MatrixTypeError
from ._backend import Backend
from ._coo import Entry

if TYPE_CHECKING:
    from ._dense import DenseMatrix

__all__ = [
    'MatrixBase',
    'is_scalar',
    'is_matrix_like',
    'unwrap',
    'check_index',
    'check_same_shape',
    'check_matmul_shape',
    'as_vector',
]


_CONTRACT = ('rows', 'cols', 'get', 'set', 'add', 'sub', 'mul',
             'transpose', 'matvec', 'to_dense')


# =============================================================================
# Shared Checks
# =============================================================================

def is_scalar(value: Any) -> bool:
    """True for real numbers (Python or numpy), False for matrices/complex."""
    return isinstance(value, Real)


def is_matrix_like(obj: Any) -> bool:
    """Check whether ``obj`` exposes the full matrix capability set."""
    return all(hasattr(obj, name) for name in _CONTRACT)


def unwrap(obj: Any) -> Any:
    """Return the concrete representation behind a facade (or ``obj`` itself)."""
    if isinstance(obj, MatrixBase):
        return obj._representation()
    return obj


def _as_array(obj: Any) -> np.ndarray:
    """2-D ndarray copy of any matrix-like object."""
    obj = unwrap(obj)
    if isinstance(obj, MatrixBase):
        return obj.to_numpy()
    out = np.zeros((obj.rows, obj.cols), dtype=_get_real_dtype())
    for i in range(obj.rows):
        for j in range(obj.cols):
            out[i, j] = obj.get(i, j)
    return out


def check_index(i: int, j: int, rows: int, cols: int) -> Tuple[int, int]:
    """Validate an element position.

    Returns:
        (i, j) as plain ints.

    Raises:
        IndexOutOfBoundsError: If (i, j) is outside [0, rows) x [0, cols).
        TypeError: If i or j is not an integer.
    """
    i = _as_index(i)
    j = _as_index(j)
    if i < 0 or i >= rows or j < 0 or j >= cols:
        raise IndexOutOfBoundsError(
            f"Index ({i}, {j}) out of bounds for shape ({rows}, {cols})"
        )
    return i, j


def check_same_shape(a: Any, b: Any, op: str) -> None:
    """Raise DimensionMismatchError unless ``a`` and ``b`` share a shape."""
    if not is_matrix_like(b):
        raise MatrixTypeError(f"Cannot {op} {type(a).__name__} and {type(b).__name__}")
    if a.rows != b.rows or a.cols != b.cols:
        raise DimensionMismatchError(
            f"Incompatible dimensions for {op}: "
            f"({a.rows}, {a.cols}) vs ({b.rows}, {b.cols})"
        )


def check_matmul_shape(a: Any, b: Any) -> None:
    """Raise DimensionMismatchError unless ``a.cols == b.rows``."""
    if a.cols != b.rows:
        raise DimensionMismatchError(
            f"Incompatible dimensions for mul: "
            f"({a.rows}, {a.cols}) x ({b.rows}, {b.cols})"
        )


def as_vector(x: Any, length: int) -> np.ndarray:
    """Coerce ``x`` to a 1-D real vector of the given length."""
    vec = np.asarray(x, dtype=_get_real_dtype())
    if vec.ndim != 1 or vec.shape[0] != length:
        raise DimensionMismatchError(
            f"Incompatible vector size for matvec: expected ({length},), got {vec.shape}"
        )
    return vec


# =============================================================================
# Base Class
# =============================================================================

class MatrixBase(ABC):
    """
    Abstract base class for all matrix representations.

    Example:

        class MyMatrix(MatrixBase):
            @property
            def rows(self) -> int:
                return self._rows
            # ... implement the other required members
    """

    __slots__ = ()

    # Containers of mutable buffers are not hashable.
    __hash__ = None

    # =========================================================================
    # Abstract Properties
    # =========================================================================

    @property
    @abstractmethod
    def rows(self) -> int:
        """Number of rows."""
        ...

    @property
    @abstractmethod
    def cols(self) -> int:
        """Number of columns."""
        ...

    @property
    @abstractmethod
    def nnz(self) -> int:
        """Number of non-zero (stored) elements."""
        ...

    @property
    @abstractmethod
    def backend(self) -> Backend:
        """Storage backend tag."""
        ...

    # =========================================================================
    # Abstract Methods
    # =========================================================================

    @abstractmethod
    def get(self, i: int, j: int) -> float:
        """Return element (i, j)."""
        ...

    @abstractmethod
    def set(self, i: int, j: int, value: float) -> None:
        """Write element (i, j) in place."""
        ...

    @abstractmethod
    def add(self, other: 'MatrixBase') -> 'MatrixBase':
        """Return self + other as a new matrix."""
        ...

    @abstractmethod
    def sub(self, other: 'MatrixBase') -> 'MatrixBase':
        """Return self - other as a new matrix."""
        ...

    @abstractmethod
    def mul(self, other: Union[float, 'MatrixBase']) -> 'MatrixBase':
        """Scalar multiple (``other`` a number) or matrix product."""
        ...

    @abstractmethod
    def transpose(self) -> 'MatrixBase':
        """Return the transpose as a new matrix."""
        ...

    @abstractmethod
    def matvec(self, x: Any) -> np.ndarray:
        """Return ``self @ x`` for a vector of length ``cols``."""
        ...

    @abstractmethod
    def to_dense(self) -> 'DenseMatrix':
        """Return an independent dense copy."""
        ...

    # =========================================================================
    # Derived Properties
    # =========================================================================

    @property
    def shape(self) -> Tuple[int, int]:
        """Matrix dimensions (rows, cols)."""
        return (self.rows, self.cols)

    @property
    def size(self) -> int:
        """Total number of cells (rows * cols)."""
        return self.rows * self.cols

    @property
    def density(self) -> float:
        """Fraction of non-zero elements (0.0 for an empty shape)."""
        total = self.size
        return self.nnz / total if total > 0 else 0.0

    @property
    def T(self) -> 'MatrixBase':
        """Transpose (alias for transpose())."""
        return self.transpose()

    def _representation(self) -> 'MatrixBase':
        """Concrete representation backing this object."""
        return self

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_numpy(self) -> np.ndarray:
        """Return a fresh 2-D ndarray with the matrix values."""
        dense = self.to_dense()
        return dense.data.reshape(self.rows, self.cols)

    def to_list(self) -> List[List[float]]:
        """Return the matrix as nested Python lists."""
        return self.to_numpy().tolist()

    def to_coo(self) -> List[Entry]:
        """Return stored non-zero entries in row-major order."""
        arr = self.to_numpy()
        rows_idx, cols_idx = np.nonzero(arr)
        return [Entry(int(i), int(j), float(arr[i, j])) for i, j in zip(rows_idx, cols_idx)]

    def allclose(self, other: Any, rtol: float = 1e-05, atol: float = 1e-08) -> bool:
        """Elementwise comparison with tolerance; False on shape mismatch."""
        other = _as_array(other) if is_matrix_like(other) else np.asarray(other)
        if other.shape != self.shape:
            return False
        return bool(np.allclose(self.to_numpy(), other, rtol=rtol, atol=atol))

    # =========================================================================
    # Python Protocols
    # =========================================================================

    def __getitem__(self, key: Tuple[int, int]) -> float:
        i, j = key
        return self.get(i, j)

    def __setitem__(self, key: Tuple[int, int], value: float) -> None:
        i, j = key
        self.set(i, j, value)

    def __eq__(self, other: Any) -> bool:
        if not is_matrix_like(other):
            return NotImplemented
        if (self.rows, self.cols) != (other.rows, other.cols):
            return False
        return bool(np.array_equal(self.to_numpy(), _as_array(other)))

    def __add__(self, other: Any) -> 'MatrixBase':
        if not is_matrix_like(other):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Any) -> 'MatrixBase':
        if not is_matrix_like(other):
            return NotImplemented
        return self.sub(other)

    def __neg__(self) -> 'MatrixBase':
        return self.mul(-1.0)

    def __mul__(self, other: Any) -> 'MatrixBase':
        if isinstance(other, Complex) and not is_scalar(other):
            raise MatrixTypeError("Complex scalars are not supported")
        if not is_scalar(other):
            return NotImplemented
        return self.mul(other)

    def __rmul__(self, other: Any) -> 'MatrixBase':
        return self.__mul__(other)

    def __matmul__(self, other: Any) -> Union['MatrixBase', np.ndarray]:
        if is_matrix_like(other):
            return self.mul(other)
        if isinstance(other, (list, tuple, np.ndarray)):
            return self.matvec(other)
        return NotImplemented

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={self.shape}, nnz={self.nnz}, "
            f"backend={self.backend.value})"
        )
