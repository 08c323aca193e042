"""Backend Types and Selection Policy.

This module defines the closed set of storage backends a matrix may use
and the density rule the adaptive Matrix applies to pick one.

Backend Types:
    - DENSE: Flat row-major buffer of length rows * cols
    - CSR: Compressed Sparse Row (values, col_index, row_ptr)

Selection Rule:
    density = nnz / (rows * cols), defined as 0 when rows * cols == 0.
    CSR is chosen when density <= threshold, DENSE otherwise.

Example:
    >>> choose_backend(10, 10, 5)        # density 0.05
    <Backend.CSR: 'csr'>
    >>> choose_backend(2, 2, 4)          # density 1.0
    <Backend.DENSE: 'dense'>
    >>> choose_backend(0, 7, 0)          # empty: density 0
    <Backend.CSR: 'csr'>
"""

from enum import Enum
from typing import Optional

from .._config import _resolve_threshold

__all__ = [
    'Backend',
    'density',
    'choose_backend',
]


class Backend(Enum):
    """Matrix storage backend.

    Attributes:
        DENSE: Contiguous row-major buffer. Reference implementation and
               fallback target for any operation without a sparse path.

        CSR: Compressed Sparse Row. Three parallel buffers with strictly
             increasing column indices inside each row.
    """
    DENSE = 'dense'
    CSR = 'csr'


def density(rows: int, cols: int, nnz: int) -> float:
    """Fraction of stored entries; 0.0 for an empty shape."""
    size = rows * cols
    return nnz / size if size > 0 else 0.0


def choose_backend(
    rows: int,
    cols: int,
    nnz: int,
    threshold: Optional[float] = None,
) -> Backend:
    """Decide which backend suits a matrix of the given fill.

    Args:
        rows: Number of rows.
        cols: Number of columns.
        nnz: Number of non-zero entries.
        threshold: Density at or below which CSR wins. None uses the
            configured default (0.2 unless changed).

    Returns:
        Backend.CSR or Backend.DENSE.
    """
    threshold = _resolve_threshold(threshold)
    return Backend.CSR if density(rows, cols, nnz) <= threshold else Backend.DENSE
