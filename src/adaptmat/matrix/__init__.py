"""adaptmat Matrix Module.

Dense and Compressed Sparse Row matrices behind a single adaptive facade
that picks the more economical representation for the data at hand.

Type Hierarchy:

    MatrixBase (ABC)                  # Capability contract
    ├── DenseMatrix                   # Flat row-major buffer
    ├── CSRMatrix                     # values / col_index / row_ptr
    └── Matrix                        # Smart: auto backend selection

Quick Start:
    >>> from adaptmat.matrix import Matrix, CSRMatrix
    >>>
    >>> # Smart class (recommended for most uses)
    >>> M = Matrix.from_2d([[1, 0, 0], [0, 0, 0], [0, 0, 2]])
    >>> M.backend                     # Backend.CSR
    >>>
    >>> # Direct data structure (for advanced users)
    >>> A = CSRMatrix.from_coo(2, 2, [(0, 0, 1.0), (1, 1, 2.0)])
    >>> (A @ A).to_list()
    [[1.0, 0.0], [0.0, 4.0]]

Key Functions:
    - from_2d, from_coo, zeros, identity: adaptive constructors
    - from_numpy, to_numpy, from_scipy, to_scipy: interop
    - choose_backend: the density rule used everywhere
"""

# =============================================================================
# Backend
# =============================================================================
from ._backend import (
    Backend,
    density,
    choose_backend,
)

# =============================================================================
# COO Triplets
# =============================================================================
from ._coo import Entry

# =============================================================================
# Base Class (Capability Contract)
# =============================================================================
from ._base import MatrixBase

# =============================================================================
# Concrete Representations
# =============================================================================
from ._dense import DenseMatrix
from ._csr import CSRMatrix

# =============================================================================
# Adaptive Facade (Main API)
# =============================================================================
from ._matrix import Matrix

# =============================================================================
# Operations
# =============================================================================
from ._ops import (
    # Construction
    from_2d,
    from_coo,
    zeros,
    identity,

    # Cross-platform
    from_numpy,
    from_scipy,
    to_numpy,
    to_scipy,

    # Type checking
    is_matrix_like,
)

__all__ = [
    # Backend
    'Backend',
    'density',
    'choose_backend',

    # COO
    'Entry',

    # Classes
    'MatrixBase',
    'DenseMatrix',
    'CSRMatrix',
    'Matrix',

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
