"""
adaptmat - Adaptive Dense / Sparse Matrices

Matrix arithmetic that transparently switches between a dense row-major
buffer and Compressed Sparse Row storage:
- Density-based backend selection at construction and on repack()
- CSR merge add/sub and Gustavson CSR x CSR multiplication
- Exact-zero pruning, sorted columns per row
- numpy / scipy interoperability

Modules:
- matrix: Matrix classes and operations

Architecture:
    ┌──────────────────────────────────────────────┐
    │           Matrix (Adaptive Facade)           │
    ├──────────────────────────────────────────────┤
    │  Backend: DENSE | CSR                        │
    │  threshold: density at or below which CSR    │
    └──────────────────────────────────────────────┘

Example:
    >>> import adaptmat
    >>> from adaptmat import Matrix, Backend
    >>>
    >>> A = Matrix.from_coo(3, 3, [(0, 0, 2.0), (2, 1, -1.0)])
    >>> print(A.backend)  # Backend.CSR
    >>>
    >>> B = A @ A.T
    >>> B.get(0, 0)
    4.0
"""

__version__ = '0.1.0'

# Import main modules
from . import matrix

from ._config import (
    RealType,
    IndexType,
    set_precision,
    get_precision,
    set_default_threshold,
    get_default_threshold,
    get_config,
)

from ._error import (
    MatrixError,
    InvalidArgumentError,
    MatrixTypeError,
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidStructureError,
)

# Re-export common types
from .matrix import (
    # Core classes
    MatrixBase,
    DenseMatrix,
    CSRMatrix,
    Matrix,
    Entry,

    # Backend
    Backend,
    choose_backend,

    # Construction
    from_2d,
    from_coo,
    zeros,
    identity,

    # Cross-platform conversion
    from_numpy,
    from_scipy,
    to_numpy,
    to_scipy,

    # Type checking
    is_matrix_like,
)

__all__ = [
    # Version
    '__version__',

    # Modules
    'matrix',

    # Configuration
    'RealType',
    'IndexType',
    'set_precision',
    'get_precision',
    'set_default_threshold',
    'get_default_threshold',
    'get_config',

    # Errors
    'MatrixError',
    'InvalidArgumentError',
    'MatrixTypeError',
    'DimensionMismatchError',
    'IndexOutOfBoundsError',
    'InvalidStructureError',

    # Core classes
    'MatrixBase',
    'DenseMatrix',
    'CSRMatrix',
    'Matrix',
    'Entry',

    # Backend
    'Backend',
    'choose_backend',

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
