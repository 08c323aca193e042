"""
Pytest configuration and shared fixtures for adaptmat tests.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

import adaptmat
from adaptmat import CSRMatrix, DenseMatrix, Matrix


# Try to import scipy
try:
    import scipy.sparse as sp
    HAS_SCIPY = True
except ImportError:
    HAS_SCIPY = False


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def requires_scipy():
    """Skip test if scipy is not available."""
    if not HAS_SCIPY:
        pytest.skip("scipy not available")


@pytest.fixture(autouse=True)
def restore_config():
    """Reset global precision and threshold after every test."""
    real, index = adaptmat.get_precision()
    threshold = adaptmat.get_default_threshold()
    yield
    adaptmat.set_precision(real=real, index=index)
    adaptmat.set_default_threshold(threshold)


@pytest.fixture
def dense_values():
    """Values of the 3x4 sample matrix.

    Matrix:
    [[1, 0, 2, 0],
     [0, 3, 0, 4],
     [5, 0, 0, 6]]
    """
    return [
        [1.0, 0.0, 2.0, 0.0],
        [0.0, 3.0, 0.0, 4.0],
        [5.0, 0.0, 0.0, 6.0],
    ]


@pytest.fixture
def small_csr_matrix():
    """Create the 3x4 sample matrix from raw CSR buffers."""
    return CSRMatrix(
        3, 4,
        values=[1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        col_index=[0, 2, 1, 3, 0, 3],
        row_ptr=[0, 2, 4, 6],
    )


@pytest.fixture
def small_dense_matrix(dense_values):
    """Create the 3x4 sample matrix as a DenseMatrix."""
    return DenseMatrix.from_2d(dense_values)


@pytest.fixture
def rng():
    """Seeded random generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def random_sparse(rng):
    """Factory producing random sparse ndarrays with a fixed seed."""
    def _make(rows, cols, density=0.2, integer=True):
        mask = rng.random((rows, cols)) < density
        if integer:
            vals = rng.integers(-5, 6, size=(rows, cols)).astype(np.float64)
        else:
            vals = rng.standard_normal((rows, cols))
        return np.where(mask, vals, 0.0)
    return _make


# =============================================================================
# Helper Functions
# =============================================================================

def assert_csr_invariants(mat, check_zeros=True):
    """Assert every CSR storage invariant holds."""
    impl = mat.impl if isinstance(mat, Matrix) else mat
    assert isinstance(impl, CSRMatrix)
    impl.check_invariants(check_zeros=check_zeros)
    assert len(impl.values) == len(impl.col_index) == impl.nnz
    assert len(impl.row_ptr) == impl.rows + 1


def assert_matrix_equal(mat, expected, rtol=1e-10, atol=1e-12):
    """Assert a matrix matches an expected array-like."""
    expected = np.asarray(expected, dtype=np.float64)
    actual = mat.to_numpy()
    assert actual.shape == expected.shape, \
        f"Shape mismatch: {actual.shape} vs {expected.shape}"
    np.testing.assert_allclose(actual, expected, rtol=rtol, atol=atol)
