"""
Tests for Backend types and the density selection rule.

- Backend tags: DENSE, CSR
- density = nnz / (rows * cols), 0 for empty shapes
- CSR iff density <= threshold
"""

import pytest

import adaptmat
from adaptmat import Backend, CSRMatrix, DenseMatrix, Matrix, choose_backend
from adaptmat.matrix import density


# =============================================================================
# Backend Type Tests
# =============================================================================

class TestBackendTypes:
    """Test Backend tag behavior."""

    def test_values(self):
        """Test the closed set of tags."""
        assert {b.value for b in Backend} == {'dense', 'csr'}

    def test_representation_tags(self):
        """Test each representation reports its tag."""
        assert CSRMatrix.zeros(2, 2).backend == Backend.CSR
        assert DenseMatrix.zeros(2, 2).backend == Backend.DENSE
        assert Matrix.wrap(DenseMatrix.zeros(2, 2)).backend == Backend.DENSE


# =============================================================================
# Density Rule Tests
# =============================================================================

class TestChooseBackend:
    """Test choose_backend."""

    def test_density(self):
        """Test the density helper."""
        assert density(4, 5, 2) == 0.1
        assert density(0, 5, 0) == 0.0
        assert density(3, 0, 0) == 0.0

    @pytest.mark.parametrize("rows,cols,nnz,expected", [
        (10, 10, 5, Backend.CSR),
        (10, 10, 20, Backend.CSR),
        (10, 10, 21, Backend.DENSE),
        (2, 2, 4, Backend.DENSE),
        (1, 1, 0, Backend.CSR),
    ])
    def test_default_threshold(self, rows, cols, nnz, expected):
        """Test decisions against the 0.2 default."""
        assert choose_backend(rows, cols, nnz) == expected

    @pytest.mark.parametrize("shape", [(0, 0), (0, 7), (7, 0)])
    def test_empty_shape_is_csr(self, shape):
        """Test an empty shape has density 0 and picks CSR."""
        assert choose_backend(shape[0], shape[1], 0) == Backend.CSR
        assert choose_backend(shape[0], shape[1], 0, threshold=0.0) == Backend.CSR

    def test_explicit_threshold(self):
        """Test explicit thresholds, including the extremes."""
        assert choose_backend(2, 2, 2, threshold=0.5) == Backend.CSR
        assert choose_backend(2, 2, 3, threshold=0.5) == Backend.DENSE
        assert choose_backend(2, 2, 4, threshold=1.0) == Backend.CSR
        assert choose_backend(2, 2, 1, threshold=0.0) == Backend.DENSE

    def test_configured_default(self):
        """Test threshold=None follows the configured default."""
        adaptmat.set_default_threshold(0.05)
        assert choose_backend(10, 10, 6) == Backend.DENSE
        assert choose_backend(10, 10, 5) == Backend.CSR

    @pytest.mark.parametrize("bad", [-0.01, 1.01, "high"])
    def test_invalid_threshold(self, bad):
        """Test thresholds outside [0, 1] raise ValueError."""
        with pytest.raises(ValueError):
            choose_backend(2, 2, 1, threshold=bad)
