"""
Tests for global configuration.
"""

import logging

import pytest
import numpy as np

import adaptmat
from adaptmat import (
    CSRMatrix,
    DenseMatrix,
    IndexType,
    InvalidArgumentError,
    Matrix,
    RealType,
    get_config,
    get_default_threshold,
    get_precision,
    set_default_threshold,
    set_precision,
)
from adaptmat._config import DEFAULT_THRESHOLD, _Config

from conftest import assert_csr_invariants


class TestPrecision:
    """Test precision settings."""

    def test_defaults(self):
        """Test float64 / int64 defaults."""
        assert get_precision() == (RealType.FLOAT64, IndexType.INT64)

    def test_numpy_dtype(self):
        """Test enum to numpy dtype mapping."""
        assert RealType.FLOAT32.numpy_dtype == np.float32
        assert RealType.FLOAT64.numpy_dtype == np.float64
        assert IndexType.INT32.numpy_dtype == np.int32
        assert IndexType.INT64.numpy_dtype == np.int64

    @pytest.mark.parametrize("name,expected", [
        ('float32', RealType.FLOAT32),
        ('f32', RealType.FLOAT32),
        ('float64', RealType.FLOAT64),
        ('f64', RealType.FLOAT64),
    ])
    def test_set_real_by_name(self, name, expected):
        """Test string aliases for real types."""
        set_precision(real=name)
        assert get_precision()[0] == expected

    def test_set_index(self):
        """Test index precision."""
        set_precision(index='int32')
        assert get_precision()[1] == IndexType.INT32
        set_precision(index=IndexType.INT64)
        assert get_precision()[1] == IndexType.INT64

    def test_unknown_name(self):
        """Test an unknown precision name is rejected without side effects."""
        before = get_precision()
        with pytest.raises(InvalidArgumentError):
            set_precision(real='float16', index='int32')
        assert get_precision() == before

    def test_buffers_follow_precision(self):
        """Test new buffers use the configured dtypes."""
        set_precision(real='float32', index='int32')
        csr = CSRMatrix.from_coo(2, 2, [(0, 1, 1.5)])
        assert csr.values.dtype == np.float32
        assert csr.col_index.dtype == np.int32
        assert csr.row_ptr.dtype == np.int32
        assert DenseMatrix.zeros(2, 2).data.dtype == np.float32
        assert Matrix.identity(4).to_dense().data.dtype == np.float32

    def test_float32_underflow_is_not_stored(self):
        """Test values that round to zero at float32 are never stored."""
        set_precision(real='float32')
        tiny = CSRMatrix.from_coo(1, 1, [(0, 0, 1e-30)])
        assert tiny.nnz == 1

        product = tiny.mul(tiny)
        assert product.nnz == 0
        assert product.get(0, 0) == 0.0
        assert_csr_invariants(product)

        dropped = CSRMatrix.from_coo(2, 2, [(0, 0, 1e-50), (1, 1, 2.0)])
        assert dropped.nnz == 1
        assert dropped.row_ptr.tolist() == [0, 0, 1]
        assert_csr_invariants(dropped)

    def test_float32_cancellation_in_add(self):
        """Test tiny float32 entries that cancel leave nothing stored."""
        set_precision(real='float32')
        a = CSRMatrix.from_coo(1, 2, [(0, 0, 1.0), (0, 1, 1e-30)])
        b = CSRMatrix.from_coo(1, 2, [(0, 1, -1e-30)])
        total = a.add(b)
        assert total.nnz == 1
        assert total.col_index.tolist() == [0]
        assert_csr_invariants(total)


class TestThreshold:
    """Test the default density threshold."""

    def test_default(self):
        """Test the out-of-the-box threshold."""
        assert DEFAULT_THRESHOLD == 0.2

    def test_set_get(self):
        """Test setting the default threshold."""
        set_default_threshold(0.35)
        assert get_default_threshold() == 0.35
        assert get_config().default_threshold == 0.35
        assert Matrix.zeros(1, 1).threshold == 0.35

    @pytest.mark.parametrize("bad", [-0.5, 1.5, "abc"])
    def test_invalid(self, bad):
        """Test invalid thresholds are rejected and leave the default."""
        before = get_default_threshold()
        with pytest.raises(InvalidArgumentError):
            set_default_threshold(bad)
        assert get_default_threshold() == before

    def test_environment(self, monkeypatch):
        """Test ADAPTMAT_THRESHOLD seeds a fresh config."""
        monkeypatch.setenv('ADAPTMAT_THRESHOLD', '0.4')
        config = _Config()
        config.load_environment()
        assert config.default_threshold == 0.4

    def test_environment_invalid(self, monkeypatch, caplog):
        """Test an invalid environment value is ignored with a warning."""
        monkeypatch.setenv('ADAPTMAT_THRESHOLD', '7')
        config = _Config()
        with caplog.at_level(logging.WARNING, logger="adaptmat.config"):
            config.load_environment()
        assert config.default_threshold == DEFAULT_THRESHOLD
        assert any("ADAPTMAT_THRESHOLD" in r.getMessage() for r in caplog.records)

    def test_environment_unset(self, monkeypatch):
        """Test a missing variable keeps the default."""
        monkeypatch.delenv('ADAPTMAT_THRESHOLD', raising=False)
        config = _Config()
        config.load_environment()
        assert config.default_threshold == DEFAULT_THRESHOLD


class TestPackage:
    """Test top-level package exports."""

    def test_version(self):
        """Test the version string."""
        assert isinstance(adaptmat.__version__, str)

    def test_all_exports(self):
        """Test every name in __all__ is importable."""
        for name in adaptmat.__all__:
            assert hasattr(adaptmat, name), name
        for name in adaptmat.matrix.__all__:
            assert hasattr(adaptmat.matrix, name), name
