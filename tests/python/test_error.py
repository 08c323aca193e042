"""
Tests for the error hierarchy.
"""

import pytest

from adaptmat import (
    CSRMatrix,
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidArgumentError,
    InvalidStructureError,
    MatrixError,
    MatrixTypeError,
    set_default_threshold,
)
from adaptmat._error import (
    ADAPTMAT_ERROR_DIMENSION_MISMATCH,
    ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS,
    ADAPTMAT_ERROR_INVALID_ARGUMENT,
    ADAPTMAT_ERROR_INVALID_STRUCTURE,
    ADAPTMAT_ERROR_TYPE_ERROR,
    ADAPTMAT_ERROR_UNKNOWN,
    ADAPTMAT_OK,
    error_message,
)


class TestErrorCodes:
    """Test codes and messages."""

    def test_messages(self):
        """Test the message table."""
        assert error_message(ADAPTMAT_OK) == "Success"
        assert error_message(ADAPTMAT_ERROR_DIMENSION_MISMATCH) == "Dimension mismatch"
        assert "999" in error_message(999)
        assert error_message(999).startswith("Unknown error")

    def test_default_codes(self):
        """Test each subclass carries its own code."""
        assert MatrixError().code == ADAPTMAT_ERROR_UNKNOWN
        assert DimensionMismatchError().code == ADAPTMAT_ERROR_DIMENSION_MISMATCH
        assert IndexOutOfBoundsError().code == ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS
        assert InvalidStructureError().code == ADAPTMAT_ERROR_INVALID_STRUCTURE
        assert InvalidArgumentError().code == ADAPTMAT_ERROR_INVALID_ARGUMENT
        assert MatrixTypeError().code == ADAPTMAT_ERROR_TYPE_ERROR

    def test_default_message(self):
        """Test the message defaults to the code's text."""
        err = IndexOutOfBoundsError()
        assert err.message == "Index out of bounds"
        assert str(err) == "Index out of bounds"

    def test_from_code(self):
        """Test from_code picks the matching subclass."""
        err = MatrixError.from_code(ADAPTMAT_ERROR_DIMENSION_MISMATCH, "add")
        assert isinstance(err, DimensionMismatchError)
        assert str(err) == "add: Dimension mismatch"
        assert type(MatrixError.from_code(ADAPTMAT_ERROR_UNKNOWN)) is MatrixError

    @pytest.mark.parametrize("code,cls", [
        (ADAPTMAT_ERROR_INVALID_ARGUMENT, InvalidArgumentError),
        (ADAPTMAT_ERROR_TYPE_ERROR, MatrixTypeError),
        (ADAPTMAT_ERROR_INVALID_STRUCTURE, InvalidStructureError),
    ])
    def test_from_code_every_class(self, code, cls):
        """Test every declared code maps back to its own subclass."""
        err = MatrixError.from_code(code)
        assert type(err) is cls
        assert err.code == code


class TestErrorHierarchy:
    """Test builtin compatibility."""

    def test_builtin_bases(self):
        """Test subclasses also derive from builtins."""
        assert issubclass(DimensionMismatchError, ValueError)
        assert issubclass(InvalidStructureError, ValueError)
        assert issubclass(IndexOutOfBoundsError, IndexError)
        assert issubclass(InvalidArgumentError, ValueError)
        assert issubclass(MatrixTypeError, TypeError)
        for cls in (DimensionMismatchError, IndexOutOfBoundsError, InvalidStructureError,
                    InvalidArgumentError, MatrixTypeError):
            assert issubclass(cls, MatrixError)

    def test_raised_from_operations(self):
        """Test operations raise catchable errors."""
        mat = CSRMatrix.zeros(2, 2)
        with pytest.raises(MatrixError) as info:
            mat.get(5, 5)
        assert info.value.code == ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS
        with pytest.raises(ValueError):
            mat.add(CSRMatrix.zeros(3, 3))

    def test_argument_and_type_errors_carry_codes(self):
        """Test bad arguments and bad element types raise coded errors."""
        with pytest.raises(InvalidArgumentError) as info:
            set_default_threshold(2.0)
        assert info.value.code == ADAPTMAT_ERROR_INVALID_ARGUMENT

        mat = CSRMatrix.zeros(2, 2)
        with pytest.raises(MatrixTypeError) as info:
            mat.set(0, 0, "x")
        assert info.value.code == ADAPTMAT_ERROR_TYPE_ERROR
        with pytest.raises(MatrixTypeError):
            mat.add([[1, 2], [3, 4]])
