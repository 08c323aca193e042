"""
Error handling for adaptmat.

Every failure is raised synchronously, before the receiver is touched.
Exceptions carry a numeric code so callers can branch on the failure kind,
and each concrete subclass also derives from the matching builtin
(``ValueError``, ``TypeError`` or ``IndexError``) so plain ``except ValueError``
keeps working.
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

# Success
ADAPTMAT_OK = 0

# General errors (1-9)
ADAPTMAT_ERROR_UNKNOWN = 1

# Argument errors (10-19)
ADAPTMAT_ERROR_INVALID_ARGUMENT = 10
ADAPTMAT_ERROR_DIMENSION_MISMATCH = 11
ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS = 14

# Type errors (20-29)
ADAPTMAT_ERROR_TYPE_ERROR = 20

# Structure errors (60-69)
ADAPTMAT_ERROR_INVALID_STRUCTURE = 60


_ERROR_MESSAGES = {
    ADAPTMAT_OK: "Success",
    ADAPTMAT_ERROR_UNKNOWN: "Unknown error",
    ADAPTMAT_ERROR_INVALID_ARGUMENT: "Invalid argument",
    ADAPTMAT_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of bounds",
    ADAPTMAT_ERROR_TYPE_ERROR: "Type error",
    ADAPTMAT_ERROR_INVALID_STRUCTURE: "Invalid structure",
}


# =============================================================================
# Exception Classes
# =============================================================================

class MatrixError(Exception):
    """
    Base exception for all adaptmat errors.

    Attributes:
        code: Numeric error code (one of the ADAPTMAT_* constants)
        message: Human readable description
    """

    OK = ADAPTMAT_OK
    ERROR_UNKNOWN = ADAPTMAT_ERROR_UNKNOWN
    ERROR_INVALID_ARGUMENT = ADAPTMAT_ERROR_INVALID_ARGUMENT
    ERROR_DIMENSION_MISMATCH = ADAPTMAT_ERROR_DIMENSION_MISMATCH
    ERROR_INDEX_OUT_OF_BOUNDS = ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS
    ERROR_TYPE_ERROR = ADAPTMAT_ERROR_TYPE_ERROR
    ERROR_INVALID_STRUCTURE = ADAPTMAT_ERROR_INVALID_STRUCTURE

    default_code = ADAPTMAT_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        """
        Create an adaptmat exception.

        Args:
            message: Optional detailed message (defaults to the code's message)
            code: Error code; defaults to the class's ``default_code``
        """
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = error_message(code)
        self.message = message
        super().__init__(message)

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "MatrixError":
        """Create the exception matching ``code``, with optional context."""
        base_msg = error_message(code)
        msg = f"{context}: {base_msg}" if context else base_msg
        exc_type = _CODE_TO_CLASS.get(code, cls)
        return exc_type(msg, code)


class InvalidArgumentError(MatrixError, ValueError):
    """An argument value is outside its accepted range or vocabulary."""

    default_code = ADAPTMAT_ERROR_INVALID_ARGUMENT


class MatrixTypeError(MatrixError, TypeError):
    """An operand or element value has an unsupported type."""

    default_code = ADAPTMAT_ERROR_TYPE_ERROR


class DimensionMismatchError(MatrixError, ValueError):
    """Operand shapes are incompatible for the requested operation."""

    default_code = ADAPTMAT_ERROR_DIMENSION_MISMATCH


class IndexOutOfBoundsError(MatrixError, IndexError):
    """An (i, j) pair lies outside ``[0, rows) x [0, cols)``."""

    default_code = ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS


class InvalidStructureError(MatrixError, ValueError):
    """Raw buffers handed to a constructor violate the storage layout."""

    default_code = ADAPTMAT_ERROR_INVALID_STRUCTURE


_CODE_TO_CLASS = {
    ADAPTMAT_ERROR_INVALID_ARGUMENT: InvalidArgumentError,
    ADAPTMAT_ERROR_TYPE_ERROR: MatrixTypeError,
    ADAPTMAT_ERROR_DIMENSION_MISMATCH: DimensionMismatchError,
    ADAPTMAT_ERROR_INDEX_OUT_OF_BOUNDS: IndexOutOfBoundsError,
    ADAPTMAT_ERROR_INVALID_STRUCTURE: InvalidStructureError,
}


def error_message(code: int) -> str:
    """Return the canonical message for an error code."""
    return _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
