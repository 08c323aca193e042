"""
Global configuration for adaptmat.

Provides:
- Buffer precision (real type for values, index type for CSR offsets)
- Default density threshold used by the adaptive Matrix backend decision

The default threshold may be seeded through the ``ADAPTMAT_THRESHOLD``
environment variable (read once, at import).
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from ._error import InvalidArgumentError

logger = logging.getLogger("adaptmat.config")

DEFAULT_THRESHOLD = 0.2


# =============================================================================
# Precision Types
# =============================================================================

class RealType(Enum):
    """Floating-point type of stored values."""
    FLOAT32 = "f32"
    FLOAT64 = "f64"

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(np.float32 if self is RealType.FLOAT32 else np.float64)


class IndexType(Enum):
    """Integer type of CSR column indices and row offsets."""
    INT32 = "i32"
    INT64 = "i64"

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(np.int32 if self is IndexType.INT32 else np.int64)


_REAL_ALIASES = {
    'f32': RealType.FLOAT32, 'float32': RealType.FLOAT32,
    'f64': RealType.FLOAT64, 'float64': RealType.FLOAT64,
}

_INDEX_ALIASES = {
    'i32': IndexType.INT32, 'int32': IndexType.INT32,
    'i64': IndexType.INT64, 'int64': IndexType.INT64,
}


def _lookup(value, enum_type, aliases):
    if isinstance(value, enum_type):
        return value
    try:
        return aliases[str(value).lower()]
    except KeyError:
        raise InvalidArgumentError(
            f"Unknown {enum_type.__name__} {value!r}; expected one of {sorted(aliases)}"
        )


def validate_threshold(value: float) -> float:
    """Check a density threshold lies in [0, 1] and return it as float."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"threshold must be a number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise InvalidArgumentError(f"threshold must be in [0, 1], got {value}")
    return value


# =============================================================================
# Settings Holder
# =============================================================================

class _Config:
    """
    Process-wide settings.

    One instance lives at module level; matrices read it whenever they
    allocate a buffer or resolve a missing threshold.
    """

    def __init__(self):
        self._real = RealType.FLOAT64
        self._index = IndexType.INT64
        self._default_threshold = DEFAULT_THRESHOLD

    @property
    def default_real(self) -> RealType:
        return self._real

    @default_real.setter
    def default_real(self, value: Union[RealType, str]):
        self._real = _lookup(value, RealType, _REAL_ALIASES)

    @property
    def default_index(self) -> IndexType:
        return self._index

    @default_index.setter
    def default_index(self, value: Union[IndexType, str]):
        self._index = _lookup(value, IndexType, _INDEX_ALIASES)

    @property
    def default_threshold(self) -> float:
        """Density at or below which CSR is preferred."""
        return self._default_threshold

    @default_threshold.setter
    def default_threshold(self, value: float):
        self._default_threshold = validate_threshold(value)

    def load_environment(self) -> None:
        """Seed settings from environment variables."""
        raw = os.environ.get('ADAPTMAT_THRESHOLD')
        if raw is None or raw.strip() == '':
            return
        try:
            self.default_threshold = raw
        except ValueError as e:
            logger.warning(f"Ignoring ADAPTMAT_THRESHOLD={raw!r}: {e}")
        else:
            logger.debug(f"Default threshold set to {self._default_threshold} from environment")


_config = _Config()
_config.load_environment()


# =============================================================================
# Public API
# =============================================================================

def get_config() -> _Config:
    """Return the process-wide settings object."""
    return _config


def set_precision(
    real: Optional[Union[RealType, str]] = None,
    index: Optional[Union[IndexType, str]] = None,
) -> None:
    """
    Choose the dtypes used for buffers allocated from now on.

    Existing matrices keep their buffers.

    Args:
        real: RealType or one of 'f32', 'float32', 'f64', 'float64'
        index: IndexType or one of 'i32', 'int32', 'i64', 'int64'

    Raises:
        InvalidArgumentError: If a name is not recognised.

    Example:
        >>> adaptmat.set_precision(real='float32')
        >>> Matrix.identity(4).to_dense().data.dtype
        dtype('float32')
    """
    # Resolve both before assigning so a bad name changes nothing.
    new_real = _config.default_real if real is None else _lookup(real, RealType, _REAL_ALIASES)
    new_index = _config.default_index if index is None else _lookup(index, IndexType, _INDEX_ALIASES)
    _config.default_real = new_real
    _config.default_index = new_index


def get_precision() -> Tuple[RealType, IndexType]:
    """Return the active (real_type, index_type) pair."""
    return _config.default_real, _config.default_index


def set_default_threshold(threshold: float) -> None:
    """Set the density threshold used when none is passed explicitly."""
    _config.default_threshold = threshold


def get_default_threshold() -> float:
    """Get the density threshold used when none is passed explicitly."""
    return _config.default_threshold


# =============================================================================
# Internal Helpers
# =============================================================================

def _get_real_dtype() -> np.dtype:
    return _config.default_real.numpy_dtype


def _get_index_dtype() -> np.dtype:
    return _config.default_index.numpy_dtype


def _resolve_threshold(threshold: Optional[float]) -> float:
    """Return ``threshold`` validated, or the configured default when None."""
    if threshold is None:
        return _config.default_threshold
    return validate_threshold(threshold)
