"""COO (coordinate) triplets.

A COO list is the bridge between every representation: an unordered
sequence of ``(row, col, value)`` records plus a ``(rows, cols)`` header.
It is also the natural persistence form of a matrix.

Input triplets may be plain tuples, ``Entry`` instances or mappings with
``i``/``j``/``v`` (or ``row``/``col``/``value``) keys.
"""

from numbers import Real
from operator import index as _as_index
from typing import Any, Iterable, List, NamedTuple

from .._error import IndexOutOfBoundsError, MatrixError, MatrixTypeError

__all__ = [
    'Entry',
    'coerce_entries',
    'check_entries_in_bounds',
    'aggregate_entries',
    'entries_from_arrays',
]


class Entry(NamedTuple):
    """A single stored element."""
    row: int
    col: int
    value: float


def _coerce_entry(raw: Any) -> Entry:
    if isinstance(raw, Entry):
        return raw
    if isinstance(raw, dict):
        if 'i' in raw:
            i, j, v = raw['i'], raw['j'], raw['v']
        else:
            i, j, v = raw['row'], raw['col'], raw['value']
    else:
        try:
            i, j, v = raw
        except (TypeError, ValueError):
            raise MatrixTypeError(f"COO entry must be a (row, col, value) triple, got {raw!r}")
    try:
        i = _as_index(i)
        j = _as_index(j)
    except TypeError:
        raise MatrixTypeError(f"COO indices must be integers, got ({i!r}, {j!r})")
    if not isinstance(v, Real):
        raise MatrixTypeError(f"COO value must be a real number, got {v!r}")
    return Entry(i, j, float(v))


def coerce_entries(entries: Iterable[Any]) -> List[Entry]:
    """Normalise any supported triplet form to a fresh list of ``Entry``."""
    return [_coerce_entry(e) for e in entries]


def check_entries_in_bounds(entries: Iterable[Entry], rows: int, cols: int) -> None:
    """Raise IndexOutOfBoundsError for the first entry outside the shape."""
    for e in entries:
        if e.row < 0 or e.row >= rows or e.col < 0 or e.col >= cols:
            raise IndexOutOfBoundsError(
                f"COO entry ({e.row}, {e.col}) out of bounds for shape ({rows}, {cols})"
            )


def aggregate_entries(entries: List[Entry]) -> List[Entry]:
    """Sort by (row, col), sum duplicates and drop exact zeros.

    Args:
        entries: Coerced entries (not modified).

    Returns:
        New list, strictly increasing in (row, col), with no zero values.
    """
    ordered = sorted(entries, key=lambda e: (e.row, e.col))
    out: List[Entry] = []
    for e in ordered:
        if out and out[-1].row == e.row and out[-1].col == e.col:
            last = out[-1]
            out[-1] = Entry(last.row, last.col, last.value + e.value)
        else:
            out.append(e)
    return [e for e in out if e.value != 0.0]


def entries_from_arrays(rows_idx, cols_idx, values) -> List[Entry]:
    """Zip three parallel sequences into entries."""
    if not (len(rows_idx) == len(cols_idx) == len(values)):
        raise MatrixError.from_code(
            MatrixError.ERROR_INVALID_STRUCTURE,
            f"COO arrays differ in length: {len(rows_idx)}, {len(cols_idx)}, {len(values)}",
        )
    return [Entry(int(i), int(j), float(v)) for i, j, v in zip(rows_idx, cols_idx, values)]
