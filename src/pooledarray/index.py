# -------------------------------------
# Index arguments for pooled arrays
# -------------------------------------
"""
Index arguments are classified into a small closed set of forms:

    Position   - one cell
    Mask       - boolean mask aligned with the axis (missing entries are False)
    Positions  - list of positions (missing entries are dropped)
    Span       - a slice

as_index() does the classification once, so the indexers in pooled.py only
dispatch on the form and on the number of axes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .refs import is_missing_value


@dataclass(frozen=True)
class Position:
    pos: int


@dataclass(frozen=True, eq=False)
class Mask:
    mask: np.ndarray


@dataclass(frozen=True, eq=False)
class Positions:
    positions: np.ndarray


@dataclass(frozen=True)
class Span:
    span: slice


Index = Position | Mask | Positions | Span


def _check_position(pos: int, length: int) -> int:
    if pos < 0:
        pos += length
    if not 0 <= pos < length:
        raise IndexError(f"index {pos} is out of bounds for axis with size {length}")
    return pos


def _mask(mask: np.ndarray, length: int) -> Mask:
    mask = np.asarray(mask, dtype=bool).reshape(-1)
    if mask.shape[0] != length:
        raise IndexError(f"boolean index has length {mask.shape[0]}, expected {length}")
    return Mask(mask)


def _from_object_array(arr: np.ndarray, length: int) -> Index:
    """Lists with None entries: booleans become a mask, integers a position list."""
    flat = arr.reshape(-1)
    present = [v for v in flat if not is_missing_value(v)]
    if present and all(isinstance(v, (bool, np.bool_)) for v in present):
        return _mask([False if is_missing_value(v) else bool(v) for v in flat], length)
    if all(isinstance(v, (int, np.integer)) for v in present):
        return Positions(np.asarray(present, dtype=np.intp))
    raise TypeError(f"Unsupported index values: {present[:5]!r}")


def as_index(arg: Any, length: int) -> Index:
    """
    Classify an index argument for an axis of the given length.

    Args:
        arg: int, slice, range, boolean or integer sequence, numpy array,
             numpy.ma array, or pooled array
        length: Length of the indexed axis

    Returns:
        One of Position, Mask, Positions, Span

    Raises:
        IndexError: If a single position or a mask does not fit the axis
        TypeError: If the argument cannot be used as an index
    """
    from .pooled import PooledArray

    if isinstance(arg, (bool, np.bool_)):
        raise TypeError("A single boolean is not a valid index")
    if isinstance(arg, (int, np.integer)):
        return Position(_check_position(int(arg), length))
    if isinstance(arg, slice):
        return Span(arg)
    if isinstance(arg, range):
        return Positions(np.arange(arg.start, arg.stop, arg.step, dtype=np.intp))
    if isinstance(arg, PooledArray):
        arg = arg.materialize()
    if isinstance(arg, np.ma.MaskedArray):
        if arg.dtype == bool:
            return _mask(arg.filled(False), length)
        if arg.dtype.kind in "iu":
            return Positions(np.asarray(arg.compressed(), dtype=np.intp))
        arg = arg.astype(object).filled(None)
    arr = np.asarray(arg)
    if arr.dtype == bool:
        return _mask(arr, length)
    if arr.dtype.kind in "iu":
        return Positions(arr.reshape(-1).astype(np.intp, copy=False))
    if arr.dtype == object:
        return _from_object_array(arr, length)
    if arr.size == 0:
        return Positions(np.empty(0, dtype=np.intp))
    raise TypeError(f"Unsupported index type: {type(arg).__name__}")


def positions(index: Index, length: int) -> np.ndarray:
    """Flat positions selected by an index form, in selection order."""
    if isinstance(index, Position):
        return np.asarray([index.pos], dtype=np.intp)
    if isinstance(index, Mask):
        return np.flatnonzero(index.mask)
    if isinstance(index, Span):
        return np.arange(length, dtype=np.intp)[index.span]
    out = index.positions.copy()
    out[out < 0] += length
    if out.size and (out.min() < 0 or out.max() >= length):
        raise IndexError(f"index out of bounds for axis with size {length}")
    return out


def select(refs: np.ndarray, index: Index) -> np.ndarray:
    """Copy of the 1-D reference array selected by a multi-cell index form."""
    if isinstance(index, Mask):
        return refs[index.mask]
    if isinstance(index, Span):
        return refs[index.span].copy()
    return refs[positions(index, refs.shape[0])]
