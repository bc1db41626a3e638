# -------------------------------------
# Pool coordination - algorithms across pooled arrays
# -------------------------------------
"""
Algorithms that work on the pool/reference pair rather than on values:

- co_encode: encode two columns against one shared pool
- replace: in-place value replacement by remapping pool entries
- unique / levels: the pool, plus a trailing missing entry when needed
- order / sort / group_counts: counting-sort grouping over references
- compact: drop pool entries no cell references (never done implicitly)
"""
from __future__ import annotations

from typing import Any

import numpy as np

from .coord_numba import counting_order, ref_counts
from .errors import ValueNotFound
from .pool import ValuePool, as_values
from .pooled import PooledArray, _data_and_mask, _encode_refs
from .refs import MISSING_REF, is_missing_value


# -------------------------------------
# Co-encoding
# -------------------------------------

def _union(a: np.ndarray, b: np.ndarray) -> np.ndarray | list:
    if a.dtype != object and b.dtype != object and a.dtype.kind == b.dtype.kind:
        return np.concatenate([a.reshape(-1), b.reshape(-1)])
    return as_values(a) + as_values(b)


def co_encode(v1: Any, v2: Any, ref_dtype=None) -> tuple[PooledArray, PooledArray]:
    """
    Encode two columns against one shared, sorted pool.

    Equal values get equal references in both results, so the columns can be
    compared or joined on references alone.

    Args:
        v1: First column (list, numpy array, numpy.ma array or PooledArray)
        v2: Second column
        ref_dtype: Reference dtype (None = configured default)

    Returns:
        (p1, p2) with p1.pool is p2.pool. The pool is shared: a write that
        grows it through one array is visible from the other.

    Raises:
        PoolOverflow: If the union has too many distinct values
    """
    arr1, miss1, dtype1 = _data_and_mask(v1)
    arr2, miss2, dtype2 = _data_and_mask(v2)
    pool = ValuePool.build(_union(arr1[~miss1], arr2[~miss2]), ref_dtype)
    refs1 = _encode_refs(arr1, miss1, pool)
    refs2 = _encode_refs(arr2, miss2, pool)
    return PooledArray(refs1, pool, dtype1), PooledArray(refs2, pool, dtype2)


# -------------------------------------
# Replacement
# -------------------------------------

def replace(x: PooledArray, from_value: Any, to_value: Any) -> Any:
    """
    Replace every occurrence of from_value with to_value, in place.

    Missing is written as None (or numpy.ma.masked) on either side:
    - value -> value: if to_value is pooled, cells are repointed to it and
      from_value's slot is orphaned; otherwise from_value's slot is
      overwritten and no reference changes.
    - missing -> value: missing cells point at to_value (appended if new).
    - value -> missing: cells holding from_value become missing; the slot is
      orphaned.
    - missing -> missing: no-op.

    Overwriting a slot changes the pool object, so arrays sharing it (see
    similar() and co_encode()) see the new value too.

    Returns:
        to_value

    Raises:
        ValueNotFound: If from_value is a value and is not in the pool
    """
    from_missing = is_missing_value(from_value)
    to_missing = is_missing_value(to_value)
    if from_missing and to_missing:
        return to_value
    x._check_writable()
    refs = x.refs
    pool = x.pool

    if from_missing:
        refs[refs == MISSING_REF] = x._ref_for(to_value)
        return to_value

    from_ref = pool.lookup(from_value)
    if from_ref is None:
        raise ValueNotFound(f"Cannot replace {from_value!r}: value is not in the pool")

    if to_missing:
        refs[refs == from_ref] = MISSING_REF
        return to_value

    to_value = x._coerce(to_value)
    to_ref = pool.lookup(to_value)
    if to_ref is not None:
        refs[refs == from_ref] = to_ref
    else:
        pool.set(from_ref, to_value)
    return to_value


# -------------------------------------
# Levels
# -------------------------------------

def unique(x: PooledArray) -> np.ma.MaskedArray:
    """
    Distinct values of x in pool order.

    Returns:
        numpy.ma.MaskedArray holding the whole pool (orphaned slots included),
        followed by one masked entry if any cell is missing
    """
    table = x.pool.lookup_table(x._value_dtype())
    values = table[1:]
    if np.any(x.refs == MISSING_REF):
        data = np.concatenate([values, table[:1]])
        mask = np.zeros(data.shape[0], dtype=bool)
        mask[-1] = True
        return np.ma.MaskedArray(data, mask=mask)
    return np.ma.MaskedArray(values.copy(), mask=np.zeros(values.shape[0], dtype=bool))


levels = unique


# -------------------------------------
# Grouping
# -------------------------------------

def _flat_refs(x: PooledArray) -> np.ndarray:
    return np.ascontiguousarray(x.refs.reshape(-1))


def group_counts(x: PooledArray) -> np.ndarray:
    """counts[r] = number of cells with reference r (r = 0 is missing)."""
    return ref_counts(_flat_refs(x), len(x.pool) + 1)


def order(x: PooledArray) -> np.ndarray:
    """
    Flat positions of x grouped by pool order, missing first.

    Counting sort over the reference domain: O(n + len(pool)). The
    permutation is stable, so cells with equal values keep their relative
    order.
    """
    return counting_order(_flat_refs(x), len(x.pool) + 1).astype(np.intp, copy=False)


def sort(x: PooledArray) -> PooledArray:
    """x[order(x)]: a new 1-D array (with a copied pool) in pool order."""
    return x[order(x)]


def compact(x: PooledArray) -> PooledArray:
    """
    Copy of x whose pool only holds referenced values, in pool order.

    Slices and replace() keep unreferenced pool entries; this is the explicit
    way to drop them.
    """
    used = np.flatnonzero(group_counts(x)[1:]) + 1
    pool = ValuePool([x.pool[int(r)] for r in used], x.ref_dtype)
    table = np.zeros(len(x.pool) + 1, dtype=x.ref_dtype)
    table[used] = np.arange(1, used.shape[0] + 1)
    return PooledArray(table[x.refs], pool, x.dtype)
