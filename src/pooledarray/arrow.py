# -------------------------------------
# Arrow bridge - pooled arrays <-> pyarrow dictionary arrays
# -------------------------------------
"""
Conversion between 1-D pooled arrays and PyArrow arrays.

A pyarrow.DictionaryArray is the Arrow form of a pooled array: its dictionary
is the pool and its indices are the references shifted down by one, with
nulls where the pooled array is missing.

PyArrow is optional - only required for this module.
"""
from __future__ import annotations

from typing import Any, TYPE_CHECKING

import numpy as np

from .pooled import PooledArray

# Use guarded import so the package works without pyarrow installed
pa = None
pc = None


def _import_pyarrow():
    """Import pyarrow lazily, raising a clear error if not installed."""
    global pa, pc
    if pa is None:
        try:
            import pyarrow as _pa
            import pyarrow.compute as _pc
            pa = _pa
            pc = _pc
        except ImportError:
            raise ImportError(
                "PyArrow is required for Arrow conversion. "
                "Install with: pip install pyarrow"
            )
    return pa, pc


# For type checking only - doesn't require runtime import
if TYPE_CHECKING:
    import pyarrow as pa


def to_arrow(x: PooledArray) -> "pa.DictionaryArray":
    """
    Convert a 1-D pooled array to a pyarrow.DictionaryArray.

    Args:
        x: 1-D pooled array

    Returns:
        DictionaryArray whose dictionary is the full pool (pool order,
        unreferenced entries included) and whose nulls are the missing cells

    Raises:
        ValueError: If x is not one-dimensional
    """
    if x.ndim != 1:
        raise ValueError(f"Only 1-D pooled arrays convert to Arrow, got {x.ndim}-D")
    _pa, _ = _import_pyarrow()
    index_type = _pa.int64() if x.ref_dtype.itemsize >= 4 else _pa.int32()
    indices = _pa.array(
        x.refs.astype(np.int64) - 1,
        mask=x.is_missing(),
        type=index_type,
    )
    dictionary = _pa.array(x.pool.to_numpy(x._value_dtype()))
    return _pa.DictionaryArray.from_arrays(indices, dictionary)


def from_arrow(arr: Any, ref_dtype=None) -> PooledArray:
    """
    Convert a pyarrow Array, ChunkedArray or DictionaryArray to a pooled array.

    Dictionary arrays are decoded first, so the result's pool is rebuilt
    (sorted, deduplicated) from the values actually present.

    Args:
        arr: pyarrow array
        ref_dtype: Reference dtype (None = configured default)

    Returns:
        New 1-D PooledArray; Arrow nulls become missing cells
    """
    _pa, _pc = _import_pyarrow()
    if isinstance(arr, _pa.ChunkedArray):
        arr = arr.combine_chunks()
    if _pa.types.is_dictionary(arr.type):
        arr = arr.dictionary_decode()
    missing = _pc.is_null(arr).to_numpy(zero_copy_only=False)
    present = _pc.drop_null(arr).to_numpy(zero_copy_only=False)
    data = np.empty(len(arr), dtype=present.dtype)
    data[~missing] = present
    return PooledArray.from_values(data, missing, ref_dtype=ref_dtype)
