# -------------------------------------
# numpy.ma bridge
# -------------------------------------
"""
Conversion between pooled arrays and numpy masked arrays.

numpy.ma.MaskedArray is the plain interchange form: values plus a boolean
mask (True = missing), no pooling. Both directions copy; the result never
shares storage with its source.
"""
from __future__ import annotations

import numpy as np

from .pooled import PooledArray


def to_masked(x: PooledArray) -> np.ma.MaskedArray:
    """
    Materialize a pooled array.

    Args:
        x: Pooled array

    Returns:
        numpy.ma.MaskedArray of x.shape; masked where x is missing
    """
    return x.materialize()


def from_masked(m: np.ma.MaskedArray, ref_dtype=None) -> PooledArray:
    """
    Encode a masked array; masked cells become missing.

    Args:
        m: numpy.ma.MaskedArray (a plain ndarray is treated as unmasked)
        ref_dtype: Reference dtype (None = configured default)

    Returns:
        New PooledArray with a sorted pool of the unmasked values
    """
    m = np.ma.asarray(m)
    return PooledArray.from_values(m.data, np.ma.getmaskarray(m), ref_dtype=ref_dtype)
