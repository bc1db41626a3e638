# -------------------------------------
# Reference codec - pool reference integers
# -------------------------------------
"""
Pool references are small unsigned integers.

Reference 0 is reserved for "missing", so a pool addressed by an n-bit
reference type holds at most 2**n - 1 values. Supported widths are uint8,
uint16 (the default, see state.REF_DTYPE) and uint32.
"""
from __future__ import annotations

import numpy as np

from . import state
from .errors import PoolOverflow

MISSING_REF = 0

SUPPORTED_REF_DTYPES = (np.dtype(np.uint8), np.dtype(np.uint16), np.dtype(np.uint32))


def ref_dtype(dtype=None) -> np.dtype:
    """
    Normalize a reference dtype.

    Args:
        dtype: Anything np.dtype() accepts, or None for the configured default

    Returns:
        One of SUPPORTED_REF_DTYPES

    Raises:
        ValueError: If the dtype is not a supported unsigned width
    """
    if dtype is None:
        return state.get_ref_dtype()
    dt = np.dtype(dtype)
    if dt not in SUPPORTED_REF_DTYPES:
        names = ", ".join(str(d) for d in SUPPORTED_REF_DTYPES)
        raise ValueError(f"Unsupported reference dtype {dt}; expected one of: {names}")
    return dt


def max_pool_size(dtype=None) -> int:
    """Largest pool addressable with the given reference dtype."""
    return int(np.iinfo(ref_dtype(dtype)).max)


def check_pool_size(n: int, dtype=None) -> None:
    """Raise PoolOverflow if a pool of n values cannot be addressed."""
    limit = max_pool_size(dtype)
    if n > limit:
        raise PoolOverflow(
            f"Cannot build a pool of {n} values with {ref_dtype(dtype)} references "
            f"(maximum is {limit})"
        )


def smallest_ref_dtype(n: int) -> np.dtype:
    """Narrowest supported reference dtype able to address n pool values."""
    for dt in SUPPORTED_REF_DTYPES:
        if n <= np.iinfo(dt).max:
            return dt
    raise PoolOverflow(f"No reference dtype can address a pool of {n} values")


def is_missing_value(value) -> bool:
    """True for the markers that mean "missing": None and numpy.ma.masked."""
    return value is None or value is np.ma.masked
