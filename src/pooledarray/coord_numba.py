"""Numba kernels for grouping pooled references.

References live in a small domain (0..len(pool)), so grouping cells by value
is a counting sort: one pass to histogram the references, one prefix sum,
one pass to scatter positions. O(n + k) instead of an O(n log n) comparison
sort over the values themselves.
"""

from __future__ import annotations

import numpy as np
from numba import njit


@njit(cache=True)
def ref_counts(refs: np.ndarray, nbins: int) -> np.ndarray:
    """Histogram of references: counts[r] = number of cells with reference r."""
    counts = np.zeros(nbins, dtype=np.int64)
    for i in range(refs.shape[0]):
        counts[refs[i]] += 1
    return counts


@njit(cache=True)
def counting_order(refs: np.ndarray, nbins: int) -> np.ndarray:
    """Stable permutation grouping positions by ascending reference.

    Args:
        refs: 1-D contiguous reference array
        nbins: len(pool) + 1

    Returns:
        int64 array p with refs[p] non-decreasing; ties keep input order,
        so missing cells (reference 0) come first in their original order.
    """
    counts = ref_counts(refs, nbins)

    # exclusive prefix sum -> first output slot of each reference
    starts = np.empty(nbins, dtype=np.int64)
    total = 0
    for k in range(nbins):
        starts[k] = total
        total += counts[k]

    out = np.empty(refs.shape[0], dtype=np.int64)
    for i in range(refs.shape[0]):
        r = refs[i]
        out[starts[r]] = i
        starts[r] += 1
    return out
