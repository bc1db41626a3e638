# -------------------------------------
# pooledarray - dictionary-encoded arrays with missing values
# -------------------------------------
"""
Pooled (dictionary-encoded) arrays for in-memory tabular data.

A pooled array keeps a small pool of distinct values and an array of
unsigned integer references into it; reference 0 means missing. Equality
and grouping work on the references instead of the values.

This package provides:
- Pools and references: ValuePool, reference dtypes and limits (pool, refs)
- PooledArray: construction, indexing, assignment, missing predicate (pooled)
- Pool coordination: co_encode, replace, unique, order, compact (coord)
- Bridges: numpy.ma (masked) and pyarrow dictionary arrays (arrow)
- Formatting: format_pooled, print_pooled (format)
"""

from .errors import (
    PoolError,
    PoolOverflow,
    PoolMismatch,
    ReferenceOutOfBounds,
    ValueNotFound,
    InvalidUsage,
    Unimplemented,
)
from .refs import (
    MISSING_REF,
    SUPPORTED_REF_DTYPES,
    ref_dtype,
    max_pool_size,
    check_pool_size,
    smallest_ref_dtype,
    is_missing_value,
)
from .pool import ValuePool
from .pooled import (
    PooledArray,
    MissingType,
    from_values,
    from_pooled,
    from_range,
    missing,
    pooled,
    zeros,
    ones,
    falses,
    trues,
)
from .coord import (
    co_encode,
    replace,
    unique,
    levels,
    order,
    sort,
    group_counts,
    compact,
)
from .masked import to_masked, from_masked
from .arrow import to_arrow, from_arrow
from .format import format_pooled, print_pooled

__all__ = [
    # errors
    "PoolError",
    "PoolOverflow",
    "PoolMismatch",
    "ReferenceOutOfBounds",
    "ValueNotFound",
    "InvalidUsage",
    "Unimplemented",
    # references
    "MISSING_REF",
    "SUPPORTED_REF_DTYPES",
    "ref_dtype",
    "max_pool_size",
    "check_pool_size",
    "smallest_ref_dtype",
    "is_missing_value",
    # pools
    "ValuePool",
    # pooled arrays
    "PooledArray",
    "MissingType",
    "from_values",
    "from_pooled",
    "from_range",
    "missing",
    "pooled",
    "zeros",
    "ones",
    "falses",
    "trues",
    # coordination
    "co_encode",
    "replace",
    "unique",
    "levels",
    "order",
    "sort",
    "group_counts",
    "compact",
    # bridges
    "to_masked",
    "from_masked",
    "to_arrow",
    "from_arrow",
    # formatting
    "format_pooled",
    "print_pooled",
]
