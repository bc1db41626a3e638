# -------------------------------------
# Value pools - ordered distinct values
# -------------------------------------
"""
A ValuePool is the ordered, deduplicated list of values a pooled array can
reference. References are 1-based: reference r resolves to the r-th pool
value, reference 0 means missing and never touches the pool.

Pools built with ValuePool.build() are sorted. Pools grown by append() or
rewritten by set() are not re-sorted, so existing references keep pointing at
the same values. Sortedness is therefore a property of construction only.

Reverse lookup (value -> reference) uses a dict built on the first lookup.
Pools holding unhashable values fall back to a linear scan.
"""
from __future__ import annotations

from typing import Any, Iterable, Iterator

import numpy as np

from .errors import InvalidUsage, PoolOverflow
from .refs import check_pool_size, is_missing_value, max_pool_size, ref_dtype


def _is_nan(value: Any) -> bool:
    return isinstance(value, (float, np.floating)) and value != value


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if _is_nan(a) and _is_nan(b):
        return True
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False


def _distinct(values: list) -> list:
    """Distinct values in first-seen order; NaNs collapse to one entry."""
    nan = None
    rest = []
    for v in values:
        if _is_nan(v):
            if nan is None:
                nan = v
        else:
            rest.append(v)
    try:
        out = list(dict.fromkeys(rest))
    except TypeError:
        # unhashable values: quadratic, but only for exotic pools
        out = []
        for v in rest:
            if not any(_same(v, u) for u in out):
                out.append(v)
    if nan is not None:
        out.append(nan)
    return out


def _sort_key(value: Any) -> tuple:
    # NaN sorts last, matching numpy's ordering
    if _is_nan(value):
        return (1, 0)
    return (0, value)


def _infer_dtype(values: list) -> np.dtype:
    if not values:
        return np.dtype(np.float64)
    try:
        arr = np.asarray(values)
    except (TypeError, ValueError):
        return np.dtype(object)
    if arr.ndim != 1:
        return np.dtype(object)
    # numpy stringifies numbers mixed in with strings
    if arr.dtype.kind == "U" and not all(isinstance(v, str) for v in values):
        return np.dtype(object)
    if arr.dtype.kind == "S" and not all(isinstance(v, bytes) for v in values):
        return np.dtype(object)
    return arr.dtype


def as_values(arr: np.ndarray) -> list:
    """
    Flat list of Python values for a numpy array.

    datetime64 and timedelta64 stay numpy scalars, since tolist() turns
    nanosecond units into plain ints.
    """
    flat = arr.reshape(-1)
    if flat.dtype.kind in "Mm":
        return list(flat)
    return flat.tolist()


class ValuePool:
    """
    Ordered list of distinct values addressed by 1-based references.

    Args:
        values: Pool values, used in the given order (no sorting)
        ref_dtype: Reference dtype that bounds the pool size (None = default)

    Raises:
        PoolOverflow: If there are more values than the reference dtype addresses
        InvalidUsage: If a value is the missing marker
        ValueError: If values are not pairwise distinct
    """

    __slots__ = ("_values", "_ref_dtype", "_index", "_nan_ref")

    def __init__(self, values: Iterable[Any] = (), ref_dtype=None):
        self._ref_dtype = _ref_dtype(ref_dtype)
        vals = list(values)
        check_pool_size(len(vals), self._ref_dtype)
        for v in vals:
            if is_missing_value(v):
                raise InvalidUsage("A pool cannot contain the missing marker")
        if len(_distinct(vals)) != len(vals):
            raise ValueError("Pool values must be distinct")
        self._values = vals
        self._index: dict | bool | None = None
        self._nan_ref: int | None = None

    @classmethod
    def build(cls, values: Iterable[Any], ref_dtype=None) -> "ValuePool":
        """
        Build a sorted, deduplicated pool.

        Numeric and string numpy arrays go through np.unique; anything else is
        deduplicated with a dict and sorted with sorted(). NaNs collapse to a
        single entry placed last.

        Args:
            values: Candidate values (missing markers are rejected)
            ref_dtype: Reference dtype (None = default)

        Returns:
            New ValuePool

        Raises:
            PoolOverflow: If the distinct values exceed the addressable range
            TypeError: If the values have no usable ordering
        """
        if isinstance(values, np.ndarray) and values.dtype != object:
            distinct = as_values(np.unique(values.ravel()))
        else:
            vals = list(values.ravel()) if isinstance(values, np.ndarray) else list(values)
            for v in vals:
                if is_missing_value(v):
                    raise InvalidUsage("A pool cannot contain the missing marker")
            distinct = sorted(_distinct(vals), key=_sort_key)
        check_pool_size(len(distinct), ref_dtype)
        pool = cls.__new__(cls)
        pool._ref_dtype = _ref_dtype(ref_dtype)
        pool._values = distinct
        pool._index = None
        pool._nan_ref = None
        return pool

    # -------------------------------------
    # Basic properties
    # -------------------------------------

    @property
    def ref_dtype(self) -> np.dtype:
        return self._ref_dtype

    @property
    def capacity(self) -> int:
        return max_pool_size(self._ref_dtype)

    @property
    def values(self) -> list:
        """Copy of the pool values in pool order."""
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __getitem__(self, ref: int) -> Any:
        if not 1 <= ref <= len(self._values):
            raise IndexError(f"Pool reference {ref} out of range 1..{len(self._values)}")
        return self._values[ref - 1]

    def __contains__(self, value: Any) -> bool:
        return self.lookup(value) is not None

    def __repr__(self) -> str:
        return f"ValuePool({self._values!r}, ref_dtype={self._ref_dtype})"

    def copy(self) -> "ValuePool":
        """Independent pool with the same values and reference dtype."""
        pool = ValuePool.__new__(ValuePool)
        pool._values = list(self._values)
        pool._ref_dtype = self._ref_dtype
        pool._index = None
        pool._nan_ref = None
        return pool

    def is_sorted(self) -> bool:
        """True while the pool is still in sorted (construction) order."""
        try:
            return self._values == sorted(self._values, key=_sort_key)
        except TypeError:
            return False

    # -------------------------------------
    # Reverse lookup
    # -------------------------------------

    def _build_index(self) -> None:
        index: dict | bool = {}
        self._nan_ref = None
        for ref, v in enumerate(self._values, 1):
            if _is_nan(v):
                if self._nan_ref is None:
                    self._nan_ref = ref
                continue
            if index is False:
                continue
            try:
                index.setdefault(v, ref)
            except TypeError:
                index = False
        self._index = index

    def _scan(self, value: Any) -> int | None:
        for ref, v in enumerate(self._values, 1):
            if _same(v, value):
                return ref
        return None

    def lookup(self, value: Any) -> int | None:
        """
        Reference of the first pool entry equal to value.

        Args:
            value: Value to find

        Returns:
            1-based reference, or None if the value is not in the pool
            (missing markers are never in a pool)
        """
        if is_missing_value(value):
            return None
        if self._index is None:
            self._build_index()
        if _is_nan(value):
            return self._nan_ref
        if self._index is not False:
            try:
                return self._index.get(value)
            except TypeError:
                pass
        return self._scan(value)

    # -------------------------------------
    # Growth
    # -------------------------------------

    def append(self, value: Any) -> int:
        """
        Add a value at the end of the pool (no re-sort).

        The caller is responsible for checking the value is not already in
        the pool, see lookup().

        Returns:
            The new value's 1-based reference

        Raises:
            PoolOverflow: If the pool is already at capacity
            InvalidUsage: If value is the missing marker
        """
        if is_missing_value(value):
            raise InvalidUsage("Cannot append the missing marker to a pool")
        if len(self._values) >= self.capacity:
            raise PoolOverflow(
                f"Pool is full: {len(self._values)} values is the maximum for "
                f"{self._ref_dtype} references"
            )
        self._values.append(value)
        ref = len(self._values)
        if self._index is not None:
            if _is_nan(value):
                if self._nan_ref is None:
                    self._nan_ref = ref
            elif self._index is not False:
                try:
                    self._index.setdefault(value, ref)
                except TypeError:
                    self._index = False
        return ref

    def set(self, ref: int, value: Any) -> None:
        """Overwrite the value in slot ref; every reference to it follows."""
        if is_missing_value(value):
            raise InvalidUsage("Cannot store the missing marker in a pool")
        if not 1 <= ref <= len(self._values):
            raise IndexError(f"Pool reference {ref} out of range 1..{len(self._values)}")
        self._values[ref - 1] = value
        self._index = None

    # -------------------------------------
    # numpy views
    # -------------------------------------

    def lookup_table(self, dtype=None) -> np.ndarray:
        """
        Array t of length len(pool) + 1 with t[r] == pool[r] for r >= 1.

        Slot 0 holds a placeholder (zero, empty string or None) so that
        table[refs] materializes a whole reference array in one step.

        Args:
            dtype: Value dtype, or None to infer one from the pool values

        Returns:
            numpy array indexed by reference
        """
        values = self._values
        dt = _infer_dtype(values) if dtype is None else np.dtype(dtype)
        if dt.kind in "US":
            # fixed-width strings: size the table from the current values
            body = np.asarray(values, dtype=dt.kind) if values else np.empty(0, dtype=dt)
            table = np.zeros(len(values) + 1, dtype=body.dtype)
            table[1:] = body
            return table
        if dt == object:
            table = np.empty(len(values) + 1, dtype=object)
            for i, v in enumerate(values, 1):
                table[i] = v
            return table
        table = np.zeros(len(values) + 1, dtype=dt)
        table[1:] = values
        return table

    def to_numpy(self, dtype=None) -> np.ndarray:
        """Pool values as a numpy array in pool order."""
        return self.lookup_table(dtype)[1:]


def _ref_dtype(dtype) -> np.dtype:
    return ref_dtype(dtype)
