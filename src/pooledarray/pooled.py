# -------------------------------------
# PooledArray - dictionary-encoded arrays with missing values
# -------------------------------------
"""
PooledArray stores an N-dimensional numpy array of small unsigned integer
references plus a ValuePool of distinct values. Reference 0 means missing;
reference r >= 1 means pool[r].

Construction sorts the distinct values to form the pool, so equal values
always get equal references and comparing references is the same as
comparing values. Writes reuse an existing reference when the value is
already pooled and append to the pool otherwise; the pool only grows.

Pool ownership:
- copy(), multi-cell reads and every from_* constructor give the result its
  own pool.
- similar() and coord.co_encode() return arrays that share one ValuePool
  object; growing it through one array is visible from the other.

Single-index reads and writes use flat (C order) positions on arrays of any
rank. Two-index access on matrices only supports a single cell.
"""
from __future__ import annotations

from typing import Any, Iterator, Sequence

import numpy as np

from . import index as _index
from .errors import InvalidUsage, PoolMismatch, ReferenceOutOfBounds, Unimplemented
from .pool import ValuePool, _is_nan, _same, as_values
from .refs import MISSING_REF, is_missing_value

# Value type of an all-missing array that can never hold a value
MissingType = type(None)


# -------------------------------------
# Input normalization
# -------------------------------------

def _normalize_dtype(dtype) -> np.dtype | type | None:
    if dtype is None or dtype is MissingType:
        return dtype
    return np.dtype(dtype)


def _missing_cells(arr: np.ndarray) -> np.ndarray:
    if arr.dtype != object:
        return np.zeros(arr.shape, dtype=bool)
    flat = [is_missing_value(v) for v in arr.reshape(-1)]
    return np.asarray(flat, dtype=bool).reshape(arr.shape)


def _data_and_mask(data: Any, mask: Any = None) -> tuple[np.ndarray, np.ndarray, np.dtype | None]:
    """
    Split input into (values, missing mask, value dtype).

    None / numpy.ma.masked entries of object arrays and masked cells of
    numpy.ma arrays are missing in addition to any explicit mask.
    """
    if isinstance(data, PooledArray):
        data = data.materialize()
    if isinstance(data, np.ma.MaskedArray):
        base = np.ma.getmaskarray(data)
        arr = np.asarray(data.data)
    else:
        arr = np.asarray(data)
        base = None
    missing = _missing_cells(arr)
    if base is not None:
        missing |= base
    if mask is not None:
        m = np.asarray(mask, dtype=bool)
        if m.shape != arr.shape:
            raise ValueError(f"mask shape {m.shape} does not match data shape {arr.shape}")
        missing |= m
    dtype = None if arr.dtype == object else arr.dtype
    return arr, missing, dtype


def _present_values(arr: np.ndarray, missing: np.ndarray) -> np.ndarray:
    return arr[~missing]


def _encode_refs(arr: np.ndarray, missing: np.ndarray, pool: ValuePool) -> np.ndarray:
    """
    Map every non-missing cell to its pool reference, missing cells to 0.

    Raises:
        PoolMismatch: If a non-missing value is not in the pool
    """
    refs = np.zeros(arr.shape, dtype=pool.ref_dtype)
    keep = ~missing
    present = arr[keep]
    if present.size == 0:
        return refs
    if present.dtype != object:
        distinct, inverse = np.unique(present, return_inverse=True)
        distinct = as_values(distinct)
    else:
        distinct = list(present)
        inverse = np.arange(len(distinct), dtype=np.intp)
    found = [pool.lookup(v) for v in distinct]
    for v, ref in zip(distinct, found):
        if ref is None:
            raise PoolMismatch(f"Value {v!r} is not in the provided pool")
    table = np.asarray(found, dtype=pool.ref_dtype)
    refs[keep] = table[inverse.reshape(-1)]
    return refs


def _is_sequence_value(value: Any) -> bool:
    """Values that a multi-cell write spreads over the selected cells."""
    return isinstance(value, (list, range, np.ndarray, PooledArray))


# -------------------------------------
# PooledArray
# -------------------------------------

class PooledArray:
    """
    Dictionary-encoded array with missing values.

    Args:
        refs: Integer array of references (0 = missing, r = pool[r])
        pool: ValuePool, or a sequence of distinct values used as given
        dtype: Value dtype used when materializing (None = infer from pool,
               MissingType = an array that can only ever be missing)

    Raises:
        ReferenceOutOfBounds: If a reference points beyond the pool
    """

    __slots__ = ("_refs", "_pool", "_dtype")

    def __init__(self, refs: Any, pool: ValuePool | Sequence[Any], dtype=None):
        if not isinstance(pool, ValuePool):
            pool = ValuePool(pool)
        refs = np.asarray(refs)
        if refs.dtype.kind not in "iu" and refs.size:
            raise TypeError(f"References must be integers, got {refs.dtype}")
        if refs.size:
            lo, hi = int(refs.min()), int(refs.max())
            if lo < 0 or hi > len(pool):
                bad = lo if lo < 0 else hi
                raise ReferenceOutOfBounds(
                    f"Reference {bad} points beyond the end of a pool of {len(pool)} values"
                )
        self._refs = np.ascontiguousarray(refs, dtype=pool.ref_dtype)
        self._pool = pool
        self._dtype = _normalize_dtype(dtype)

    # -------------------------------------
    # Constructors
    # -------------------------------------

    @classmethod
    def from_values(cls, data: Any, mask: Any = None, pool: Any = None, ref_dtype=None) -> "PooledArray":
        """
        Encode plain data (plus an optional missing mask).

        The pool is the sorted set of distinct non-missing values. When a pool
        is supplied it is deduplicated and sorted the same way, and every
        non-missing value must be in it.

        Args:
            data: Values; a list, numpy array, numpy.ma array or PooledArray.
                  None entries are missing.
            mask: Optional boolean array, True = missing
            pool: Optional candidate pool values
            ref_dtype: Reference dtype (None = configured default)

        Returns:
            New PooledArray owning its pool

        Raises:
            PoolOverflow: If there are too many distinct values
            PoolMismatch: If a value is missing from a supplied pool
        """
        arr, missing, dtype = _data_and_mask(data, mask)
        if pool is None:
            new_pool = ValuePool.build(_present_values(arr, missing), ref_dtype)
        else:
            if isinstance(pool, ValuePool):
                pool = pool.values
            new_pool = ValuePool.build(pool if isinstance(pool, np.ndarray) else list(pool), ref_dtype)
        refs = _encode_refs(arr, missing, new_pool)
        return cls(refs, new_pool, dtype)

    @classmethod
    def missing(cls, shape: int | tuple[int, ...], dtype=None, ref_dtype=None) -> "PooledArray":
        """All-missing array of the given shape with an empty pool."""
        pool = ValuePool((), ref_dtype)
        return cls(np.zeros(shape, dtype=pool.ref_dtype), pool, dtype)

    # -------------------------------------
    # Shape
    # -------------------------------------

    @property
    def refs(self) -> np.ndarray:
        return self._refs

    @property
    def pool(self) -> ValuePool:
        return self._pool

    @property
    def dtype(self):
        return self._dtype

    @property
    def ref_dtype(self) -> np.dtype:
        return self._pool.ref_dtype

    @property
    def shape(self) -> tuple[int, ...]:
        return self._refs.shape

    @property
    def ndim(self) -> int:
        return self._refs.ndim

    @property
    def size(self) -> int:
        return int(self._refs.size)

    @property
    def last_index(self) -> int:
        """Last valid flat position (-1 when empty)."""
        return self.size - 1

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Any]:
        for i in range(self.size):
            yield self._value(int(self._flat[i]))

    def __repr__(self) -> str:
        from .format import format_pooled

        return format_pooled(self)

    __str__ = __repr__

    @property
    def _flat(self) -> np.ndarray:
        # refs are C-contiguous, so this is a view
        return self._refs.reshape(-1)

    def _value(self, ref: int) -> Any:
        return None if ref == MISSING_REF else self._pool[ref]

    def _value_dtype(self):
        if self._dtype is MissingType:
            return np.dtype(object)
        return self._dtype

    # -------------------------------------
    # Copying and predicates
    # -------------------------------------

    def copy(self) -> "PooledArray":
        """Deep copy: new refs and a new pool, nothing shared."""
        return PooledArray(self._refs.copy(), self._pool.copy(), self._dtype)

    def similar(self, *shape) -> "PooledArray":
        """
        All-missing array that shares this array's pool object.

        Args:
            *shape: New shape (ints or one tuple); defaults to this shape

        Returns:
            PooledArray whose pool *is* self.pool
        """
        if not shape:
            shape = self.shape
        elif len(shape) == 1 and isinstance(shape[0], tuple):
            shape = shape[0]
        return PooledArray(np.zeros(shape, dtype=self.ref_dtype), self._pool, self._dtype)

    def is_missing(self) -> np.ndarray:
        """Boolean array, True where the reference is 0. Does not read the pool."""
        return self._refs == MISSING_REF

    def materialize(self) -> np.ma.MaskedArray:
        """
        Resolve every reference through the pool.

        Returns:
            numpy.ma.MaskedArray of the array's shape, masked where missing
        """
        table = self._pool.lookup_table(self._value_dtype())
        return np.ma.MaskedArray(table[self._refs], mask=self.is_missing())

    def tolist(self) -> list:
        """Nested lists of values with None for missing cells."""
        return self.materialize().tolist()

    def equals(self, other: "PooledArray") -> bool:
        """Cell-wise equality of values and missingness (pool order ignored)."""
        if not isinstance(other, PooledArray) or self.shape != other.shape:
            return False
        a, b = self._flat, other._flat
        if not np.array_equal(a == MISSING_REF, b == MISSING_REF):
            return False
        if self._pool is other._pool:
            return bool(np.array_equal(a, b))
        for ra, rb in zip(a.tolist(), b.tolist()):
            if ra and not _same(self._pool[ra], other._pool[rb]):
                return False
        return True

    # -------------------------------------
    # Pool views
    # -------------------------------------

    def get_indices(self) -> np.ndarray:
        """The reference array itself (not a copy)."""
        return self._refs

    def index_to_level(self) -> dict[int, Any]:
        """Mapping reference -> pool value."""
        return {ref: v for ref, v in enumerate(self._pool, 1)}

    def level_to_index(self) -> dict[Any, int]:
        """Mapping pool value -> reference (values must be hashable)."""
        return {v: ref for ref, v in enumerate(self._pool, 1)}

    def levels(self) -> np.ma.MaskedArray:
        """Alias of coord.unique()."""
        from .coord import unique

        return unique(self)

    unique = levels

    def map(self, fn, dtype=None) -> "PooledArray":
        """
        Apply fn once per pool value and re-encode.

        The result has its own freshly built pool; missing stays missing.
        """
        mapped = [fn(v) for v in self._pool]
        pool = ValuePool.build([v for v in mapped if not is_missing_value(v)], self.ref_dtype)
        table = np.zeros(len(self._pool) + 1, dtype=self.ref_dtype)
        for ref, v in enumerate(mapped, 1):
            table[ref] = MISSING_REF if is_missing_value(v) else pool.lookup(v)
        return PooledArray(table[self._refs], pool, dtype)

    def isnan(self) -> "PooledArray":
        """Pooled booleans: is each value NaN (evaluated once per pool value)."""
        return self.map(lambda v: bool(_is_nan(v)), bool)

    def isfinite(self) -> "PooledArray":
        """Pooled booleans: is each value finite (evaluated once per pool value)."""
        return self.map(lambda v: bool(np.isfinite(v)), bool)

    def nonzero(self) -> np.ndarray:
        """Flat positions of truthy, non-missing cells."""
        table = np.zeros(len(self._pool) + 1, dtype=bool)
        for ref, v in enumerate(self._pool, 1):
            table[ref] = bool(v)
        return np.flatnonzero(table[self._refs])

    find = nonzero

    # -------------------------------------
    # Index read
    # -------------------------------------

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, tuple):
            return self._getitem2(key)
        idx = _index.as_index(key, self.size)
        if isinstance(idx, _index.Position):
            return self._value(int(self._flat[idx.pos]))
        refs = _index.select(self._flat, idx)
        return PooledArray(refs, self._pool.copy(), self._dtype)

    def _getitem2(self, key: tuple) -> Any:
        if len(key) != 2 or self.ndim != 2:
            raise IndexError(f"{len(key)} indices given for a {self.ndim}-dimensional pooled array")
        rows, cols = self.shape
        i = _index.as_index(key[0], rows)
        j = _index.as_index(key[1], cols)
        if isinstance(i, _index.Position) and isinstance(j, _index.Position):
            return self._value(int(self._refs[i.pos, j.pos]))
        raise Unimplemented("Multi-element two-dimensional indexing is not implemented")

    # -------------------------------------
    # Index write
    # -------------------------------------

    def _check_writable(self) -> None:
        if self._dtype is MissingType:
            raise InvalidUsage("Pooled arrays of the missing type cannot hold values")

    def _coerce(self, value: Any) -> Any:
        dt = self._dtype
        if not isinstance(dt, np.dtype):
            return value
        if dt.kind in "Mm":
            # same unit as the pool so lookups match
            return np.asarray(value).astype(dt)[()]
        if dt.kind not in "biufc":
            return value
        converted = dt.type(value)
        if converted != value and not _is_nan(value):
            raise ValueError(f"Cannot store {value!r} in a pooled array of {dt}")
        return converted.item()

    def _ref_for(self, value: Any) -> int:
        """Reference for value, appending it to the pool when new."""
        self._check_writable()
        value = self._coerce(value)
        ref = self._pool.lookup(value)
        if ref is None:
            ref = self._pool.append(value)
        return ref

    def _set_cell(self, pos: int, value: Any) -> None:
        if is_missing_value(value):
            self._flat[pos] = MISSING_REF
        else:
            self._flat[pos] = self._ref_for(value)

    def __setitem__(self, key: Any, value: Any) -> None:
        if isinstance(key, tuple):
            self._setitem2(key, value)
            return
        idx = _index.as_index(key, self.size)
        if isinstance(idx, _index.Position):
            self._set_cell(idx.pos, value)
            return
        self._check_writable()
        targets = _index.positions(idx, self.size)
        if is_missing_value(value):
            self._flat[targets] = MISSING_REF
        elif _is_sequence_value(value):
            values = value.tolist() if isinstance(value, PooledArray) else value
            if isinstance(values, np.ma.MaskedArray):
                values = values.tolist()
            elif isinstance(values, np.ndarray):
                values = values.reshape(-1).tolist()
            else:
                values = list(values)
            if len(values) != len(targets):
                raise ValueError(
                    f"Cannot assign {len(values)} values to {len(targets)} positions"
                )
            # one cell at a time, so a value appended earlier in the batch is reused
            for pos, v in zip(targets.tolist(), values):
                self._set_cell(pos, v)
        elif targets.size:
            self._flat[targets] = self._ref_for(value)

    def _setitem2(self, key: tuple, value: Any) -> None:
        if len(key) != 2 or self.ndim != 2:
            raise IndexError(f"{len(key)} indices given for a {self.ndim}-dimensional pooled array")
        rows, cols = self.shape
        i = _index.as_index(key[0], rows)
        j = _index.as_index(key[1], cols)
        if not (isinstance(i, _index.Position) and isinstance(j, _index.Position)):
            raise Unimplemented("Multi-element two-dimensional assignment is not implemented")
        if is_missing_value(value):
            self._refs[i.pos, j.pos] = MISSING_REF
        else:
            self._refs[i.pos, j.pos] = self._ref_for(value)

    # -------------------------------------
    # Pool coordination shortcuts
    # -------------------------------------

    def replace(self, from_value: Any, to_value: Any) -> Any:
        """In-place value replacement, see coord.replace()."""
        from .coord import replace

        return replace(self, from_value, to_value)

    def order(self) -> np.ndarray:
        """Grouping permutation by pool order, see coord.order()."""
        from .coord import order

        return order(self)

    def sort(self) -> "PooledArray":
        """Cells regrouped in pool order, see coord.sort()."""
        from .coord import sort

        return sort(self)


# -------------------------------------
# Module-level constructors
# -------------------------------------

def from_values(data: Any, mask: Any = None, pool: Any = None, ref_dtype=None) -> PooledArray:
    """Encode plain data, see PooledArray.from_values()."""
    return PooledArray.from_values(data, mask, pool=pool, ref_dtype=ref_dtype)


def from_pooled(x: PooledArray) -> PooledArray:
    """No-op conversion: returns x itself."""
    return x


def _shape(shape: tuple) -> tuple:
    if len(shape) == 1 and isinstance(shape[0], tuple):
        return shape[0]
    return shape


def missing(*shape, dtype=None, ref_dtype=None) -> PooledArray:
    """All-missing array, e.g. missing(3) or missing(2, 4, dtype=float)."""
    return PooledArray.missing(_shape(shape), dtype, ref_dtype)


def pooled(*values: Any, ref_dtype=None) -> PooledArray:
    """Literal constructor: pooled("a", None, "b") with None as missing."""
    arr = np.empty(len(values), dtype=object)
    for i, v in enumerate(values):
        arr[i] = v
    return PooledArray.from_values(arr, ref_dtype=ref_dtype)


def from_range(r: range, ref_dtype=None) -> PooledArray:
    """Pool the integers of a range."""
    return PooledArray.from_values(np.arange(r.start, r.stop, r.step), ref_dtype=ref_dtype)


def zeros(*shape, dtype=float) -> PooledArray:
    return PooledArray.from_values(np.zeros(_shape(shape), dtype=dtype))


def ones(*shape, dtype=float) -> PooledArray:
    return PooledArray.from_values(np.ones(_shape(shape), dtype=dtype))


def falses(*shape) -> PooledArray:
    return PooledArray.from_values(np.zeros(_shape(shape), dtype=bool))


def trues(*shape) -> PooledArray:
    return PooledArray.from_values(np.ones(_shape(shape), dtype=bool))
