"""Tests for pooledarray.coord module."""

import numpy as np
import pytest

from pooledarray.coord import (
    co_encode,
    compact,
    group_counts,
    levels,
    order,
    replace,
    sort,
    unique,
)
from pooledarray.errors import InvalidUsage, ValueNotFound
from pooledarray.pooled import MissingType, PooledArray, from_values, missing, pooled


def _random_pooled(rng, n, k, missing_rate):
    data = rng.integers(0, k, size=n)
    mask = rng.random(n) < missing_rate
    return from_values(data, mask)


class TestCoEncode:
    """Tests for encoding two columns against one pool."""

    def test_shared_pool(self):
        p1, p2 = co_encode(["a", "c"], ["b", "a"])
        assert p1.pool is p2.pool
        assert p1.pool.values == ["a", "b", "c"]
        assert p1.refs.tolist() == [1, 3]
        assert p2.refs.tolist() == [2, 1]

    def test_equal_values_equal_refs(self):
        v1 = [5, 3, 9, 3]
        v2 = [3, 9, 1]
        p1, p2 = co_encode(v1, v2)
        for i, a in enumerate(v1):
            for j, b in enumerate(v2):
                assert (p1.refs[i] == p2.refs[j]) == (a == b)

    def test_disjoint(self):
        p1, p2 = co_encode([1, 2], [3, 4])
        assert p1.pool.values == [1, 2, 3, 4]
        assert p1.tolist() == [1, 2]
        assert p2.tolist() == [3, 4]

    def test_mixed_numeric_kinds(self):
        p1, p2 = co_encode([1, 2], [2.5])
        assert p1.pool.values == [1, 2, 2.5]
        assert p2.refs.tolist() == [3]

    def test_missing_values(self):
        p1, p2 = co_encode(["a", None], ["a"])
        assert p1.refs.tolist() == [1, 0]
        assert p2.refs.tolist() == [1]

    def test_pooled_inputs(self):
        a = from_values(["x", "y"])
        b = from_values(["y", "z"])
        p1, p2 = co_encode(a, b)
        assert p1.pool.values == ["x", "y", "z"]
        assert p1.refs[1] == p2.refs[0]

    def test_growth_visible_in_both(self):
        p1, p2 = co_encode(["a"], ["b"])
        p1[0] = "zz"
        assert "zz" in p2.pool
        assert p2.tolist() == ["b"]

    def test_empty_inputs(self):
        p1, p2 = co_encode([], [])
        assert len(p1.pool) == 0
        assert p1.size == 0 and p2.size == 0


class TestReplace:
    """Tests for in-place value replacement."""

    def test_new_value_overwrites_slot(self):
        x = from_values([1, 2, 3, 2])
        assert replace(x, 2, 5) == 5
        assert x.pool.values == [1, 5, 3]
        assert x.refs.tolist() == [1, 2, 3, 2]
        assert x.tolist() == [1, 5, 3, 5]

    def test_existing_value_repoints_refs(self):
        x = from_values([1, 2, 3, 2])
        replace(x, 2, 3)
        assert x.refs.tolist() == [1, 3, 3, 3]
        assert x.pool.values == [1, 2, 3]
        assert x.tolist() == [1, 3, 3, 3]

    def test_missing_to_new_value(self):
        x = from_values([1, None, 2])
        replace(x, None, 7)
        assert x.pool.values == [1, 2, 7]
        assert x.tolist() == [1, 7, 2]

    def test_missing_to_existing_value(self):
        x = from_values([1, None, 2])
        replace(x, None, 1)
        assert len(x.pool) == 2
        assert x.tolist() == [1, 1, 2]

    def test_value_to_missing(self):
        x = from_values([1, 2, 2])
        assert replace(x, 2, None) is None
        assert x.tolist() == [1, None, None]
        assert x.pool.values == [1, 2]

    def test_both_missing_is_noop(self):
        x = from_values([1, None])
        assert replace(x, None, None) is None
        assert x.tolist() == [1, None]

    def test_both_missing_on_missing_type(self):
        x = missing(2, dtype=MissingType)
        assert replace(x, None, None) is None

    def test_missing_type_rejects_values(self):
        x = missing(2, dtype=MissingType)
        with pytest.raises(InvalidUsage):
            replace(x, None, 1)

    def test_value_not_found(self):
        x = from_values([1, 2])
        with pytest.raises(ValueNotFound):
            replace(x, 9, 1)
        with pytest.raises(ValueNotFound):
            replace(x, 9, None)
        assert x.tolist() == [1, 2]

    def test_shared_pool_sees_overwrite(self):
        p1, p2 = co_encode(["a", "b"], ["b"])
        replace(p1, "b", "z")
        assert p2.tolist() == ["z"]

    def test_orphaned_slot_retained_in_unique(self):
        x = from_values(["a", "b"])
        replace(x, "b", "a")
        assert x.tolist() == ["a", "a"]
        assert unique(x).tolist() == ["a", "b"]

    def test_method(self):
        x = from_values(["a", "b"])
        x.replace("a", "c")
        assert x.tolist() == ["c", "b"]


class TestUnique:
    """Tests for unique / levels."""

    def test_with_missing(self):
        x = from_values([1, None, 2, 1])
        u = unique(x)
        assert u.tolist() == [1, 2, None]
        assert np.ma.getmaskarray(u).tolist() == [False, False, True]

    def test_without_missing(self):
        x = from_values([1, 2, 1])
        u = unique(x)
        assert u.tolist() == [1, 2]
        assert not np.ma.getmaskarray(u).any()

    def test_pool_order_after_append(self):
        x = from_values(["b", "c"])
        x[0] = "a"
        assert unique(x).tolist() == ["b", "c", "a"]

    def test_all_missing(self):
        assert unique(missing(3)).tolist() == [None]

    def test_mixed_types_not_stringified(self):
        x = pooled(1.5, None)
        x[1] = "z"
        assert unique(x).tolist() == [1.5, "z"]

    def test_result_is_a_copy(self):
        x = from_values([1, 2])
        u = unique(x)
        u[0] = 99
        assert x.pool.values == [1, 2]

    def test_levels_alias(self):
        x = from_values(["b", "a"])
        assert levels(x).tolist() == unique(x).tolist()


class TestOrder:
    """Tests for the counting-sort grouping permutation."""

    def test_groups_by_pool_order(self):
        x = from_values(["b", "a", "b", "a"])
        assert order(x).tolist() == [1, 3, 0, 2]

    def test_missing_first(self):
        x = from_values(["b", None, "a", None])
        assert order(x).tolist() == [1, 3, 2, 0]

    def test_all_missing(self):
        assert order(missing(5)).tolist() == [0, 1, 2, 3, 4]

    def test_empty(self):
        assert order(from_values([])).tolist() == []

    @pytest.mark.parametrize("k", [1, 2, 17, 255])
    @pytest.mark.parametrize("missing_rate", [0.0, 0.3, 1.0])
    def test_random(self, k, missing_rate):
        rng = np.random.default_rng(k)
        x = _random_pooled(rng, 500, k, missing_rate)
        p = order(x)
        refs = x.refs.reshape(-1).astype(np.int64)
        assert np.array_equal(np.sort(p), np.arange(x.size))
        assert np.all(np.diff(refs[p]) >= 0)

    def test_matrix_uses_flat_positions(self):
        x = from_values(np.array([["b", "a"], ["a", "b"]]))
        assert order(x).tolist() == [1, 2, 0, 3]

    def test_method(self):
        x = from_values([3, 1, 2])
        assert x.order().tolist() == [1, 2, 0]


class TestSortAndCounts:
    """Tests for sort, group_counts and compact."""

    def test_sort(self):
        x = from_values(["b", "a", None, "b"])
        y = sort(x)
        assert y.tolist() == [None, "a", "b", "b"]
        assert y.pool is not x.pool
        assert x.sort().tolist() == y.tolist()

    def test_group_counts(self):
        x = from_values(["b", None, "a", "b"])
        assert group_counts(x).tolist() == [1, 1, 2]

    def test_compact(self):
        x = from_values(["a", "b", "c"])
        y = x[[0, 2]]
        assert len(y.pool) == 3
        z = compact(y)
        assert z.pool.values == ["a", "c"]
        assert z.refs.tolist() == [1, 2]
        assert z.tolist() == ["a", "c"]

    def test_compact_keeps_pool_order_and_missing(self):
        x = PooledArray([3, 0, 1], ["c", "a", "b"])
        z = compact(x)
        assert z.pool.values == ["c", "b"]
        assert z.tolist() == ["b", None, "c"]
