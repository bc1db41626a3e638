"""Tests for pooledarray.refs and pooledarray.state."""

import numpy as np
import pytest

from pooledarray import state
from pooledarray.errors import PoolOverflow
from pooledarray.pooled import PooledArray
from pooledarray.refs import (
    MISSING_REF,
    check_pool_size,
    is_missing_value,
    max_pool_size,
    ref_dtype,
    smallest_ref_dtype,
)


@pytest.fixture(autouse=True)
def reset_state():
    yield
    state.reset()


class TestRefDtype:
    """Tests for reference dtype normalization."""

    def test_default_is_uint16(self):
        assert ref_dtype() == np.dtype(np.uint16)

    def test_accepts_strings(self):
        assert ref_dtype("uint8") == np.dtype(np.uint8)
        assert ref_dtype("uint32") == np.dtype(np.uint32)

    def test_rejects_signed(self):
        with pytest.raises(ValueError):
            ref_dtype(np.int16)

    def test_rejects_uint64(self):
        with pytest.raises(ValueError):
            ref_dtype(np.uint64)


class TestPoolLimits:
    """Tests for pool size limits."""

    def test_missing_ref_is_zero(self):
        assert MISSING_REF == 0

    def test_max_pool_size(self):
        assert max_pool_size(np.uint8) == 255
        assert max_pool_size(np.uint16) == 65535
        assert max_pool_size(np.uint32) == 2**32 - 1

    def test_check_pool_size_at_limit(self):
        check_pool_size(255, np.uint8)

    def test_check_pool_size_over_limit(self):
        with pytest.raises(PoolOverflow):
            check_pool_size(256, np.uint8)

    def test_smallest_ref_dtype(self):
        assert smallest_ref_dtype(0) == np.dtype(np.uint8)
        assert smallest_ref_dtype(255) == np.dtype(np.uint8)
        assert smallest_ref_dtype(256) == np.dtype(np.uint16)
        assert smallest_ref_dtype(70000) == np.dtype(np.uint32)

    def test_smallest_ref_dtype_too_large(self):
        with pytest.raises(PoolOverflow):
            smallest_ref_dtype(2**32)


class TestMissingMarkers:
    """Tests for is_missing_value."""

    def test_none_and_masked(self):
        assert is_missing_value(None)
        assert is_missing_value(np.ma.masked)

    def test_values_are_not_missing(self):
        assert not is_missing_value(0)
        assert not is_missing_value("")
        assert not is_missing_value(float("nan"))


class TestState:
    """Tests for the configurable default reference dtype."""

    def test_set_ref_dtype_changes_default(self):
        previous = state.set_ref_dtype(np.uint8)
        assert previous == np.dtype(np.uint16)
        x = PooledArray.from_values(["a", "b"])
        assert x.ref_dtype == np.dtype(np.uint8)
        assert x.refs.dtype == np.uint8

    def test_explicit_argument_wins(self):
        state.set_ref_dtype(np.uint8)
        x = PooledArray.from_values(["a", "b"], ref_dtype=np.uint32)
        assert x.ref_dtype == np.dtype(np.uint32)

    def test_set_invalid_ref_dtype(self):
        with pytest.raises(ValueError):
            state.set_ref_dtype("int8")
        assert state.get_ref_dtype() == np.dtype(np.uint16)

    def test_reset(self):
        state.set_ref_dtype(np.uint32)
        state.set_na_repr("<NA>")
        state.reset()
        assert state.get_ref_dtype() == np.dtype(np.uint16)
        assert state.get_na_repr() == "NA"

    def test_max_format_items_must_be_positive(self):
        with pytest.raises(ValueError):
            state.set_max_format_items(0)
