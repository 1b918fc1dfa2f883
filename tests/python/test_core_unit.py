# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Core Unit Tests

- BType: byte widths, wide forms, numpy mapping
- ShapedType: numel, clone
- WideNum: union views, scalar conversion
- widen / narrow / settle / wide_caster
"""

import numpy as np
import pytest

from lazyconst.core import (
    BType,
    ShapedType,
    WideNum,
    WIDE_BTYPES,
    bytewidth_of_btype,
    btype_of_numpy_dtype,
    btype_to_string,
    is_float_btype,
    is_signed_int_btype,
    is_unsigned_int_btype,
    narrow,
    numpy_dtype_of_btype,
    settle,
    wide_btype_of_btype,
    wide_caster,
    wide_dtype,
    widen,
)
from lazyconst.errors import InvariantError


class TestBType:
    """Unit tests for element encodings."""

    def test_bytewidths(self):
        assert bytewidth_of_btype(BType.BOOL) == 1
        assert bytewidth_of_btype(BType.INT8) == 1
        assert bytewidth_of_btype(BType.UINT16) == 2
        assert bytewidth_of_btype(BType.FLOAT16) == 2
        assert bytewidth_of_btype(BType.FLOAT) == 4
        assert bytewidth_of_btype(BType.INT64) == 8
        assert bytewidth_of_btype(BType.DOUBLE) == 8

    def test_wide_forms(self):
        """Floats widen to DOUBLE, signed to INT64, bool and unsigned to UINT64."""
        for btype in (BType.FLOAT16, BType.FLOAT, BType.DOUBLE):
            assert wide_btype_of_btype(btype) == BType.DOUBLE
        for btype in (BType.INT8, BType.INT16, BType.INT32, BType.INT64):
            assert wide_btype_of_btype(btype) == BType.INT64
        for btype in (BType.BOOL, BType.UINT8, BType.UINT16, BType.UINT32, BType.UINT64):
            assert wide_btype_of_btype(btype) == BType.UINT64

    def test_wide_btypes_are_their_own_wide_form(self):
        for btype in WIDE_BTYPES:
            assert wide_btype_of_btype(btype) == btype

    def test_classification(self):
        assert is_float_btype(BType.FLOAT16)
        assert is_signed_int_btype(BType.INT32)
        assert is_unsigned_int_btype(BType.UINT8)
        assert not is_unsigned_int_btype(BType.BOOL)
        assert not is_signed_int_btype(BType.FLOAT)

    def test_numpy_round_trip(self):
        for btype in BType:
            assert btype_of_numpy_dtype(numpy_dtype_of_btype(btype)) == btype

    def test_unsupported_dtype(self):
        with pytest.raises(TypeError):
            btype_of_numpy_dtype(np.complex64)

    def test_btype_to_string(self):
        assert btype_to_string(BType.FLOAT) == "float"
        assert btype_to_string(BType.UINT64) == "uint64"


class TestShapedType:
    """Unit tests for ShapedType."""

    def test_numel(self):
        assert ShapedType((2, 3, 4), BType.FLOAT).numel() == 24

    def test_rank_zero_holds_one_element(self):
        t = ShapedType((), BType.INT32)
        assert t.rank == 0
        assert t.numel() == 1

    def test_zero_dimension(self):
        assert ShapedType((3, 0), BType.FLOAT).numel() == 0

    def test_size_bytes(self):
        assert ShapedType((2, 3), BType.INT16).size_bytes() == 12

    def test_clone(self):
        t = ShapedType((2, 3), BType.FLOAT)
        assert t.clone(shape=(3, 2)) == ShapedType((3, 2), BType.FLOAT)
        assert t.clone(btype=BType.DOUBLE) == ShapedType((2, 3), BType.DOUBLE)
        assert t.clone() == t

    def test_shape_normalized_to_tuple(self):
        assert ShapedType([2, 3], BType.FLOAT).shape == (2, 3)

    def test_negative_dimension_rejected(self):
        with pytest.raises(ValueError):
            ShapedType((2, -1), BType.FLOAT)


class TestWideNum:
    """Unit tests for the canonical numeric union."""

    def test_signed_unsigned_views_share_bits(self):
        n = WideNum.from_i64(-1)
        assert n.i64 == -1
        assert n.u64 == 2**64 - 1

    def test_double_view(self):
        n = WideNum.from_f64(1.5)
        assert n.f64 == 1.5
        assert n.bits == 0x3FF8000000000000

    def test_from_scalar_uses_wide_form(self):
        assert WideNum.from_scalar(-3, BType.INT8).i64 == -3
        assert WideNum.from_scalar(200, BType.UINT8).u64 == 200
        assert WideNum.from_scalar(0.25, BType.FLOAT).f64 == 0.25
        assert WideNum.from_scalar(True, BType.BOOL).u64 == 1

    def test_to_scalar(self):
        assert WideNum.from_i64(-7).to_scalar(BType.INT16) == -7
        assert WideNum.from_f64(2.5).to_scalar(BType.FLOAT16) == 2.5
        assert WideNum.from_u64(0).to_scalar(BType.BOOL) is False
        assert WideNum.from_u64(3).to_scalar(BType.BOOL) is True

    def test_from_numpy_reads_dtype_tag(self):
        assert WideNum.from_numpy(np.float64(-0.5)).f64 == -0.5
        assert WideNum.from_numpy(np.int64(-4)).i64 == -4
        assert WideNum.from_numpy(np.uint64(2**63)).u64 == 2**63
        assert WideNum.from_numpy(np.bool_(True)).u64 == 1

    def test_to_numpy(self):
        value = WideNum.from_i64(-2).to_numpy(BType.INT32)
        assert value.dtype == np.int64
        assert value == -2

    def test_equality_and_hash(self):
        assert WideNum.from_i64(5) == WideNum.from_u64(5)
        assert hash(WideNum.from_i64(5)) == hash(WideNum.from_u64(5))
        assert WideNum.from_f64(0.0) != WideNum.from_f64(-0.0)


class TestWideArrays:
    """Unit tests for array widening and narrowing."""

    def test_wide_dtype(self):
        assert wide_dtype(BType.FLOAT16) == np.float64
        assert wide_dtype(BType.INT8) == np.int64
        assert wide_dtype(BType.BOOL) == np.uint64

    def test_widen(self):
        nums = widen(np.array([True, False]), BType.BOOL)
        assert nums.dtype == np.uint64
        np.testing.assert_array_equal(nums, [1, 0])

    def test_widen_float16_is_exact(self):
        values = np.array([0.1, 65504.0], dtype=np.float16)
        nums = widen(values, BType.FLOAT16)
        assert nums.dtype == np.float64
        np.testing.assert_array_equal(nums.astype(np.float16), values)

    def test_narrow_wraps_integers(self):
        np.testing.assert_array_equal(narrow(np.array([300], dtype=np.uint64), BType.UINT8), [44])
        np.testing.assert_array_equal(narrow(np.array([-1], dtype=np.int64), BType.INT8), [-1])

    def test_narrow_to_bool(self):
        out = narrow(np.array([0, 2], dtype=np.uint64), BType.BOOL)
        assert out.dtype == np.bool_
        np.testing.assert_array_equal(out, [False, True])

    def test_settle_converts_values(self):
        out = settle(np.array([True, False]), BType.BOOL)
        assert out.dtype == np.uint64
        np.testing.assert_array_equal(out, [1, 0])


class TestWideCaster:
    """Unit tests for casts between wide forms."""

    def test_int_to_double(self):
        cast = wide_caster(BType.INT64, BType.DOUBLE)
        out = cast(np.array([1, -2], dtype=np.int64))
        assert out.dtype == np.float64
        np.testing.assert_array_equal(out, [1.0, -2.0])

    def test_double_to_int_truncates(self):
        cast = wide_caster(BType.DOUBLE, BType.INT64)
        np.testing.assert_array_equal(cast(np.array([1.7, -1.7])), [1, -1])

    def test_signed_to_unsigned_wraps(self):
        cast = wide_caster(BType.INT64, BType.UINT64)
        assert cast(np.array([-1], dtype=np.int64))[0] == 2**64 - 1

    def test_same_wide_form_is_fatal(self):
        with pytest.raises(InvariantError, match="2 different wide types"):
            wide_caster(BType.INT64, BType.INT64)

    def test_non_wide_form_is_fatal(self):
        with pytest.raises(InvariantError):
            wide_caster(BType.INT32, BType.DOUBLE)
