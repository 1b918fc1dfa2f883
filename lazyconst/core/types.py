# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
LazyConst Core Types

Element encodings ("btypes") for tensor constants and the mapping of each
encoding to its byte width, numpy dtype and canonical wide form.
"""

from enum import Enum

import numpy as np


class BType(Enum):
    """Supported scalar element encodings."""

    BOOL = "bool"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT16 = "float16"
    FLOAT = "float32"
    DOUBLE = "float64"


_FLOAT_BTYPES = frozenset({BType.FLOAT16, BType.FLOAT, BType.DOUBLE})
_SIGNED_BTYPES = frozenset({BType.INT8, BType.INT16, BType.INT32, BType.INT64})
_UNSIGNED_BTYPES = frozenset({BType.UINT8, BType.UINT16, BType.UINT32, BType.UINT64})

# The three canonical wide forms.
WIDE_BTYPES = (BType.DOUBLE, BType.INT64, BType.UINT64)


def is_float_btype(btype: BType) -> bool:
    return btype in _FLOAT_BTYPES


def is_signed_int_btype(btype: BType) -> bool:
    return btype in _SIGNED_BTYPES


def is_unsigned_int_btype(btype: BType) -> bool:
    """BOOL is not counted as unsigned even though it widens to UINT64."""
    return btype in _UNSIGNED_BTYPES


def numpy_dtype_of_btype(btype: BType) -> np.dtype:
    """Get the numpy dtype storing one element of the encoding."""
    return np.dtype(btype.value)


def btype_of_numpy_dtype(dtype) -> BType:
    """Get the encoding for a numpy dtype (or anything np.dtype accepts)."""
    name = np.dtype(dtype).name
    try:
        return BType(name)
    except ValueError:
        raise TypeError(f"unsupported element dtype: {name}") from None


def bytewidth_of_btype(btype: BType) -> int:
    """Get the size in bytes of one element. BOOL takes one byte."""
    return numpy_dtype_of_btype(btype).itemsize


def wide_btype_of_btype(btype: BType) -> BType:
    """
    Get the canonical wide form of an encoding.

    Floating encodings widen to DOUBLE, signed integers to INT64, and
    BOOL and unsigned integers to UINT64.
    """
    if is_float_btype(btype):
        return BType.DOUBLE
    if is_signed_int_btype(btype):
        return BType.INT64
    return BType.UINT64


def btype_to_string(btype: BType) -> str:
    """Get string representation of an encoding."""
    return btype.name.lower()
