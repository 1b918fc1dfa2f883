# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Canonical Numeric Union (WideNum)

Every element encoding maps to one of three canonical wide forms: DOUBLE,
INT64 or UINT64. Generic elementwise code is written once per wide form
and works for every concrete encoding.

Two representations are used:

- ``WideNum``: a single 64-bit value that can be read as f64, i64 or u64.
  It is what the scalar read API returns.
- Wide arrays: numpy arrays of float64, int64 or uint64. The dtype is the
  tag of the union, and transforms operate on these arrays in bulk.

Example:
    n = WideNum.from_scalar(-1, BType.INT8)
    n.i64   # -1
    n.u64   # 18446744073709551615
"""

from typing import Callable

import numpy as np

from ..errors import InvariantError
from .types import (
    BType,
    WIDE_BTYPES,
    numpy_dtype_of_btype,
    wide_btype_of_btype,
)

_MASK = (1 << 64) - 1


class WideNum:
    """Eight bytes readable as a double, a signed or an unsigned 64-bit int."""

    __slots__ = ("_bits",)

    def __init__(self, bits: int = 0):
        self._bits = int(bits) & _MASK

    @classmethod
    def from_f64(cls, value: float) -> "WideNum":
        return cls(int(np.array(value, dtype=np.float64).view(np.uint64)))

    @classmethod
    def from_i64(cls, value: int) -> "WideNum":
        return cls(int(value))

    @classmethod
    def from_u64(cls, value: int) -> "WideNum":
        return cls(int(value))

    @classmethod
    def from_scalar(cls, value, btype: BType) -> "WideNum":
        """Store a Python or numpy scalar in the wide form of ``btype``."""
        wide = wide_btype_of_btype(btype)
        if wide == BType.DOUBLE:
            return cls.from_f64(float(value))
        if wide == BType.INT64:
            return cls.from_i64(int(value))
        return cls.from_u64(int(value))

    @classmethod
    def from_numpy(cls, value) -> "WideNum":
        """Store a numpy scalar, using its dtype as the union tag."""
        value = np.asarray(value)
        kind = value.dtype.kind
        if kind == "f":
            return cls.from_f64(float(value))
        if kind == "i":
            return cls.from_i64(int(value))
        if kind in ("u", "b"):
            return cls.from_u64(int(value))
        raise TypeError(f"cannot store dtype {value.dtype} in a WideNum")

    @property
    def bits(self) -> int:
        return self._bits

    @property
    def f64(self) -> float:
        return float(np.array(self._bits, dtype=np.uint64).view(np.float64))

    @property
    def i64(self) -> int:
        return self._bits - (1 << 64) if self._bits >> 63 else self._bits

    @property
    def u64(self) -> int:
        return self._bits

    def to_scalar(self, btype: BType):
        """Read the value in the wide form of ``btype``."""
        if btype == BType.BOOL:
            return self._bits != 0
        wide = wide_btype_of_btype(btype)
        if wide == BType.DOUBLE:
            return self.f64
        if wide == BType.INT64:
            return self.i64
        return self.u64

    def to_numpy(self, btype: BType):
        """Get a numpy scalar of the wide dtype of ``btype``."""
        wide = wide_btype_of_btype(btype)
        return np.array(self._bits, dtype=np.uint64).view(numpy_dtype_of_btype(wide))[()]

    def __eq__(self, other) -> bool:
        if not isinstance(other, WideNum):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self) -> int:
        return hash(self._bits)

    def __repr__(self) -> str:
        return f"WideNum(0x{self._bits:016x})"


def wide_dtype(btype: BType) -> np.dtype:
    """Get the numpy dtype of the wide form of an encoding."""
    return numpy_dtype_of_btype(wide_btype_of_btype(btype))


def widen(values, btype: BType) -> np.ndarray:
    """Convert elements stored in ``btype`` to their wide form."""
    values = np.asarray(values, dtype=numpy_dtype_of_btype(btype))
    return values.astype(wide_dtype(btype))


def settle(nums, btype: BType) -> np.ndarray:
    """
    Coerce a transform's output to the wide form of ``btype``.

    Transforms may return arrays of another dtype, for instance a bool
    array from a comparison. Values are converted, not reinterpreted.
    """
    nums = np.asarray(nums)
    return nums.astype(wide_dtype(btype), copy=False)


def narrow(nums, btype: BType) -> np.ndarray:
    """Convert wide values to ``btype`` with C-style truncation and rounding."""
    nums = np.asarray(nums)
    if btype == BType.BOOL:
        return nums != 0
    return nums.astype(numpy_dtype_of_btype(btype))


def wide_caster(src: BType, dst: BType) -> Callable[[np.ndarray], np.ndarray]:
    """
    Get an elementwise conversion from one wide form to another.

    Only valid for two different wide forms; identical forms need no
    conversion and requesting one is a bug in the caller.
    """
    if src not in WIDE_BTYPES or dst not in WIDE_BTYPES or src == dst:
        raise InvariantError(
            "wide_caster must be called with 2 different wide types",
            operation="cast",
            context={"src": src.name, "dst": dst.name},
        )
    dst_dtype = numpy_dtype_of_btype(dst)

    def cast(nums: np.ndarray) -> np.ndarray:
        return nums.astype(dst_dtype)

    cast.__name__ = f"cast_{src.name.lower()}_to_{dst.name.lower()}"
    return cast
