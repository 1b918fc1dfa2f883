# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Dense Elements

The eager constant representation: a fully materialized, read-only numpy
array. Consumers that know nothing about lazy views only ever see these.
"""

from typing import Optional, Sequence

import numpy as np

from ..core.buffer import SharedBuffer
from ..core.strides import get_default_strides, get_splat_strides
from ..core.tensor import ShapedType
from ..core.types import BType, btype_of_numpy_dtype, numpy_dtype_of_btype
from ..core.widenum import WideNum, widen
from .base import ElementsBase, ElementsKind, flat_offset


def _detect_splat(array: np.ndarray) -> bool:
    """Bitwise splat test, so -0.0 and 0.0 or different NaNs stay distinct."""
    if array.size == 0:
        return False
    if array.size == 1:
        return True
    rows = np.ascontiguousarray(array).reshape(array.size, 1).view(np.uint8)
    return bool((rows == rows[0]).all())


class DenseElements(ElementsBase):
    """
    Eager tensor constant.

    Example:
        dense = DenseElements(np.arange(6, dtype=np.int32).reshape(2, 3))
        dense.get_value((1, 2))  # 5

        DenseElements.splat((128, 128), BType.FLOAT, 0.0).is_splat()  # True
    """

    kind = ElementsKind.DENSE

    def __init__(self, array, btype: Optional[BType] = None, *, _splat: Optional[bool] = None):
        """
        Args:
            array: Values; copied unless already a read-only numpy array
            btype: Element type; defaults to the array's dtype
        """
        array = np.asarray(array)
        if btype is None:
            btype = btype_of_numpy_dtype(array.dtype)
        elif array.dtype != numpy_dtype_of_btype(btype):
            array = array.astype(numpy_dtype_of_btype(btype))
        if array.flags.writeable:
            array = array.copy()
            array.flags.writeable = False

        super().__init__(ShapedType(array.shape, btype))
        self._array = array
        self._splat = _detect_splat(array) if _splat is None else _splat
        self._buffer: Optional[SharedBuffer] = None

    @classmethod
    def splat(cls, shape: Sequence[int], btype: BType, value) -> "DenseElements":
        """A splat of ``value`` without allocating the full shape."""
        scalar = np.asarray(value).astype(numpy_dtype_of_btype(btype))
        array = np.broadcast_to(scalar, tuple(shape))
        return cls(array, btype, _splat=array.size > 0)

    @classmethod
    def from_raw_bytes(cls, type: ShapedType, raw) -> "DenseElements":
        """
        Build from raw element bytes. A buffer holding exactly one element
        is read as a splat, as dense attributes store splats.
        """
        values = np.frombuffer(bytes(raw), dtype=numpy_dtype_of_btype(type.btype))
        if values.size == 1 and type.numel() != 1:
            return cls.splat(type.shape, type.btype, values[0])
        return cls(values.reshape(type.shape), type.btype)

    @property
    def array(self) -> np.ndarray:
        """Read-only values."""
        return self._array

    def is_splat(self) -> bool:
        return self._splat

    def raw_bytes(self) -> bytes:
        """Element bytes; a splat yields a single element. BOOL uses one byte."""
        return self.shared_buffer().tobytes()

    def shared_buffer(self) -> SharedBuffer:
        """The buffer lazy views share when they ingest this constant."""
        if self._buffer is None:
            if self._splat:
                first = self._array[(0,) * self.rank]
                self._buffer = SharedBuffer.from_array(np.array([first], dtype=self._array.dtype))
            else:
                self._buffer = SharedBuffer.from_array(self._array)
        return self._buffer

    def buffer_strides(self) -> tuple:
        if self._splat:
            return get_splat_strides(self.shape)
        return get_default_strides(self.shape)

    def read_wide_nums(self) -> np.ndarray:
        return widen(self._array.reshape(-1), self.btype)

    def get_wide_num(self, index: Sequence[int]) -> WideNum:
        flat_offset(index, self.shape, get_default_strides(self.shape))
        return WideNum.from_scalar(self._array[tuple(index)], self.btype)

    def get_splat_wide_num(self) -> WideNum:
        self._require_splat()
        return WideNum.from_scalar(self._array[(0,) * self.rank], self.btype)

    def to_dense(self) -> "DenseElements":
        return self

    def to_numpy(self) -> np.ndarray:
        return self._array.copy()
