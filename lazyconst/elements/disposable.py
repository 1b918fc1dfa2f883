# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Disposable Elements

The lazy constant representation: a strided view over a shared buffer with
an optional deferred transform. Views are immutable; any number of them may
read one buffer with different shapes, strides and transforms.

Reading widens the buffer elements, applies the transform, and then gathers
through the strides. The transform is elementwise, so applying it to buffer
elements before the gather gives the same values as applying it per logical
position.
"""

from typing import Optional, Sequence

import numpy as np

from ..core.buffer import SharedBuffer
from ..core.strides import check_strides, is_splat_strides, restride_array
from ..core.tensor import ShapedType
from ..core.transforms import Transformer
from ..core.types import BType, bytewidth_of_btype
from ..core.widenum import WideNum, settle, widen
from ..errors import DisposedElementsError, InvariantError
from .base import ElementsBase, ElementsKind, flat_offset
from .dense import DenseElements


class DisposableElements(ElementsBase):
    """
    Lazy tensor constant owned by a DisposablePool.

    Instances are created by ``DisposablePool.create_elements``; do not
    construct them directly in compiler passes.
    """

    kind = ElementsKind.DISPOSABLE

    def __init__(
        self,
        type: ShapedType,
        buffer_btype: BType,
        strides: Sequence[int],
        buffer: SharedBuffer,
        transformer: Optional[Transformer] = None,
        *,
        check_bounds: bool = True,
        elements_id: Optional[int] = None,
    ):
        super().__init__(type)
        strides = tuple(int(s) for s in strides)
        if check_bounds:
            check_strides(type.shape, strides, buffer.num_elements(buffer_btype))
        elif len(strides) != type.rank:
            raise InvariantError(
                f"strides {list(strides)} do not match rank of shape {list(type.shape)}",
                operation="create",
            )
        self._buffer_btype = buffer_btype
        self._strides = strides
        self._buffer: Optional[SharedBuffer] = buffer
        self._transformer = transformer
        self._id = elements_id
        self._disposed = False

    @property
    def id(self) -> Optional[int]:
        """Registration id in the owning pool, or None if unregistered."""
        return self._id

    @property
    def buffer_btype(self) -> BType:
        return self._buffer_btype

    @property
    def buffer_element_bytewidth(self) -> int:
        return bytewidth_of_btype(self._buffer_btype)

    @property
    def strides(self) -> tuple:
        return self._strides

    @property
    def buffer(self) -> SharedBuffer:
        if self._disposed:
            raise DisposedElementsError(self._id)
        return self._buffer

    @property
    def transformer(self) -> Optional[Transformer]:
        if self._disposed:
            raise DisposedElementsError(self._id)
        return self._transformer

    def is_transformed(self) -> bool:
        return self.transformer is not None

    def is_splat(self) -> bool:
        return is_splat_strides(self._strides)

    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Release the buffer and transform. Later reads are fatal."""
        self._buffer = None
        self._transformer = None
        self._disposed = True

    def buffer_bytes(self) -> np.ndarray:
        return self.buffer.as_bytes()

    def _wide(self, raw: np.ndarray) -> np.ndarray:
        nums = widen(raw, self._buffer_btype)
        transformer = self.transformer
        if transformer is not None:
            nums = transformer(nums)
        return settle(nums, self.btype)

    def buffer_as_wide_nums(self) -> np.ndarray:
        """Every buffer element, transformed, in buffer order."""
        return self._wide(self.buffer.as_array(self._buffer_btype))

    def read_wide_nums(self) -> np.ndarray:
        flat = self.buffer_as_wide_nums()
        return restride_array(self.shape, self._strides, flat).reshape(-1)

    def get_wide_num(self, index: Sequence[int]) -> WideNum:
        offset = flat_offset(index, self.shape, self._strides)
        return self._read_buffer_element(offset)

    def get_splat_wide_num(self) -> WideNum:
        self._require_splat()
        return self._read_buffer_element(0)

    def _read_buffer_element(self, offset: int) -> WideNum:
        raw = self.buffer.as_array(self._buffer_btype)[offset : offset + 1]
        return WideNum.from_numpy(self._wide(raw)[0])

    def to_dense(self) -> DenseElements:
        """Materialize into an eager constant."""
        if self.is_splat() and self.numel() > 0:
            value = self.get_splat_wide_num().to_scalar(self.btype)
            return DenseElements.splat(self.shape, self.btype, value)
        return DenseElements(self.to_numpy(), self.btype)
