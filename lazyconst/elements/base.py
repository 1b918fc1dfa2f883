# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Shared read surface of tensor constants.

There are exactly two kinds of constant, tagged by ``ElementsKind``: eager
dense constants and lazy disposable views. Both read through the same
wide-number API.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence

import numpy as np

from ..core.tensor import ShapedType
from ..core.types import BType
from ..core.widenum import WideNum, narrow
from ..errors import InvariantError


class ElementsKind(Enum):
    """Closed set of constant representations."""

    DENSE = "dense"
    DISPOSABLE = "disposable"


def flat_offset(index: Sequence[int], shape: Sequence[int], strides: Sequence[int]) -> int:
    """Buffer offset of a logical index, validating it against the shape."""
    index = tuple(int(i) for i in index)
    if len(index) != len(shape) or any(not 0 <= i < d for i, d in zip(index, shape)):
        raise InvariantError(
            f"index {list(index)} out of bounds for shape {list(shape)}",
            operation="read",
        )
    return sum(i * s for i, s in zip(index, strides))


class ElementsBase(ABC):
    """Queries common to dense and disposable constants."""

    kind: ElementsKind

    def __init__(self, type: ShapedType):
        self._type = type

    @property
    def type(self) -> ShapedType:
        return self._type

    @property
    def shape(self) -> tuple:
        return self._type.shape

    @property
    def btype(self) -> BType:
        return self._type.btype

    @property
    def rank(self) -> int:
        return self._type.rank

    def numel(self) -> int:
        return self._type.numel()

    def is_dense(self) -> bool:
        return self.kind is ElementsKind.DENSE

    def is_disposable(self) -> bool:
        return self.kind is ElementsKind.DISPOSABLE

    @abstractmethod
    def is_splat(self) -> bool:
        """Whether every logical position holds one stored value."""

    @abstractmethod
    def read_wide_nums(self) -> np.ndarray:
        """All elements in row-major order, as a 1-D wide array."""

    @abstractmethod
    def get_wide_num(self, index: Sequence[int]) -> WideNum:
        """The element at a multi-dimensional logical index."""

    @abstractmethod
    def get_splat_wide_num(self) -> WideNum:
        """The single stored value of a splat."""

    def get_value(self, index: Sequence[int]):
        """The element at ``index`` as a Python scalar of the element type."""
        return self.get_wide_num(index).to_scalar(self.btype)

    def to_numpy(self) -> np.ndarray:
        """Materialize into a fresh numpy array of the element type."""
        return narrow(self.read_wide_nums(), self.btype).reshape(self.shape)

    def _require_splat(self) -> None:
        if not self.is_splat():
            raise InvariantError(
                f"{self.kind.value} elements of shape {list(self.shape)} are not a splat",
                operation="get_splat_wide_num",
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={list(self.shape)}, "
            f"btype={self.btype.name.lower()}, splat={self.is_splat()})"
        )
