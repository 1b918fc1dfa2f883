# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Shaped Type

The static type of a tensor constant: its logical shape and element
encoding. Constants carry no other metadata.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from .types import BType, bytewidth_of_btype, btype_to_string


@dataclass(frozen=True)
class ShapedType:
    """
    Describes a tensor constant's shape and element type without data.

    Example:
        t = ShapedType((2, 3), BType.FLOAT)
        t.numel()  # 6
        t.clone(shape=(3, 2))
    """

    shape: tuple
    btype: BType

    def __post_init__(self):
        object.__setattr__(self, "shape", tuple(int(d) for d in self.shape))
        if any(d < 0 for d in self.shape):
            raise ValueError(f"negative dimension in shape {self.shape}")

    @property
    def rank(self) -> int:
        """Get number of dimensions."""
        return len(self.shape)

    def numel(self) -> int:
        """Get total number of elements. A rank-0 type holds one."""
        return math.prod(self.shape)

    def size_bytes(self) -> int:
        """Calculate the dense size in bytes."""
        return self.numel() * bytewidth_of_btype(self.btype)

    def clone(
        self,
        shape: Optional[Sequence[int]] = None,
        btype: Optional[BType] = None,
    ) -> "ShapedType":
        """Copy with a new shape and/or element type."""
        return replace(
            self,
            shape=self.shape if shape is None else tuple(shape),
            btype=self.btype if btype is None else btype,
        )

    def __repr__(self) -> str:
        return f"ShapedType(shape={list(self.shape)}, btype={btype_to_string(self.btype)})"
