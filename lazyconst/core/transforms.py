# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Deferred Transforms

A Transformer is a pure elementwise function over wide arrays, applied
when a lazy constant is read. It is stored as a persistent chain of links:
composing appends links to an existing chain without touching it, so
several views can share one chain prefix.

Links take a wide numpy array and return an array of the same shape. They
must not mutate their input.

Example:
    double = to_transformer(lambda x: x * 2)
    inc = to_transformer(lambda x: x + 1)
    compose_transforms(double, inc)(np.array([3]))  # array([7])
"""

from typing import Callable, Optional

import numpy as np

from .types import BType
from .widenum import WideNum, wide_dtype

Link = Callable[[np.ndarray], np.ndarray]


class Transformer:
    """Immutable chain of links applied first to last."""

    __slots__ = ("_link", "_parent", "_length")

    def __init__(self, link: Link, parent: Optional["Transformer"] = None):
        self._link = link
        self._parent = parent
        self._length = 1 if parent is None else len(parent) + 1

    def __len__(self) -> int:
        return self._length

    @property
    def parent(self) -> Optional["Transformer"]:
        return self._parent

    def links(self) -> tuple:
        """Get the links in application order."""
        reversed_links = []
        node = self
        while node is not None:
            reversed_links.append(node._link)
            node = node._parent
        return tuple(reversed(reversed_links))

    def __call__(self, nums: np.ndarray) -> np.ndarray:
        for link in self.links():
            nums = link(nums)
        return nums

    def then(self, second: Optional["Transformer"]) -> "Transformer":
        """Compose: apply this chain, then ``second``."""
        return compose_transforms(self, second)

    def __repr__(self) -> str:
        names = [getattr(link, "__name__", type(link).__name__) for link in self.links()]
        return f"Transformer({' -> '.join(names)})"


def compose_transforms(
    first: Optional[Transformer], second: Optional[Transformer]
) -> Optional[Transformer]:
    """Get a transform applying ``first`` then ``second``. Either may be None."""
    if first is None:
        return second
    if second is None:
        return first
    composed = first
    for link in second.links():
        composed = Transformer(link, composed)
    return composed


def to_transformer(fun: Link) -> Transformer:
    """Wrap a vectorized function over wide arrays."""
    return Transformer(fun)


def function_transformer(
    fun: Callable[[WideNum], WideNum], result_btype: Optional[BType] = None
) -> Transformer:
    """
    Lift a scalar WideNum function into a transformer.

    The function sees each element as a WideNum. Its results are read in the
    wide form of ``result_btype``, or in the input's wide form when omitted,
    the same way an in-place overwrite of the union would be read.
    """

    def apply(nums: np.ndarray) -> np.ndarray:
        nums = np.asarray(nums)
        flat = nums.reshape(-1)
        bits = np.empty(flat.shape, dtype=np.uint64)
        for i, value in enumerate(flat):
            bits[i] = fun(WideNum.from_numpy(value)).bits
        out_dtype = nums.dtype if result_btype is None else wide_dtype(result_btype)
        if out_dtype.itemsize != 8:
            out_dtype = np.dtype(np.uint64)
        return bits.view(out_dtype).reshape(nums.shape)

    apply.__name__ = getattr(fun, "__name__", "function")
    return Transformer(apply)
