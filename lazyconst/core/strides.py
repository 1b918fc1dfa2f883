# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Stride Algebra

Strides are counted in elements, not bytes. Stride 0 on an axis means every
position on that axis aliases the same element; default strides use 0 for
every axis of size 1, so any single-element tensor is a splat.
"""

import math
from typing import Optional, Sequence

import numpy as np
from numpy.lib.stride_tricks import as_strided

from ..errors import InvariantError, format_shape_mismatch


def get_default_strides(shape: Sequence[int]) -> tuple:
    """Row-major strides with stride 0 on axes of size 1."""
    strides = [0] * len(shape)
    mult = 1
    for axis in range(len(shape) - 1, -1, -1):
        dim = shape[axis]
        strides[axis] = 0 if dim == 1 else mult
        mult *= dim
    return tuple(strides)


def get_splat_strides(shape: Sequence[int]) -> tuple:
    return (0,) * len(shape)


def is_splat_strides(strides: Sequence[int]) -> bool:
    return all(s == 0 for s in strides)


def is_default_strides(shape: Sequence[int], strides: Sequence[int]) -> bool:
    return tuple(strides) == get_default_strides(shape)


def transpose_dims(dims: Sequence[int], perm: Sequence[int]) -> tuple:
    """Permute ``dims``: result axis i takes input axis perm[i]."""
    return tuple(dims[p] for p in perm)


def check_permutation(perm: Sequence[int], rank: int) -> None:
    if len(perm) != rank or sorted(perm) != list(range(rank)):
        raise InvariantError(
            f"{list(perm)} is not a permutation of {rank} axes",
            operation="transpose",
        )


def is_identity_permutation(perm: Sequence[int]) -> bool:
    return all(p == i for i, p in enumerate(perm))


def expand_strides(
    shape: Sequence[int], strides: Sequence[int], expanded_shape: Sequence[int]
) -> tuple:
    """
    Broadcast strides to ``expanded_shape``.

    Shapes are aligned on their trailing axes. New leading axes, axes of
    size 1 and axes that already have stride 0 may grow and get stride 0;
    all other axes must keep their size.
    """
    if len(shape) != len(strides):
        raise InvariantError(
            f"strides {list(strides)} do not match rank of shape {list(shape)}",
            operation="expand",
        )
    rank = len(expanded_shape)
    pad = rank - len(shape)
    if pad < 0:
        raise format_shape_mismatch(expanded_shape, shape, operation="expand")
    expanded = [0] * rank
    for axis in range(len(shape)):
        dim, target = shape[axis], expanded_shape[pad + axis]
        if dim == target:
            expanded[pad + axis] = strides[axis]
        elif dim == 1 or strides[axis] == 0:
            expanded[pad + axis] = 0
        else:
            raise format_shape_mismatch(expanded_shape, shape, operation="expand")
    return tuple(expanded)


def reshape_strides(
    shape: Sequence[int], strides: Sequence[int], reshaped_shape: Sequence[int]
) -> Optional[tuple]:
    """
    Compute strides that read the same elements in ``reshaped_shape``.

    Only default and splat strides are folded algebraically. Any other
    layout returns None and the caller must materialize.
    """
    if math.prod(shape) != math.prod(reshaped_shape):
        raise InvariantError(
            f"cannot reshape {list(shape)} to {list(reshaped_shape)}: "
            "element count differs",
            operation="reshape",
        )
    if is_default_strides(shape, strides):
        return get_default_strides(reshaped_shape)
    if is_splat_strides(strides):
        return get_splat_strides(reshaped_shape)
    return None


def addressed_extent(shape: Sequence[int], strides: Sequence[int]) -> int:
    """Number of buffer elements a view with these strides reaches."""
    if math.prod(shape) == 0:
        return 0
    return 1 + sum((dim - 1) * stride for dim, stride in zip(shape, strides))


def check_strides(
    shape: Sequence[int], strides: Sequence[int], buffer_numel: int
) -> None:
    """Fail unless the view stays inside a buffer of ``buffer_numel`` elements."""
    if len(shape) != len(strides):
        raise InvariantError(
            f"strides {list(strides)} do not match rank of shape {list(shape)}",
            operation="create",
        )
    if any(s < 0 for s in strides):
        raise InvariantError(
            f"negative strides {list(strides)}", operation="create"
        )
    extent = addressed_extent(shape, strides)
    if extent > buffer_numel:
        raise InvariantError(
            f"view addresses {extent} elements but the buffer holds {buffer_numel}",
            operation="create",
            context={"shape": list(shape), "strides": list(strides)},
        )


def strided_view(flat: np.ndarray, shape: Sequence[int], strides: Sequence[int]) -> np.ndarray:
    """Read-only view of a 1-D array through element strides."""
    flat = np.ascontiguousarray(flat).reshape(-1)
    itemsize = flat.dtype.itemsize
    return as_strided(
        flat,
        shape=tuple(shape),
        strides=tuple(s * itemsize for s in strides),
        writeable=False,
    )


def restride_array(
    shape: Sequence[int], strides: Sequence[int], flat: np.ndarray
) -> np.ndarray:
    """Copy a strided 1-D array into a dense row-major array of ``shape``."""
    return np.ascontiguousarray(strided_view(flat, shape, strides))
