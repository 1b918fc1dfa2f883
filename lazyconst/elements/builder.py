# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Elements Builder

Restructures tensor constants without copying their bytes where a view
suffices: transpose, reshape, expand, cast, transform, combine, where and
split. Results are lazy DisposableElements while the pool is active and
eager DenseElements otherwise; callers must not branch on which one they
get.

Operations that cannot be expressed as a view (reshape of an arbitrarily
strided view, split, general combine and where) materialize a new dense
buffer and wrap it with default strides.

Example:
    builder = ElementsBuilder(DisposablePool())
    x = DenseElements(np.arange(6, dtype=np.float32).reshape(2, 3))
    xt = builder.transpose(x, [1, 0])             # view, no copy
    y = builder.combine(xt, one, xt.type, np.add)  # materialized
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np

from ..core.buffer import SharedBuffer
from ..core.strides import (
    check_permutation,
    expand_strides,
    get_default_strides,
    is_identity_permutation,
    reshape_strides,
    restride_array,
    strided_view,
    transpose_dims,
)
from ..core.tensor import ShapedType
from ..core.transforms import (
    Transformer,
    compose_transforms,
    function_transformer,
    to_transformer,
)
from ..core.types import (
    BType,
    bytewidth_of_btype,
    numpy_dtype_of_btype,
    wide_btype_of_btype,
)
from ..core.widenum import WideNum, settle, wide_caster, widen
from ..errors import InvariantError, format_dtype_mismatch
from .base import ElementsKind
from .dense import DenseElements
from .helper import ElementsAttr, kind_of, to_dense_elements
from .pool import DisposablePool

logger = logging.getLogger("lazyconst.elements.builder")

Combiner = Callable[[np.ndarray, np.ndarray], np.ndarray]


@dataclass(frozen=True)
class ElementsProperties:
    """How any constant reads its buffer."""

    buffer_btype: BType
    strides: tuple
    buffer: SharedBuffer
    transformer: Optional[Transformer]


def _settler(btype: BType) -> Transformer:
    def settle_link(nums: np.ndarray) -> np.ndarray:
        return settle(nums, btype)

    settle_link.__name__ = f"settle_{btype.name.lower()}"
    return Transformer(settle_link)


def _then(
    transformer: Optional[Transformer], btype: BType, second: Optional[Transformer]
) -> Optional[Transformer]:
    """Append ``second`` to a view's transform, feeding it wide ``btype`` values."""
    if transformer is None or second is None:
        return compose_transforms(transformer, second)
    return compose_transforms(compose_transforms(transformer, _settler(btype)), second)


def _as_transformer(fun) -> Transformer:
    if isinstance(fun, Transformer):
        return fun
    return to_transformer(fun)


class ElementsBuilder:
    """
    Builds and restructures tensor constants.

    Args:
        pool: Pool deciding whether results may be lazy. Defaults to the
            process-wide pool.
    """

    def __init__(self, pool: Optional[DisposablePool] = None):
        self.pool = pool if pool is not None else DisposablePool.get_default()

    # Factories

    def from_buffer(self, type: ShapedType, buffer) -> ElementsAttr:
        """Wrap an existing block of element bytes with default strides."""
        if not isinstance(buffer, SharedBuffer):
            buffer = SharedBuffer.from_bytes(buffer)
        if buffer.nbytes != type.size_bytes():
            raise InvariantError(
                f"buffer holds {buffer.nbytes} bytes, {type} needs {type.size_bytes()}",
                operation="from_buffer",
            )
        return self._create_with_default_strides(type, type.btype, buffer)

    def from_raw_bytes(
        self,
        type: ShapedType,
        buffer_btype: BType,
        filler: Callable[[np.ndarray], None],
    ) -> ElementsAttr:
        """
        Allocate ``numel * bytewidth(buffer_btype)`` bytes and let ``filler``
        write them. The filler is trusted; no splat detection is done.
        """
        data, freeze = SharedBuffer.allocate(type.numel() * bytewidth_of_btype(buffer_btype))
        filler(data)
        return self._create_with_default_strides(type, buffer_btype, freeze())

    def from_wide_nums(
        self, type: ShapedType, filler: Callable[[np.ndarray], None]
    ) -> ElementsAttr:
        """Like from_raw_bytes, with the filler writing wide values."""
        buffer_btype = wide_btype_of_btype(type.btype)
        dtype = numpy_dtype_of_btype(buffer_btype)
        return self.from_raw_bytes(type, buffer_btype, lambda data: filler(data.view(dtype)))

    # Kind conversions

    def to_disposable(self, elms):
        """
        Get a lazy view of ``elms``.

        Returns:
            The lazy constant, or None when the pool is inactive.
        """
        if kind_of(elms) is ElementsKind.DISPOSABLE:
            return elms
        if not self.pool.is_active():
            return None
        props = self.get_elements_properties(elms)
        created = self._create(
            elms.type, props.buffer_btype, props.strides, props.buffer, props.transformer
        )
        # The pool may have been deactivated since the check above.
        if created.kind is ElementsKind.DISPOSABLE:
            return created
        return None

    @staticmethod
    def to_dense(elms) -> DenseElements:
        """Force any constant into eager form."""
        return to_dense_elements(elms)

    # Elementwise operations

    @staticmethod
    def function_transformer(fun: Callable[[WideNum], WideNum]) -> Transformer:
        return function_transformer(fun)

    def transform(self, elms, transformed_btype: BType, transformer) -> ElementsAttr:
        """Append an elementwise transform; never materializes."""
        props = self.get_elements_properties(elms)
        return self._create(
            elms.type.clone(btype=transformed_btype),
            props.buffer_btype,
            props.strides,
            props.buffer,
            _then(props.transformer, elms.btype, _as_transformer(transformer)),
        )

    def combine(self, lhs, rhs, combined_type: ShapedType, combiner: Combiner) -> ElementsAttr:
        """
        Elementwise ``combiner(lhs, rhs)`` broadcast to ``combined_type``.

        ``combiner`` is vectorized: it receives wide numpy arrays (or a wide
        numpy scalar for a splat side) and follows numpy broadcasting.
        """
        kind_of(lhs)
        kind_of(rhs)
        if lhs.is_splat():
            lhs_num = lhs.get_splat_wide_num().to_numpy(lhs.btype)

            def combine_splat_lhs(nums):
                return combiner(lhs_num, nums)

            return self.expand_and_transform(rhs, combined_type, Transformer(combine_splat_lhs))

        if rhs.is_splat():
            rhs_num = rhs.get_splat_wide_num().to_numpy(rhs.btype)

            def combine_splat_rhs(nums):
                return combiner(nums, rhs_num)

            return self.expand_and_transform(lhs, combined_type, Transformer(combine_splat_rhs))

        shape = combined_type.shape
        lhs_view = self._expanded_wide_view(lhs, shape)
        rhs_view = self._expanded_wide_view(rhs, shape)
        logger.debug(f"Materializing combine into {combined_type}")

        def fill(dst: np.ndarray) -> None:
            result = settle(combiner(lhs_view, rhs_view), combined_type.btype)
            dst[...] = np.broadcast_to(result, shape).reshape(-1)

        return self.from_wide_nums(combined_type, fill)

    def where(self, cond, lhs, rhs, combined_type: ShapedType) -> ElementsAttr:
        """Select ``lhs`` where ``cond`` is true, else ``rhs``, broadcast to ``combined_type``."""
        for operand in (cond, lhs, rhs):
            kind_of(operand)
        if cond.btype != BType.BOOL:
            raise format_dtype_mismatch("bool", cond.btype.name.lower(), operation="where")
        if lhs.btype != rhs.btype or lhs.btype != combined_type.btype:
            raise format_dtype_mismatch(
                combined_type.btype.name.lower(),
                f"{lhs.btype.name.lower()}/{rhs.btype.name.lower()}",
                operation="where",
            )

        if cond.is_splat():
            chosen = lhs if cond.get_splat_wide_num().u64 else rhs
            return self.expand(chosen, combined_type.shape)

        if lhs.is_splat() and rhs.is_splat():
            lhs_num = lhs.get_splat_wide_num().to_numpy(lhs.btype)
            rhs_num = rhs.get_splat_wide_num().to_numpy(rhs.btype)

            def select_splats(nums):
                return np.where(nums != 0, lhs_num, rhs_num)

            return self.expand_and_transform(cond, combined_type, Transformer(select_splats))

        shape = combined_type.shape
        cond_view = self._expanded_wide_view(cond, shape)
        lhs_view = self._expanded_wide_view(lhs, shape)
        rhs_view = self._expanded_wide_view(rhs, shape)
        logger.debug(f"Materializing where into {combined_type}")

        def fill(dst: np.ndarray) -> None:
            out = dst.reshape(shape)
            # Broadcast cond into the result, then overwrite each position.
            out[...] = cond_view
            out[...] = np.where(out != 0, lhs_view, rhs_view)

        return self.from_wide_nums(combined_type, fill)

    select = where

    def cast_element_type(self, elms, new_btype: BType) -> ElementsAttr:
        """Cast to ``new_btype``; a no-op view when the wide forms agree."""
        if new_btype == elms.btype:
            return elms
        props = self.get_elements_properties(elms)
        old_wide = wide_btype_of_btype(elms.btype)
        new_wide = wide_btype_of_btype(new_btype)
        transformer = props.transformer
        if old_wide != new_wide:
            transformer = _then(
                transformer, elms.btype, Transformer(wide_caster(old_wide, new_wide))
            )
        return self._create(
            elms.type.clone(btype=new_btype),
            props.buffer_btype,
            props.strides,
            props.buffer,
            transformer,
        )

    # Shape operations

    def transpose(self, elms, perm: Sequence[int]) -> ElementsAttr:
        perm = tuple(int(p) for p in perm)
        check_permutation(perm, elms.rank)
        if is_identity_permutation(perm):
            return elms
        props = self.get_elements_properties(elms)
        return self._create(
            elms.type.clone(shape=transpose_dims(elms.shape, perm)),
            props.buffer_btype,
            transpose_dims(props.strides, perm),
            props.buffer,
            props.transformer,
        )

    def reshape(self, elms, reshaped_shape: Sequence[int]) -> ElementsAttr:
        """
        Reshape, as a view when the strides are default or splat, and by
        materializing a dense copy otherwise.
        """
        reshaped_shape = tuple(int(d) for d in reshaped_shape)
        if reshaped_shape == elms.shape:
            return elms
        props = self.get_elements_properties(elms)
        reshaped_type = elms.type.clone(shape=reshaped_shape)
        strides = reshape_strides(elms.shape, props.strides, reshaped_shape)
        if strides is not None:
            return self._create(
                reshaped_type, props.buffer_btype, strides, props.buffer, props.transformer
            )

        if kind_of(elms) is not ElementsKind.DISPOSABLE:
            raise InvariantError(
                "dense elements always have default or splat strides",
                operation="reshape",
            )
        logger.debug(f"Materializing reshape of {elms.type} to {reshaped_shape}")

        if not elms.is_transformed():
            # No transform to apply: copy buffer bytes without widening.
            dtype = numpy_dtype_of_btype(elms.buffer_btype)

            def fill_bytes(data: np.ndarray) -> None:
                src = elms.buffer.as_array(elms.buffer_btype)
                data.view(dtype)[...] = restride_array(elms.shape, elms.strides, src).reshape(-1)

            return self.from_raw_bytes(reshaped_type, elms.buffer_btype, fill_bytes)

        def fill_wide(dst: np.ndarray) -> None:
            dst[...] = elms.read_wide_nums()

        return self.from_wide_nums(reshaped_type, fill_wide)

    def expand(self, elms, expanded_shape: Sequence[int]) -> ElementsAttr:
        """Broadcast axes of size 1 (and new leading axes) with stride 0."""
        expanded_shape = tuple(int(d) for d in expanded_shape)
        if expanded_shape == elms.shape:
            return elms
        props = self.get_elements_properties(elms)
        return self._create(
            elms.type.clone(shape=expanded_shape),
            props.buffer_btype,
            expand_strides(elms.shape, props.strides, expanded_shape),
            props.buffer,
            props.transformer,
        )

    def split(self, elms, axis: int, sizes: Sequence[int]) -> list:
        """
        Split along ``axis`` into pieces of ``sizes``.

        Returns:
            One densely strided constant per size; ``[elms]`` for a single
            size and ``[]`` for no sizes.
        """
        sizes = [int(s) for s in sizes]
        if not sizes:
            return []
        shape = elms.shape
        if not 0 <= axis < len(shape):
            raise InvariantError(
                f"axis {axis} out of range for rank {len(shape)}", operation="split"
            )
        if sum(sizes) != shape[axis] or any(s <= 0 for s in sizes):
            raise InvariantError(
                f"sizes {sizes} do not split axis {axis} of extent {shape[axis]}",
                operation="split",
            )
        if len(sizes) == 1:
            return [elms]

        data = elms.read_wide_nums().reshape(shape)
        results = []
        start = 0
        for size in sizes:
            index = (slice(None),) * axis + (slice(start, start + size),)
            piece = data[index]

            def fill(dst: np.ndarray, piece=piece) -> None:
                dst[...] = piece.reshape(-1)

            results.append(self.from_wide_nums(elms.type.clone(shape=piece.shape), fill))
            start += size
        return results

    def expand_and_transform(
        self, elms, expanded_transformed_type: ShapedType, transformer
    ) -> ElementsAttr:
        """Broadcast to the type's shape and append a transform in one step."""
        props = self.get_elements_properties(elms)
        return self._create(
            expanded_transformed_type,
            props.buffer_btype,
            expand_strides(elms.shape, props.strides, expanded_transformed_type.shape),
            props.buffer,
            _then(props.transformer, elms.btype, _as_transformer(transformer)),
        )

    # Internals

    def get_elements_properties(self, elms) -> ElementsProperties:
        if kind_of(elms) is ElementsKind.DISPOSABLE:
            return ElementsProperties(
                buffer_btype=elms.buffer_btype,
                strides=elms.strides,
                buffer=elms.buffer,
                transformer=elms.transformer,
            )
        return ElementsProperties(
            buffer_btype=elms.btype,
            strides=elms.buffer_strides(),
            buffer=elms.shared_buffer(),
            transformer=None,
        )

    def _expanded_wide_view(self, elms, expanded_shape: Sequence[int]) -> np.ndarray:
        """Read-only wide view of ``elms`` broadcast to ``expanded_shape``."""
        props = self.get_elements_properties(elms)
        strides = expand_strides(elms.shape, props.strides, expanded_shape)
        nums = widen(props.buffer.as_array(props.buffer_btype), props.buffer_btype)
        if props.transformer is not None:
            nums = props.transformer(nums)
        return strided_view(settle(nums, elms.btype), expanded_shape, strides)

    def _create_with_default_strides(
        self, type: ShapedType, buffer_btype: BType, buffer: SharedBuffer
    ) -> ElementsAttr:
        return self._create(type, buffer_btype, get_default_strides(type.shape), buffer)

    def _create(
        self,
        type: ShapedType,
        buffer_btype: BType,
        strides: Sequence[int],
        buffer: SharedBuffer,
        transformer: Optional[Transformer] = None,
    ) -> ElementsAttr:
        return self.pool.create_elements(type, buffer_btype, strides, buffer, transformer)
