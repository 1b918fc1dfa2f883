# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""LazyConst Core Module"""

from .types import (
    BType,
    WIDE_BTYPES,
    bytewidth_of_btype,
    btype_of_numpy_dtype,
    btype_to_string,
    is_float_btype,
    is_signed_int_btype,
    is_unsigned_int_btype,
    numpy_dtype_of_btype,
    wide_btype_of_btype,
)
from .tensor import ShapedType
from .widenum import WideNum, narrow, settle, wide_caster, wide_dtype, widen
from .transforms import (
    Transformer,
    compose_transforms,
    function_transformer,
    to_transformer,
)
from .buffer import SharedBuffer

__all__ = [
    "BType",
    "WIDE_BTYPES",
    "bytewidth_of_btype",
    "btype_of_numpy_dtype",
    "btype_to_string",
    "is_float_btype",
    "is_signed_int_btype",
    "is_unsigned_int_btype",
    "numpy_dtype_of_btype",
    "wide_btype_of_btype",
    "ShapedType",
    "WideNum",
    "narrow",
    "settle",
    "wide_caster",
    "wide_dtype",
    "widen",
    "Transformer",
    "compose_transforms",
    "function_transformer",
    "to_transformer",
    "SharedBuffer",
]
