# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""LazyConst Elements Module"""

from .base import ElementsKind
from .dense import DenseElements
from .disposable import DisposableElements
from .helper import (
    ElementsAttr,
    get_splat_wide_num,
    get_wide_num,
    is_dense,
    is_disposable,
    kind_of,
    read_wide_nums,
    to_dense_elements,
    to_numpy,
)
from .pool import DisposablePool, PoolStats
from .builder import ElementsBuilder, ElementsProperties

__all__ = [
    "ElementsKind",
    "DenseElements",
    "DisposableElements",
    "ElementsAttr",
    "get_splat_wide_num",
    "get_wide_num",
    "is_dense",
    "is_disposable",
    "kind_of",
    "read_wide_nums",
    "to_dense_elements",
    "to_numpy",
    "DisposablePool",
    "PoolStats",
    "ElementsBuilder",
    "ElementsProperties",
]
