# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
LazyConst: Lazy Tensor Constants for ML Graph Compilers

Lets compiler passes fold, reshape, cast, broadcast and combine large
constant tensors without eagerly copying their storage.

Example:
    import numpy as np
    from lazyconst import BType, DenseElements, DisposablePool, ElementsBuilder

    builder = ElementsBuilder(DisposablePool())
    weights = DenseElements(np.random.rand(64, 32).astype(np.float32))
    transposed = builder.transpose(weights, [1, 0])   # shares the bytes
    half = builder.cast_element_type(transposed, BType.FLOAT16)
    half.to_numpy()
"""

__version__ = "0.1.0"
__author__ = "Wahyu Ardiansyah"

from .core import BType, ShapedType, SharedBuffer, Transformer, WideNum
from .core.transforms import compose_transforms, function_transformer, to_transformer
from .elements import (
    DenseElements,
    DisposableElements,
    DisposablePool,
    ElementsAttr,
    ElementsBuilder,
    ElementsKind,
    is_disposable,
    to_dense_elements,
)
from .config import ElementsConfig

# Observability
from .observability import set_verbosity, Verbosity

# Errors
from .errors import (
    LazyConstError,
    InvariantError,
    DisposedElementsError,
    ConfigurationError,
)

__all__ = [
    "__version__",
    "BType",
    "ShapedType",
    "SharedBuffer",
    "Transformer",
    "WideNum",
    "compose_transforms",
    "function_transformer",
    "to_transformer",
    "DenseElements",
    "DisposableElements",
    "DisposablePool",
    "ElementsAttr",
    "ElementsBuilder",
    "ElementsKind",
    "is_disposable",
    "to_dense_elements",
    "ElementsConfig",
    "set_verbosity",
    "Verbosity",
    "LazyConstError",
    "InvariantError",
    "DisposedElementsError",
    "ConfigurationError",
]
