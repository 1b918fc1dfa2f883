# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Uniform access to tensor constants of either kind.

``ElementsAttr`` is the closed variant of DenseElements and
DisposableElements. These functions work on both and reject anything else.
"""

from typing import Sequence, Union

import numpy as np

from ..core.widenum import WideNum
from ..errors import InvariantError
from .base import ElementsKind
from .dense import DenseElements
from .disposable import DisposableElements

ElementsAttr = Union[DenseElements, DisposableElements]


def kind_of(elms) -> ElementsKind:
    """Get the variant tag, failing on anything that is not a constant."""
    if isinstance(elms, (DenseElements, DisposableElements)):
        return elms.kind
    raise InvariantError(
        f"unexpected elements instance {type(elms).__name__}",
        operation="dispatch",
    )


def is_disposable(elms) -> bool:
    return kind_of(elms) is ElementsKind.DISPOSABLE


def is_dense(elms) -> bool:
    return kind_of(elms) is ElementsKind.DENSE


def to_dense_elements(elms) -> DenseElements:
    """Force any constant into eager form."""
    kind_of(elms)
    return elms.to_dense()


def read_wide_nums(elms) -> np.ndarray:
    """All elements as a flat wide array, in row-major order."""
    kind_of(elms)
    return elms.read_wide_nums()


def get_wide_num(elms, index: Sequence[int]) -> WideNum:
    kind_of(elms)
    return elms.get_wide_num(index)


def get_splat_wide_num(elms) -> WideNum:
    kind_of(elms)
    return elms.get_splat_wide_num()


def to_numpy(elms) -> np.ndarray:
    kind_of(elms)
    return elms.to_numpy()
