# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Disposable Pool

Gatekeeper and registry for lazy constants. While active, creation
requests yield registered DisposableElements; once deactivated, every
request yields an eager DenseElements instead. Deactivation is permanent
for the pool's lifetime.

Thread Safety: the activation check and the registration of a new lazy
view happen under one lock, so a view can never be issued after the pool
has become inactive. Everything else (strides, transforms, byte copies)
is pure and runs unlocked.

Example:
    pool = DisposablePool()
    builder = ElementsBuilder(pool)
    ...
    pool.garbage_collect_unreachable(constants_still_in_graph)
    pool.close()
"""

import itertools
import logging
import threading
import time
import weakref
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from ..config import ElementsConfig
from ..core.buffer import SharedBuffer
from ..core.tensor import ShapedType
from ..core.transforms import Transformer
from ..core.types import BType
from ..observability import get_logger
from .disposable import DisposableElements

logger = logging.getLogger("lazyconst.elements.pool")


@dataclass
class PoolStats:
    """Counters of pool decisions."""

    lazy_created: int = 0
    eager_fallbacks: int = 0
    disposed: int = 0


class DisposablePool:
    """
    Registry of live lazy constants and switch deciding whether new ones
    may be created.

    Registered views are held weakly: a view dropped by every holder is
    reclaimed by reference counting without the pool's involvement.
    """

    _default: Optional["DisposablePool"] = None
    _default_lock = threading.Lock()

    def __init__(self, config: Optional[ElementsConfig] = None):
        self.config = config or ElementsConfig()
        self._lock = threading.Lock()
        self._active = self.config.enable_lazy
        self._registry: "weakref.WeakValueDictionary[int, DisposableElements]" = (
            weakref.WeakValueDictionary()
        )
        self._ids = itertools.count(1)
        self._stats = PoolStats()

        if self.config.verbosity is not None:
            get_logger().set_verbosity(self.config.verbosity)

    @classmethod
    def get_default(cls) -> "DisposablePool":
        """Process-wide pool, configured from the environment on first use."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = DisposablePool(ElementsConfig.from_env())
        return cls._default

    @classmethod
    def reset_default(cls) -> None:
        """Drop the process-wide pool (for testing)."""
        with cls._default_lock:
            cls._default = None

    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def deactivate(self) -> None:
        """Stop issuing lazy constants. Already issued ones stay readable."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            live = len(self._registry)
        get_logger().debug(
            "Disposable pool deactivated", component="pool", operation="deactivate", live=live
        )

    def create_elements(
        self,
        type: ShapedType,
        buffer_btype: BType,
        strides: Sequence[int],
        buffer: SharedBuffer,
        transformer: Optional[Transformer] = None,
    ):
        """
        Create a constant reading ``buffer`` through ``strides`` and
        ``transformer``.

        Returns:
            A registered DisposableElements while the pool is active,
            otherwise the equivalent DenseElements.
        """
        with self._lock:
            if self._active:
                elements = DisposableElements(
                    type,
                    buffer_btype,
                    strides,
                    buffer,
                    transformer,
                    check_bounds=self.config.check_bounds,
                    elements_id=next(self._ids),
                )
                self._registry[elements.id] = elements
                self._stats.lazy_created += 1
                return elements
            self._stats.eager_fallbacks += 1

        # The pool never reactivates, so materializing outside the lock is safe.
        logger.debug(f"Pool inactive, materializing {type}")
        view = DisposableElements(
            type,
            buffer_btype,
            strides,
            buffer,
            transformer,
            check_bounds=self.config.check_bounds,
        )
        return view.to_dense()

    def live_count(self) -> int:
        with self._lock:
            return len(self._registry)

    def live_elements(self) -> list:
        """Snapshot of registered views that are still referenced."""
        with self._lock:
            return list(self._registry.values())

    def garbage_collect_unreachable(self, reachable: Iterable) -> int:
        """
        Dispose every registered view not in ``reachable``.

        Args:
            reachable: Constants still referenced by the compiled graph

        Returns:
            Number of views disposed
        """
        start = time.perf_counter()
        keep = {id(elements) for elements in reachable}
        with self._lock:
            victims = [e for e in self._registry.values() if id(e) not in keep]
            for elements in victims:
                del self._registry[elements.id]
            self._stats.disposed += len(victims)
        for elements in victims:
            elements.dispose()
        get_logger().debug(
            "Garbage collected unreachable elements",
            component="pool",
            operation="garbage_collect",
            duration_ms=(time.perf_counter() - start) * 1000,
            disposed=len(victims),
        )
        return len(victims)

    def scrub(self, elements: Iterable) -> list:
        """Eager equivalents of ``elements``, for consumers unaware of lazy views."""
        return [e.to_dense() for e in elements]

    def close(self) -> None:
        """Deactivate and dispose everything still registered."""
        self.deactivate()
        with self._lock:
            victims = list(self._registry.values())
            self._registry.clear()
            self._stats.disposed += len(victims)
        for elements in victims:
            elements.dispose()
        get_logger().debug(
            "Disposable pool closed", component="pool", operation="close", disposed=len(victims)
        )

    def stats(self) -> PoolStats:
        with self._lock:
            return replace(self._stats)

    def __enter__(self) -> "DisposablePool":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
