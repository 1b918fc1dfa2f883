# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for DisposablePool: activation, registry and disposal.
"""

import gc
import threading

import numpy as np
import pytest

from lazyconst import (
    BType,
    DenseElements,
    DisposableElements,
    DisposablePool,
    DisposedElementsError,
    ElementsBuilder,
    ElementsConfig,
    ShapedType,
    SharedBuffer,
)
from lazyconst.core.strides import get_default_strides


def create(pool, values=None):
    values = np.arange(6, dtype=np.int32) if values is None else values
    t = ShapedType((values.size,), BType.INT32)
    return pool.create_elements(
        t, BType.INT32, get_default_strides(t.shape), SharedBuffer.from_array(values)
    )


class TestPoolActivation:
    """Tests for the activation switch."""

    def test_active_pool_creates_lazy(self, pool):
        elms = create(pool)
        assert isinstance(elms, DisposableElements)
        assert elms.id is not None
        assert pool.stats().lazy_created == 1

    def test_inactive_pool_materializes(self, pool):
        pool.deactivate()
        elms = create(pool)
        assert isinstance(elms, DenseElements)
        np.testing.assert_array_equal(elms.to_numpy(), np.arange(6))
        assert pool.stats().eager_fallbacks == 1
        assert pool.live_count() == 0

    def test_deactivate_is_idempotent(self, pool):
        pool.deactivate()
        pool.deactivate()
        assert not pool.is_active()

    def test_config_disables_lazy(self):
        pool = DisposablePool(ElementsConfig(enable_lazy=False))
        assert not pool.is_active()
        assert isinstance(create(pool), DenseElements)

    def test_issued_views_stay_readable_after_deactivate(self, pool):
        elms = create(pool)
        pool.deactivate()
        assert elms.get_value((5,)) == 5

    def test_to_disposable_on_inactive_pool(self, pool):
        builder = ElementsBuilder(pool)
        dense = DenseElements(np.arange(3, dtype=np.int8))
        assert isinstance(builder.to_disposable(dense), DisposableElements)
        pool.deactivate()
        assert builder.to_disposable(dense) is None

    def test_no_lazy_view_after_deactivation_under_contention(self, pool):
        """Concurrent creators never receive a lazy view once deactivated."""
        buffer = SharedBuffer.from_array(np.arange(4, dtype=np.int32))
        t = ShapedType((4,), BType.INT32)
        start = threading.Barrier(5)
        late = []

        def worker():
            start.wait()
            for _ in range(200):
                deactivated = not pool.is_active()
                elms = pool.create_elements(t, BType.INT32, (1,), buffer)
                if deactivated and isinstance(elms, DisposableElements):
                    late.append(elms)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        start.wait()
        pool.deactivate()
        created = pool.stats().lazy_created
        for thread in threads:
            thread.join()

        assert late == []
        assert pool.stats().lazy_created == created
        stats = pool.stats()
        assert stats.lazy_created + stats.eager_fallbacks == 800


class TestPoolRegistry:
    """Tests for live tracking and garbage collection."""

    def test_live_elements(self, pool):
        a = create(pool)
        b = create(pool)
        assert pool.live_count() == 2
        assert {id(e) for e in pool.live_elements()} == {id(a), id(b)}

    def test_registry_is_weak(self, pool):
        create(pool)
        gc.collect()
        assert pool.live_count() == 0

    def test_garbage_collect_unreachable(self, pool):
        keep = create(pool)
        drop = create(pool)
        assert pool.garbage_collect_unreachable([keep]) == 1
        assert drop.is_disposed()
        assert not keep.is_disposed()
        assert pool.live_count() == 1
        assert pool.stats().disposed == 1
        with pytest.raises(DisposedElementsError):
            drop.to_numpy()

    def test_unique_ids(self, pool):
        assert create(pool).id != create(pool).id

    def test_scrub(self, pool):
        lazy = create(pool)
        dense = DenseElements(np.arange(2, dtype=np.int8))
        scrubbed = pool.scrub([lazy, dense])
        assert all(isinstance(e, DenseElements) for e in scrubbed)
        assert scrubbed[1] is dense
        np.testing.assert_array_equal(scrubbed[0].to_numpy(), lazy.to_numpy())

    def test_close_disposes_everything(self):
        pool = DisposablePool()
        elms = create(pool)
        pool.close()
        assert not pool.is_active()
        assert elms.is_disposed()
        assert pool.live_count() == 0

    def test_context_manager(self):
        with DisposablePool() as pool:
            elms = create(pool)
        assert elms.is_disposed()
        assert not pool.is_active()

    def test_stats_is_a_snapshot(self, pool):
        stats = pool.stats()
        create(pool)
        assert stats.lazy_created == 0


class TestDefaultPool:
    """Tests for the process-wide pool."""

    def test_singleton(self):
        assert DisposablePool.get_default() is DisposablePool.get_default()

    def test_reset(self):
        first = DisposablePool.get_default()
        DisposablePool.reset_default()
        assert DisposablePool.get_default() is not first

    def test_configured_from_environment(self, monkeypatch):
        monkeypatch.setenv("LAZYCONST_ENABLE_LAZY", "0")
        assert not DisposablePool.get_default().is_active()

    def test_builder_defaults_to_process_pool(self):
        assert ElementsBuilder().pool is DisposablePool.get_default()
