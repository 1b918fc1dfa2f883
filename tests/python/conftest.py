# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Pytest configuration for LazyConst Python tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so we can import lazyconst
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from lazyconst import DisposablePool, ElementsBuilder, ElementsConfig  # noqa: E402
from lazyconst.observability import LazyConstLogger  # noqa: E402


@pytest.fixture(autouse=True)
def reset_singletons():
    """Keep the process-wide logger and pool from leaking between tests."""
    yield
    LazyConstLogger.reset()
    DisposablePool.reset_default()


@pytest.fixture
def pool():
    pool = DisposablePool()
    yield pool
    pool.close()


@pytest.fixture
def builder(pool):
    return ElementsBuilder(pool)


@pytest.fixture
def eager_builder():
    """Builder whose pool never issues lazy constants."""
    return ElementsBuilder(DisposablePool(ElementsConfig(enable_lazy=False)))
