# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for LazyConst Error Handling

Validates:
- Error hierarchy
- Error message formatting
- Suggestions and context in error messages
- Fatal errors raised by the builder carry their operation
"""

import numpy as np
import pytest

from lazyconst import BType, DenseElements, ElementsBuilder, DisposablePool
from lazyconst.errors import (
    LazyConstError,
    InvariantError,
    DisposedElementsError,
    ConfigurationError,
    format_shape_mismatch,
    format_dtype_mismatch,
)


class TestLazyConstError:
    """Tests for LazyConstError base class."""

    def test_basic_error(self):
        error = LazyConstError("Test error")
        assert str(error) == "Test error"

    def test_error_with_suggestions(self):
        """Test error with suggestions."""
        error = LazyConstError("Test error", suggestions=["Fix A", "Fix B"])
        msg = str(error)
        assert "Suggestions:" in msg
        assert "1. Fix A" in msg
        assert "2. Fix B" in msg

    def test_error_with_context(self):
        """Test error with context."""
        error = LazyConstError("Test error", context={"key1": "value1"})
        msg = str(error)
        assert "Context:" in msg
        assert "key1: value1" in msg

    def test_error_attributes(self):
        error = LazyConstError("Test error", suggestions=["Fix A"], context={"key": "value"})
        assert error.message == "Test error"
        assert error.suggestions == ["Fix A"]
        assert error.context == {"key": "value"}


class TestInvariantError:
    """Tests for InvariantError."""

    def test_message_prefix(self):
        error = InvariantError("strides do not match")
        assert "Internal invariant violated: strides do not match" in str(error)
        assert isinstance(error, LazyConstError)

    def test_operation_in_context(self):
        error = InvariantError("bad split", operation="split", context={"axis": 1})
        assert error.operation == "split"
        assert error.context == {"operation": "split", "axis": 1}

    def test_disposed_elements_error(self):
        error = DisposedElementsError(7)
        assert isinstance(error, InvariantError)
        assert error.operation == "read"
        assert error.context["elements_id"] == 7
        assert "after disposal" in str(error)


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_config_error(self):
        error = ConfigurationError(
            "LAZYCONST_ENABLE_LAZY must be a boolean",
            config_key="LAZYCONST_ENABLE_LAZY",
            config_value="maybe",
        )
        msg = str(error)
        assert "Configuration error:" in msg
        assert "config_key: LAZYCONST_ENABLE_LAZY" in msg
        assert "config_value: maybe" in msg


class TestFormatHelpers:
    """Tests for error formatting helpers."""

    def test_format_shape_mismatch(self):
        error = format_shape_mismatch((2, 3), (4, 3), operation="expand")
        assert isinstance(error, InvariantError)
        assert "expected (2, 3), got (4, 3)" in str(error)
        assert error.operation == "expand"

    def test_format_dtype_mismatch(self):
        error = format_dtype_mismatch("bool", "int32", operation="where")
        assert "expected bool, got int32" in str(error)
        assert error.context["received"] == "int32"


class TestBuilderErrors:
    """Fatal errors surfaced by builder operations."""

    def test_split_error_operation(self):
        builder = ElementsBuilder(DisposablePool())
        x = DenseElements(np.arange(6, dtype=np.int32).reshape(2, 3))
        with pytest.raises(InvariantError) as excinfo:
            builder.split(x, 1, [2, 2])
        assert excinfo.value.operation == "split"

    def test_unexpected_instance_rejected(self):
        builder = ElementsBuilder(DisposablePool())
        with pytest.raises(InvariantError) as excinfo:
            builder.transform(np.arange(3), BType.INT64, lambda n: n)
        assert excinfo.value.operation == "dispatch"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
