# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
LazyConst Error Hierarchy

Two tiers of failure exist when restructuring tensor constants:

- Fatal invariant violations (InvariantError and subclasses). They signal a
  bug upstream, such as a stride/shape rank mismatch or a split whose sizes
  do not cover the axis, and are never caught inside the library.
- Recoverable fallback. An inactive disposal pool is not an error at all;
  requests are silently materialized into eager constants.

Error Categories:
- LazyConstError: Base class for all LazyConst errors
- InvariantError: Internal invariant violated, compilation must halt
- DisposedElementsError: Read of a lazy constant whose buffer was released
- ConfigurationError: Invalid configuration value
"""

from typing import Optional


class LazyConstError(Exception):
    """
    Base class for all LazyConst errors.

    Attributes:
        message: Human-readable error message
        suggestions: List of suggestions to fix the error
        context: Optional context dictionary for debugging
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}

        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with suggestions and context."""
        lines = [self.message]

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {suggestion}")

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)


class InvariantError(LazyConstError):
    """
    Internal invariant violated.

    Raised when:
    - An unsupported constant representation reaches the builder
    - Strides and shape disagree in rank, or a view addresses past its buffer
    - A wide cast is requested between identical canonical forms
    - Split sizes do not sum to the axis extent
    - A reshape changes the element count
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        self.operation = operation

        ctx = {}
        if operation:
            ctx["operation"] = operation
        if context:
            ctx.update(context)

        super().__init__(
            message=f"Internal invariant violated: {message}",
            suggestions=[
                "Verify the constant was validated before reaching the builder",
                "Report the failing graph together with this message",
            ],
            context=ctx,
        )


class DisposedElementsError(InvariantError):
    """Raised when a lazy constant is read after its pool released it."""

    def __init__(self, elements_id: Optional[int] = None):
        context = {}
        if elements_id is not None:
            context["elements_id"] = elements_id
        super().__init__(
            "lazy elements read after disposal",
            operation="read",
            context=context,
        )


class ConfigurationError(LazyConstError):
    """
    Configuration or setup error.

    Raised when an environment variable or config field cannot be parsed.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = str(config_value)

        super().__init__(
            message=f"Configuration error: {message}",
            suggestions=[
                "Check configuration parameters",
                "Use 0/1, true/false, on/off or yes/no for boolean settings",
            ],
            context=context,
        )


def format_shape_mismatch(
    expected_shape: tuple,
    actual_shape: tuple,
    operation: Optional[str] = None,
) -> InvariantError:
    """Create an InvariantError for shape mismatch."""
    return InvariantError(
        f"Shape mismatch: expected {tuple(expected_shape)}, got {tuple(actual_shape)}",
        operation=operation,
        context={
            "expected": str(tuple(expected_shape)),
            "received": str(tuple(actual_shape)),
        },
    )


def format_dtype_mismatch(
    expected_dtype: str,
    actual_dtype: str,
    operation: Optional[str] = None,
) -> InvariantError:
    """Create an InvariantError for element type mismatch."""
    return InvariantError(
        f"Dtype mismatch: expected {expected_dtype}, got {actual_dtype}",
        operation=operation,
        context={"expected": expected_dtype, "received": actual_dtype},
    )
