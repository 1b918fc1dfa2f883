# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
LazyConst Observability Module

Components:
- LazyConstLogger: Structured logging with JSON output
"""

from .logger import (
    Verbosity,
    LogEntry,
    LazyConstLogger,
    get_logger,
    set_verbosity,
)

__all__ = [
    "Verbosity",
    "LogEntry",
    "LazyConstLogger",
    "get_logger",
    "set_verbosity",
]
