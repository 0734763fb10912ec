"""CLI utilities for running async operations and formatting output."""

from collective_service.cli.utils.async_runner import coro
from collective_service.cli.utils.formatters import (
    error,
    info,
    success,
    value,
    warning,
)

__all__ = [
    "coro",
    "error",
    "info",
    "success",
    "value",
    "warning",
]
