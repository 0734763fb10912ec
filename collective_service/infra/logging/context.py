"""Contextvars-backed log context.

Fields set here (an account slug being purged, a CLI command name, ...) are
copied onto every log record emitted from the same task by
``ContextInjectingFilter``, so cache warnings can be correlated without
threading identifiers through every call.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
import logging
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the log context of the current task.

    Example:
        ```python
        set_log_context(account_slug="opencollective")
        logger.info("Purging caches")  # record carries account_slug
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current log context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop every field from the current log context."""
    _log_context.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove specific keys from the current log context."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to the log context for the duration of a block.

    The previous context is restored on exit, so nested blocks only
    shadow the fields they set.
    """
    token = _log_context.set({**_log_context.get(), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that copies the log context onto each record.

    Installed on the root logger by ``configure_logging`` so that every
    formatter sees the context fields as record attributes. Existing record
    attributes are never overwritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
