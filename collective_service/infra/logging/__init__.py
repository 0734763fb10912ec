"""Logging infrastructure.

Structured logging with JSONL output, contextvars-based context injection,
non-blocking queue handlers and OpenTelemetry trace correlation.

Basic usage:
    import logging

    from collective_service.infra.logging import set_log_context, setup_logging

    setup_logging()
    logger = logging.getLogger(__name__)

    set_log_context(account_slug="opencollective")
    logger.info("Purging caches")  # record includes account_slug
"""

from collective_service.infra.logging.config import (
    configure_logging,
    setup_logging,
    shutdown,
)
from collective_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    log_context,
    remove_from_log_context,
    set_log_context,
)
from collective_service.infra.logging.formatters import JSONFormatter, TextFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "TextFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "log_context",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
