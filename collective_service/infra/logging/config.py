"""Logging configuration setup.

Builds the logging configuration with:
- dictConfig for formatters, filters and the root logger
- QueueHandler + QueueListener so cache hot paths never block on I/O
- ContextInjectingFilter for contextvars-based context propagation
- JSONL or text output, optional rotating file handler
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from collective_service.infra.logging.context import ContextInjectingFilter
from collective_service.infra.logging.formatters import JSONFormatter, TextFormatter

if TYPE_CHECKING:
    from collective_service.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_queue_handler: QueueHandler | None = None
_LOGGING_INITIALIZED = False
_SHUTDOWN_REGISTERED = False


def shutdown() -> None:
    """Stop the QueueListener, flushing pending records.

    Registered with ``atexit`` the first time handlers are started.
    """
    global _log_queue, _listener, _queue_handler

    if _listener is not None:
        _listener.stop()
        _listener = None

    if _queue_handler is not None:
        logging.getLogger().removeHandler(_queue_handler)
        _queue_handler = None

    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from collective_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    log_config = {**log_settings.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    service_name: str = "collective-service",
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    All handlers hang off a QueueListener; the root logger only gets a
    QueueHandler. Application loggers propagate to the root.

    Args:
        log_level: Root logger level.
        file_path: Path to the log file. None disables file logging.
        json_logs: Emit JSON Lines instead of text.
        console_enabled: Log to stderr.
        include_context: Install ContextInjectingFilter on the root logger and its queue handler.
        capture_warnings: Forward ``warnings`` to logging.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        service_name: Static ``service`` field in JSON records.
        **kwargs: Ignored; logged at debug level.

    Example:
        from collective_service.core.settings import get_logging_settings

        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))

    if capture_warnings:
        logging.captureWarnings(True)

    path = Path(file_path) if file_path else None
    if path:
        path.parent.mkdir(parents=True, exist_ok=True)

    filters: dict[str, Any] = {}
    root_filters: list[str] = []
    if include_context:
        filters["context"] = {
            "()": "collective_service.infra.logging.context.ContextInjectingFilter",
        }
        root_filters.append("context")

    # Handlers are attached to the QueueListener below, not through dictConfig.
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": filters,
            "root": {
                "level": log_level.upper(),
                "handlers": [],
                "filters": root_filters,
            },
        }
    )

    _setup_queue_logging(
        console_enabled=console_enabled,
        include_context=include_context,
        file_path=path,
        json_logs=json_logs,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
        service_name=service_name,
    )


def _build_formatter(json_logs: bool, service_name: str) -> logging.Formatter:
    if json_logs:
        return JSONFormatter(static={"service": service_name})
    return TextFormatter()


def _setup_queue_logging(
    console_enabled: bool,
    include_context: bool,
    file_path: Path | None,
    json_logs: bool,
    file_max_bytes: int,
    file_backup_count: int,
    service_name: str,
) -> None:
    """Create the real handlers behind a QueueListener and wire the root logger."""
    global _log_queue, _listener, _queue_handler, _SHUTDOWN_REGISTERED

    # Reconfiguration replaces the previous listener.
    shutdown()

    handlers: list[logging.Handler] = []

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(_build_formatter(json_logs, service_name))
        handlers.append(console_handler)

    if file_path:
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(_build_formatter(json_logs, service_name))
        handlers.append(file_handler)

    if not handlers:
        return

    _log_queue = Queue()
    _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()
    if not _SHUTDOWN_REGISTERED:
        atexit.register(shutdown)
        _SHUTDOWN_REGISTERED = True

    _queue_handler = QueueHandler(_log_queue)
    # Logger filters skip records propagated from child loggers; handler filters do not.
    if include_context:
        _queue_handler.addFilter(ContextInjectingFilter())
    logging.getLogger().addHandler(_queue_handler)
