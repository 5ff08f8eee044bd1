"""
Resource Actions - Structured Logging
=====================================

Structured JSON or human-readable logging for the CLI and the HTTP service.
A correlation ID is carried in a context variable so that every log line and
every request to the managing service made within one invocation share it.

Usage:
    from shared.utils.logging import get_logger, setup_logging

    setup_logging(service_name="resource-actions", log_level="INFO")
    logger = get_logger(__name__)

    logger.info("Dispatching action", extra={"app_name": "guestbook"})
"""

import logging
import json
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, TextIO
from contextvars import ContextVar

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else came in through `extra`
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message"
}


class StructuredFormatter(logging.Formatter):
    """
    Formatter that renders each record as one JSON object.

    Each entry includes:
    - timestamp (ISO 8601, UTC)
    - level
    - service (CLI or HTTP service name)
    - logger (module path)
    - message
    - correlation_id (when set for the current invocation)
    - any fields passed through `extra`
    """

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = correlation_id_var.get()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """
    Logger adapter that injects the current correlation ID into `extra`.
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})

        if "correlation_id" not in extra:
            correlation_id = correlation_id_var.get()
            if correlation_id:
                extra["correlation_id"] = correlation_id

        kwargs["extra"] = extra
        return msg, kwargs


_loggers: dict[str, ContextualLogger] = {}


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_output: bool = True,
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure the root logger.

    Call once at startup: in the HTTP service's main module, or at the top of
    a CLI invocation.

    Args:
        service_name: Name stamped on every entry (e.g., "resource-actions")
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON lines; otherwise a pipe-separated format
        stream: Destination stream, stdout by default. The CLI passes stderr
            so that rendered listings on stdout stay machine-readable.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)

    if json_output:
        handler.setFormatter(StructuredFormatter(service_name))
    else:
        handler.setFormatter(logging.Formatter(
            f"%(asctime)s | {service_name} | %(levelname)s | %(name)s | %(message)s"
        ))

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper()))

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> ContextualLogger:
    """
    Get a contextual logger for the given module.

    Example:
        logger = get_logger(__name__)
        logger.info("Selected targets", extra={"count": 2})
    """
    if name not in _loggers:
        _loggers[name] = ContextualLogger(logging.getLogger(name), {})
    return _loggers[name]


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID, or None if not set."""
    return correlation_id_var.get()


def new_correlation_id() -> str:
    """Generate a correlation ID, make it current and return it."""
    correlation_id = str(uuid.uuid4())
    set_correlation_id(correlation_id)
    return correlation_id
