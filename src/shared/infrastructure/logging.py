"""
Structured Logging
==================

JSON-structured logging with correlation ID tracking.

Provides:
- Structured JSON logs (parseable by log aggregators)
- Correlation ID for request tracing
- Contextual loggers for modules
- Performance timing utilities

Usage:
    from shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Insights computed", extra={"case_id": "REF-001"})
"""

import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from contextlib import contextmanager

from pythonjsonlogger import jsonlogger


# Borrower contact details never leave the process in plain text
_REDACTED_KEY_FRAGMENTS = ("email", "phone", "borrower_name")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    Custom JSON formatter with additional fields.

    Adds:
    - timestamp in ISO format
    - correlation_id when available
    - Environment info
    """

    def __init__(self, *args: Any, environment: str = "unknown", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        if hasattr(record, "correlation_id"):
            log_record["correlation_id"] = record.correlation_id
        elif "correlation_id" in message_dict:
            log_record["correlation_id"] = message_dict["correlation_id"]

        log_record["environment"] = getattr(record, "environment", self.environment)

        for key, value in list(log_record.items()):
            if isinstance(value, str) and any(
                fragment in key.lower() for fragment in _REDACTED_KEY_FRAGMENTS
            ):
                log_record[key] = "***REDACTED***"


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
) -> None:
    """
    Configure structured JSON logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: Environment name for log context
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    formatter = CustomJsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        environment=environment,
    )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Silence noisy loggers
    logging.getLogger("watchdog").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)


def get_context_logger(name: str, correlation_id: str | None = None) -> logging.Logger:
    """
    Get a logger with correlation ID for request tracing.

    Args:
        name: Logger name
        correlation_id: Request correlation ID

    Returns:
        logging.Logger: Logger with correlation_id in extra
    """
    logger = get_logger(name)
    if correlation_id:
        logger = logging.LoggerAdapter(logger, {"correlation_id": correlation_id})
    return logger


@contextmanager
def log_latency(logger: logging.Logger, operation: str, **extra_context: Any):
    """
    Context manager for measuring and logging operation latency.

    Usage:
        with log_latency(logger, "compute_insights", case_id="REF-001"):
            insights = service.compute_insights(case)

    Args:
        logger: Logger instance
        operation: Operation name for logging
        **extra_context: Additional context to include in log
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"{operation} completed",
            extra={
                "operation": operation,
                "latency_ms": round(latency_ms, 2),
                **extra_context,
            },
        )
