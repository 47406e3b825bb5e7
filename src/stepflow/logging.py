"""Structured logging for Stepflow.

This module provides structured logging using structlog, enabling:
- JSON-formatted logs for production (machine-readable)
- Pretty console logs for development (human-readable)
- Automatic context binding (run_id)
- Integration with standard library logging

Usage:
    from stepflow.logging import configure_logging, get_logger

    # Configure once at application startup
    configure_logging(json_format=True)  # For production

    # Get a logger
    logger = get_logger("my.module")
    logger.info("run_started", run_id="01J...", steps=3)

Context binding:
    logger = run_logger("01J...")
    logger.info("step_started", step=0)  # run_id automatically included
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from stepflow.config import get_runner_config

_configured = False


def configure_logging(
    json_format: bool | None = None,
    level: int | None = None,
    logger_factory: Any = None,
) -> None:
    """Configure structured logging for Stepflow.

    Call this once at application startup before any logging occurs.
    Arguments left as None are taken from RunnerConfig.

    Args:
        json_format: If True, output JSON logs (for production).
                    If False, output pretty console logs (for development).
        level: Minimum log level
        logger_factory: Custom logger factory (for testing)

    Example:
        # Development (pretty console output)
        configure_logging(json_format=False, level=logging.DEBUG)

        # Production (JSON for log aggregation)
        configure_logging(json_format=True)
    """
    global _configured

    if json_format is None:
        json_format = get_runner_config().log_json
    if level is None:
        level = get_runner_config().log_level

    # Configure stdlib logging (structlog wraps it)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=logger_factory or structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def reset_logging() -> None:
    """Drop structlog configuration so the next logger reconfigures. Useful for testing."""
    global _configured
    structlog.reset_defaults()
    _configured = False


def get_logger(name: str) -> Any:
    """Get a structured logger for the given name.

    Args:
        name: Logger name (typically __name__ or module path)

    Returns:
        A bound logger that supports structured logging.
    """
    if not _configured:
        # Auto-configure with defaults if not explicitly configured
        configure_logging()

    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables that will be included in all subsequent logs.

    Example:
        bind_context(request_id="req-456")
        logger.info("processing")  # Includes request_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    """Remove specific context variables."""
    structlog.contextvars.unbind_contextvars(*keys)


def run_logger(run_id: str, name: str | None = None) -> Any:
    """Get a logger pre-bound with run context.

    Args:
        run_id: The run's unique ID
        name: Optional human-readable run name

    Returns:
        Logger with run_id (and run_name, when given) bound
    """
    logger = get_logger("stepflow.run")
    if name is not None:
        return logger.bind(run_id=run_id, run_name=name)
    return logger.bind(run_id=run_id)
