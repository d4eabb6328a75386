"""
Structured Logging Module
=========================

Provides structured logging using structlog with JSON output for CI
and colored console output for local runs.

Usage:
    from visual_click.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Step matched", step=2, attempt=1)
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor

from visual_click import __version__
from visual_click.config import get_settings


def add_app_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Add runner context to log entries.

    Args:
        logger: The wrapped logger object.
        method_name: The name of the log method called.
        event_dict: The event dictionary to process.

    Returns:
        The modified event dictionary.
    """
    event_dict["runner"] = "visual-click"
    event_dict["version"] = __version__
    return event_dict


def setup_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Configure structured logging for the runner.

    Sets up structlog with appropriate processors:
    - Console (default): Colored output with pretty printing
    - JSON: One object per line, for CI log collection

    This should be called once at process startup.

    Args:
        level: Log level name; defaults to the LOG_LEVEL setting.
        json_logs: Force JSON output; defaults to ``not DEBUG``.
    """
    settings = get_settings()
    level_name = (level or settings.runner.log_level).upper()
    if json_logs is None:
        json_logs = not settings.runner.debug

    # Shared processors for all environments
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]

    if not json_logs:
        processors: list[Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.rich_traceback,
            ),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Also configure standard library logging for third-party libs
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name),
    )

    # Reduce noise from the HTTP client
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: The name for the logger, typically __name__.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for adding temporary context to logs.

    Usage:
        with LogContext(app="ipswich"):
            logger.info("Home icon tapped")  # Will include app
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._token: Any = None

    def __enter__(self) -> "LogContext":
        """Enter the context, binding variables."""
        self._token = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, unbinding variables."""
        structlog.contextvars.unbind_contextvars(*self.context.keys())
