"""
Utility modules for Visual Click.

This package contains:
    - logger: Structured logging with structlog
"""

from visual_click.utils.logger import LogContext, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
]
