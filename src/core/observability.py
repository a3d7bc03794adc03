"""Structured logging setup (structlog).

Logs go to stderr so the JSON dump on stdout stays machine-readable.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, verbose: bool = False, silent: bool = False) -> None:
    """Configure structlog once per process.

    Levels: WARNING by default, DEBUG with `verbose`, ERROR with `silent`.
    """

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif silent:
        level = logging.ERROR

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
