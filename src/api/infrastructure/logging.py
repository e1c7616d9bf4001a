"""Structlog configuration for the application.

Console output with colors when attached to a terminal, JSON lines
otherwise (containers, log shippers).
"""

import logging
import os
import sys

import structlog


def _wants_colors() -> bool:
    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def configure_logging(debug: bool = False) -> None:
    """Configure structlog processors and level filtering.

    Args:
        debug: Emit debug-level events (per-attempt bootstrap details,
            backend requests). Info and above otherwise.
    """
    # Common processors for all environments
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if _wants_colors():
        # Development: colored console output
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        # Production: JSON output
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
