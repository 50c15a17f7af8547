"""
Logging setup for Codeguard.

All modules log through structlog with key-value events. The entry points
call configure_logging() once; library use without it falls back to
structlog's defaults.
"""

import logging
import sys

import structlog

LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


def configure_logging(verbosity: int = 0, json_output: bool = False) -> None:
    """Configure structlog for the process.

    Args:
        verbosity: 0 for warnings, 1 for info, 2 or more for debug
        json_output: Render JSON lines instead of console output
    """
    level = LEVELS.get(verbosity, logging.DEBUG)
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
    )
