from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "llm_context_gen"

_LOGGING_CONFIGURED = False


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Set up structured logging for the llm_context_gen package.

    Every event is rendered as one JSON object per line. Only the first call
    configures logging; use `attach_log_file` to add a destination afterwards.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.

    Returns:
        A structlog logger instance configured for the llm_context_gen package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if not _LOGGING_CONFIGURED:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=logging.INFO,
            handlers=handlers,
            format="%(message)s",
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger(LOGGER_NAME)


def attach_log_file(filename: str | Path) -> logging.Handler:
    """Send the package's events to `filename` as well, one JSON object per line.

    Handlers are resolved when an event is emitted, so loggers bound at import
    time write to the new file too. The caller owns the returned handler and
    releases it with `detach_log_file`.
    """
    handler = logging.FileHandler(str(filename), encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    package = logging.getLogger(LOGGER_NAME)
    package.setLevel(logging.INFO)
    package.addHandler(handler)
    return handler


def detach_log_file(handler: logging.Handler) -> None:
    """Remove a handler added by `attach_log_file` and close its file."""
    logging.getLogger(LOGGER_NAME).removeHandler(handler)
    handler.close()


logger = setup_logging()
