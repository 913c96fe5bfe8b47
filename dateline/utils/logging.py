"""Structured logging for validation and pipeline components using structlog."""

import sys
import uuid
from typing import Any, Optional

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars
from structlog.processors import JSONRenderer

from dateline.config.settings import settings


def configure_structured_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structlog processors and renderer.

    Uses:
    - Console renderer on a TTY when the format is "console" (colorized)
    - JSON renderer otherwise (one object per line)
    - Context variables so a batch can bind its day/run id once

    Args:
        level: Log level name (defaults to settings.log_level)
        log_format: "json" or "console" (defaults to settings.log_format)
    """
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()

    processors = [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if sys.stderr.isatty() and log_format == "console":
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def bind_run_context(day: str, run_id: Optional[str] = None, **extra: Any) -> str:
    """
    Bind batch-wide context to every structlog event in this task.

    Returns:
        The run id (generated when not given)

    Example:
        >>> run_id = bind_run_context("October 8")
    """
    run_id = run_id or str(uuid.uuid4())
    bind_contextvars(run_id=run_id, day=day, **extra)
    return run_id


__all__ = [
    "bind_run_context",
    "configure_structured_logging",
]
