"""Structured logging configuration using structlog.

JSON output is meant for production log aggregation; the console renderer
is for local runs. Analysis runs bind their id into the structlog context
so every event emitted during a run can be correlated.

Usage::

    from pattern_engine.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("pattern_reconciled", pattern_id=42, created=True)
    # Output: {"event": "pattern_reconciled", "pattern_id": 42, "created": true, "timestamp": "...", ...}
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog on top of the standard library logging module.

    Args:
        json_logs: Render events as JSON when True, as coloured console lines otherwise.
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_run_context(run_id: int, run_type: str) -> None:
    """Attach the active analysis run to every subsequent log event."""
    structlog.contextvars.bind_contextvars(run_id=run_id, run_type=run_type)


def clear_run_context() -> None:
    structlog.contextvars.unbind_contextvars("run_id", "run_type")
