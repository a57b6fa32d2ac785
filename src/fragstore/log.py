"""Structured logging setup for fragstore.

Uses structlog. Every logger is bound with the emitting ``component``
(``repository``, ``conversion``). Events carry ``owner_id`` and
``fragment_id`` for store work, or ``source`` and ``target`` for
conversions, so one fragment can be followed across components.
"""

from __future__ import annotations

import logging

import structlog


def configure_logging(json_output: bool = True, level: str = "INFO") -> None:
    """Configure structlog for fragstore.

    Args:
        json_output: If True (default), render logs as JSON.
                     If False, use console-friendly output for development.
        level: Minimum level name to emit, e.g. ``"DEBUG"``. Unknown names
               fall back to ``INFO``.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    level_num = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(level_num, int):
        level_num = logging.INFO

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str, **context: object) -> structlog.typing.FilteringBoundLogger:
    """Get a logger bound with ``component`` and any extra context values."""
    return structlog.get_logger().bind(component=component, **context)
