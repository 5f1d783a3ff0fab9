"""
Structured logging for lambda-relay.

Every relay hop runs in a different Lambda invocation, so the only way to
follow a logical task through CloudWatch is a consistent, machine-readable
log line per hop. This module configures structlog once per process and
hands out loggers that emit snake_case event names with keyword fields.

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="lambda-relay")
             ↓
        structlog processor chain:
          1. merge_contextvars      (queue_url / sqs_count bound per hop)
          2. TimeStamper(iso)
          3. add_log_level
          4. add_service_metadata
          5. elasticsearch_compatible   (JSON only)
          6. JSONRenderer | ConsoleRenderer

        logger = get_logger(__name__)
        logger.info("relay_sent", queue_url=url, sqs_count=3, delay_seconds=0)

Examples:
    >>> from lambda_relay.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("setup_complete", queue_url="https://sqs/q")

    Scoped hop context:

    >>> with LogContext(queue_url="https://sqs/q", sqs_count=2):
    ...     logger.info("hop_started")

Guardrails:
    - Lambda stdout is not a tty, so JSON is the auto-detected default there
    - Service name stored globally (set once at cold start)
    - ECS-compatible field names for log aggregation

Tags:
    logging, structlog, observability, json-logging, lambda-relay
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "lambda-relay"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")

    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")

    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "lambda-relay",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs

    Example:
        # Lambda cold start
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # botocore logs through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``).

    The name is bound as the ``logger`` field; PrintLogger has no name of its own.
    """
    if name:
        return structlog.get_logger().bind(logger=name)
    return structlog.get_logger()


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(queue_url=packet.queue_url, sqs_count=packet.stats.sqs_count)
        logger.info("hop_started")  # Includes queue_url and sqs_count
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(queue_url=packet.queue_url):
            logger.info("hop_started")
            logger.info("hop_completed")
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())

    async def __aenter__(self) -> "LogContext":
        bind_context(**self._context)
        return self

    async def __aexit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
