"""Ambient building blocks: errors, logging, settings."""

from lambda_relay.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidExecutionContextError,
    PacketDecodeError,
    ParseError,
    RelayError,
    ReservedFieldError,
    ValidationError,
    categorize_error,
    is_retryable,
)
from lambda_relay.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidExecutionContextError",
    "PacketDecodeError",
    "ParseError",
    "RelayError",
    "ReservedFieldError",
    "ValidationError",
    "categorize_error",
    "is_retryable",
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
