"""
Structured error types for lambda-relay.

Provides a small hierarchy of typed errors with metadata for retry
decisions, error categorization and structured logging.

Collaborator failures (``botocore.exceptions.ClientError`` and friends) are
NOT part of this hierarchy. They propagate to the caller unmodified, so a
Lambda handler sees exactly what SQS or Lambda returned. RelayError covers
the faults the relay core itself detects: bad input, bad configuration and
misuse of the packet.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different faults
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry queue/binding identifiers for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │                        RelayError                           │
        │          (category, retryable, context, cause)              │
        ├────────────────────────────────────────────────────────────┤
        │                                                             │
        │  ValidationError        ParseError         ConfigError      │
        │  (VALIDATION)           (PARSE)            (CONFIG)         │
        │       │                     │                   │           │
        │  ReservedFieldError    PacketDecodeError  InvalidExecution- │
        │                                            ContextError     │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> error = PacketDecodeError("body is not JSON")
    >>> error.category
    <ErrorCategory.PARSE: 'PARSE'>
    >>> error.retryable
    False

    >>> error = ValidationError("bad delay").with_context(queue_url="https://q")
    >>> error.context.queue_url
    'https://q'

Guardrails:
    ❌ DON'T: Wrap botocore errors in RelayError
    ✅ DO: Let collaborator failures propagate unmodified

    ❌ DON'T: Raise for a parseable packet that lacks identifiers
    ✅ DO: Return None from extract() and log the diagnostic

Tags:
    error-handling, exception-hierarchy, error-context, lambda-relay
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        VALIDATION: Bad arguments or packet misuse
        PARSE: Unparseable inbound envelope or body
        CONFIG: Missing or invalid settings / execution context
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    VALIDATION = "VALIDATION"     # Bad arguments, reserved keys
    PARSE = "PARSE"               # Envelope / JSON body errors
    CONFIG = "CONFIG"             # Settings, execution context

    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields for the identifiers every relay operation touches, plus a
    free-form ``metadata`` dict. ``to_dict()`` serializes all non-None fields
    for logging.

    Examples:
        >>> ctx = ErrorContext(queue_url="https://sqs/q", target="worker1")
        >>> ctx.to_dict()
        {'queue_url': 'https://sqs/q', 'target': 'worker1'}

    Attributes:
        queue_url: Ephemeral queue the operation was acting on
        binding_id: Event source mapping UUID
        target: Lambda function name the queue is bound to
        metadata: Additional key-value pairs
    """

    queue_url: str | None = None
    binding_id: str | None = None
    target: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["queue_url", "binding_id", "target"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RelayError(Exception):
    """
    Base exception for all lambda-relay errors.

    Every RelayError carries:
    - **category:** ErrorCategory enum for classification
    - **retryable:** Whether repeating the call can succeed
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` and ``default_retryable``.

    Examples:
        >>> error = RelayError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> try:
        ...     raise ValueError("Expecting value")
        ... except ValueError as e:
        ...     error = RelayError("decode failed", cause=e)
        >>> error.__cause__
        ValueError('Expecting value')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RelayError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ValidationError("bad delay").with_context(
                queue_url=packet.queue_url,
                delay="soon",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS (Never Retryable)
# =============================================================================


class ValidationError(RelayError):
    """Invalid argument passed to a relay operation."""

    default_category = ErrorCategory.VALIDATION


class ReservedFieldError(ValidationError):
    """A custom packet field tried to shadow a reserved wire key."""

    def __init__(self, key: str, **kwargs: Any):
        super().__init__(f"'{key}' is a reserved relay packet key", **kwargs)
        self.key = key


# =============================================================================
# PARSE ERRORS
# =============================================================================


class ParseError(RelayError):
    """Inbound data could not be parsed."""

    default_category = ErrorCategory.PARSE


class PacketDecodeError(ParseError):
    """
    The inbound envelope or its body is not a decodable relay message.

    Raised for a missing/empty ``Records`` list, a record without ``body``,
    malformed JSON, or a body that decodes to something other than an
    object. A well-formed object that merely lacks the routing identifiers
    is NOT an error; ``extract()`` returns None for it.
    """


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(RelayError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidExecutionContextError(ConfigError):
    """The execution context does not identify a region and account."""

    def __init__(self, message: str, arn: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.arn = arn
        if arn is not None:
            self.context.metadata["arn"] = arn


# =============================================================================
# UTILITIES
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """
    Check if an error is retryable.

    RelayError instances answer for themselves. botocore ``ClientError``
    instances are retryable when AWS reports a throttling or service-side
    fault; anything else is not.
    """
    if isinstance(error, RelayError):
        return error.retryable

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code = response.get("Error", {}).get("Code", "")
        status = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        if code in _RETRYABLE_AWS_CODES or (isinstance(status, int) and status >= 500):
            return True
    return False


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, RelayError):
        return error.category
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


_RETRYABLE_AWS_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "TooManyRequestsException",
        "RequestThrottled",
        "ServiceUnavailable",
        "InternalError",
        "ResourceInUseException",
    }
)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RelayError",
    "ValidationError",
    "ReservedFieldError",
    "ParseError",
    "PacketDecodeError",
    "ConfigError",
    "InvalidExecutionContextError",
    "is_retryable",
    "categorize_error",
]
