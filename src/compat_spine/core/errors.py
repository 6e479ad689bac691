"""
Structured error types for compat-spine.

Provides a small hierarchy of typed errors carrying a category, a retry hint
and structured context, so that the polling loops can log collaborator
failures uniformly and keep going.

Manifesto:
    - **Typed Error Hierarchy:** One subclass per collaborator boundary
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry metadata for logging and escalation
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       CompatError                               │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                 │
        │  TransientError    SourceError       ConfigError                │
        │  (retryable=True)  (SOURCE)          (CONFIG)                   │
        │       │                │                   │                    │
        │  NetworkError      ParseError        MissingConfigError         │
        │                                      InvalidConfigError         │
        │                                                                 │
        │  StorageError      ReportError                                  │
        │  (STORAGE)         (REPORT)                                     │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = SourceError("page layout changed")
    >>> error.with_context(source_name="cppreference", url="https://en.cppreference.com")
    SourceError('page layout changed', category=SOURCE)
    >>> error.context.source_name
    'cppreference'

Guardrails:
    ❌ DON'T: Let a collaborator's native exception escape into a loop
    ✅ DO: Wrap it at the boundary and pass it as cause=

Tags:
    error-handling, exception-hierarchy, retry-logic, error-context,
    compat-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"  # Connection, timeout, DNS
    STORAGE = "STORAGE"  # History store failures
    SOURCE = "SOURCE"  # Upstream page unavailable
    PARSE = "PARSE"  # Page layout not understood
    CONFIG = "CONFIG"  # Missing config, invalid settings
    REPORT = "REPORT"  # Change could not be rendered
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover what the loops know at the point of failure (which
    loop, which feature, which source); anything else goes in ``metadata``.
    ``to_dict()`` serializes only the fields that are set.

    Attributes:
        loop: Name of the polling loop ("ingestion" or "notification")
        feature: Feature name being processed
        observed_at: ISO timestamp of the snapshot being processed
        source_name: Name of the producer (e.g. "cppreference")
        url: URL that was being accessed
        http_status: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    loop: str | None = None
    feature: str | None = None
    observed_at: str | None = None
    source_name: str | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["loop", "feature", "observed_at", "source_name", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CompatError(Exception):
    """
    Base exception for all compat-spine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites only pass a message and, when wrapping, the original exception.

    Examples:
        >>> error = CompatError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False
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

    def with_context(self, **kwargs: Any) -> CompatError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StorageError("insert failed").with_context(feature="Modules")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
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
# TRANSIENT ERRORS (Usually Retryable)
# =============================================================================


class TransientError(CompatError):
    """Temporary error that may succeed on the next tick."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Network-related transient error."""

    default_category = ErrorCategory.NETWORK


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(CompatError):
    """The producer could not supply feature records."""

    default_category = ErrorCategory.SOURCE


class ParseError(SourceError):
    """The fetched document could not be parsed into feature records."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# STORAGE / REPORT ERRORS
# =============================================================================


class StorageError(CompatError):
    """History store operation failed."""

    default_category = ErrorCategory.STORAGE


class ReportError(CompatError):
    """A change could not be turned into report text."""

    default_category = ErrorCategory.REPORT


# =============================================================================
# CONFIG ERRORS (Never Retryable)
# =============================================================================


class ConfigError(CompatError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """A required configuration file or value is missing."""

    def __init__(self, message: str, *, key: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if key:
            self.context.metadata["config_key"] = key


class InvalidConfigError(ConfigError):
    """A configuration value is present but unusable."""

    def __init__(self, message: str, *, key: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if key:
            self.context.metadata["config_key"] = key


def is_retryable(error: Exception) -> bool:
    """Check whether an exception is worth retrying on a later tick."""
    if isinstance(error, CompatError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CompatError",
    "TransientError",
    "NetworkError",
    "SourceError",
    "ParseError",
    "StorageError",
    "ReportError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "is_retryable",
]
