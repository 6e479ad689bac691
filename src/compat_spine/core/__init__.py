"""compat-spine core -- errors, logging, settings, storage plumbing, scheduling.

Module Map
----------
  errors        Structured error hierarchy (CompatError, TransientError, ...)
  logging       structlog configuration + LogContext
  settings      CompatSettings (pydantic-settings: env, .env, TOML)
  timestamps    UTC helpers and sortable storage format
  connection    SQLite connection factory
  repository    BaseRepository query / transaction helpers
  schema        History table DDL
  scheduling/   Interval backends driving the two loops
"""

from compat_spine.core.errors import (
    CompatError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    MissingConfigError,
    NetworkError,
    ParseError,
    ReportError,
    SourceError,
    StorageError,
    TransientError,
)

__all__ = [
    "CompatError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigError",
    "MissingConfigError",
    "NetworkError",
    "ParseError",
    "ReportError",
    "SourceError",
    "StorageError",
    "TransientError",
]
