"""Tests for compat_spine.core.errors module."""

import pytest

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
    is_retryable,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.loop is None
        assert ctx.feature is None
        assert ctx.metadata == {}

    def test_to_dict_includes_set_fields(self):
        """to_dict includes only non-None fields."""
        ctx = ErrorContext(loop="ingestion", feature="Modules", metadata={"key": "value"})
        d = ctx.to_dict()
        assert d == {"loop": "ingestion", "feature": "Modules", "key": "value"}
        assert "url" not in d


class TestCompatError:
    def test_defaults(self):
        error = CompatError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.category is ErrorCategory.INTERNAL
        assert error.retryable is False
        assert error.cause is None

    def test_cause_is_chained(self):
        original = ValueError("boom")
        error = StorageError("insert failed", cause=original)
        assert error.__cause__ is original
        assert error.to_dict()["cause"] == "boom"

    def test_with_context_sets_known_fields_and_metadata(self):
        error = SourceError("layout changed").with_context(
            source_name="cppreference", url="https://example.test", path="/tmp/x"
        )
        assert error.context.source_name == "cppreference"
        assert error.context.url == "https://example.test"
        assert error.context.metadata == {"path": "/tmp/x"}

    def test_with_context_returns_same_instance(self):
        error = ReportError("cannot render")
        assert error.with_context(feature="X") is error

    def test_to_dict(self):
        error = StorageError("no such snapshot").with_context(feature="X")
        d = error.to_dict()
        assert d["error_type"] == "StorageError"
        assert d["category"] == "STORAGE"
        assert d["retryable"] is False
        assert d["context"] == {"feature": "X"}

    def test_repr(self):
        assert repr(SourceError("bad")) == "SourceError('bad', category=SOURCE)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls, category",
        [
            (TransientError, ErrorCategory.NETWORK),
            (NetworkError, ErrorCategory.NETWORK),
            (SourceError, ErrorCategory.SOURCE),
            (ParseError, ErrorCategory.PARSE),
            (StorageError, ErrorCategory.STORAGE),
            (ReportError, ErrorCategory.REPORT),
            (ConfigError, ErrorCategory.CONFIG),
        ],
    )
    def test_default_categories(self, cls, category):
        assert cls("x").category is category

    def test_parse_error_is_source_error(self):
        assert isinstance(ParseError("x"), SourceError)

    def test_config_errors_record_key(self):
        assert MissingConfigError("missing", key="config").context.metadata == {"config_key": "config"}
        assert InvalidConfigError("bad", key="webhook_url").context.metadata == {
            "config_key": "webhook_url"
        }


class TestIsRetryable:
    def test_transient_errors_are_retryable(self):
        assert is_retryable(NetworkError("timeout")) is True

    def test_permanent_errors_are_not(self):
        assert is_retryable(ParseError("bad page")) is False
        assert is_retryable(ConfigError("bad")) is False

    def test_builtin_connection_errors(self):
        assert is_retryable(ConnectionError()) is True
        assert is_retryable(TimeoutError()) is True
        assert is_retryable(ValueError()) is False
