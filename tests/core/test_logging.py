"""Tests for compat_spine.core.logging: structlog configuration and LogContext."""

from __future__ import annotations

import importlib
import json

from compat_spine.core.logging import LogContext, configure_logging, get_logger


def _lines(capsys) -> list[dict]:
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]


class TestConfigureLogging:
    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, service="compat-test")
        get_logger("compat_spine.test").info("snapshot_persisted", feature="Modules")

        (entry,) = _lines(capsys)
        assert entry["event"] == "snapshot_persisted"
        assert entry["feature"] == "Modules"
        assert entry["logger_name"] == "compat_spine.test"
        assert entry["log.level"] == "info"
        assert entry["service.name"] == "compat-test"
        assert "@timestamp" in entry

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("compat_spine.test")
        logger.info("hidden")
        logger.warning("shown")

        assert [entry["event"] for entry in _lines(capsys)] == ["shown"]

    def test_console_output(self, capsys):
        configure_logging(level="INFO", json_format=False)
        get_logger().info("service_starting")
        assert "service_starting" in capsys.readouterr().out


class TestLogContext:
    def test_binds_and_unbinds(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("compat_spine.test")

        with LogContext(loop="ingestion", tick=3):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _lines(capsys)
        assert inside["loop"] == "ingestion"
        assert inside["tick"] == 3
        assert "loop" not in outside
        assert "tick" not in outside


class TestModuleLoggers:
    def test_modules_with_module_level_loggers_import(self):
        for module in (
            "compat_spine.domain.store",
            "compat_spine.pipelines.ingestion",
            "compat_spine.pipelines.notification",
            "compat_spine.pipelines.service",
            "compat_spine.framework.sources.cppreference",
            "compat_spine.framework.sources.file",
            "compat_spine.core.scheduling.thread_backend",
        ):
            assert importlib.import_module(module).logger is not None

    def test_named_logger_binds_name(self, capsys):
        from compat_spine.domain import store

        configure_logging(level="INFO", json_format=True)
        store.logger.info("history_store_opened")

        (entry,) = _lines(capsys)
        assert entry["logger_name"] == "compat_spine.domain.store"
