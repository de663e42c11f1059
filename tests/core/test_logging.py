"""
Tests for structured logging helpers.
"""

from __future__ import annotations

import json

import structlog

from tessera.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestConfigureLogging:
    def test_json_output_goes_to_stderr(self, capsys):
        """JSON logs carry the event, service and bound fields on stderr."""
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        get_logger("tests").info("unit_loaded", unit="storage.py")

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "unit_loaded"
        assert record["unit"] == "storage.py"
        assert record["service"] == "tessera"
        assert record["level"] == "info"

    def test_level_filters(self, capsys):
        """Events below the configured level are dropped."""
        configure_logging(level="WARNING", json_format=True)
        get_logger("tests").info("hidden")
        assert "hidden" not in capsys.readouterr().err


class TestContext:
    def test_bind_and_unbind(self):
        """Bound keys appear in the context until unbound."""
        bind_context(project="infra", backend="template")
        assert structlog.contextvars.get_contextvars() == {"project": "infra", "backend": "template"}
        unbind_context("backend")
        assert structlog.contextvars.get_contextvars() == {"project": "infra"}
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_scopes_keys(self, capsys):
        """LogContext binds for the block only."""
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        logger = get_logger("tests")
        with LogContext(backend="template"):
            logger.info("inside")
        logger.info("outside")

        lines = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        inside = next(line for line in lines if line["event"] == "inside")
        outside = next(line for line in lines if line["event"] == "outside")
        assert inside["backend"] == "template"
        assert "backend" not in outside

    def test_nested_log_context_restores_outer_values(self):
        """An inner context with the same key restores the outer value on exit."""
        with LogContext(project="parent"):
            with LogContext(project="child", backend="template"):
                assert structlog.contextvars.get_contextvars() == {"project": "child", "backend": "template"}
            assert structlog.contextvars.get_contextvars() == {"project": "parent"}
        assert structlog.contextvars.get_contextvars() == {}


class TestLoggerNames:
    def test_warning_and_error_carry_the_logger_name(self, capsys):
        """Events at every level render with the name given to get_logger."""
        configure_logging(level="WARNING", json_format=True, add_timestamp=False)
        logger = get_logger("tessera.discovery")
        logger.warning("unit_load_failed", unit="bad.py")
        logger.error("build_aborted", phase="discovery")

        lines = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        assert [line["event"] for line in lines] == ["unit_load_failed", "build_aborted"]
        assert all(line["logger"] == "tessera.discovery" for line in lines)
        assert lines[0]["level"] == "warning"

    def test_console_format_handles_warnings(self, capsys):
        """The console renderer accepts the same events."""
        configure_logging(level="WARNING", json_format=False)
        get_logger("tests").warning("child_template_missing", child="network")
        assert "child_template_missing" in capsys.readouterr().err

    def test_loggers_created_before_configuration_follow_it(self, capsys):
        """Module-level loggers pick up a later configure_logging call."""
        early = get_logger("tests.early")
        configure_logging(level="ERROR", json_format=True, add_timestamp=False)
        early.warning("dropped")
        early.error("kept")
        err = capsys.readouterr().err
        assert "dropped" not in err
        assert json.loads(err.strip().splitlines()[-1])["event"] == "kept"
