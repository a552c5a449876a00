"""
Tests for logging configuration.
"""

import json
import logging
import os
from unittest.mock import patch

import pytest

from remnet.common.logging_config import (
    ROOT_LOGGER_NAME,
    ENV_LOG_LEVEL,
    ENV_LOG_JSON,
    JSONFormatter,
    LoggingTimer,
    get_logger,
    log_performance_metric,
    setup_logging,
    _resolve_logging_config
)


@pytest.fixture(autouse=True)
def reset_remnet_logger():
    """Leave the remnet logger as pytest found it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    yield
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    """Test setup_logging."""

    def test_returns_remnet_logger(self):
        """Test that the package root logger is configured."""
        logger = setup_logging(level="DEBUG", console=True, force_setup=True)
        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_invalid_level(self):
        """Test that an unknown level raises ValueError."""
        with pytest.raises(ValueError, match="Invalid logging level"):
            setup_logging(level="LOUD", force_setup=True)

    def test_existing_setup_is_kept(self):
        """Test that a second call without force_setup changes nothing."""
        logger = setup_logging(level="INFO", console=True, force_setup=True)
        same = setup_logging(level="DEBUG", console=True)
        assert same is logger
        assert same.level == logging.INFO

    def test_log_file_in_directory(self, tmp_path):
        """Test that log_dir creates remnet.log inside the directory."""
        logger = setup_logging(level="INFO", console=False, log_dir=str(tmp_path / "logs"),
                               force_setup=True)
        get_logger("remnet.test").info("hello from the test")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "remnet.log"
        assert log_file.exists()
        assert "hello from the test" in log_file.read_text(encoding="utf-8")

    def test_json_file_output(self, tmp_path):
        """Test that JSON formatting writes one object per line."""
        log_file = tmp_path / "remnet.json.log"
        logger = setup_logging(level="INFO", console=False, log_file=str(log_file),
                               json_format=True, force_setup=True)
        get_logger("remnet.test").warning("structured")
        for handler in logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").strip().splitlines()
        record = json.loads(lines[-1])
        assert record["message"] == "structured"
        assert record["level"] == "WARNING"
        assert record["logger"] == "remnet.test"


class TestResolveLoggingConfig:
    """Test parameter and environment variable precedence."""

    def test_defaults(self):
        """Test defaults without parameters or environment."""
        with patch.dict(os.environ, {}, clear=True):
            config = _resolve_logging_config()
        assert config["level"] == "INFO"
        assert config["console"] is True
        assert config["json_format"] is False
        assert config["log_file"] is None

    def test_environment_overrides(self):
        """Test that environment variables are used when parameters are absent."""
        with patch.dict(os.environ, {ENV_LOG_LEVEL: "ERROR", ENV_LOG_JSON: "yes"}, clear=True):
            config = _resolve_logging_config()
        assert config["level"] == "ERROR"
        assert config["json_format"] is True

    def test_parameters_win(self):
        """Test that explicit parameters take precedence over the environment."""
        with patch.dict(os.environ, {ENV_LOG_LEVEL: "ERROR"}, clear=True):
            config = _resolve_logging_config(level="DEBUG", json_format=False)
        assert config["level"] == "DEBUG"
        assert config["json_format"] is False


class TestJSONFormatter:
    """Test the JSON formatter."""

    def test_extra_fields_included(self):
        """Test that extra record attributes are serialized."""
        record = logging.LogRecord("remnet.x", logging.INFO, __file__, 10, "fit done", None, None)
        record.duration = 1.25
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "fit done"
        assert payload["duration"] == 1.25


class TestPerformanceLogging:
    """Test performance metrics and LoggingTimer."""

    def test_log_performance_metric(self, caplog):
        """Test the message and extra fields of a performance metric."""
        with caplog.at_level(logging.INFO, logger="remnet.performance"):
            log_performance_metric("case_control_sampling", 2.5, {"strata": 10})
        record = caplog.records[-1]
        assert "case_control_sampling completed in 2.500s" in record.getMessage()
        assert "strata=10" in record.getMessage()
        assert record.duration == 2.5
        assert record.strata == 10

    def test_logging_timer_records_duration(self, caplog):
        """Test that the timer measures and logs the block."""
        with caplog.at_level(logging.INFO, logger="remnet.performance"):
            with LoggingTimer("newton_raphson") as timer:
                sum(range(1000))
        assert timer.duration is not None
        assert timer.duration >= 0
        assert any("newton_raphson" in r.getMessage() for r in caplog.records)

    def test_logging_timer_logs_on_exception(self, caplog):
        """Test that the timer still logs when the block raises."""
        with caplog.at_level(logging.INFO, logger="remnet.performance"):
            with pytest.raises(RuntimeError):
                with LoggingTimer("failing_block"):
                    raise RuntimeError("boom")
        assert any("failing_block" in r.getMessage() for r in caplog.records)
