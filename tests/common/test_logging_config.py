"""Tests for logging configuration."""

import json
import logging

import pytest
from pydantic import ValidationError

from gtakeout_reconcile.common import LogContext, setup_logging
from gtakeout_reconcile.common.logging import StructuredFormatter
from gtakeout_reconcile.common.logging_config import LoggingConfig


class TestLoggingConfig:
    """Test LoggingConfig validation."""

    def test_valid_config(self):
        """Test valid logging configuration."""
        config = LoggingConfig(level="INFO", format="json")
        assert config.level == "INFO"
        assert config.format == "json"

    def test_default_values(self):
        """Test default values."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "simple"
        assert config.file is None
        assert config.progress_interval == 500

    def test_rejects_invalid_log_level(self):
        """Test that invalid log levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="TRACE")

    def test_rejects_invalid_format(self):
        """Test that invalid formats are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_rejects_unknown_field(self):
        """Test that unknown keys in the config file are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(colour=True)

    def test_rejects_zero_progress_interval(self):
        """Test that progress interval must be positive."""
        with pytest.raises(ValidationError):
            LoggingConfig(progress_interval=0)

    def test_case_insensitive_values(self):
        """Test that level and format are case-insensitive."""
        config = LoggingConfig(level="debug", format="JSON")
        assert config.level == "DEBUG"
        assert config.format == "json"


class TestStructuredFormatter:
    """Tests for JSON log output."""

    def test_formats_record_as_json(self):
        """Test that records serialize with level, logger and message."""
        record = logging.LogRecord("gtakeout_reconcile.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "gtakeout_reconcile.test"
        assert data["message"] == "hello world"
        assert "timestamp" in data

    def test_includes_extra_fields(self):
        """Test that fields attached to a record are merged in."""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
        record.extra_fields = {"phase": "dedup"}

        data = json.loads(StructuredFormatter().format(record))

        assert data["phase"] == "dedup"


class TestSetupLogging:
    """Tests for setup_logging and LogContext."""

    def test_writes_json_log_file(self, tmp_path):
        """Test that the log file receives JSON lines."""
        log_file = tmp_path / "logs" / "run.log"
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(level="INFO", format="simple", log_file=log_file)
            logging.getLogger("gtakeout_reconcile.test").info("written")
            for handler in root.handlers:
                handler.flush()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "written"

    def test_log_context_tags_records(self):
        """Test that LogContext attaches fields only while active."""
        logger = logging.getLogger("gtakeout_reconcile.test.context")
        records = []

        class ListHandler(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = ListHandler()
        logger.addHandler(handler)
        try:
            with LogContext(logger, phase="matching"):
                logger.warning("inside")
            logger.warning("outside")
        finally:
            logger.removeHandler(handler)

        assert records[0].extra_fields == {"phase": "matching"}
        assert not hasattr(records[1], "extra_fields")
