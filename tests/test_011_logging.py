"""
Unit tests for mssql_connstr logging module.
Tests the logging API, output modes, sanitization and trace IDs.
"""
import logging
import os
import re

import pytest

from mssql_connstr import translate
from mssql_connstr.logging import logger, setup_logging, BOTH, FILE, STDOUT, LOG_DIR_NAME


def _read(path):
    for handler in logger.handlers:
        handler.flush()
    with open(path, encoding="utf-8") as log_file:
        return log_file.read()


class TestLoggingBasics:
    """Test basic logging functionality"""

    def test_logger_disabled_by_default(self, cleanup_logger):
        """Logger should be disabled by default (CRITICAL level)"""
        assert logger.level == logging.CRITICAL
        assert not logger.isEnabledFor(logging.DEBUG)

    def test_setup_logging_enables_debug(self, cleanup_logger, tmp_path):
        """setup_logging() should enable DEBUG level"""
        returned = setup_logging(log_file_path=str(tmp_path / "connstr.log"))
        assert returned is logger
        assert logger.level == logging.DEBUG
        assert logger.isEnabledFor(logging.DEBUG)

    def test_singleton_behavior(self):
        """Logger should behave as singleton"""
        from mssql_connstr.logging import TranslatorLogger
        from mssql_connstr import logger as package_logger
        assert TranslatorLogger() is logger
        assert package_logger is logger

    def test_disabled_logger_writes_nothing(self, cleanup_logger, capsys):
        logger.debug("should not appear")
        assert capsys.readouterr().out == ""


class TestOutputModes:
    """Test different output modes (file, stdout, both)"""

    def test_default_output_creates_log_dir(self, cleanup_logger):
        """Default output mode should be FILE under ./mssql_connstr_logs"""
        setup_logging()
        assert logger.output == FILE
        assert os.path.exists(logger.log_file)
        assert os.path.basename(os.path.dirname(logger.log_file)) == LOG_DIR_NAME
        assert re.match(r"mssql_connstr_trace_\d{8}_\d{6}_\d+\.log", os.path.basename(logger.log_file))

    def test_stdout_mode(self, cleanup_logger, capsys):
        """STDOUT mode should not create a log file"""
        setup_logging(output=STDOUT)
        assert logger.output == STDOUT
        assert logger.log_file is None
        assert len(logger.handlers) == 1
        logger.debug("hello %s", "stdout")
        assert "hello stdout" in capsys.readouterr().out

    def test_both_mode(self, cleanup_logger, tmp_path):
        setup_logging(output=BOTH, log_file_path=str(tmp_path / "both.log"))
        assert logger.output == BOTH
        assert len(logger.handlers) == 2

    def test_invalid_output_mode_raises_error(self, cleanup_logger):
        """Invalid output mode should raise ValueError"""
        with pytest.raises(ValueError, match="Invalid output mode"):
            setup_logging(output='invalid')

    def test_custom_path_in_new_directory(self, cleanup_logger, tmp_path):
        path = tmp_path / "nested" / "dir" / "custom.log"
        setup_logging(log_file_path=str(path))
        assert logger.log_file == str(path)
        assert path.exists()


class TestSanitization:
    """Credentials never reach a handler"""

    def test_password_masked_in_file(self, cleanup_logger, tmp_path):
        path = tmp_path / "sanitize.log"
        setup_logging(log_file_path=str(path))
        logger.debug("Input: %s", "Server=x;PWD=hunter2;Database=d")
        content = _read(path)
        assert "hunter2" not in content
        assert "PWD=***" in content

    def test_rust_password_masked(self, cleanup_logger, tmp_path):
        path = tmp_path / "rust.log"
        setup_logging(log_file_path=str(path))
        logger.debug('auth: AuthContext { password: "hunter2".to_string() }')
        assert "hunter2" not in _read(path)


class TestTraceIds:

    def test_trace_context(self, cleanup_logger):
        assert logger.get_trace_id() is None
        with logger.trace() as trace_id:
            assert trace_id.startswith("XLAT-")
            assert logger.get_trace_id() == trace_id
        assert logger.get_trace_id() is None

    def test_set_and_clear_trace_id(self, cleanup_logger):
        logger.set_trace_id("CLI-1")
        assert logger.get_trace_id() == "CLI-1"
        logger.clear_trace_id()
        assert logger.get_trace_id() is None

    def test_trace_ids_are_unique(self):
        assert logger.generate_trace_id() != logger.generate_trace_id()

    def test_trace_id_in_log_lines(self, cleanup_logger, tmp_path):
        path = tmp_path / "trace.log"
        setup_logging(log_file_path=str(path))
        with logger.trace("TEST") as trace_id:
            logger.debug("inside")
        logger.debug("outside")
        lines = _read(path).splitlines()
        assert f"[{trace_id}]" in lines[0]
        assert "[-]" in lines[1]

    def test_translation_is_traced(self, cleanup_logger, tmp_path):
        path = tmp_path / "translate.log"
        setup_logging(log_file_path=str(path))
        translate("Server=x;Password=topsecret", "odbc")
        content = _read(path)
        assert "Translating to odbc" in content
        assert "[XLAT-" in content
        assert "topsecret" not in content
