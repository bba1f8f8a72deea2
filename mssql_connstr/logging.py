"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Logging for mssql_connstr.

A single DEBUG level that is either on or off. Logging is disabled until
setup_logging() is called, and every message is stripped of credentials
before it reaches a handler.
"""

import contextlib
import contextvars
import datetime
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import Iterator, Optional

from mssql_connstr.helpers import sanitize_connection_string

DEBUG = logging.DEBUG

# Output destination constants
STDOUT = 'stdout'
FILE = 'file'
BOTH = 'both'

LOGGER_NAME = 'mssql_connstr'
LOG_DIR_NAME = 'mssql_connstr_logs'

# Context variable for trace IDs (thread-safe, async-safe)
_trace_id_var = contextvars.ContextVar('trace_id', default=None)


class TraceIDFilter(logging.Filter):
    """Filter that adds trace_id to all log records."""

    def filter(self, record):
        trace_id = _trace_id_var.get()
        record.trace_id = trace_id if trace_id else '-'
        return True


class TranslatorLogger:
    """
    Singleton logger for mssql_connstr.

    - Disabled (CRITICAL) until setup_logging() is called
    - Rotating log file (64MB, 5 backups) and/or stdout
    - Credential sanitization on every message
    - Trace IDs carried in a context variable
    """

    _instance: Optional['TranslatorLogger'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'TranslatorLogger':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(TranslatorLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, '_initialized'):
            return
        self._initialized = True

        self._logger = logging.getLogger(LOGGER_NAME)
        self._logger.setLevel(logging.CRITICAL)
        self._logger.propagate = False
        self._logger.addFilter(TraceIDFilter())

        self._trace_counter = 0
        self._trace_lock = threading.Lock()

        self._output_mode = FILE
        self._file_handler = None
        self._stdout_handler = None
        self._log_file = None
        self._custom_log_path = None
        # Handlers are created on first setup_logging() so no file appears before then
        self._handlers_initialized = False

    def _setup_handlers(self):
        for handler in self._logger.handlers[:]:
            handler.close()
            self._logger.removeHandler(handler)

        self._file_handler = None
        self._stdout_handler = None

        formatter = logging.Formatter(
            '%(asctime)s [%(trace_id)s] - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        )

        if self._output_mode in (FILE, BOTH):
            if self._custom_log_path:
                self._log_file = self._custom_log_path
                log_dir = os.path.dirname(self._custom_log_path)
                if log_dir:
                    os.makedirs(log_dir, exist_ok=True)
            else:
                log_dir = os.path.join(os.getcwd(), LOG_DIR_NAME)
                os.makedirs(log_dir, exist_ok=True)
                timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
                self._log_file = os.path.join(
                    log_dir, f"mssql_connstr_trace_{timestamp}_{os.getpid()}.log"
                )

            self._file_handler = RotatingFileHandler(
                self._log_file,
                maxBytes=64 * 1024 * 1024,
                backupCount=5,
            )
            self._file_handler.setFormatter(formatter)
            self._logger.addHandler(self._file_handler)
        else:
            self._log_file = None

        if self._output_mode in (STDOUT, BOTH):
            self._stdout_handler = logging.StreamHandler(sys.stdout)
            self._stdout_handler.setFormatter(formatter)
            self._logger.addHandler(self._stdout_handler)

    @staticmethod
    def _sanitize_message(msg: str) -> str:
        """
        Replace credentials in a log message with ***.

        Covers PWD=/Password= pairs in any quoting style and Rust
        `password: "..."` fields.
        """
        return sanitize_connection_string(msg)

    # Trace IDs

    def generate_trace_id(self, prefix: str = "XLAT") -> str:
        """
        Generate a unique trace ID: PREFIX-PID-ThreadID-Counter (e.g. XLAT-12345-67890-1).
        """
        with self._trace_lock:
            self._trace_counter += 1
            counter = self._trace_counter
        return f"{prefix}-{os.getpid()}-{threading.get_ident()}-{counter}"

    def set_trace_id(self, trace_id: Optional[str]):
        _trace_id_var.set(trace_id)

    def get_trace_id(self) -> Optional[str]:
        return _trace_id_var.get()

    def clear_trace_id(self):
        _trace_id_var.set(None)

    @contextlib.contextmanager
    def trace(self, prefix: str = "XLAT") -> Iterator[str]:
        """
        Run a block under a fresh trace ID, restoring the previous one afterwards.

        Example:
            with logger.trace() as trace_id:
                logger.debug("translating")
        """
        token = _trace_id_var.set(self.generate_trace_id(prefix))
        try:
            yield _trace_id_var.get()
        finally:
            _trace_id_var.reset(token)

    # Logging

    def _log(self, level: int, msg: str, *args, **kwargs):
        if not self._logger.isEnabledFor(level):
            return
        if args:
            msg = msg % args
        self._logger.log(level, self._sanitize_message(msg), **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        """Log at DEBUG level (all diagnostic messages)"""
        self._log(logging.DEBUG, msg, *args, **kwargs)

    # Level control

    def _setLevel(self, level: int, output: Optional[str] = None, log_file_path: Optional[str] = None):
        """
        Internal method to set logging level (use setup_logging() instead).

        Raises:
            ValueError: If output mode is invalid
        """
        if output is not None:
            if output not in (FILE, STDOUT, BOTH):
                raise ValueError(
                    f"Invalid output mode: {output}. "
                    f"Must be one of: {FILE}, {STDOUT}, {BOTH}"
                )
            self._output_mode = output

        if log_file_path is not None:
            self._custom_log_path = log_file_path

        if not self._handlers_initialized or output is not None or log_file_path is not None:
            self._setup_handlers()
            self._handlers_initialized = True

        self._logger.setLevel(level)

    def disable(self):
        """Turn logging off again and release handlers."""
        for handler in self._logger.handlers[:]:
            handler.close()
            self._logger.removeHandler(handler)
        self._file_handler = None
        self._stdout_handler = None
        self._handlers_initialized = False
        self._logger.setLevel(logging.CRITICAL)

    def isEnabledFor(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    @property
    def handlers(self) -> list:
        return self._logger.handlers

    @property
    def output(self) -> str:
        return self._output_mode

    @property
    def log_file(self) -> Optional[str]:
        """Current log file path (None if file output is disabled)"""
        return self._log_file

    @property
    def level(self) -> int:
        return self._logger.level


# Singleton logger instance
logger = TranslatorLogger()


def setup_logging(output: str = 'file', log_file_path: Optional[str] = None):
    """
    Enable DEBUG logging for troubleshooting.

    Args:
        output: Where to send logs: 'file' (default), 'stdout' or 'both'.
        log_file_path: Optional custom path for the log file. If not given, a file
            is created under ./mssql_connstr_logs/.

    Examples:
        import mssql_connstr

        # Stdout only
        mssql_connstr.setup_logging(output='stdout')

        # Custom path with both outputs
        mssql_connstr.setup_logging(output='both', log_file_path="/tmp/connstr.log")
    """
    logger._setLevel(logging.DEBUG, output, log_file_path)
    return logger
