"""
This file contains fixtures for the tests in the mssql_connstr package.
Fixtures:
- registry: The process-wide keyword registry.
- parser: A ConnectionStringParser bound to that registry.
- mapper: A KeywordMapper bound to that registry.
- cleanup_logger: Resets the singleton logger before and after a test.
"""

import logging
import os
import shutil

import pytest

from mssql_connstr.connection_string_parser import ConnectionStringParser
from mssql_connstr.logging import logger, FILE, LOG_DIR_NAME
from mssql_connstr.mapper import KeywordMapper
from mssql_connstr.registry import get_registry


# Concrete inputs shared by several test modules
AZURE_SQLCLIENT = (
    "Server=myserver.database.windows.net;Database=mydb;User ID=user@myserver;"
    "Password=pass123;Encrypt=True;TrustServerCertificate=False;"
)
AZURE_JDBC = (
    "jdbc:sqlserver://myserver.database.windows.net:1433;databaseName=mydb;"
    "user=user@myserver;password=pass123;encrypt=true;trustServerCertificate=false;"
)
ODBC_WITH_BLOCKED = "Driver={ODBC Driver 18 for SQL Server};Server=localhost;Database=mydb;MultiSubnetFailover=True;"
MALFORMED_QUOTE = 'Server=localhost;Password="unclosed;Database=mydb;'


@pytest.fixture
def registry():
    return get_registry()


@pytest.fixture
def parser(registry):
    return ConnectionStringParser(registry)


@pytest.fixture
def mapper(registry):
    return KeywordMapper(registry)


def _reset_logger():
    logger.disable()
    logger._custom_log_path = None
    logger._output_mode = FILE
    logger._log_file = None
    logger.clear_trace_id()
    log_dir = os.path.join(os.getcwd(), LOG_DIR_NAME)
    if os.path.exists(log_dir):
        shutil.rmtree(log_dir, ignore_errors=True)


@pytest.fixture
def cleanup_logger():
    """Reset logger state before and after each test"""
    _reset_logger()
    yield
    _reset_logger()
    assert logger.level == logging.CRITICAL
