"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

This module contains the constants and closed enumerations used across the
mssql_connstr package.
"""

from enum import Enum


class DriverType(Enum):
    """
    Supported SQL Server connection string dialects.

    The set is closed: every table keyed by driver (escaping rules, boolean
    spellings, renderers) must cover all seven members.
    """
    SQLCLIENT = "sqlclient"  # Microsoft.Data.SqlClient / System.Data.SqlClient
    ODBC = "odbc"            # ODBC Driver for SQL Server
    OLEDB = "oledb"          # MSOLEDBSQL / SQLOLEDB
    JDBC = "jdbc"            # mssql-jdbc
    PHP = "php"              # sqlsrv / PDO_SQLSRV
    PYTHON = "python"        # mssql-python / pyodbc
    RUST = "rust"            # mssql-tds

    @classmethod
    def coerce(cls, value) -> "DriverType":
        """
        Convert a driver tag (case-insensitive string) or a DriverType into a DriverType.

        Raises:
            UnsupportedDriverError: If the value does not name one of the seven drivers.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        from mssql_connstr.exceptions import UnsupportedDriverError
        raise UnsupportedDriverError(value)


class DetectionConfidence(Enum):
    """Certainty of the detector's format guess."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    MANUAL = "manual"


class KeywordCategory(Enum):
    """Keyword grouping, used only for display."""
    CONNECTION = "connection"
    AUTH = "auth"
    SECURITY = "security"
    TIMEOUT = "timeout"
    APP_INFO = "appInfo"
    HADR = "hadr"
    NETWORK = "network"
    FEATURES = "features"
    DATABASE = "database"
    POOLING = "pooling"
    RESILIENCY = "resiliency"
    DRIVER = "driver"
    BEHAVIOR = "behavior"
    KEY_VAULT = "keyVault"
    AZURE_AD = "azureAd"
    TRACING = "tracing"
    OTHER = "other"


class KeywordValueType(Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    ENUM = "enum"


class ParseErrorCode(Enum):
    """Fatal parse problems. Any of these makes translate() fail."""
    UNMATCHED_QUOTE = "UNMATCHED_QUOTE"
    UNMATCHED_BRACE = "UNMATCHED_BRACE"
    INVALID_SYNTAX = "INVALID_SYNTAX"
    EMPTY_INPUT = "EMPTY_INPUT"
    UNRECOGNIZED_FORMAT = "UNRECOGNIZED_FORMAT"
    INPUT_TOO_LARGE = "INPUT_TOO_LARGE"


class ParseWarningCode(Enum):
    """Non-fatal parse and validation findings."""
    UNKNOWN_KEYWORD = "UNKNOWN_KEYWORD"
    DUPLICATE_KEYWORD = "DUPLICATE_KEYWORD"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    DEPRECATED_KEYWORD = "DEPRECATED_KEYWORD"
    CONFLICTING_KEYWORDS = "CONFLICTING_KEYWORDS"
    INVALID_VALUE = "INVALID_VALUE"


class TranslationWarningCode(Enum):
    KEYWORD_OMITTED = "KEYWORD_OMITTED"
    VALUE_NORMALIZED = "VALUE_NORMALIZED"
    DEFAULT_DIFFERS = "DEFAULT_DIFFERS"
    BEHAVIOR_DIFFERS = "BEHAVIOR_DIFFERS"
    PYTHON_BLOCKED = "PYTHON_BLOCKED"


class TranslationErrorCode(Enum):
    PARSE_FAILED = "PARSE_FAILED"


class UntranslatableReason(Enum):
    """Why a source keyword has no representation in the target driver."""
    NOT_SUPPORTED = "NOT_SUPPORTED"          # Target driver cannot express it
    DRIVER_SPECIFIC = "DRIVER_SPECIFIC"      # Only the source driver knows it
    UNKNOWN = "UNKNOWN"                      # Not in the keyword registry
    DEPRECATED = "DEPRECATED"                # Deprecated in the target driver
    BLOCKED_ALLOWLIST = "BLOCKED_ALLOWLIST"  # Rejected by the Python allow-list


class KeywordOrder(Enum):
    SOURCE = "source"
    CANONICAL = "canonical"
    ALPHABETICAL = "alphabetical"


class OutputFormatting(Enum):
    COMPACT = "compact"
    READABLE = "readable"


class RenderStrategy(Enum):
    """Output shapes produced by the generator."""
    FLAT = "flat"                # key=value;key=value;
    JDBC_URL = "jdbc_url"        # jdbc:sqlserver://host:port;key=value;
    RUST_STRUCT = "rust_struct"  # ClientContext { ... }


class EscapeStyle(Enum):
    DOUBLE_QUOTE = "double_quote"  # "va""lue"
    BRACE = "brace"                # {va}}lue}
    RUST_STRING = "rust_string"    # "va\"lue"


# Maximum connection string size in bytes (UTF-8)
MAX_CONNECTION_STRING_SIZE = 32 * 1024

DEFAULT_PORT = 1433

JDBC_URL_PREFIX = "jdbc:sqlserver://"

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"

# Fixed order used by translate_all() and generate_all()
ALL_DRIVERS = (
    DriverType.SQLCLIENT,
    DriverType.ODBC,
    DriverType.OLEDB,
    DriverType.JDBC,
    DriverType.PHP,
    DriverType.PYTHON,
    DriverType.RUST,
)

# Characters that force a value to be quoted or braced in flat output
SPECIAL_CHARACTERS = (";", "=", "{", "}", '"', "'")

# Boolean vocabulary shared by the mapper, the defaults index and the validator
TRUE_VALUES = ("true", "yes", "1", "on", "sspi")
FALSE_VALUES = ("false", "no", "0", "off")

# Canonical ids that only ever identify the server in flat syntax
SERVER_KEYWORDS = ("server", "datasource", "address", "addr", "networkaddress")
