"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.
This module initializes the mssql_connstr package.
"""

__version__ = "0.1.0"

# Exceptions
from .exceptions import (
    TranslatorError,
    UnsupportedDriverError,
    InvalidOptionError,
    ConnectionStringParseError,
)

# Enumerations and limits
from .constants import (
    ALL_DRIVERS,
    DetectionConfidence,
    DriverType,
    KeywordCategory,
    KeywordOrder,
    KeywordValueType,
    MAX_CONNECTION_STRING_SIZE,
    OutputFormatting,
    ParseErrorCode,
    ParseWarningCode,
    TranslationErrorCode,
    TranslationWarningCode,
    UntranslatableReason,
)

# Records
from .models import (
    DetectionResult,
    DriverKeyword,
    JdbcUrlComponents,
    Keyword,
    MappingResult,
    ParsedConnectionString,
    ParsedValue,
    ParseError,
    ParseWarning,
    Position,
    TranslatedKeyword,
    TranslationError,
    TranslationOptions,
    TranslationResult,
    TranslationWarning,
    UntranslatableKeyword,
    ValidationResult,
)

# Pipeline
from .registry import KeywordRegistry, get_registry
from .detector import detect
from .connection_string_parser import ConnectionStringParser, parse
from .mapper import KeywordMapper, map_keywords
from .connection_string_builder import generate, generate_all, generate_formatted
from .validator import validate, validate_syntax
from .translator import Translator, translate, translate_all

# Collaborators
from .history import HistoryEntry, RecentHistory
from .logging import setup_logging, logger
