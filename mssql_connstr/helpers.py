"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.
This module provides helper functions for the mssql_connstr package.
"""

import re
from typing import Any, Optional

from mssql_connstr.constants import DriverType, TRUE_VALUES, FALSE_VALUES

# Canonical true/false spelling written by each driver
BOOLEAN_SPELLINGS = {
    DriverType.SQLCLIENT: ("True", "False"),
    DriverType.ODBC: ("Yes", "No"),
    DriverType.OLEDB: ("True", "False"),
    DriverType.JDBC: ("true", "false"),
    DriverType.PHP: ("true", "false"),
    DriverType.PYTHON: ("True", "False"),
    DriverType.RUST: ("true", "false"),
}

# Spellings that count as "no value" when comparing defaults
_UNSET_TOKENS = frozenset({"undefined", "notspecified", "none", ""})
_ZERO_TOKENS = frozenset({"0", "undefined", ""})
# Opt-in settings behave the same when absent or explicitly disabled
_DISABLED_TOKENS = frozenset({"false", "no", "0", "off", "undefined", ""})
_EQUIVALENCE_CLASSES = (_UNSET_TOKENS, _ZERO_TOKENS, _DISABLED_TOKENS)

_PASSWORD_PAIR = re.compile(
    r"(\b(?:pwd|password)\s*=\s*)(\{(?:[^}]|\}\})*\}?|\"(?:[^\"]|\"\")*\"?|[^;]*)",
    re.IGNORECASE,
)
_PASSWORD_FIELD = re.compile(r"(\bpassword\s*:\s*)\"(?:[^\"\\]|\\.)*\"?", re.IGNORECASE)


def normalize_boolean(value: Any) -> Optional[bool]:
    """
    Interpret a value through the shared boolean vocabulary.

    Args:
        value: A bool, int or string (true/yes/1/on/sspi, false/no/0/off, any case).

    Returns:
        Optional[bool]: True or False, or None when the value is not boolean-like.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return None


def format_boolean_for_driver(value: bool, driver: DriverType) -> str:
    """Return the target driver's canonical spelling of a boolean."""
    true_text, false_text = BOOLEAN_SPELLINGS[driver]
    return true_text if value else false_text


def default_to_text(value: Any) -> str:
    """Lowercase text form of a registry default; an unset default reads as 'undefined'."""
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).lower()


def values_functionally_equal(left: Any, right: Any) -> bool:
    """
    Decide whether two default values behave the same even if spelled differently.

    Values are equal when identical ignoring case, when both fall in one of
    the unset/zero/disabled equivalence classes, or when both are boolean-like
    and normalize to the same boolean.
    """
    left_text = default_to_text(left)
    right_text = default_to_text(right)
    if left_text == right_text:
        return True
    for tokens in _EQUIVALENCE_CLASSES:
        if left_text in tokens and right_text in tokens:
            return True
    left_bool = normalize_boolean(left_text)
    right_bool = normalize_boolean(right_text)
    if left_bool is not None and right_bool is not None:
        return left_bool == right_bool
    return False


def fold_keyword(keyword: str) -> str:
    """Case- and whitespace-fold a keyword for lookups ('User ID' -> 'userid')."""
    return re.sub(r"\s+", "", keyword).lower()


def sanitize_connection_string(conn_str: str) -> str:
    """
    Sanitize the connection string by removing sensitive information.
    Args:
        conn_str (str): The connection string to sanitize.
    Returns:
        str: The sanitized connection string.
    """
    # PWD=...; Password="..."; password={...} and Rust `password: "..."`
    sanitized = _PASSWORD_PAIR.sub(r"\1***", conn_str)
    return _PASSWORD_FIELD.sub(r'\1"***"', sanitized)
