"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Value escaping for each driver's connection string syntax.

- Double-quote style (SqlClient, OLEDB, PHP, Python): "va""lue"
- Brace style (ODBC, JDBC): {va}}lue}, both braces doubled inside
- Rust string style: "va\\"lue", backslash escapes
"""

from typing import Union

from mssql_connstr.constants import DriverType, EscapeStyle, SPECIAL_CHARACTERS
from mssql_connstr.drivers import get_profile

_RUST_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_RUST_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t", "'": "'", "0": "\0"}


def needs_escaping(value: str) -> bool:
    """Whether a value contains a character that would break flat key=value syntax."""
    return any(char in value for char in SPECIAL_CHARACTERS)


def _style(driver_or_style: Union[DriverType, EscapeStyle, str]) -> EscapeStyle:
    if isinstance(driver_or_style, EscapeStyle):
        return driver_or_style
    return get_profile(driver_or_style).escape_style


def escape_rust_string(value: str) -> str:
    return '"' + "".join(_RUST_ESCAPES.get(char, char) for char in value) + '"'


def escape_value(value: str, driver: Union[DriverType, EscapeStyle, str]) -> str:
    """
    Protect a value for a driver's syntax.

    Values without special characters are returned unchanged.
    """
    if not needs_escaping(value):
        return value
    style = _style(driver)
    if style is EscapeStyle.BRACE:
        return "{" + value.replace("{", "{{").replace("}", "}}") + "}"
    if style is EscapeStyle.RUST_STRING:
        return escape_rust_string(value)
    return '"' + value.replace('"', '""') + '"'


def is_quoted_or_braced(value: str) -> bool:
    """Whether a value is wrapped in matching quotes or braces."""
    if len(value) < 2:
        return False
    return (value[0], value[-1]) in (('"', '"'), ("'", "'"), ("{", "}"))


def _collapse_doubled(text: str, delimiters: str) -> str:
    """Replace each doubled delimiter with a single one, scanning left to right."""
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char in delimiters and i + 1 < len(text) and text[i + 1] == char:
            i += 1
        result.append(char)
        i += 1
    return "".join(result)


def unescape_rust_string(body: str) -> str:
    """Resolve backslash escapes in the body of a Rust string literal."""
    result = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            result.append(_RUST_UNESCAPES.get(body[i + 1], body[i + 1]))
            i += 2
            continue
        result.append(char)
        i += 1
    return "".join(result)


def unescape_value(value: str, driver: Union[DriverType, EscapeStyle, str]) -> str:
    """
    Reverse escape_value(). Values that are not wrapped are returned unchanged.
    """
    if not is_quoted_or_braced(value):
        return value
    style = _style(driver)
    opener, body = value[0], value[1:-1]
    if style is EscapeStyle.RUST_STRING:
        return unescape_rust_string(body) if opener == '"' else value
    if opener == "{":
        return _collapse_doubled(body, "{}")
    return _collapse_doubled(body, opener)
