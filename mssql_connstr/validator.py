"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Connection string validation.

validate_syntax() checks raw text for balanced quotes and braces before
parsing. validate() runs semantic checks on a parsed connection string:
required keywords, conflicting settings, deprecated keywords and values
that do not fit the keyword's declared type.
"""

import re
from typing import List, Optional

from mssql_connstr.constants import (
    DriverType,
    KeywordValueType,
    ParseErrorCode,
    ParseWarningCode,
    TRUE_VALUES,
    FALSE_VALUES,
)
from mssql_connstr.models import (
    ParsedConnectionString,
    ParseError,
    ParseWarning,
    Position,
    ValidationResult,
)
from mssql_connstr.registry import KeywordRegistry, get_registry

_INTEGER = re.compile(r"^\d+$")


def validate(parsed: ParsedConnectionString, registry: Optional[KeywordRegistry] = None) -> ValidationResult:
    """
    Validate a parsed connection string.

    Parse errors and warnings are carried over. Semantic findings are added
    as warnings, so is_valid reflects parse errors only.

    Args:
        parsed: Output of the parser.
        registry: Registry to check against. Defaults to the process-wide registry.

    Returns:
        ValidationResult
    """
    registry = registry or get_registry()
    errors: List[ParseError] = list(parsed.errors)
    warnings: List[ParseWarning] = list(parsed.warnings)

    _check_required(parsed, warnings)
    _check_conflicts(parsed, warnings)
    _check_deprecated(parsed, registry, warnings)
    _check_value_types(parsed, registry, warnings)
    _check_unknown(parsed, registry, warnings)

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def _check_required(parsed: ParsedConnectionString, warnings: List[ParseWarning]) -> None:
    pairs = parsed.pairs
    has_server = "server" in pairs or "datasource" in pairs or bool(parsed.jdbc_url and parsed.jdbc_url.host)
    if not has_server:
        warnings.append(ParseWarning(
            ParseWarningCode.MISSING_REQUIRED,
            "Missing required parameter: Server/Data Source",
        ))

    if parsed.driver is DriverType.ODBC and "driver" not in pairs and "dsn" not in pairs:
        warnings.append(ParseWarning(
            ParseWarningCode.MISSING_REQUIRED,
            "ODBC connections typically require a Driver specification",
        ))
    elif parsed.driver is DriverType.OLEDB and "provider" not in pairs:
        warnings.append(ParseWarning(
            ParseWarningCode.MISSING_REQUIRED,
            "OLEDB connections require a Provider specification",
        ))

    has_sql_login = "userid" in pairs and "password" in pairs
    if "integratedsecurity" not in pairs and "authentication" not in pairs and not has_sql_login:
        warnings.append(ParseWarning(
            ParseWarningCode.MISSING_REQUIRED,
            "No authentication specified: use Integrated Security, Authentication, or User ID + Password",
        ))


def _check_conflicts(parsed: ParsedConnectionString, warnings: List[ParseWarning]) -> None:
    integrated = parsed.get_value("integratedsecurity")
    if integrated is not None and "userid" in parsed.pairs and integrated.strip().lower() in TRUE_VALUES:
        warnings.append(ParseWarning(
            ParseWarningCode.CONFLICTING_KEYWORDS,
            "User ID is ignored when Integrated Security is enabled",
            keyword="userid",
        ))

    encrypt = parsed.get_value("encrypt")
    if encrypt is not None and "trustservercertificate" in parsed.pairs and encrypt.strip().lower() in ("false", "no"):
        warnings.append(ParseWarning(
            ParseWarningCode.CONFLICTING_KEYWORDS,
            "TrustServerCertificate has no effect when Encrypt is disabled",
            keyword="trustservercertificate",
        ))


def _check_deprecated(parsed, registry: KeywordRegistry, warnings: List[ParseWarning]) -> None:
    for canonical_id, parsed_value in parsed.pairs.items():
        keyword = registry.get_keyword_by_id(canonical_id)
        if keyword is None:
            continue
        rep = keyword.representation(parsed.driver)
        if rep is not None and rep.deprecated:
            detail = rep.deprecation_message or "Consider using an alternative"
            warnings.append(ParseWarning(
                ParseWarningCode.DEPRECATED_KEYWORD,
                f"Keyword '{keyword.display_name}' is deprecated: {detail}",
                keyword=canonical_id,
                position=parsed_value.position,
            ))


def _check_value_types(parsed, registry: KeywordRegistry, warnings: List[ParseWarning]) -> None:
    for canonical_id, parsed_value in parsed.pairs.items():
        keyword = registry.get_keyword_by_id(canonical_id)
        if keyword is None:
            continue
        rep = keyword.representation(parsed.driver)
        if rep is None:
            continue

        value = parsed_value.normalized
        message = None
        if rep.value_type is KeywordValueType.BOOLEAN:
            if value.strip().lower() not in TRUE_VALUES + FALSE_VALUES:
                message = (f"Invalid boolean value '{value}' for '{keyword.display_name}'. "
                           "Expected: true/false, yes/no, 1/0")
        elif rep.value_type is KeywordValueType.INTEGER:
            if not _INTEGER.match(value):
                message = f"Invalid integer value '{value}' for '{keyword.display_name}'"
        elif rep.value_type is KeywordValueType.ENUM and rep.enum_values:
            if value.lower() not in (allowed.lower() for allowed in rep.enum_values):
                message = (f"Invalid value '{value}' for '{keyword.display_name}'. "
                           f"Expected: {', '.join(rep.enum_values)}")

        if message:
            warnings.append(ParseWarning(
                ParseWarningCode.INVALID_VALUE,
                message,
                keyword=canonical_id,
                position=parsed_value.position,
            ))


def _check_unknown(parsed, registry: KeywordRegistry, warnings: List[ParseWarning]) -> None:
    warned = {
        (warning.keyword or "").lower()
        for warning in warnings
        if warning.code is ParseWarningCode.UNKNOWN_KEYWORD
    }
    for canonical_id, parsed_value in parsed.pairs.items():
        if canonical_id in registry or registry.is_known_keyword(canonical_id):
            continue
        original = parsed_value.original_keyword or canonical_id
        if original.lower() in warned or canonical_id in warned:
            continue
        warnings.append(ParseWarning(
            ParseWarningCode.UNKNOWN_KEYWORD,
            f"Unknown keyword: '{original}'",
            keyword=original,
            position=parsed_value.position,
        ))


def validate_syntax(connection_str: str) -> ValidationResult:
    """
    Check raw text for unmatched quotes and braces.

    A quote or brace only opens an enclosed value when it is the first
    non-space character after '=', as in the parser; O'Brien is a plain
    value. Doubled quotes and '}}' count as escapes. This runs before
    parsing and needs no driver context.
    """
    errors: List[ParseError] = []
    str_len = len(connection_str)
    in_key = True
    i = 0
    while i < str_len:
        char = connection_str[i]
        if not in_key:
            if char == ";":
                in_key = True
            i += 1
            continue
        if char != "=":
            i += 1
            continue

        in_key = False
        i += 1
        while i < str_len and connection_str[i].isspace():
            i += 1
        if i >= str_len:
            break
        if connection_str[i] in "\"'":
            end = _closing_quote(connection_str, i)
            if end < 0:
                quote_char = connection_str[i]
                kind = "double" if quote_char == '"' else "single"
                errors.append(ParseError(
                    ParseErrorCode.UNMATCHED_QUOTE,
                    f"Syntax error: Unmatched {kind} quote at position {i}",
                    position=Position(i, str_len),
                    suggestion=f"Add closing {quote_char} character",
                ))
                break
            i = end + 1
        elif connection_str[i] == "{":
            end = _closing_brace(connection_str, i)
            if end < 0:
                errors.append(ParseError(
                    ParseErrorCode.UNMATCHED_BRACE,
                    f"Syntax error: Unmatched opening brace at position {i}",
                    position=Position(i, str_len),
                    suggestion="Add closing } character",
                ))
                break
            i = end + 1

    return ValidationResult(is_valid=not errors, errors=errors)


def _closing_quote(text: str, start: int) -> int:
    """Index of the quote closing the one at start, or -1."""
    quote_char = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == quote_char:
            if i + 1 < len(text) and text[i + 1] == quote_char:
                i += 2
                continue
            return i
        i += 1
    return -1


def _closing_brace(text: str, start: int) -> int:
    """Index of the brace closing the one at start, or -1. Nested braces balance."""
    depth = 0
    i = start
    while i < len(text):
        char = text[i]
        if char == "{":
            depth += 1
        elif char == "}":
            if depth == 1 and i + 1 < len(text) and text[i + 1] == "}":
                i += 2
                continue
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1
