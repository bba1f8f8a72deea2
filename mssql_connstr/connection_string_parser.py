"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Connection string parser for every supported driver format.

Handles:
- Semicolon-separated key=value pairs (SqlClient, ODBC, OLEDB, PHP, Python)
- Quoted values: "va""lue" and 'va''lue'
- Braced values: {value}, with nesting and escaped braces }} -> }, {{ -> {
- JDBC URLs: jdbc:sqlserver://host[:port][;property=value...]
- Rust ClientContext struct literals

Parser behavior:
- Best effort: a malformed segment produces an error but every pair read
  before it (and the unterminated pair itself) is kept
- First occurrence of a keyword wins; later ones produce warnings
- Unknown keywords are kept under their folded spelling and produce warnings
- Problems are returned on the result; nothing is raised for bad input
"""

import re
from collections import namedtuple
from typing import Dict, List, Optional, Tuple

from mssql_connstr.constants import (
    DriverType,
    DetectionConfidence,
    ParseErrorCode,
    ParseWarningCode,
    MAX_CONNECTION_STRING_SIZE,
    DEFAULT_PORT,
    JDBC_URL_PREFIX,
)
from mssql_connstr.detector import detect
from mssql_connstr.drivers import get_profile
from mssql_connstr.escaping import unescape_rust_string
from mssql_connstr.helpers import fold_keyword
from mssql_connstr.logging import logger
from mssql_connstr.models import (
    JdbcUrlComponents,
    ParsedConnectionString,
    ParsedValue,
    ParseError,
    ParseWarning,
    Position,
)
from mssql_connstr.registry import KeywordRegistry, get_registry

# One key=value occurrence before keyword resolution
_RawPair = namedtuple("_RawPair", "key raw normalized was_quoted position")

_JDBC_URL = re.compile(r"^jdbc:sqlserver://([^:;]+)(?::(\d+))?(?:;(.*))?$", re.IGNORECASE | re.DOTALL)

_RUST_ROOT = re.compile(r"\bClientContext\s*\{")
_RUST_FIELD_LINE = re.compile(r"^\s*[A-Za-z_]\w*\s*:(?!:)", re.MULTILINE)
_RUST_FIELD = re.compile(r"([A-Za-z_]\w*)\s*:(?!:)\s*")
_RUST_STRUCT_OPEN = re.compile(r"[A-Za-z_][\w:]*\s*\{")
_RUST_STRING = re.compile(
    r'String::from\(\s*"((?:[^"\\]|\\.)*)"\s*\)'
    r'|"((?:[^"\\]|\\.)*)"(?:\s*\.\s*(?:to_string|to_owned|into)\(\s*\))?',
    re.DOTALL,
)
_RUST_ENCRYPTION = re.compile(r"EncryptionSetting::(\w+)")
_RUST_SCALAR = re.compile(r"[^,}\s]+")
_RUST_SPREAD = re.compile(r"\.\.\s*Default::default\(\s*\)")
_RUST_COMMENT = re.compile(r"//[^\n]*")

# EncryptionSetting variants read back as connection string values
_RUST_ENCRYPTION_VALUES = {"on": "true", "off": "false", "required": "strict", "notsupported": "false"}


def _looks_like_rust_struct(text: str) -> bool:
    return bool(_RUST_ROOT.search(text) or _RUST_FIELD_LINE.search(text))


class ConnectionStringParser:
    """
    Parser for SQL Server connection strings in all seven driver formats.

    Implements a left-to-right scan with explicit value states (plain,
    quoted, braced). Keys are resolved to canonical keyword ids through the
    registry, using the detected (or supplied) driver first.

    Args:
        registry: KeywordRegistry used for keyword resolution. Defaults to the
            process-wide registry.
    """

    def __init__(self, registry: Optional[KeywordRegistry] = None):
        self._registry = registry or get_registry()

    def parse(self, connection_str: str, source_driver=None) -> ParsedConnectionString:
        """
        Parse a connection string.

        Args:
            connection_str: Raw user input in any supported format.
            source_driver: Optional DriverType (or tag). When given, detection is
                skipped and the result confidence is 'manual'.

        Returns:
            ParsedConnectionString with pairs keyed by canonical id, plus any
            errors and warnings.

        Examples:
            >>> parser = ConnectionStringParser()
            >>> parser.parse("Server=localhost;Database=mydb").get_value("server")
            'localhost'

            >>> parser.parse("Driver={ODBC Driver 18 for SQL Server};PWD={p}}w{{d}").get_value("password")
            'p}w{d'
        """
        errors: List[ParseError] = []
        warnings: List[ParseWarning] = []

        if len(connection_str.encode("utf-8")) > MAX_CONNECTION_STRING_SIZE:
            errors.append(ParseError(
                ParseErrorCode.INPUT_TOO_LARGE,
                f"Connection string exceeds maximum size of {MAX_CONNECTION_STRING_SIZE // 1024}KB",
                suggestion="Reduce the connection string length",
            ))
            return self._empty_result(connection_str, errors)

        trimmed = connection_str.strip()
        if not trimmed:
            errors.append(ParseError(
                ParseErrorCode.EMPTY_INPUT,
                "Connection string is empty",
                suggestion="Provide a valid connection string",
            ))
            return self._empty_result(connection_str, errors)

        if source_driver is not None:
            driver = DriverType.coerce(source_driver)
            confidence = DetectionConfidence.MANUAL
        else:
            detection = detect(trimmed)
            driver, confidence = detection.driver, detection.confidence
            logger.debug("Detected %s format (%s: %s)", driver.value, confidence.value,
                         detection.matched_pattern)

        # Offsets are reported against the original input
        offset = len(connection_str) - len(connection_str.lstrip())
        pairs: Dict[str, ParsedValue] = {}
        jdbc_url = None

        if driver is DriverType.RUST and _looks_like_rust_struct(trimmed):
            raw_pairs = self._read_rust_struct(trimmed, offset)
        else:
            body, body_offset = trimmed, offset
            prefix = get_profile(driver).prefix
            if prefix and trimmed[:len(prefix)].lower() == prefix.lower():
                # sqlsrv: DSN prefix written by the PHP generator
                body, body_offset = trimmed[len(prefix):], offset + len(prefix)
            if driver is DriverType.JDBC and trimmed.lower().startswith(JDBC_URL_PREFIX):
                jdbc_url, body, tail_start, error = self._parse_jdbc_url(trimmed)
                body_offset = offset + tail_start
                if error is not None:
                    errors.append(error)
                if jdbc_url.host:
                    pairs["server"] = self._jdbc_server_value(jdbc_url, offset)
            raw_pairs, scan_errors = self._tokenize(body, body_offset)
            errors.extend(scan_errors)
            if jdbc_url is not None:
                for raw_pair in raw_pairs:
                    jdbc_url.properties.setdefault(raw_pair.key, raw_pair.normalized)

        for raw_pair in raw_pairs:
            canonical_id = self._registry.resolve_keyword(raw_pair.key, driver) or fold_keyword(raw_pair.key)

            if canonical_id in pairs:
                warnings.append(ParseWarning(
                    ParseWarningCode.DUPLICATE_KEYWORD,
                    f"Duplicate keyword '{raw_pair.key}' ignored (first occurrence used)",
                    keyword=raw_pair.key,
                    position=raw_pair.position,
                ))
                continue

            if not self._registry.is_known_keyword(raw_pair.key, driver):
                warnings.append(ParseWarning(
                    ParseWarningCode.UNKNOWN_KEYWORD,
                    f"Unknown keyword '{raw_pair.key}' - may not translate correctly",
                    keyword=raw_pair.key,
                    position=raw_pair.position,
                ))

            pairs[canonical_id] = ParsedValue(
                raw=raw_pair.raw,
                normalized=raw_pair.normalized,
                position=raw_pair.position,
                was_quoted=raw_pair.was_quoted,
                original_keyword=raw_pair.key,
            )

        logger.debug("Parsed %d keyword(s) with %d error(s) and %d warning(s)",
                     len(pairs), len(errors), len(warnings))

        return ParsedConnectionString(
            driver=driver,
            confidence=confidence,
            pairs=pairs,
            original_input=connection_str,
            errors=errors,
            warnings=warnings,
            jdbc_url=jdbc_url,
        )

    @staticmethod
    def _empty_result(connection_str: str, errors: List[ParseError]) -> ParsedConnectionString:
        return ParsedConnectionString(
            driver=DriverType.SQLCLIENT,
            confidence=DetectionConfidence.LOW,
            pairs={},
            original_input=connection_str,
            errors=errors,
        )

    # ------------------------------------------------------------------ JDBC

    @staticmethod
    def _parse_jdbc_url(text: str) -> Tuple[JdbcUrlComponents, str, int, Optional[ParseError]]:
        """
        Split a JDBC URL into its host/port and the property tail.

        Returns:
            (components, property_text, property_offset, error). On a malformed
            URL the whole input is returned as the property text so parsing can
            continue best-effort.
        """
        match = _JDBC_URL.match(text)
        if match is None:
            error = ParseError(
                ParseErrorCode.INVALID_SYNTAX,
                "Invalid JDBC URL format",
                suggestion="Use format: jdbc:sqlserver://host:port;property=value;...",
            )
            return JdbcUrlComponents(host=""), text, 0, error

        host = match.group(1).strip()
        port = int(match.group(2)) if match.group(2) else DEFAULT_PORT
        if match.group(3) is None:
            return JdbcUrlComponents(host=host, port=port), "", len(text), None
        return JdbcUrlComponents(host=host, port=port), match.group(3), match.start(3), None

    @staticmethod
    def _jdbc_server_value(jdbc_url: JdbcUrlComponents, offset: int) -> ParsedValue:
        server = jdbc_url.host if jdbc_url.port == DEFAULT_PORT else f"{jdbc_url.host},{jdbc_url.port}"
        start = offset + len(JDBC_URL_PREFIX)
        return ParsedValue(
            raw=server,
            normalized=server,
            position=Position(start, start + len(server)),
            was_quoted=False,
            original_keyword="server",
        )

    # ------------------------------------------------------------------ key=value scan

    def _tokenize(self, text: str, offset: int = 0) -> Tuple[List[_RawPair], List[ParseError]]:
        """
        Split key=value text into raw pairs.

        Segments without '=' and segments with an empty key are skipped
        silently. An unterminated quote or brace ends the scan.
        """
        pairs: List[_RawPair] = []
        errors: List[ParseError] = []
        current_pos = 0
        str_len = len(text)

        while current_pos < str_len:
            # Skip leading whitespace and semicolons
            while current_pos < str_len and (text[current_pos] == ";" or text[current_pos].isspace()):
                current_pos += 1
            if current_pos >= str_len:
                break

            key_start = current_pos
            while current_pos < str_len and text[current_pos] not in "=;":
                current_pos += 1

            if current_pos >= str_len or text[current_pos] != "=":
                continue

            key = text[key_start:current_pos].strip()
            current_pos += 1

            (raw, normalized, was_quoted), current_pos, error = self._parse_value(text, current_pos, offset)
            if key:
                pairs.append(_RawPair(key, raw, normalized, was_quoted,
                                      Position(offset + key_start, offset + current_pos)))
            if error is not None:
                errors.append(error)

        return pairs, errors

    def _parse_value(self, text: str, start_pos: int, offset: int):
        """
        Parse a value starting right after '='.

        Returns:
            ((raw, normalized, was_quoted), new_position, error_or_None)
        """
        str_len = len(text)
        value_start = start_pos

        while start_pos < str_len and text[start_pos] in " \t":
            start_pos += 1

        if start_pos >= str_len:
            return ("", "", False), start_pos, None

        char = text[start_pos]
        if char in "\"'":
            return self._parse_quoted_value(text, start_pos, value_start, offset)
        if char == "{":
            return self._parse_braced_value(text, start_pos, value_start, offset)
        return self._parse_simple_value(text, start_pos)

    @staticmethod
    def _parse_simple_value(text: str, start_pos: int):
        end = text.find(";", start_pos)
        if end == -1:
            end = len(text)
        value = text[start_pos:end].strip()
        return (value, value, False), end, None

    @staticmethod
    def _finish_enclosed(text, open_pos, close_pos, content):
        """Attach any text between the closing delimiter and the next ';'."""
        end = text.find(";", close_pos)
        if end == -1:
            end = len(text)
        trailing = text[close_pos:end].rstrip()
        raw = text[open_pos:close_pos] + trailing
        return (raw, "".join(content) + trailing, True), end, None

    def _parse_quoted_value(self, text: str, start_pos: int, value_start: int, offset: int):
        """
        Parse a quoted value. A doubled quote character is a literal quote.

        Example: "it""s" -> it"s
        """
        quote = text[start_pos]
        str_len = len(text)
        pos = start_pos + 1
        content = []

        while pos < str_len:
            ch = text[pos]
            if ch == quote:
                if pos + 1 < str_len and text[pos + 1] == quote:
                    content.append(quote)
                    pos += 2
                    continue
                return self._finish_enclosed(text, start_pos, pos + 1, content)
            content.append(ch)
            pos += 1

        error = ParseError(
            ParseErrorCode.UNMATCHED_QUOTE,
            f"Unclosed quote starting at position {offset + value_start}",
            position=Position(offset + value_start, offset + str_len),
            suggestion=f"Add closing {quote} character",
        )
        return (text[start_pos:], "".join(content), True), str_len, error

    def _parse_braced_value(self, text: str, start_pos: int, value_start: int, offset: int):
        """
        Parse a braced value.

        - '}}' is a literal '}' and '{{' is a literal '{'
        - A single '{' opens a nested level and is kept in the value
        - A single '}' closes one level; closing the outermost level ends the value
        - Semicolons and quotes inside braces are literal
        """
        str_len = len(text)
        pos = start_pos + 1
        depth = 1
        content = []

        while pos < str_len:
            ch = text[pos]
            if ch in "{}" and pos + 1 < str_len and text[pos + 1] == ch:
                content.append(ch)
                pos += 2
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return self._finish_enclosed(text, start_pos, pos + 1, content)
            content.append(ch)
            pos += 1

        error = ParseError(
            ParseErrorCode.UNMATCHED_BRACE,
            f"Unclosed brace starting at position {offset + value_start}",
            position=Position(offset + value_start, offset + str_len),
            suggestion="Add closing } character",
        )
        return (text[start_pos:], "".join(content), True), str_len, error

    # ------------------------------------------------------------------ Rust struct literal

    def _read_rust_struct(self, text: str, offset: int = 0) -> List[_RawPair]:
        """
        Read fields from a ClientContext struct literal.

        Nested blocks are flattened into dotted paths, so
        `encryption_options: EncryptionOptions { mode: EncryptionSetting::On }`
        yields ('encryption_options.mode', 'true').
        """
        pairs: List[_RawPair] = []
        path: List[str] = []
        root = _RUST_ROOT.search(text)
        pos = root.end() if root else 0
        str_len = len(text)

        while pos < str_len:
            ch = text[pos]
            if ch.isspace() or ch == ",":
                pos += 1
                continue
            if ch == "}":
                if path:
                    path.pop()
                pos += 1
                continue

            skipped = _RUST_SPREAD.match(text, pos) or _RUST_COMMENT.match(text, pos)
            if skipped:
                pos = skipped.end()
                continue

            field = _RUST_FIELD.match(text, pos)
            if field is None:
                pos += 1
                continue

            field_start = pos
            pos = field.end()
            nested = _RUST_STRUCT_OPEN.match(text, pos)
            if nested:
                path.append(field.group(1))
                pos = nested.end()
                continue

            (raw, normalized, was_quoted), pos = self._read_rust_value(text, pos)
            pairs.append(_RawPair(
                ".".join(path + [field.group(1)]),
                raw,
                normalized,
                was_quoted,
                Position(offset + field_start, offset + pos),
            ))

        return pairs

    @staticmethod
    def _read_rust_value(text: str, pos: int):
        string = _RUST_STRING.match(text, pos)
        if string:
            body = string.group(1) if string.group(1) is not None else string.group(2)
            return (string.group(0), unescape_rust_string(body), True), string.end()

        encryption = _RUST_ENCRYPTION.match(text, pos)
        if encryption:
            variant = encryption.group(1)
            value = _RUST_ENCRYPTION_VALUES.get(variant.lower(), variant.lower())
            return (encryption.group(0), value, False), encryption.end()

        scalar = _RUST_SCALAR.match(text, pos)
        if scalar:
            return (scalar.group(0), scalar.group(0), False), scalar.end()
        return ("", "", False), pos


_default_parser: Optional[ConnectionStringParser] = None


def parse(connection_str: str, source_driver=None) -> ParsedConnectionString:
    """
    Parse a connection string with the default registry.

    See ConnectionStringParser.parse().
    """
    global _default_parser
    if _default_parser is None:
        _default_parser = ConnectionStringParser()
    return _default_parser.parse(connection_str, source_driver)
