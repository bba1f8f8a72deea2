"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Tests for validate() and validate_syntax().
"""

import pytest

from mssql_connstr.constants import ParseErrorCode, ParseWarningCode
from mssql_connstr.validator import validate, validate_syntax


def codes(result, code):
    return [warning for warning in result.warnings if warning.code is code]


class TestRequiredKeywords:

    def test_complete_string_is_clean(self, parser):
        result = validate(parser.parse("Server=x;Database=d;Integrated Security=True"))
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_missing_server(self, parser):
        result = validate(parser.parse("Database=d;Integrated Security=True"))
        missing = codes(result, ParseWarningCode.MISSING_REQUIRED)
        assert [w.message for w in missing] == ["Missing required parameter: Server/Data Source"]
        assert result.is_valid

    def test_jdbc_host_counts_as_server(self, parser):
        result = validate(parser.parse("jdbc:sqlserver://myhost;integratedSecurity=true"))
        assert codes(result, ParseWarningCode.MISSING_REQUIRED) == []

    def test_odbc_without_driver(self, parser):
        result = validate(parser.parse("Server=x;UID=u;PWD=p", "odbc"))
        assert [w.message for w in codes(result, ParseWarningCode.MISSING_REQUIRED)] == [
            "ODBC connections typically require a Driver specification"
        ]

    def test_odbc_with_dsn(self, parser):
        result = validate(parser.parse("DSN=mydsn;Server=x;UID=u;PWD=p"))
        assert codes(result, ParseWarningCode.MISSING_REQUIRED) == []

    def test_oledb_without_provider(self, parser):
        result = validate(parser.parse("Data Source=x;Integrated Security=SSPI", "oledb"))
        assert [w.message for w in codes(result, ParseWarningCode.MISSING_REQUIRED)] == [
            "OLEDB connections require a Provider specification"
        ]

    def test_no_authentication(self, parser):
        result = validate(parser.parse("Server=x;User ID=u"))
        messages = [w.message for w in codes(result, ParseWarningCode.MISSING_REQUIRED)]
        assert messages == [
            "No authentication specified: use Integrated Security, Authentication, or User ID + Password"
        ]

    def test_authentication_keyword_is_enough(self, parser):
        result = validate(parser.parse("Server=x;Authentication=ActiveDirectoryDefault", "sqlclient"))
        assert codes(result, ParseWarningCode.MISSING_REQUIRED) == []


class TestConflicts:

    def test_integrated_security_with_user_id(self, parser):
        result = validate(parser.parse("Server=x;Integrated Security=True;User ID=sa"))
        conflicts = codes(result, ParseWarningCode.CONFLICTING_KEYWORDS)
        assert conflicts[0].message == "User ID is ignored when Integrated Security is enabled"
        assert conflicts[0].keyword == "userid"

    def test_integrated_security_false_with_user_id(self, parser):
        result = validate(parser.parse("Server=x;Integrated Security=False;User ID=sa;Password=p"))
        assert codes(result, ParseWarningCode.CONFLICTING_KEYWORDS) == []

    def test_trust_without_encryption(self, parser):
        result = validate(parser.parse(
            "Server=x;Encrypt=False;TrustServerCertificate=True;Integrated Security=True"
        ))
        conflicts = codes(result, ParseWarningCode.CONFLICTING_KEYWORDS)
        assert [w.message for w in conflicts] == ["TrustServerCertificate has no effect when Encrypt is disabled"]


class TestValues:

    def test_deprecated_keyword(self, parser):
        result = validate(parser.parse("Server=x;Asynchronous Processing=true;Integrated Security=True"))
        deprecated = codes(result, ParseWarningCode.DEPRECATED_KEYWORD)
        assert len(deprecated) == 1
        assert deprecated[0].message.startswith("Keyword 'Asynchronous Processing' is deprecated: ")

    @pytest.mark.parametrize("pair, message", [
        ("Connect Timeout=abc", "Invalid integer value 'abc' for 'Connection Timeout'"),
        ("TrustServerCertificate=maybe",
         "Invalid boolean value 'maybe' for 'Trust Server Certificate'. Expected: true/false, yes/no, 1/0"),
        ("Encrypt=sometimes",
         "Invalid value 'sometimes' for 'Encrypt'. Expected: True, False, Strict, Optional, Mandatory"),
    ])
    def test_invalid_values(self, parser, pair, message):
        result = validate(parser.parse(f"Server=x;Integrated Security=True;{pair}"))
        invalid = codes(result, ParseWarningCode.INVALID_VALUE)
        assert [w.message for w in invalid] == [message]

    def test_valid_enum_ignores_case(self, parser):
        result = validate(parser.parse("Server=x;Integrated Security=True;ApplicationIntent=readonly"))
        assert codes(result, ParseWarningCode.INVALID_VALUE) == []

    def test_unknown_keyword_reported_once(self, parser):
        result = validate(parser.parse("Server=x;Integrated Security=True;Foo=bar"))
        unknown = codes(result, ParseWarningCode.UNKNOWN_KEYWORD)
        assert len(unknown) == 1

    def test_parse_errors_make_invalid(self, parser):
        result = validate(parser.parse("Server=x;PWD={abc"))
        assert not result.is_valid
        assert result.errors[0].code is ParseErrorCode.UNMATCHED_BRACE


class TestValidateSyntax:

    def test_balanced(self):
        result = validate_syntax('Server=x;Password="a""b";PWD={a}}b}')
        assert result.is_valid
        assert result.errors == []

    def test_unmatched_double_quote(self):
        result = validate_syntax('Server=x;Password="abc')
        assert result.errors[0].code is ParseErrorCode.UNMATCHED_QUOTE
        assert result.errors[0].message == "Syntax error: Unmatched double quote at position 18"
        assert result.errors[0].suggestion == 'Add closing " character'

    def test_unmatched_single_quote(self):
        result = validate_syntax("Password='abc")
        assert result.errors[0].message == "Syntax error: Unmatched single quote at position 9"

    def test_unmatched_brace(self):
        result = validate_syntax("PWD={abc")
        assert not result.is_valid
        assert result.errors[0].code is ParseErrorCode.UNMATCHED_BRACE
        assert result.errors[0].message == "Syntax error: Unmatched opening brace at position 4"
        assert result.errors[0].suggestion == "Add closing } character"

    def test_nested_braces(self):
        assert validate_syntax("Driver={a{b}c};Server=x").is_valid
        assert not validate_syntax("Driver={a{b}c;Server=x").is_valid

    def test_quote_inside_plain_value(self):
        """Only a quote right after '=' opens a quoted value."""
        result = validate_syntax("Server=x;Database=O'Brien;")
        assert result.is_valid
        assert result.errors == []

    def test_brace_inside_plain_value(self):
        assert validate_syntax("Server=x;Database=a{b;").is_valid

    def test_quote_after_spaces(self):
        result = validate_syntax("Server=x;Password=  'abc")
        assert result.errors[0].message == "Syntax error: Unmatched single quote at position 20"

    def test_quote_in_key_is_ignored(self):
        assert validate_syntax("O'Brien=x;Server=y").is_valid

    def test_agrees_with_parser(self, parser):
        for text in ("Server=x;Database=O'Brien;", 'Server=x;Password="abc', "PWD={abc", "App=a}b"):
            assert validate_syntax(text).is_valid == (parser.parse(text).errors == [])
