"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Unit tests for ConnectionStringParser.
"""

import pytest

from mssql_connstr.connection_string_parser import ConnectionStringParser, parse
from mssql_connstr.constants import (
    DetectionConfidence,
    DriverType,
    MAX_CONNECTION_STRING_SIZE,
    ParseErrorCode,
    ParseWarningCode,
)
from mssql_connstr.exceptions import ConnectionStringParseError, UnsupportedDriverError

from conftest import MALFORMED_QUOTE


def values(parsed):
    return {key: value.normalized for key, value in parsed.pairs.items()}


class TestSimpleValues:
    """Unit tests for plain key=value input."""

    def test_parse_simple_params(self, parser):
        """Test parsing simple key=value pairs."""
        result = parser.parse("Server=localhost;Database=mydb")
        assert values(result) == {"server": "localhost", "database": "mydb"}
        assert result.errors == []
        assert result.warnings == []

    def test_keys_resolve_to_canonical_ids(self, parser):
        """Test synonyms are stored under the canonical id."""
        result = parser.parse("Data Source=x;Initial Catalog=db;User ID=u;Password=p")
        assert list(result.pairs) == ["server", "database", "userid", "password"]
        assert result.pairs["userid"].original_keyword == "User ID"

    def test_whitespace_around_keys_and_values(self, parser):
        """Test surrounding whitespace is trimmed."""
        result = parser.parse("  Server =  localhost ; Database= mydb  ")
        assert values(result) == {"server": "localhost", "database": "mydb"}

    def test_multiple_semicolons(self, parser):
        """Test parsing with consecutive and trailing semicolons."""
        result = parser.parse(";;Server=localhost;;Database=mydb;;")
        assert values(result) == {"server": "localhost", "database": "mydb"}

    def test_segment_without_equals_is_skipped(self, parser):
        """Test a segment with no '=' produces no pair and no diagnostic."""
        result = parser.parse("Server=x;garbage;Database=d")
        assert values(result) == {"server": "x", "database": "d"}
        assert result.errors == []
        assert result.warnings == []

    def test_empty_key_is_skipped(self, parser):
        """Test '=value' produces no pair and no diagnostic."""
        result = parser.parse("Server=x;=orphan;Database=d")
        assert values(result) == {"server": "x", "database": "d"}
        assert result.errors == []

    def test_empty_value(self, parser):
        """Test an empty value is kept as an empty string."""
        result = parser.parse("Server=x;Database=")
        assert result.get_value("database") == ""

    def test_value_may_contain_equals(self, parser):
        """Test only the first '=' separates key and value."""
        result = parser.parse("Server=x;Application Name=a=b")
        assert result.get_value("applicationname") == "a=b"

    def test_positions(self, parser):
        """Test positions refer to the original input."""
        result = parser.parse("  Server=x;Database=d")
        assert result.pairs["server"].position.start == 2
        assert result.pairs["database"].position.start == 11


class TestQuotedValues:
    """Unit tests for quoted values."""

    def test_double_quoted(self, parser):
        result = parser.parse('Server=x;Password="p;w=d"')
        assert result.get_value("password") == "p;w=d"
        assert result.pairs["password"].was_quoted is True
        assert result.pairs["password"].raw == '"p;w=d"'

    def test_doubled_double_quote(self, parser):
        result = parser.parse('Server=x;Password="it""s"')
        assert result.get_value("password") == 'it"s'

    def test_single_quoted(self, parser):
        result = parser.parse("Server=x;Password='it''s;here'")
        assert result.get_value("password") == "it's;here"

    def test_quote_only_special_at_value_start(self, parser):
        """Test a quote in the middle of a value is literal."""
        result = parser.parse("Server=x;Application Name=O'Brien;Database=d")
        assert result.get_value("applicationname") == "O'Brien"
        assert result.get_value("database") == "d"

    def test_text_after_closing_quote(self, parser):
        """Test text between a closing quote and ';' is attached to the value."""
        result = parser.parse('Server=x;Application Name="abc" def;Database=d')
        assert result.get_value("applicationname") == "abc def"
        assert result.get_value("database") == "d"

    def test_unclosed_quote_is_best_effort(self, parser):
        """Test an unclosed quote keeps earlier pairs and reports an error."""
        result = parser.parse(MALFORMED_QUOTE)
        assert result.get_value("server") == "localhost"
        assert [error.code for error in result.errors] == [ParseErrorCode.UNMATCHED_QUOTE]
        assert result.errors[0].message == "Unclosed quote starting at position 26"
        assert result.errors[0].suggestion == 'Add closing " character'
        assert result.get_value("password") == "unclosed;Database=mydb;"
        assert "database" not in result.pairs


class TestBracedValues:
    """Unit tests for braced values."""

    def test_braced_value_with_semicolon(self, parser):
        result = parser.parse("Server={;local;host};Database=mydb")
        assert values(result) == {"server": ";local;host", "database": "mydb"}

    def test_escaped_braces(self, parser):
        """Test '}}' and '{{' inside braces are literal braces."""
        result = parser.parse("Driver={ODBC Driver 18 for SQL Server};PWD={p}}w{{d}")
        assert result.get_value("password") == "p}w{d"

    def test_nested_braces(self, parser):
        """Test a single '{' opens a nested level that is kept in the value."""
        result = parser.parse("Server=x;Application Name={a{b}c};Database=d")
        assert result.get_value("applicationname") == "a{b}c"
        assert result.get_value("database") == "d"

    def test_quotes_inside_braces_are_literal(self, parser):
        result = parser.parse("Server=x;PWD={it's \"quoted\"}")
        assert result.get_value("password") == "it's \"quoted\""

    def test_brace_only_special_at_value_start(self, parser):
        result = parser.parse("Server=x;Application Name=a{b;Database=d")
        assert result.get_value("applicationname") == "a{b"
        assert result.errors == []

    def test_unclosed_brace(self, parser):
        result = parser.parse("Server=x;PWD={abc")
        assert result.get_value("server") == "x"
        assert [error.code for error in result.errors] == [ParseErrorCode.UNMATCHED_BRACE]
        assert result.errors[0].message == "Unclosed brace starting at position 13"
        assert result.errors[0].suggestion == "Add closing } character"


class TestDiagnostics:
    """Duplicates, unknown keywords and input guards."""

    def test_duplicate_first_wins(self, parser):
        result = parser.parse("Server=first;Server=second;Database=d")
        assert result.get_value("server") == "first"
        duplicates = [w for w in result.warnings if w.code is ParseWarningCode.DUPLICATE_KEYWORD]
        assert len(duplicates) == 1
        assert duplicates[0].message == "Duplicate keyword 'Server' ignored (first occurrence used)"
        assert duplicates[0].position.start == 13

    def test_duplicate_through_synonym(self, parser):
        result = parser.parse("Server=first;Data Source=second")
        assert result.get_value("server") == "first"
        assert result.warnings[0].keyword == "Data Source"

    def test_unknown_keyword_kept(self, parser):
        result = parser.parse("Server=x;Foo Bar=baz")
        assert result.get_value("foobar") == "baz"
        assert result.pairs["foobar"].original_keyword == "Foo Bar"
        assert result.warnings[0].code is ParseWarningCode.UNKNOWN_KEYWORD
        assert result.warnings[0].message == "Unknown keyword 'Foo Bar' - may not translate correctly"

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_empty_input(self, parser, text):
        result = parser.parse(text)
        assert result.pairs == {}
        assert result.errors[0].code is ParseErrorCode.EMPTY_INPUT

    def test_size_boundary(self, parser):
        """Test exactly 32 KiB parses and one byte more is rejected."""
        at_limit = "Server=" + "a" * (MAX_CONNECTION_STRING_SIZE - len("Server="))
        result = parser.parse(at_limit)
        assert result.errors == []
        assert len(result.get_value("server")) == MAX_CONNECTION_STRING_SIZE - 7

        too_large = at_limit + "a"
        result = parser.parse(too_large)
        assert [error.code for error in result.errors] == [ParseErrorCode.INPUT_TOO_LARGE]
        assert result.errors[0].message == "Connection string exceeds maximum size of 32KB"
        assert result.pairs == {}

    def test_size_is_measured_in_bytes(self, parser):
        text = "Server=" + "é" * (MAX_CONNECTION_STRING_SIZE // 2)
        assert parser.parse(text).errors[0].code is ParseErrorCode.INPUT_TOO_LARGE

    def test_raise_for_errors(self, parser):
        result = parser.parse("Server=x;PWD={a;Password=\"b")
        with pytest.raises(ConnectionStringParseError) as exc_info:
            result.raise_for_errors()
        assert len(exc_info.value.errors) == 1
        assert parser.parse("Server=x").raise_for_errors().get_value("server") == "x"


class TestSourceDriver:

    def test_detected_driver(self, parser):
        result = parser.parse("Driver={ODBC Driver 18 for SQL Server};Server=x")
        assert result.driver is DriverType.ODBC
        assert result.confidence is DetectionConfidence.HIGH

    def test_explicit_source_driver(self, parser):
        result = parser.parse("Server=x;UID=u", "php")
        assert result.driver is DriverType.PHP
        assert result.confidence is DetectionConfidence.MANUAL
        assert result.get_value("userid") == "u"

    def test_php_dsn_prefix(self, parser):
        """The sqlsrv: prefix is not part of the first key."""
        result = parser.parse("sqlsrv:Server=x;Database=d;")
        assert result.driver is DriverType.PHP
        assert list(result.pairs) == ["server", "database"]
        assert result.get_value("server") == "x"
        assert result.warnings == []
        assert result.pairs["server"].position.start == 7
        assert result.pairs["database"].position.start == 16

    def test_php_dsn_prefix_any_case(self, parser):
        result = parser.parse("SQLSRV:Server=x", DriverType.PHP)
        assert result.get_value("server") == "x"

    def test_invalid_source_driver(self, parser):
        with pytest.raises(UnsupportedDriverError):
            parser.parse("Server=x", "mysql")

    def test_module_parse(self):
        assert parse("Server=x").get_value("server") == "x"


class TestJdbcUrl:
    """Unit tests for JDBC URL input."""

    def test_host_port_and_properties(self, parser):
        result = parser.parse("jdbc:sqlserver://myhost:1444;databaseName=mydb;user=sa;password=secret")
        assert result.driver is DriverType.JDBC
        assert values(result) == {
            "server": "myhost,1444",
            "database": "mydb",
            "userid": "sa",
            "password": "secret",
        }
        assert result.jdbc_url.host == "myhost"
        assert result.jdbc_url.port == 1444
        assert result.jdbc_url.instance_name is None
        assert result.jdbc_url.properties == {"databaseName": "mydb", "user": "sa", "password": "secret"}

    def test_default_port_is_not_added_to_server(self, parser):
        result = parser.parse("jdbc:sqlserver://myhost:1433;databaseName=mydb;")
        assert result.get_value("server") == "myhost"
        assert result.jdbc_url.port == 1433

    def test_url_without_properties(self, parser):
        result = parser.parse("jdbc:sqlserver://myhost")
        assert values(result) == {"server": "myhost"}
        assert result.jdbc_url.properties == {}
        assert result.errors == []

    def test_braced_property(self, parser):
        result = parser.parse("jdbc:sqlserver://myhost;password={a;b}}c};user=sa")
        assert result.get_value("password") == "a;b}c"
        assert result.get_value("userid") == "sa"

    def test_server_position(self, parser):
        result = parser.parse("jdbc:sqlserver://myhost;user=sa")
        assert result.pairs["server"].position.start == 17

    def test_invalid_url(self, parser):
        result = parser.parse("jdbc:sqlserver://")
        assert result.errors[0].code is ParseErrorCode.INVALID_SYNTAX
        assert result.errors[0].message == "Invalid JDBC URL format"


RUST_LITERAL = """ClientContext {
    transport_context: TransportContext::Tcp {
        host: "myhost".to_string(),
        port: 1444,
    },
    database: String::from("my\\"db"),
    auth: AuthContext {
        user: "sa".into(),
    },
    encryption_options: EncryptionOptions {
        mode: EncryptionSetting::Required,
        trust_server_certificate: true,
    },
    // application_name is not set
    ..Default::default()
}"""


class TestRustStruct:
    """Unit tests for Rust ClientContext literals."""

    def test_struct_fields(self, parser):
        result = parser.parse(RUST_LITERAL)
        assert result.driver is DriverType.RUST
        assert values(result) == {
            "server": "myhost",
            "port": "1444",
            "database": 'my"db',
            "userid": "sa",
            "encrypt": "strict",
            "trustservercertificate": "true",
        }
        assert result.errors == []
        assert result.warnings == []

    def test_nested_paths_recorded(self, parser):
        result = parser.parse(RUST_LITERAL)
        assert result.pairs["encrypt"].original_keyword == "encryption_options.mode"
        assert result.pairs["server"].was_quoted is True
        assert result.pairs["port"].was_quoted is False

    @pytest.mark.parametrize("variant, expected", [("On", "true"), ("Off", "false"), ("NotSupported", "false")])
    def test_encryption_variants(self, parser, variant, expected):
        text = (
            "ClientContext { encryption_options: EncryptionOptions { "
            f"mode: EncryptionSetting::{variant} }} }}"
        )
        assert parser.parse(text).get_value("encrypt") == expected

    def test_unknown_field(self, parser):
        result = parser.parse("ClientContext { packet_size: 4096, ..Default::default() }")
        assert result.get_value("packet_size") == "4096"
        assert result.warnings[0].code is ParseWarningCode.UNKNOWN_KEYWORD
