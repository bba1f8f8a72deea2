"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Tests for per-driver value escaping.
"""

import pytest

from mssql_connstr.constants import ALL_DRIVERS, DriverType, EscapeStyle
from mssql_connstr.escaping import (
    escape_value,
    is_quoted_or_braced,
    needs_escaping,
    unescape_value,
)

ALL_SPECIALS = "a;b=c{d}e\"f'g"


class TestEscapeValue:

    def test_plain_values_unchanged(self):
        for driver in ALL_DRIVERS:
            assert escape_value("localhost", driver) == "localhost"

    @pytest.mark.parametrize("value, expected", [
        ("a;b", '"a;b"'),
        ('a"b', '"a""b"'),
        ("a'b", "\"a'b\""),
        ("a{b}", '"a{b}"'),
    ])
    def test_double_quote_style(self, value, expected):
        assert escape_value(value, DriverType.SQLCLIENT) == expected
        assert escape_value(value, "oledb") == expected
        assert escape_value(value, DriverType.PHP) == expected
        assert escape_value(value, DriverType.PYTHON) == expected

    @pytest.mark.parametrize("value, expected", [
        ("a;b", "{a;b}"),
        ("a}b", "{a}}b}"),
        ("a{b", "{a{{b}"),
        ('a"b', '{a"b}'),
    ])
    def test_brace_style(self, value, expected):
        assert escape_value(value, DriverType.ODBC) == expected
        assert escape_value(value, DriverType.JDBC) == expected
        assert escape_value(value, EscapeStyle.BRACE) == expected

    def test_rust_style(self):
        assert escape_value('a"b;c', DriverType.RUST) == '"a\\"b;c"'
        assert escape_value("a\\b;", DriverType.RUST) == '"a\\\\b;"'

    def test_needs_escaping(self):
        assert not needs_escaping("ODBC Driver 18 for SQL Server")
        for char in ";={}\"'":
            assert needs_escaping(f"x{char}y")


class TestRoundTrip:

    @pytest.mark.parametrize("driver", ALL_DRIVERS)
    def test_all_specials_round_trip(self, driver):
        """Escaping then unescaping under one driver returns the original value."""
        escaped = escape_value(ALL_SPECIALS, driver)
        assert escaped != ALL_SPECIALS
        assert unescape_value(escaped, driver) == ALL_SPECIALS

    @pytest.mark.parametrize("driver", ALL_DRIVERS)
    def test_doubled_delimiters_round_trip(self, driver):
        value = "}}{{\"\"''"
        assert unescape_value(escape_value(value, driver), driver) == value

    def test_unescape_plain_value(self):
        assert unescape_value("localhost", DriverType.ODBC) == "localhost"

    def test_unescape_single_quoted(self):
        assert unescape_value("'it''s'", DriverType.SQLCLIENT) == "it's"

    def test_is_quoted_or_braced(self):
        assert is_quoted_or_braced('"x"')
        assert is_quoted_or_braced("{x}")
        assert is_quoted_or_braced("'x'")
        assert not is_quoted_or_braced('"x')
        assert not is_quoted_or_braced('"')
