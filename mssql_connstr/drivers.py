"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Per-driver behaviour profiles.

Every table keyed by DriverType lives here or in helpers.BOOLEAN_SPELLINGS
and must cover all seven drivers; _check_profiles() enforces that at import.
"""

from dataclasses import dataclass
from typing import Dict

from mssql_connstr.constants import DriverType, EscapeStyle, RenderStrategy
from mssql_connstr.helpers import BOOLEAN_SPELLINGS, fold_keyword


@dataclass(frozen=True)
class DriverProfile:
    """
    Static description of how one driver writes connection strings.

    Attributes:
        driver (DriverType): The driver this profile describes.
        display_name (str): Human readable name.
        escape_style (EscapeStyle): How values containing special characters are protected.
        render_strategy (RenderStrategy): Output shape used by the generator.
        true_spelling (str): Canonical boolean true.
        false_spelling (str): Canonical boolean false.
        prefix (str): Text written before the first key=value pair.
    """
    driver: DriverType
    display_name: str
    escape_style: EscapeStyle
    render_strategy: RenderStrategy
    true_spelling: str
    false_spelling: str
    prefix: str = ""


def _profile(driver, display_name, escape_style, render_strategy, prefix=""):
    true_spelling, false_spelling = BOOLEAN_SPELLINGS[driver]
    return DriverProfile(
        driver=driver,
        display_name=display_name,
        escape_style=escape_style,
        render_strategy=render_strategy,
        true_spelling=true_spelling,
        false_spelling=false_spelling,
        prefix=prefix,
    )


DRIVER_PROFILES: Dict[DriverType, DriverProfile] = {
    DriverType.SQLCLIENT: _profile(
        DriverType.SQLCLIENT, "SqlClient (.NET)", EscapeStyle.DOUBLE_QUOTE, RenderStrategy.FLAT
    ),
    DriverType.ODBC: _profile(DriverType.ODBC, "ODBC", EscapeStyle.BRACE, RenderStrategy.FLAT),
    DriverType.OLEDB: _profile(DriverType.OLEDB, "OLEDB", EscapeStyle.DOUBLE_QUOTE, RenderStrategy.FLAT),
    DriverType.JDBC: _profile(DriverType.JDBC, "JDBC", EscapeStyle.BRACE, RenderStrategy.JDBC_URL),
    DriverType.PHP: _profile(
        DriverType.PHP, "PHP (sqlsrv)", EscapeStyle.DOUBLE_QUOTE, RenderStrategy.FLAT, prefix="sqlsrv:"
    ),
    DriverType.PYTHON: _profile(
        DriverType.PYTHON, "Python (mssql-python)", EscapeStyle.DOUBLE_QUOTE, RenderStrategy.FLAT
    ),
    DriverType.RUST: _profile(
        DriverType.RUST, "Rust (mssql-tds)", EscapeStyle.RUST_STRING, RenderStrategy.RUST_STRUCT
    ),
}


def get_profile(driver) -> DriverProfile:
    """Return the profile for a DriverType or driver tag."""
    return DRIVER_PROFILES[DriverType.coerce(driver)]


# Canonical ids rejected by the mssql-python connection string allow-list.
# The driver only forwards a curated subset of ODBC keywords; pooling,
# MARS, mirroring and SqlClient-only behaviour switches are not among them.
PYTHON_BLOCKED_KEYWORDS = frozenset({
    "attachdbfilename",
    "connectionlifetime",
    "enlist",
    "failoverpartner",
    "language",
    "mars",
    "maxpoolsize",
    "minpoolsize",
    "multisubnetfailover",
    "packetsize",
    "persistsecurityinfo",
    "pooling",
    "replication",
    "transactionbinding",
    "typesystemversion",
    "userinstance",
    "workstationid",
})


def is_python_blocked(keyword: str) -> bool:
    """Check a canonical id (or any spelling of it) against the Python allow-list."""
    return fold_keyword(keyword) in PYTHON_BLOCKED_KEYWORDS


# Struct type written for each nested ClientContext block
RUST_STRUCT_NAMES = {
    "transport_context": "TransportContext::Tcp",
    "encryption_options": "EncryptionOptions",
    "auth": "AuthContext",
}

RUST_ROOT_STRUCT = "ClientContext"


def _check_profiles() -> None:
    missing = [driver.value for driver in DriverType if driver not in DRIVER_PROFILES]
    if missing:
        raise RuntimeError(f"No driver profile for: {', '.join(missing)}")


_check_profiles()
