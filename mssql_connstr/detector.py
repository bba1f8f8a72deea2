"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Source format detection.

Signature rules are checked in priority order and the first match wins.
When nothing matches, driver-suggestive keywords are scored and the best
scoring driver is returned, defaulting to SqlClient.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple

from mssql_connstr.constants import DriverType, DetectionConfidence
from mssql_connstr.models import DetectionResult


@dataclass(frozen=True)
class DetectionRule:
    pattern: Pattern
    driver: DriverType
    confidence: DetectionConfidence
    description: str


def _rule(pattern, driver, confidence, description, flags=re.IGNORECASE) -> DetectionRule:
    return DetectionRule(re.compile(pattern, flags), driver, confidence, description)


HIGH = DetectionConfidence.HIGH
MEDIUM = DetectionConfidence.MEDIUM

# OLEDB must be recognised before any SqlClient keyword rule: OLEDB strings
# also carry Data Source= and Integrated Security=.
DETECTION_RULES: Tuple[DetectionRule, ...] = (
    _rule(r"^jdbc:sqlserver://", DriverType.JDBC, HIGH, "JDBC URL prefix"),
    _rule(r"^sqlsrv:", DriverType.PHP, HIGH, "PHP sqlsrv DSN prefix"),
    _rule(r"\bDriver\s*=\s*\{[^}]*SQL\s*Server[^}]*\}", DriverType.ODBC, HIGH, "ODBC Driver specification"),
    _rule(r"\bDriver\s*=\s*\{?ODBC\s*Driver\s*\d+", DriverType.ODBC, HIGH, "ODBC Driver version"),
    _rule(r"\bDriver\s*=\s*\{?SQL\s*Server\s*Native\s*Client", DriverType.ODBC, HIGH, "SQL Server Native Client"),
    _rule(r"\bProvider\s*=\s*MSOLEDBSQL", DriverType.OLEDB, HIGH, "MSOLEDBSQL Provider"),
    _rule(r"\bProvider\s*=\s*SQLOLEDB", DriverType.OLEDB, HIGH, "SQLOLEDB Provider"),
    _rule(r"\bProvider\s*=\s*SQLNCLI", DriverType.OLEDB, HIGH, "SQL Native Client Provider"),
    _rule(r"ClientContext\s*\{", DriverType.RUST, HIGH, "Rust ClientContext struct", flags=0),
    _rule(r"transport_context\s*:", DriverType.RUST, HIGH, "Rust transport_context field", flags=0),
    _rule(r"mssql\+pyodbc://", DriverType.PYTHON, HIGH, "Python mssql+pyodbc URL"),
    _rule(r"\bIntegrated\s*Security\s*=", DriverType.SQLCLIENT, HIGH, "SqlClient Integrated Security"),
    _rule(r"\bTrust\s*Server\s*Certificate\s*=", DriverType.SQLCLIENT, MEDIUM, "TrustServerCertificate keyword"),
    _rule(r"\bMultipleActiveResultSets\s*=", DriverType.SQLCLIENT, HIGH, "SqlClient MARS keyword"),
    _rule(r"\bApplication\s*Name\s*=", DriverType.SQLCLIENT, MEDIUM, "Application Name keyword"),
    _rule(r"\bLoginTimeout\s*=", DriverType.PHP, MEDIUM, "PHP LoginTimeout keyword"),
    _rule(r"\bConnectionPooling\s*=", DriverType.PHP, MEDIUM, "PHP ConnectionPooling keyword"),
    _rule(r"\bTrusted_Connection\s*=", DriverType.ODBC, MEDIUM, "ODBC Trusted_Connection"),
    _rule(r"\bMARS_Connection\s*=", DriverType.ODBC, MEDIUM, "ODBC MARS_Connection"),
)

# (pattern, driver, weight) used when no signature rule matches
KEYWORD_WEIGHTS: Tuple[Tuple[Pattern, DriverType, int], ...] = (
    (re.compile(r"\buser\s*id\s*=", re.IGNORECASE), DriverType.SQLCLIENT, 2),
    (re.compile(r"\bdata\s*source\s*=", re.IGNORECASE), DriverType.SQLCLIENT, 1),
    (re.compile(r"\binitial\s*catalog\s*=", re.IGNORECASE), DriverType.SQLCLIENT, 1),
    (re.compile(r"\bpersist\s*security\s*info\s*=", re.IGNORECASE), DriverType.SQLCLIENT, 2),
    (re.compile(r"\buid\s*=", re.IGNORECASE), DriverType.ODBC, 2),
    (re.compile(r"\bpwd\s*=", re.IGNORECASE), DriverType.ODBC, 1),
    (re.compile(r"\bdsn\s*=", re.IGNORECASE), DriverType.ODBC, 3),
    (re.compile(r"\bole\s*db\s*services\s*=", re.IGNORECASE), DriverType.OLEDB, 3),
    (re.compile(r"databasename=", re.IGNORECASE), DriverType.JDBC, 2),
    (re.compile(r"logintimeout=", re.IGNORECASE), DriverType.JDBC, 1),
    (re.compile(r"returnvaluesonnulls=", re.IGNORECASE), DriverType.PHP, 2),
    (re.compile(r"scrollablecursor=", re.IGNORECASE), DriverType.PHP, 2),
    (re.compile(r"mssql\+pyodbc", re.IGNORECASE), DriverType.PYTHON, 3),
    (re.compile(r"to_string\(\)", re.IGNORECASE), DriverType.RUST, 3),
)

MEDIUM_SCORE = 3
HIGH_SCORE = 5


def detect(connection_string: str) -> DetectionResult:
    """
    Guess the driver format of a connection string.

    Args:
        connection_string (str): Raw user input.

    Returns:
        DetectionResult: The driver, a confidence level and the rule that decided it.
    """
    text = connection_string.strip()
    for rule in DETECTION_RULES:
        if rule.pattern.search(text):
            return DetectionResult(rule.driver, rule.confidence, rule.description)
    return _score_keywords(text)


def score_keywords(connection_string: str) -> Dict[DriverType, int]:
    """Per-driver keyword scores used by the fallback heuristic."""
    scores = {driver: 0 for driver in DriverType}
    for pattern, driver, weight in KEYWORD_WEIGHTS:
        if pattern.search(connection_string):
            scores[driver] += weight
    return scores


def _score_keywords(text: str) -> DetectionResult:
    scores = score_keywords(text)
    best_driver, best_score = DriverType.SQLCLIENT, 0
    # Strictly greater: ties keep the earlier driver, and an all-zero scan keeps SqlClient
    for driver in DriverType:
        if scores[driver] > best_score:
            best_driver, best_score = driver, scores[driver]

    if best_score >= HIGH_SCORE:
        confidence = DetectionConfidence.HIGH
    elif best_score >= MEDIUM_SCORE:
        confidence = DetectionConfidence.MEDIUM
    else:
        confidence = DetectionConfidence.LOW

    matched = "Keyword analysis" if best_score > 0 else "Default (no patterns matched)"
    return DetectionResult(best_driver, confidence, matched)


def get_driver_patterns(driver) -> List[Pattern]:
    """Signature patterns that identify a driver."""
    driver = DriverType.coerce(driver)
    return [rule.pattern for rule in DETECTION_RULES if rule.driver is driver]


def is_driver_format(connection_string: str, driver) -> bool:
    """Whether the input is detected as the given driver with better than low confidence."""
    result = detect(connection_string)
    return result.driver is DriverType.coerce(driver) and result.confidence is not DetectionConfidence.LOW
