"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.
This module contains the exceptions raised by the mssql_connstr package.

Problems found in a connection string are reported as data (errors and
warnings on the parse/translation results). Exceptions are reserved for
misuse of the API: unknown driver tags, invalid options, or an explicit
request to fail on parse errors.
"""

from typing import List, Union


class TranslatorError(Exception):
    """
    Base class for all exceptions raised by this package.
    It can be used to catch any exception raised by the translation API.
    """
    def __init__(self, message="A connection string translator error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class UnsupportedDriverError(TranslatorError, ValueError):
    """
    Raised when a driver tag does not name one of the seven supported drivers.
    """
    def __init__(self, driver) -> None:
        self.driver = driver
        super().__init__(
            f"Unsupported driver '{driver}'. Expected one of: "
            "sqlclient, odbc, oledb, jdbc, php, python, rust"
        )


class InvalidOptionError(TranslatorError, ValueError):
    """
    Raised when a TranslationOptions field holds an unrecognized value.
    """
    def __init__(self, option: str, value) -> None:
        self.option = option
        self.value = value
        super().__init__(f"Invalid value {value!r} for translation option '{option}'")


class ConnectionStringParseError(TranslatorError):
    """
    Raised when parse errors must be treated as fatal by the caller.

    All errors found in one pass are reported together.
    """
    def __init__(self, errors: Union[List, str]) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        messages = [getattr(error, "message", str(error)) for error in self.errors]
        if len(messages) == 1:
            message = f"Connection string parse error: {messages[0]}"
        else:
            message = "Connection string parse errors:\n" + "\n".join(
                f"  - {msg}" for msg in messages
            )
        super().__init__(message)
