"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Translation entry points: detect -> parse -> map -> generate.

Each call is a pure function of its input and the read-only keyword
registry, so translate() and translate_all() may run concurrently.
"""

from typing import List, Optional

from mssql_connstr.connection_string_builder import generate
from mssql_connstr.connection_string_parser import ConnectionStringParser
from mssql_connstr.constants import ALL_DRIVERS, DriverType, TranslationErrorCode
from mssql_connstr.logging import logger
from mssql_connstr.mapper import KeywordMapper
from mssql_connstr.models import (
    ParsedConnectionString,
    TranslationError,
    TranslationOptions,
    TranslationResult,
)
from mssql_connstr.registry import KeywordRegistry, get_registry


class Translator:
    """
    Runs the full translation pipeline against one registry.

    Args:
        registry: KeywordRegistry to use. Defaults to the process-wide registry.
    """

    def __init__(self, registry: Optional[KeywordRegistry] = None):
        self.registry = registry or get_registry()
        self._parser = ConnectionStringParser(self.registry)
        self._mapper = KeywordMapper(self.registry)

    def parse(self, connection_str: str, source_driver=None) -> ParsedConnectionString:
        return self._parser.parse(connection_str, source_driver)

    def translate(self, connection_str: str, target_driver, options=None,
                  source_driver=None) -> TranslationResult:
        """
        Translate a connection string to the target driver's format.

        Args:
            connection_str: Source connection string in any supported format.
            target_driver: DriverType or driver tag.
            options: TranslationOptions, a mapping (camelCase or snake_case keys), or None.
            source_driver: Optional source driver; skips detection when given.

        Returns:
            TranslationResult. When the source cannot be parsed, success is False,
            connection_string is empty and errors lists every parse error.

        Raises:
            UnsupportedDriverError: If target_driver or source_driver is not a known driver.
            InvalidOptionError: If options contain an unknown field or value.
        """
        target = DriverType.coerce(target_driver)
        options = TranslationOptions.resolve(options)

        with logger.trace():
            logger.debug("Translating to %s", target.value)
            parsed = self.parse(connection_str, source_driver)
            return self._translate_parsed(parsed, target, options)

    def _translate_parsed(self, parsed: ParsedConnectionString, target: DriverType,
                          options: TranslationOptions) -> TranslationResult:
        if parsed.has_errors:
            logger.debug("Translation to %s failed with %d parse error(s)", target.value, len(parsed.errors))
            return TranslationResult(
                success=False,
                target_driver=target,
                connection_string="",
                errors=[
                    TranslationError(TranslationErrorCode.PARSE_FAILED, error.message, parse_code=error.code)
                    for error in parsed.errors
                ],
            )

        mapped = self._mapper.map_keywords(parsed, target, options)
        output = generate(mapped, target, options, parsed)
        return TranslationResult(
            success=True,
            target_driver=target,
            connection_string=output,
            translated_keywords=mapped.translated_keywords,
            untranslatable_keywords=mapped.untranslatable_keywords,
            warnings=mapped.warnings,
        )

    def translate_all(self, connection_str: str, options=None, source_driver=None) -> List[TranslationResult]:
        """
        Translate to every driver, in the fixed order sqlclient, odbc, oledb, jdbc, php, python, rust.

        The input is parsed once and mapped per target.
        """
        options = TranslationOptions.resolve(options)
        with logger.trace():
            parsed = self.parse(connection_str, source_driver)
            return [self._translate_parsed(parsed, driver, options) for driver in ALL_DRIVERS]


_default_translator: Optional[Translator] = None


def _translator() -> Translator:
    global _default_translator
    if _default_translator is None:
        _default_translator = Translator()
    return _default_translator


def translate(connection_str: str, target_driver, options=None, source_driver=None) -> TranslationResult:
    """Translate a connection string to the target driver's format. See Translator.translate()."""
    return _translator().translate(connection_str, target_driver, options, source_driver)


def translate_all(connection_str: str, options=None, source_driver=None) -> List[TranslationResult]:
    """Translate a connection string to all seven driver formats."""
    return _translator().translate_all(connection_str, options, source_driver)
