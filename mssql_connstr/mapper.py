"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Keyword mapping from a parsed connection string to a target driver.

For each source pair the mapper finds the target driver's spelling,
converts the value (boolean spelling, enum coercion) and records anything
the target cannot express together with the reason. Unspecified keywords
whose defaults differ between the two drivers are reported as warnings.
"""

from typing import Dict, Optional, Set

from mssql_connstr.constants import (
    DriverType,
    KeywordOrder,
    KeywordValueType,
    TranslationWarningCode,
    UntranslatableReason,
    DEFAULT_PORT,
)
from mssql_connstr.drivers import is_python_blocked
from mssql_connstr.helpers import default_to_text, format_boolean_for_driver, normalize_boolean
from mssql_connstr.logging import logger
from mssql_connstr.models import (
    DriverKeyword,
    Keyword,
    MappingResult,
    ParsedConnectionString,
    TranslatedKeyword,
    TranslationOptions,
    TranslationWarning,
    UntranslatableKeyword,
)
from mssql_connstr.registry import KeywordRegistry, get_registry

# Keywords that only name the client library of the source format
FORMAT_KEYWORDS = {
    "provider": DriverType.OLEDB,
    "driver": DriverType.ODBC,
}


class KeywordMapper:
    """
    Maps parsed keywords onto one target driver.

    Args:
        registry: KeywordRegistry to map against. Defaults to the process-wide registry.
    """

    def __init__(self, registry: Optional[KeywordRegistry] = None):
        self._registry = registry or get_registry()

    def map_keywords(self, parsed: ParsedConnectionString, target_driver, options=None) -> MappingResult:
        """
        Map every parsed pair to the target driver.

        Args:
            parsed: Output of the parser.
            target_driver: DriverType or driver tag.
            options: TranslationOptions, a mapping of option values, or None.

        Returns:
            MappingResult with translated and untranslatable keywords, warnings,
            the source keyword order and the target name -> value pairs.
        """
        target = DriverType.coerce(target_driver)
        options = TranslationOptions.resolve(options)
        result = MappingResult()
        consumed: Set[str] = set()

        server_override = self._merge_port_into_server(parsed, target, consumed)

        for canonical_id, parsed_value in parsed.pairs.items():
            result.keyword_order.append(canonical_id)
            if canonical_id in consumed:
                continue
            source_keyword = parsed_value.original_keyword or canonical_id
            value = server_override if canonical_id == "server" and server_override else parsed_value.normalized

            keyword = self._registry.get_keyword_by_id(canonical_id)
            if keyword is None:
                self._map_unknown(result, canonical_id, source_keyword, value, options)
                continue

            rep = keyword.representation(target)
            if rep is None or not rep.is_expressible:
                self._map_unexpressible(result, keyword, parsed.driver, target, source_keyword, value)
                continue

            target_value, transformed = self._transform_value(value, rep, target)
            if transformed and rep.value_type is KeywordValueType.ENUM and target_value.lower() != value.lower():
                result.warnings.append(TranslationWarning(
                    TranslationWarningCode.VALUE_NORMALIZED,
                    f"'{keyword.display_name}' value '{value}' written as '{target_value}'",
                    keyword=canonical_id,
                ))
            result.translated_keywords.append(TranslatedKeyword(
                source_keyword=source_keyword,
                source_value=value,
                target_keyword=self._target_name(rep, target, options),
                target_value=target_value,
                value_transformed=transformed,
                canonical_id=canonical_id,
            ))

        specified = set(parsed.pairs)
        if options.include_defaults:
            self._append_defaults(result, specified | consumed, target, options)
        self._apply_order(result, options.keyword_order)
        self._rebuild_mapped_pairs(result)
        self._add_default_warnings(result, specified, parsed.driver, target)
        if target is DriverType.OLEDB and "provider" not in specified:
            # Unlike ODBC's Driver, no Provider is injected on output
            result.warnings.append(TranslationWarning(
                TranslationWarningCode.BEHAVIOR_DIFFERS,
                "OLEDB connections require a Provider keyword; add Provider=MSOLEDBSQL",
                keyword="provider",
            ))

        logger.debug(
            "Mapped %d keyword(s) to %s: %d untranslatable, %d warning(s)",
            len(result.translated_keywords), target.value,
            len(result.untranslatable_keywords), len(result.warnings),
        )
        return result

    # ------------------------------------------------------------------ per-pair handling

    def _merge_port_into_server(self, parsed, target, consumed) -> Optional[str]:
        """
        Fold a separate port into the server value for drivers that write host,port.
        """
        port_value = parsed.pairs.get("port")
        server_value = parsed.pairs.get("server")
        if port_value is None or server_value is None:
            return None
        if self._registry.is_keyword_supported("port", target):
            return None
        consumed.add("port")
        port, server = port_value.normalized.strip(), server_value.normalized
        if port == str(DEFAULT_PORT) or "," in server or not port.isdigit():
            return None
        return f"{server},{port}"

    @staticmethod
    def _map_unknown(result: MappingResult, canonical_id, source_keyword, value, options) -> None:
        if options.preserve_unknown:
            # Passed through verbatim; an unrecognized key has no known semantic difference to flag
            result.translated_keywords.append(TranslatedKeyword(
                source_keyword=source_keyword,
                source_value=value,
                target_keyword=source_keyword,
                target_value=value,
                value_transformed=False,
                canonical_id=None,
            ))
            return
        result.untranslatable_keywords.append(UntranslatableKeyword(
            keyword=source_keyword,
            value=value,
            reason=UntranslatableReason.UNKNOWN,
            canonical_id=canonical_id,
        ))

    def _map_unexpressible(self, result, keyword: Keyword, source, target, source_keyword, value) -> None:
        if target is DriverType.JDBC and keyword.id == "server":
            # Written into the URL by the generator
            result.mapped_pairs["server"] = value
            return

        if keyword.id in FORMAT_KEYWORDS and FORMAT_KEYWORDS[keyword.id] is not target:
            result.warnings.append(TranslationWarning(
                TranslationWarningCode.KEYWORD_OMITTED,
                f"'{keyword.display_name}={value}' only applies to {FORMAT_KEYWORDS[keyword.id].value} "
                f"and was omitted",
                keyword=keyword.id,
            ))
            return

        reason = self.untranslatable_reason(keyword, target, source)
        result.untranslatable_keywords.append(UntranslatableKeyword(
            keyword=source_keyword,
            value=value,
            reason=reason,
            canonical_id=keyword.id,
        ))
        if reason is UntranslatableReason.BLOCKED_ALLOWLIST:
            result.warnings.append(TranslationWarning(
                TranslationWarningCode.PYTHON_BLOCKED,
                f"Keyword '{keyword.display_name}' is blocked by Python driver's restricted allowlist",
                keyword=keyword.id,
            ))

    @staticmethod
    def untranslatable_reason(keyword: Keyword, target: DriverType, source: DriverType) -> UntranslatableReason:
        """
        Classify why a keyword cannot be written for the target driver.

        Checked in order: Python allow-list, deprecation in the target, a
        keyword only the source driver knows, then plain lack of support.
        """
        if target is DriverType.PYTHON and is_python_blocked(keyword.id):
            return UntranslatableReason.BLOCKED_ALLOWLIST

        rep = keyword.representation(target)
        if rep is not None and rep.deprecated:
            return UntranslatableReason.DEPRECATED

        supported = keyword.supported_drivers()
        if len(supported) == 1 and supported[0] is source:
            return UntranslatableReason.DRIVER_SPECIFIC

        return UntranslatableReason.NOT_SUPPORTED

    @staticmethod
    def _transform_value(value: str, rep: DriverKeyword, target: DriverType):
        """
        Convert a source value for the target representation.

        Returns:
            (target_value, value_transformed)
        """
        if rep.value_type is KeywordValueType.ENUM and rep.enum_values:
            flag = normalize_boolean(value)
            if flag is True:
                # First enum entry is the true-like value (Integrated Security=True -> SSPI)
                return rep.enum_values[0], True
            if flag is False:
                for candidate in rep.enum_values:
                    if normalize_boolean(candidate) is False:
                        return candidate, candidate.lower() != value.lower()
            return value, False

        if rep.value_type is KeywordValueType.BOOLEAN:
            flag = normalize_boolean(value)
            if flag is not None:
                formatted = format_boolean_for_driver(flag, target)
                return formatted, formatted.lower() != value.lower()

        return value, False

    def _target_name(self, rep: DriverKeyword, target: DriverType, options: TranslationOptions) -> str:
        if not options.prefer_short_names or target is DriverType.RUST or not rep.synonyms:
            return rep.name
        shortest = min((rep.name,) + tuple(rep.synonyms), key=len)
        return shortest if len(shortest) < len(rep.name) else rep.name

    # ------------------------------------------------------------------ post-processing

    def _append_defaults(self, result: MappingResult, present: Set[str], target: DriverType, options) -> None:
        for keyword in self._registry:
            if keyword.id in present:
                continue
            rep = keyword.representation(target)
            if rep is None or not rep.is_expressible or rep.default_value is None:
                continue
            default = rep.default_value
            if isinstance(default, bool):
                default_text = format_boolean_for_driver(default, target)
            else:
                default_text = str(default)
            result.translated_keywords.append(TranslatedKeyword(
                source_keyword="",
                source_value="",
                target_keyword=self._target_name(rep, target, options),
                target_value=default_text,
                value_transformed=False,
                canonical_id=keyword.id,
            ))

    def _apply_order(self, result: MappingResult, order: KeywordOrder) -> None:
        if order is KeywordOrder.ALPHABETICAL:
            result.translated_keywords.sort(key=lambda tk: tk.target_keyword.lower())
        elif order is KeywordOrder.CANONICAL:
            # Pass-through unknown keywords sort last; sort() is stable
            result.translated_keywords.sort(
                key=lambda tk: self._registry.index_of(tk.canonical_id) if tk.canonical_id else len(self._registry)
            )

    @staticmethod
    def _rebuild_mapped_pairs(result: MappingResult) -> None:
        mapped: Dict[str, str] = {}
        if "server" in result.mapped_pairs:
            mapped["server"] = result.mapped_pairs["server"]
        for translated in result.translated_keywords:
            mapped.setdefault(translated.target_keyword, translated.target_value)
        result.mapped_pairs = mapped

    def _add_default_warnings(self, result: MappingResult, specified, source: DriverType, target: DriverType) -> None:
        for keyword in self._registry:
            if keyword.id in specified:
                continue
            if not (self._registry.is_keyword_supported(keyword.id, source)
                    and self._registry.is_keyword_supported(keyword.id, target)):
                continue
            if not self._registry.do_defaults_differ(keyword.id, source, target):
                continue
            source_default = default_to_text(self._registry.get_default_value(keyword.id, source))
            target_default = default_to_text(self._registry.get_default_value(keyword.id, target))
            result.warnings.append(TranslationWarning(
                TranslationWarningCode.DEFAULT_DIFFERS,
                f"'{keyword.display_name}' default differs: "
                f"{source.value}={source_default}, {target.value}={target_default}",
                keyword=keyword.id,
            ))


_default_mapper: Optional[KeywordMapper] = None


def map_keywords(parsed: ParsedConnectionString, target_driver, options=None) -> MappingResult:
    """Map a parsed connection string to a target driver with the default registry."""
    global _default_mapper
    if _default_mapper is None:
        _default_mapper = KeywordMapper()
    return _default_mapper.map_keywords(parsed, target_driver, options)
