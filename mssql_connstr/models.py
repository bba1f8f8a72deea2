"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Data records exchanged between the detector, parser, mapper and generator,
and the options object accepted by the public API.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from mssql_connstr.constants import (
    DriverType,
    DetectionConfidence,
    KeywordCategory,
    KeywordValueType,
    ParseErrorCode,
    ParseWarningCode,
    TranslationWarningCode,
    TranslationErrorCode,
    UntranslatableReason,
    KeywordOrder,
    OutputFormatting,
    DEFAULT_PORT,
)
from mssql_connstr.exceptions import InvalidOptionError, ConnectionStringParseError

DefaultValue = Union[str, bool, int]


def _enum_dict_factory(items) -> Dict[str, Any]:
    """dict_factory for asdict() that flattens enums to their values."""
    result = {}
    for key, value in items:
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, dict):
            value = {
                (k.value if isinstance(k, Enum) else k): (v.value if isinstance(v, Enum) else v)
                for k, v in value.items()
            }
        result[key] = value
    return result


# ============================================================================
# Keyword registry records
# ============================================================================

@dataclass(frozen=True)
class DriverKeyword:
    """
    How one canonical keyword is written for one driver.

    Attributes:
        name (Optional[str]): Primary keyword name. None means the setting cannot be
            written as a key=value pair for this driver (e.g. JDBC's server lives in the URL).
        value_type (KeywordValueType): Declared value type.
        synonyms (Tuple[str, ...]): Alternate spellings accepted by the driver.
        default_value: Driver default when the keyword is not given.
        required (bool): Whether the driver needs the keyword to connect.
        deprecated (bool): Whether the driver deprecates the keyword.
        deprecation_message (Optional[str]): Explanation shown with deprecation warnings.
        enum_values (Tuple[str, ...]): Allowed values for enum types. The first entry is
            used when a boolean true is coerced into the enum.
        notes (Optional[str]): Free-form translation notes.
    """
    name: Optional[str]
    value_type: KeywordValueType = KeywordValueType.STRING
    synonyms: Tuple[str, ...] = ()
    default_value: Optional[DefaultValue] = None
    required: bool = False
    deprecated: bool = False
    deprecation_message: Optional[str] = None
    enum_values: Tuple[str, ...] = ()
    notes: Optional[str] = None

    @property
    def is_expressible(self) -> bool:
        return self.name is not None


@dataclass(frozen=True)
class Keyword:
    """A canonical connection string setting with its per-driver representations."""
    id: str
    display_name: str
    category: KeywordCategory
    drivers: Mapping[DriverType, DriverKeyword]
    description: str = ""

    def representation(self, driver: DriverType) -> Optional[DriverKeyword]:
        return self.drivers.get(driver)

    def supported_drivers(self) -> List[DriverType]:
        """Drivers in which this keyword has a key=value (or field) name."""
        return [driver for driver, rep in self.drivers.items() if rep is not None and rep.name is not None]


# ============================================================================
# Parsing records
# ============================================================================

@dataclass(frozen=True)
class Position:
    start: int
    end: int


@dataclass
class ParsedValue:
    """One keyword occurrence as typed by the user."""
    raw: str
    normalized: str
    position: Position
    was_quoted: bool = False
    original_keyword: Optional[str] = None


@dataclass
class JdbcUrlComponents:
    """Pieces extracted from a jdbc:sqlserver:// URL."""
    host: str
    port: int = DEFAULT_PORT
    instance_name: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass
class ParseError:
    code: ParseErrorCode
    message: str
    position: Optional[Position] = None
    suggestion: Optional[str] = None


@dataclass
class ParseWarning:
    code: ParseWarningCode
    message: str
    keyword: Optional[str] = None
    position: Optional[Position] = None


@dataclass
class DetectionResult:
    driver: DriverType
    confidence: DetectionConfidence
    matched_pattern: Optional[str] = None


@dataclass
class ParsedConnectionString:
    """
    Result of parsing one input.

    ``pairs`` maps canonical keyword id to the first occurrence of that keyword,
    in input order. Keys that are not in the registry are kept under their
    folded spelling.
    """
    driver: DriverType
    confidence: DetectionConfidence
    pairs: Dict[str, ParsedValue]
    original_input: str
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)
    jdbc_url: Optional[JdbcUrlComponents] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def get_value(self, canonical_id: str) -> Optional[str]:
        """Return the normalized value for a canonical id, or None."""
        parsed_value = self.pairs.get(canonical_id)
        return parsed_value.normalized if parsed_value else None

    def raise_for_errors(self) -> "ParsedConnectionString":
        """
        Raise ConnectionStringParseError if parsing produced any fatal error.

        Returns:
            self, so the call can be chained.
        """
        if self.errors:
            raise ConnectionStringParseError(self.errors)
        return self


# ============================================================================
# Translation records
# ============================================================================

@dataclass
class TranslatedKeyword:
    source_keyword: str
    source_value: str
    target_keyword: str
    target_value: str
    value_transformed: bool = False
    canonical_id: Optional[str] = None


@dataclass
class UntranslatableKeyword:
    keyword: str
    value: str
    reason: UntranslatableReason
    canonical_id: Optional[str] = None


@dataclass
class TranslationWarning:
    code: TranslationWarningCode
    message: str
    keyword: Optional[str] = None


@dataclass
class TranslationError:
    code: TranslationErrorCode
    message: str
    parse_code: Optional[ParseErrorCode] = None


@dataclass
class MappingResult:
    """Output of the mapper for one target driver."""
    translated_keywords: List[TranslatedKeyword] = field(default_factory=list)
    untranslatable_keywords: List[UntranslatableKeyword] = field(default_factory=list)
    warnings: List[TranslationWarning] = field(default_factory=list)
    # Canonical ids in source order
    keyword_order: List[str] = field(default_factory=list)
    # Target keyword name -> target value, plus 'server' when it must go into a URL
    mapped_pairs: Dict[str, str] = field(default_factory=dict)


@dataclass
class TranslationResult:
    success: bool
    target_driver: DriverType
    connection_string: str
    translated_keywords: List[TranslatedKeyword] = field(default_factory=list)
    untranslatable_keywords: List[UntranslatableKeyword] = field(default_factory=list)
    warnings: List[TranslationWarning] = field(default_factory=list)
    errors: List[TranslationError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view of the result for display surfaces (enums flattened)."""
        return asdict(self, dict_factory=_enum_dict_factory)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)


# ============================================================================
# Options
# ============================================================================

_OPTION_ALIASES = {
    "includeDefaults": "include_defaults",
    "preserveUnknown": "preserve_unknown",
    "preferShortNames": "prefer_short_names",
    "keywordOrder": "keyword_order",
    "formatting": "formatting",
}


@dataclass
class TranslationOptions:
    """
    Options accepted by translate(), translate_all(), map_keywords() and generate().

    Attributes:
        include_defaults (bool): Emit target defaults for keywords the source did not set.
        preserve_unknown (bool): Pass unrecognized keywords through instead of flagging them.
        prefer_short_names (bool): Use the shortest accepted spelling of each target keyword.
        formatting (OutputFormatting): 'compact' or 'readable'; affects delimiter spacing only.
        keyword_order (KeywordOrder): 'source', 'canonical' or 'alphabetical'.
    """
    include_defaults: bool = False
    preserve_unknown: bool = False
    prefer_short_names: bool = False
    formatting: OutputFormatting = OutputFormatting.COMPACT
    keyword_order: KeywordOrder = KeywordOrder.SOURCE

    def __post_init__(self):
        for flag in ("include_defaults", "preserve_unknown", "prefer_short_names"):
            if not isinstance(getattr(self, flag), bool):
                raise InvalidOptionError(flag, getattr(self, flag))
        self.formatting = self._coerce("formatting", self.formatting, OutputFormatting)
        self.keyword_order = self._coerce("keyword_order", self.keyword_order, KeywordOrder)

    @staticmethod
    def _coerce(option: str, value, enum_cls):
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            for member in enum_cls:
                if member.value == value.strip().lower():
                    return member
        raise InvalidOptionError(option, value)

    @property
    def readable(self) -> bool:
        return self.formatting is OutputFormatting.READABLE

    @classmethod
    def from_dict(cls, values: Optional[Mapping[str, Any]]) -> "TranslationOptions":
        """
        Build options from a mapping using either camelCase or snake_case keys.

        Raises:
            InvalidOptionError: For unknown keys or invalid values.
        """
        if not values:
            return cls()
        kwargs = {}
        for key, value in values.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise InvalidOptionError(key, value)
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def resolve(cls, options) -> "TranslationOptions":
        """Accept None, a mapping, or a TranslationOptions instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls.from_dict(options)
        raise InvalidOptionError("options", options)
