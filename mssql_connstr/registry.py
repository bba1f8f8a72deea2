"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Keyword registry and its derived lookup indices.

The registry wraps the static keyword table and builds, once, a synonym
index (every accepted spelling -> canonical id, per driver and globally)
and a defaults index (per driver, canonical id -> default value). The
object is never mutated after construction, so one instance is shared by
every translation call.
"""

import threading
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from mssql_connstr.constants import DriverType, KeywordCategory
from mssql_connstr.helpers import fold_keyword, values_functionally_equal
from mssql_connstr.keywords import KEYWORDS
from mssql_connstr.models import DefaultValue, DriverKeyword, Keyword


class KeywordRegistry:
    """
    Immutable keyword table with synonym and default-value indices.

    Args:
        keywords: Keyword definitions in canonical order. Ids must be unique.

    Raises:
        ValueError: If two keywords share an id.
    """

    def __init__(self, keywords: Iterable[Keyword]) -> None:
        self._keywords = tuple(keywords)
        by_id: Dict[str, Keyword] = {}
        order: Dict[str, int] = {}
        for index, keyword in enumerate(self._keywords):
            if keyword.id in by_id:
                raise ValueError(f"Duplicate keyword id '{keyword.id}' in registry")
            by_id[keyword.id] = keyword
            order[keyword.id] = index
        self._by_id = MappingProxyType(by_id)
        self._order = MappingProxyType(order)
        self._driver_index, self._global_index = self._build_synonym_index()
        self._defaults = self._build_defaults_index()

    # ------------------------------------------------------------------ index construction

    def _build_synonym_index(self):
        driver_index: Dict[DriverType, Dict[str, str]] = {driver: {} for driver in DriverType}
        global_index: Dict[str, str] = {}
        for keyword in self._keywords:
            for driver, rep in keyword.drivers.items():
                if rep is None or rep.name is None:
                    continue
                for spelling in (rep.name,) + tuple(rep.synonyms):
                    for key in _index_keys(spelling):
                        driver_index[driver].setdefault(key, keyword.id)
                        global_index.setdefault(key, keyword.id)
        frozen = {driver: MappingProxyType(index) for driver, index in driver_index.items()}
        return MappingProxyType(frozen), MappingProxyType(global_index)

    def _build_defaults_index(self):
        defaults: Dict[DriverType, Dict[str, DefaultValue]] = {driver: {} for driver in DriverType}
        for keyword in self._keywords:
            for driver, rep in keyword.drivers.items():
                if rep is not None and rep.default_value is not None:
                    defaults[driver][keyword.id] = rep.default_value
        return MappingProxyType({driver: MappingProxyType(d) for driver, d in defaults.items()})

    # ------------------------------------------------------------------ container protocol

    def __iter__(self) -> Iterator[Keyword]:
        return iter(self._keywords)

    def __len__(self) -> int:
        return len(self._keywords)

    def __contains__(self, keyword_id) -> bool:
        return keyword_id in self._by_id

    @property
    def keywords(self):
        return self._keywords

    @property
    def synonym_index(self) -> Mapping[str, str]:
        """Global spelling -> canonical id index."""
        return self._global_index

    def driver_synonym_index(self, driver: DriverType) -> Mapping[str, str]:
        return self._driver_index[DriverType.coerce(driver)]

    # ------------------------------------------------------------------ lookups

    def get_keyword_by_id(self, keyword_id: str) -> Optional[Keyword]:
        return self._by_id.get(keyword_id)

    def index_of(self, keyword_id: str) -> int:
        """Position in canonical order; unknown ids sort after every known one."""
        return self._order.get(keyword_id, len(self._keywords))

    def representation(self, keyword_id: str, driver: DriverType) -> Optional[DriverKeyword]:
        keyword = self._by_id.get(keyword_id)
        if keyword is None:
            return None
        return keyword.representation(DriverType.coerce(driver))

    def get_supported_keywords(self, driver: DriverType) -> List[str]:
        """Ids of keywords the driver can write as key=value pairs (or struct fields)."""
        driver = DriverType.coerce(driver)
        return [k.id for k in self._keywords if k.drivers.get(driver) and k.drivers[driver].name]

    def is_keyword_supported(self, keyword_id: str, driver: DriverType) -> bool:
        rep = self.representation(keyword_id, driver)
        return rep is not None and rep.name is not None

    def get_target_keyword_name(self, keyword_id: str, driver: DriverType) -> Optional[str]:
        rep = self.representation(keyword_id, driver)
        return rep.name if rep else None

    def get_keywords_by_category(self, category: KeywordCategory) -> List[Keyword]:
        return [k for k in self._keywords if k.category is category]

    def get_synonyms_for_keyword(self, keyword_id: str, driver: Optional[DriverType] = None) -> List[str]:
        """
        Accepted spellings of a keyword.

        With a driver, returns that driver's name followed by its synonyms.
        Without one, returns every distinct spelling across all drivers.
        """
        keyword = self._by_id.get(keyword_id)
        if keyword is None:
            return []
        drivers = [DriverType.coerce(driver)] if driver is not None else list(DriverType)
        spellings: List[str] = []
        for each in drivers:
            rep = keyword.drivers.get(each)
            if rep is None or rep.name is None:
                continue
            for spelling in (rep.name,) + tuple(rep.synonyms):
                if spelling not in spellings:
                    spellings.append(spelling)
        return spellings

    def resolve_keyword(self, name: str, driver: Optional[DriverType] = None) -> Optional[str]:
        """
        Resolve any accepted spelling to its canonical id.

        The driver-scoped index is consulted first; the global index is the fallback.
        """
        keys = _index_keys(name)
        if driver is not None:
            scoped = self._driver_index[DriverType.coerce(driver)]
            for key in keys:
                if key in scoped:
                    return scoped[key]
        for key in keys:
            if key in self._global_index:
                return self._global_index[key]
        return None

    def is_known_keyword(self, name: str, driver: Optional[DriverType] = None) -> bool:
        return self.resolve_keyword(name, driver) is not None

    # ------------------------------------------------------------------ defaults

    def get_default_value(self, keyword_id: str, driver: DriverType) -> Optional[DefaultValue]:
        return self._defaults[DriverType.coerce(driver)].get(keyword_id)

    def get_all_defaults(self, driver: DriverType) -> Dict[str, DefaultValue]:
        return dict(self._defaults[DriverType.coerce(driver)])

    def is_default_value(self, keyword_id: str, value, driver: DriverType) -> bool:
        default = self.get_default_value(keyword_id, driver)
        if default is None:
            return False
        return values_functionally_equal(value, default)

    def do_defaults_differ(self, keyword_id: str, driver_a: DriverType, driver_b: DriverType) -> bool:
        """
        Whether leaving a keyword unset behaves differently under two drivers.

        Defaults that are only spelled differently (True/yes, unset/false, ...)
        do not count as a difference.
        """
        default_a = self.get_default_value(keyword_id, driver_a)
        default_b = self.get_default_value(keyword_id, driver_b)
        if default_a is None and default_b is None:
            return False
        return not values_functionally_equal(default_a, default_b)


def _index_keys(spelling: str) -> List[str]:
    """Lowercase form with spaces, then the whitespace-free form."""
    spaced = " ".join(spelling.strip().lower().split())
    folded = fold_keyword(spelling)
    return [spaced] if spaced == folded else [spaced, folded]


_registry: Optional[KeywordRegistry] = None
_registry_lock: threading.Lock = threading.Lock()


def get_registry() -> KeywordRegistry:
    """Return the process-wide registry, building it on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = KeywordRegistry(KEYWORDS)
        return _registry
