"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Bounded list of recently translated connection strings.

Owned by front ends (CLI, editor integrations). The translation pipeline
never reads from it.
"""

import re
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from mssql_connstr.constants import DriverType
from mssql_connstr.helpers import sanitize_connection_string

DEFAULT_HISTORY_CAPACITY = 20

_SERVER_PATTERN = re.compile(r"(?:Server|Data Source|Host)=([^;]+)", re.IGNORECASE)
_DATABASE_PATTERN = re.compile(r"(?:Database|Initial Catalog)=([^;]+)", re.IGNORECASE)


def make_label(connection_str: str, driver: DriverType) -> str:
    """
    Short display label: '[DRIVER] server/database', or the first 30
    characters of the connection string when neither is present.
    """
    label = ""
    server = _SERVER_PATTERN.search(connection_str)
    database = _DATABASE_PATTERN.search(connection_str)
    if server:
        label = server.group(1)[:20]
    if database:
        label = f"{label}/{database.group(1)[:15]}" if label else database.group(1)[:20]
    if not label:
        label = sanitize_connection_string(connection_str)[:30]
        if len(connection_str) > 30:
            label += "..."
    return f"[{driver.value.upper()}] {label}"


@dataclass
class HistoryEntry:
    connection_string: str
    detected_driver: DriverType
    timestamp: float = field(default_factory=time.time)
    label: str = ""

    def __post_init__(self):
        self.detected_driver = DriverType.coerce(self.detected_driver)
        if not self.label:
            self.label = make_label(self.connection_string, self.detected_driver)


class RecentHistory:
    """
    Thread-safe, newest-first list of HistoryEntry records.

    Args:
        capacity: Maximum number of entries kept. Older entries fall off.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: List[HistoryEntry] = []
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def append(self, connection_string: str, detected_driver, label: Optional[str] = None) -> HistoryEntry:
        """
        Record a connection string at the front of the list.

        A connection string already present is moved to the front with a fresh
        timestamp instead of being added twice.
        """
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.connection_string == connection_string:
                    del self._entries[index]
                    entry.timestamp = time.time()
                    self._entries.insert(0, entry)
                    return entry

            entry = HistoryEntry(connection_string, detected_driver, label=label or "")
            self._entries.insert(0, entry)
            del self._entries[self._capacity:]
            return entry

    def list(self) -> List[HistoryEntry]:
        """Snapshot of the entries, newest first."""
        with self._lock:
            return list(self._entries)

    def delete(self, index: int) -> HistoryEntry:
        """
        Remove the entry at index (0 is the newest).

        Raises:
            IndexError: If index is out of range.
        """
        with self._lock:
            return self._entries.pop(index)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
