"""Attribute index mapping hub keys to host states."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .coercion import ValueType
from .ids import HubKey


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """Declared value type and canonical host state id of an attribute."""

    value_type: ValueType
    state_id: str


class AttributeIndex:
    """Process-wide lookup from hub keys to host states."""

    def __init__(self) -> None:
        self._entries: dict[HubKey, IndexEntry] = {}

    def store(self, key: HubKey, entry: IndexEntry) -> None:
        """Create or overwrite the entry for ``key``."""

        self._entries[key] = entry

    def lookup(self, key: HubKey) -> IndexEntry | None:
        """Return the entry for ``key`` when known."""

        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HubKey]:
        return iter(self._entries)
