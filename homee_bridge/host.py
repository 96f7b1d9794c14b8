"""Host object/state store interface and an in-memory implementation."""

from __future__ import annotations

import copy
import fnmatch
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class HostState:
    """Value of a host state with its acknowledgement flag."""

    val: Any
    ack: bool = False
    ts: int = field(default_factory=lambda: int(time.time() * 1000))


StateChangeListener = Callable[[str, "HostState | None"], Awaitable[None]]


class HostStore(Protocol):
    """Operations the bridge needs from the host platform.

    Ids are relative to the bridge namespace; state change notifications
    carry absolute ids (``<namespace>.<id>``).
    """

    namespace: str

    async def get_object(self, object_id: str) -> dict[str, Any] | None:
        """Return the stored object or None."""

    async def set_object(self, object_id: str, obj: Mapping[str, Any]) -> None:
        """Create or replace an object."""

    async def extend_object(self, object_id: str, obj: Mapping[str, Any]) -> None:
        """Deep-merge ``obj`` into an existing object."""

    async def set_state(self, state_id: str, value: Any, ack: bool) -> None:
        """Write a state value."""

    async def subscribe_states(self, pattern: str) -> None:
        """Request change notifications for states matching ``pattern``."""

    def add_listener(self, listener: StateChangeListener) -> Callable[[], None]:
        """Deliver subscribed state changes to ``listener``; return a remover."""


def deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``source`` into ``target`` and return ``target``."""

    for key, value in source.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


class InMemoryHostStore:
    """Dictionary-backed host store delivering change notifications inline."""

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        self.objects: dict[str, dict[str, Any]] = {}
        self.states: dict[str, HostState] = {}
        self.subscriptions: list[str] = []
        self._listeners: list[StateChangeListener] = []

    def add_listener(self, listener: StateChangeListener) -> Callable[[], None]:
        """Register ``listener`` for subscribed state changes."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    async def get_object(self, object_id: str) -> dict[str, Any] | None:
        obj = self.objects.get(object_id)
        return copy.deepcopy(obj) if obj is not None else None

    async def set_object(self, object_id: str, obj: Mapping[str, Any]) -> None:
        self.objects[object_id] = copy.deepcopy(dict(obj))

    async def extend_object(self, object_id: str, obj: Mapping[str, Any]) -> None:
        target = self.objects.setdefault(object_id, {})
        deep_merge(target, obj)

    async def set_state(self, state_id: str, value: Any, ack: bool) -> None:
        state = HostState(value, ack)
        self.states[state_id] = state
        await self._notify(state_id, state)

    async def subscribe_states(self, pattern: str) -> None:
        if pattern not in self.subscriptions:
            self.subscriptions.append(pattern)

    def _subscribed(self, state_id: str) -> bool:
        return any(fnmatch.fnmatchcase(state_id, pattern) for pattern in self.subscriptions)

    async def _notify(self, state_id: str, state: HostState | None) -> None:
        if not self._subscribed(state_id):
            return
        full_id = f"{self.namespace}.{state_id}"
        for listener in list(self._listeners):
            try:
                await listener(full_id, state)
            except Exception:
                _LOGGER.exception("State change listener failed for %s", full_id)


__all__ = [
    "HostState",
    "HostStore",
    "InMemoryHostStore",
    "StateChangeListener",
    "deep_merge",
]
