"""Interface of the hub transport used by the bridge."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from ..domain.events import HubEvent

HubEventHandler = Callable[[HubEvent], Awaitable[None]]


class HubClient(Protocol):
    """Commands the bridge sends to the hub."""

    async def send(self, request: str) -> None:
        """Send a raw text command."""

    async def set_value(self, node_id: int, attribute_id: int, value: Any) -> None:
        """Request a new target value for an attribute."""
