"""Events emitted by the hub transport."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class HubEventType(str, Enum):
    """Kinds of hub events consumed by the bridge."""

    NODES = "nodes"
    NODE = "node"
    ATTRIBUTE = "attribute"
    ATTRIBUTE_HISTORY = "attribute_history"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True, slots=True)
class HubEvent:
    """Single hub event with its decoded payload."""

    type: HubEventType
    payload: Any = None
