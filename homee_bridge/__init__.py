"""Bridge between a homee hub and a host object/state store."""

from .bridge import HomeeBridge
from .host import HostState, HostStore, InMemoryHostStore
from .runtime import BridgeRuntime, async_setup_bridge

__all__ = [
    "BridgeRuntime",
    "HomeeBridge",
    "HostState",
    "HostStore",
    "InMemoryHostStore",
    "async_setup_bridge",
]
