"""Hub transport backends."""

from .base import HubClient, HubEventHandler
from .ws_client import HomeeWSClient

__all__ = ["HomeeWSClient", "HubClient", "HubEventHandler"]
