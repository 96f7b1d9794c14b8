"""Wire configuration, hub transport and bridge together."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from .backend.sanitize import mask_identifier
from .backend.ws_client import HomeeWSClient
from .bridge import HomeeBridge
from .config import validate_config
from .const import (
    CONF_ACCESS_TOKEN,
    CONF_HISTORY_TIMEOUT,
    CONF_HOST,
    CONF_LIMIT,
    CONF_NAMESPACE,
    CONF_PORT,
)
from .host import HostStore, InMemoryHostStore
from .services.history_query import Aggregator

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BridgeRuntime:
    """Running bridge with its transport."""

    config: dict[str, Any]
    host: HostStore
    bridge: HomeeBridge
    client: HomeeWSClient
    unsubscribers: list[Callable[[], None]] = field(default_factory=list)

    async def async_stop(self) -> None:
        """Disconnect from the hub and detach host listeners."""

        _LOGGER.info("Stopping homee bridge for %s", self.config[CONF_HOST])
        while self.unsubscribers:
            self.unsubscribers.pop()()
        await self.client.stop()
        await self.bridge.async_stop()


async def async_setup_bridge(
    raw_config: Mapping[str, Any],
    session: aiohttp.ClientSession,
    *,
    host: HostStore | None = None,
    aggregator: Aggregator | None = None,
) -> BridgeRuntime:
    """Validate ``raw_config``, start the hub client and return the runtime.

    Without ``host`` an :class:`InMemoryHostStore` for the configured
    namespace is used.
    """

    config = validate_config(raw_config)
    if host is None:
        host = InMemoryHostStore(config[CONF_NAMESPACE])
    elif host.namespace != config[CONF_NAMESPACE]:
        _LOGGER.debug(
            "Host namespace %s overrides configured %s",
            host.namespace,
            config[CONF_NAMESPACE],
        )
    _LOGGER.info(
        "Init homee %s:%s with token %s",
        config[CONF_HOST],
        config[CONF_PORT],
        mask_identifier(config[CONF_ACCESS_TOKEN]),
    )

    client = HomeeWSClient(
        session,
        config[CONF_HOST],
        config[CONF_ACCESS_TOKEN],
        port=config[CONF_PORT],
    )
    bridge = HomeeBridge(
        host,
        client,
        aggregator=aggregator,
        limit=config[CONF_LIMIT],
        history_timeout=config[CONF_HISTORY_TIMEOUT],
    )
    client.on_event = bridge.async_handle_event

    runtime = BridgeRuntime(config, host, bridge, client)
    runtime.unsubscribers.append(host.add_listener(bridge.async_handle_state_change))
    client.start()
    return runtime


__all__ = ["BridgeRuntime", "async_setup_bridge"]
