"""Synchronisation engine between the homee hub and the host store."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .backend.base import HubClient
from .codecs.homee_codec import (
    decode_attribute,
    decode_history,
    decode_node,
    decode_nodes,
)
from .codecs.homee_models import HistoryPayload, HubAttribute, HubNode
from .const import CONNECTION_STATE_ID, DEFAULT_HISTORY_TIMEOUT, DEFAULT_LIMIT
from .domain.events import HubEvent, HubEventType
from .domain.ids import strip_namespace
from .domain.index import AttributeIndex
from .history import HistoryRequestPipeline
from .host import HostState, HostStore
from .mapper import AttributeMapper
from .routing import InboundRouter, OutboundRouter
from .services.history_query import Aggregator, HistoryQueryService, Responder
from .sync import NodeSync

_LOGGER = logging.getLogger(__name__)


class HomeeBridge:
    """Own the attribute index and history queue and route every event.

    All handlers run on one event loop; the index and the history queue
    are only touched from here.
    """

    def __init__(
        self,
        host: HostStore,
        hub: HubClient,
        *,
        mapper: AttributeMapper | None = None,
        aggregator: Aggregator | None = None,
        limit: int = DEFAULT_LIMIT,
        history_timeout: float = DEFAULT_HISTORY_TIMEOUT,
    ) -> None:
        self.host = host
        self.hub = hub
        self.index = AttributeIndex()
        self.sync = NodeSync(host, self.index, mapper)
        self.inbound = InboundRouter(host, self.index, lambda: self.sync.init_done)
        self.outbound = OutboundRouter(hub, self.index, host.namespace)
        self.history = HistoryRequestPipeline(hub, timeout=history_timeout)
        self.queries = HistoryQueryService(
            self.history,
            host.namespace,
            aggregator=aggregator,
            default_limit=limit,
        )

    @property
    def init_done(self) -> bool:
        """Return True once the first node batch was synchronised."""

        return self.sync.init_done

    async def async_handle_event(self, event: HubEvent) -> None:
        """Route a hub event to its handler."""

        if event.type is HubEventType.NODES:
            await self.async_handle_nodes(event.payload)
        elif event.type is HubEventType.NODE:
            node = decode_node(event.payload)
            if node is not None:
                await self.sync.async_sync_nodes([node])
        elif event.type is HubEventType.ATTRIBUTE:
            attribute = decode_attribute(event.payload)
            if attribute is not None:
                await self.async_handle_attribute(attribute)
        elif event.type is HubEventType.ATTRIBUTE_HISTORY:
            history = decode_history(event.payload)
            if history is not None:
                await self.async_handle_history(history)
        elif event.type is HubEventType.CONNECTED:
            _LOGGER.info("Connected to hub")
            await self.host.set_state(CONNECTION_STATE_ID, True, True)
        elif event.type is HubEventType.DISCONNECTED:
            _LOGGER.info("Disconnected from hub: %s", event.payload)
            await self.host.set_state(CONNECTION_STATE_ID, False, True)

    async def async_handle_nodes(
        self, nodes: Iterable[HubNode | Mapping[str, Any]]
    ) -> None:
        """Synchronise a full node list."""

        await self.sync.async_sync_nodes(decode_nodes(nodes))

    async def async_handle_attribute(self, attribute: HubAttribute) -> bool:
        """Apply an attribute value push."""

        return await self.inbound.async_handle_attribute(
            attribute.node_id, attribute.id, attribute
        )

    async def async_handle_history(self, history: HistoryPayload) -> bool:
        """Hand a history response to the waiting query."""

        return await self.history.async_process(history)

    async def async_handle_state_change(
        self, state_id: str, state: HostState | None
    ) -> bool:
        """Forward a user-initiated host state write to the hub."""

        if strip_namespace(state_id, self.host.namespace) == CONNECTION_STATE_ID:
            return False
        return await self.outbound.async_handle_state_change(state_id, state)

    async def async_handle_message(
        self, message: Mapping[str, Any], respond: Responder
    ) -> bool:
        """Answer a host message such as ``getHistory``."""

        return await self.queries.async_handle_message(message, respond)

    async def async_stop(self) -> None:
        """Cancel outstanding history timers."""

        await self.history.async_stop()


__all__ = ["HomeeBridge"]
