"""Synchronise hub nodes and attributes into host objects."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .codecs.homee_models import HubAttribute, HubNode
from .domain.coercion import ValueType, coerce_inbound
from .domain.ids import HubKey, segment_number
from .domain.index import AttributeIndex, IndexEntry
from .host import HostStore
from .mapper import AttributeMapper

_LOGGER = logging.getLogger(__name__)


class NodeSync:
    """Upsert device and state objects and seed the attribute index."""

    def __init__(
        self,
        host: HostStore,
        index: AttributeIndex,
        mapper: AttributeMapper | None = None,
    ) -> None:
        self._host = host
        self._index = index
        self._mapper = mapper or AttributeMapper()
        self._init_done = False

    @property
    def init_done(self) -> bool:
        """Return True once the first node batch has been synchronised."""

        return self._init_done

    async def async_sync_nodes(self, nodes: Iterable[HubNode]) -> None:
        """Synchronise a batch of nodes and finish initialisation once."""

        nodes = list(nodes)
        _LOGGER.info("Initialize %d nodes", len(nodes))
        for node in nodes:
            await self.async_sync_node(node)
        if not self._init_done:
            self._init_done = True
            await self._host.subscribe_states("*")

    async def async_sync_node(self, node: HubNode) -> str:
        """Synchronise a single node and return its host device id."""

        _LOGGER.debug("Initialize node %s as %r", node.id, node.name)
        dev_id = await self._async_update_device(node)
        name = self._mapper.device_name(node)
        for attribute in node.attributes:
            await self._async_update_state(dev_id, name, attribute, node.history)
        return dev_id

    async def _async_update_device(self, node: HubNode) -> str:
        dev_id = self._mapper.device_id(node)
        _LOGGER.debug(
            "Update device %s: name=%r profile=%s as %s",
            node.id,
            node.name,
            node.profile,
            dev_id,
        )
        obj = {
            "type": "device",
            "common": {"name": self._mapper.device_name(node)},
            "native": {"id": node.id, "name": node.name, "profile": node.profile},
        }
        await self._async_upsert(dev_id, obj)
        return dev_id

    async def _async_update_state(
        self,
        dev_id: str,
        node_name: str,
        attribute: HubAttribute,
        history: bool,
    ) -> None:
        common = self._mapper.map_attribute(node_name, attribute)
        if common is None:
            _LOGGER.warning(
                "Unknown attribute type %s on node %s; skipping attribute %s",
                attribute.type,
                attribute.node_id,
                attribute.id,
            )
            return

        state_id = f"{dev_id}.{common.pop('id')}"
        value_type = ValueType(common["type"])
        key = HubKey(segment_number(dev_id), attribute.id)
        _LOGGER.debug("Store lookup %s for %s", key, state_id)
        self._index.store(key, IndexEntry(value_type, state_id))

        value = coerce_inbound(value_type, attribute)
        common["custom"] = {self._host.namespace: {"enabled": history}}
        _LOGGER.debug(
            "Update state %s: value=%r history=%s common=%s",
            state_id,
            value,
            history,
            common,
        )
        obj: dict[str, Any] = {
            "type": "state",
            "common": common,
            "native": {
                "id": attribute.id,
                "node_id": attribute.node_id,
                "type": attribute.type,
            },
        }
        await self._async_upsert(state_id, obj)
        await self._host.set_state(state_id, value, True)

    async def _async_upsert(self, object_id: str, obj: dict[str, Any]) -> None:
        existing = await self._host.get_object(object_id)
        if existing:
            await self._host.extend_object(object_id, obj)
        else:
            await self._host.set_object(object_id, obj)


__all__ = ["NodeSync"]
