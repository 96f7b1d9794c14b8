"""Route attribute values between the hub and the host store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .backend.base import HubClient
from .codecs.homee_models import HubAttribute
from .domain.coercion import ValueType, coerce_inbound, coerce_outbound
from .domain.ids import HubKey, parse_host_id
from .domain.index import AttributeIndex
from .errors import UnsupportedWriteError
from .host import HostState, HostStore

_LOGGER = logging.getLogger(__name__)


class InboundRouter:
    """Write settled hub attribute values to the host store."""

    def __init__(
        self,
        host: HostStore,
        index: AttributeIndex,
        init_done: Callable[[], bool],
    ) -> None:
        self._host = host
        self._index = index
        self._init_done = init_done

    async def async_handle_attribute(
        self, node_id: int, attribute_id: int, attribute: HubAttribute
    ) -> bool:
        """Apply an attribute push; return True when a state was written."""

        key = HubKey.from_hub(node_id, attribute_id)
        entry = self._index.lookup(key)
        if entry is None:
            if self._init_done():
                _LOGGER.warning("Id %s not found in attribute index", key)
            else:
                _LOGGER.debug(
                    "Id %s not found in attribute index; initialisation pending", key
                )
            return False

        value = coerce_inbound(entry.value_type, attribute)
        if not attribute.settled:
            _LOGGER.debug(
                "Ignore value change for %s = %r (%r --> %r)",
                entry.state_id,
                value,
                attribute.current_value,
                attribute.target_value,
            )
            return False

        _LOGGER.debug("Value changed by hub for %s => %r", entry.state_id, value)
        await self._host.set_state(entry.state_id, value, True)
        return True


class OutboundRouter:
    """Translate user-initiated host state writes into hub commands."""

    def __init__(self, hub: HubClient, index: AttributeIndex, namespace: str) -> None:
        self._hub = hub
        self._index = index
        self._namespace = namespace

    async def async_handle_state_change(
        self, state_id: str, state: HostState | None
    ) -> bool:
        """Send a set-value command for an unacknowledged write.

        Returns True when a command was sent. Raises
        :class:`~homee_bridge.errors.InvalidHostIdError` for ids outside the
        ``<device>-N.<attribute>-M`` grammar.
        """

        if state is None or state.ack or state.val is None:
            return False

        key = parse_host_id(state_id, self._namespace)
        _LOGGER.debug("State change %s --> %s: %r", state_id, key, state.val)
        entry = self._index.lookup(key)
        if entry is None:
            _LOGGER.warning("Id %s (%s) not found in attribute index", key, state_id)
            return False

        try:
            value: Any = coerce_outbound(entry.value_type, state.val)
        except UnsupportedWriteError:
            _LOGGER.warning(
                "Type %s not supported to set data: %s, data=%r",
                ValueType.STRING.value,
                state_id,
                state.val,
            )
            return False

        await self._hub.set_value(key.hub_node_id, key.attribute, value)
        return True


__all__ = ["InboundRouter", "OutboundRouter"]
