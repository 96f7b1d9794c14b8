"""Decode helpers for homee websocket frames."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from ..domain.events import HubEvent, HubEventType
from .homee_models import HistoryPayload, HubAttribute, HubNode

_LOGGER = logging.getLogger(__name__)


def decode_node(raw: HubNode | Mapping[str, Any]) -> HubNode | None:
    """Validate a node payload, returning None when it is malformed."""

    if isinstance(raw, HubNode):
        return raw
    try:
        return HubNode.model_validate(raw)
    except ValidationError as err:
        _LOGGER.debug("Dropping invalid node payload: %s", err)
        return None


def decode_nodes(raw: Iterable[HubNode | Mapping[str, Any]]) -> list[HubNode]:
    """Validate a list of nodes, skipping malformed entries."""

    nodes: list[HubNode] = []
    for item in raw:
        node = decode_node(item)
        if node is not None:
            nodes.append(node)
    return nodes


def decode_attribute(raw: HubAttribute | Mapping[str, Any]) -> HubAttribute | None:
    """Validate an attribute push, returning None when it is malformed."""

    if isinstance(raw, HubAttribute):
        return raw
    try:
        return HubAttribute.model_validate(raw)
    except ValidationError as err:
        _LOGGER.debug("Dropping invalid attribute payload: %s", err)
        return None


def decode_history(raw: HistoryPayload | Mapping[str, Any]) -> HistoryPayload | None:
    """Validate a history response, returning None when it is malformed."""

    if isinstance(raw, HistoryPayload):
        return raw
    try:
        return HistoryPayload.model_validate(raw)
    except ValidationError as err:
        _LOGGER.debug("Dropping invalid history payload: %s", err)
        return None


def decode_frame(data: str | bytes | Mapping[str, Any]) -> list[HubEvent]:
    """Translate one websocket text frame into hub events."""

    if isinstance(data, Mapping):
        message: Any = data
    else:
        try:
            message = json.loads(data)
        except ValueError:
            _LOGGER.debug("Ignoring non-JSON frame: %.120r", data)
            return []
    if not isinstance(message, Mapping):
        return []

    events: list[HubEvent] = []
    nodes_raw = message.get("nodes")
    if isinstance(nodes_raw, list):
        events.append(HubEvent(HubEventType.NODES, decode_nodes(nodes_raw)))
    node_raw = message.get("node")
    if isinstance(node_raw, Mapping):
        node = decode_node(node_raw)
        if node is not None:
            events.append(HubEvent(HubEventType.NODE, node))
    attribute_raw = message.get("attribute")
    if isinstance(attribute_raw, Mapping):
        attribute = decode_attribute(attribute_raw)
        if attribute is not None:
            events.append(HubEvent(HubEventType.ATTRIBUTE, attribute))
    history_raw = message.get("attribute_history")
    if isinstance(history_raw, Mapping):
        history = decode_history(history_raw)
        if history is not None:
            events.append(HubEvent(HubEventType.ATTRIBUTE_HISTORY, history))
    if not events:
        _LOGGER.debug("Ignoring frame with keys %s", sorted(message))
    return events


__all__ = [
    "decode_attribute",
    "decode_frame",
    "decode_history",
    "decode_node",
    "decode_nodes",
]
