"""Identifiers shared by the hub and host sides of the bridge."""

from __future__ import annotations

from dataclasses import dataclass

from ..const import HOST_HUB_NODE_NUMBER, HUB_NODE_ID
from ..errors import InvalidHostIdError

DEVICE_PREFIX = "dev"
HUB_DEVICE_PREFIX = "hub"
ATTRIBUTE_PREFIX = "attr"


def host_node_number(node_id: int) -> int:
    """Return the host-side node number for a hub node id."""

    return HOST_HUB_NODE_NUMBER if node_id == HUB_NODE_ID else node_id


def hub_node_id(node_number: int) -> int:
    """Return the hub node id for a host-side node number."""

    return HUB_NODE_ID if node_number == HOST_HUB_NODE_NUMBER else node_number


@dataclass(frozen=True, slots=True)
class HubKey:
    """Attribute address in host numbering (hub sentinel ``-1`` stored as ``0``)."""

    node: int
    attribute: int

    @classmethod
    def from_hub(cls, node_id: int, attribute_id: int) -> HubKey:
        """Build a key from raw hub ids."""

        return cls(host_node_number(int(node_id)), int(attribute_id))

    @property
    def hub_node_id(self) -> int:
        """Return the node id as the hub expects it on the wire."""

        return hub_node_id(self.node)

    def __str__(self) -> str:
        return f"{self.node}.{self.attribute}"


def device_id(node_id: int) -> str:
    """Return the host device id for a hub node."""

    number = host_node_number(node_id)
    prefix = HUB_DEVICE_PREFIX if number == HOST_HUB_NODE_NUMBER else DEVICE_PREFIX
    return f"{prefix}-{number}"


def attribute_segment(attribute_id: int) -> str:
    """Return the state id segment for a hub attribute."""

    return f"{ATTRIBUTE_PREFIX}-{attribute_id}"


def segment_number(segment: str) -> int:
    """Return the numeric suffix after the last ``-`` of an id segment."""

    _, sep, suffix = segment.rpartition("-")
    if not sep:
        raise InvalidHostIdError(f"Id segment without numeric suffix: {segment!r}")
    try:
        return int(suffix)
    except ValueError as err:
        raise InvalidHostIdError(
            f"Id segment without numeric suffix: {segment!r}"
        ) from err


def strip_namespace(state_id: str, namespace: str) -> str:
    """Return ``state_id`` relative to ``namespace``."""

    prefix = f"{namespace}."
    if state_id.startswith(prefix):
        return state_id[len(prefix) :]
    return state_id


def parse_host_id(state_id: str, namespace: str) -> HubKey:
    """Reverse a host state id into the attribute's hub key.

    ``state_id`` may be absolute (prefixed by ``namespace``) or relative.
    The returned key keeps host numbering; use :attr:`HubKey.hub_node_id`
    for the hub side.
    """

    relative = strip_namespace(state_id, namespace)
    parts = relative.split(".")
    if len(parts) != 2:
        raise InvalidHostIdError(f"Expected '<device>.<attribute>' id: {state_id!r}")
    return HubKey(segment_number(parts[0]), segment_number(parts[1]))


__all__ = [
    "ATTRIBUTE_PREFIX",
    "DEVICE_PREFIX",
    "HUB_DEVICE_PREFIX",
    "HubKey",
    "attribute_segment",
    "device_id",
    "host_node_number",
    "hub_node_id",
    "parse_host_id",
    "segment_number",
    "strip_namespace",
]
