"""Domain-layer primitives for the homee bridge."""

from .coercion import ValueType, coerce_inbound, coerce_outbound
from .events import HubEvent, HubEventType
from .ids import HubKey, device_id, parse_host_id
from .index import AttributeIndex, IndexEntry

__all__ = [
    "AttributeIndex",
    "HubEvent",
    "HubEventType",
    "HubKey",
    "IndexEntry",
    "ValueType",
    "coerce_inbound",
    "coerce_outbound",
    "device_id",
    "parse_host_id",
]
