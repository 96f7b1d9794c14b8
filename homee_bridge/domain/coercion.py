"""Conversions between hub attribute values and host state values."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from ..const import UNIT_UNIX_TIMESTAMP
from ..errors import UnsupportedWriteError


class ValueType(str, Enum):
    """Semantic type of a host state."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"


class AttributeValue(Protocol):
    """Fields of a hub attribute read during coercion."""

    current_value: Any
    data: str | None
    unit: str | None


def coerce_inbound(value_type: ValueType | str, attribute: AttributeValue) -> Any:
    """Return the host value for a hub attribute of ``value_type``."""

    value_type = ValueType(value_type)
    value = attribute.current_value
    if value_type is ValueType.BOOLEAN:
        return bool(value)
    if value_type is ValueType.STRING:
        return attribute.data
    if attribute.unit == UNIT_UNIX_TIMESTAMP and value is not None:
        return value * 1000
    return value


def coerce_outbound(value_type: ValueType | str, value: Any) -> Any:
    """Return ``value`` in the shape the hub accepts for ``value_type``."""

    value_type = ValueType(value_type)
    if value_type is ValueType.BOOLEAN:
        return 1 if value else 0
    if value_type is ValueType.STRING:
        raise UnsupportedWriteError("String attributes cannot be written")
    return value


__all__ = ["AttributeValue", "ValueType", "coerce_inbound", "coerce_outbound"]
