"""Pydantic models for homee hub payloads."""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _decode_text(value: Any) -> Any:
    """Percent-decode hub strings, which arrive URL-encoded."""

    if isinstance(value, str):
        return unquote(value)
    return value


class HubAttribute(BaseModel):
    """Single attribute of a hub node."""

    model_config = ConfigDict(extra="allow")

    id: int
    node_id: int
    type: int | str
    current_value: Any = None
    target_value: Any = None
    unit: str | None = None
    data: str | None = None
    editable: bool = False
    minimum: float | None = None
    maximum: float | None = None

    @field_validator("unit", "data", mode="before")
    @classmethod
    def _decode(cls, value: Any) -> Any:
        """Percent-decode unit and data strings."""

        return _decode_text(value)

    @field_validator("editable", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        """Accept the hub's 0/1 flags."""

        return bool(value)

    @property
    def settled(self) -> bool:
        """Return True when no transition is in progress."""

        return self.current_value == self.target_value


class HubNode(BaseModel):
    """Node descriptor with its attributes."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str = ""
    profile: int | str | None = None
    history: bool = False
    attributes: list[HubAttribute] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _decode_name(cls, value: Any) -> Any:
        """Percent-decode node names and map missing names to ''."""

        if value is None:
            return ""
        return _decode_text(value)

    @field_validator("history", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        """Accept the hub's 0/1 flags."""

        return bool(value)


class HistorySeries(BaseModel):
    """Column/row table of one history series."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    columns: list[str] | None = None
    values: list[list[Any]] | None = None
    error: Any = None


class HistoryResult(BaseModel):
    """Result block of a history response."""

    model_config = ConfigDict(extra="allow")

    series: list[HistorySeries] | None = None
    error: Any = None


class HistoryPayload(BaseModel):
    """History response pushed by the hub for an earlier request."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    node_id: int
    attribute_id: int
    from_: int = Field(default=0, alias="from")
    till: int = 0
    limit: int = 0
    results: list[HistoryResult] = Field(default_factory=list)

    @field_validator("from_", "till", "limit", mode="before")
    @classmethod
    def _zero_when_missing(cls, value: Any) -> Any:
        """Treat null range fields like the hub's 0 placeholder."""

        return 0 if value is None else value


__all__ = [
    "HistoryPayload",
    "HistoryResult",
    "HistorySeries",
    "HubAttribute",
    "HubNode",
]
