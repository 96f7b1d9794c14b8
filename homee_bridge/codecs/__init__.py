"""Codecs translating hub payloads into validated models."""

from .homee_codec import (
    decode_attribute,
    decode_frame,
    decode_history,
    decode_node,
    decode_nodes,
)
from .homee_models import (
    HistoryPayload,
    HistoryResult,
    HistorySeries,
    HubAttribute,
    HubNode,
)

__all__ = [
    "HistoryPayload",
    "HistoryResult",
    "HistorySeries",
    "HubAttribute",
    "HubNode",
    "decode_attribute",
    "decode_frame",
    "decode_history",
    "decode_node",
    "decode_nodes",
]
