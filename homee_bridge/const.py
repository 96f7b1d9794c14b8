"""Constants for the homee bridge."""

from __future__ import annotations

from typing import Final

# Configuration keys
CONF_HOST: Final = "host"
CONF_PORT: Final = "port"
CONF_ACCESS_TOKEN: Final = "access_token"
CONF_NAMESPACE: Final = "namespace"
CONF_LIMIT: Final = "limit"
CONF_HISTORY_TIMEOUT: Final = "history_timeout"

DEFAULT_PORT: Final = 7681
DEFAULT_NAMESPACE: Final = "homee.0"
DEFAULT_LIMIT: Final = 2000
DEFAULT_HISTORY_TIMEOUT: Final = 60.0

# Hub addressing
HUB_NODE_ID: Final = -1
HOST_HUB_NODE_NUMBER: Final = 0

# Websocket transport
WS_PATH: Final = "/connection"
WS_PROTOCOL: Final = "v2"
WS_BACKOFF_SEQUENCE: Final = (5, 10, 30, 120, 300)
REQUEST_ALL_NODES: Final = "GET:nodes"
HISTORY_REQUEST_FMT: Final = "GET:nodes/{node}/attributes/{attribute}/history?"
SET_VALUE_FMT: Final = "PUT:/nodes/{node}/attributes/{attribute}?target_value={value}"

# Host state ids written by the bridge itself
CONNECTION_STATE_ID: Final = "info.connection"

# History queries
COMMAND_GET_HISTORY: Final = "getHistory"
# 2000-01-01 00:00:00; smaller timestamps are treated as epoch seconds
MS_TIMESTAMP_THRESHOLD: Final = 946681200000
DEFAULT_END_OFFSET_MS: Final = 5_000_000
DEFAULT_COUNT: Final = 500
DEFAULT_AGGREGATE: Final = "average"
RAW_AGGREGATES: Final = frozenset({"onchange", "", "none"})
AGGREGATES: Final = frozenset({"max", "min", "average", "total"}) | RAW_AGGREGATES

UNIT_UNIX_TIMESTAMP: Final = "unixtimestamp"
