"""Unit tests for hub keys and host id translation."""

from __future__ import annotations

import pytest

from homee_bridge.domain.ids import (
    HubKey,
    attribute_segment,
    device_id,
    host_node_number,
    hub_node_id,
    parse_host_id,
    strip_namespace,
)
from homee_bridge.errors import InvalidHostIdError


def test_sentinel_node_maps_to_zero_and_back() -> None:
    """The hub's -1 node is 0 on the host side and vice versa."""

    assert host_node_number(-1) == 0
    assert hub_node_id(0) == -1
    assert host_node_number(7) == 7
    assert hub_node_id(7) == 7


def test_hub_key_from_hub_normalises_sentinel() -> None:
    """HubKey.from_hub stores host numbering and exposes the hub id."""

    key = HubKey.from_hub(-1, 12)

    assert key == HubKey(0, 12)
    assert key.hub_node_id == -1
    assert str(key) == "0.12"


@pytest.mark.parametrize("node_id", [-1, 1, 42, 300])
@pytest.mark.parametrize("attribute_id", [1, 9, 1024])
def test_host_id_round_trip(node_id: int, attribute_id: int) -> None:
    """Ids derived for a node/attribute parse back to the same hub ids."""

    state_id = f"homee.0.{device_id(node_id)}.{attribute_segment(attribute_id)}"

    key = parse_host_id(state_id, "homee.0")

    assert key.hub_node_id == node_id
    assert key.attribute == attribute_id


def test_device_id_uses_hub_prefix_for_sentinel() -> None:
    """The hub itself gets the hub-0 device."""

    assert device_id(-1) == "hub-0"
    assert device_id(1) == "dev-1"


def test_parse_host_id_accepts_relative_ids() -> None:
    """Ids without namespace prefix are parsed as-is."""

    assert parse_host_id("dev-3.attr-5", "homee.0") == HubKey(3, 5)
    assert strip_namespace("homee.0.dev-3.attr-5", "homee.0") == "dev-3.attr-5"


def test_parse_host_id_uses_numeric_suffix_of_named_segments() -> None:
    """Segments may carry names before the trailing number."""

    assert parse_host_id("homee.0.Kitchen-Lamp-4.OnOff-2", "homee.0") == HubKey(4, 2)


@pytest.mark.parametrize(
    "state_id",
    ["homee.0.info.connection", "homee.0.dev-1", "homee.0.dev-1.attr-x", "dev.attr"],
)
def test_parse_host_id_rejects_malformed_ids(state_id: str) -> None:
    """Malformed ids fail fast with InvalidHostIdError."""

    with pytest.raises(InvalidHostIdError):
        parse_host_id(state_id, "homee.0")
