"""Tests for node and attribute synchronisation."""

from __future__ import annotations

import logging

import pytest
from conftest import NAMESPACE, attribute_payload, node_payload

from homee_bridge.codecs.homee_models import HubNode
from homee_bridge.domain.coercion import ValueType
from homee_bridge.domain.ids import HubKey
from homee_bridge.domain.index import AttributeIndex, IndexEntry
from homee_bridge.host import InMemoryHostStore
from homee_bridge.sync import NodeSync


def _node(**kwargs) -> HubNode:
    return HubNode.model_validate(node_payload(**kwargs))


@pytest.mark.asyncio
async def test_lamp_node_creates_device_and_acknowledged_state(
    host: InMemoryHostStore,
) -> None:
    """A lamp node yields dev-1 and a true, acknowledged dev-1.attr-1."""

    index = AttributeIndex()
    sync = NodeSync(host, index)

    await sync.async_sync_nodes([_node(node_id=1, name="Lamp", profile=1)])

    device = host.objects["dev-1"]
    assert device["type"] == "device"
    assert device["common"] == {"name": "Lamp"}
    assert device["native"] == {"id": 1, "name": "Lamp", "profile": 1}

    state = host.objects["dev-1.attr-1"]
    assert state["type"] == "state"
    assert state["common"]["type"] == "boolean"
    assert state["common"]["custom"] == {NAMESPACE: {"enabled": False}}
    assert state["native"] == {"id": 1, "node_id": 1, "type": "onoff"}

    assert host.states["dev-1.attr-1"].val is True
    assert host.states["dev-1.attr-1"].ack is True
    assert index.lookup(HubKey(1, 1)) == IndexEntry(ValueType.BOOLEAN, "dev-1.attr-1")


@pytest.mark.asyncio
async def test_first_batch_sets_latch_and_subscribes_once(
    host: InMemoryHostStore,
) -> None:
    sync = NodeSync(host, AttributeIndex())
    assert sync.init_done is False

    await sync.async_sync_nodes([_node(node_id=1)])
    await sync.async_sync_nodes([_node(node_id=2)])

    assert sync.init_done is True
    assert host.subscriptions == ["*"]


@pytest.mark.asyncio
async def test_unknown_attribute_type_is_skipped(
    host: InMemoryHostStore, caplog: pytest.LogCaptureFixture
) -> None:
    """An unmappable attribute is logged and the rest of the node syncs."""

    index = AttributeIndex()
    sync = NodeSync(host, index)
    node = _node(
        node_id=2,
        attributes=[
            attribute_payload(2, 1, attr_type=9999),
            attribute_payload(2, 2, attr_type="onoff", current=0),
        ],
    )

    with caplog.at_level(logging.WARNING):
        await sync.async_sync_node(node)

    assert "Unknown attribute type 9999" in caplog.text
    assert "dev-2.attr-1" not in host.objects
    assert host.states["dev-2.attr-2"].val is False
    assert HubKey(2, 1) not in index


@pytest.mark.asyncio
async def test_string_and_timestamp_values(host: InMemoryHostStore) -> None:
    """Strings come from ``data``; unix timestamps become milliseconds."""

    sync = NodeSync(host, AttributeIndex())
    node = _node(
        node_id=-1,
        name="homee",
        attributes=[
            attribute_payload(-1, 3, attr_type="softwarerevision", data="2.41.0"),
            attribute_payload(
                -1, 4, attr_type="lastupdate", current=1700000000, unit="unixtimestamp"
            ),
        ],
    )

    dev_id = await sync.async_sync_node(node)

    assert dev_id == "hub-0"
    assert host.states["hub-0.attr-3"].val == "2.41.0"
    assert host.states["hub-0.attr-4"].val == 1700000000000


@pytest.mark.asyncio
async def test_resync_extends_objects_and_keeps_foreign_custom_blocks(
    host: InMemoryHostStore,
) -> None:
    """Only this namespace's custom block changes on re-sync."""

    sync = NodeSync(host, AttributeIndex())
    await sync.async_sync_node(_node(node_id=1, history=False))
    host.objects["dev-1.attr-1"]["common"]["custom"]["history.0"] = {"enabled": True}

    await sync.async_sync_node(_node(node_id=1, name="Desk Lamp", history=True))

    custom = host.objects["dev-1.attr-1"]["common"]["custom"]
    assert custom == {NAMESPACE: {"enabled": True}, "history.0": {"enabled": True}}
    assert host.objects["dev-1"]["common"]["name"] == "Desk Lamp"
