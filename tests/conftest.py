# ruff: noqa: D101,D102,D103,D107
from __future__ import annotations

import asyncio
import inspect
from typing import Any

import pytest

from homee_bridge.bridge import HomeeBridge
from homee_bridge.host import InMemoryHostStore

NAMESPACE = "homee.0"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom pytest markers used across the suite."""

    if not config.pluginmanager.hasplugin("pytest_asyncio"):
        config.addinivalue_line(
            "markers", "asyncio: mark test as requiring asyncio event loop support."
        )


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async tests when pytest-asyncio is unavailable."""

    if pyfuncitem.config.pluginmanager.hasplugin("pytest_asyncio"):
        return None

    testfunction = pyfuncitem.obj
    if not inspect.iscoroutinefunction(testfunction):
        return None

    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None

    argnames = pyfuncitem._fixtureinfo.argnames  # noqa: SLF001
    kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}
    with asyncio.Runner(debug=False) as runner:
        runner.run(testfunction(**kwargs))
    return True


class RecordingHub:
    """Hub stand-in recording every command it receives."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.values: list[tuple[int, int, Any]] = []

    async def send(self, request: str) -> None:
        self.sent.append(request)

    async def set_value(self, node_id: int, attribute_id: int, value: Any) -> None:
        self.values.append((node_id, attribute_id, value))


def node_payload(
    node_id: int = 1,
    *,
    name: str = "Lamp",
    profile: int = 1,
    history: bool = False,
    attributes: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return a hub node payload with a single on/off attribute by default."""

    if attributes is None:
        attributes = [
            attribute_payload(node_id, 1, attr_type="onoff", current=1, target=1)
        ]
    return {
        "id": node_id,
        "name": name,
        "profile": profile,
        "history": history,
        "attributes": attributes,
    }


def attribute_payload(
    node_id: int,
    attribute_id: int,
    *,
    attr_type: int | str = "onoff",
    current: Any = 0,
    target: Any = None,
    unit: str = "",
    data: str = "",
    editable: int = 1,
) -> dict[str, Any]:
    """Return a hub attribute payload."""

    return {
        "id": attribute_id,
        "node_id": node_id,
        "type": attr_type,
        "current_value": current,
        "target_value": current if target is None else target,
        "unit": unit,
        "data": data,
        "editable": editable,
    }


@pytest.fixture
def host() -> InMemoryHostStore:
    return InMemoryHostStore(NAMESPACE)


@pytest.fixture
def hub() -> RecordingHub:
    return RecordingHub()


@pytest.fixture
def bridge(host: InMemoryHostStore, hub: RecordingHub) -> HomeeBridge:
    bridge = HomeeBridge(host, hub)
    host.add_listener(bridge.async_handle_state_change)
    return bridge
