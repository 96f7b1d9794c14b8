"""Websocket transport to the homee hub."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from contextlib import suppress
from typing import Any

import aiohttp

from ..codecs.homee_codec import decode_frame
from ..const import (
    DEFAULT_PORT,
    REQUEST_ALL_NODES,
    SET_VALUE_FMT,
    WS_BACKOFF_SEQUENCE,
    WS_PATH,
    WS_PROTOCOL,
)
from ..domain.events import HubEvent, HubEventType
from ..errors import HandshakeError
from .base import HubEventHandler
from .sanitize import redact_text

_LOGGER = logging.getLogger(__name__)

SleepCallable = Callable[[float], Awaitable[Any]]


class HomeeWSClient:
    """Maintain the hub websocket and emit decoded :class:`HubEvent` values.

    Events are passed to ``on_event``, which may be assigned after
    construction but before :meth:`start`.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        access_token: str,
        on_event: HubEventHandler | None = None,
        *,
        port: int = DEFAULT_PORT,
        backoff: Sequence[float] = WS_BACKOFF_SEQUENCE,
        sleep: SleepCallable = asyncio.sleep,
        connect_timeout: float = 15.0,
    ) -> None:
        self._session = session
        self._host = host
        self._port = port
        self._access_token = access_token
        self.on_event = on_event
        self._backoff_seq = tuple(backoff)
        self._backoff_idx = 0
        self._sleep = sleep
        self._connect_timeout = connect_timeout
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._task: asyncio.Task | None = None
        self._closing = False

    @property
    def url(self) -> str:
        """Return the websocket URL including the access token."""

        return (
            f"ws://{self._host}:{self._port}{WS_PATH}"
            f"?access_token={self._access_token}"
        )

    @property
    def connected(self) -> bool:
        """Return True while the websocket is open."""

        return self._ws is not None and not self._ws.closed

    def start(self) -> asyncio.Task:
        """Start the websocket client background task."""

        if self._task and not self._task.done():
            return self._task
        _LOGGER.debug("WS: start requested")
        self._closing = False
        self._task = asyncio.get_running_loop().create_task(
            self._runner(), name=f"homee-ws-{self._host}"
        )
        return self._task

    async def stop(self) -> None:
        """Close the websocket and cancel the background task."""

        _LOGGER.debug("WS: stop requested")
        self._closing = True
        await self._disconnect()
        if self._task:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    def is_running(self) -> bool:
        """Return True if the websocket client task is active."""

        return bool(self._task and not self._task.done())

    async def send(self, request: str) -> None:
        """Send a text command; dropped with a warning while disconnected."""

        ws = self._ws
        if ws is None or ws.closed:
            _LOGGER.warning("WS: not connected; dropping %s", request)
            return
        _LOGGER.debug("WS: send %s", request)
        await ws.send_str(request)

    async def set_value(self, node_id: int, attribute_id: int, value: Any) -> None:
        """Ask the hub to move an attribute to ``value``."""

        await self.send(
            SET_VALUE_FMT.format(node=node_id, attribute=attribute_id, value=value)
        )

    async def _runner(self) -> None:
        """Manage connection attempts with backoff."""

        while not self._closing:
            reason: str | None = None
            connected = False
            try:
                await self._connect_once()
                connected = True
                await self._emit(HubEvent(HubEventType.CONNECTED))
                await self.send(REQUEST_ALL_NODES)
                reason = await self._read_loop()
            except asyncio.CancelledError:
                raise
            except Exception as err:
                reason = f"{type(err).__name__}: {err}"
                _LOGGER.info(
                    "WS: connection error (%s: %s); will retry",
                    type(err).__name__,
                    redact_text(str(err)),
                )
                _LOGGER.debug("WS: connection error details", exc_info=True)
            finally:
                await self._disconnect()
            if connected:
                await self._emit(HubEvent(HubEventType.DISCONNECTED, reason))
            if self._closing:
                break
            delay = self._backoff_seq[
                min(self._backoff_idx, len(self._backoff_seq) - 1)
            ]
            self._backoff_idx = min(self._backoff_idx + 1, len(self._backoff_seq) - 1)
            await self._sleep(delay * random.uniform(0.8, 1.2))

    async def _connect_once(self) -> None:
        """Open the websocket connection."""

        url = self.url
        _LOGGER.debug("WS: connecting to %s", redact_text(url))
        try:
            async with asyncio.timeout(self._connect_timeout):
                self._ws = await self._session.ws_connect(
                    url, protocols=(WS_PROTOCOL,), heartbeat=30
                )
        except TimeoutError as err:
            raise HandshakeError(599, redact_text(url), "timeout") from err
        except aiohttp.WSServerHandshakeError as err:
            raise HandshakeError(err.status, redact_text(url), err.message) from err
        self._backoff_idx = 0
        _LOGGER.info("WS: connected to %s", self._host)

    async def _read_loop(self) -> str:
        """Consume frames until the socket closes; return the close reason."""

        ws = self._ws
        if ws is None:
            return "not connected"
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                for event in decode_frame(msg.data):
                    await self._emit(event)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                error = ws.exception()
                return f"error: {error}" if error else "error"
            elif msg.type in (
                aiohttp.WSMsgType.CLOSE,
                aiohttp.WSMsgType.CLOSING,
                aiohttp.WSMsgType.CLOSED,
            ):
                break
        return f"closed ({ws.close_code})"

    async def _emit(self, event: HubEvent) -> None:
        handler = self.on_event
        if handler is None:
            _LOGGER.debug("WS: no handler for %s event", event.type.value)
            return
        try:
            await handler(event)
        except Exception:
            _LOGGER.exception("WS: handler failed for %s event", event.type.value)

    async def _disconnect(self) -> None:
        ws, self._ws = self._ws, None
        if ws is not None and not ws.closed:
            with suppress(aiohttp.ClientError, RuntimeError):
                await ws.close()


__all__ = ["HomeeWSClient"]
