"""History request correlation and series parsing."""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
import time
from collections.abc import Awaitable, Callable, Sequence
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .backend.base import HubClient
from .codecs.homee_models import HistoryPayload, HistoryResult, HistorySeries
from .const import DEFAULT_HISTORY_TIMEOUT, HISTORY_REQUEST_FMT, MS_TIMESTAMP_THRESHOLD
from .errors import HistoryTimeoutError

_LOGGER = logging.getLogger(__name__)

HistoryCallback = Callable[
    [list[HistoryResult], Exception | None], Awaitable[None] | None
]
MonotonicCallable = Callable[[], float]


def _present(value: Any) -> int | None:
    """Canonicalise an optional range field: falsy values mean absent."""

    if not value:
        return None
    return int(value)


def _to_seconds(value_ms: Any) -> int | None:
    """Floor an optional millisecond timestamp to whole seconds."""

    if not value_ms:
        return None
    return math.floor(value_ms / 1000)


@dataclass(frozen=True, slots=True)
class HistoryRequestKey:
    """Canonical identity of a history request.

    Range fields are whole seconds; ``None`` marks a field the request
    omits. Zero and missing values collapse to ``None`` so keys built from
    query options and from hub responses compare equal.
    """

    node: int
    attribute: int
    start: int | None = None
    end: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "node", int(self.node))
        object.__setattr__(self, "attribute", int(self.attribute))
        object.__setattr__(self, "start", _present(self.start))
        object.__setattr__(self, "end", _present(self.end))
        object.__setattr__(self, "limit", _present(self.limit))

    @classmethod
    def from_query(
        cls,
        node_id: int,
        attribute_id: int,
        *,
        start_ms: float | None = None,
        end_ms: float | None = None,
        limit: int | None = None,
    ) -> HistoryRequestKey:
        """Build the key for an outgoing request with millisecond bounds."""

        return cls(
            node_id, attribute_id, _to_seconds(start_ms), _to_seconds(end_ms), limit
        )

    @classmethod
    def from_payload(cls, payload: HistoryPayload) -> HistoryRequestKey:
        """Build the key echoed by a hub history response."""

        return cls(
            payload.node_id,
            payload.attribute_id,
            payload.from_,
            payload.till,
            payload.limit,
        )

    def to_request(self) -> str:
        """Render the hub command requesting this history range."""

        params: list[str] = []
        if self.start is not None:
            params.append(f"from={self.start}")
        if self.end is not None:
            params.append(f"till={self.end}")
        if self.limit is not None:
            params.append(f"limit={self.limit}")
        prefix = HISTORY_REQUEST_FMT.format(node=self.node, attribute=self.attribute)
        return prefix + "&".join(params)


@dataclass(slots=True)
class _InFlight:
    """Callbacks waiting on one outstanding hub request."""

    sent_at: float
    callbacks: list[HistoryCallback] = field(default_factory=list)
    timer: asyncio.TimerHandle | None = None

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class HistoryRequestPipeline:
    """Coalesce identical history requests and correlate hub responses.

    Every in-flight request arms a timer; when the hub stays silent for
    ``timeout`` seconds its callbacks receive a :class:`HistoryTimeoutError`.
    """

    def __init__(
        self,
        hub: HubClient,
        *,
        timeout: float = DEFAULT_HISTORY_TIMEOUT,
        monotonic: MonotonicCallable = time.monotonic,
    ) -> None:
        self._hub = hub
        self._timeout = timeout
        self._monotonic = monotonic
        self._pending: dict[HistoryRequestKey, _InFlight] = {}
        self._tasks: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._pending)

    def waiting(self, key: HistoryRequestKey) -> int:
        """Return the number of callbacks waiting on ``key``."""

        pending = self._pending.get(key)
        return len(pending.callbacks) if pending else 0

    async def async_request(
        self,
        node_id: int,
        attribute_id: int,
        callback: HistoryCallback,
        *,
        start: float | None = None,
        end: float | None = None,
        limit: int | None = None,
    ) -> HistoryRequestKey:
        """Queue ``callback`` for a history range, sending at most one request.

        A failed send is reported to every queued callback, including those
        that joined while the send was in progress.
        """

        await self.async_expire()
        key = HistoryRequestKey.from_query(
            node_id, attribute_id, start_ms=start, end_ms=end, limit=limit
        )
        pending = self._pending.get(key)
        if pending is not None:
            pending.callbacks.append(callback)
            _LOGGER.debug(
                "Joining in-flight history request %s (%d waiting)",
                key.to_request(),
                len(pending.callbacks),
            )
            return key

        pending = _InFlight(self._monotonic(), [callback])
        pending.timer = asyncio.get_running_loop().call_later(
            self._timeout, self._on_timer, key, pending
        )
        self._pending[key] = pending
        request = key.to_request()
        _LOGGER.debug("Request history: %s", request)
        try:
            await self._hub.send(request)
        except Exception as err:
            _LOGGER.warning("Sending history request %s failed: %s", request, err)
            if self._pending.get(key) is pending:
                del self._pending[key]
                await self._async_fail(pending, err)
        return key

    async def async_process(self, payload: HistoryPayload) -> bool:
        """Dispatch a hub history response; return False when unmatched."""

        key = HistoryRequestKey.from_payload(payload)
        pending = self._pending.pop(key, None)
        if pending is None:
            _LOGGER.debug("No callback found for history request %s", key.to_request())
            return False
        pending.cancel()
        _LOGGER.debug(
            "Received history for request %s (%d waiting)",
            key.to_request(),
            len(pending.callbacks),
        )
        for callback in pending.callbacks:
            await _invoke(callback, payload.results, None)
        return True

    async def async_expire(self) -> int:
        """Fail requests the hub left unanswered past the timeout."""

        now = self._monotonic()
        expired = [
            key
            for key, pending in self._pending.items()
            if now - pending.sent_at >= self._timeout
        ]
        for key in expired:
            await self._async_time_out(key, self._pending.pop(key))
        return len(expired)

    async def async_stop(self) -> None:
        """Cancel timers and pending expiry tasks; waiting callbacks are dropped."""

        for pending in self._pending.values():
            pending.cancel()
        self._pending.clear()
        tasks, self._tasks = self._tasks, set()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task

    def _on_timer(self, key: HistoryRequestKey, pending: _InFlight) -> None:
        pending.timer = None
        if self._pending.get(key) is not pending:
            return
        del self._pending[key]
        task = asyncio.get_running_loop().create_task(
            self._async_time_out(key, pending), name="homee-history-timeout"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _async_time_out(
        self, key: HistoryRequestKey, pending: _InFlight
    ) -> None:
        _LOGGER.warning(
            "History request %s unanswered after %.0fs; dropping %d callbacks",
            key.to_request(),
            self._timeout,
            len(pending.callbacks),
        )
        await self._async_fail(
            pending, HistoryTimeoutError(f"No history response for {key.to_request()}")
        )

    async def _async_fail(self, pending: _InFlight, error: Exception) -> None:
        pending.cancel()
        for callback in pending.callbacks:
            await _invoke(callback, [], error)


async def _invoke(
    callback: HistoryCallback,
    results: list[HistoryResult],
    error: Exception | None,
) -> None:
    try:
        outcome = callback(results, error)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception:
        _LOGGER.exception("History callback failed")


def normalize_timestamp(value: Any) -> int | None:
    """Return ``value`` as epoch milliseconds or None when unparseable."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=UTC)
            return int(parsed.timestamp() * 1000)
    if not isinstance(value, (int, float)) or math.isnan(value):
        return None
    if value < MS_TIMESTAMP_THRESHOLD:
        value *= 1000
    return int(value)


def parse_history_series(
    series: HistorySeries,
    rows: list[dict[str, Any]] | None = None,
    *,
    origin: str,
) -> list[dict[str, Any]]:
    """Prepend the rows of ``series`` to ``rows`` and return ``rows``."""

    if rows is None:
        rows = []
    if series.error or not series.columns or series.values is None:
        _LOGGER.info("No data in history response: %s", series.model_dump())
        return rows
    try:
        time_col = series.columns.index("time")
        value_col = series.columns.index("value")
    except ValueError:
        _LOGGER.info("History series without time/value columns: %s", series.columns)
        return rows

    width = max(time_col, value_col)
    for raw in series.values:
        if len(raw) <= width:
            continue
        ts = normalize_timestamp(raw[time_col])
        if ts is None:
            _LOGGER.debug("Skipping history row with invalid time %r", raw[time_col])
            continue
        rows.insert(0, {"val": raw[value_col], "ts": ts, "ack": True, "from": origin})
    return rows


def parse_history_results(
    results: Sequence[HistoryResult], *, origin: str
) -> list[dict[str, Any]]:
    """Merge every series of the first result into chronological rows."""

    rows: list[dict[str, Any]] = []
    if not results:
        return rows
    for series in results[0].series or []:
        rows = parse_history_series(series, rows, origin=origin)
    rows.sort(key=lambda row: row["ts"])
    return rows


__all__ = [
    "HistoryCallback",
    "HistoryRequestKey",
    "HistoryRequestPipeline",
    "normalize_timestamp",
    "parse_history_results",
    "parse_history_series",
]
