"""Handle host ``getHistory`` queries against the hub history API."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from ..codecs.homee_models import HistoryResult
from ..const import (
    AGGREGATES,
    COMMAND_GET_HISTORY,
    DEFAULT_AGGREGATE,
    DEFAULT_COUNT,
    DEFAULT_END_OFFSET_MS,
    DEFAULT_LIMIT,
    MS_TIMESTAMP_THRESHOLD,
    RAW_AGGREGATES,
)
from ..domain.ids import parse_host_id
from ..errors import InvalidHostIdError
from ..history import HistoryRequestPipeline, parse_history_results

_LOGGER = logging.getLogger(__name__)

Responder = Callable[[dict[str, Any]], Awaitable[None] | None]


class Aggregator(Protocol):
    """Three-phase aggregation stage applied to parsed history rows."""

    def init_aggregate(self, options: dict[str, Any]) -> None:
        """Prepare ``options`` for a new aggregation run."""

    def aggregation(self, options: dict[str, Any], rows: list[dict[str, Any]]) -> None:
        """Feed chronological ``rows`` into the aggregation."""

    def finish_aggregation(self, options: dict[str, Any]) -> list[dict[str, Any]]:
        """Return the aggregated rows."""


def _int_or_none(value: Any) -> int | None:
    """Parse ``value`` as an integer; zero and garbage become None."""

    try:
        return int(value) or None
    except (TypeError, ValueError):
        return None


@dataclass(slots=True)
class HistoryQuery:
    """Normalised options of a ``getHistory`` request."""

    id: str
    start: float | None
    end: float
    step: int | None
    count: int
    aggregate: str
    limit: int
    ignore_null: Any = None
    add_id: bool = False
    session_id: Any = None

    @classmethod
    def from_message(
        cls,
        message: Mapping[str, Any],
        *,
        default_limit: int = DEFAULT_LIMIT,
        now_ms: float,
    ) -> HistoryQuery:
        """Build a query from a host message, applying defaults and fixes."""

        state_id = message.get("id")
        if not state_id:
            raise InvalidHostIdError("getHistory request without id")
        options: Mapping[str, Any] = message.get("options") or {}

        start = options.get("start")
        end = options.get("end") or now_ms + DEFAULT_END_OFFSET_MS
        step = _int_or_none(options.get("step"))
        aggregate = options.get("aggregate")
        if aggregate is not None and aggregate not in AGGREGATES:
            _LOGGER.warning(
                "Unknown aggregate %r for %s; passing it to the aggregator",
                aggregate,
                state_id,
            )
        query = cls(
            id=str(state_id),
            start=start,
            end=end,
            step=step,
            count=_int_or_none(options.get("count")) or DEFAULT_COUNT,
            aggregate=DEFAULT_AGGREGATE if aggregate is None else str(aggregate),
            limit=_int_or_none(options.get("limit")) or default_limit,
            ignore_null=options.get("ignoreNull"),
            add_id=bool(options.get("addId")),
            session_id=options.get("sessionId"),
        )
        query._normalise_range()
        return query

    def _normalise_range(self) -> None:
        if self.start is not None and self.start > self.end:
            self.start, self.end = self.end, self.start
        if self.start is not None and self.start < MS_TIMESTAMP_THRESHOLD:
            self.start *= 1000
            if self.step is not None:
                self.step *= 1000
        if self.end < MS_TIMESTAMP_THRESHOLD:
            self.end *= 1000

    @property
    def unaggregated(self) -> bool:
        """Return True when rows are returned without aggregation."""

        return self.aggregate in RAW_AGGREGATES or (not self.start and bool(self.count))

    def as_options(self) -> dict[str, Any]:
        """Return the options bag handed to the aggregation stage."""

        return {
            "id": self.id,
            "start": self.start,
            "end": self.end,
            "step": self.step,
            "count": self.count,
            "from": False,
            "ack": False,
            "q": False,
            "ignoreNull": self.ignore_null,
            "aggregate": self.aggregate,
            "limit": self.limit,
            "addId": self.add_id,
            "sessionId": self.session_id,
        }


class HistoryQueryService:
    """Answer ``getHistory`` host messages with parsed hub history."""

    def __init__(
        self,
        pipeline: HistoryRequestPipeline,
        namespace: str,
        *,
        aggregator: Aggregator | None = None,
        default_limit: int = DEFAULT_LIMIT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._pipeline = pipeline
        self._namespace = namespace
        self._aggregator = aggregator
        self._default_limit = default_limit
        self._clock = clock

    async def async_handle_message(
        self, message: Mapping[str, Any], respond: Responder
    ) -> bool:
        """Dispatch a host message; return False for unsupported commands."""

        command = message.get("command")
        if command != COMMAND_GET_HISTORY:
            _LOGGER.debug("Ignoring unsupported command %r", command)
            return False
        await self.async_get_history(message.get("message") or {}, respond)
        return True

    async def async_get_history(
        self, message: Mapping[str, Any], respond: Responder
    ) -> None:
        """Request history for a host state and answer through ``respond``."""

        query = HistoryQuery.from_message(
            message,
            default_limit=self._default_limit,
            now_ms=self._clock() * 1000,
        )
        key = parse_host_id(query.id, self._namespace)
        _LOGGER.debug("getHistory for %s (%s): %s", query.id, key, query.as_options())

        async def _on_history(
            results: list[HistoryResult], error: Exception | None
        ) -> None:
            await self._async_respond(query, results, error, respond)

        await self._pipeline.async_request(
            key.hub_node_id,
            key.attribute,
            _on_history,
            start=query.start,
            end=query.end,
            limit=query.limit,
        )

    async def _async_respond(
        self,
        query: HistoryQuery,
        results: list[HistoryResult],
        error: Exception | None,
        respond: Responder,
    ) -> None:
        error_text = str(error) if error is not None else None
        if results and results[0].error:
            error_text = str(results[0].error)

        rows = parse_history_results(results, origin=self._namespace)
        if query.add_id:
            for row in rows:
                row["id"] = query.id

        if not rows:
            _LOGGER.info("No history data for %s", query.id)
            await _deliver(respond, {"result": [], "step": None, "error": error_text})
            return

        aggregator = self._aggregator
        if query.unaggregated or aggregator is None:
            if not query.unaggregated:
                _LOGGER.debug(
                    "No aggregator configured; returning raw rows for %s", query.id
                )
            await _deliver(
                respond,
                {"result": rows, "error": None, "sessionId": query.session_id},
            )
            return

        try:
            rows = await asyncio.to_thread(
                _aggregate, aggregator, query.as_options(), rows
            )
        except Exception as err:
            _LOGGER.exception("Aggregation of history for %s failed", query.id)
            await _deliver(respond, {"result": [], "step": None, "error": str(err)})
            return
        await _deliver(
            respond,
            {"result": rows, "error": error_text, "sessionId": query.session_id},
        )


def _aggregate(
    aggregator: Aggregator, options: dict[str, Any], rows: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    aggregator.init_aggregate(options)
    aggregator.aggregation(options, rows)
    return aggregator.finish_aggregation(options)


async def _deliver(respond: Responder, payload: dict[str, Any]) -> None:
    outcome = respond(payload)
    if inspect.isawaitable(outcome):
        await outcome


__all__ = ["Aggregator", "HistoryQuery", "HistoryQueryService", "Responder"]
