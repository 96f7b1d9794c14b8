"""Tests for history series parsing."""

from __future__ import annotations

import pytest

from homee_bridge.codecs.homee_models import HistoryResult, HistorySeries
from homee_bridge.history import (
    normalize_timestamp,
    parse_history_results,
    parse_history_series,
)


def _series(values, columns=("time", "value"), **kwargs) -> HistorySeries:
    return HistorySeries(columns=list(columns), values=values, **kwargs)


def test_series_rows_are_prepended_in_reverse_order() -> None:
    """Newest-first source rows end up oldest-first."""

    rows = parse_history_series(
        _series([[1_700_000_300, 3], [1_700_000_200, 2], [1_700_000_100, 1]]),
        origin="homee.0",
    )

    assert [row["val"] for row in rows] == [1, 2, 3]
    assert rows[0] == {"val": 1, "ts": 1_700_000_100_000, "ack": True, "from": "homee.0"}


def test_columns_are_resolved_by_name() -> None:
    rows = parse_history_series(
        _series([[7.5, 1_700_000_000_000]], columns=("value", "time")),
        origin="homee.0",
    )

    assert rows == [
        {"val": 7.5, "ts": 1_700_000_000_000, "ack": True, "from": "homee.0"}
    ]


@pytest.mark.parametrize(
    "series",
    [
        HistorySeries(error="db down", columns=["time", "value"], values=[[1, 2]]),
        HistorySeries(columns=None, values=[[1, 2]]),
        HistorySeries(columns=["time", "value"], values=None),
        HistorySeries(columns=["time", "mean"], values=[[1, 2]]),
    ],
)
def test_unusable_series_leave_accumulator_unchanged(series: HistorySeries) -> None:
    existing = [{"val": 0, "ts": 1, "ack": True, "from": "homee.0"}]

    assert parse_history_series(series, existing, origin="homee.0") == existing


def test_parse_results_is_chronological_for_unordered_input() -> None:
    """Mixed row order across series still yields non-decreasing timestamps."""

    result = HistoryResult(
        series=[
            _series([[1_700_000_200, "b"], [1_700_000_400, "d"]]),
            _series([[1_700_000_100, "a"], [1_700_000_300, "c"], [1_700_000_300, "c2"]]),
        ]
    )

    rows = parse_history_results([result], origin="homee.0")
    timestamps = [row["ts"] for row in rows]

    assert timestamps == sorted(timestamps)
    assert [row["val"] for row in rows][:2] == ["a", "b"]
    assert len(rows) == 5


def test_parse_results_without_series() -> None:
    assert parse_history_results([], origin="homee.0") == []
    assert parse_history_results([HistoryResult(error="x")], origin="homee.0") == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (1_700_000_000, 1_700_000_000_000),
        (1_700_000_000_123, 1_700_000_000_123),
        ("1700000000", 1_700_000_000_000),
        ("2023-11-14T22:13:20Z", 1_700_000_000_000),
        ("2023-11-14T22:13:20", 1_700_000_000_000),
        ("yesterday", None),
        (None, None),
        (True, None),
    ],
)
def test_normalize_timestamp(raw, expected) -> None:
    assert normalize_timestamp(raw) == expected
