from __future__ import annotations

import pytest

from marta_tracker.data.models import ArrivalRecord, NearTermArrival
from marta_tracker.errors import ArrivalParseError
from marta_tracker.logic.arrival_filter import filter_arrivals, parse_waiting_seconds


def _record(train_id: str, waiting: str) -> ArrivalRecord:
    return ArrivalRecord(train_id=train_id, station="Five Points", waiting_seconds=waiting)


def test_keeps_only_arrivals_below_threshold() -> None:
    records = [_record("101", "45"), _record("102", "300")]

    kept = filter_arrivals(records)

    assert kept == [NearTermArrival(record=records[0], waiting_seconds=45)]


def test_threshold_is_exclusive() -> None:
    records = [_record("a", "119"), _record("b", "120"), _record("c", "121")]

    kept = filter_arrivals(records)

    assert [a.record.train_id for a in kept] == ["a"]


def test_preserves_input_order() -> None:
    records = [_record(str(i), str(w)) for i, w in enumerate([90, 5, 200, 0, 119, 60])]

    kept = filter_arrivals(records)

    assert [a.record.train_id for a in kept] == ["0", "1", "3", "4", "5"]
    assert [a.waiting_seconds for a in kept] == [90, 5, 0, 119, 60]


def test_all_below_threshold_returned_unchanged() -> None:
    records = [_record("1", "10"), _record("2", "20")]

    assert [a.record for a in filter_arrivals(records)] == records


def test_empty_when_nothing_qualifies() -> None:
    assert filter_arrivals([_record("1", "500")]) == []
    assert filter_arrivals([]) == []


def test_custom_threshold() -> None:
    kept = filter_arrivals([_record("1", "30"), _record("2", "60")], threshold_seconds=60)

    assert [a.record.train_id for a in kept] == ["1"]


def test_non_numeric_waiting_time_fails_whole_batch() -> None:
    records = [_record("1", "10"), _record("2", "Arriving"), _record("3", "20")]

    with pytest.raises(ArrivalParseError):
        filter_arrivals(records)


@pytest.mark.parametrize("raw", ["", " 45", "45 ", "4_5", "4.5", "0x10", "--1", "١٢"])
def test_parse_waiting_seconds_rejects(raw: str) -> None:
    with pytest.raises(ArrivalParseError):
        parse_waiting_seconds(raw)


@pytest.mark.parametrize(("raw", "expected"), [("0", 0), ("045", 45), ("+7", 7), ("-3", -3)])
def test_parse_waiting_seconds_accepts(raw: str, expected: int) -> None:
    assert parse_waiting_seconds(raw) == expected
