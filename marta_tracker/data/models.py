"""Record types passed between the fetcher, filter and arrival log."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from marta_tracker.errors import DecodeError, TrackerError

ARRIVAL_FIELDS = ("train_id", "station", "waiting_seconds")


@dataclass(frozen=True)
class ArrivalRecord:
    """One train's upcoming arrival at one station, as sent upstream.

    The upstream API encodes ``waiting_seconds`` as a string; it stays a
    string here and is only parsed by the arrival filter.
    """

    train_id: str
    station: str
    waiting_seconds: str

    @classmethod
    def from_json(cls, obj: Any) -> ArrivalRecord:
        if not isinstance(obj, dict):
            raise DecodeError(f"can't unmarshal json: expected object, got {type(obj).__name__}")
        values = {}
        for field in ARRIVAL_FIELDS:
            value = obj.get(field)
            if not isinstance(value, str):
                raise DecodeError(f"can't unmarshal json: '{field}' must be a string")
            values[field] = value
        return cls(**values)

    def to_json(self) -> dict[str, str]:
        return {
            "train_id": self.train_id,
            "station": self.station,
            "waiting_seconds": self.waiting_seconds,
        }


@dataclass(frozen=True)
class NearTermArrival:
    """An arrival whose waiting time has been parsed and is under the threshold."""

    record: ArrivalRecord
    waiting_seconds: int

    def to_json(self) -> dict[str, str]:
        return self.record.to_json()


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a single write attempt."""

    success: bool
    error: TrackerError | None
    written: int
    finished_at: datetime


__all__ = ["ARRIVAL_FIELDS", "ArrivalRecord", "NearTermArrival", "WriteResult"]
