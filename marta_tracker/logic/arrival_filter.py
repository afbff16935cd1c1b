"""Near-term arrival filtering."""

from __future__ import annotations

import re
from typing import Iterable

from marta_tracker.data.models import ArrivalRecord, NearTermArrival
from marta_tracker.errors import ArrivalParseError

NEAR_TERM_THRESHOLD_SECONDS = 120

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_waiting_seconds(raw: str) -> int:
    """Parse an upstream waiting time; only plain decimal integers are accepted."""
    if not _INTEGER_RE.fullmatch(raw):
        raise ArrivalParseError(f"string to int failure: {raw!r}")
    return int(raw)


def filter_arrivals(
    records: Iterable[ArrivalRecord],
    threshold_seconds: int = NEAR_TERM_THRESHOLD_SECONDS,
) -> list[NearTermArrival]:
    """Keep arrivals due in strictly less than ``threshold_seconds``, in input order.

    A single unparseable waiting time rejects the whole batch.
    """
    kept: list[NearTermArrival] = []
    for record in records:
        waiting = parse_waiting_seconds(record.waiting_seconds)
        if waiting < threshold_seconds:
            kept.append(NearTermArrival(record=record, waiting_seconds=waiting))
    return kept


__all__ = ["NEAR_TERM_THRESHOLD_SECONDS", "filter_arrivals", "parse_waiting_seconds"]
