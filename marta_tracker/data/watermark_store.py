"""Persistence for the last successful write time."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import re

import redis

from marta_tracker.errors import (
    StoreUnavailableError,
    WatermarkNotFoundError,
    WatermarkParseError,
)

logger = logging.getLogger(__name__)

DEFAULT_WATERMARK_KEY = "lastWrite"

# 2006-01-02 15:04:05.123456000 -0500 EST
_WATERMARK_RE = re.compile(
    r"(?P<date>[0-9]{4}-[0-9]{2}-[0-9]{2}) (?P<time>[0-9]{2}:[0-9]{2}:[0-9]{2})"
    r"(?:\.(?P<frac>[0-9]{1,9}))?"
    r" (?P<sign>[+-])(?P<hours>[0-9]{2})(?P<minutes>[0-9]{2}) (?P<zone>\S+)"
)


def _offset_string(offset: timedelta) -> str:
    sign = "-" if offset < timedelta(0) else "+"
    total_minutes = abs(int(offset.total_seconds())) // 60
    return f"{sign}{total_minutes // 60:02d}{total_minutes % 60:02d}"


def format_watermark(moment: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DD HH:MM:SS.fffffffff ±HHMM ZZZ``."""
    offset = moment.utcoffset()
    if offset is None:
        raise ValueError("watermark timestamps must be timezone-aware")
    offset_text = _offset_string(offset)
    zone = moment.tzname()
    if not zone or any(ch.isspace() for ch in zone):
        zone = offset_text
    nanoseconds = moment.microsecond * 1000
    return f"{moment:%Y-%m-%d %H:%M:%S}.{nanoseconds:09d} {offset_text} {zone}"


def parse_watermark(text: str) -> datetime:
    """Parse a watermark string; the fractional part may carry 0 to 9 digits."""
    match = _WATERMARK_RE.fullmatch(text.strip())
    if not match:
        raise ValueError(f"unrecognized watermark format: {text!r}")

    minutes = int(match["hours"]) * 60 + int(match["minutes"])
    offset = timedelta(minutes=-minutes if match["sign"] == "-" else minutes)
    if abs(offset) >= timedelta(hours=24):
        raise ValueError(f"watermark offset out of range: {text!r}")

    frac = (match["frac"] or "").ljust(9, "0")
    base = datetime.strptime(f"{match['date']} {match['time']}", "%Y-%m-%d %H:%M:%S")
    return base.replace(
        microsecond=int(frac[:6]),
        tzinfo=timezone(offset, match["zone"]),
    )


class WatermarkStore:
    """Reads and writes the watermark under a single Redis key."""

    def __init__(self, client: redis.Redis, key: str = DEFAULT_WATERMARK_KEY) -> None:
        self._client = client
        self.key = key

    @classmethod
    def from_url(cls, url: str, key: str = DEFAULT_WATERMARK_KEY) -> WatermarkStore:
        return cls(redis.Redis.from_url(url, decode_responses=True), key=key)

    def get(self) -> datetime:
        try:
            raw = self._client.get(self.key)
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"watermark read failed: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise WatermarkParseError(f"watermark is not valid UTF-8: {exc}") from exc

        if raw is None:
            raise WatermarkNotFoundError(f"no watermark stored under '{self.key}'")
        try:
            return parse_watermark(raw)
        except ValueError as exc:
            raise WatermarkParseError(str(exc)) from exc

    def set(self, moment: datetime) -> None:
        value = format_watermark(moment)
        try:
            self._client.set(self.key, value)
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"watermark write failed: {exc}") from exc
        logger.debug("Watermark %s advanced to %s", self.key, value)

    def close(self) -> None:
        self._client.close()


__all__ = ["DEFAULT_WATERMARK_KEY", "WatermarkStore", "format_watermark", "parse_watermark"]
