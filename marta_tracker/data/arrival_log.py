"""Append-only JSON-lines log of near-term arrivals."""

from __future__ import annotations

import json
import os
from typing import IO, Sequence

from marta_tracker.data.models import NearTermArrival
from marta_tracker.errors import LogWriteError, MarshalError, StartupError


def serialize_arrivals(arrivals: Sequence[NearTermArrival]) -> str:
    """Render a batch as one compact JSON array."""
    try:
        line = json.dumps(
            [arrival.to_json() for arrival in arrivals],
            ensure_ascii=False,
            separators=(",", ":"),
        )
        # Lone surrogates survive json.loads but cannot be written as UTF-8.
        line.encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise MarshalError(f"can't be marshalled: {exc}") from exc
    return line


class ArrivalLog:
    """Single append-mode handle shared for the life of the process."""

    def __init__(self, handle: IO[str], path: str) -> None:
        self._handle = handle
        self.path = path

    @classmethod
    def open(cls, path: str) -> ArrivalLog:
        try:
            handle = open(path, "a", encoding="utf-8")
        except OSError as exc:
            raise StartupError(f"cannot open arrivals log {path}: {exc}") from exc
        return cls(handle, path)

    def append(self, arrivals: Sequence[NearTermArrival]) -> int:
        """Write one line for the batch and sync it to disk; returns records written."""
        line = serialize_arrivals(arrivals)
        try:
            self._handle.write(line + "\n")
            self._handle.flush()
            os.fsync(self._handle.fileno())
        except OSError as exc:
            raise LogWriteError(f"write to {self.path} failed: {exc}") from exc
        return len(arrivals)

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> ArrivalLog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["ArrivalLog", "serialize_arrivals"]
