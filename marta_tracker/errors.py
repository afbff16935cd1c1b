"""Error types raised while fetching, filtering and persisting arrivals."""

from __future__ import annotations

NETWORK = "network"
DATA = "data"
EMPTY = "empty"
PERSISTENCE = "persistence"
STARTUP = "startup"


class TrackerError(Exception):
    """Base class for every failure the tracker reports to the operator."""

    category = DATA


class UnreachableError(TrackerError):
    """The upstream API could not be reached, even after retrying."""

    category = NETWORK


class ReadError(TrackerError):
    """The upstream response body could not be read."""

    category = NETWORK


class DecodeError(TrackerError):
    """The upstream response body was not a JSON array of arrivals."""


class ArrivalParseError(TrackerError):
    """A waiting-time field was not an integer."""


class MarshalError(TrackerError):
    """A batch of arrivals could not be serialized."""


class NoDataError(TrackerError):
    """No arrival qualified for logging."""

    category = EMPTY


class LogWriteError(TrackerError):
    """Appending to the arrivals log failed."""

    category = PERSISTENCE


class WatermarkNotFoundError(TrackerError):
    category = PERSISTENCE


class WatermarkParseError(TrackerError):
    category = PERSISTENCE


class StoreUnavailableError(TrackerError):
    category = PERSISTENCE


class StartupError(TrackerError):
    """A resource required before the loop can run is unavailable."""

    category = STARTUP
