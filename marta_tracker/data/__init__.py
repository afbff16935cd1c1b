"""Upstream client, persistence and record types."""

from marta_tracker.data.arrival_log import ArrivalLog
from marta_tracker.data.marta_client import MartaClient
from marta_tracker.data.models import ArrivalRecord, NearTermArrival, WriteResult
from marta_tracker.data.watermark_store import WatermarkStore

__all__ = [
    "ArrivalLog",
    "ArrivalRecord",
    "MartaClient",
    "NearTermArrival",
    "WatermarkStore",
    "WriteResult",
]
