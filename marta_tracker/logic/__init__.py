"""Filtering and scheduling."""

from marta_tracker.logic.arrival_filter import filter_arrivals
from marta_tracker.logic.scheduler import ArrivalScheduler

__all__ = ["ArrivalScheduler", "filter_arrivals"]
