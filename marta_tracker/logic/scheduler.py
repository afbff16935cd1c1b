"""Watermark-gated loop that appends near-term arrivals to the arrivals log."""

from __future__ import annotations

from concurrent.futures import Future
from datetime import datetime
import logging
import threading
from typing import Callable

from marta_tracker.data.arrival_log import ArrivalLog
from marta_tracker.data.marta_client import MartaClient
from marta_tracker.data.models import WriteResult
from marta_tracker.data.watermark_store import WatermarkStore
from marta_tracker.errors import NoDataError, StoreUnavailableError, TrackerError
from marta_tracker.logic.arrival_filter import NEAR_TERM_THRESHOLD_SECONDS, filter_arrivals

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10


def local_now() -> datetime:
    return datetime.now().astimezone()


class ArrivalScheduler:
    """Runs at most one fetch/filter/append attempt at a time, gated by a watermark.

    Each attempt runs on its own thread and reports back through a single-use
    future; the loop blocks on that future before it looks at the watermark
    again, so the log file and the store are never written concurrently.
    """

    def __init__(
        self,
        client: MartaClient,
        store: WatermarkStore,
        log: ArrivalLog,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        near_term_seconds: int = NEAR_TERM_THRESHOLD_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._log = log
        self._poll_interval_seconds = poll_interval_seconds
        self._near_term_seconds = near_term_seconds
        self._clock = clock or local_now
        self._watermark: datetime | None = None
        self._in_flight: Future[WriteResult] | None = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def write_filtered_arrivals(self) -> int:
        """Fetch, filter and append one batch, then advance the watermark."""
        records = self._client.fetch_arrivals()
        arrivals = filter_arrivals(records, self._near_term_seconds)
        if not arrivals:
            raise NoDataError("no data to log")

        written = self._log.append(arrivals)
        self._store.set(self._clock())
        return written

    def start_write_attempt(self) -> Future[WriteResult]:
        """Run one write attempt on a worker thread and return its completion signal."""
        with self._lock:
            if self._in_flight is not None and not self._in_flight.done():
                raise RuntimeError("a write attempt is already in flight")
            future: Future[WriteResult] = Future()
            future.set_running_or_notify_cancel()
            self._in_flight = future

        thread = threading.Thread(
            target=self._run_attempt, args=(future,), name="arrival-write", daemon=True
        )
        thread.start()
        return future

    def _run_attempt(self, future: Future[WriteResult]) -> None:
        try:
            written = self.write_filtered_arrivals()
        except TrackerError as exc:
            future.set_result(
                WriteResult(success=False, error=exc, written=0, finished_at=self._clock())
            )
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(
                WriteResult(success=True, error=None, written=written, finished_at=self._clock())
            )

    def _read_watermark(self, now: datetime) -> datetime:
        try:
            return self._store.get()
        except TrackerError as exc:
            logger.warning("Watermark unavailable (%s); treating as due now", exc)

        try:
            self._store.set(now)
        except StoreUnavailableError as exc:
            logger.error("[%s] could not initialize watermark: %s", exc.category, exc)
        return now

    def run_once(self) -> WriteResult | None:
        """Evaluate the watermark and, if due, run one write attempt to completion."""
        now = self._clock()
        self._watermark = self._read_watermark(now)
        if now < self._watermark:
            logger.debug("Not due until %s", self._watermark.isoformat())
            return None

        result = self.start_write_attempt().result()
        if result.success:
            logger.info(
                "Logged %d near-term arrivals at %s",
                result.written,
                result.finished_at.isoformat(),
            )
        else:
            error = result.error
            logger.error("[%s] write not completed: %s", error.category, error)
        return result

    def _next_delay(self, result: WriteResult | None) -> float:
        if result is not None or self._watermark is None:
            return self._poll_interval_seconds
        remaining = (self._watermark - self._clock()).total_seconds()
        return max(0.0, min(remaining, self._poll_interval_seconds))

    def run_forever(self) -> None:
        """Run the loop on the calling thread until :meth:`stop` is called."""
        self._stop_event.clear()
        self._run_loop()

    def start(self) -> None:
        """Start the loop on a background thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="arrival-scheduler", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal the loop to stop after the current cycle."""
        self._stop_event.set()

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            result = self.run_once()
            self._stop_event.wait(timeout=self._next_delay(result))


__all__ = ["ArrivalScheduler", "DEFAULT_POLL_INTERVAL_SECONDS", "local_now"]
