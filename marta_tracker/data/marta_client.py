"""MARTA realtime train arrivals client."""

from __future__ import annotations

import json
import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from marta_tracker.data.models import ArrivalRecord
from marta_tracker.errors import DecodeError, ReadError, UnreachableError

logger = logging.getLogger(__name__)

# 408 on top of the usual transient statuses; 501 means the request will never work.
RETRY_STATUSES = frozenset({408, 429} | (set(range(500, 600)) - {501}))
RETRY_BACKOFF_FACTOR = 1.0
RETRY_BACKOFF_MAX = 30.0


def build_retry(
    retry_max: int,
    backoff_factor: float = RETRY_BACKOFF_FACTOR,
    backoff_max: float = RETRY_BACKOFF_MAX,
) -> Retry:
    """Retry policy for arrival requests: transient failures and request timeouts."""
    return Retry(
        total=retry_max,
        connect=retry_max,
        read=retry_max,
        status=retry_max,
        backoff_factor=backoff_factor,
        backoff_max=backoff_max,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET"}),
        respect_retry_after_header=True,
    )


class MartaClient:
    """Fetches realtime arrivals from the MARTA API using a retrying session."""

    def __init__(
        self,
        request_url: str,
        retry_max: int = 15,
        timeout_seconds: float = 10,
        backoff_factor: float = RETRY_BACKOFF_FACTOR,
    ) -> None:
        self._request_url = request_url
        self._timeout_seconds = timeout_seconds
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        adapter = HTTPAdapter(max_retries=build_retry(retry_max, backoff_factor))
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def fetch_arrivals(self) -> list[ArrivalRecord]:
        """Fetch every realtime arrival currently reported by the API."""
        try:
            response = self.session.get(
                self._request_url, timeout=self._timeout_seconds, stream=True
            )
        except requests.RequestException as exc:
            logger.debug("Arrivals request failed: %s", exc)
            raise UnreachableError(f"server unreachable: {exc}") from exc

        try:
            body = response.content
        except requests.RequestException as exc:
            raise ReadError(f"can't read content: {exc}") from exc
        finally:
            response.close()

        return self._decode(body, response.status_code)

    @staticmethod
    def _decode(body: bytes, status_code: int) -> list[ArrivalRecord]:
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"can't unmarshal json (status {status_code}): {exc}") from exc

        if payload is None:
            return []
        if not isinstance(payload, list):
            raise DecodeError(
                f"can't unmarshal json (status {status_code}): "
                f"expected array, got {type(payload).__name__}"
            )
        return [ArrivalRecord.from_json(item) for item in payload]

    def close(self) -> None:
        self.session.close()


__all__ = ["MartaClient", "RETRY_STATUSES", "build_retry"]
