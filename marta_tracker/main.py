"""Process entry point for the MARTA arrivals tracker."""

from __future__ import annotations

import json
import logging

from marta_tracker.config import load_config
from marta_tracker.data.arrival_log import ArrivalLog
from marta_tracker.data.marta_client import MartaClient
from marta_tracker.data.watermark_store import WatermarkStore
from marta_tracker.errors import StartupError
from marta_tracker.logging_setup import setup_logging
from marta_tracker.logic.scheduler import ArrivalScheduler

logger = logging.getLogger("marta_tracker")


def main() -> int:
    try:
        config = load_config()
    except ValueError as exc:
        setup_logging()
        logger.critical("[startup] %s", exc)
        return 1
    setup_logging(config.log.level)

    try:
        arrivals_log = ArrivalLog.open(config.log.arrivals_log)
    except StartupError as exc:
        logger.critical("[%s] %s", exc.category, exc)
        return 1

    client = MartaClient(
        config.marta.request_url,
        retry_max=config.marta.retry_max,
        timeout_seconds=config.marta.timeout_seconds,
    )
    store = WatermarkStore.from_url(config.store.redis_url, key=config.store.watermark_key)
    scheduler = ArrivalScheduler(
        client=client,
        store=store,
        log=arrivals_log,
        poll_interval_seconds=config.marta.poll_interval_seconds,
        near_term_seconds=config.marta.near_term_seconds,
    )

    logger.info(
        "tracker_config %s",
        json.dumps(
            {
                "request_url": config.marta.request_url,
                "poll_interval_seconds": config.marta.poll_interval_seconds,
                "near_term_seconds": config.marta.near_term_seconds,
                "retry_max": config.marta.retry_max,
                "watermark_key": config.store.watermark_key,
                "arrivals_log": config.log.arrivals_log,
            }
        ),
    )

    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        client.close()
        store.close()
        arrivals_log.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
