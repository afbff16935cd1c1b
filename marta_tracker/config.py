"""Configuration loader for the MARTA arrivals tracker."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Any

from dotenv import load_dotenv
import yaml

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = (
    "http://developer.itsmarta.com/RealtimeTrain/RestServiceNextTrain/"
    "GetRealtimeArrivals?apikey={api_key}"
)
DEFAULT_POLL_INTERVAL_SECONDS = 10
DEFAULT_NEAR_TERM_SECONDS = 120
DEFAULT_RETRY_MAX = 15
DEFAULT_TIMEOUT_SECONDS = 10
DEFAULT_WATERMARK_KEY = "lastWrite"


@dataclass(frozen=True)
class MartaConfig:
    """MARTA realtime API configuration."""

    api_key: str
    base_url: str
    poll_interval_seconds: float
    near_term_seconds: int
    retry_max: int
    timeout_seconds: float

    @property
    def request_url(self) -> str:
        return self.base_url.format(api_key=self.api_key)


@dataclass(frozen=True)
class StoreConfig:
    """Key-value store holding the last-write watermark."""

    redis_url: str
    watermark_key: str


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    arrivals_log: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    marta: MartaConfig
    store: StoreConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = _require_key(data, name, name)
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' config must be a mapping")
    return section


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file and the environment."""
    if not load_dotenv():
        logger.warning("error loading .env file")
    api_key = os.environ.get("API_KEY", "")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    marta_section = _section(data, "marta")
    store_section = _section(data, "store")
    logging_section = _section(data, "logging")

    base_url = marta_section.get("base_url", DEFAULT_BASE_URL)
    if "{api_key}" not in base_url:
        raise ValueError("'marta.base_url' must contain an '{api_key}' placeholder")

    marta = MartaConfig(
        api_key=api_key,
        base_url=base_url,
        poll_interval_seconds=marta_section.get(
            "poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS
        ),
        near_term_seconds=marta_section.get("near_term_seconds", DEFAULT_NEAR_TERM_SECONDS),
        retry_max=marta_section.get("retry_max", DEFAULT_RETRY_MAX),
        timeout_seconds=marta_section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
    )

    store = StoreConfig(
        redis_url=_require_key(store_section, "redis_url", "store"),
        watermark_key=store_section.get("watermark_key", DEFAULT_WATERMARK_KEY),
    )

    logging_config = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        arrivals_log=_require_key(logging_section, "arrivals_log", "logging"),
    )

    return AppConfig(marta=marta, store=store, log=logging_config)
