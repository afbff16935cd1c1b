"""Console logging with API key redaction."""

from __future__ import annotations

import logging
import re
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class APIKeyFilter(logging.Filter):
    """Filter to remove API keys from log messages."""

    def __init__(self, name: str = "", mask: str = "[REDACTED]") -> None:
        super().__init__(name)
        self.mask = mask
        self.patterns = [
            re.compile(r"api_?key=([^&\s\"']+)", re.IGNORECASE),
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        # Args may be exceptions that embed the request URL.
        message = record.getMessage()
        sanitized = self._sanitize_message(message)
        if sanitized != message:
            record.msg = sanitized
            record.args = ()
        return True

    def _sanitize_message(self, message: str) -> str:
        for pattern in self.patterns:
            message = pattern.sub(
                lambda m: m.group(0).replace(m.group(1), self.mask), message
            )
        return message


def _ensure_api_filter(logger: logging.Logger) -> None:
    if not any(isinstance(f, APIKeyFilter) for f in logger.filters):
        logger.addFilter(APIKeyFilter())

    for handler in logger.handlers:
        if not any(isinstance(f, APIKeyFilter) for f in handler.filters):
            handler.addFilter(APIKeyFilter())


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the root logger for console output.

    Safe to call more than once; the console handler is only added the
    first time.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    root = logging.getLogger()
    root.setLevel(numeric_level)
    if not any(getattr(h, "_marta_console", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._marta_console = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    _ensure_api_filter(root)
    return root
