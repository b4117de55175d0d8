from __future__ import annotations

import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

# Third-party loggers that are chatty at INFO and only useful when debugging.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


# Centralized app logging configuration (format + level).
def configure_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
