from __future__ import annotations

import logging
from logging.config import dictConfig

from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = settings.log_level
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "app": {"handlers": ["console"], "level": level, "propagate": False},
            },
        }
    )
