"""Logging setup"""

import logging
from typing import Optional

from splitledger.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure the package logger from settings.

    Args:
        settings: Settings to read log_level/debug from (default: cached settings)
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)

    logger = logging.getLogger("splitledger")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
