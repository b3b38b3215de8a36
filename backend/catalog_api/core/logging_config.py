"""
Logging setup for the Catalog API.

Console logging is always on; file logging is enabled through settings.
"""

import logging
from pathlib import Path

from catalog_api.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger.

    Args:
        settings: Application settings (LOG_LEVEL, ENABLE_FILE_LOGGING, LOG_FILE).
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)

    if settings.ENABLE_FILE_LOGGING and settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        root = logging.getLogger()
        # Avoid adding the same file handler twice when the app is rebuilt
        for handler in root.handlers:
            if isinstance(handler, logging.FileHandler) and Path(
                handler.baseFilename
            ) == log_path.resolve():
                return

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
