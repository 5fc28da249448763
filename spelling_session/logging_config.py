"""
Logging setup for the spelling session engine.

Console output always; a rotating file under ``LOG_DIR`` when requested.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from spelling_session.config import LOG_DIR

LOGGER_NAME = "spelling_session"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(module)s: %(message)s"


def configure_logging(
    log_level: str | None = None,
    *,
    log_dir: Path | None = None,
    to_file: bool = False,
) -> logging.Logger:
    level_name = (log_level or os.getenv("SPELLING_SESSION_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if to_file:
        target_dir = log_dir or LOG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            target_dir / "spelling_session.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
