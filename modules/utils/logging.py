"""Logging setup for the client and its coordinators."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from config.settings import AppConfig

LOGGER_NAME = "mini_code_copilot"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Coordinator and UI loggers all live under the ``modules`` package.
_APP_NAMESPACES = (LOGGER_NAME, "modules")

_installed: List[logging.Handler] = []


def _remove_installed_handlers() -> None:
    for name in _APP_NAMESPACES:
        logger = logging.getLogger(name)
        for handler in _installed:
            logger.removeHandler(handler)
    for handler in _installed:
        handler.close()
    _installed.clear()


def setup_logging(config: AppConfig) -> logging.Logger:
    """Attach file and console handlers to the application loggers.

    Safe to call more than once: handlers from an earlier call are replaced,
    so rebuilding the app does not duplicate log lines.
    """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    _remove_installed_handlers()
    formatter = logging.Formatter(LOG_FORMAT)
    _installed.extend(
        [
            logging.FileHandler(log_dir / "client.log", encoding="utf-8"),
            logging.StreamHandler(),
        ]
    )
    for handler in _installed:
        handler.setFormatter(formatter)

    for name in _APP_NAMESPACES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in _installed:
            logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger(LOGGER_NAME)
