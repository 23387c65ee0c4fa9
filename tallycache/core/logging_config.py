"""Logging setup for the tallycache logger hierarchy."""

from __future__ import annotations

import logging
import os
import sys

LOGGER_NAME = "tallycache"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_CONFIGURED = False


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``tallycache`` logger once.

    ``level`` wins over ``TALLYCACHE_LOG_LEVEL`` (default: WARNING). Later
    calls only adjust the level.
    """
    global _CONFIGURED

    level_name = (level or os.getenv("TALLYCACHE_LOG_LEVEL", "WARNING")).upper()
    resolved = getattr(logging, level_name, logging.WARNING)
    if not isinstance(resolved, int):
        resolved = logging.WARNING

    cache_logger = logging.getLogger(LOGGER_NAME)
    cache_logger.setLevel(resolved)

    if _CONFIGURED:
        for handler in cache_logger.handlers:
            handler.setLevel(resolved)
        return cache_logger
    _CONFIGURED = True

    if not cache_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        cache_logger.addHandler(handler)
    return cache_logger
