"""Mini README: Application-wide logging helpers for LandTrack.

Structure:
    * configure_root_logger - one-off root handler setup with a readable format.
    * get_logger - factory returning module loggers with the baseline applied.

Usage:
    Modules call ``get_logger(__name__)`` once at import time and keep the
    result in a module-level ``LOGGER``. Configuration happens exactly once
    per process so reloading modules during development never stacks
    duplicate handlers on the root logger.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

_LOGGER_INITIALISED = False


def configure_root_logger(level: Union[int, str, None] = None) -> None:
    """Attach a single stream handler to the root logger.

    Later calls only adjust the level, and only when one is given.
    """

    global _LOGGER_INITIALISED
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if _LOGGER_INITIALISED:
        if level is not None:
            logging.getLogger().setLevel(level)
        return
    if level is None:
        level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    configure_root_logger()
    return logging.getLogger(name)
