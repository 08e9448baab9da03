"""
Central logging configuration for calendarseal.

Streams colorized records to stderr and caps verbose third-party loggers so
that per-feed counts and the final summary stay readable.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

# HH:MM:SS  LEVEL   logger.name: message; only the level is colorized
LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

# Third-party libraries that generate excessive debug logs
THIRD_PARTY_LEVELS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "icalendar": logging.WARNING,
    "charset_normalizer": logging.WARNING,
}


def _env_debug() -> bool:
    return os.getenv("CALENDARSEAL_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def configure_logging(level_name: Optional[str] = None, debug_mode: bool = False) -> int:
    """Configure console logging for a calendarseal run.

    Args:
        level_name: Level name such as "INFO"; unknown names fall back to INFO
        debug_mode: Force DEBUG for calendarseal loggers

    Environment Variables:
        CALENDARSEAL_DEBUG: Set to '1', 'true', 'yes' to force debug logging

    Returns:
        The effective root level
    """
    if debug_mode or _env_debug():
        level_name = "DEBUG"

    level = logging.INFO
    if isinstance(level_name, str):
        candidate = logging.getLevelName(level_name.upper())
        if isinstance(candidate, int):
            level = candidate

    root = logging.getLogger()
    # Only add a handler once to avoid duplicate output
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
        root.addHandler(handler)
    root.setLevel(level)

    for logger_name, third_party_level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(logger_name).setLevel(max(level, third_party_level))
    logging.getLogger("calendarseal").setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )
    return level
