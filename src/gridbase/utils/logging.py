"""
Logging helpers for gridbase.

Modules call ``get_logger(__name__)``; scripts and the demo call
``configure_logging()`` once. gridbase only ever touches its own logger, never
root, and never writes log files.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL_ENV = "GRIDBASE_LOG_LEVEL"


def configure_logging(level: Optional[Union[str, int]] = None, *, force: bool = False) -> None:
    """Send gridbase records to stderr.

    ``level`` defaults to ``$GRIDBASE_LOG_LEVEL`` or INFO. A second call is a
    no-op unless ``force`` replaces the installed handlers.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("gridbase")
    logger.setLevel(level)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    elif any(isinstance(h, logging.StreamHandler) and h.stream is sys.stderr for h in logger.handlers):
        return

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger ``name``, or the package logger when omitted."""
    return logging.getLogger(name or "gridbase")
