# app/core/logging_setup.py
from __future__ import annotations

import logging
import sys
from typing import Optional

CONSOLE_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the "app" logger tree once.

    Console handler always; file handler only when LOG_FILE is set.
    Calling it again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger("app")
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    for h in list(logger.handlers):
        logger.removeHandler(h)

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(ch)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(fh)

    logger.propagate = False
    return logger
