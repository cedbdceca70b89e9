#!/usr/bin/env python3
"""
logging_setup.py
================
Configures the root logger with a console handler and a rotating file
handler (``traffic_sim.log``, 1 MB, 2 backups), plus a dedicated debug
file for the ``world`` logger's per-tick dumps.

Call :func:`setup_logging` once at startup before any other ``import``
triggers ``logging.getLogger()``.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


def setup_logging(
    level: int = logging.INFO,
    log_file: str = "traffic_sim.log",
    world_debug_file: Optional[str] = "world_debug.log",
) -> None:
    """Apply a unified log format to both console and file output.

    Parameters
    ----------
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    log_file : str
        Path of the rotating main log file.
    world_debug_file : str or None
        Path of the ``world`` tick dump; *None* disables it.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
    fh.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)
    root.addHandler(fh)

    # ── Dedicated debug file for the world tick dump ──────────────────
    world_logger = logging.getLogger("world")
    for handler in list(world_logger.handlers):
        world_logger.removeHandler(handler)
        handler.close()
    if world_debug_file is None:
        world_logger.setLevel(logging.NOTSET)
        return
    world_logger.setLevel(logging.DEBUG)
    dfh = RotatingFileHandler(
        world_debug_file, maxBytes=5_000_000, backupCount=2
    )
    dfh.setLevel(logging.DEBUG)
    dfh.setFormatter(fmt)
    world_logger.addHandler(dfh)
    # The root handlers still only see records at the configured level.
    ch.setLevel(level)
    fh.setLevel(level)
