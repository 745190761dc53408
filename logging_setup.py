#!/usr/bin/env python3
"""
logging_setup.py
================
Configures the root logger of one simulator process with a console
handler and a rotating file handler (``log/<process>.log``, 1 MB,
2 backups).

Call :func:`setup_logging` once at process start, before the first
record is emitted.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import config


def setup_logging(
    process_name: str,
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
) -> None:
    """Apply a unified log format to both console and file output.

    Parameters
    ----------
    process_name : str
        Name of the process (``coordinator``, ``drone`` …); also the log
        file stem.
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    log_dir : str or None
        Directory for log files; ``<project>/log`` when omitted.
    """
    log_dir = log_dir or os.path.join(config.PROJECT_ROOT, config.LOG_DIR_REL_PATH)
    os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    fh = RotatingFileHandler(
        os.path.join(log_dir, f"{process_name}.log"),
        maxBytes=1_000_000,
        backupCount=2,
    )
    fh.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)
    root.addHandler(fh)

    # ── Dedicated debug file for collision / scoring events ───────────
    world_logger = logging.getLogger("world")
    world_logger.setLevel(logging.DEBUG)
    world_logger.handlers.clear()
    dfh = RotatingFileHandler(
        os.path.join(log_dir, "world_debug.log"),
        maxBytes=5_000_000,
        backupCount=2,
    )
    dfh.setLevel(logging.DEBUG)
    dfh.setFormatter(fmt)
    world_logger.addHandler(dfh)

    logging.getLogger(process_name).info("--- %s started (pid=%d) ---", process_name, os.getpid())
