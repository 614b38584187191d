"""Logging setup for the crawler CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure root logging to the console and, optionally, a file.

    Args:
        verbose: Log DEBUG lines (skipped downloads, label disagreements).
        log_file: Extra file to append log lines to; its directory is created.

    Returns:
        The `tree_crawler` package logger.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO; the fetcher already does that.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("tree_crawler")
