"""Utilities to configure consistent logging across the pipeline."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(log_path: Path | None = None, level: int = logging.INFO) -> None:
    """Configure root logging handlers and formatting.

    Console output goes to stderr; stdout is reserved for command output.
    Handlers installed by a previous call are replaced.

    Args:
        log_path: Optional path to a file where logs will be written.
        level: Logging level (defaults to INFO).
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
