"""Logging configuration for mdshelf."""

import sys
from pathlib import Path

from loguru import logger


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Send loguru output to stderr, and optionally to a rotating log file.

    The file sink always records DEBUG so a quiet terminal session can still
    be diagnosed afterwards.
    """
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
    if log_file is not None:
        logger.add(
            log_file,
            level="DEBUG",
            rotation="1 MB",
            retention=3,
            encoding="utf-8",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}",
        )
