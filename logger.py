"""
Logging configuration for CarShare ledger.
Console sink plus an optional rotating file sink.
"""
from __future__ import annotations
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None
) -> None:
    """
    Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
    """
    log_level = log_level.upper()

    # Remove default loguru handler
    logger.remove()

    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=False
    )

    if log_file:
        logger.add(
            str(log_file),
            format=LOG_FORMAT,
            level=log_level,
            rotation="1 week",
            retention="30 days",
            backtrace=True,
            diagnose=False
        )

    logger.debug(f"Logging configured - Level: {log_level}")

