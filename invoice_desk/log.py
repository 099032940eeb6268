"""Logging setup for Invoice Desk (loguru)."""
from __future__ import annotations
import sys
from typing import Optional
from loguru import logger


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Replace loguru's default sink with one at ``level``.

    If ``log_file`` is given, a rotating file sink is added as well.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    if log_file:
        logger.add(log_file, level=level.upper(), rotation="10 MB", retention=5)
