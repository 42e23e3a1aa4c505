"""Logging setup for the agent process."""

from __future__ import annotations

import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level> | {extra}"
)


def setup_logging(level: str = "INFO", json: bool = False) -> None:
    """Replace loguru's default sink with a single stdout sink.

    Args:
        level: Minimum level to emit
        json: Emit one serialized JSON record per line instead of text
    """
    logger.remove()
    if json:
        logger.add(sys.stdout, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stdout, level=level.upper(), format=_FORMAT)
