"""Utility functions for task-query."""

import sys

from loguru import logger


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure loguru sinks.

    Args:
        level: Minimum level for all sinks
        log_file: Optional path of a rotating log file
    """
    logger.remove()
    logger.add(sys.stderr, level=level, colorize=True)

    if log_file:
        logger.add(log_file, level=level, rotation="2 MB", retention=3)

    logger.debug(f"Logging configured at level {level}")
