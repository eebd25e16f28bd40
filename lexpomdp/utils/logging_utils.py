"""
Logging helpers shared by the solver, the rollout code and the scripts.
"""

import logging
import sys
from typing import Optional
from lexpomdp.config import Config


def setup_logger(
    name: str,
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Attach a stdout handler to the named logger.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (defaults to Config.LOG_LEVEL)
        format_string: Custom format string (defaults to Config.LOG_FORMAT)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # One handler per logger, even when called repeatedly
    if logger.handlers:
        return logger

    level = level or Config.LOG_LEVEL
    format_string = format_string or Config.LOG_FORMAT
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(format_string))

    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, configuring it on first use."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        return setup_logger(name)

    return logger
