"""
Utility modules for the lexicographic POMDP planner.
"""

from .logging_utils import setup_logger, get_logger

__all__ = [
    "setup_logger",
    "get_logger",
]
