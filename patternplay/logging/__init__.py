"""Logging module for PatternPlay.

Provides structured logging with Rich console support.
"""

from patternplay.logging.logger import LogLevel, PatternPlayLogger
from patternplay.logging.config import (
    configure_logging,
    get_logger,
    parse_level,
)

__all__ = [
    "LogLevel",
    "PatternPlayLogger",
    "get_logger",
    "configure_logging",
    "parse_level",
]
