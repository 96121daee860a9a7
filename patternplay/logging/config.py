"""Process-wide PatternPlay logger.

Engine components log through the logger installed here unless a controller
is handed its own. ``configure_logging`` builds it from ``PatternPlaySettings``
so ``PATTERNPLAY_LOG_LEVEL``, ``PATTERNPLAY_LOG_ENABLED`` and
``PATTERNPLAY_LOG_TIMESTAMPS`` take effect without code changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from patternplay.logging.logger import LogLevel, PatternPlayLogger

if TYPE_CHECKING:
    from patternplay.core.settings import PatternPlaySettings

_LEVEL_ALIASES = {"warn": "warning", "err": "error"}

_logger: PatternPlayLogger | None = None


def parse_level(value: LogLevel | str) -> LogLevel:
    """Resolve a level name, case-insensitive; ``warn`` and ``err`` are accepted.

    Raises:
        ValueError: If the name is not a known level.
    """
    if isinstance(value, LogLevel):
        return value
    name = value.strip().lower()
    name = _LEVEL_ALIASES.get(name, name)
    try:
        return LogLevel(name)
    except ValueError:
        choices = ", ".join(level.value for level in LogLevel)
        raise ValueError(f"Unknown log level '{value}'. Choose one of: {choices}.") from None


def get_logger() -> PatternPlayLogger:
    """Global logger, configured from environment settings on first use."""
    if _logger is None:
        return configure_logging()
    return _logger


def configure_logging(
    settings: PatternPlaySettings | None = None,
    *,
    console: Console | None = None,
) -> PatternPlayLogger:
    """Install a new global logger.

    Args:
        settings: Source of level, enabled and timestamp switches; the cached
            environment settings if None.
        console: Rich console to write to, e.g. the one driving a live
            display so log lines print above it. Standard error if None.

    Returns:
        The installed logger.

    Example:
        >>> configure_logging(PatternPlaySettings(log_level="debug"))
        >>> get_logger().run_start("routing", 8, "auto", 1.0)
    """
    global _logger

    if settings is None:
        from patternplay.core.settings import get_settings

        settings = get_settings()

    _logger = PatternPlayLogger(
        level=parse_level(settings.log_level),
        console=console,
        show_timestamps=settings.log_timestamps,
        enabled=settings.log_enabled,
    )
    return _logger
