"""PatternPlay logger implementation."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Get numeric rank for comparison."""
        ranks = {"debug": 0, "info": 1, "warning": 2, "error": 3}
        return ranks[self.value]


class PatternPlayLogger:
    """Structured logger for PatternPlay.

    Provides Rich-formatted logging for simulated pattern runs.

    Example:
        >>> logger = PatternPlayLogger(level=LogLevel.DEBUG)
        >>> logger.info("Pattern loaded", pattern="react-agent")
        >>> logger.node_start("llm1", "LLM 1 (Reason)")
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        console: Console | None = None,
        show_timestamps: bool = True,
        show_level: bool = True,
        enabled: bool = True,
    ) -> None:
        """Initialize logger.

        Args:
            level: Minimum log level to display.
            console: Rich console instance (created if None).
            show_timestamps: Whether to show timestamps.
            show_level: Whether to show log level.
            enabled: Whether logging is enabled.
        """
        self._level = level
        self._console = console or Console(stderr=True)
        self._show_timestamps = show_timestamps
        self._show_level = show_level
        self._enabled = enabled

    @property
    def level(self) -> LogLevel:
        """Current log level."""
        return self._level

    @level.setter
    def level(self, value: LogLevel) -> None:
        """Set log level."""
        self._level = value

    @property
    def enabled(self) -> bool:
        """Whether logging is enabled."""
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        """Enable or disable logging."""
        self._enabled = value

    def _should_log(self, level: LogLevel) -> bool:
        """Check if message should be logged."""
        return self._enabled and level.rank >= self._level.rank

    def _format_prefix(self, level: LogLevel) -> str:
        """Format log prefix with timestamp and level."""
        parts = []

        if self._show_timestamps:
            timestamp = datetime.now().strftime("%H:%M:%S")
            parts.append(f"[dim]{timestamp}[/]")

        if self._show_level:
            level_colors = {
                LogLevel.DEBUG: "dim",
                LogLevel.INFO: "blue",
                LogLevel.WARNING: "yellow",
                LogLevel.ERROR: "red bold",
            }
            color = level_colors.get(level, "white")
            parts.append(f"[{color}]{level.value.upper():7}[/]")

        return " ".join(parts)

    def _emit(self, level: LogLevel, body: str) -> None:
        prefix = self._format_prefix(level)
        self._console.print(f"{prefix} {body}" if prefix else body, highlight=False)

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        """Internal log method."""
        if not self._should_log(level):
            return

        message = escape(message)
        if context:
            context_str = " ".join(
                f"[dim]{k}=[/]{escape(str(v))}" for k, v in context.items()
            )
            message = f"{message} {context_str}"

        self._emit(level, message)

    def debug(self, message: str, **context: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **context)

    # Run-specific logging methods

    def run_start(self, pattern_id: str, node_count: int, mode: str, speed: float) -> None:
        """Log run start."""
        if not self._should_log(LogLevel.INFO):
            return

        self._emit(
            LogLevel.INFO,
            f"[bold cyan]◆ {escape(pattern_id)}[/] starting "
            f"({node_count} nodes | {mode} | x{speed:g})",
        )

    def run_end(self, iterations: int, output_preview: str | None = None) -> None:
        """Log run completion."""
        if not self._should_log(LogLevel.INFO):
            return

        preview = ""
        if output_preview:
            preview = output_preview[:50] + "..." if len(output_preview) > 50 else output_preview
            preview = f' "{escape(preview)}"'

        self._emit(
            LogLevel.INFO,
            f"[bold cyan]◆ Run[/] completed ({iterations} iterations){preview}",
        )

    def run_error(self, error: str) -> None:
        """Log run-level failure."""
        if not self._should_log(LogLevel.ERROR):
            return

        self._emit(LogLevel.ERROR, f"[bold red]◆ Run[/] aborted: {escape(error)}")

    def node_start(self, node_id: str, label: str, visit: int = 1) -> None:
        """Log node activation."""
        if not self._should_log(LogLevel.INFO):
            return

        revisit = f" (visit {visit})" if visit > 1 else ""
        self._emit(
            LogLevel.INFO,
            f"[bold blue]▶ {escape(label)}[/] running{revisit} [dim]{escape(node_id)}[/]",
        )

    def node_complete(self, node_id: str, label: str, duration_ms: int | None = None) -> None:
        """Log node completion."""
        if not self._should_log(LogLevel.INFO):
            return

        duration = f" ({duration_ms}ms)" if duration_ms is not None else ""
        self._emit(
            LogLevel.INFO,
            f"[bold green]✓ {escape(label)}[/] complete{duration}",
        )

    def node_failed(self, node_id: str, label: str, error: str) -> None:
        """Log node failure."""
        if not self._should_log(LogLevel.WARNING):
            return

        self._emit(
            LogLevel.WARNING,
            f"[bold red]✗ {escape(label)}[/] failed: {escape(error)}",
        )

    def edge_crossed(self, edge_id: str, source: str, target: str, kind: str) -> None:
        """Log edge traversal."""
        if not self._should_log(LogLevel.DEBUG):
            return

        self._emit(
            LogLevel.DEBUG,
            f"  [dim]Edge {escape(edge_id)}:[/] {escape(source)} → {escape(target)} ({kind})",
        )

    def step_waiting(self, pending: int) -> None:
        """Log step-mode suspension."""
        if not self._should_log(LogLevel.DEBUG):
            return

        self._emit(
            LogLevel.DEBUG,
            f"  [dim]Waiting for next step[/] ({pending} pending)",
        )
