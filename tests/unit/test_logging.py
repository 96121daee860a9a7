"""Unit tests for Logging module."""

from __future__ import annotations

from io import StringIO

import pytest
from rich.console import Console

from patternplay.core.settings import PatternPlaySettings, get_settings
from patternplay.logging import config as log_config
from patternplay.logging.config import configure_logging, get_logger, parse_level
from patternplay.logging.logger import LogLevel, PatternPlayLogger


def create_logger(level: LogLevel = LogLevel.INFO) -> tuple[PatternPlayLogger, StringIO]:
    """Create a logger writing into a buffer."""
    output = StringIO()
    console = Console(file=output, force_terminal=True, width=200)
    return PatternPlayLogger(level=level, console=console), output


class TestLogLevel:
    """Tests for LogLevel."""

    def test_level_ranking(self) -> None:
        """Levels should have correct rank order."""
        assert LogLevel.DEBUG.rank < LogLevel.INFO.rank
        assert LogLevel.INFO.rank < LogLevel.WARNING.rank
        assert LogLevel.WARNING.rank < LogLevel.ERROR.rank


class TestPatternPlayLogger:
    """Tests for PatternPlayLogger."""

    def test_default_creation(self) -> None:
        """Should create with defaults."""
        logger = PatternPlayLogger()

        assert logger.level == LogLevel.INFO
        assert logger.enabled is True

    def test_level_filtering(self) -> None:
        """Should filter messages below level."""
        logger, output = create_logger(LogLevel.WARNING)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")

        result = output.getvalue()
        assert "Debug message" not in result
        assert "Info message" not in result
        assert "Warning message" in result

    def test_disabled_logging(self) -> None:
        """Should not log when disabled."""
        output = StringIO()
        console = Console(file=output, force_terminal=True, width=200)
        logger = PatternPlayLogger(enabled=False, console=console)

        logger.info("Should not appear")
        logger.run_start("routing", 4, "auto", 1.0)

        assert output.getvalue() == ""

    def test_context_is_appended(self) -> None:
        """Keyword context should appear as key=value."""
        logger, output = create_logger()

        logger.info("Pattern loaded", pattern="react-agent")

        result = output.getvalue()
        assert "Pattern loaded" in result
        assert "react-agent" in result

    def test_markup_in_message_is_escaped(self) -> None:
        """User text with brackets should be printed literally."""
        logger, output = create_logger()

        logger.info("input was [bold]hi[/bold]")

        assert "[bold]hi[/bold]" in output.getvalue()

    def test_run_start_logging(self) -> None:
        """Should log run start with mode and speed."""
        logger, output = create_logger()

        logger.run_start("react-agent", 5, "step", 2.0)

        result = output.getvalue()
        assert "react-agent" in result
        assert "starting" in result
        assert "step" in result

    def test_run_end_truncates_preview(self) -> None:
        """Should shorten long output previews."""
        logger, output = create_logger()

        logger.run_end(7, "x" * 80)

        result = output.getvalue()
        assert "7 iterations" in result
        assert "x" * 50 + "..." in result
        assert "x" * 51 not in result

    def test_run_error_logging(self) -> None:
        """Should log run-level errors."""
        logger, output = create_logger()

        logger.run_error("Router failed: Router determined input cannot be processed further")

        assert "aborted" in output.getvalue()

    def test_node_lifecycle_logging(self) -> None:
        """Should log node start, revisit and completion."""
        logger, output = create_logger()

        logger.node_start("llm1", "LLM 1 (Reason)")
        logger.node_start("llm1", "LLM 1 (Reason)", visit=2)
        logger.node_complete("llm1", "LLM 1 (Reason)", duration_ms=150)

        result = output.getvalue()
        assert "LLM 1 (Reason)" in result
        assert "visit 2" in result
        assert "150ms" in result

    def test_node_failed_is_warning(self) -> None:
        """Node failures should pass a warning-level filter."""
        logger, output = create_logger(LogLevel.WARNING)

        logger.node_failed("router", "Router", "rejected")

        result = output.getvalue()
        assert "Router" in result
        assert "rejected" in result

    def test_edge_and_step_logging_is_debug(self) -> None:
        """Edge and step messages should only appear at debug level."""
        logger, output = create_logger(LogLevel.INFO)
        logger.edge_crossed("e1", "input", "llm", "query")
        logger.step_waiting(1)
        assert output.getvalue() == ""

        logger, output = create_logger(LogLevel.DEBUG)
        logger.edge_crossed("e1", "input", "llm", "query")
        logger.step_waiting(1)

        result = output.getvalue()
        assert "e1" in result
        assert "query" in result
        assert "Waiting for next step" in result


class TestLoggingConfig:
    """Tests for the global logger and its settings."""

    @pytest.fixture(autouse=True)
    def restore_global_logger(self):
        """Put back whatever logger was installed before the test."""
        previous = log_config._logger
        yield
        log_config._logger = previous

    def test_get_logger_singleton(self) -> None:
        """get_logger should return a valid logger."""
        logger1 = get_logger()
        logger2 = get_logger()

        assert isinstance(logger1, PatternPlayLogger)
        assert logger1 is logger2

    def test_configure_from_settings(self) -> None:
        """Settings drive level and enabled switch of the global logger."""
        settings = PatternPlaySettings(log_level="warning", log_enabled=False)

        logger = configure_logging(settings)

        assert logger.level == LogLevel.WARNING
        assert logger.enabled is False
        assert get_logger() is logger

    def test_configure_writes_to_given_console(self) -> None:
        """A console passed in receives the log lines."""
        output = StringIO()
        console = Console(file=output, force_terminal=True, width=200)
        settings = PatternPlaySettings(log_level="debug", log_timestamps=False)

        configure_logging(settings, console=console)
        get_logger().node_start("router", "Router", visit=1)

        assert "Router" in output.getvalue()

    def test_first_use_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without explicit configuration the env settings apply."""
        monkeypatch.setenv("PATTERNPLAY_LOG_LEVEL", "ERROR")
        get_settings.cache_clear()
        log_config._logger = None
        try:
            assert get_logger().level == LogLevel.ERROR
        finally:
            get_settings.cache_clear()

    def test_parse_level(self) -> None:
        """Level names are case-insensitive and accept short aliases."""
        assert parse_level("DEBUG") == LogLevel.DEBUG
        assert parse_level(" warn ") == LogLevel.WARNING
        assert parse_level("err") == LogLevel.ERROR
        assert parse_level(LogLevel.INFO) is LogLevel.INFO

    def test_parse_unknown_level(self) -> None:
        """Unknown names list the valid choices."""
        with pytest.raises(ValueError) as exc_info:
            parse_level("verbose")

        assert "debug, info, warning, error" in str(exc_info.value)

    def test_settings_normalise_level(self) -> None:
        """Settings store the canonical level name."""
        assert PatternPlaySettings(log_level="Warn").log_level == "warning"
