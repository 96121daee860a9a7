"""Unit tests for SimulationConfig and PatternPlaySettings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from patternplay.core.config import SPEED_FACTORS, SimulationConfig
from patternplay.core.settings import PatternPlaySettings, get_settings
from patternplay.core.types import NodeType


class TestSimulationConfig:
    """Tests for SimulationConfig."""

    def test_defaults(self) -> None:
        """Defaults should match the documented timings."""
        config = SimulationConfig()

        assert config.default_delay == 0.7
        assert config.llm_delay_min == 0.5
        assert config.llm_delay_max == 2.0
        assert config.router_success_rate == 0.8
        assert config.edge_delay == 0.8
        assert config.failure_edge_delay == 0.5
        assert config.tick_interval == 0.02
        assert config.base_rate == 0.02
        assert config.max_node_visits == 2

    def test_delay_for(self) -> None:
        """Listed types use their own delay, others the default."""
        config = SimulationConfig()

        assert config.delay_for(NodeType.INPUT) == 0.5
        assert config.delay_for(NodeType.ROUTER) == 0.8
        assert config.delay_for(NodeType.AGGREGATOR) == 1.2
        assert config.delay_for(NodeType.EVALUATOR) == 0.7

    def test_edge_travel_time(self) -> None:
        """A message needs about one second per edge at speed 1."""
        assert SimulationConfig().edge_travel_time == pytest.approx(1.0)
        assert SimulationConfig(base_rate=0.04).edge_travel_time == pytest.approx(0.5)

    def test_success_rate_bounds(self) -> None:
        """Success rate must be a probability."""
        with pytest.raises(ValidationError):
            SimulationConfig(router_success_rate=1.5)

        with pytest.raises(ValidationError):
            SimulationConfig(router_success_rate=-0.1)

    def test_llm_bounds_ordered(self) -> None:
        """The latency range cannot be inverted."""
        with pytest.raises(ValidationError):
            SimulationConfig(llm_delay_min=2.0, llm_delay_max=1.0)

    def test_tick_interval_positive(self) -> None:
        """A zero tick interval would spin."""
        with pytest.raises(ValidationError):
            SimulationConfig(tick_interval=0)

    def test_speed_factors(self) -> None:
        """Three playback speeds are supported."""
        assert SPEED_FACTORS == (0.5, 1.0, 2.0)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without environment variables, defaults apply."""
        for name in ("DEFAULT_MODE", "DEFAULT_SPEED", "SEED", "LOG_LEVEL"):
            monkeypatch.delenv(f"PATTERNPLAY_{name}", raising=False)

        settings = PatternPlaySettings()

        assert settings.default_mode == "auto"
        assert settings.default_speed == 1.0
        assert settings.seed is None
        assert settings.log_level == "info"
        assert settings.log_enabled is True

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """PATTERNPLAY_* variables override defaults."""
        monkeypatch.setenv("PATTERNPLAY_DEFAULT_MODE", "STEP")
        monkeypatch.setenv("PATTERNPLAY_DEFAULT_SPEED", "2")
        monkeypatch.setenv("PATTERNPLAY_SEED", "42")
        monkeypatch.setenv("PATTERNPLAY_LOG_LEVEL", "DEBUG")

        settings = PatternPlaySettings()

        assert settings.default_mode == "step"
        assert settings.default_speed == 2.0
        assert settings.seed == 42
        assert settings.log_level == "debug"

    def test_invalid_speed(self) -> None:
        """Unsupported speeds are rejected."""
        with pytest.raises(ValidationError):
            PatternPlaySettings(default_speed=3.0)

    def test_invalid_mode(self) -> None:
        """Only auto and step are valid modes."""
        with pytest.raises(ValidationError):
            PatternPlaySettings(default_mode="turbo")

    def test_invalid_log_level(self) -> None:
        """Unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            PatternPlaySettings(log_level="verbose")

    def test_get_settings_cached(self) -> None:
        """get_settings() returns one shared instance."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
