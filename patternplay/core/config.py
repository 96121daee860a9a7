"""Configuration classes for PatternPlay.

This module provides the timing and behaviour knobs of the simulation engine.
All durations are in seconds at speed factor 1.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from patternplay.core.types import NodeType

SPEED_FACTORS: tuple[float, ...] = (0.5, 1.0, 2.0)


class SimulationConfig(BaseModel):
    """Timing and behaviour settings for a simulated run.

    Example:
        >>> config = SimulationConfig(
        ...     router_success_rate=1.0,
        ...     edge_delay=0.4,
        ... )
    """

    node_delays: dict[NodeType, float] = Field(
        default_factory=lambda: {
            NodeType.INPUT: 0.5,
            NodeType.ROUTER: 0.8,
            NodeType.AGGREGATOR: 1.2,
        },
        description="Fixed work delay per node type; types not listed use default_delay",
    )
    default_delay: float = Field(
        default=0.7,
        ge=0.0,
        description="Work delay for node types without an explicit entry",
    )
    llm_delay_min: float = Field(
        default=0.5,
        ge=0.0,
        description="Lower bound of the randomised language-model latency",
    )
    llm_delay_max: float = Field(
        default=2.0,
        ge=0.0,
        description="Upper bound of the randomised language-model latency",
    )
    router_success_rate: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Probability that a router node succeeds",
    )
    edge_delay: float = Field(
        default=0.8,
        ge=0.0,
        description="Automatic-mode wait at each edge crossing",
    )
    failure_edge_delay: float = Field(
        default=0.5,
        ge=0.0,
        description="Automatic-mode wait before following a failure-handler edge",
    )
    tick_interval: float = Field(
        default=0.02,
        gt=0.0,
        description="Cadence of the flow-message animation tick",
    )
    base_rate: float = Field(
        default=0.02,
        gt=0.0,
        le=1.0,
        description="Progress added to every message per tick at speed 1",
    )
    max_node_visits: int = Field(
        default=2,
        ge=1,
        description="How many times one node may be entered in a run (bounds cycles)",
    )
    failure_keyword: str = Field(
        default="fail",
        min_length=1,
        description="Substring of a target label that marks a failure-handler edge",
    )
    truncate_length: int = Field(
        default=30,
        gt=3,
        description="Maximum characters of message content kept for display",
    )

    @model_validator(mode="after")
    def _check_llm_bounds(self) -> SimulationConfig:
        if self.llm_delay_max < self.llm_delay_min:
            raise ValueError("llm_delay_max must be >= llm_delay_min")
        return self

    def delay_for(self, node_type: NodeType) -> float:
        """Fixed delay for a non-llm node type."""
        return self.node_delays.get(node_type, self.default_delay)

    @property
    def edge_travel_time(self) -> float:
        """Seconds a message needs to cross an edge at speed 1."""
        return self.tick_interval / self.base_rate
