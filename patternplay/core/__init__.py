"""PatternPlay core components."""

from patternplay.core.types import (
    Edge,
    EdgeEndpoints,
    FlowMessage,
    MessageKind,
    Node,
    NodeRunState,
    NodeStatus,
    NodeType,
)
from patternplay.core.graph import PatternGraph
from patternplay.core.config import SPEED_FACTORS, SimulationConfig
from patternplay.core.settings import (
    PatternPlaySettings,
    get_settings,
)
from patternplay.core.clock import AsyncioClock, Clock
from patternplay.core.simulator import WorkSimulator
from patternplay.core.state import RunMode, RunResult, RunSession, RunSnapshot, RunStatus
from patternplay.core.scheduler import StepScheduler
from patternplay.core.emitter import FlowEmitter, interpolate, message_kind_for, truncate
from patternplay.core.traversal import TraversalEngine
from patternplay.core.controller import RunController

__all__ = [
    "Edge",
    "EdgeEndpoints",
    "FlowMessage",
    "MessageKind",
    "Node",
    "NodeRunState",
    "NodeStatus",
    "NodeType",
    "PatternGraph",
    "SPEED_FACTORS",
    "SimulationConfig",
    "PatternPlaySettings",
    "get_settings",
    "AsyncioClock",
    "Clock",
    "WorkSimulator",
    "RunMode",
    "RunResult",
    "RunSession",
    "RunSnapshot",
    "RunStatus",
    "StepScheduler",
    "FlowEmitter",
    "interpolate",
    "message_kind_for",
    "truncate",
    "TraversalEngine",
    "RunController",
]
