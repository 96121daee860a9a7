"""PatternPlay - Agent Pattern Execution Simulator.

PatternPlay walks agent-pattern graphs (ReAct, routing, reflection, ...)
and plays back a simulated execution: node status changes, animated flow
messages along edges, automatic or step-by-step scheduling, pause/resume,
speed scaling and failure rerouting.

Example:
    >>> from patternplay import RunController, get_pattern
    >>> controller = RunController(get_pattern("react-agent"))
    >>> result = controller.run_sync("What's the weather in Paris?")
    >>> print(result.output)
"""

__version__ = "0.1.0"

# Core exports
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
from patternplay.core.config import SimulationConfig
from patternplay.core.settings import (
    PatternPlaySettings,
    get_settings,
)
from patternplay.core.clock import AsyncioClock, Clock
from patternplay.core.simulator import WorkSimulator
from patternplay.core.state import RunMode, RunResult, RunSnapshot, RunStatus
from patternplay.core.controller import RunController
from patternplay.logging import configure_logging

# Error exports
from patternplay.errors.exceptions import (
    ConfigurationError,
    ControlError,
    PatternPlayError,
    SimulationError,
)

# Observability exports
from patternplay.tracking.callbacks import CallbackContext, CallbackEvent, CallbackManager
from patternplay.telemetry.collector import RunTrace, TraceCollector

# Catalogue exports
from patternplay.patterns.catalog import get_pattern, list_patterns

__all__ = [
    # Version
    "__version__",
    # Graph
    "Edge",
    "EdgeEndpoints",
    "Node",
    "NodeType",
    "PatternGraph",
    # Run state
    "FlowMessage",
    "MessageKind",
    "NodeRunState",
    "NodeStatus",
    "RunMode",
    "RunResult",
    "RunSnapshot",
    "RunStatus",
    # Engine
    "RunController",
    "WorkSimulator",
    "SimulationConfig",
    "PatternPlaySettings",
    "configure_logging",
    "get_settings",
    "AsyncioClock",
    "Clock",
    # Errors
    "PatternPlayError",
    "ConfigurationError",
    "ControlError",
    "SimulationError",
    # Observability
    "CallbackContext",
    "CallbackEvent",
    "CallbackManager",
    "RunTrace",
    "TraceCollector",
    # Catalogue
    "get_pattern",
    "list_patterns",
]
