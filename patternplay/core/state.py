"""Run session state.

A RunSession is the single mutable record of one simulated run. It is owned
by the RunController; the traversal engine changes node states through it and
the flow emitter owns message progress. Observers only ever receive a
RunSnapshot, an immutable deep copy.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from patternplay.core.types import FlowMessage, NodeRunState, NodeStatus


class RunMode(str, Enum):
    """Scheduling discipline of a run."""

    AUTO = "auto"
    STEP = "step"


class RunStatus(str, Enum):
    """Lifecycle status of a run session."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_finished(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.FAILED)


class RunSnapshot(BaseModel):
    """Read-only view of a run handed to rendering surfaces.

    Example:
        >>> snap = controller.snapshot()
        >>> snap.node_states["llm"].status
        <NodeStatus.COMPLETE: 'complete'>
    """

    pattern_id: str
    status: RunStatus
    mode: RunMode
    speed: float
    paused: bool
    waiting_for_step: bool = False
    node_states: dict[str, NodeRunState] = Field(default_factory=dict)
    messages: list[FlowMessage] = Field(default_factory=list)
    active_edges: list[str] = Field(default_factory=list)
    iteration_count: int = 0
    output: str | None = None
    error: str | None = None
    generation: int = 0

    model_config = ConfigDict(frozen=True)

    def status_of(self, node_id: str) -> NodeStatus:
        state = self.node_states.get(node_id)
        return state.status if state else NodeStatus.IDLE

    def nodes_with_status(self, status: NodeStatus) -> list[str]:
        return [node_id for node_id, s in self.node_states.items() if s.status == status]

    @property
    def is_idle(self) -> bool:
        """No node has started and nothing is in flight."""
        return (
            all(s.status == NodeStatus.IDLE for s in self.node_states.values())
            and not self.messages
        )


class RunSession:
    """Mutable state of one run, keyed by node id.

    Node transitions are enforced here: a node moves Idle -> Running ->
    Complete/Failed, and only a fresh visit may put a terminal node back
    into Running.
    """

    def __init__(
        self,
        pattern_id: str,
        node_ids: list[str],
        *,
        mode: RunMode = RunMode.AUTO,
        speed: float = 1.0,
        generation: int = 0,
    ) -> None:
        self.pattern_id = pattern_id
        self.node_states: dict[str, NodeRunState] = {
            node_id: NodeRunState() for node_id in node_ids
        }
        self.messages: dict[str, FlowMessage] = {}
        self.active_edges: dict[str, int] = {}
        self.iteration_count = 0
        self.mode = mode
        self.speed = speed
        self.paused = False
        self.status = RunStatus.IDLE
        self.user_input: str | None = None
        self.output: str | None = None
        self.error: str | None = None
        self.generation = generation

    # Node transitions

    def mark_running(self, node_id: str, now: float) -> NodeRunState:
        """Start a new visit of a node and count the iteration."""
        state = self.node_states[node_id]
        if state.status == NodeStatus.RUNNING:
            raise ValueError(f"Node '{node_id}' is already running")
        state.status = NodeStatus.RUNNING
        state.result = None
        state.started_at = now
        state.ended_at = None
        state.visits += 1
        self.iteration_count += 1
        return state

    def mark_complete(self, node_id: str, result: str, now: float) -> NodeRunState:
        state = self._require_running(node_id)
        state.status = NodeStatus.COMPLETE
        state.result = result
        state.ended_at = now
        return state

    def mark_failed(self, node_id: str, reason: str, now: float) -> NodeRunState:
        state = self._require_running(node_id)
        state.status = NodeStatus.FAILED
        state.result = reason
        state.ended_at = now
        return state

    def _require_running(self, node_id: str) -> NodeRunState:
        state = self.node_states[node_id]
        if state.status != NodeStatus.RUNNING:
            raise ValueError(
                f"Node '{node_id}' cannot finish from status '{state.status.value}'"
            )
        return state

    def visits(self, node_id: str) -> int:
        return self.node_states[node_id].visits

    # Edges

    def activate_edge(self, edge_id: str) -> None:
        self.active_edges[edge_id] = self.active_edges.get(edge_id, 0) + 1

    def release_edge(self, edge_id: str) -> None:
        count = self.active_edges.get(edge_id, 0) - 1
        if count > 0:
            self.active_edges[edge_id] = count
        else:
            self.active_edges.pop(edge_id, None)

    # Run outcome

    def finish(self, output: str) -> None:
        self.output = output
        self.status = RunStatus.COMPLETED

    def fail(self, error: str) -> None:
        self.error = error
        self.status = RunStatus.FAILED

    @property
    def is_active(self) -> bool:
        return self.status == RunStatus.RUNNING

    def snapshot(self, *, waiting_for_step: bool = False) -> RunSnapshot:
        """Deep-copied, frozen view of the session."""
        return RunSnapshot(
            pattern_id=self.pattern_id,
            status=self.status,
            mode=self.mode,
            speed=self.speed,
            paused=self.paused,
            waiting_for_step=waiting_for_step,
            node_states={k: v.model_copy() for k, v in self.node_states.items()},
            messages=[m.model_copy() for m in self.messages.values()],
            active_edges=list(self.active_edges),
            iteration_count=self.iteration_count,
            output=self.output,
            error=self.error,
            generation=self.generation,
        )


class RunResult(BaseModel):
    """Final result of a simulated run.

    Example:
        >>> result = controller.run_sync("Tell me about agent patterns")
        >>> print(result.output)
    """

    output: str | None = Field(None, description="Final output, if an output node completed")
    error: str | None = Field(None, description="Run-level error shown to the learner")
    status: RunStatus = Field(..., description="Final status")
    snapshot: RunSnapshot = Field(..., description="State at the end of the run")

    @property
    def is_success(self) -> bool:
        return self.status == RunStatus.COMPLETED

    @property
    def iteration_count(self) -> int:
        return self.snapshot.iteration_count
