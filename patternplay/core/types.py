"""Core type definitions for PatternPlay.

This module defines the fundamental data structures used throughout
the engine: nodes, edges, per-node run state and flow messages.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Kind of execution stage a node represents."""

    INPUT = "input"
    LLM = "llm"
    TOOL = "tool"
    ROUTER = "router"
    AGGREGATOR = "aggregator"
    PLANNER = "planner"
    EXECUTOR = "executor"
    EVALUATOR = "evaluator"
    OUTPUT = "output"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: str | None) -> NodeType:
        """Map a free-form type name onto a NodeType, falling back to DEFAULT."""
        if not value:
            return cls.DEFAULT
        try:
            return cls(value.lower())
        except ValueError:
            return cls.DEFAULT


class NodeStatus(str, Enum):
    """Execution status of a single node within a run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether the status ends a visit."""
        return self in (NodeStatus.COMPLETE, NodeStatus.FAILED)


class MessageKind(str, Enum):
    """Kind of data carried by a flow message."""

    QUERY = "query"
    RESPONSE = "response"
    TOOL_CALL = "tool_call"
    OBSERVATION = "observation"
    MESSAGE = "message"
    DATA = "data"
    ERROR = "error"


class Node(BaseModel):
    """A typed vertex in a pattern graph.

    Example:
        >>> node = Node(id="llm1", type=NodeType.LLM, label="LLM 1 (Reason)")
    """

    id: str = Field(..., min_length=1)
    type: NodeType = NodeType.DEFAULT
    label: str = ""
    description: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def display_name(self) -> str:
        """Label if set, otherwise the id."""
        return self.label or self.id


class Edge(BaseModel):
    """A directed connection between two nodes."""

    id: str = Field(..., min_length=1)
    source: str
    target: str
    label: str | None = None

    model_config = ConfigDict(frozen=True)


class EdgeEndpoints(BaseModel):
    """Screen geometry of an edge, supplied by the rendering surface."""

    source_x: float
    source_y: float
    target_x: float
    target_y: float

    model_config = ConfigDict(frozen=True)


class NodeRunState(BaseModel):
    """Mutable execution state of one node during a run.

    Only the traversal engine changes these values; observers receive copies.
    """

    status: NodeStatus = NodeStatus.IDLE
    result: str | None = None
    started_at: float | None = None
    ended_at: float | None = None
    visits: int = 0

    @property
    def duration(self) -> float | None:
        """Seconds between start and end of the latest visit."""
        if self.started_at is None or self.ended_at is None:
            return None
        return self.ended_at - self.started_at

    @property
    def duration_ms(self) -> int | None:
        duration = self.duration
        return None if duration is None else int(duration * 1000)


def _flow_id() -> str:
    return f"flow-{uuid.uuid4().hex[:12]}"


class FlowMessage(BaseModel):
    """An animated, progress-tracked message travelling along one edge.

    `progress` belongs to the flow emitter; everything else is fixed
    once the message is created.
    """

    id: str = Field(default_factory=_flow_id)
    edge_id: str
    source: str
    target: str
    content: str
    kind: MessageKind = MessageKind.MESSAGE
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    label: str | None = None
    created_at: float = 0.0
    position: tuple[float, float] | None = None

    @property
    def is_complete(self) -> bool:
        return self.progress >= 1.0
