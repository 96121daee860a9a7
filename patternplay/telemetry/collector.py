"""Run trace collector for PatternPlay.

Captures the events of simulated runs as a timeline that adapters can
render and tests can inspect, with export to JSON.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from patternplay.core.types import NodeStatus
from patternplay.tracking.callbacks import CallbackContext, CallbackEvent, CallbackManager

_STATUS_FOR_EVENT: dict[CallbackEvent, NodeStatus] = {
    CallbackEvent.NODE_START: NodeStatus.RUNNING,
    CallbackEvent.NODE_COMPLETE: NodeStatus.COMPLETE,
    CallbackEvent.NODE_FAILED: NodeStatus.FAILED,
}


@dataclass
class TraceEvent:
    """A single event in a run trace."""
    event: CallbackEvent
    timestamp: float = 0.0
    node_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event": self.event.value,
            "timestamp": self.timestamp,
            "node_id": self.node_id,
            "data": self.data,
        }


@dataclass
class RunTrace:
    """Complete timeline of one simulated run."""
    id: str = field(default_factory=lambda: str(uuid4()))
    pattern_id: str = ""
    user_input: str = ""
    start_time: float = 0.0
    end_time: float | None = None
    outcome: str = "running"  # "running", "completed", "failed", "reset"
    output: str | None = None
    error: str | None = None
    events: list[TraceEvent] = field(default_factory=list)

    @property
    def duration(self) -> float | None:
        """Clock seconds from start to end."""
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def event_count(self) -> int:
        return len(self.events)

    def events_of(self, event: CallbackEvent) -> list[TraceEvent]:
        """Events of one kind, in the order they happened."""
        return [e for e in self.events if e.event == event]

    def node_order(self) -> list[str]:
        """Node ids in the order they started, repeats included."""
        return [e.node_id for e in self.events_of(CallbackEvent.NODE_START) if e.node_id]

    def status_sequence(self, node_id: str) -> list[NodeStatus]:
        """Statuses a node went through, starting from idle."""
        sequence = [NodeStatus.IDLE]
        for e in self.events:
            status = _STATUS_FOR_EVENT.get(e.event)
            if status is not None and e.node_id == node_id:
                sequence.append(status)
        return sequence

    def status_sequences(self) -> dict[str, list[NodeStatus]]:
        """Status sequence of every node that started at least once."""
        return {node_id: self.status_sequence(node_id) for node_id in dict.fromkeys(self.node_order())}

    def first_time(self, event: CallbackEvent, node_id: str | None = None) -> float | None:
        """Timestamp of the first matching event."""
        for e in self.events:
            if e.event == event and (node_id is None or e.node_id == node_id):
                return e.timestamp
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert trace to dictionary."""
        return {
            "id": self.id,
            "pattern_id": self.pattern_id,
            "user_input": self.user_input,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "outcome": self.outcome,
            "output": self.output,
            "error": self.error,
            "events": [e.to_dict() for e in self.events],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert trace to JSON string.

        Args:
            indent: JSON indentation level.

        Returns:
            JSON string representation.
        """
        return json.dumps(self.to_dict(), indent=indent, default=str)


class TraceCollector:
    """Collects run traces from a RunController.

    Registers as a global callback listener to capture every run event.

    Example:
        >>> collector = TraceCollector()
        >>> controller = RunController(graph, callbacks=collector.callback_manager)
        >>> controller.run_sync("hello")
        >>> trace = collector.get_last_trace()
        >>> trace.status_sequence("llm")
    """

    def __init__(self, callback_manager: CallbackManager | None = None) -> None:
        """Initialize trace collector.

        Args:
            callback_manager: Existing manager to listen on; a new one if None.
        """
        self._traces: list[RunTrace] = []
        self._active_trace: RunTrace | None = None
        self._callback_manager = callback_manager or CallbackManager()
        self._callback_manager.register_global(self._on_event)

    @property
    def callback_manager(self) -> CallbackManager:
        """Get the callback manager to pass to RunController."""
        return self._callback_manager

    @property
    def traces(self) -> list[RunTrace]:
        """Get all finished traces."""
        return list(self._traces)

    @property
    def active_trace(self) -> RunTrace | None:
        return self._active_trace

    def get_last_trace(self) -> RunTrace | None:
        """Get the most recent finished trace."""
        return self._traces[-1] if self._traces else None

    def clear(self) -> None:
        """Clear all collected traces."""
        self._traces.clear()
        self._active_trace = None

    def detach(self) -> None:
        """Stop listening on the callback manager."""
        self._callback_manager.unregister_global(self._on_event)

    def _finish_trace(self, outcome: str, timestamp: float) -> None:
        if self._active_trace is None:
            return
        self._active_trace.outcome = outcome
        self._active_trace.end_time = timestamp
        self._traces.append(self._active_trace)
        self._active_trace = None

    def _on_event(self, ctx: CallbackContext) -> None:
        """Record one callback event."""
        if ctx.event == CallbackEvent.RUN_START:
            # A start without an end means the previous run was abandoned
            self._finish_trace("reset", ctx.timestamp)
            self._active_trace = RunTrace(
                pattern_id=ctx.data.get("pattern_id", ""),
                user_input=ctx.data.get("user_input", ""),
                start_time=ctx.timestamp,
            )

        if self._active_trace is None:
            return

        self._active_trace.events.append(
            TraceEvent(
                event=ctx.event,
                timestamp=ctx.timestamp,
                node_id=ctx.node_id,
                data=dict(ctx.data),
            )
        )

        if ctx.event == CallbackEvent.RUN_END:
            self._active_trace.output = ctx.data.get("output")
            self._finish_trace("completed", ctx.timestamp)
        elif ctx.event == CallbackEvent.RUN_ERROR:
            self._active_trace.error = ctx.data.get("error")
            self._finish_trace("failed", ctx.timestamp)
        elif ctx.event == CallbackEvent.RUN_RESET:
            self._finish_trace("reset", ctx.timestamp)
