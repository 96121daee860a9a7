"""Unit tests for TraceCollector."""

from __future__ import annotations

import json

import pytest

from patternplay.core.state import RunStatus
from patternplay.core.types import NodeStatus
from patternplay.telemetry.collector import RunTrace, TraceCollector, TraceEvent
from patternplay.tracking.callbacks import CallbackEvent


class TestRunTrace:
    """Tests for RunTrace queries."""

    def create_trace(self) -> RunTrace:
        events = [
            TraceEvent(CallbackEvent.RUN_START, 0.0),
            TraceEvent(CallbackEvent.NODE_START, 0.0, "in"),
            TraceEvent(CallbackEvent.NODE_COMPLETE, 0.5, "in"),
            TraceEvent(CallbackEvent.NODE_START, 1.3, "router"),
            TraceEvent(CallbackEvent.NODE_FAILED, 2.1, "router"),
            TraceEvent(CallbackEvent.NODE_START, 2.6, "handler"),
            TraceEvent(CallbackEvent.NODE_COMPLETE, 3.3, "handler"),
        ]
        return RunTrace(pattern_id="routing", start_time=0.0, end_time=4.0, events=events)

    def test_node_order(self) -> None:
        """Nodes are listed in the order they started."""
        assert self.create_trace().node_order() == ["in", "router", "handler"]

    def test_status_sequence(self) -> None:
        """Each node's sequence starts idle and follows its events."""
        trace = self.create_trace()

        assert trace.status_sequence("router") == [
            NodeStatus.IDLE,
            NodeStatus.RUNNING,
            NodeStatus.FAILED,
        ]
        assert trace.status_sequence("never") == [NodeStatus.IDLE]
        assert set(trace.status_sequences()) == {"in", "router", "handler"}

    def test_first_time(self) -> None:
        """first_time() finds the earliest matching event."""
        trace = self.create_trace()

        assert trace.first_time(CallbackEvent.NODE_START, "router") == 1.3
        assert trace.first_time(CallbackEvent.NODE_COMPLETE) == 0.5
        assert trace.first_time(CallbackEvent.RUN_END) is None

    def test_to_json(self) -> None:
        """Traces export as JSON with event names."""
        data = json.loads(self.create_trace().to_json())

        assert data["pattern_id"] == "routing"
        assert data["duration"] == 4.0
        assert data["events"][1] == {
            "event": "node_start",
            "timestamp": 0.0,
            "node_id": "in",
            "data": {},
        }


class TestTraceCollector:
    """Tests for collecting traces from callback events."""

    @pytest.mark.asyncio
    async def test_collects_completed_run(self) -> None:
        """A start/end pair becomes one completed trace."""
        collector = TraceCollector()
        manager = collector.callback_manager

        await manager.emit(CallbackEvent.RUN_START, timestamp=0.0, pattern_id="p", user_input="hi")
        assert collector.active_trace is not None
        await manager.emit(CallbackEvent.NODE_START, node_id="in", timestamp=0.0)
        await manager.emit(CallbackEvent.RUN_END, timestamp=2.0, output="done")

        trace = collector.get_last_trace()
        assert collector.active_trace is None
        assert trace.outcome == "completed"
        assert trace.output == "done"
        assert trace.user_input == "hi"
        assert trace.duration == 2.0
        assert trace.event_count == 3

    @pytest.mark.asyncio
    async def test_failed_and_reset_outcomes(self) -> None:
        """Errors and resets close the active trace with their outcome."""
        collector = TraceCollector()
        manager = collector.callback_manager

        await manager.emit(CallbackEvent.RUN_START, pattern_id="p")
        await manager.emit(CallbackEvent.RUN_ERROR, error="Router failed: nope")
        await manager.emit(CallbackEvent.RUN_START, pattern_id="p")
        manager.emit_sync(CallbackEvent.RUN_RESET)

        assert [t.outcome for t in collector.traces] == ["failed", "reset"]
        assert collector.traces[0].error == "Router failed: nope"

    @pytest.mark.asyncio
    async def test_events_outside_runs_ignored(self) -> None:
        """Events without an active trace are dropped."""
        collector = TraceCollector()

        await collector.callback_manager.emit(CallbackEvent.NODE_START, node_id="x")

        assert collector.traces == []

    @pytest.mark.asyncio
    async def test_with_controller(self, clock, controller_factory, linear_graph) -> None:
        """A controller run produces a complete trace."""
        collector = TraceCollector()
        controller = controller_factory(linear_graph, callbacks=collector.callback_manager)

        controller.start("hello")
        await clock.run_until(lambda: not controller.is_running)

        assert controller.snapshot().status == RunStatus.COMPLETED
        trace = collector.get_last_trace()
        assert trace.outcome == "completed"
        assert trace.pattern_id == "linear"
        assert trace.node_order() == ["n0", "n1", "n2"]
        for sequence in trace.status_sequences().values():
            assert sequence == [NodeStatus.IDLE, NodeStatus.RUNNING, NodeStatus.COMPLETE]

    def test_detach_and_clear(self) -> None:
        """detach() stops listening and clear() drops traces."""
        collector = TraceCollector()
        manager = collector.callback_manager

        manager.emit_sync(CallbackEvent.RUN_START, pattern_id="p")
        manager.emit_sync(CallbackEvent.RUN_RESET)
        assert len(collector.traces) == 1

        collector.clear()
        collector.detach()
        manager.emit_sync(CallbackEvent.RUN_START, pattern_id="p")

        assert collector.traces == []
        assert collector.active_trace is None
        assert manager.callback_count == 0
