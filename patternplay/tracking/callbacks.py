"""Callback system for observing simulated runs."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from patternplay.logging import get_logger


class CallbackEvent(str, Enum):
    """Events that can trigger callbacks."""

    # Run lifecycle
    RUN_START = "run_start"
    RUN_END = "run_end"
    RUN_ERROR = "run_error"
    RUN_RESET = "run_reset"
    RUN_PAUSED = "run_paused"
    RUN_RESUMED = "run_resumed"

    # Node transitions
    NODE_START = "node_start"
    NODE_COMPLETE = "node_complete"
    NODE_FAILED = "node_failed"

    # Edges and messages
    EDGE_CROSSED = "edge_crossed"
    EDGE_SKIPPED = "edge_skipped"
    MESSAGE_EMITTED = "message_emitted"
    MESSAGE_ARRIVED = "message_arrived"

    # Scheduling
    STEP_WAITING = "step_waiting"


@dataclass
class CallbackContext:
    """Context passed to callbacks."""

    event: CallbackEvent
    timestamp: float = 0.0
    node_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


# Type aliases
SyncCallback = Callable[[CallbackContext], None]
AsyncCallback = Callable[[CallbackContext], Awaitable[None]]
AnyCallback = SyncCallback | AsyncCallback


class CallbackManager:
    """Manager for event callbacks.

    Supports both sync and async callbacks.
    Callbacks are called in registration order.

    Example:
        >>> manager = CallbackManager()
        >>>
        >>> def on_node_start(ctx: CallbackContext) -> None:
        ...     print(f"Node {ctx.node_id} started")
        >>>
        >>> manager.register(CallbackEvent.NODE_START, on_node_start)
        >>> await manager.emit(CallbackEvent.NODE_START, node_id="llm1")
    """

    def __init__(self) -> None:
        """Initialize callback manager."""
        self._callbacks: dict[CallbackEvent, list[AnyCallback]] = {}
        self._global_callbacks: list[AnyCallback] = []

    def register(
        self,
        event: CallbackEvent,
        callback: AnyCallback,
    ) -> None:
        """Register a callback for an event.

        Args:
            event: Event to listen for.
            callback: Callback function (sync or async).
        """
        if event not in self._callbacks:
            self._callbacks[event] = []
        self._callbacks[event].append(callback)

    def register_global(self, callback: AnyCallback) -> None:
        """Register a callback for all events.

        Args:
            callback: Callback function (sync or async).
        """
        self._global_callbacks.append(callback)

    def unregister(
        self,
        event: CallbackEvent,
        callback: AnyCallback,
    ) -> bool:
        """Unregister a callback.

        Returns:
            True if callback was found and removed.
        """
        if event in self._callbacks:
            try:
                self._callbacks[event].remove(callback)
                return True
            except ValueError:
                pass
        return False

    def unregister_global(self, callback: AnyCallback) -> bool:
        """Unregister a global callback.

        Returns:
            True if callback was found and removed.
        """
        try:
            self._global_callbacks.remove(callback)
            return True
        except ValueError:
            return False

    def _collect(self, event: CallbackEvent) -> list[AnyCallback]:
        callbacks: list[AnyCallback] = []
        callbacks.extend(self._global_callbacks)
        callbacks.extend(self._callbacks.get(event, []))
        return callbacks

    async def emit(
        self,
        event: CallbackEvent,
        node_id: str | None = None,
        timestamp: float = 0.0,
        **data: Any,
    ) -> None:
        """Emit an event to all registered callbacks.

        Args:
            event: Event to emit.
            node_id: Optional node id for context.
            timestamp: Clock time of the event.
            **data: Additional data to include in context.
        """
        context = CallbackContext(
            event=event,
            timestamp=timestamp,
            node_id=node_id,
            data=data,
        )

        for callback in self._collect(event):
            await self._execute_callback(callback, context)

    def emit_sync(
        self,
        event: CallbackEvent,
        node_id: str | None = None,
        timestamp: float = 0.0,
        **data: Any,
    ) -> None:
        """Emit an event synchronously (only calls sync callbacks).

        Args:
            event: Event to emit.
            node_id: Optional node id for context.
            timestamp: Clock time of the event.
            **data: Additional data to include in context.
        """
        context = CallbackContext(
            event=event,
            timestamp=timestamp,
            node_id=node_id,
            data=data,
        )

        for callback in self._collect(event):
            if inspect.iscoroutinefunction(callback):
                continue
            try:
                callback(context)
            except Exception as e:
                get_logger().warning("Callback failed", event=event.value, error=e)

    async def _execute_callback(
        self,
        callback: AnyCallback,
        context: CallbackContext,
    ) -> None:
        """Execute a single callback."""
        try:
            if inspect.iscoroutinefunction(callback):
                await callback(context)
            else:
                callback(context)
        except Exception as e:
            # Observers must not break the run
            get_logger().warning("Callback failed", event=context.event.value, error=e)

    def clear(self, event: CallbackEvent | None = None) -> None:
        """Clear callbacks.

        Args:
            event: Specific event to clear, or None to clear all.
        """
        if event is None:
            self._callbacks.clear()
            self._global_callbacks.clear()
        elif event in self._callbacks:
            self._callbacks[event].clear()

    @property
    def callback_count(self) -> int:
        """Total number of registered callbacks."""
        return len(self._global_callbacks) + sum(len(c) for c in self._callbacks.values())
