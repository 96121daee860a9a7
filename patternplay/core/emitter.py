"""Flow emitter: animated messages travelling along edges.

Each edge crossing becomes a FlowMessage whose progress the emitter advances
on a fixed tick cadence. Ticking is decoupled from traversal speed; the tick
task only runs while at least one message is in flight.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from patternplay.core.clock import AsyncioClock, Clock
from patternplay.core.config import SimulationConfig
from patternplay.core.types import Edge, EdgeEndpoints, FlowMessage, MessageKind, NodeType

EndpointsProvider = Callable[[str], EdgeEndpoints | None]
ArrivalHandler = Callable[[FlowMessage], Awaitable[None]]


def truncate(content: str, max_length: int = 30) -> str:
    """Shorten content for display on an edge marker.

    Example:
        >>> truncate("a" * 40, 10)
        'aaaaaaaaaa...'
    """
    if len(content) <= max_length:
        return content
    return content[:max_length] + "..."


def interpolate(endpoints: EdgeEndpoints, progress: float) -> tuple[float, float]:
    """Point at `progress` along the straight line between an edge's endpoints."""
    progress = min(max(progress, 0.0), 1.0)
    x = endpoints.source_x + (endpoints.target_x - endpoints.source_x) * progress
    y = endpoints.source_y + (endpoints.target_y - endpoints.source_y) * progress
    return (x, y)


def message_kind_for(
    source_type: NodeType,
    target_type: NodeType,
    *,
    failure: bool = False,
) -> MessageKind:
    """Pick the message kind shown for an edge between two node types."""
    if failure:
        return MessageKind.ERROR
    if source_type == NodeType.INPUT:
        return MessageKind.QUERY
    if source_type == NodeType.LLM:
        if target_type == NodeType.TOOL:
            return MessageKind.TOOL_CALL
        return MessageKind.RESPONSE
    if source_type == NodeType.TOOL:
        return MessageKind.OBSERVATION
    if source_type == NodeType.ROUTER:
        return MessageKind.DATA
    return MessageKind.MESSAGE


class FlowEmitter:
    """Owns the active message set and its progress.

    The emitter never touches node state. When a message arrives it is
    removed from the active set and handed to the arrival handler, which the
    run controller uses to release the edge.

    Example:
        >>> emitter = FlowEmitter(on_arrival=handle_arrival)
        >>> message = emitter.emit(edge, "hello", MessageKind.QUERY)
        >>> message.progress
        0.0
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        clock: Clock | None = None,
        on_arrival: ArrivalHandler | None = None,
        endpoints: EndpointsProvider | None = None,
    ) -> None:
        """Initialize emitter.

        Args:
            config: Tick cadence, base rate and truncation length.
            clock: Time source driving the tick.
            on_arrival: Awaited with each message that reaches progress 1.
            endpoints: Optional edge geometry lookup for marker positions.
        """
        self._config = config or SimulationConfig()
        self._clock = clock or AsyncioClock()
        self._on_arrival = on_arrival
        self._endpoints = endpoints
        self._messages: dict[str, FlowMessage] = {}
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self.speed = 1.0
        self.paused = False

    @property
    def messages(self) -> dict[str, FlowMessage]:
        """Active messages keyed by id. Mutated only by the emitter."""
        return self._messages

    @property
    def active_count(self) -> int:
        return len(self._messages)

    @property
    def is_ticking(self) -> bool:
        return self._task is not None and not self._task.done()

    def _position(self, message: FlowMessage) -> tuple[float, float] | None:
        if self._endpoints is None:
            return None
        endpoints = self._endpoints(message.edge_id)
        if endpoints is None:
            return None
        return interpolate(endpoints, message.progress)

    def emit(
        self,
        edge: Edge,
        content: str,
        kind: MessageKind = MessageKind.MESSAGE,
        label: str | None = None,
        *,
        now: float = 0.0,
    ) -> FlowMessage:
        """Put a new message on an edge with progress 0.

        The tick task is started if it is not already running.
        """
        message = FlowMessage(
            edge_id=edge.id,
            source=edge.source,
            target=edge.target,
            content=truncate(content, self._config.truncate_length),
            kind=kind,
            label=label if label is not None else edge.label,
            created_at=now,
        )
        message.position = self._position(message)
        self._messages[message.id] = message
        self._ensure_ticking()
        return message

    def _ensure_ticking(self) -> None:
        if not self.is_ticking:
            self._task = asyncio.get_running_loop().create_task(
                self._tick_loop(self._generation)
            )

    async def _tick_loop(self, generation: int) -> None:
        while self._messages:
            await self._clock.sleep(self._config.tick_interval)
            if generation != self._generation:
                return
            if self.paused:
                continue
            await self.tick()

    async def tick(self) -> list[FlowMessage]:
        """Advance every active message by one increment.

        Returns:
            Messages that arrived during this tick.
        """
        increment = self._config.base_rate * self.speed
        arrived: list[FlowMessage] = []

        # Iterate a copy: arrival handlers may emit new messages
        for message in list(self._messages.values()):
            message.progress = min(1.0, round(message.progress + increment, 6))
            message.position = self._position(message)
            if message.is_complete:
                self._messages.pop(message.id, None)
                arrived.append(message)

        generation = self._generation
        for message in arrived:
            if generation != self._generation:
                break
            if self._on_arrival is not None:
                await self._on_arrival(message)
        return arrived

    def stop(self) -> None:
        """Cancel the tick task. Messages stay where they are."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def clear(self) -> None:
        """Stop ticking and drop every active message."""
        self.stop()
        self._messages.clear()
        self.paused = False
