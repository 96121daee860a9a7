"""Traversal engine: the depth-first walk over a pattern graph.

The engine marks nodes running/complete/failed on the session, asks the
work simulator for results, puts a flow message on every edge it crosses and
waits on the step scheduler before entering the next node.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from patternplay.core.emitter import message_kind_for
from patternplay.core.state import RunMode
from patternplay.core.types import Edge, Node, NodeType
from patternplay.errors.exceptions import (
    NoOutputReachedError,
    RunAbortedError,
    StaleSessionError,
)
from patternplay.logging import get_logger
from patternplay.tracking.callbacks import CallbackEvent, CallbackManager

if TYPE_CHECKING:
    from patternplay.core.clock import Clock
    from patternplay.core.config import SimulationConfig
    from patternplay.core.emitter import FlowEmitter
    from patternplay.core.graph import PatternGraph
    from patternplay.core.scheduler import StepScheduler
    from patternplay.core.simulator import WorkSimulator
    from patternplay.core.state import RunSession
    from patternplay.logging import PatternPlayLogger


class TraversalEngine:
    """Walks one run session from the input node through every reachable branch.

    An output node ends its own branch only; sibling edges of the nodes above
    it are still walked once the branch unwinds. Each completed output
    overwrites the session output, so the last one to complete is final.

    One engine instance serves one run. Node state lives on the session;
    the engine holds no state of its own besides the run's generation.

    Example:
        >>> engine = TraversalEngine(graph, session, simulator, scheduler, emitter,
        ...                          config=config, clock=clock)
        >>> output = await engine.run(input_node, "hello")
    """

    def __init__(
        self,
        graph: PatternGraph,
        session: RunSession,
        simulator: WorkSimulator,
        scheduler: StepScheduler,
        emitter: FlowEmitter,
        *,
        config: SimulationConfig,
        clock: Clock,
        callbacks: CallbackManager | None = None,
        logger: PatternPlayLogger | None = None,
    ) -> None:
        self._graph = graph
        self._session = session
        self._simulator = simulator
        self._scheduler = scheduler
        self._emitter = emitter
        self._config = config
        self._clock = clock
        self._callbacks = callbacks or CallbackManager()
        self._logger = logger or get_logger()
        self._generation = session.generation
        self._user_input = ""

    def _check(self) -> None:
        if self._generation != self._scheduler.generation:
            raise StaleSessionError(self._generation, self._scheduler.generation)

    async def run(self, input_node: Node, user_input: str) -> str:
        """Walk the whole graph and return the last completed output's result.

        Raises:
            RunAbortedError: If a node fails without a failure-handler edge.
            NoOutputReachedError: If no output node completes.
            StaleSessionError: If the scheduler is reset mid-run.
        """
        self._user_input = user_input
        self._session.output = None
        await self._visit(input_node, upstream=None)
        if self._session.output is None:
            raise NoOutputReachedError()
        return self._session.output

    async def _visit(self, node: Node, upstream: str | None) -> None:
        self._check()
        state = self._session.mark_running(node.id, self._clock.now())
        self._logger.node_start(node.id, node.display_name, visit=state.visits)
        await self._callbacks.emit(
            CallbackEvent.NODE_START,
            node_id=node.id,
            timestamp=self._clock.now(),
            node_type=node.type.value,
            visit=state.visits,
        )

        try:
            result = await self._simulator.simulate(
                node,
                self._user_input,
                upstream=upstream,
                speed=self._scheduler.speed,
            )
        except Exception as e:
            # Any simulator exception counts as a failed node
            self._check()
            await self._fail(node, e)
            return

        self._check()
        state = self._session.mark_complete(node.id, result, self._clock.now())
        self._logger.node_complete(node.id, node.display_name, duration_ms=state.duration_ms)
        await self._callbacks.emit(
            CallbackEvent.NODE_COMPLETE,
            node_id=node.id,
            timestamp=self._clock.now(),
            result=result,
        )

        if node.type == NodeType.OUTPUT:
            self._session.output = result
            return

        for edge in self._graph.outgoing(node.id):
            await self._cross(edge, node, result)

    async def _fail(self, node: Node, error: Exception) -> None:
        reason = str(error) or type(error).__name__
        self._session.mark_failed(node.id, reason, self._clock.now())
        self._logger.node_failed(node.id, node.display_name, reason)
        await self._callbacks.emit(
            CallbackEvent.NODE_FAILED,
            node_id=node.id,
            timestamp=self._clock.now(),
            error=reason,
        )

        edge = self._graph.failure_edge(node.id, self._config.failure_keyword)
        if edge is None:
            raise RunAbortedError(node.display_name, reason, node_id=node.id) from error

        await self._cross(edge, node, reason, failure=True)

    async def _cross(
        self,
        edge: Edge,
        source: Node,
        content: str,
        *,
        failure: bool = False,
    ) -> None:
        target = self._graph.get_node(edge.target)
        if target is None:
            raise RunAbortedError(source.display_name, f"edge '{edge.id}' has no target")

        if self._session.visits(target.id) >= self._config.max_node_visits:
            self._logger.debug(
                "Edge skipped, visit limit reached",
                edge=edge.id,
                target=target.id,
                limit=self._config.max_node_visits,
            )
            await self._callbacks.emit(
                CallbackEvent.EDGE_SKIPPED,
                node_id=target.id,
                timestamp=self._clock.now(),
                edge_id=edge.id,
            )
            return

        kind = message_kind_for(source.type, target.type, failure=failure)
        message = self._emitter.emit(edge, content, kind, now=self._clock.now())
        self._session.activate_edge(edge.id)
        self._logger.edge_crossed(edge.id, source.id, target.id, kind.value)
        await self._callbacks.emit(
            CallbackEvent.MESSAGE_EMITTED,
            node_id=target.id,
            timestamp=self._clock.now(),
            edge_id=edge.id,
            message_id=message.id,
            kind=kind.value,
            content=message.content,
        )

        if self._scheduler.mode == RunMode.STEP:
            pending = self._scheduler.pending_count + 1
            self._logger.step_waiting(pending)
            await self._callbacks.emit(
                CallbackEvent.STEP_WAITING,
                node_id=target.id,
                timestamp=self._clock.now(),
                edge_id=edge.id,
                pending=pending,
            )

        delay = self._config.failure_edge_delay if failure else self._config.edge_delay
        await self._scheduler.gate(delay, self._generation)

        await self._callbacks.emit(
            CallbackEvent.EDGE_CROSSED,
            node_id=target.id,
            timestamp=self._clock.now(),
            edge_id=edge.id,
            source=source.id,
        )
        await self._visit(target, upstream=content)
