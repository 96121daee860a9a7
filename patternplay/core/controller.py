"""Run controller: the public control surface of the engine.

The controller owns the one live RunSession, the traversal task and the flow
emitter. Control requests return error values instead of raising, so a UI
event handler can show the message directly.
"""

from __future__ import annotations

import asyncio
import random

from patternplay.core.clock import AsyncioClock, Clock
from patternplay.core.config import SimulationConfig
from patternplay.core.emitter import EndpointsProvider, FlowEmitter
from patternplay.core.graph import PatternGraph
from patternplay.core.scheduler import StepScheduler
from patternplay.core.settings import PatternPlaySettings, get_settings
from patternplay.core.simulator import WorkSimulator
from patternplay.core.state import RunMode, RunResult, RunSession, RunSnapshot, RunStatus
from patternplay.core.traversal import TraversalEngine
from patternplay.core.types import FlowMessage, Node
from patternplay.errors.exceptions import (
    ConfigurationError,
    ControlError,
    EmptyInputError,
    InvalidConfigError,
    InvalidSpeedError,
    NoActiveRunError,
    PatternPlayError,
    RunAlreadyActiveError,
    SimulationError,
    StaleSessionError,
)
from patternplay.logging import PatternPlayLogger, get_logger
from patternplay.tracking.callbacks import CallbackEvent, CallbackManager


class RunController:
    """Starts, steers and observes simulated runs of one pattern graph.

    Example:
        >>> controller = RunController(get_pattern("prompt-chaining"))
        >>> result = controller.run_sync("Tell me about agent patterns")
        >>> result.output
    """

    def __init__(
        self,
        graph: PatternGraph,
        config: SimulationConfig | None = None,
        *,
        clock: Clock | None = None,
        simulator: WorkSimulator | None = None,
        rng: random.Random | None = None,
        callbacks: CallbackManager | None = None,
        logger: PatternPlayLogger | None = None,
        endpoints: EndpointsProvider | None = None,
        mode: RunMode | str | None = None,
        speed: float | None = None,
        settings: PatternPlaySettings | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            graph: Pattern to simulate.
            config: Timing configuration.
            clock: Time source shared by every suspension point.
            simulator: Work simulator; built from config/clock/rng if None.
            rng: Random source for a default simulator.
            callbacks: Callback manager notified of run events.
            logger: Logger; the global logger if None.
            endpoints: Edge geometry lookup for message positions.
            mode: Initial mode; settings default if None.
            speed: Initial speed factor; settings default if None.
            settings: Environment settings; cached settings if None.
        """
        settings = settings or get_settings()
        self._graph = graph
        self._config = config or SimulationConfig()
        self._clock = clock or AsyncioClock()
        if rng is None and settings.seed is not None:
            rng = random.Random(settings.seed)
        self._simulator = simulator or WorkSimulator(
            self._config, self._clock, rng, pattern_id=graph.id
        )
        self._callbacks = callbacks or CallbackManager()
        self._logger = logger or get_logger()

        self._scheduler = StepScheduler(
            self._clock,
            RunMode(mode or settings.default_mode),
            speed if speed is not None else settings.default_speed,
        )
        self._emitter = FlowEmitter(
            self._config,
            self._clock,
            on_arrival=self._on_arrival,
            endpoints=endpoints,
        )
        self._emitter.speed = self._scheduler.speed
        self._task: asyncio.Task[None] | None = None
        self._session = self._new_session()

    def _new_session(self) -> RunSession:
        session = RunSession(
            self._graph.id,
            self._graph.node_ids,
            mode=self._scheduler.mode,
            speed=self._scheduler.speed,
            generation=self._scheduler.generation,
        )
        # The emitter owns message progress; the session exposes the same dict
        session.messages = self._emitter.messages
        return session

    @property
    def graph(self) -> PatternGraph:
        return self._graph

    @property
    def simulator(self) -> WorkSimulator:
        return self._simulator

    @property
    def callbacks(self) -> CallbackManager:
        return self._callbacks

    @property
    def mode(self) -> RunMode:
        return self._scheduler.mode

    @property
    def speed(self) -> float:
        return self._scheduler.speed

    @property
    def is_running(self) -> bool:
        return self._session.is_active

    def snapshot(self) -> RunSnapshot:
        """Read-only copy of the current session."""
        return self._session.snapshot(waiting_for_step=self._scheduler.is_waiting)

    def start(self, user_input: str) -> PatternPlayError | None:
        """Begin a run in the background on the running event loop.

        Returns:
            None if the run started, otherwise the reason it did not.
        """
        if self._session.is_active:
            return RunAlreadyActiveError()
        if not user_input or not user_input.strip():
            return EmptyInputError()

        try:
            input_node = self._graph.validate_structure()
        except ConfigurationError as e:
            self._logger.error("Pattern cannot be run", pattern=self._graph.id, error=e)
            return e

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return ControlError("start() needs a running event loop; use run_sync() instead.")

        # Previous finished run: drop its leftover messages and pause
        self._emitter.clear()
        self._emitter.speed = self._scheduler.speed
        self._scheduler.resume()
        self._session = self._new_session()
        self._session.status = RunStatus.RUNNING
        self._session.user_input = user_input

        self._logger.run_start(
            self._graph.id,
            len(self._graph.nodes),
            self._scheduler.mode.value,
            self._scheduler.speed,
        )
        self._task = loop.create_task(self._run(self._session, input_node, user_input))
        return None

    async def _run(self, session: RunSession, input_node: Node, user_input: str) -> None:
        await self._callbacks.emit(
            CallbackEvent.RUN_START,
            timestamp=self._clock.now(),
            pattern_id=self._graph.id,
            user_input=user_input,
            mode=session.mode.value,
        )
        engine = TraversalEngine(
            self._graph,
            session,
            self._simulator,
            self._scheduler,
            self._emitter,
            config=self._config,
            clock=self._clock,
            callbacks=self._callbacks,
            logger=self._logger,
        )

        try:
            output = await engine.run(input_node, user_input)
        except StaleSessionError as e:
            self._logger.debug("Discarded stale run", expected=e.expected, current=e.current)
            return
        except SimulationError as e:
            await self._record_failure(session, e.message)
            return
        except Exception as e:
            self._logger.error("Unexpected error in traversal", error=repr(e))
            await self._record_failure(session, "The simulation stopped unexpectedly.")
            return

        if session.generation != self._scheduler.generation:
            return
        self._clear_pause(session)
        session.finish(output)
        self._logger.run_end(session.iteration_count, output)
        await self._callbacks.emit(
            CallbackEvent.RUN_END,
            timestamp=self._clock.now(),
            output=output,
            iterations=session.iteration_count,
        )

    async def _record_failure(self, session: RunSession, error: str) -> None:
        if session.generation != self._scheduler.generation:
            return
        self._clear_pause(session)
        session.fail(error)
        self._logger.run_error(error)
        await self._callbacks.emit(
            CallbackEvent.RUN_ERROR,
            timestamp=self._clock.now(),
            error=error,
            iterations=session.iteration_count,
        )

    def _clear_pause(self, session: RunSession) -> None:
        # A run may end while paused; no gate is left to consume the flag
        self._scheduler.resume()
        self._emitter.paused = False
        session.paused = False

    async def _on_arrival(self, message: FlowMessage) -> None:
        self._session.release_edge(message.edge_id)
        await self._callbacks.emit(
            CallbackEvent.MESSAGE_ARRIVED,
            node_id=message.target,
            timestamp=self._clock.now(),
            edge_id=message.edge_id,
            message_id=message.id,
            kind=message.kind.value,
        )

    def reset(self) -> None:
        """Discard the current run and return every node to idle.

        Safe to call in any state, any number of times.
        """
        # Cancel first so the pending gate future is cancelled with the task
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._scheduler.reset()
        self._emitter.clear()
        self._session = self._new_session()
        self._logger.debug("Run reset", pattern=self._graph.id)
        self._callbacks.emit_sync(CallbackEvent.RUN_RESET, timestamp=self._clock.now())

    def pause(self) -> ControlError | None:
        """Freeze a live automatic run at its next step boundary."""
        if not self._session.is_active or self._scheduler.mode != RunMode.AUTO:
            return NoActiveRunError("pause")
        self._scheduler.pause()
        self._emitter.paused = True
        self._session.paused = True
        self._logger.info("Run paused", pattern=self._graph.id)
        self._callbacks.emit_sync(CallbackEvent.RUN_PAUSED, timestamp=self._clock.now())
        return None

    def resume(self) -> ControlError | None:
        """Continue a paused automatic run."""
        if not self._session.is_active or self._scheduler.mode != RunMode.AUTO:
            return NoActiveRunError("resume")
        if not self._scheduler.paused:
            return None
        self._scheduler.resume()
        self._emitter.paused = False
        self._session.paused = False
        self._logger.info("Run resumed", pattern=self._graph.id)
        self._callbacks.emit_sync(CallbackEvent.RUN_RESUMED, timestamp=self._clock.now())
        return None

    def set_speed(self, factor: float) -> InvalidSpeedError | None:
        """Change the speed factor for delays scheduled from now on."""
        try:
            self._scheduler.set_speed(factor)
        except InvalidSpeedError as e:
            return e
        self._emitter.speed = self._scheduler.speed
        self._session.speed = self._scheduler.speed
        self._logger.debug("Speed changed", speed=self._scheduler.speed)
        return None

    def set_mode(self, mode: RunMode | str) -> InvalidConfigError | None:
        """Switch between automatic and step mode.

        A live run is reset first; the mode never changes under a pending
        suspension.
        """
        try:
            new_mode = RunMode(mode)
        except ValueError:
            return InvalidConfigError("mode", mode, "Use 'auto' or 'step'.")
        if new_mode == self._scheduler.mode:
            return None
        live = self._session.is_active or self._scheduler.is_waiting
        self._scheduler.set_mode(new_mode)
        if live:
            # Picks up the new mode in the fresh session
            self.reset()
        else:
            self._session.mode = new_mode
        self._logger.debug("Mode changed", mode=new_mode.value)
        return None

    def advance_step(self) -> bool:
        """Release the oldest pending step-mode suspension.

        Returns:
            True if a suspension was released; False if nothing was waiting.
        """
        if self._scheduler.mode != RunMode.STEP:
            return False
        released = self._scheduler.advance()
        if released:
            self._logger.debug("Step advanced", pending=self._scheduler.pending_count)
        return released

    async def wait(self) -> RunResult:
        """Wait for the current run to finish and return its result."""
        if self._task is not None:
            await asyncio.wait({self._task})
        snapshot = self.snapshot()
        return RunResult(
            output=snapshot.output,
            error=snapshot.error,
            status=snapshot.status,
            snapshot=snapshot,
        )

    def run_sync(self, user_input: str) -> RunResult:
        """Run the pattern to completion in automatic mode.

        Convenience method for non-async contexts.

        Args:
            user_input: Free text to process.

        Returns:
            RunResult with the final output or error.
        """
        return asyncio.run(self._run_to_end(user_input))

    async def _run_to_end(self, user_input: str) -> RunResult:
        if self._scheduler.mode != RunMode.AUTO:
            error: PatternPlayError | None = ControlError(
                "run_sync() only supports automatic mode."
            )
        else:
            error = self.start(user_input)
        if error is not None:
            snapshot = self.snapshot()
            return RunResult(
                output=None,
                error=error.message,
                status=RunStatus.FAILED,
                snapshot=snapshot,
            )
        try:
            return await self.wait()
        finally:
            self._emitter.stop()
