"""Pytest configuration and fixtures for PatternPlay tests."""

from __future__ import annotations

import asyncio
import heapq
import random
from collections.abc import Callable
from io import StringIO

import pytest
from rich.console import Console

from patternplay.core.clock import Clock
from patternplay.core.config import SimulationConfig
from patternplay.core.controller import RunController
from patternplay.core.graph import PatternGraph
from patternplay.core.settings import PatternPlaySettings
from patternplay.core.simulator import WorkSimulator
from patternplay.core.state import RunMode
from patternplay.core.types import Edge, Node, NodeType
from patternplay.logging import LogLevel, PatternPlayLogger
from patternplay.tracking.callbacks import CallbackManager


async def settle(rounds: int = 50) -> None:
    """Let every ready task run until the loop goes quiet."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class VirtualClock(Clock):
    """Clock whose time only moves when a test advances it.

    sleep() parks the caller on a future; advance() and run_until() fire the
    parked futures in deadline order, settling the event loop after each one.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = 0
        self._timers: list[tuple[float, int, asyncio.Future[None]]] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, delay: float) -> None:
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        heapq.heappush(self._timers, (self._now + max(delay, 0.0), self._seq, fut))
        self._seq += 1
        await fut

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, fut in self._timers if not fut.done())

    async def _fire_next(self) -> None:
        when, _, fut = heapq.heappop(self._timers)
        self._now = max(self._now, when)
        if not fut.done():
            fut.set_result(None)
        await settle()

    async def advance(self, seconds: float) -> None:
        """Move time forward, firing every timer due on the way."""
        await settle()
        target = self._now + seconds
        while self._timers and self._timers[0][0] <= target + 1e-9:
            await self._fire_next()
        self._now = max(self._now, target)

    async def run_until(self, predicate: Callable[[], bool], limit: float = 300.0) -> bool:
        """Fire timers until predicate holds or no timer is due within limit."""
        await settle()
        deadline = self._now + limit
        while not predicate():
            if not self._timers or self._timers[0][0] > deadline:
                return predicate()
            await self._fire_next()
        return True


def make_graph(
    types: list[NodeType],
    pattern_id: str = "linear",
    labels: list[str] | None = None,
) -> PatternGraph:
    """Create a linear graph n0 -> n1 -> ... from node types."""
    labels = labels or [t.value.title() for t in types]
    nodes = [Node(id=f"n{i}", type=t, label=labels[i]) for i, t in enumerate(types)]
    edges = [
        Edge(id=f"e{i}", source=f"n{i}", target=f"n{i + 1}") for i in range(len(types) - 1)
    ]
    return PatternGraph(id=pattern_id, name=pattern_id.title(), nodes=nodes, edges=edges)


def make_router_graph(with_failure_handler: bool = True) -> PatternGraph:
    """Create input -> router -> specialist -> output, optionally with a failure branch."""
    nodes = [
        Node(id="input", type=NodeType.INPUT, label="Input"),
        Node(id="router", type=NodeType.ROUTER, label="Router"),
        Node(id="specialist", type=NodeType.LLM, label="Specialist"),
        Node(id="output", type=NodeType.OUTPUT, label="Output"),
    ]
    edges = [
        Edge(id="e1", source="input", target="router"),
        Edge(id="e2", source="router", target="specialist"),
        Edge(id="e3", source="specialist", target="output"),
    ]
    if with_failure_handler:
        nodes += [
            Node(id="handler", type=NodeType.DEFAULT, label="Failure Handler"),
            Node(id="fallback", type=NodeType.OUTPUT, label="Fallback Output"),
        ]
        edges += [
            Edge(id="e4", source="router", target="handler"),
            Edge(id="e5", source="handler", target="fallback"),
        ]
    return PatternGraph(id="routing", name="Routing", nodes=nodes, edges=edges)


@pytest.fixture
def clock() -> VirtualClock:
    """Create a virtual clock starting at zero."""
    return VirtualClock()


@pytest.fixture
def config() -> SimulationConfig:
    """Default simulation config."""
    return SimulationConfig()


@pytest.fixture
def settings() -> PatternPlaySettings:
    """Settings with library defaults, independent of the environment."""
    return PatternPlaySettings(default_mode="auto", default_speed=1.0, seed=None)


@pytest.fixture
def log_output() -> StringIO:
    """Buffer the test logger writes into."""
    return StringIO()


@pytest.fixture
def logger(log_output: StringIO) -> PatternPlayLogger:
    """Debug-level logger writing into log_output."""
    console = Console(file=log_output, force_terminal=True, width=200)
    return PatternPlayLogger(level=LogLevel.DEBUG, console=console)


@pytest.fixture
def graph_factory():
    """Factory fixture for linear graphs."""
    return make_graph


@pytest.fixture
def router_graph_factory():
    """Factory fixture for router graphs with or without a failure handler."""
    return make_router_graph


@pytest.fixture
def linear_graph() -> PatternGraph:
    """input -> llm -> output."""
    return make_graph([NodeType.INPUT, NodeType.LLM, NodeType.OUTPUT])


@pytest.fixture
def controller_factory(
    clock: VirtualClock,
    config: SimulationConfig,
    settings: PatternPlaySettings,
    logger: PatternPlayLogger,
):
    """Factory fixture for controllers wired to the virtual clock."""

    def _factory(
        graph: PatternGraph,
        *,
        mode: RunMode = RunMode.AUTO,
        speed: float = 1.0,
        seed: int = 7,
        callbacks: CallbackManager | None = None,
        sim_config: SimulationConfig | None = None,
        **kwargs,
    ) -> RunController:
        cfg = sim_config or config
        simulator = WorkSimulator(cfg, clock, random.Random(seed), pattern_id=graph.id)
        return RunController(
            graph,
            cfg,
            clock=clock,
            simulator=simulator,
            callbacks=callbacks,
            logger=logger,
            mode=mode,
            speed=speed,
            settings=settings,
            **kwargs,
        )

    return _factory
