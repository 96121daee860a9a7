"""Simulated work for pattern nodes.

The WorkSimulator is the only place where latency and randomness are
modelled. It returns a result string after a type-dependent delay and
never touches run state, so concurrent branches may call it freely.
"""

from __future__ import annotations

import random

from patternplay.core.clock import AsyncioClock, Clock
from patternplay.core.config import SimulationConfig
from patternplay.core.types import Node, NodeType
from patternplay.errors.exceptions import NodeExecutionError, RouterRejectedError

_LLM_RESPONSES: dict[str, str] = {
    "prompt-chaining": (
        'This is an analysis of your input "{text}" using a chain of specialized '
        "prompts to extract meaning, determine intent, and formulate a response."
    ),
    "parallelization": (
        'Three independent analyses of "{text}" run in parallel and aggregated to '
        "provide a more robust response with diverse perspectives."
    ),
}
_DEFAULT_LLM_RESPONSE = 'Processed your input "{text}" using the {pattern} pattern.'


class WorkSimulator:
    """Produces simulated node results after bounded delays.

    Example:
        >>> simulator = WorkSimulator(pattern_id="routing", rng=random.Random(7))
        >>> result = await simulator.simulate(node, "hello")
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        pattern_id: str = "agent",
    ) -> None:
        """Initialize simulator.

        Args:
            config: Timing configuration.
            clock: Time source for delays.
            rng: Random source for llm latency and router outcomes.
            pattern_id: Pattern name used in mock language-model responses.
        """
        self._config = config or SimulationConfig()
        self._clock = clock or AsyncioClock()
        self._rng = rng or random.Random()
        self._pattern_id = pattern_id
        self._overrides: dict[str, bool] = {}

    @property
    def pattern_id(self) -> str:
        return self._pattern_id

    def force_outcome(self, node_id: str, succeed: bool) -> None:
        """Pin the success/failure outcome of a node for every later call."""
        self._overrides[node_id] = succeed

    def clear_overrides(self) -> None:
        self._overrides.clear()

    def delay_for(self, node: Node) -> float:
        """Work delay for a node at speed 1."""
        if node.type == NodeType.LLM:
            return self._rng.uniform(self._config.llm_delay_min, self._config.llm_delay_max)
        return self._config.delay_for(node.type)

    def _should_succeed(self, node: Node) -> bool:
        if node.id in self._overrides:
            return self._overrides[node.id]
        if node.type == NodeType.ROUTER:
            return self._rng.random() < self._config.router_success_rate
        return True

    def _result_for(self, node: Node, user_input: str, upstream: str | None) -> str:
        if node.type == NodeType.INPUT:
            return f'Processing input: "{user_input}"'
        if node.type == NodeType.LLM:
            template = _LLM_RESPONSES.get(self._pattern_id, _DEFAULT_LLM_RESPONSE)
            return template.format(text=user_input, pattern=self._pattern_id)
        if node.type == NodeType.ROUTER:
            return "Determining next steps based on input analysis..."
        if node.type == NodeType.AGGREGATOR:
            return "Combining results from parallel processes..."
        if node.type == NodeType.OUTPUT:
            return upstream or user_input
        return f"Processed by {node.display_name}"

    async def simulate(
        self,
        node: Node,
        user_input: str,
        *,
        upstream: str | None = None,
        speed: float = 1.0,
    ) -> str:
        """Run the simulated work for one node.

        Args:
            node: Node being executed.
            user_input: Free text the run was started with.
            upstream: Content delivered along the incoming edge, if any.
            speed: Speed factor in effect when the delay is scheduled.

        Returns:
            The node's result string.

        Raises:
            RouterRejectedError: If a router node rejects the input.
            NodeExecutionError: If any other node is forced to fail.
        """
        delay = self.delay_for(node) / speed
        succeed = self._should_succeed(node)

        await self._clock.sleep(delay)

        if not succeed:
            if node.type == NodeType.ROUTER:
                raise RouterRejectedError(node.id)
            raise NodeExecutionError(
                f"{node.display_name} could not complete its work", node_id=node.id
            )
        return self._result_for(node, user_input, upstream)
