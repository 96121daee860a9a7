"""Built-in agent pattern graphs.

Each entry mirrors a diagram from the pattern library. Node ids, labels and
edge declaration order are kept as drawn, since declaration order decides
which branch the traversal walks first. Intermediate outputs such as a first
draft or a task list are output nodes too: reaching one ends that branch.
"""

from __future__ import annotations

from patternplay.core.graph import PatternGraph
from patternplay.core.types import Edge, Node, NodeType

# (id, label, type)
_NodeSpec = tuple[str, str, NodeType]
# (id, source, target) or (id, source, target, label)
_EdgeSpec = tuple[str, ...]


def _graph(
    pattern_id: str,
    name: str,
    description: str,
    nodes: list[_NodeSpec],
    edges: list[_EdgeSpec],
) -> PatternGraph:
    return PatternGraph(
        id=pattern_id,
        name=name,
        description=description,
        nodes=[Node(id=node_id, label=label, type=node_type) for node_id, label, node_type in nodes],
        edges=[
            Edge(id=spec[0], source=spec[1], target=spec[2], label=spec[3] if len(spec) > 3 else None)
            for spec in edges
        ],
    )


_I, _L, _T, _R = NodeType.INPUT, NodeType.LLM, NodeType.TOOL, NodeType.ROUTER
_A, _P, _E, _O = NodeType.AGGREGATOR, NodeType.PLANNER, NodeType.EVALUATOR, NodeType.OUTPUT

_PATTERNS: dict[str, PatternGraph] = {
    graph.id: graph
    for graph in (
        _graph(
            "prompt-chaining",
            "Prompt Chaining",
            "Decomposes a task into steps, where each LLM call processes the output "
            "of the previous one. A gate checks the intermediate result.",
            [
                ("input", "Input", _I),
                ("llm1", "LLM Call", _L),
                ("gate", "Gate", _R),
                ("llm2", "LLM Call", _L),
                ("llm3", "LLM Call", _L),
                ("output", "Output", _O),
                ("fail", "Fail", _O),
            ],
            [
                ("e1-2", "input", "llm1"),
                ("e2-3", "llm1", "gate"),
                ("e3-4", "gate", "llm2", "Pass"),
                ("e4-5", "llm2", "llm3"),
                ("e5-6", "llm3", "output"),
                ("e3-7", "gate", "fail", "Fail"),
            ],
        ),
        _graph(
            "routing",
            "Routing",
            "Classifies an input and directs it to a specialized followup task, "
            "separating concerns between specialists.",
            [
                ("input", "Input", _I),
                ("router", "Router", _R),
                ("specialist1", "Specialist 1", _L),
                ("specialist2", "Specialist 2", _L),
                ("specialist3", "Specialist 3", _L),
                ("output1", "Output", _O),
                ("output2", "Output", _O),
                ("output3", "Output", _O),
            ],
            [
                ("e1-2", "input", "router"),
                ("e2-3", "router", "specialist1"),
                ("e2-4", "router", "specialist2"),
                ("e2-5", "router", "specialist3"),
                ("e3-6", "specialist1", "output1"),
                ("e4-7", "specialist2", "output2"),
                ("e5-8", "specialist3", "output3"),
            ],
        ),
        _graph(
            "parallelization",
            "Parallelization",
            "Sections a task or runs it several times and aggregates the outputs.",
            [
                ("input", "Input", _I),
                ("llm1", "LLM Call", _L),
                ("llm2", "LLM Call", _L),
                ("llm3", "LLM Call", _L),
                ("aggregator", "Aggregator", _A),
                ("output", "Output", _O),
            ],
            [
                ("e1-2", "input", "llm1"),
                ("e1-3", "input", "llm2"),
                ("e1-4", "input", "llm3"),
                ("e2-5", "llm1", "aggregator"),
                ("e3-5", "llm2", "aggregator"),
                ("e4-5", "llm3", "aggregator"),
                ("e5-6", "aggregator", "output"),
            ],
        ),
        _graph(
            "react-agent",
            "ReAct Agent",
            "An agent alternates between reasoning with an LLM and acting with tools.",
            [
                ("input", "User Query", _I),
                ("llm1", "LLM 1 (Reason)", _L),
                ("tools", "Tools", _T),
                ("llm2", "LLM 2 (Act)", _L),
                ("output", "Output", _O),
            ],
            [
                ("e1-2", "input", "llm1"),
                ("e2-3", "llm1", "tools", "Reason"),
                ("e3-4", "tools", "llm2"),
                ("e4-2", "llm2", "llm1", "Action"),
                ("e2-5", "llm1", "output"),
            ],
        ),
        _graph(
            "self-reflection",
            "Self-Reflection",
            "An agent evaluates its own output and iteratively improves it from critique.",
            [
                ("user", "User", _I),
                ("main-llm", "Main LLM", _L),
                ("memory", "Memory", _T),
                ("tools", "Tools", _T),
                ("first-draft", "First Draft", _O),
                ("critique", "Critique", _L),
                ("generator", "Generator", _L),
                ("result", "Result", _O),
            ],
            [
                ("e1-2", "user", "main-llm", "Query"),
                ("e2-3", "main-llm", "memory"),
                ("e2-4", "main-llm", "tools"),
                ("e2-5", "main-llm", "first-draft"),
                ("e5-6", "first-draft", "critique"),
                ("e6-7", "critique", "generator", "No"),
                ("e7-2", "generator", "main-llm"),
                ("e6-8", "critique", "result", "Yes"),
            ],
        ),
        _graph(
            "agentic-rag",
            "Agentic RAG",
            "An agent retrieves and evaluates relevant data to generate context-aware output.",
            [
                ("user", "User", _I),
                ("agent", "Agent", _L),
                ("tools", "Tools", _T),
                ("vector-search", "Vector Search", _T),
                ("vector-db", "Vector DB", _T),
                ("generator", "Generator", _L),
                ("output", "Output", _O),
            ],
            [
                ("e1-2", "user", "agent", "Query"),
                ("e2-3", "agent", "tools"),
                ("e2-4", "agent", "vector-search"),
                ("e4-5", "vector-search", "vector-db"),
                ("e5-2", "vector-db", "agent"),
                ("e2-6", "agent", "generator"),
                ("e6-7", "generator", "output"),
            ],
        ),
        _graph(
            "codeact-agent",
            "CodeAct Agent",
            "An agent writes and executes code as its actions instead of JSON tool calls.",
            [
                ("user", "User", _I),
                ("agent", "Agent", _L),
                ("think", "Think", _L),
                ("codeact", "CodeAct", _T),
                ("environment", "Environment", _T),
                ("result", "Result", _O),
            ],
            [
                ("e1-2", "user", "agent", "Query"),
                ("e2-3", "agent", "think"),
                ("e3-2", "think", "agent"),
                ("e2-4", "agent", "codeact", "Action"),
                ("e4-5", "codeact", "environment"),
                ("e5-2", "environment", "agent", "Observation"),
                ("e2-6", "agent", "result"),
            ],
        ),
        _graph(
            "modern-tool-use",
            "Modern Tool Use",
            "An agent reaches search and cloud tools through MCP servers.",
            [
                ("query", "Query", _I),
                ("agent", "Agent", _L),
                ("mcp-server1", "MCP Server 1", _T),
                ("mcp-server2", "MCP Server 2", _T),
                ("api1", "API", _T),
                ("api2", "API", _T),
                ("search-kagi", "Search (Kagi)", _T),
                ("cloud-aws", "Cloud (AWS)", _T),
                ("output", "Output", _O),
            ],
            [
                ("e1-2", "query", "agent"),
                ("e2-3", "agent", "mcp-server1"),
                ("e2-4", "agent", "mcp-server2"),
                ("e3-5", "mcp-server1", "api1"),
                ("e4-6", "mcp-server2", "api2"),
                ("e5-7", "api1", "search-kagi"),
                ("e6-8", "api2", "cloud-aws"),
                ("e2-9", "agent", "output"),
            ],
        ),
        _graph(
            "evaluator-optimizer",
            "Evaluator-Optimizer",
            "One LLM call generates a response while another evaluates it in a loop.",
            [
                ("input", "Input", _I),
                ("generator", "Generator", _L),
                ("evaluator", "Evaluator", _E),
                ("output", "Output", _O),
            ],
            [
                ("e1-2", "input", "generator"),
                ("e2-3", "generator", "evaluator", "Response"),
                ("e3-4", "evaluator", "output"),
                ("e3-2", "evaluator", "generator", "Rejected"),
            ],
        ),
        _graph(
            "plan-and-execute",
            "Plan and Execute",
            "A planner generates subtasks, single-task agents solve them and report back.",
            [
                ("input", "Input", _I),
                ("planner", "Planner", _P),
                ("taskList", "Task Lists", _O),
                ("agent", "Single Task Agents", _L),
                ("tools", "Tools", _T),
                ("output", "Output", _O),
            ],
            [
                ("e1-2", "input", "planner"),
                ("e2-3", "planner", "taskList", "Generate Tasks"),
                ("e3-4", "taskList", "agent", "Assign Tasks"),
                ("e4-5", "agent", "tools"),
                ("e5-2", "tools", "planner", "Update Task"),
                ("e2-6", "planner", "output", "Replan"),
            ],
        ),
    )
}


def list_patterns() -> list[PatternGraph]:
    """All built-in patterns in catalogue order."""
    return list(_PATTERNS.values())


def get_pattern(pattern_id: str) -> PatternGraph:
    """Look up a built-in pattern by id.

    Raises:
        KeyError: If no pattern has that id.
    """
    try:
        return _PATTERNS[pattern_id]
    except KeyError:
        available = ", ".join(_PATTERNS)
        raise KeyError(f"Unknown pattern '{pattern_id}'. Available: {available}") from None
