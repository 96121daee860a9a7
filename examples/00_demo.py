#!/usr/bin/env python3
"""PatternPlay Demo - watch an agent pattern run in the terminal.

Plays back a built-in pattern in automatic mode and redraws a table of node
states and in-flight messages as the run progresses.

Usage:
    python examples/00_demo.py [pattern-id] [input text]

Examples:
    python examples/00_demo.py react-agent "What's the weather in Paris?"
    PATTERNPLAY_DEFAULT_SPEED=2 python examples/00_demo.py routing
"""

from __future__ import annotations

import asyncio
import sys

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from patternplay import (
    NodeStatus,
    RunController,
    RunSnapshot,
    RunStatus,
    configure_logging,
    get_pattern,
    list_patterns,
)

console = Console()

STATUS_STYLE = {
    NodeStatus.IDLE: "dim",
    NodeStatus.RUNNING: "bold yellow",
    NodeStatus.COMPLETE: "green",
    NodeStatus.FAILED: "bold red",
}


def render(controller: RunController, snapshot: RunSnapshot) -> Group:
    """Build the node table and message list for one frame."""
    nodes = Table(title=f"{controller.graph.name} ({snapshot.status.value})")
    nodes.add_column("Node")
    nodes.add_column("Type")
    nodes.add_column("Status")
    nodes.add_column("Visits", justify="right")
    nodes.add_column("Result")

    for node in controller.graph.nodes:
        state = snapshot.node_states[node.id]
        style = STATUS_STYLE[state.status]
        nodes.add_row(
            node.display_name,
            node.type.value,
            f"[{style}]{state.status.value}[/]",
            str(state.visits),
            (state.result or "")[:60],
        )

    messages = Table(title="Messages in flight", show_header=True)
    messages.add_column("Edge")
    messages.add_column("Kind")
    messages.add_column("Progress", justify="right")
    messages.add_column("Content")
    for message in snapshot.messages:
        messages.add_row(
            message.edge_id,
            message.kind.value,
            f"{message.progress:.0%}",
            message.content,
        )

    return Group(nodes, messages)


async def play(pattern_id: str, user_input: str) -> None:
    controller = RunController(get_pattern(pattern_id))

    error = controller.start(user_input)
    if error is not None:
        console.print(f"[red]{error.message}[/red]")
        return

    with Live(render(controller, controller.snapshot()), console=console, refresh_per_second=20) as live:
        while controller.is_running:
            await asyncio.sleep(0.05)
            live.update(render(controller, controller.snapshot()))

    result = await controller.wait()
    if result.status == RunStatus.COMPLETED:
        console.print(Panel(result.output or "", title="Output", border_style="green"))
    else:
        console.print(Panel(result.error or "", title="Run failed", border_style="red"))
    console.print(f"[dim]Iterations: {result.iteration_count}[/dim]")


def main() -> None:
    configure_logging(console=console)

    pattern_id = sys.argv[1] if len(sys.argv) > 1 else "react-agent"
    user_input = " ".join(sys.argv[2:]) or "How do agents decide which tool to use?"

    if pattern_id not in {g.id for g in list_patterns()}:
        console.print(f"[red]Unknown pattern '{pattern_id}'.[/red] Choose one of:")
        for graph in list_patterns():
            console.print(f"  [cyan]{graph.id}[/cyan]  {graph.description}")
        sys.exit(1)

    asyncio.run(play(pattern_id, user_input))


if __name__ == "__main__":
    main()
