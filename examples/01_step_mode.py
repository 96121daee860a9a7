#!/usr/bin/env python3
"""Step-by-step playback.

Runs a pattern in step mode: every edge crossing waits until you press
Enter. Type "q" to reset and quit.

Usage:
    python examples/01_step_mode.py [pattern-id]
"""

from __future__ import annotations

import asyncio
import sys

from rich.console import Console

from patternplay import (
    CallbackContext,
    CallbackEvent,
    CallbackManager,
    RunController,
    RunMode,
    configure_logging,
    get_pattern,
)

console = Console()


def on_waiting(ctx: CallbackContext) -> None:
    console.print(
        f"[dim]Next: edge {ctx.data['edge_id']} to {ctx.node_id} "
        f"({ctx.data['pending']} pending). Enter to advance, q to quit.[/dim]"
    )


async def main() -> None:
    configure_logging()
    pattern_id = sys.argv[1] if len(sys.argv) > 1 else "prompt-chaining"

    callbacks = CallbackManager()
    callbacks.register(CallbackEvent.STEP_WAITING, on_waiting)
    controller = RunController(get_pattern(pattern_id), callbacks=callbacks, mode=RunMode.STEP)

    error = controller.start("Summarise the pros and cons of prompt chaining")
    if error is not None:
        console.print(f"[red]{error.message}[/red]")
        return

    loop = asyncio.get_running_loop()
    while controller.is_running:
        if not controller.snapshot().waiting_for_step:
            await asyncio.sleep(0.05)
            continue
        answer = await loop.run_in_executor(None, sys.stdin.readline)
        if answer.strip().lower() == "q":
            controller.reset()
            console.print("[yellow]Run reset.[/yellow]")
            return
        controller.advance_step()

    result = await controller.wait()
    console.print(f"[bold]{result.status.value}[/bold]: {result.output or result.error}")


if __name__ == "__main__":
    asyncio.run(main())
