"""Example: capturing a run trace and exporting it to JSON.

This example demonstrates:
- Attaching a TraceCollector to a RunController
- Running a pattern to completion with run_sync()
- Reading node status sequences from the trace
- Exporting the trace to a JSON file
"""
from __future__ import annotations

from pathlib import Path

from patternplay import RunController, SimulationConfig, TraceCollector, get_pattern


def main() -> None:
    collector = TraceCollector()
    # Faster than the default timings so the example finishes quickly
    config = SimulationConfig(edge_delay=0.2, failure_edge_delay=0.1, base_rate=0.1)
    controller = RunController(
        get_pattern("routing"),
        config,
        callbacks=collector.callback_manager,
    )

    result = controller.run_sync("Book me a table for two tonight")
    print(f"Status: {result.status.value}")
    print(f"Output: {result.output or result.error}")

    trace = collector.get_last_trace()
    if trace is None:
        return

    print(f"\nTrace {trace.id}: {trace.event_count} events in {trace.duration:.2f}s")
    for node_id, sequence in trace.status_sequences().items():
        print(f"  {node_id:12} {' -> '.join(s.value for s in sequence)}")

    output_path = Path("run_trace.json")
    output_path.write_text(trace.to_json())
    print(f"\nExported trace to {output_path}")


if __name__ == "__main__":
    main()
