"""Telemetry module for PatternPlay.

Provides run trace collection on top of the callback system.
"""

from patternplay.telemetry.collector import RunTrace, TraceCollector, TraceEvent

__all__ = [
    "RunTrace",
    "TraceCollector",
    "TraceEvent",
]
