"""Tracking module for PatternPlay.

Provides the callback system rendering surfaces use to follow a run.
"""

from patternplay.tracking.callbacks import (
    CallbackContext,
    CallbackEvent,
    CallbackManager,
)

__all__ = [
    "CallbackEvent",
    "CallbackContext",
    "CallbackManager",
]
