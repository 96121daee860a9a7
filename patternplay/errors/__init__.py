"""Error types for PatternPlay."""

from patternplay.errors.exceptions import (
    AmbiguousInputNodeError,
    ConfigurationError,
    ControlError,
    DuplicateIdentifierError,
    EmptyGraphError,
    EmptyInputError,
    InvalidConfigError,
    InvalidSpeedError,
    MissingInputNodeError,
    NodeExecutionError,
    NoActiveRunError,
    NoOutputReachedError,
    PatternPlayError,
    RouterRejectedError,
    RunAbortedError,
    RunAlreadyActiveError,
    SimulationError,
    StaleSessionError,
    UnknownNodeReferenceError,
)

__all__ = [
    "PatternPlayError",
    "ConfigurationError",
    "EmptyGraphError",
    "MissingInputNodeError",
    "AmbiguousInputNodeError",
    "UnknownNodeReferenceError",
    "DuplicateIdentifierError",
    "InvalidConfigError",
    "ControlError",
    "RunAlreadyActiveError",
    "NoActiveRunError",
    "InvalidSpeedError",
    "EmptyInputError",
    "SimulationError",
    "NodeExecutionError",
    "RouterRejectedError",
    "RunAbortedError",
    "NoOutputReachedError",
    "StaleSessionError",
]
