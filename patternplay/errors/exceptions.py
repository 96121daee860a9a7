"""PatternPlay exception hierarchy.

All exceptions inherit from PatternPlayError for easy catching.
Each exception includes a `retryable` flag to indicate if the operation can be retried.
"""

from __future__ import annotations


class PatternPlayError(Exception):
    """Base exception for all PatternPlay errors."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable

    @property
    def message(self) -> str:
        """Plain message suitable for showing to a learner."""
        return str(self)


# Configuration Errors
class ConfigurationError(PatternPlayError):
    """The pattern graph or engine configuration cannot be used."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=False)


class EmptyGraphError(ConfigurationError):
    """Pattern graph has no nodes."""

    def __init__(self, pattern_id: str | None = None) -> None:
        name = f" '{pattern_id}'" if pattern_id else ""
        super().__init__(f"Pattern{name} has no nodes. Add nodes before running.")
        self.pattern_id = pattern_id


class MissingInputNodeError(ConfigurationError):
    """Pattern graph has no node of type 'input'."""

    def __init__(self, pattern_id: str | None = None) -> None:
        name = f" '{pattern_id}'" if pattern_id else ""
        super().__init__(f"Pattern{name} has no input node to start from.")
        self.pattern_id = pattern_id


class AmbiguousInputNodeError(ConfigurationError):
    """Pattern graph has more than one node of type 'input'."""

    def __init__(self, node_ids: list[str]) -> None:
        super().__init__(
            f"Pattern has {len(node_ids)} input nodes ({', '.join(node_ids)}); "
            "exactly one is required."
        )
        self.node_ids = node_ids


class UnknownNodeReferenceError(ConfigurationError):
    """Edge references a node id that is not part of the graph."""

    def __init__(self, edge_id: str, node_id: str) -> None:
        super().__init__(f"Edge '{edge_id}' references unknown node '{node_id}'.")
        self.edge_id = edge_id
        self.node_id = node_id


class DuplicateIdentifierError(ConfigurationError):
    """Two nodes (or two edges) share the same id."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"Duplicate {kind} id '{identifier}'.")
        self.kind = kind
        self.identifier = identifier


class InvalidConfigError(ConfigurationError):
    """Invalid configuration value."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid config for '{field}': {value}. {reason}")
        self.field = field
        self.value = value


# Control Errors
class ControlError(PatternPlayError):
    """A control-surface request cannot be honoured in the current state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=False)


class RunAlreadyActiveError(ControlError):
    """start() was called while a run is still live."""

    def __init__(self) -> None:
        super().__init__("A run is already active. Reset it before starting again.")


class NoActiveRunError(ControlError):
    """pause()/resume() was called without a live automatic run."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Cannot {action}: no automatic run is active.")
        self.action = action


class InvalidSpeedError(ControlError):
    """Speed factor is not one of the supported values."""

    def __init__(self, factor: float, allowed: tuple[float, ...]) -> None:
        allowed_str = ", ".join(f"{a:g}" for a in allowed)
        super().__init__(f"Unsupported speed {factor:g}. Choose one of: {allowed_str}.")
        self.factor = factor
        self.allowed = allowed


class EmptyInputError(ControlError):
    """start() was called with blank user input."""

    def __init__(self) -> None:
        super().__init__("Enter some text to process before starting the run.")


# Simulation Errors
class SimulationError(PatternPlayError):
    """Base class for failures that happen while a run is executing."""

    def __init__(self, message: str, *, node_id: str | None = None) -> None:
        super().__init__(message, retryable=True)
        self.node_id = node_id


class NodeExecutionError(SimulationError):
    """Simulated work for a node failed."""


class RouterRejectedError(NodeExecutionError):
    """Router node decided the input cannot be processed further."""

    def __init__(self, node_id: str | None = None) -> None:
        super().__init__(
            "Router determined input cannot be processed further",
            node_id=node_id,
        )


class RunAbortedError(SimulationError):
    """A node failed and no failure-handler edge was available."""

    def __init__(self, label: str, reason: str, *, node_id: str | None = None) -> None:
        super().__init__(f"{label} failed: {reason}", node_id=node_id)
        self.label = label
        self.reason = reason


class NoOutputReachedError(SimulationError):
    """Traversal ended without any output node completing."""

    def __init__(self) -> None:
        super().__init__("Run finished without reaching an output node.")


# Scheduler integrity
class StaleSessionError(PatternPlayError):
    """A suspension resumed after the session that created it was reset."""

    def __init__(self, expected: int, current: int) -> None:
        super().__init__(
            f"Suspension from generation {expected} resumed in generation {current}.",
            retryable=False,
        )
        self.expected = expected
        self.current = current
