"""
Exceptions raised by `atria`.

Every exception derives from `ATriaError` and from `ValueError`, so existing handlers for `ValueError` continue to
catch them. None of these conditions are retried: the computation is deterministic.
"""
from __future__ import annotations


class ATriaError(ValueError):
    """Base class for ATria errors."""


class InvalidEdgeError(ATriaError):
    """Raised when removing an edge that is absent, a self-edge, or out of range."""

    def __init__(self, source: int, target: int, reason: str):
        self.source = source
        self.target = target
        self.reason = reason
        super().__init__(f"Invalid edge ({source}, {target}): {reason}.")


class NegativeWeightUnsupportedError(ATriaError):
    """Raised when a negative weight is encountered and the negative-weight policy rejects them."""

    def __init__(self, source: int, target: int, weight: float):
        self.source = source
        self.target = target
        self.weight = weight
        super().__init__(
            f"Negative weight {weight} on edge ({source}, {target}) is not supported by the REJECT policy. "
            "Use NegativeWeightPolicy.REWEIGHT for signed networks."
        )


class NegativeCycleDetectedError(ATriaError):
    """Raised when the network contains a cycle with negative total weight."""

    def __init__(self, message: str = "Negative cycle detected: shortest paths are undefined."):
        super().__init__(message)


class EmptyGraphError(ATriaError):
    """Raised when a computation is requested on a network with zero nodes."""

    def __init__(self, message: str = "The weight matrix contains zero nodes."):
        super().__init__(message)


class DimensionMismatchError(ATriaError):
    """Raised for non-square matrices or mismatched label counts."""
