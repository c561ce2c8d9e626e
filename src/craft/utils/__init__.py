"""Shared primitives: signals, connections and error types."""

from craft.utils.errors import AlreadyDisconnectedError, CraftError, LayerStackError
from craft.utils.signal import Connection, Signal

__all__ = [
    "AlreadyDisconnectedError",
    "Connection",
    "CraftError",
    "LayerStackError",
    "Signal",
]
