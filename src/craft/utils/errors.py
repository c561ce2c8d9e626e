"""Exception types raised for programmer errors.

Expected absence (an unknown peripheral, an unrouted event) is expressed with
``None`` returns and silent no-ops; these exceptions indicate a logic defect
and are meant to propagate.
"""

from __future__ import annotations


class CraftError(Exception):
    """Base class for all craft errors."""


class AlreadyDisconnectedError(CraftError):
    """Raised when a :class:`~craft.utils.signal.Connection` is disconnected twice."""


class LayerStackError(CraftError):
    """Raised when a component pops a drawing layer it did not push."""
