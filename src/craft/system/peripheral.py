"""Registry of peripherals currently attached to the host.

Entries are created from ``peripheral`` events and removed on
``peripheral_detach``.  Lookups go through a :class:`PeripheralHost`, the
host-side API that can wrap a name into a device handle and report its type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from craft.system.events import SystemSignals
from craft.utils.signal import Connection, Signal

__all__ = ["PeripheralEntry", "PeripheralHost", "PeripheralRegistry"]

logger = logging.getLogger(__name__)


class PeripheralHost(Protocol):
    """Host API used to resolve attached peripherals."""

    def wrap(self, name: str) -> Any | None: ...

    def get_type(self, handle: Any) -> str | None: ...


@dataclass(eq=False)
class PeripheralEntry:
    """A wrapped peripheral."""

    name: str
    type: str
    wrapped: Any
    mounted: bool = True
    unmounted: Signal[()] = field(default_factory=Signal, repr=False)


PeripheralFilter = Callable[[PeripheralEntry], bool]


class PeripheralRegistry:
    """Tracks attached peripherals by name."""

    def __init__(self, host: PeripheralHost) -> None:
        self._host = host
        self._entries: dict[str, PeripheralEntry] = {}
        self.mounted_signal: Signal[PeripheralEntry] = Signal()
        self.detached_signal: Signal[PeripheralEntry] = Signal()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def bind(self, signals: SystemSignals) -> list[Connection]:
        """Follow the scheduler's attach/detach signals."""
        return [
            signals.peripheral.subscribe(self.attach),
            signals.peripheral_detach.subscribe(self.detach),
        ]

    def attach(self, name: str) -> None:
        """Wrap and register the peripheral called *name*.

        Silently does nothing if the host cannot wrap it or report its type.
        An entry already registered under *name* is detached first.
        """
        if name in self._entries:
            self.detach(name)

        wrapped = self._host.wrap(name)
        if wrapped is None:
            logger.debug("Ignoring attach of %r: no device handle", name)
            return

        ty = self._host.get_type(wrapped)
        if not ty:
            logger.debug("Ignoring attach of %r: unknown type", name)
            return

        entry = PeripheralEntry(name=name, type=ty, wrapped=wrapped)
        self._entries[name] = entry
        self.mounted_signal.fire(entry)

    def detach(self, name: str) -> None:
        """Unregister *name*; unknown names are ignored."""
        entry = self._entries.get(name)
        if entry is None:
            return

        entry.mounted = False
        entry.unmounted.fire()
        del self._entries[name]
        self.detached_signal.fire(entry)

    def get(self, name: str) -> PeripheralEntry | None:
        return self._entries.get(name)

    def all(
        self,
        type: str | None = None,
        predicate: PeripheralFilter | None = None,
    ) -> list[PeripheralEntry]:
        """Return every entry of *type* (any type if ``None``) passing *predicate*."""
        return [
            entry
            for entry in self._entries.values()
            if (type is None or entry.type == type)
            and (predicate is None or predicate(entry))
        ]

    def one(
        self,
        type: str,
        predicate: PeripheralFilter | None = None,
    ) -> PeripheralEntry | None:
        """Return the first entry of *type* passing *predicate*, or ``None``."""
        matches = self.all(type, predicate)
        return matches[0] if matches else None
