"""Typed multi-subscriber signals and their disposable connections.

A :class:`Signal` fires synchronously to every handler that was subscribed
when :meth:`Signal.fire` was called.  The handler list is snapshotted at the
start of each fire, so handlers added during a pass only run from the next
fire, and handlers removed during a pass still run for the current one.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVarTuple, Unpack

from craft.utils.errors import AlreadyDisconnectedError

__all__ = ["Connection", "Signal"]

Ts = TypeVarTuple("Ts")


class Connection:
    """Disposable handle returned by :meth:`Signal.subscribe`."""

    def __init__(self, perform_disconnect: Callable[[], None]) -> None:
        self._perform_disconnect = perform_disconnect
        self._connected = True

    @classmethod
    def wrap(cls, callback: Callable[[], None]) -> Connection:
        """Create a connection that invokes *callback* when disconnected."""
        return cls(callback)

    @property
    def connected(self) -> bool:
        return self._connected

    def disconnect(self) -> None:
        """Run the teardown callback.

        Raises :class:`AlreadyDisconnectedError` on a second call.
        """
        if not self._connected:
            raise AlreadyDisconnectedError("Connection is already disconnected")
        self._connected = False
        self._perform_disconnect()


class Signal(Generic[Unpack[Ts]]):
    """A brutally simple typed event."""

    def __init__(self) -> None:
        # dict keys keep insertion order and give O(1) removal
        self._handlers: dict[Callable[[*Ts], object], None] = {}

    def __len__(self) -> int:
        return len(self._handlers)

    def __bool__(self) -> bool:
        return bool(self._handlers)

    def subscribe(self, handler: Callable[[*Ts], object]) -> Connection:
        """Bind *handler* to this signal and return a connection for it."""
        self._handlers[handler] = None
        return Connection.wrap(lambda: self.unsubscribe(handler))

    def unsubscribe(self, handler: Callable[[*Ts], object]) -> None:
        """Remove *handler* (no-op if it is not subscribed)."""
        self._handlers.pop(handler, None)

    def fire(self, *args: *Ts) -> None:
        """Invoke every currently subscribed handler with *args*."""
        if not self._handlers:
            return
        for handler in list(self._handlers):
            handler(*args)
