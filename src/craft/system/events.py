"""Host event records, the signals they are routed to, and event sources.

A host event record is a sequence whose first item is the discriminant
(``"key"``, ``"mouse_click"`` ...) followed by that event's positional
fields.  :meth:`SystemSignals.route` unpacks each known kind with its own
fixed field layout and fires the matching signal.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Protocol, Sequence

from craft.utils.signal import Signal

__all__ = [
    "EventQueue",
    "EventSource",
    "MouseButton",
    "ScrollDirection",
    "SystemSignals",
]


class MouseButton(IntEnum):
    """Mouse button numbers as reported by ``mouse_*`` events."""

    LEFT = 1
    RIGHT = 2
    MIDDLE = 3


class ScrollDirection(IntEnum):
    """Direction reported by ``mouse_scroll`` events."""

    UP = -1
    DOWN = 1


# ---------------------------------------------------------------------------
# Event sources
# ---------------------------------------------------------------------------


class EventSource(Protocol):
    """Anything the scheduler pump can pull host event records from."""

    async def pull_event(self) -> Sequence[Any]: ...


class EventQueue:
    """In-process :class:`EventSource` backed by an ``asyncio.Queue``."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[tuple[Any, ...]] = asyncio.Queue()

    def push(self, kind: str, *fields: Any) -> None:
        """Enqueue a host event of *kind* with its positional *fields*."""
        self._queue.put_nowait((kind, *fields))

    def pending(self) -> int:
        return self._queue.qsize()

    async def pull_event(self) -> tuple[Any, ...]:
        return await self._queue.get()


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

# Marks a route whose fields are passed through as-is.
_VARIADIC = -1

# discriminant -> (signal attribute, fixed field count)
_ROUTES: dict[str, tuple[str, int]] = {
    "terminate": ("terminate", 0),
    "alarm": ("alarm", 1),
    "char": ("char", 1),
    "computer_command": ("computer_command", _VARIADIC),
    "disk": ("disk", 1),
    "disk_eject": ("disk_eject", 1),
    "http_check": ("http_check", 3),
    "http_failure": ("http_failure", 3),
    "http_success": ("http_success", 2),
    "key": ("key", 2),
    "key_up": ("key_up", 1),
    "modem_message": ("modem_message", 5),
    "monitor_resize": ("monitor_resize", 1),
    "monitor_touch": ("monitor_touch", 3),
    "mouse_click": ("mouse_click", 3),
    "mouse_drag": ("mouse_drag", 3),
    "mouse_scroll": ("mouse_scroll", 3),
    "mouse_up": ("mouse_up", 3),
    "paste": ("paste", 1),
    "peripheral": ("peripheral", 1),
    "peripheral_detach": ("peripheral_detach", 1),
    "rednet_message": ("rednet_message", 3),
    "redstone": ("redstone", 0),
    # field layout depends on the ok flag, see _task_complete_fields
    "task_complete": ("task_complete", _VARIADIC),
    "term_resize": ("term_resize", 0),
    "turtle_inventory": ("turtle_inventory", 0),
    "websocket_closed": ("websocket_closed", 1),
    "websocket_failure": ("websocket_failure", 2),
    "websocket_message": ("websocket_message", 3),
    "websocket_success": ("websocket_success", 2),
}


def _take(event: Sequence[Any], count: int) -> tuple[Any, ...]:
    """Return exactly *count* fields after the discriminant, padding with ``None``."""
    fields = tuple(event[1 : 1 + count])
    if len(fields) < count:
        fields += (None,) * (count - len(fields))
    return fields


def _task_complete_fields(event: Sequence[Any]) -> tuple[Any, ...]:
    # ok:     (id, True, *extra)
    # failed: (id, False, reason, *extra)
    task_id, ok = _take(event, 2)
    if ok:
        return (task_id, ok, *event[3:])
    reason = event[3] if len(event) > 3 else None
    return (task_id, ok, reason, *event[4:])


@dataclass(eq=False)
class SystemSignals:
    """One signal per host event kind the scheduler understands."""

    terminate: Signal[()] = field(default_factory=Signal)
    alarm: Signal[int] = field(default_factory=Signal)
    char: Signal[str] = field(default_factory=Signal)
    computer_command: Signal[*tuple[str, ...]] = field(default_factory=Signal)
    disk: Signal[str] = field(default_factory=Signal)
    disk_eject: Signal[str] = field(default_factory=Signal)
    http_check: Signal[str, bool, str | None] = field(default_factory=Signal)
    http_failure: Signal[str, str, Any] = field(default_factory=Signal)
    http_success: Signal[str, Any] = field(default_factory=Signal)
    key: Signal[int, bool] = field(default_factory=Signal)
    key_up: Signal[int] = field(default_factory=Signal)
    modem_message: Signal[str, int, int, Any, float] = field(default_factory=Signal)
    monitor_resize: Signal[str] = field(default_factory=Signal)
    monitor_touch: Signal[str, int, int] = field(default_factory=Signal)
    mouse_click: Signal[int, int, int] = field(default_factory=Signal)
    mouse_drag: Signal[int, int, int] = field(default_factory=Signal)
    mouse_scroll: Signal[int, int, int] = field(default_factory=Signal)
    mouse_up: Signal[int, int, int] = field(default_factory=Signal)
    paste: Signal[str] = field(default_factory=Signal)
    peripheral: Signal[str] = field(default_factory=Signal)
    peripheral_detach: Signal[str] = field(default_factory=Signal)
    rednet_message: Signal[int, Any, Any] = field(default_factory=Signal)
    redstone: Signal[()] = field(default_factory=Signal)
    task_complete: Signal[*tuple[Any, ...]] = field(default_factory=Signal)
    term_resize: Signal[()] = field(default_factory=Signal)
    turtle_inventory: Signal[()] = field(default_factory=Signal)
    websocket_closed: Signal[str] = field(default_factory=Signal)
    websocket_failure: Signal[str, str] = field(default_factory=Signal)
    websocket_message: Signal[str, str, bool] = field(default_factory=Signal)
    websocket_success: Signal[str, Any] = field(default_factory=Signal)

    @staticmethod
    def kinds() -> list[str]:
        """Every discriminant that is routed to a signal."""
        return list(_ROUTES)

    def route(self, event: Sequence[Any]) -> bool:
        """Fire the signal for *event*.

        Returns ``False`` if the event kind is not routed (it is dropped).
        """
        if not event:
            return False
        kind = event[0]
        if kind == "task_complete":
            self.task_complete.fire(*_task_complete_fields(event))
            return True

        route = _ROUTES.get(kind) if isinstance(kind, str) else None
        if route is None:
            return False

        name, count = route
        signal: Signal[Any] = getattr(self, name)
        if count == _VARIADIC:
            signal.fire(*event[1:])
        else:
            signal.fire(*_take(event, count))
        return True
