"""Cooperative scheduler, host events and peripheral tracking."""

from craft.system.config import SystemConfig
from craft.system.events import (
    EventQueue,
    EventSource,
    MouseButton,
    ScrollDirection,
    SystemSignals,
)
from craft.system.peripheral import PeripheralEntry, PeripheralHost, PeripheralRegistry
from craft.system.runtime import System
from craft.system.scheduler import Scheduler, Task, TaskBody, TaskState

__all__ = [
    "EventQueue",
    "EventSource",
    "MouseButton",
    "PeripheralEntry",
    "PeripheralHost",
    "PeripheralRegistry",
    "Scheduler",
    "ScrollDirection",
    "System",
    "SystemConfig",
    "SystemSignals",
    "Task",
    "TaskBody",
    "TaskState",
]
