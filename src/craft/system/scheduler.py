"""Cooperative task scheduler and host event pump.

All tasks run on one asyncio event loop and only give up control at
``await`` points.  The scheduler owns a single pump task that pulls host
events one at a time from an :class:`~craft.system.events.EventSource` and
fires the corresponding :class:`~craft.system.events.SystemSignals` signal.
Cancellation is cooperative: a ``terminate`` event fires
``signals.terminate`` and stops the pump; every other task is expected to
notice (via :attr:`Scheduler.terminated` or :meth:`Scheduler.wait_for`) and
return on its own.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence

from craft.system.config import SystemConfig
from craft.system.events import EventSource, SystemSignals
from craft.utils.signal import Signal

__all__ = ["Scheduler", "Task", "TaskBody", "TaskState"]

logger = logging.getLogger(__name__)

TaskBody = Callable[[], Awaitable[None]]


class TaskState(Enum):
    SPAWNED = "spawned"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(eq=False)
class Task:
    """A cooperative unit of work created by :meth:`Scheduler.spawn`."""

    name: str
    body: TaskBody
    description: str | None = None
    state: TaskState = TaskState.SPAWNED
    error: BaseException | None = None
    handle: asyncio.Task[None] | None = field(default=None, repr=False)

    @property
    def failed(self) -> bool:
        return self.error is not None


class Scheduler:
    """Owns the active task set and the host event pump."""

    def __init__(
        self,
        source: EventSource,
        config: SystemConfig | None = None,
    ) -> None:
        self._source = source
        self._config = config or SystemConfig()
        self.signals = SystemSignals()
        self.tasks: set[Task] = set()
        self._pump: Task | None = None
        self._terminated = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def terminated(self) -> bool:
        """``True`` once a ``terminate`` event has been dispatched."""
        return self._terminated

    @property
    def pump(self) -> Task | None:
        return self._pump

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def spawn(
        self,
        name: str,
        body: TaskBody,
        description: str | None = None,
    ) -> Task:
        """Run *body* as a new task on the running event loop.

        Exceptions raised by *body* are logged and swallowed; the task is
        removed from :attr:`tasks` whether it returns or fails.
        """
        task = Task(name=name, body=body, description=description)
        self.tasks.add(task)
        task.handle = asyncio.get_running_loop().create_task(
            self._run_task(task), name=name
        )
        return task

    async def _run_task(self, task: Task) -> None:
        task.state = TaskState.RUNNING
        try:
            await task.body()
        except Exception as exc:
            task.error = exc
            logger.exception("Task %r failed", task.name)
        finally:
            task.state = TaskState.COMPLETED
            self.tasks.discard(task)

    async def join(self) -> None:
        """Wait until every currently active task has completed."""
        handles = [t.handle for t in list(self.tasks) if t.handle is not None]
        if handles:
            await asyncio.gather(*handles)

    async def wait_for(self, signal: Signal[Any]) -> tuple[Any, ...] | None:
        """Suspend until *signal* next fires and return its arguments.

        Returns ``None`` instead if the scheduler is (or becomes) terminated,
        which is how well-behaved tasks learn they should return.
        """
        if self._terminated:
            return None

        future: asyncio.Future[tuple[Any, ...] | None] = (
            asyncio.get_running_loop().create_future()
        )

        def on_fire(*args: Any) -> None:
            if not future.done():
                future.set_result(args)

        def on_terminate() -> None:
            if not future.done():
                future.set_result(None)

        fired = signal.subscribe(on_fire)
        terminated = self.signals.terminate.subscribe(on_terminate)
        try:
            return await future
        finally:
            fired.disconnect()
            terminated.disconnect()

    # ------------------------------------------------------------------
    # Event pump
    # ------------------------------------------------------------------

    def dispatch(self, event: Sequence[Any]) -> bool:
        """Route one host event record to its signal.

        Returns ``False`` when the event was ``terminate`` and the pump
        should stop.  Unknown kinds are dropped.
        """
        if event and event[0] == "terminate":
            self._terminated = True
            self.signals.route(event)
            return False

        if not self.signals.route(event):
            logger.debug("Dropped unrouted event %r", event[0] if event else None)
        return True

    async def _run_pump(self) -> None:
        running = True
        while running:
            event = await self._source.pull_event()
            try:
                running = self.dispatch(event)
            except Exception:
                logger.exception(
                    "Handler for %r event failed", event[0] if event else None
                )
                running = not self._terminated
            # let tasks woken by this event run before the next one is read
            await asyncio.sleep(0)

    def start(self) -> Task:
        """Spawn the pump task (idempotent while it is running)."""
        if self._pump is not None and self._pump.state is not TaskState.COMPLETED:
            return self._pump
        self._pump = self.spawn(
            self._config.pump_name,
            self._run_pump,
            self._config.pump_description,
        )
        return self._pump

    async def run(self) -> None:
        """Start the pump and wait until a ``terminate`` event stops it."""
        pump = self.start()
        if pump.handle is not None:
            await pump.handle
