"""The root runtime object tying the scheduler, peripherals and UI together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from craft.system.config import SystemConfig
from craft.system.events import EventSource, SystemSignals
from craft.system.peripheral import PeripheralHost, PeripheralRegistry
from craft.system.scheduler import Scheduler, Task, TaskBody
from craft.ui.context import BuildContext
from craft.utils.signal import Connection

if TYPE_CHECKING:
    from craft.ui.config import UiConfig
    from craft.ui.display import Display
    from craft.ui.types import Element

__all__ = ["System"]

logger = logging.getLogger(__name__)


class System:
    """Owns one :class:`Scheduler` and one :class:`PeripheralRegistry`.

    Usage::

        system = System(EventQueue(), host)
        ctx = system.mount(AnsiDisplay(51, 19), create_element(App))
        system.spawn("app", main)
        await system.run()
        system.close()
    """

    def __init__(
        self,
        source: EventSource,
        peripherals: PeripheralHost,
        config: SystemConfig | None = None,
    ) -> None:
        self.config = config or SystemConfig()
        self.scheduler = Scheduler(source, self.config)
        self.peripherals = PeripheralRegistry(peripherals)
        self.contexts: list[BuildContext] = []
        self._connections: list[Connection] = self.peripherals.bind(
            self.scheduler.signals
        )
        self._closed = False

    @property
    def signals(self) -> SystemSignals:
        return self.scheduler.signals

    def spawn(
        self,
        name: str,
        body: TaskBody,
        description: str | None = None,
    ) -> Task:
        return self.scheduler.spawn(name, body, description)

    def mount(
        self,
        display: Display,
        root: Element,
        config: UiConfig | None = None,
    ) -> BuildContext:
        """Render *root* to *display*, repainting fully on ``term_resize``."""
        ctx = BuildContext(display, root, config)
        self.contexts.append(ctx)
        self._connections.append(
            self.scheduler.signals.term_resize.subscribe(ctx.invalidate)
        )
        ctx.request_render()
        return ctx

    async def run(self) -> None:
        """Pump host events until ``terminate``."""
        await self.scheduler.run()

    def close(self) -> None:
        """Unmount every context and drop all signal bindings."""
        if self._closed:
            return
        self._closed = True
        for ctx in self.contexts:
            ctx.unmount()
        self.contexts.clear()
        for connection in self._connections:
            connection.disconnect()
        self._connections.clear()
        logger.debug("System closed")
