"""Base class for stateful components."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

from craft.utils.signal import Signal

if TYPE_CHECKING:
    from craft.ui.context import BuildContext
    from craft.ui.types import Props

__all__ = ["Component"]


class Component(ABC):
    """A class-based component.

    Instances are created by :func:`~craft.ui.builder.create_element`.  While
    mounted, the owning :class:`~craft.ui.context.BuildContext` listens to
    :attr:`needs_rebuild` and re-renders the component on its next pass.
    Lifecycle hooks do nothing unless overridden.
    """

    def __init__(self, props: Props) -> None:
        self.props = props
        self.needs_rebuild: Signal[()] = Signal()

    def will_mount(self, ctx: BuildContext) -> None:
        """Called before the first render."""

    def did_mount(self, ctx: BuildContext) -> None:
        """Called once the first render has been flushed to the display."""

    def will_unmount(self, ctx: BuildContext) -> None:
        """Called before the component is removed from the tree."""

    def should_update(self, next_props: Props, ctx: BuildContext) -> bool:
        """Return ``True`` if receiving *next_props* should re-render."""
        return True

    def set_state(self, mutator: Callable[[], Any] | None = None) -> None:
        """Apply *mutator* (if any) and queue this component for re-render."""
        if mutator is not None:
            mutator()
        self.needs_rebuild.fire()

    @abstractmethod
    def render(self, ctx: BuildContext) -> Any:
        """Draw to *ctx* and return the child (or children) to mount."""
