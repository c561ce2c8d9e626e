"""Element model: descriptions of component invocations.

An element is either a *function element* (a render function plus its
props) or a *class element* (a stateful component instance plus the class it
was created from).  The shape is fixed by :func:`craft.ui.builder.create_element`
and recorded in ``kind``; everything downstream dispatches on that tag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Union

if TYPE_CHECKING:
    from craft.ui.component import Component
    from craft.ui.context import BuildContext

__all__ = [
    "Child",
    "ClassElement",
    "Element",
    "ElementKind",
    "FunctionComponent",
    "FunctionElement",
    "Props",
]

Props = dict[str, Any]

# props, ctx -> child, list of children, or None
FunctionComponent = Callable[[Props, "BuildContext"], Any]


class ElementKind(Enum):
    FUNCTION = "function"
    CLASS = "class"


@dataclass(eq=False)
class FunctionElement:
    """``render(props, ctx)`` with the given props and children."""

    render: FunctionComponent
    props: Props
    children: list[Child]
    kind: ElementKind = field(default=ElementKind.FUNCTION, init=False)

    @property
    def key(self) -> Any:
        return self.props.get("key")

    @property
    def identity(self) -> object:
        """What must match for a mounted element to be updated in place."""
        return self.render


@dataclass(eq=False)
class ClassElement:
    """A component instance and the class it was constructed from."""

    instance: Component
    component_type: type[Component]
    props: Props
    children: list[Child]
    kind: ElementKind = field(default=ElementKind.CLASS, init=False)

    @property
    def key(self) -> Any:
        return self.props.get("key")

    @property
    def identity(self) -> object:
        return self.component_type


Element = Union[FunctionElement, ClassElement]

# None is skipped, str and int are drawn as text, elements are mounted.
Child = Union[None, int, str, Element]
