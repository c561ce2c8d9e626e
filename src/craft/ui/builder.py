"""Element construction, suitable as a JSX-style ``h()`` factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from craft.ui.component import Component
from craft.ui.types import Child, ClassElement, Element, FunctionElement, Props

if TYPE_CHECKING:
    from craft.ui.context import BuildContext

__all__ = ["Fragment", "create_element", "flatten_children"]


def flatten_children(children: Iterable[Any]) -> list[Child]:
    """Flatten nested lists/tuples of children, dropping ``None``."""
    result: list[Child] = []
    for child in children:
        if child is None or isinstance(child, bool):
            continue
        if isinstance(child, (list, tuple)):
            result.extend(flatten_children(child))
        else:
            result.append(child)
    return result


def _is_component_class(component: object) -> bool:
    return isinstance(component, type) and issubclass(component, Component)


def create_element(
    component: Any,
    props: Props | None = None,
    *children: Any,
) -> Element:
    """Create an element for *component* with *props* and *children*.

    A :class:`Component` subclass is instantiated right away and yields a
    :class:`ClassElement`; any other callable is treated as a function
    component.  The props handed to the component carry ``children``.
    """
    merged: Props = dict(props or {})
    # positional children win over a "children" prop
    flat = flatten_children(children or merged.get("children") or ())
    merged["children"] = flat

    if _is_component_class(component):
        return ClassElement(
            instance=component(merged),
            component_type=component,
            props=merged,
            children=flat,
        )
    return FunctionElement(render=component, props=merged, children=flat)


def Fragment(props: Props, ctx: BuildContext) -> list[Child]:
    """Group children without drawing anything itself."""
    return props.get("children", [])
