"""Tests for create_element, Fragment and the Component base class."""

from __future__ import annotations

from typing import Any

from craft.ui.builder import Fragment, create_element, flatten_children
from craft.ui.component import Component
from craft.ui.types import ClassElement, ElementKind, FunctionElement, Props


class Counter(Component):
    def __init__(self, props: Props) -> None:
        super().__init__(props)
        self.count = 0

    def render(self, ctx: Any) -> Any:
        return None


def greeting(props: Props, ctx: Any) -> Any:
    return f"hello {props['name']}"


class TestCreateElement:
    def test_component_class_gives_class_element(self) -> None:
        element = create_element(Counter, {"start": 1})
        assert isinstance(element, ClassElement)
        assert element.kind is ElementKind.CLASS
        assert element.component_type is Counter
        assert isinstance(element.instance, Counter)
        assert element.instance.props["start"] == 1

    def test_function_gives_function_element(self) -> None:
        element = create_element(greeting, {"name": "bob"})
        assert isinstance(element, FunctionElement)
        assert element.kind is ElementKind.FUNCTION
        assert element.render is greeting
        assert element.props["name"] == "bob"

    def test_children_are_flattened_into_props(self) -> None:
        element = create_element(Fragment, None, "a", ["b", None, ["c"]], None, 3)
        assert element.children == ["a", "b", "c", 3]
        assert element.props["children"] == ["a", "b", "c", 3]

    def test_children_prop_used_without_positional_children(self) -> None:
        element = create_element(Fragment, {"children": ["x", None]})
        assert element.children == ["x"]

    def test_key_comes_from_props(self) -> None:
        assert create_element(Counter, {"key": "k1"}).key == "k1"
        assert create_element(greeting, {"name": "a"}).key is None

    def test_props_are_copied(self) -> None:
        props = {"name": "a"}
        element = create_element(greeting, props)
        assert "children" not in props
        assert element.props is not props


class TestFlattenChildren:
    def test_booleans_and_none_are_dropped(self) -> None:
        assert flatten_children([True, None, "a", False, (1, [None])]) == ["a", 1]


class TestComponent:
    def test_set_state_applies_mutator_then_notifies(self) -> None:
        counter = Counter({})
        seen: list[int] = []
        counter.needs_rebuild.subscribe(lambda: seen.append(counter.count))

        def bump() -> None:
            counter.count += 1

        counter.set_state(bump)
        counter.set_state()
        assert seen == [1, 1]

    def test_should_update_defaults_to_true(self) -> None:
        assert Counter({}).should_update({}, None)  # type: ignore[arg-type]
