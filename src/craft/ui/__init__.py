"""Declarative component UI rendered to 16-colour cell displays."""

from craft.ui.builder import Fragment, create_element, flatten_children
from craft.ui.colors import BASE_16, PALETTE, Color, decode_cell, encode_cell
from craft.ui.component import Component
from craft.ui.components import Box, Label
from craft.ui.config import UiConfig
from craft.ui.context import BuildContext, BuildContextLayer
from craft.ui.display import AnsiDisplay, Display
from craft.ui.layout import (
    ELLIPSIS,
    TextAlign,
    TextWrap,
    align_line,
    cells,
    layout_cells,
    layout_text,
)
from craft.ui.types import (
    Child,
    ClassElement,
    Element,
    ElementKind,
    FunctionComponent,
    FunctionElement,
    Props,
)

# JSX-style alias
h = create_element

__all__ = [
    "AnsiDisplay",
    "BASE_16",
    "Box",
    "BuildContext",
    "BuildContextLayer",
    "Child",
    "ClassElement",
    "Color",
    "Component",
    "Display",
    "ELLIPSIS",
    "Element",
    "ElementKind",
    "Fragment",
    "FunctionComponent",
    "FunctionElement",
    "Label",
    "PALETTE",
    "Props",
    "TextAlign",
    "TextWrap",
    "UiConfig",
    "align_line",
    "cells",
    "create_element",
    "decode_cell",
    "encode_cell",
    "flatten_children",
    "h",
    "layout_cells",
    "layout_text",
]
