"""Box component - a filled rectangle whose children draw inside it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from craft.ui.component import Component

if TYPE_CHECKING:
    from craft.ui.context import BuildContext

__all__ = ["Box"]

# props copied onto the pushed layer as-is when given
_STYLE_PROPS = ("background_color", "foreground_color", "text_align", "text_wrap")


class Box(Component):
    """Box component - fills its extents and lays out its children within them.

    Props:
        background_color: fill colour (defaults to the enclosing layer's).
        foreground_color, text_align, text_wrap: overrides for the children.
        left, top: offset from the enclosing layer's origin (default 0).
        width, height: size in cells (default: the rest of the enclosing layer).

    The box is clipped to the enclosing layer.
    """

    def render(self, ctx: BuildContext) -> Any:
        parent = ctx.layer
        left = parent.left + max(0, self.props.get("left", 0))
        top = parent.top + max(0, self.props.get("top", 0))

        width = self.props.get("width")
        height = self.props.get("height")
        right = parent.right if width is None else min(parent.right, left + width)
        bottom = parent.bottom if height is None else min(parent.bottom, top + height)

        overrides = {
            name: self.props[name]
            for name in _STYLE_PROPS
            if self.props.get(name) is not None
        }
        ctx.push_layer(
            left=min(left, parent.right),
            top=min(top, parent.bottom),
            right=right,
            bottom=bottom,
            **overrides,
        )
        ctx.draw_box()
        # the layer stays pushed so the children draw inside it
        return self.props.get("children", [])
