"""Label component - a run of text drawn in the enclosing layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from craft.ui.types import Props

if TYPE_CHECKING:
    from craft.ui.context import BuildContext

__all__ = ["Label"]

_OVERRIDES = ("background_color", "foreground_color", "text_align", "text_wrap")


def Label(props: Props, ctx: BuildContext) -> None:
    """Draw ``props["text"]`` at the pen, optionally restyled.

    ``background_color``, ``foreground_color``, ``text_align`` and
    ``text_wrap`` override the enclosing layer for this label only.
    """
    text = str(props.get("text", ""))
    overrides = {
        name: props[name] for name in _OVERRIDES if props.get(name) is not None
    }
    if not overrides:
        ctx.draw_text(text)
        return

    _, row = ctx.pen
    with ctx.layered(**overrides):
        ctx.move_to(0, row)
        lines = ctx.draw_text(text)
    # continue below the label, not where the pushed layer started
    ctx.move_to(0, row + lines)
