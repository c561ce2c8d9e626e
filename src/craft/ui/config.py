"""Rendering defaults for a :class:`~craft.ui.context.BuildContext`."""

from __future__ import annotations

from dataclasses import dataclass

from craft.ui.colors import Color
from craft.ui.layout import ELLIPSIS, TextAlign, TextWrap


@dataclass
class UiConfig:
    """Defaults for the bottom drawing layer and text layout."""

    background_color: Color = Color.BLACK
    foreground_color: Color = Color.WHITE
    text_align: TextAlign = TextAlign.LEFT
    text_wrap: TextWrap = TextWrap.WORD_BREAK
    ellipsis: str = ELLIPSIS
    # content of cells nothing has drawn to
    blank: str = " "
