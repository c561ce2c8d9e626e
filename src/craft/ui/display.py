"""Display back-ends that a :class:`~craft.ui.context.BuildContext` draws to.

Provides the ``Display`` protocol (the raw screen write primitives of the
host) and ``AnsiDisplay``, which renders cell writes onto an ANSI terminal
stream using 24-bit colour escapes.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

from craft.ui.colors import PALETTE, Color
from craft.ui.layout import cells

__all__ = ["AnsiDisplay", "Display"]

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_MOVE_FMT = "\x1b[{};{}H"
_FG_FMT = "\x1b[38;2;{};{};{}m"
_BG_FMT = "\x1b[48;2;{};{};{}m"
_RESET = "\x1b[0m"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"


class Display(Protocol):
    """A cell-addressable output surface.

    Coordinates are 0-based.  ``foreground`` and ``background`` are strings
    of base-16 palette digits, one per cell of ``text``.
    """

    def get_size(self) -> tuple[int, int]: ...

    def blit(
        self,
        x: int,
        y: int,
        text: str,
        foreground: str,
        background: str,
    ) -> None: ...


class AnsiDisplay:
    """Display that writes ANSI escape sequences to a text stream."""

    def __init__(
        self,
        width: int,
        height: int,
        stream: TextIO | None = None,
    ) -> None:
        self._width = width
        self._height = height
        self._stream = stream if stream is not None else sys.stdout

    def get_size(self) -> tuple[int, int]:
        return self._width, self._height

    def resize(self, width: int, height: int) -> None:
        self._width = width
        self._height = height

    def start(self) -> None:
        """Clear the screen and hide the cursor."""
        self._stream.write(_HIDE_CURSOR + _CLEAR_SCREEN)
        self._stream.flush()

    def stop(self) -> None:
        """Restore default attributes and show the cursor."""
        self._stream.write(_RESET + _SHOW_CURSOR)
        self._stream.flush()

    def blit(
        self,
        x: int,
        y: int,
        text: str,
        foreground: str,
        background: str,
    ) -> None:
        out: list[str] = [_MOVE_FMT.format(y + 1, x + 1)]
        last: tuple[str, str] | None = None
        for content, fg, bg in zip(cells(text), foreground, background):
            if (fg, bg) != last:
                out.append(_FG_FMT.format(*PALETTE[Color.from_digit(fg)]))
                out.append(_BG_FMT.format(*PALETTE[Color.from_digit(bg)]))
                last = (fg, bg)
            out.append(content)
        out.append(_RESET)
        self._stream.write("".join(out))
        self._stream.flush()
