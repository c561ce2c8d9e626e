"""Text layout for cell displays: splitting into cells, wrapping, alignment.

Every display cell holds one grapheme cluster, so widths here are counted in
clusters rather than code points.  Runs of whitespace between words collapse
to a single space when a paragraph is wrapped.
"""

from __future__ import annotations

from enum import Enum

import grapheme
import wcwidth

__all__ = [
    "ELLIPSIS",
    "TextAlign",
    "TextWrap",
    "align_cells",
    "align_line",
    "cell_width",
    "cells",
    "layout_cells",
    "layout_text",
]

ELLIPSIS = "…"

# Drawn in place of clusters the display cannot show.
_REPLACEMENT = "?"


class TextAlign(Enum):
    """Horizontal alignment of each laid-out line within the layer."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TextWrap(Enum):
    """How text wider than the layer is broken."""

    WORD_BREAK = "word_break"
    HYPHENATE = "hyphenate"
    NO_WRAP = "no_wrap"
    ELLIPSIS = "ellipsis"


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------


def _to_cell(cluster: str) -> str:
    if cluster == "\t":
        return " "
    if wcwidth.wcswidth(cluster) < 0:
        return _REPLACEMENT
    return cluster


def cells(text: str) -> list[str]:
    """Split *text* (without newlines) into display cells.

    Tabs become a single space; control characters and other clusters with
    no printable width become ``?``.
    """
    return [_to_cell(g) for g in grapheme.graphemes(text)]


def cell_width(text: str) -> int:
    """Number of cells *text* occupies."""
    return grapheme.length(text)


# ---------------------------------------------------------------------------
# Wrapping
# ---------------------------------------------------------------------------


def _words(line: list[str]) -> list[list[str]]:
    words: list[list[str]] = []
    current: list[str] = []
    for cell in line:
        if cell.isspace():
            if current:
                words.append(current)
                current = []
        else:
            current.append(cell)
    if current:
        words.append(current)
    return words


def _wrap_words(line: list[str], width: int, hyphenate: bool) -> list[list[str]]:
    """Greedy word wrap of a single paragraph."""
    result: list[list[str]] = []
    current: list[str] = []

    for word in _words(line):
        while word:
            if not current:
                if len(word) <= width:
                    current, word = word, []
                elif hyphenate and width > 1:
                    # hyphen takes the wrap column
                    result.append(word[: width - 1] + ["-"])
                    word = word[width - 1 :]
                else:
                    result.append(word[:width])
                    word = word[width:]
            elif len(current) + 1 + len(word) <= width:
                current = current + [" "] + word
                word = []
            else:
                result.append(current)
                current = []

    if current or not result:
        result.append(current)
    return result


def _ellipsize(line: list[str], width: int, marker: str) -> list[str]:
    if len(line) <= width:
        return line
    cut = line[:width]
    while cut and cut[-1].isspace():
        cut.pop()
    if not cut:
        return [marker]
    cut[-1] = marker
    return cut


def layout_cells(
    text: str,
    width: int,
    wrap: TextWrap = TextWrap.WORD_BREAK,
    ellipsis: str = ELLIPSIS,
) -> list[list[str]]:
    """Lay out *text* into lines of at most *width* cells.

    Embedded newlines always start a new line.  See :class:`TextWrap` for
    the policies.  With ``ELLIPSIS`` an overflowing line is cut at *width*,
    stripped of trailing whitespace, and its last visible cell replaced by
    *ellipsis*: ``"the quick brown fox"`` at width 10 gives ``"the quic…"``.
    """
    if width <= 0:
        return []

    lines: list[list[str]] = []
    for paragraph in text.split("\n"):
        line = cells(paragraph)
        if wrap is TextWrap.NO_WRAP:
            lines.append(line[:width])
        elif wrap is TextWrap.ELLIPSIS:
            lines.append(_ellipsize(line, width, ellipsis))
        else:
            lines.extend(
                _wrap_words(line, width, hyphenate=wrap is TextWrap.HYPHENATE)
            )
    return lines


def layout_text(
    text: str,
    width: int,
    wrap: TextWrap = TextWrap.WORD_BREAK,
    ellipsis: str = ELLIPSIS,
) -> list[str]:
    """String form of :func:`layout_cells`."""
    return ["".join(line) for line in layout_cells(text, width, wrap, ellipsis)]


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------


def align_cells(
    line: list[str], width: int, align: TextAlign, fill: str = " "
) -> list[str]:
    """Pad (or clip) *line* to exactly *width* cells according to *align*."""
    line = line[:width]
    pad = width - len(line)
    if align is TextAlign.RIGHT:
        left = pad
    elif align is TextAlign.CENTER:
        left = pad // 2
    else:
        left = 0
    return [fill] * left + line + [fill] * (pad - left)


def align_line(line: str, width: int, align: TextAlign = TextAlign.LEFT) -> str:
    """String form of :func:`align_cells`."""
    return "".join(align_cells(cells(line), width, align))
