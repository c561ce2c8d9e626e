"""The 16-colour palette and the 3-character cell record encoding."""

from __future__ import annotations

from enum import IntEnum

# blit digit for each palette index
BASE_16 = "0123456789abcdef"


class Color(IntEnum):
    """Canonical palette indices, in blit-digit order."""

    WHITE = 0
    ORANGE = 1
    MAGENTA = 2
    LIGHT_BLUE = 3
    YELLOW = 4
    LIME = 5
    PINK = 6
    GRAY = 7
    LIGHT_GRAY = 8
    CYAN = 9
    PURPLE = 10
    BLUE = 11
    BROWN = 12
    GREEN = 13
    RED = 14
    BLACK = 15

    @property
    def digit(self) -> str:
        return BASE_16[self]

    @classmethod
    def from_digit(cls, digit: str) -> Color:
        return cls(BASE_16.index(digit.lower()))


# Default RGB rendition of each palette entry.
PALETTE: dict[Color, tuple[int, int, int]] = {
    Color.WHITE: (0xF0, 0xF0, 0xF0),
    Color.ORANGE: (0xF2, 0xB2, 0x33),
    Color.MAGENTA: (0xE5, 0x7F, 0xD8),
    Color.LIGHT_BLUE: (0x99, 0xB2, 0xF2),
    Color.YELLOW: (0xDE, 0xDE, 0x6C),
    Color.LIME: (0x7F, 0xCC, 0x19),
    Color.PINK: (0xF2, 0xB2, 0xCC),
    Color.GRAY: (0x4C, 0x4C, 0x4C),
    Color.LIGHT_GRAY: (0x99, 0x99, 0x99),
    Color.CYAN: (0x4C, 0x99, 0xB2),
    Color.PURPLE: (0xB2, 0x66, 0xE5),
    Color.BLUE: (0x33, 0x66, 0xCC),
    Color.BROWN: (0x7F, 0x66, 0x4C),
    Color.GREEN: (0x57, 0xA6, 0x4E),
    Color.RED: (0xCC, 0x4C, 0x4C),
    Color.BLACK: (0x11, 0x11, 0x11),
}


def encode_cell(content: str, background: int, foreground: int) -> str:
    """Encode one cell as ``content + background digit + foreground digit``."""
    return content + BASE_16[background] + BASE_16[foreground]


def decode_cell(record: str) -> tuple[str, Color, Color]:
    """Split a cell record into ``(content, background, foreground)``.

    The content may be a multi-codepoint grapheme, so the colour digits are
    read from the end of the record.
    """
    return (
        record[:-2],
        Color.from_digit(record[-2]),
        Color.from_digit(record[-1]),
    )
