"""Border shapes and the characters that draw them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BorderShape(IntEnum):
    """Which sides of a window carry a border."""

    NONE = 0
    ROUNDED = 1
    SHARP = 2
    BOLD = 3
    BLOCK = 4
    DOUBLE = 5
    HORIZONTAL = 6
    VERTICAL = 7
    TOP = 8
    BOTTOM = 9
    LEFT = 10
    RIGHT = 11

    def has_right(self) -> bool:
        """True if the shape draws a right edge."""
        return self not in _NO_RIGHT

    def has_top(self) -> bool:
        """True if the shape draws a top edge."""
        return self not in _NO_TOP


_NO_RIGHT = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LEFT,
        BorderShape.TOP,
        BorderShape.BOTTOM,
        BorderShape.HORIZONTAL,
    }
)
_NO_TOP = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LEFT,
        BorderShape.RIGHT,
        BorderShape.BOTTOM,
        BorderShape.VERTICAL,
    }
)


@dataclass(frozen=True)
class BorderStyle:
    """A border shape with the character used for each edge and corner."""

    shape: BorderShape
    top: str
    bottom: str
    left: str
    right: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


# top, bottom, left, right, top-left, top-right, bottom-left, bottom-right
_UNICODE_CHARS = {
    BorderShape.SHARP: "──││┌┐└┘",
    BorderShape.BOLD: "━━┃┃┏┓┗┛",
    BorderShape.BLOCK: "▀▄▌▐▛▜▙▟",
    BorderShape.DOUBLE: "══║║╔╗╚╝",
}
_ROUNDED_CHARS = "──││╭╮╰╯"
_ASCII_CHARS = "--||++++"


def make_border_style(shape: BorderShape, unicode: bool = True) -> BorderStyle:
    """Border characters for ``shape``; plain ASCII when ``unicode`` is False."""
    if not unicode:
        chars = _ASCII_CHARS
    else:
        chars = _UNICODE_CHARS.get(shape, _ROUNDED_CHARS)
    return BorderStyle(shape, *chars)


def make_transparent_border() -> BorderStyle:
    """A rounded border drawn with spaces."""
    return BorderStyle(BorderShape.ROUNDED, *(" " * 8))