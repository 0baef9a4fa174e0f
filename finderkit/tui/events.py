"""Input events produced by the renderers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto


class EventType(IntEnum):
    """Kinds of user action; control keys share their ASCII codes."""

    def _generate_next_value_(name, start, count, last_values):  # noqa: N805
        return count

    RUNE = auto()

    CTRL_A = auto()
    CTRL_B = auto()
    CTRL_C = auto()
    CTRL_D = auto()
    CTRL_E = auto()
    CTRL_F = auto()
    CTRL_G = auto()
    CTRL_H = auto()
    TAB = auto()
    CTRL_J = auto()
    CTRL_K = auto()
    CTRL_L = auto()
    CTRL_M = auto()
    CTRL_N = auto()
    CTRL_O = auto()
    CTRL_P = auto()
    CTRL_Q = auto()
    CTRL_R = auto()
    CTRL_S = auto()
    CTRL_T = auto()
    CTRL_U = auto()
    CTRL_V = auto()
    CTRL_W = auto()
    CTRL_X = auto()
    CTRL_Y = auto()
    CTRL_Z = auto()
    ESC = auto()
    CTRL_SPACE = auto()
    CTRL_DELETE = auto()

    CTRL_BACK_SLASH = auto()
    CTRL_RIGHT_BRACKET = auto()
    CTRL_CARET = auto()
    CTRL_SLASH = auto()

    INVALID = auto()
    RESIZE = auto()
    MOUSE = auto()
    DOUBLE_CLICK = auto()
    LEFT_CLICK = auto()
    RIGHT_CLICK = auto()

    BTAB = auto()
    BSPACE = auto()

    DEL = auto()
    PG_UP = auto()
    PG_DN = auto()

    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()
    HOME = auto()
    END = auto()
    INSERT = auto()

    S_UP = auto()
    S_DOWN = auto()
    S_LEFT = auto()
    S_RIGHT = auto()
    S_DELETE = auto()

    F1 = auto()
    F2 = auto()
    F3 = auto()
    F4 = auto()
    F5 = auto()
    F6 = auto()
    F7 = auto()
    F8 = auto()
    F9 = auto()
    F10 = auto()
    F11 = auto()
    F12 = auto()

    CHANGE = auto()
    BACKWARD_EOF = auto()
    START = auto()
    LOAD = auto()
    FOCUS = auto()
    ONE = auto()
    ZERO = auto()

    ALT_BS = auto()

    ALT_UP = auto()
    ALT_DOWN = auto()
    ALT_LEFT = auto()
    ALT_RIGHT = auto()

    ALT_S_UP = auto()
    ALT_S_DOWN = auto()
    ALT_S_LEFT = auto()
    ALT_S_RIGHT = auto()

    ALT = auto()
    CTRL_ALT = auto()

    def as_event(self) -> "Event":
        """An event of this type with no character."""
        return Event(self)


@dataclass(frozen=True)
class MouseEvent:
    """Mouse position, scroll direction and button state."""

    y: int
    x: int
    s: int
    left: bool
    down: bool
    double: bool
    mod: bool


@dataclass(frozen=True)
class Event:
    """A user action; ``char`` is empty unless the event carries a character."""

    type: EventType
    char: str = ""
    mouse_event: MouseEvent | None = None

    def is_(self, *types: EventType) -> bool:
        """True if the event is of any of the given types."""
        return self.type in types

    def comparable(self) -> "Event":
        """The event without its mouse details, for use as a key."""
        return Event(self.type, self.char)


def key(char: str) -> Event:
    """An event for a typed character."""
    return Event(EventType.RUNE, char)


def alt_key(char: str) -> Event:
    """An event for a character typed with Alt."""
    return Event(EventType.ALT, char)


def ctrl_alt_key(char: str) -> Event:
    """An event for a character typed with Ctrl and Alt."""
    return Event(EventType.CTRL_ALT, char)