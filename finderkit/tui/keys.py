"""Decoding of raw terminal input bytes into key and mouse events."""

from __future__ import annotations

import re
import time
from typing import Callable

from finderkit.tui.events import (
    Event,
    EventType,
    MouseEvent,
    alt_key,
    ctrl_alt_key,
    key,
)

ESC_BYTE = 27
DEL_BYTE = 127
DOUBLE_CLICK_DURATION = 0.5

_CURSOR_REPORT = re.compile(rb"\x1b\[[0-9]+;[0-9]+R")
_MOUSE_END = re.compile(rb"[mM]")
_INTEGER = re.compile(rb"[+-]?[0-9]+")

_SINGLE_BYTE_KEYS = {
    DEL_BYTE: EventType.BSPACE,
    0: EventType.CTRL_SPACE,
    28: EventType.CTRL_BACK_SLASH,
    29: EventType.CTRL_RIGHT_BRACKET,
    30: EventType.CTRL_CARET,
    31: EventType.CTRL_SLASH,
}

# final byte -> (plain, with Alt)
_ARROWS = {
    "D": (EventType.LEFT, EventType.ALT_LEFT),
    "C": (EventType.RIGHT, EventType.ALT_RIGHT),
    "B": (EventType.DOWN, EventType.ALT_DOWN),
    "A": (EventType.UP, EventType.ALT_UP),
}

_SIMPLE_FINALS = {
    "Z": EventType.BTAB,
    "H": EventType.HOME,
    "F": EventType.END,
    "P": EventType.F1,
    "Q": EventType.F2,
    "R": EventType.F3,
    "S": EventType.F4,
}

_F9_TO_F12 = {
    "0": EventType.F9,
    "1": EventType.F10,
    "3": EventType.F11,
    "4": EventType.F12,
}

_F1_TO_F8 = {
    "1": EventType.F1,
    "2": EventType.F2,
    "3": EventType.F3,
    "4": EventType.F4,
    "5": EventType.F5,
    "7": EventType.F6,
    "8": EventType.F7,
    "9": EventType.F8,
}

_DELETE_MODIFIED = {
    "5": EventType.CTRL_DELETE,
    "2": EventType.S_DELETE,
}

# final byte -> (shift, alt, alt+shift)
_MODIFIED_ARROWS = {
    "A": (EventType.S_UP, EventType.ALT_UP, EventType.ALT_S_UP),
    "B": (EventType.S_DOWN, EventType.ALT_DOWN, EventType.ALT_S_DOWN),
    "C": (EventType.S_RIGHT, EventType.ALT_RIGHT, EventType.ALT_S_RIGHT),
    "D": (EventType.S_LEFT, EventType.ALT_LEFT, EventType.ALT_S_LEFT),
}


def _atoi(data: bytes, default: int) -> int:
    if not _INTEGER.fullmatch(data):
        return default
    return int(data)


def _decode_rune(data: bytes | bytearray) -> tuple[str | None, int]:
    """Decode the first UTF-8 character; None with size 1 for invalid input."""
    if not data:
        return None, 0
    lead = data[0]
    if lead < 0x80:
        return chr(lead), 1
    if 0xC2 <= lead <= 0xDF:
        size = 2
    elif 0xE0 <= lead <= 0xEF:
        size = 3
    elif 0xF0 <= lead <= 0xF4:
        size = 4
    else:
        return None, 1
    if len(data) < size:
        return None, 1
    try:
        return bytes(data[:size]).decode("utf-8"), size
    except UnicodeDecodeError:
        return None, 1


def _invalid() -> Event:
    return Event(EventType.INVALID)


class KeyDecoder:
    """Turns bytes read from the terminal into events, one at a time.

    ``read_bytes`` is called whenever more input is needed; it returns the
    bytes that arrived (an empty result means nothing could be read).
    """

    def __init__(
        self,
        read_bytes: Callable[[], bytes],
        mouse: bool = False,
        yoffset: int = 0,
    ):
        self._read_bytes = read_bytes
        self.mouse = mouse
        self.yoffset = yoffset
        self._buffer = bytearray()
        self._prev_down_time = float("-inf")
        self._clicks: list[tuple[int, int]] = []

    @property
    def pending(self) -> bytes:
        """The bytes read but not yet decoded."""
        return bytes(self._buffer)

    def feed(self, data: bytes) -> None:
        """Append already read bytes to the input waiting to be decoded."""
        self._buffer += data

    def _fill(self) -> None:
        self._buffer += self._read_bytes()

    def get_char(self) -> Event:
        """Decode and return the next event, reading more input if needed.

        Raises EOFError when no input is available at all.
        """
        if not self._buffer:
            self._fill()
        if not self._buffer:
            raise EOFError("no input available")
        event, size = self._decode()
        del self._buffer[:size]
        return event

    def _decode(self) -> tuple[Event, int]:
        first = self._buffer[0]
        if first in _SINGLE_BYTE_KEYS:
            return Event(_SINGLE_BYTE_KEYS[first]), 1
        if first == ESC_BYTE:
            event, size = self._esc_sequence()
            if event.type is EventType.INVALID:
                # Second chance: the rest of the sequence may still be coming.
                self._fill()
                event, size = self._esc_sequence()
            return event, size
        if first <= EventType.CTRL_Z:
            return Event(EventType(first)), 1
        char, size = _decode_rune(self._buffer)
        if char is None or char == "\ufffd":
            return Event(EventType.ESC), 1
        return key(char), size

    def _esc_sequence(self) -> tuple[Event, int]:
        buf = self._buffer
        if len(buf) < 2:
            return Event(EventType.ESC), 1

        report = _CURSOR_REPORT.match(buf)
        if report:
            return _invalid(), report.end()

        if 1 <= buf[1] <= EventType.CTRL_Z:
            return ctrl_alt_key(chr(buf[1] + ord("a") - 1)), 2

        alt = False
        if len(buf) > 2 and buf[1] == ESC_BYTE:
            del buf[:1]
            alt = True

        second = buf[1]
        if second == ESC_BYTE:
            return Event(EventType.ESC), 2
        if second == DEL_BYTE:
            return Event(EventType.ALT_BS), 2
        if second in (ord("["), ord("O")):
            result = self._control_sequence(alt)
            if result is not None:
                return result

        char, size = _decode_rune(buf[1:])
        if size == 0:
            return _invalid(), 2
        return alt_key(char if char is not None else "\ufffd"), 1 + size

    def _control_sequence(self, alt: bool) -> tuple[Event, int] | None:
        """Decode ``ESC [`` and ``ESC O`` sequences; None falls back to Alt+key."""
        buf = self._buffer
        if len(buf) < 3:
            return _invalid(), 2

        final = chr(buf[2])
        if final in _ARROWS:
            plain, with_alt = _ARROWS[final]
            return Event(with_alt if alt else plain), 3
        if final in _SIMPLE_FINALS:
            return Event(_SIMPLE_FINALS[final]), 3
        if final == "<":
            return self._mouse_sequence()
        if final not in ("1", "2", "3", "4", "5", "6"):
            return None

        if len(buf) < 4:
            return _invalid(), 3
        fourth = chr(buf[3])

        if final == "2":
            size = 4
            if fourth == "~":
                return Event(EventType.INSERT), 4
            if len(buf) > 4 and buf[4] == ord("~"):
                size = 5
                if fourth in _F9_TO_F12:
                    return Event(_F9_TO_F12[fourth]), 5
            # Bracketed paste markers: ESC[200~ and ESC[201~
            if (
                len(buf) > 5
                and fourth == "0"
                and buf[4] in b"01"
                and buf[5] == ord("~")
            ):
                del buf[:6]
                return self.get_char(), 0
            return _invalid(), size
        if final == "3":
            if fourth == "~":
                return Event(EventType.DEL), 4
            if len(buf) == 6 and buf[5] == ord("~"):
                modified = _DELETE_MODIFIED.get(chr(buf[4]))
                if modified is not None:
                    return Event(modified), 6
                return _invalid(), 6
            return _invalid(), 4
        if final == "4":
            return Event(EventType.END), 4
        if final == "5":
            return Event(EventType.PG_UP), 4
        if final == "6":
            return Event(EventType.PG_DN), 4

        # final == "1"
        if fourth == "~":
            return Event(EventType.HOME), 4
        if fourth in _F1_TO_F8:
            if len(buf) == 5 and buf[4] == ord("~"):
                return Event(_F1_TO_F8[fourth]), 5
            return _invalid(), 4
        if fourth == ";":
            if len(buf) < 6:
                return _invalid(), 4
            modifier = chr(buf[4])
            if modifier in ("1", "2", "3", "5"):
                with_alt = modifier == "3"
                alt_shift = modifier == "1" and buf[5] == ord("0")
                last = chr(buf[5])
                size = 6
                if alt_shift:
                    if len(buf) < 7:
                        return _invalid(), 6
                    size = 7
                    last = chr(buf[6])
                if last in _MODIFIED_ARROWS:
                    shifted, alted, alt_shifted = _MODIFIED_ARROWS[last]
                    if with_alt:
                        return Event(alted), size
                    if alt_shift:
                        return Event(alt_shifted), size
                    return Event(shifted), size
        return None

    def _mouse_sequence(self) -> tuple[Event, int]:
        """Decode an SGR mouse report: ``ESC [ < b ; x ; y M`` (or ``m``)."""
        buf = self._buffer
        size = 3
        if len(buf) < 9 or not self.mouse:
            return _invalid(), size

        rest = bytes(buf[size:])
        found = _MOUSE_END.search(rest)
        if found is None:
            return _invalid(), size
        end = found.start()

        elems = rest[:end].split(b";", 2)
        if len(elems) != 3:
            return _invalid(), size

        t = _atoi(elems[0], -1)
        x = _atoi(elems[1], -1) - 1
        y = _atoi(elems[2], -1) - 1 - self.yoffset
        if t < 0 or x < 0:
            return _invalid(), size
        size += end + 1

        down = rest[end] == ord("M")

        scroll = 0
        if t >= 64:
            t -= 64
            scroll = -1 if t & 0b1 == 1 else 1

        left = t & 0b11 == 0
        mod = t & 0b1100 > 0
        drag = t & 0b100000 > 0

        if scroll != 0:
            return (
                Event(EventType.MOUSE, "", MouseEvent(y, x, scroll, False, False, False, mod)),
                size,
            )

        double = False
        if down and not drag:
            now = time.monotonic()
            if not left:
                # Double clicks are only recognised for the left button.
                self._clicks = []
            elif now - self._prev_down_time < DOUBLE_CLICK_DURATION:
                self._clicks.append((x, y))
            else:
                self._clicks = [(x, y)]
            self._prev_down_time = now
        elif (
            len(self._clicks) > 1
            and self._clicks[-2] == self._clicks[-1]
            and time.monotonic() - self._prev_down_time < DOUBLE_CLICK_DURATION
        ):
            double = True
            self._clicks = []

        return (
            Event(EventType.MOUSE, "", MouseEvent(y, x, 0, left, down, double, mod)),
            size,
        )