"""A renderer that draws below the cursor with plain escape sequences."""

from __future__ import annotations

import math
import os
import re
import stat
import subprocess
import sys
import termios
import time
import tty
from enum import IntEnum
from typing import Callable, Sequence

import regex
import wcwidth

from finderkit.tui.borders import BorderShape, BorderStyle
from finderkit.tui.colors import (
    COL_BLACK,
    COL_DEFAULT,
    COL_WHITE,
    Attr,
    ColorPair,
    ColorTheme,
    dark256,
    default16,
    init_palette,
    init_theme,
    is_24bit,
)
from finderkit.tui.events import Event
from finderkit.tui.keys import ESC_BYTE, KeyDecoder

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

DEFAULT_ESC_DELAY = 100
ESC_POLL_INTERVAL = 5
OFFSET_POLL_TRIES = 10
MAX_INPUT_BUFFER = 1024 * 1024

CONSOLE_DEVICE = "/dev/tty"

CR = "\x1b[2m␍"
LF = "\x1b[2m␊"

_OFFSET = re.compile(rb"(.*)\x1b\[([0-9]+);([0-9]+)R")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_GRAPHEME = regex.compile(r"\X")
_DEV_PREFIXES = ("/dev/pts/", "/dev/")

_BOXED = frozenset(
    {
        BorderShape.ROUNDED,
        BorderShape.SHARP,
        BorderShape.BOLD,
        BorderShape.BLOCK,
        BorderShape.DOUBLE,
    }
)


class FillReturn(IntEnum):
    """Where filling a window left off."""

    CONTINUE = 0
    NEXT_LINE = 1
    SUSPEND = 2


def _atoi(text: str | bytes, default: int) -> int:
    if isinstance(text, bytes):
        text = text.decode("ascii", errors="replace")
    if not _INTEGER.fullmatch(text):
        return default
    return int(text)


def _get_env(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    if not value:
        return default
    return _atoi(value, default)


def _rune_width(char: str) -> int:
    return max(wcwidth.wcwidth(char), 0)


def _cluster_width(cluster: str) -> int:
    for char in cluster:
        width = _rune_width(char)
        if width > 0:
            return width
    return 0


def _repeat(char: str, times: int) -> str:
    return char * times if times > 0 else ""


def _go_div(a: int, b: int) -> int:
    return int(a / b)


def _go_mod(a: int, b: int) -> int:
    return int(math.fmod(a, b))


def attr_codes(attr: int) -> list[str]:
    """SGR parameters for the given text attributes."""
    if attr & Attr.CLEAR:
        return []
    table = (
        (Attr.BOLD, "1"),
        (Attr.DIM, "2"),
        (Attr.ITALIC, "3"),
        (Attr.UNDERLINE, "4"),
        (Attr.BLINK, "5"),
        (Attr.REVERSE, "7"),
        (Attr.STRIKE_THROUGH, "9"),
    )
    return [code for flag, code in table if attr & flag]


def color_codes(fg: int, bg: int) -> list[str]:
    """SGR parameters selecting the foreground and background colours."""
    codes = []
    for color, offset in ((fg, 0), (bg, 10)):
        if color == COL_DEFAULT:
            continue
        if is_24bit(color):
            r, g, b = (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
            codes.append(f"{38 + offset};2;{r};{g};{b}")
        elif COL_BLACK <= color <= COL_WHITE:
            codes.append(str(color + 30 + offset))
        elif COL_WHITE < color < 16:
            codes.append(str(color + 90 + offset - 8))
        elif 16 <= color < 256:
            codes.append(f"{38 + offset};5;{color}")
    return codes


def cleanse(text: str) -> str:
    """Remove escape characters from ``text``."""
    return text.replace("\x1b", "")


def wrap_line(
    text: str, prefix_length: int, max_width: int, tabstop: int
) -> list[tuple[str, int]]:
    """Split ``text`` into pieces that fit ``max_width`` columns.

    Each piece is returned with its display width; tabs are expanded.
    """
    lines: list[tuple[str, int]] = []
    width = 0
    line = ""
    for cluster in _GRAPHEME.findall(text):
        piece = cluster
        if cluster == "\t":
            w = tabstop - (prefix_length + width) % tabstop
            piece = _repeat(" ", w)
        elif cluster[0] == "\r":
            w = 1
        else:
            w = _cluster_width(cluster)
        width += w
        if prefix_length + width <= max_width:
            line += piece
        else:
            lines.append((line, width - w))
            line = piece
            prefix_length = 0
            width = w
    lines.append((line, width))
    return lines


def ttyname() -> str:
    """Path of the terminal device behind standard error, or an empty string."""
    try:
        stderr_stat = os.fstat(2)
    except OSError:
        return ""
    if not stat.S_ISCHR(stderr_stat.st_mode):
        return ""
    for prefix in _DEV_PREFIXES:
        try:
            names = sorted(os.listdir(prefix))
        except OSError:
            continue
        for name in names:
            try:
                entry = os.lstat(prefix + name)
            except OSError:
                continue
            if entry.st_rdev == stderr_stat.st_rdev:
                return prefix + name
    return ""


def _open_terminal():
    try:
        return open(CONSOLE_DEVICE, "rb", buffering=0)
    except OSError:
        name = ttyname()
        if name:
            try:
                return open(name, "rb", buffering=0)
            except OSError:
                pass
    return None


def tty_in():
    """The terminal to read keys from, falling back to standard input."""
    terminal = _open_terminal()
    return terminal if terminal is not None else sys.stdin


class LightRenderer:
    """Draws inline on the terminal with ANSI escape sequences.

    Output is queued and written to ``output`` (standard error by default)
    on flush; keys are read from ``ttyin`` (the terminal, opened on demand).
    """

    def __init__(
        self,
        theme: ColorTheme,
        force_black: bool,
        mouse: bool,
        tabstop: int,
        clear_on_exit: bool,
        fullscreen: bool,
        max_height_func: Callable[[int], int],
    ):
        self.theme = theme
        self.force_black = force_black
        self.mouse = mouse
        self.tabstop = tabstop
        self.clear_on_exit = clear_on_exit
        self.fullscreen = fullscreen
        self.max_height_func = max_height_func
        self.palette = init_palette(theme)
        self.output = sys.stderr
        self.ttyin = None
        self.esc_delay = DEFAULT_ESC_DELAY
        self.width = 0
        self.height = 0
        self.yoffset = 0
        self.up_one_line = False
        self.y = 0
        self.x = 0
        self._orig_state = None
        self._queued: list[str] = []
        self._decoder = KeyDecoder(self._read_bytes, mouse, 0)

    # output

    def _stderr(self, text: str) -> None:
        self._stderr_internal(text, True, "")

    def _stderr_internal(self, text: str, allow_nlcr: bool, reset_code: str) -> None:
        out = []
        for char in text:
            nlcr = char in "\n\r"
            if ord(char) >= 32 or char == "\x1b" or nlcr:
                if nlcr and not allow_nlcr:
                    out.append((CR if char == "\r" else LF) + reset_code)
                elif char != "\ufffd":
                    out.append(char)
        self._queued.append("".join(out))

    def _csi(self, code: str) -> str:
        fullcode = "\x1b[" + code
        self._stderr(fullcode)
        return fullcode

    def _flush(self) -> None:
        queued = "".join(self._queued)
        if queued:
            self.output.write("\x1b[?25l" + queued + "\x1b[?25h")
            self.output.flush()
        self._queued.clear()

    def _make_space(self) -> None:
        self._stderr("\n")
        self._csi("G")

    def _move(self, y: int, x: int) -> None:
        if self.y < y:
            self._csi(f"{y - self.y}B")
        elif self.y > y:
            self._csi(f"{self.y - y}A")
        self._stderr("\r")
        if x > 0:
            self._csi(f"{x}C")
        self.y = y
        self.x = x

    def _origin(self) -> None:
        self._move(0, 0)

    def _smcup(self) -> None:
        self._csi("?1049h")

    def _rmcup(self) -> None:
        self._csi("?1049l")

    def _enable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000h")
            self._csi("?1002h")
            self._csi("?1006h")

    def _disable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000l")
            self._csi("?1002l")
            self._csi("?1006l")

    # terminal

    def _fd(self) -> int:
        if self.ttyin is None:
            terminal = _open_terminal()
            if terminal is None:
                raise OSError(f"Failed to open {CONSOLE_DEVICE}")
            self.ttyin = terminal
        return self.ttyin.fileno()

    def _init_platform(self) -> None:
        fd = self._fd()
        try:
            self._orig_state = termios.tcgetattr(fd)
            tty.setraw(fd)
        except termios.error as exc:
            raise OSError(str(exc)) from exc

    def _setup_terminal(self) -> None:
        if self._orig_state is not None:
            tty.setraw(self._fd())

    def _restore_terminal(self) -> None:
        if self._orig_state is not None and self.ttyin is not None:
            termios.tcsetattr(self._fd(), termios.TCSANOW, self._orig_state)

    def _default_theme(self) -> ColorTheme:
        if "256" in os.environ.get("TERM", ""):
            return dark256()
        try:
            result = subprocess.run(
                ["tput", "colors"], capture_output=True, text=True, check=False
            )
        except OSError:
            return default16()
        if result.returncode == 0 and _atoi(result.stdout.strip(), 16) > 16:
            return dark256()
        return default16()

    def _update_terminal_size(self) -> None:
        size = None
        if self.ttyin is not None:
            try:
                size = os.get_terminal_size(self.ttyin.fileno())
            except (OSError, ValueError):
                size = None
        if size is not None:
            self.width = size.columns
            self.height = self.max_height_func(size.lines)
        else:
            self.width = _get_env("COLUMNS", DEFAULT_WIDTH)
            self.height = self.max_height_func(_get_env("LINES", DEFAULT_HEIGHT))

    def _getch(self, nonblock: bool) -> int | None:
        fd = self._fd()
        try:
            os.set_blocking(fd, not nonblock)
            data = os.read(fd, 1)
        except OSError:
            return None
        return data[0] if data else None

    def _get_bytes_internal(self, buffer: bytearray, nonblock: bool) -> bytearray:
        c = self._getch(nonblock)
        if c is None:
            if not nonblock:
                self.close()
                raise OSError(f"Failed to read {CONSOLE_DEVICE}")
            retries = self.esc_delay // ESC_POLL_INTERVAL
        else:
            retries = self.esc_delay // ESC_POLL_INTERVAL if c == ESC_BYTE or nonblock else 0
            buffer.append(c)

        previous = c
        while True:
            c = self._getch(True)
            if c is None:
                if retries > 0:
                    retries -= 1
                    time.sleep(ESC_POLL_INTERVAL / 1000)
                    continue
                break
            if c == ESC_BYTE and previous != c:
                retries = self.esc_delay // ESC_POLL_INTERVAL
            else:
                retries = 0
            buffer.append(c)
            previous = c
            if len(buffer) > MAX_INPUT_BUFFER:
                self.close()
                raise RuntimeError(f"Input buffer overflow ({len(buffer)})")
        return buffer

    def _read_bytes(self) -> bytes:
        return bytes(self._get_bytes_internal(bytearray(), False))

    def _find_offset(self) -> tuple[int, int]:
        self._csi("6n")
        self._flush()
        data = bytearray()
        for tries in range(OFFSET_POLL_TRIES):
            data = self._get_bytes_internal(data, tries > 0)
            found = _OFFSET.search(bytes(data))
            if found:
                # Keep whatever was typed before the report.
                self._decoder.feed(found.group(1))
                return _atoi(found.group(2), 0) - 1, _atoi(found.group(3), 0) - 1
        return -1, -1

    # public interface

    def init(self) -> None:
        """Take over the terminal and make room for drawing."""
        self.esc_delay = _atoi(os.environ.get("ESCDELAY", ""), DEFAULT_ESC_DELAY)
        self._init_platform()
        self._update_terminal_size()
        self.palette = init_theme(self.theme, self._default_theme(), self.force_black)

        if self.fullscreen:
            self._smcup()
        else:
            if self.clear_on_exit:
                self._csi("J")
            y, x = self._find_offset()
            self.mouse = self.mouse and y >= 0
            if x > 0 and self.clear_on_exit:
                self.up_one_line = True
                self._make_space()
            for _ in range(1, self.max_y()):
                self._make_space()

        self._decoder.mouse = self.mouse
        self._enable_mouse()
        self._csi(f"{self.max_y() - 1}A")
        self._csi("G")
        self._csi("K")
        if not self.clear_on_exit and not self.fullscreen:
            self._csi("s")
        if not self.fullscreen and self.mouse:
            self.yoffset, _ = self._find_offset()
            self._decoder.yoffset = self.yoffset

    def resize(self, max_height_func: Callable[[int], int]) -> None:
        self.max_height_func = max_height_func

    def pause(self, clear: bool) -> None:
        """Give the terminal back temporarily."""
        self._disable_mouse()
        self._restore_terminal()
        if clear:
            if self.fullscreen:
                self._rmcup()
            else:
                self._smcup()
                self._csi("H")
            self._flush()

    def resume(self, clear: bool, sigcont: bool) -> None:
        """Take the terminal back after ``pause``."""
        self._setup_terminal()
        if clear:
            if self.fullscreen:
                self._smcup()
            else:
                self._rmcup()
            self._enable_mouse()
            self._flush()
        elif sigcont and not self.fullscreen and self.mouse:
            # The offset found at start is likely stale after a stop.
            self._disable_mouse()
            self.mouse = False
            self._decoder.mouse = False

    def clear(self) -> None:
        if self.fullscreen:
            self._csi("H")
        self._origin()
        self._csi("J")
        self._flush()

    def need_scrollbar_redraw(self) -> bool:
        return False

    def refresh_windows(self, windows: Sequence["LightWindow"]) -> None:
        self._flush()

    def refresh(self) -> None:
        self._update_terminal_size()

    def close(self) -> None:
        """Clean up the drawing area and restore the terminal."""
        if self.clear_on_exit:
            if self.fullscreen:
                self._rmcup()
            else:
                self._origin()
                if self.up_one_line:
                    self._csi("A")
                self._csi("J")
        elif not self.fullscreen:
            self._csi("u")
        self._disable_mouse()
        self._flush()
        self._restore_terminal()

    def get_char(self) -> Event:
        """Read the next key or mouse event."""
        return self._decoder.get_char()

    def max_x(self) -> int:
        return self.width

    def max_y(self) -> int:
        if self.height == 0:
            self._update_terminal_size()
        return self.height

    def new_window(
        self,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border_style: BorderStyle,
    ) -> "LightWindow":
        window = LightWindow(self, top, left, width, height, preview, border_style)
        window._draw_border(False)
        return window


class LightWindow:
    """A rectangular area drawn by a LightRenderer."""

    def __init__(
        self,
        renderer: LightRenderer,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border: BorderStyle,
    ):
        self._renderer = renderer
        self.colored = renderer.theme.colored
        self.preview = preview
        self.border = border
        self.top = top
        self.left = left
        self.width = width
        self.height = height
        self.posx = 0
        self.posy = 0
        self.tabstop = renderer.tabstop
        theme = renderer.theme
        if preview:
            self.fg = theme.preview_fg.color
            self.bg = theme.preview_bg.color
        else:
            self.fg = theme.fg.color
            self.bg = theme.bg.color

    def _border_color(self) -> ColorPair:
        palette = self._renderer.palette
        return palette.preview_border if self.preview else palette.border

    def draw_h_border(self) -> None:
        self._draw_border(True)

    def _draw_border(self, only_horizontal: bool) -> None:
        shape = self.border.shape
        if shape in _BOXED:
            self._draw_border_around(only_horizontal)
        elif shape == BorderShape.HORIZONTAL:
            self._draw_border_horizontal(True, True)
        elif shape == BorderShape.TOP:
            self._draw_border_horizontal(True, False)
        elif shape == BorderShape.BOTTOM:
            self._draw_border_horizontal(False, True)
        elif only_horizontal:
            return
        elif shape == BorderShape.VERTICAL:
            self._draw_border_vertical(True, True)
        elif shape == BorderShape.LEFT:
            self._draw_border_vertical(True, False)
        elif shape == BorderShape.RIGHT:
            self._draw_border_vertical(False, True)

    def _draw_border_horizontal(self, top: bool, bottom: bool) -> None:
        color = self._border_color()
        hw = _rune_width(self.border.top)
        if top:
            self.move(0, 0)
            self.cprint(color, _repeat(self.border.top, _go_div(self.width, hw)))
        if bottom:
            self.move(self.height - 1, 0)
            self.cprint(color, _repeat(self.border.bottom, _go_div(self.width, hw)))

    def _draw_border_vertical(self, left: bool, right: bool) -> None:
        width = self.width - 2
        if not left or not right:
            width += 1
        color = self._border_color()
        for y in range(self.height):
            self.move(y, 0)
            if left:
                self.cprint(color, self.border.left)
            self.cprint(color, _repeat(" ", width))
            if right:
                self.cprint(color, self.border.right)

    def _draw_border_around(self, only_horizontal: bool) -> None:
        b = self.border
        self.move(0, 0)
        color = self._border_color()
        hw = _rune_width(b.top)
        tcw = _rune_width(b.top_left) + _rune_width(b.top_right)
        bcw = _rune_width(b.bottom_left) + _rune_width(b.bottom_right)
        rem = _go_mod(self.width - tcw, hw)
        self.cprint(
            color,
            b.top_left
            + _repeat(b.top, _go_div(self.width - tcw, hw))
            + _repeat(" ", rem)
            + b.top_right,
        )
        if not only_horizontal:
            vw = _rune_width(b.left)
            for y in range(1, self.height - 1):
                self.move(y, 0)
                self.cprint(color, b.left)
                self.cprint(color, _repeat(" ", self.width - vw * 2))
                self.cprint(color, b.right)
        self.move(self.height - 1, 0)
        rem = _go_mod(self.width - bcw, hw)
        self.cprint(
            color,
            b.bottom_left
            + _repeat(b.bottom, _go_div(self.width - bcw, hw))
            + _repeat(" ", rem)
            + b.bottom_right,
        )

    def refresh(self) -> None:
        """Nothing to do: output is flushed by the renderer."""

    def close(self) -> None:
        """Nothing to release."""

    def enclose(self, y: int, x: int) -> bool:
        """True if the screen position lies inside the window."""
        return (
            self.left <= x < self.left + self.width
            and self.top <= y < self.top + self.height
        )

    def move(self, y: int, x: int) -> None:
        self.posx = x
        self.posy = y
        self._renderer._move(self.top + y, self.left + x)

    def move_and_clear(self, y: int, x: int) -> None:
        self.move(y, x)
        # Spaces rather than erase-line so a preview window on the right survives.
        self.print(_repeat(" ", self.width - x))
        self.move(y, x)

    def _csi_color(self, fg: int, bg: int, attr: int) -> tuple[bool, str]:
        codes = attr_codes(attr) + color_codes(fg, bg)
        code = self._renderer._csi(";" + ";".join(codes) + "m")
        return bool(codes), code

    def print(self, text: str) -> None:
        self._cprint2(COL_DEFAULT, self.bg, Attr.REGULAR, text)

    def cprint(self, pair: ColorPair, text: str) -> None:
        _, code = self._csi_color(pair.fg, pair.bg, pair.attr)
        self._renderer._stderr_internal(cleanse(text), False, code)
        self._renderer._csi("m")

    def _cprint2(self, fg: int, bg: int, attr: int, text: str) -> None:
        has_colors, code = self._csi_color(fg, bg, attr)
        self._renderer._stderr_internal(cleanse(text), False, code)
        if has_colors:
            self._renderer._csi("m")

    def _fill(self, text: str, reset_code: str) -> FillReturn:
        renderer = self._renderer
        all_lines = text.split("\n")
        for i, line in enumerate(all_lines):
            lines = wrap_line(line, self.posx, self.width, self.tabstop)
            for j, (piece, piece_width) in enumerate(lines):
                renderer._stderr_internal(piece, False, reset_code)
                self.posx += piece_width
                if j < len(lines) - 1 or i < len(all_lines) - 1:
                    if self.posy + 1 >= self.height:
                        return FillReturn.SUSPEND
                    self.move_and_clear(self.posy, self.posx)
                    self.move(self.posy + 1, 0)
                    renderer._stderr(reset_code)
        if self.posx + 1 >= self.width:
            if self.posy + 1 >= self.height:
                return FillReturn.SUSPEND
            self.move(self.posy + 1, 0)
            renderer._stderr(reset_code)
            return FillReturn.NEXT_LINE
        return FillReturn.CONTINUE

    def _set_bg(self) -> str:
        if self.bg != COL_DEFAULT:
            _, code = self._csi_color(COL_DEFAULT, self.bg, Attr.REGULAR)
            return code
        # Clears the dim attribute left after a CR marker.
        return "\x1b[m"

    def fill(self, text: str) -> FillReturn:
        """Write ``text`` with wrapping, starting at the current position."""
        self.move(self.posy, self.posx)
        return self._fill(text, self._set_bg())

    def cfill(self, fg: int, bg: int, attr: int, text: str) -> FillReturn:
        """Like ``fill`` with the given colours and attributes."""
        self.move(self.posy, self.posx)
        if fg == COL_DEFAULT:
            fg = self.fg
        if bg == COL_DEFAULT:
            bg = self.bg
        has_colors, reset_code = self._csi_color(fg, bg, attr)
        if has_colors:
            try:
                return self._fill(text, reset_code)
            finally:
                self._renderer._csi("m")
        return self._fill(text, self._set_bg())

    def finish_fill(self) -> None:
        """Blank the rest of the window after the last fill."""
        self.move_and_clear(self.posy, self.posx)
        for y in range(self.posy + 1, self.height):
            self.move_and_clear(y, 0)

    def erase(self) -> None:
        # The content is not erased, to avoid flicker while scrolling.
        self._draw_border(False)
        self.move(0, 0)