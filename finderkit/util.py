"""Width calculations, numeric helpers and process helpers."""

from __future__ import annotations

import functools
import os
import signal
import subprocess
import sys
import threading
from typing import Callable, Iterable, TypeVar

import regex
import wcwidth

_T = TypeVar("_T")

_GRAPHEME = regex.compile(r"\X")

MAX_UINT16 = 0xFFFF


def _graphemes(text: str) -> list[str]:
    return _GRAPHEME.findall(text)


def _rune_width(char: str) -> int:
    return max(wcwidth.wcwidth(char), 0)


def _cluster_width(cluster: str) -> int:
    for char in cluster:
        width = _rune_width(char)
        if width > 0:
            return width
    return 0


def string_width(text: str) -> int:
    """Display width of ``text``; every CR and LF counts as one column."""
    width = sum(_cluster_width(g) for g in _graphemes(text))
    return width + text.count("\n") + text.count("\r")


def runes_width(
    runes: Iterable[str] | str, prefix_width: int, tabstop: int, limit: int
) -> tuple[int, int]:
    """Return the width and the index of the first character past ``limit`` (or -1)."""
    width = 0
    idx = 0
    for cluster in _graphemes("".join(runes)):
        if cluster == "\t":
            w = tabstop - (prefix_width + width) % tabstop
        else:
            w = string_width(cluster)
        width += w
        if width > limit:
            return width, idx
        idx += len(cluster)
    return width, -1


def truncate(text: str, limit: int) -> tuple[str, int]:
    """Cut ``text`` to fit within ``limit`` columns; return the text and its width."""
    kept: list[str] = []
    width = 0
    for cluster in _graphemes(text):
        w = string_width(cluster)
        if width + w > limit:
            break
        width += w
        kept.append(cluster)
    return "".join(kept), width


def constrain(val: _T, minimum: _T, maximum: _T) -> _T:
    """Clamp ``val`` into ``[minimum, maximum]``."""
    if val < minimum:  # type: ignore[operator]
        return minimum
    if val > maximum:  # type: ignore[operator]
        return maximum
    return val


def as_uint16(val: int) -> int:
    """Clamp an integer into the unsigned 16-bit range."""
    return constrain(val, 0, MAX_UINT16)


def dur_within(val: _T, minimum: _T, maximum: _T) -> _T:
    """Clamp a duration into ``[minimum, maximum]``."""
    return constrain(val, minimum, maximum)


def is_tty() -> bool:
    """True if standard input is a terminal."""
    return sys.stdin is not None and sys.stdin.isatty()


def to_tty() -> bool:
    """True if standard output is a terminal."""
    return sys.stdout is not None and sys.stdout.isatty()


def once(next_response: bool) -> Callable[[], bool]:
    """Return a function that answers ``next_response`` once and False after."""
    state = next_response

    def respond() -> bool:
        nonlocal state
        previous, state = state, False
        return previous

    return respond


def repeat_to_fill(text: str, length: int, limit: int) -> str:
    """Repeat ``text`` (of width ``length``) until ``limit`` columns are filled."""
    times, rest = divmod(limit, length)
    output = text * times
    if rest > 0:
        for char in text:
            rest -= _rune_width(char)
            if rest < 0:
                break
            output += char
            if rest == 0:
                break
    return output


def exec_command(
    command: str, setpgid: bool = False
) -> Callable[..., subprocess.Popen]:
    """Prepare ``command`` to run under ``$SHELL`` (or ``sh``).

    The returned callable starts the process and accepts Popen keyword arguments.
    """
    shell = os.environ.get("SHELL") or "sh"
    return exec_command_with(shell, command, setpgid)


def exec_command_with(
    shell: str, command: str, setpgid: bool = False
) -> Callable[..., subprocess.Popen]:
    """Prepare ``command`` to run with the given shell."""
    return functools.partial(
        subprocess.Popen, [shell, "-c", command], start_new_session=setpgid
    )


def kill_command(process: subprocess.Popen) -> None:
    """Kill the process group led by ``process``."""
    os.killpg(process.pid, signal.SIGKILL)


class AtomicBool:
    """A boolean with synchronised access."""

    def __init__(self, initial_state: bool = False):
        self._lock = threading.Lock()
        self._state = bool(initial_state)

    def get(self) -> bool:
        with self._lock:
            return self._state

    def set(self, new_state: bool) -> bool:
        with self._lock:
            self._state = bool(new_state)
        return new_state


class Slab:
    """Preallocated scratch arrays for the matching algorithms."""

    __slots__ = ("i16", "i32")

    def __init__(self, size16: int, size32: int):
        self.i16 = [0] * size16
        self.i32 = [0] * size32