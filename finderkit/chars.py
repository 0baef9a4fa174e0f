"""Compact character sequences with cached trim information."""

from __future__ import annotations

from typing import Iterable

from finderkit.util import as_uint16

_LATIN1_SPACES = frozenset("\t\n\v\f\r \x85\xa0")


def _is_space(char: str) -> bool:
    """Return True for Unicode white space, the way the matcher defines it."""
    if ord(char) <= 0xFF:
        return char in _LATIN1_SPACES
    return char.isspace()


class Chars:
    """A sequence of characters that remembers whether it is plain ASCII."""

    __slots__ = ("_text", "_in_bytes", "_trim_length", "index")

    def __init__(self, text: str = "", in_bytes: bool | None = None, index: int = 0):
        self._text = text
        self._in_bytes = text.isascii() if in_bytes is None else in_bytes
        self._trim_length: int | None = None
        self.index = index

    @property
    def in_bytes(self) -> bool:
        """True when every character is ASCII and stored as a byte."""
        return self._in_bytes

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return (
            f"Chars({self._text!r}, in_bytes={self._in_bytes}, "
            f"index={self.index})"
        )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Chars):
            return self._text == other._text
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def get(self, i: int) -> str:
        """Return the character at position ``i``."""
        return self._text[i]

    def as_bytes(self) -> bytes:
        """Return the content encoded as UTF-8."""
        return self._text.encode("utf-8")

    def trim_length(self) -> int:
        """Length after stripping leading and trailing white space, capped at 65535."""
        if self._trim_length is not None:
            return self._trim_length
        text = self._text
        end = len(text)
        while end > 0 and _is_space(text[end - 1]):
            end -= 1
        if end == 0:
            self._trim_length = 0
            return 0
        start = 0
        while start < end and _is_space(text[start]):
            start += 1
        self._trim_length = as_uint16(end - start)
        return self._trim_length

    def leading_whitespaces(self) -> int:
        """Number of white-space characters at the start."""
        count = 0
        for char in self._text:
            if not _is_space(char):
                break
            count += 1
        return count

    def trailing_whitespaces(self) -> int:
        """Number of white-space characters at the end."""
        count = 0
        for char in reversed(self._text):
            if not _is_space(char):
                break
            count += 1
        return count

    def trim_trailing_whitespaces(self) -> None:
        """Drop the white space at the end of the sequence."""
        trailing = self.trailing_whitespaces()
        if trailing:
            self._text = self._text[: len(self._text) - trailing]

    def to_runes(self) -> list[str]:
        """Return the characters as a list."""
        return list(self._text)

    def prepend(self, prefix: str) -> None:
        """Put ``prefix`` in front of the current content."""
        self._text = prefix + self._text
        self._in_bytes = self._in_bytes and prefix.isascii()


def to_chars(data: bytes | bytearray | str) -> Chars:
    """Build Chars from UTF-8 bytes; invalid sequences become U+FFFD."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    raw = bytes(data)
    if raw.isascii():
        return Chars(raw.decode("ascii"), in_bytes=True)
    return Chars(raw.decode("utf-8", errors="replace"), in_bytes=False)


def runes_to_chars(runes: Iterable[str | int]) -> Chars:
    """Build Chars from characters or code points, always in rune form."""
    text = "".join(chr(r) if isinstance(r, int) else r for r in runes)
    return Chars(text, in_bytes=False)