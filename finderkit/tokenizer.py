"""Splitting lines into fields and picking fields out by nth-expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from finderkit.chars import Chars, to_chars

RANGE_ELLIPSIS = 0

_INTEGER = re.compile(r"[+-]?[0-9]+")
_AWK_LEADING = re.compile(r"[\t ]*")
_AWK_FIELD = re.compile(r"[^\t ]+[\t ]*")


@dataclass(frozen=True)
class Range:
    """A field range; ``RANGE_ELLIPSIS`` stands for an open end."""

    begin: int
    end: int


@dataclass
class Token:
    """A field of a line and the number of characters before it."""

    text: Chars
    prefix_length: int


@dataclass(frozen=True)
class Delimiter:
    """Field delimiter: a compiled pattern, a plain string, or neither for AWK style."""

    regex: re.Pattern | None = None
    string: str | None = None


def _new_range(begin: int, end: int) -> Range:
    if begin == 1:
        begin = RANGE_ELLIPSIS
    if end == -1:
        end = RANGE_ELLIPSIS
    return Range(begin, end)


def _atoi_nonzero(text: str, expression: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid range expression: {expression!r}")
    value = int(text)
    if value == 0:
        raise ValueError(f"invalid range expression: {expression!r}")
    return value


def parse_range(text: str) -> Range:
    """Parse an nth-expression such as ``3``, ``..2``, ``2..`` or ``-3..-1``.

    Raises ValueError when the expression is malformed or uses index 0.
    """
    if text == "..":
        return _new_range(RANGE_ELLIPSIS, RANGE_ELLIPSIS)
    if text.startswith(".."):
        return _new_range(RANGE_ELLIPSIS, _atoi_nonzero(text[2:], text))
    if text.endswith(".."):
        return _new_range(_atoi_nonzero(text[:-2], text), RANGE_ELLIPSIS)
    if ".." in text:
        parts = text.split("..")
        if len(parts) != 2:
            raise ValueError(f"invalid range expression: {text!r}")
        begin = _atoi_nonzero(parts[0], text)
        end = _atoi_nonzero(parts[1], text)
        return _new_range(begin, end)
    n = _atoi_nonzero(text, text)
    return _new_range(n, n)


def _with_prefix_lengths(fields: Iterable[str], begin: int) -> list[Token]:
    result = []
    prefix_length = begin
    for field in fields:
        chars = to_chars(field)
        result.append(Token(chars, prefix_length))
        prefix_length += len(chars)
    return result


def _awk_tokenize(text: str) -> tuple[list[str], int]:
    leading = _AWK_LEADING.match(text).end()
    return _AWK_FIELD.findall(text, leading), leading


def _split_after(text: str, sep: str) -> list[str]:
    if not sep:
        return list(text)
    parts = text.split(sep)
    return [part + sep for part in parts[:-1]] + [parts[-1]]


def _regex_split(text: str, pattern: re.Pattern) -> list[str]:
    fields = []
    begin = 0
    previous_end: int | None = None
    for match in pattern.finditer(text):
        start, end = match.span()
        # Empty matches right after a previous match are not counted.
        if start == end and start == previous_end:
            continue
        fields.append(text[begin:end])
        begin = end
        previous_end = end
    if begin < len(text):
        fields.append(text[begin:])
    return fields


def tokenize(text: str, delimiter: Delimiter) -> list[Token]:
    """Split ``text`` into tokens that keep their trailing delimiter."""
    if delimiter.string is None and delimiter.regex is None:
        fields, prefix_length = _awk_tokenize(text)
        return _with_prefix_lengths(fields, prefix_length)
    if delimiter.string is not None:
        return _with_prefix_lengths(_split_after(text, delimiter.string), 0)
    return _with_prefix_lengths(_regex_split(text, delimiter.regex), 0)


def join_tokens(tokens: Iterable[Token]) -> str:
    """Concatenate the text of the tokens."""
    return "".join(str(item.text) for item in tokens)


def _resolve(index: int, count: int) -> int:
    return index + count + 1 if index < 0 else index


def transform(tokens: Sequence[Token], with_nth: Iterable[Range]) -> list[Token]:
    """Pick tokens by the given ranges, one merged token per range."""
    count = len(tokens)
    result = []
    for rng in with_nth:
        parts: list[Chars] = []
        min_idx = 0
        if rng.begin == rng.end:
            if rng.begin == RANGE_ELLIPSIS:
                parts.append(to_chars(join_tokens(tokens)))
            else:
                idx = _resolve(rng.begin, count)
                if 1 <= idx <= count:
                    min_idx = idx - 1
                    parts.append(tokens[idx - 1].text)
        else:
            if rng.begin == RANGE_ELLIPSIS:
                begin, end = 1, _resolve(rng.end, count)
            elif rng.end == RANGE_ELLIPSIS:
                begin, end = _resolve(rng.begin, count), count
            else:
                begin, end = _resolve(rng.begin, count), _resolve(rng.end, count)
            min_idx = max(0, begin - 1)
            parts.extend(
                tokens[i - 1].text for i in range(max(begin, 1), min(end, count) + 1)
            )

        if not parts:
            merged = to_chars(b"")
        elif len(parts) == 1:
            merged = parts[0]
        else:
            merged = to_chars("".join(str(part) for part in parts))

        prefix_length = tokens[min_idx].prefix_length if min_idx < count else 0
        result.append(Token(merged, prefix_length))
    return result