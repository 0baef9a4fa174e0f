import pytest

from finderkit.chars import Chars, runes_to_chars, to_chars


def test_to_chars_ascii():
    chars = to_chars(b"foobar")
    assert chars.in_bytes
    assert str(chars) == "foobar"


def test_chars_length():
    chars = to_chars("\tabc한글  ".encode("utf-8"))
    assert not chars.in_bytes
    assert len(chars) == 8
    assert chars.trim_length() == 5


def test_chars_to_string():
    text = "\tabc한글  "
    assert str(to_chars(text.encode("utf-8"))) == text


@pytest.mark.parametrize(
    "text, expected",
    [
        ("hello", 5),
        ("hello ", 5),
        ("hello  ", 5),
        (" hello", 5),
        ("  hello", 5),
        (" hello ", 5),
        ("  hello  ", 5),
        ("h   o", 5),
        ("  h   o  ", 5),
        ("         ", 0),
    ],
)
def test_trim_length(text, expected):
    assert to_chars(text.encode("utf-8")).trim_length() == expected


def test_trim_length_is_cached():
    chars = to_chars(b" ab ")
    assert chars.trim_length() == 2
    chars.prepend("xyz")
    assert chars.trim_length() == 2


def test_invalid_utf8_becomes_replacement():
    chars = to_chars(b"a\xffb")
    assert not chars.in_bytes
    assert str(chars) == "a\ufffdb"


def test_get_and_to_runes():
    chars = to_chars("가b".encode("utf-8"))
    assert chars.get(0) == "가"
    assert chars.get(1) == "b"
    assert chars.to_runes() == ["가", "b"]


def test_whitespace_counts():
    chars = to_chars(b" \t ab  ")
    assert chars.leading_whitespaces() == 3
    assert chars.trailing_whitespaces() == 2


def test_trim_trailing_whitespaces():
    chars = to_chars("  한 \t".encode("utf-8"))
    chars.trim_trailing_whitespaces()
    assert str(chars) == "  한"
    assert len(chars) == 3


def test_prepend():
    chars = to_chars(b"bar")
    chars.prepend("foo")
    assert str(chars) == "foobar"
    assert chars.in_bytes
    chars.prepend("é")
    assert str(chars) == "éfoobar"
    assert not chars.in_bytes


def test_runes_to_chars_accepts_code_points():
    chars = runes_to_chars([ord("a"), "b", 0xAC00])
    assert str(chars) == "ab가"
    assert not chars.in_bytes


def test_as_bytes_round_trip():
    text = "abc한글"
    assert to_chars(text.encode("utf-8")).as_bytes() == text.encode("utf-8")


def test_equality():
    assert to_chars(b"abc") == Chars("abc")
    assert to_chars(b"abc") != Chars("abd")