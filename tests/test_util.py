import signal
import subprocess
from datetime import timedelta

import pytest

from finderkit.util import (
    AtomicBool,
    Slab,
    as_uint16,
    constrain,
    dur_within,
    exec_command,
    exec_command_with,
    kill_command,
    once,
    repeat_to_fill,
    runes_width,
    string_width,
    truncate,
)


def test_constrain():
    assert constrain(-3, -1, 3) == -1
    assert constrain(2, -1, 3) == 2
    assert constrain(5, -1, 3) == 3
    assert constrain(0, -(2**31), 2**31 - 1) == 0


def test_as_uint16():
    assert as_uint16(5) == 5
    assert as_uint16(-10) == 0
    assert as_uint16(65535) == 65535
    assert as_uint16(-(2**31)) == 0
    assert as_uint16(-(2**15)) == 0
    assert as_uint16(65536) == 65535


def test_dur_within():
    second = timedelta(seconds=1)
    assert dur_within(timedelta(microseconds=5), timedelta(microseconds=1),
                      timedelta(microseconds=8)) == timedelta(microseconds=5)
    assert dur_within(timedelta(0), second, 3 * second) == second
    assert dur_within(10 * second, timedelta(0), second) == second


def test_once():
    o = once(False)
    assert o() is False
    assert o() is False
    o = once(True)
    assert o() is True
    assert o() is False


@pytest.mark.parametrize(
    "limit, width, overflow",
    [(100, 5, -1), (3, 4, 3), (0, 1, 0)],
)
def test_runes_width(limit, width, overflow):
    assert runes_width("hello", 0, 0, limit) == (width, overflow)


def test_runes_width_tab():
    assert runes_width("a\tb", 0, 8, 100) == (9, -1)


def test_truncate():
    truncated, width = truncate("가나다라마", 7)
    assert truncated == "가나다"
    assert width == 6


def test_repeat_to_fill():
    assert repeat_to_fill("abcde", 10, 50) == "abcde" * 5
    assert repeat_to_fill("abcde", 10, 42) == "abcde" * 4 + "ab"


def test_string_width():
    assert string_width("abc") == 3
    assert string_width("한글") == 4
    assert string_width("a\nb\r") == 4


def test_atomic_bool():
    assert AtomicBool(True).get() is True
    assert AtomicBool(False).get() is False
    ab = AtomicBool(True)
    assert ab.set(False) is False
    assert ab.get() is False


def test_slab_sizes():
    slab = Slab(3, 5)
    assert slab.i16 == [0, 0, 0]
    assert slab.i32 == [0] * 5


def test_exec_command_uses_shell(monkeypatch):
    monkeypatch.setenv("SHELL", "/bin/sh")
    prepared = exec_command("echo hi", True)
    assert prepared.args == (["/bin/sh", "-c", "echo hi"],)
    assert prepared.keywords == {"start_new_session": True}


def test_exec_command_defaults_to_sh(monkeypatch):
    monkeypatch.delenv("SHELL", raising=False)
    assert exec_command("true").args == (["sh", "-c", "true"],)


def test_exec_command_with_runs():
    proc = exec_command_with("sh", "echo hello", False)(stdout=subprocess.PIPE)
    out, _ = proc.communicate(timeout=10)
    assert out == b"hello\n"
    assert proc.returncode == 0


def test_kill_command():
    proc = exec_command_with("sh", "sleep 30", True)()
    kill_command(proc)
    assert proc.wait(timeout=10) == -signal.SIGKILL