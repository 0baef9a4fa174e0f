import io
import os

import pytest

from finderkit.tui.borders import BorderShape, make_border_style
from finderkit.tui.colors import COL_DEFAULT, Attr, no_color_theme
from finderkit.tui.events import Event, EventType
from finderkit.tui.light import (
    FillReturn,
    LightRenderer,
    attr_codes,
    cleanse,
    color_codes,
    ttyname,
    wrap_line,
)


def make_renderer(mouse=False, clear_on_exit=True, fullscreen=False):
    renderer = LightRenderer(
        no_color_theme(), False, mouse, 8, clear_on_exit, fullscreen, lambda h: h
    )
    renderer.output = io.StringIO()
    return renderer


def plain_window(renderer, top=0, left=0, width=10, height=3):
    style = make_border_style(BorderShape.NONE, False)
    return renderer.new_window(top, left, width, height, False, style)


def test_attr_codes():
    assert attr_codes(Attr.BOLD | Attr.UNDERLINE) == ["1", "4"]
    assert attr_codes(Attr.CLEAR | Attr.BOLD) == []
    assert attr_codes(Attr.UNDEFINED) == []


def test_color_codes_default_is_skipped():
    assert color_codes(COL_DEFAULT, COL_DEFAULT) == []
    assert color_codes(100, COL_DEFAULT) == ["38;5;100"]
    assert color_codes(COL_DEFAULT, 100) == ["48;5;100"]


def test_cleanse_removes_escape():
    assert cleanse("a\x1bb\x1b") == "ab"


def test_wrap_line_splits_at_width():
    assert wrap_line("abcdef", 0, 4, 8) == [("abcd", 4), ("ef", 2)]


def test_wrap_line_keeps_text_without_tabs():
    text = "hello world, this is long"
    pieces = wrap_line(text, 3, 7, 8)
    assert "".join(p for p, _ in pieces) == text
    assert all(width <= 7 for _, width in pieces)


def test_wrap_line_wide_characters():
    assert wrap_line("가나다", 0, 4, 8) == [("가나", 4), ("다", 2)]


def test_wrap_line_expands_tab():
    pieces = wrap_line("\tx", 0, 80, 4)
    assert pieces == [("    x", 5)]


def test_clear_flushes_with_cursor_hidden():
    renderer = make_renderer()
    renderer.clear()
    assert renderer.output.getvalue() == "\x1b[?25l\r\x1b[J\x1b[?25h"


def test_window_move_is_relative_to_window():
    renderer = make_renderer()
    window = plain_window(renderer, top=1, left=1, width=5, height=3)
    window.move(2, 3)
    assert (renderer.y, renderer.x) == (3, 4)
    renderer.refresh_windows([window])
    assert "\x1b[3B\r\x1b[4C" in renderer.output.getvalue()


def test_enclose():
    renderer = make_renderer()
    window = plain_window(renderer, top=1, left=1, width=5, height=3)
    assert window.enclose(1, 1)
    assert window.enclose(3, 5)
    assert not window.enclose(4, 1)
    assert not window.enclose(1, 6)


def test_boxed_border_is_drawn():
    renderer = make_renderer()
    style = make_border_style(BorderShape.SHARP, False)
    window = renderer.new_window(0, 0, 5, 3, False, style)
    renderer.refresh_windows([window])
    assert "+---+" in renderer.output.getvalue()


def test_print_marks_newline():
    renderer = make_renderer()
    window = plain_window(renderer)
    window.print("a\nb\x1b")
    renderer.refresh_windows([window])
    output = renderer.output.getvalue()
    assert "␊" in output
    assert "b\x1b" not in output


def test_fill_continue():
    renderer = make_renderer()
    window = plain_window(renderer, width=10, height=2)
    assert window.fill("hello") == FillReturn.CONTINUE
    assert (window.posy, window.posx) == (0, 5)


def test_fill_newline_moves_down():
    renderer = make_renderer()
    window = plain_window(renderer, width=10, height=3)
    assert window.fill("ab\ncd") == FillReturn.CONTINUE
    assert (window.posy, window.posx) == (1, 2)


def test_fill_next_line_at_right_edge():
    renderer = make_renderer()
    window = plain_window(renderer, width=10, height=2)
    assert window.fill("123456789") == FillReturn.NEXT_LINE
    assert (window.posy, window.posx) == (1, 0)


def test_fill_suspends_when_full():
    renderer = make_renderer()
    window = plain_window(renderer, width=5, height=2)
    assert window.fill("hello world!") == FillReturn.SUSPEND


def test_cfill_resets_colors():
    renderer = make_renderer()
    window = plain_window(renderer)
    assert window.cfill(100, COL_DEFAULT, Attr.BOLD, "x") == FillReturn.CONTINUE
    renderer.refresh_windows([window])
    output = renderer.output.getvalue()
    assert "\x1b[;1;38;5;100m" in output
    assert output.rstrip("\x1b[?25h").endswith("\x1b[m")


def test_max_y_uses_environment_without_terminal(monkeypatch):
    monkeypatch.setenv("LINES", "30")
    monkeypatch.setenv("COLUMNS", "100")
    renderer = LightRenderer(no_color_theme(), False, False, 8, True, False, lambda h: h - 1)
    assert renderer.max_y() == 29
    assert renderer.max_x() == 100


def test_need_scrollbar_redraw():
    assert make_renderer().need_scrollbar_redraw() is False


def test_resume_after_stop_disables_mouse():
    renderer = make_renderer(mouse=True)
    renderer.resume(False, True)
    assert renderer.mouse is False
    renderer.refresh_windows([])
    assert "\x1b[?1000l" in renderer.output.getvalue()


def test_close_clears_screen():
    renderer = make_renderer(clear_on_exit=True)
    renderer.close()
    assert "\x1b[J" in renderer.output.getvalue()


def test_close_restores_cursor_without_clear():
    renderer = make_renderer(clear_on_exit=False)
    renderer.close()
    assert "\x1b[u" in renderer.output.getvalue()


def _with_input(renderer, data, close_writer=False):
    read_fd, write_fd = os.pipe()
    os.write(write_fd, data)
    if close_writer:
        os.close(write_fd)
        write_fd = None
    renderer.ttyin = os.fdopen(read_fd, "rb", buffering=0)
    renderer.esc_delay = 0
    return write_fd


def test_get_char_control_key():
    renderer = make_renderer()
    write_fd = _with_input(renderer, b"\x01")
    try:
        assert renderer.get_char() == Event(EventType.CTRL_A)
    finally:
        os.close(write_fd)
        renderer.ttyin.close()


def test_get_char_arrow_sequence():
    renderer = make_renderer()
    write_fd = _with_input(renderer, b"\x1b[Aq")
    try:
        assert renderer.get_char() == Event(EventType.UP)
        assert renderer.get_char() == Event(EventType.RUNE, "q")
    finally:
        os.close(write_fd)
        renderer.ttyin.close()


def test_get_char_fails_on_closed_input():
    renderer = make_renderer()
    _with_input(renderer, b"", close_writer=True)
    try:
        with pytest.raises(OSError):
            renderer.get_char()
    finally:
        renderer.ttyin.close()


def test_ttyname_is_device_path_or_empty():
    name = ttyname()
    assert name == "" or name.startswith("/dev/")