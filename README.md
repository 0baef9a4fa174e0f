# finderkit

This package holds the parts of an interactive, line-based fuzzy finder. Each part can be used without the others.

## What is in it

- **`finderkit.chars`**: `Chars` is a text item that records whether it is pure ASCII. Its methods are `trim_length()`, which is capped at 65535 and cached, `leading_whitespaces()`, `trailing_whitespaces()`, `trim_trailing_whitespaces()`, `to_runes()`, `prepend()` and `as_bytes()`. It also has an `index` attribute. `to_chars(data)` builds a `Chars` from UTF-8 bytes or a string, with invalid bytes becoming U+FFFD. `runes_to_chars(runes)` builds one from characters or code points.
- **`finderkit.tokenizer`**: `tokenize(text, delimiter)` splits a line into `Token`s. Each token keeps its trailing delimiter and its `prefix_length`. The delimiter is chosen with `Delimiter()`:
  - `Delimiter()` splits AWK-style on spaces and tabs.
  - `Delimiter(string=...)` splits on a fixed string.
  - `Delimiter(regex=...)` splits on a compiled pattern.

  `parse_range(expr)` reads field expressions such as `3`, `..2`, `2..`, `3..5` and `-3..-1`. It raises `ValueError` for malformed input or index 0. `transform(tokens, ranges)` gives one merged token per range. `join_tokens(tokens)` concatenates token text.
- **`finderkit.util`**:
  - Display width: `string_width`, where CR and LF count as one column each, `runes_width`, `truncate` and `repeat_to_fill`.
  - Clamping: `constrain`, `as_uint16` and `dur_within`.
  - Terminal checks: `is_tty` and `to_tty`.
  - Small helpers: `once`, `AtomicBool` and `Slab`.
  - Shell commands:
    - `exec_command(command, setpgid)` prepares a command to run under `$SHELL`, or `sh` if that is unset.
    - `exec_command_with(shell, command, setpgid)` prepares a command for a given shell.
    - Both return a callable that starts a `subprocess.Popen`.
    - `kill_command(process)` kills the process group that the process leads.
- **`finderkit.eventbox`**: `EventBox` coordinates events between threads through `set`, `wait(callback)`, `peek`, `watch`, `unwatch` and `wait_for`.
- **`finderkit.shellquote`**: `quote_entry(entry, shell=None)` quotes a string for `cmd`, PowerShell or a POSIX shell. When no shell is given it uses `$SHELL`, or `cmd` if that is unset.
- **`finderkit.tui.events`**: `EventType`, `Event`, `MouseEvent`, and the helpers `key`, `alt_key` and `ctrl_alt_key`.
- **`finderkit.tui.borders`**: `BorderShape`, `BorderStyle`, `make_border_style(shape, unicode)` and `make_transparent_border()`.
- **`finderkit.tui.colors`**:
  - Types: `Attr` flags, `ColorAttr`, `ColorPair` and `ColorTheme`.
  - Colour helpers: `hex_to_color("#rrggbb")` and `is_24bit`.
  - Ready-made themes: `default16()`, `dark256()`, `light256()`, `no_color_theme()` and `empty_theme()`.
  - `init_theme(theme, base_theme, force_black)` fills in the undefined colours and returns a `Palette`. `init_palette(theme)` derives only the palette.
- **`finderkit.tui.keys`**: `KeyDecoder(read_bytes, mouse, yoffset)` turns raw terminal input into events. It handles control keys, Alt combinations, arrow and function keys, and SGR mouse reports including double clicks. `get_char()` raises `EOFError` when no input is available.
- **`finderkit.tui.light`**: `LightRenderer` and `LightWindow` make up an inline renderer driven by ANSI escape sequences. It reads keys from `/dev/tty` in raw mode and writes to standard error by default; set the renderer's `output` attribute to write elsewhere. The module also provides:
  - `FillReturn`, which reports where filling a window stopped.
  - The helpers `attr_codes`, `color_codes`, `wrap_line`, `cleanse`, `ttyname` and `tty_in`.

## What it does not do

This package has no fuzzy-matching algorithm and no command-line program. It does not read input lists or run an interactive finder session on its own. Those pieces are built on top of it.

The only renderer is the inline `LightRenderer`, which needs a POSIX terminal because it uses `termios`. There is no full-screen renderer and no Windows console support.

## Installation

```
pip install finderkit
```

## Examples

```python
from finderkit.tokenizer import Delimiter, join_tokens, parse_range, tokenize, transform

tokens = tokenize("  abc:  def:  ghi:  jkl", Delimiter())
ranges = [parse_range(expr) for expr in ("1..2", "3")]
print(join_tokens(transform(tokens, ranges)))   # "abc:  def:  ghi:  "
```

```python
from finderkit.util import truncate

text, width = truncate("가나다라마", 7)
print(text, width)   # 가나다 6
```

```python
from finderkit.tui.events import EventType
from finderkit.tui.keys import KeyDecoder

chunks = [b"\x1b[A", b"x"]
decoder = KeyDecoder(lambda: chunks.pop(0) if chunks else b"")
print(decoder.get_char().type is EventType.UP)   # True
print(decoder.get_char().char)                   # x
```

## Running the tests

```
pip install -e .[test]
pytest
```