"""Colours, text attributes, themes and the palette derived from a theme."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import IntFlag

from finderkit.tui.borders import BorderShape

COL_UNDEFINED = -2
COL_DEFAULT = -1

COL_BLACK = 0
COL_RED = 1
COL_GREEN = 2
COL_YELLOW = 3
COL_BLUE = 4
COL_MAGENTA = 5
COL_CYAN = 6
COL_WHITE = 7

_RGB_FLAG = 1 << 24

DEFAULT_BORDER_SHAPE = BorderShape.ROUNDED

_HEX_COMPONENT = re.compile(r"[+-]?[0-9a-fA-F]+")


class Attr(IntFlag):
    """Text attributes, combined with ``|``."""

    UNDEFINED = 0
    BOLD = 1
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    BLINK2 = 1 << 5
    REVERSE = 1 << 6
    STRIKE_THROUGH = 1 << 7
    REGULAR = 1 << 8
    CLEAR = 1 << 9

    def merge(self, other: int) -> "Attr":
        """The union of both attribute sets."""
        return Attr(self | other)


def is_24bit(color: int) -> bool:
    """True if ``color`` is a 24-bit RGB colour."""
    return color > 0 and (color & _RGB_FLAG) > 0


def _hex_component(text: str) -> int:
    if not _HEX_COMPONENT.fullmatch(text):
        return 0
    return int(text, 16)


def hex_to_color(rrggbb: str) -> int:
    """Convert ``#rrggbb`` to a 24-bit colour value.

    Components that are not valid hexadecimal count as 0.
    Raises ValueError if the text is too short to hold three components.
    """
    if len(rrggbb) < 7:
        raise ValueError(f"invalid colour: {rrggbb!r}")
    r = _hex_component(rrggbb[1:3])
    g = _hex_component(rrggbb[3:5])
    b = _hex_component(rrggbb[5:7])
    return _RGB_FLAG + (r << 16) + (g << 8) + b


@dataclass(frozen=True)
class ColorAttr:
    """A colour together with text attributes."""

    color: int = COL_UNDEFINED
    attr: Attr = Attr.UNDEFINED


@dataclass(frozen=True)
class ColorPair:
    """Foreground, background and attributes used to draw text."""

    fg: int
    bg: int
    attr: Attr = Attr.UNDEFINED

    def has_bg(self) -> bool:
        """True if drawing with this pair paints a visible background."""
        reverse = (self.attr & Attr.REVERSE) > 0
        if reverse:
            return self.fg != COL_DEFAULT
        return self.bg != COL_DEFAULT

    def _merge(self, other: "ColorPair", except_color: int) -> "ColorPair":
        fg = other.fg if other.fg != except_color else self.fg
        bg = other.bg if other.bg != except_color else self.bg
        return ColorPair(fg, bg, Attr(self.attr | other.attr))

    def with_attr(self, attr: int) -> "ColorPair":
        """A copy with ``attr`` added to the attributes."""
        return replace(self, attr=Attr(self.attr | attr))

    def merge_attr(self, other: "ColorPair") -> "ColorPair":
        """A copy with the attributes of ``other`` added."""
        return self.with_attr(other.attr)

    def merge(self, other: "ColorPair") -> "ColorPair":
        """Overlay ``other``; its undefined colours keep this pair's colours."""
        return self._merge(other, COL_UNDEFINED)

    def merge_non_default(self, other: "ColorPair") -> "ColorPair":
        """Overlay ``other``; its default colours keep this pair's colours."""
        return self._merge(other, COL_DEFAULT)


def _undefined() -> ColorAttr:
    return ColorAttr(COL_UNDEFINED, Attr.UNDEFINED)


@dataclass
class ColorTheme:
    """Colours for every element of the interface."""

    colored: bool = True
    input: ColorAttr = field(default_factory=_undefined)
    disabled: ColorAttr = field(default_factory=_undefined)
    fg: ColorAttr = field(default_factory=_undefined)
    bg: ColorAttr = field(default_factory=_undefined)
    preview_fg: ColorAttr = field(default_factory=_undefined)
    preview_bg: ColorAttr = field(default_factory=_undefined)
    dark_bg: ColorAttr = field(default_factory=_undefined)
    gutter: ColorAttr = field(default_factory=_undefined)
    prompt: ColorAttr = field(default_factory=_undefined)
    match: ColorAttr = field(default_factory=_undefined)
    current: ColorAttr = field(default_factory=_undefined)
    current_match: ColorAttr = field(default_factory=_undefined)
    spinner: ColorAttr = field(default_factory=_undefined)
    info: ColorAttr = field(default_factory=_undefined)
    cursor: ColorAttr = field(default_factory=_undefined)
    selected: ColorAttr = field(default_factory=_undefined)
    header: ColorAttr = field(default_factory=_undefined)
    separator: ColorAttr = field(default_factory=_undefined)
    scrollbar: ColorAttr = field(default_factory=_undefined)
    border: ColorAttr = field(default_factory=_undefined)
    preview_border: ColorAttr = field(default_factory=_undefined)
    preview_scrollbar: ColorAttr = field(default_factory=_undefined)
    border_label: ColorAttr = field(default_factory=_undefined)
    preview_label: ColorAttr = field(default_factory=_undefined)


@dataclass(frozen=True)
class Palette:
    """The colour pairs the renderers draw with, derived from a theme."""

    prompt: ColorPair
    normal: ColorPair
    input: ColorPair
    disabled: ColorPair
    match: ColorPair
    cursor: ColorPair
    cursor_empty: ColorPair
    selected: ColorPair
    current: ColorPair
    current_match: ColorPair
    current_cursor: ColorPair
    current_cursor_empty: ColorPair
    current_selected: ColorPair
    current_selected_empty: ColorPair
    spinner: ColorPair
    info: ColorPair
    header: ColorPair
    separator: ColorPair
    scrollbar: ColorPair
    border: ColorPair
    border_label: ColorPair
    preview_label: ColorPair
    preview: ColorPair
    preview_border: ColorPair
    preview_scrollbar: ColorPair


_BASE_FIELDS = (
    "input",
    "fg",
    "bg",
    "dark_bg",
    "prompt",
    "match",
    "current",
    "current_match",
    "spinner",
    "info",
    "cursor",
    "selected",
    "header",
    "border",
    "border_label",
)

_ALL_COLOR_FIELDS = _BASE_FIELDS + (
    "disabled",
    "preview_fg",
    "preview_bg",
    "gutter",
    "preview_border",
    "preview_scrollbar",
    "preview_label",
    "separator",
    "scrollbar",
)


def _plain(color: int) -> ColorAttr:
    return ColorAttr(color, Attr.UNDEFINED)


def empty_theme() -> ColorTheme:
    """A coloured theme with every colour left undefined."""
    return ColorTheme(colored=True)


def no_color_theme() -> ColorTheme:
    """A theme without colours that marks matches and the current line by attributes."""
    theme = ColorTheme(
        colored=False, **{name: _plain(COL_DEFAULT) for name in _ALL_COLOR_FIELDS}
    )
    theme.match = ColorAttr(COL_DEFAULT, Attr.UNDERLINE)
    theme.current = ColorAttr(COL_DEFAULT, Attr.REVERSE)
    theme.current_match = ColorAttr(COL_DEFAULT, Attr.REVERSE | Attr.UNDERLINE)
    return theme


def _base_theme(colors: dict[str, int]) -> ColorTheme:
    return ColorTheme(
        colored=True, **{name: _plain(value) for name, value in colors.items()}
    )


def default16() -> ColorTheme:
    """The base theme for 16-colour terminals."""
    return _base_theme(
        {
            "input": COL_DEFAULT,
            "fg": COL_DEFAULT,
            "bg": COL_DEFAULT,
            "dark_bg": COL_BLACK,
            "prompt": COL_BLUE,
            "match": COL_GREEN,
            "current": COL_YELLOW,
            "current_match": COL_GREEN,
            "spinner": COL_GREEN,
            "info": COL_WHITE,
            "cursor": COL_RED,
            "selected": COL_MAGENTA,
            "header": COL_CYAN,
            "border": COL_BLACK,
            "border_label": COL_WHITE,
        }
    )


def dark256() -> ColorTheme:
    """The base theme for 256-colour terminals with a dark background."""
    return _base_theme(
        {
            "input": COL_DEFAULT,
            "fg": COL_DEFAULT,
            "bg": COL_DEFAULT,
            "dark_bg": 236,
            "prompt": 110,
            "match": 108,
            "current": 254,
            "current_match": 151,
            "spinner": 148,
            "info": 144,
            "cursor": 161,
            "selected": 168,
            "header": 109,
            "border": 59,
            "border_label": 145,
        }
    )


def light256() -> ColorTheme:
    """The base theme for 256-colour terminals with a light background."""
    return _base_theme(
        {
            "input": COL_DEFAULT,
            "fg": COL_DEFAULT,
            "bg": COL_DEFAULT,
            "dark_bg": 251,
            "prompt": 25,
            "match": 66,
            "current": 237,
            "current_match": 23,
            "spinner": 65,
            "info": 101,
            "cursor": 161,
            "selected": 168,
            "header": 31,
            "border": 145,
            "border_label": 59,
        }
    )


def _overlay(base: ColorAttr, top: ColorAttr) -> ColorAttr:
    color = top.color if top.color != COL_UNDEFINED else base.color
    attr = top.attr if top.attr != Attr.UNDEFINED else base.attr
    return ColorAttr(color, Attr(attr))


def init_theme(
    theme: ColorTheme, base_theme: ColorTheme, force_black: bool = False
) -> Palette:
    """Fill the undefined parts of ``theme`` from ``base_theme`` and derive the palette.

    ``theme`` is updated in place.
    """
    if force_black:
        theme.bg = ColorAttr(COL_BLACK, Attr.UNDEFINED)

    for name in _BASE_FIELDS:
        setattr(theme, name, _overlay(getattr(base_theme, name), getattr(theme, name)))

    # These are not defined by the base themes but derived from other entries.
    theme.disabled = _overlay(theme.input, theme.disabled)
    theme.gutter = _overlay(theme.dark_bg, theme.gutter)
    theme.preview_fg = _overlay(theme.fg, theme.preview_fg)
    theme.preview_bg = _overlay(theme.bg, theme.preview_bg)
    theme.preview_label = _overlay(theme.border_label, theme.preview_label)
    theme.preview_border = _overlay(theme.border, theme.preview_border)
    theme.separator = _overlay(theme.border, theme.separator)
    theme.scrollbar = _overlay(theme.border, theme.scrollbar)
    theme.preview_scrollbar = _overlay(theme.preview_border, theme.preview_scrollbar)

    return init_palette(theme)


def _pair(fg: ColorAttr, bg: ColorAttr) -> ColorPair:
    bg_color = bg.color
    if fg.color == COL_DEFAULT and (fg.attr & Attr.REVERSE) > 0:
        bg_color = COL_DEFAULT
    return ColorPair(fg.color, bg_color, Attr(fg.attr))


def init_palette(theme: ColorTheme) -> Palette:
    """Derive the colour pairs from a fully defined theme."""
    blank = replace(theme.fg, attr=Attr.REGULAR)
    return Palette(
        prompt=_pair(theme.prompt, theme.bg),
        normal=_pair(theme.fg, theme.bg),
        input=_pair(theme.input, theme.bg),
        disabled=_pair(theme.disabled, theme.bg),
        match=_pair(theme.match, theme.bg),
        cursor=_pair(theme.cursor, theme.gutter),
        cursor_empty=_pair(blank, theme.gutter),
        selected=_pair(theme.selected, theme.gutter),
        current=_pair(theme.current, theme.dark_bg),
        current_match=_pair(theme.current_match, theme.dark_bg),
        current_cursor=_pair(theme.cursor, theme.dark_bg),
        current_cursor_empty=_pair(blank, theme.dark_bg),
        current_selected=_pair(theme.selected, theme.dark_bg),
        current_selected_empty=_pair(blank, theme.dark_bg),
        spinner=_pair(theme.spinner, theme.bg),
        info=_pair(theme.info, theme.bg),
        header=_pair(theme.header, theme.bg),
        separator=_pair(theme.separator, theme.bg),
        scrollbar=_pair(theme.scrollbar, theme.bg),
        border=_pair(theme.border, theme.bg),
        border_label=_pair(theme.border_label, theme.bg),
        preview_label=_pair(theme.preview_label, theme.preview_bg),
        preview=_pair(theme.preview_fg, theme.preview_bg),
        preview_border=_pair(theme.preview_border, theme.preview_bg),
        preview_scrollbar=_pair(theme.preview_scrollbar, theme.preview_bg),
    )