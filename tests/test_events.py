import pytest

from finderkit.tui.events import (
    Event,
    EventType,
    MouseEvent,
    alt_key,
    ctrl_alt_key,
    key,
)


def test_control_keys_share_ascii_codes():
    assert EventType(1).as_event() == Event(EventType.CTRL_A)
    assert EventType(27).as_event() == Event(EventType.ESC)
    assert EventType(9).as_event() == Event(EventType.TAB)
    assert EventType(10).as_event() == Event(EventType.CTRL_J)
    assert EventType(26).as_event() == Event(EventType.CTRL_Z)


def test_event_types_are_distinct_and_ordered():
    types = list(EventType)
    events = [t.as_event() for t in types]
    assert events == [Event(EventType(i)) for i in range(len(types))]
    assert len(set(events)) == len(types)
    assert events[0] == Event(EventType.RUNE)
    assert events[-1] == Event(EventType.CTRL_ALT)


def test_as_event():
    event = EventType.UP.as_event()
    assert event == Event(EventType.UP, "", None)
    assert event.char == ""


def test_key_constructors():
    assert key("a") == Event(EventType.RUNE, "a")
    assert alt_key("a") == Event(EventType.ALT, "a")
    assert ctrl_alt_key("h") == Event(EventType.CTRL_ALT, "h")
    assert key("a") != alt_key("a")


def test_is_matches_any_given_type():
    event = Event(EventType.UP)
    assert event.is_(EventType.DOWN, EventType.UP)
    assert not event.is_(EventType.DOWN)
    assert not event.is_()


def test_comparable_drops_mouse_details():
    mouse = MouseEvent(1, 2, 0, True, True, False, False)
    event = Event(EventType.MOUSE, "", mouse)
    assert event.comparable() == Event(EventType.MOUSE)
    assert event.comparable().mouse_event is None
    assert event.mouse_event == mouse


def test_comparable_keeps_character():
    assert alt_key("x").comparable() == alt_key("x")


def test_events_are_hashable_keys():
    bindings = {key("a"): "first", EventType.ESC.as_event(): "second"}
    assert bindings[Event(EventType.RUNE, "a")] == "first"
    assert bindings[Event(EventType.ESC)] == "second"


def test_event_is_immutable():
    event = key("a")
    with pytest.raises(AttributeError):
        event.char = "b"
    assert event.char == "a"