"""A box of pending events shared between threads."""

from __future__ import annotations

import threading
from typing import Any, Callable, Hashable

Events = dict

_POLL_INTERVAL = 0.01


class EventBox:
    """Coordinates events: producers set them, a consumer waits for them."""

    def __init__(self) -> None:
        self._events: dict[Hashable, Any] = {}
        self._cond = threading.Condition()
        self._ignore: set[Hashable] = set()

    def wait(self, callback: Callable[[dict], None]) -> None:
        """Block until an event is present, then call ``callback`` with the events.

        The callback runs under the lock and may clear the dictionary.
        """
        with self._cond:
            if not self._events:
                self._cond.wait()
            callback(self._events)

    def set(self, event: Hashable, value: Any) -> None:
        """Record ``event`` with ``value`` and wake waiters unless it is ignored."""
        with self._cond:
            self._events[event] = value
            if event not in self._ignore:
                self._cond.notify_all()

    def peek(self, event: Hashable) -> bool:
        """True if ``event`` is currently set."""
        with self._cond:
            return event in self._events

    def watch(self, *events: Hashable) -> None:
        """Stop ignoring the given events."""
        with self._cond:
            self._ignore.difference_update(events)

    def unwatch(self, *events: Hashable) -> None:
        """Ignore the given events: setting them wakes nobody."""
        with self._cond:
            self._ignore.update(events)

    def wait_for(self, event: Hashable) -> None:
        """Block until ``event`` is set."""
        with self._cond:
            while event not in self._events:
                self._cond.wait(_POLL_INTERVAL if self._events else None)