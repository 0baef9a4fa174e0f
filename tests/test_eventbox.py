import queue
import threading

from finderkit.eventbox import EventBox

EVT_READ_NEW, EVT_READ_FIN, EVT_SEARCH_NEW, EVT_SEARCH_PROGRESS, EVT_SEARCH_FIN = range(5)


def test_event_box():
    eb = EventBox()
    to_main: queue.Queue = queue.Queue()
    to_worker: queue.Queue = queue.Queue()

    def worker():
        eb.set(EVT_READ_NEW, 10)
        to_main.put(True)
        to_worker.get(timeout=5)
        eb.set(EVT_SEARCH_NEW, 10)
        eb.set(EVT_SEARCH_NEW, 15)
        eb.set(EVT_SEARCH_NEW, 20)
        eb.set(EVT_SEARCH_PROGRESS, 30)
        to_main.put(True)
        to_worker.get(timeout=5)
        eb.set(EVT_SEARCH_FIN, 40)
        to_main.put(True)
        to_worker.get(timeout=5)

    thread = threading.Thread(target=worker)
    thread.start()

    count = 0
    total = 0
    looping = True
    while looping:
        to_main.get(timeout=5)

        def consume(events):
            nonlocal total, looping
            for value in events.values():
                if isinstance(value, int):
                    total += value
                    looping = total < 100
            events.clear()

        eb.wait(consume)
        to_worker.put(True)
        count += 1

    thread.join(timeout=5)
    assert count == 3
    assert total == 100
    assert [eb.peek(event) for event in range(5)] == [False] * 5


def test_peek():
    eb = EventBox()
    assert eb.peek(EVT_READ_NEW) is False
    eb.set(EVT_READ_NEW, 1)
    assert eb.peek(EVT_READ_NEW) is True
    assert eb.peek(EVT_READ_FIN) is False


def test_wait_for_returns_when_event_set():
    eb = EventBox()
    done = threading.Event()

    def waiter():
        eb.wait_for(EVT_SEARCH_FIN)
        done.set()

    thread = threading.Thread(target=waiter)
    thread.start()
    eb.set(EVT_SEARCH_PROGRESS, 1)
    eb.set(EVT_SEARCH_FIN, 2)
    thread.join(timeout=5)
    assert done.is_set()
    assert eb.peek(EVT_SEARCH_FIN) is True


def test_wait_for_sees_unwatched_event():
    eb = EventBox()
    eb.unwatch(EVT_READ_NEW)
    eb.set(EVT_SEARCH_NEW, 1)
    eb.set(EVT_READ_NEW, 2)
    finished = threading.Event()

    def waiter():
        eb.wait_for(EVT_READ_NEW)
        finished.set()

    thread = threading.Thread(target=waiter)
    thread.start()
    thread.join(timeout=5)
    assert finished.is_set()
    assert eb.peek(EVT_READ_NEW) is True


def test_unwatched_event_does_not_wake_then_watch_restores():
    eb = EventBox()
    eb.unwatch(EVT_READ_NEW)
    received = []

    def waiter():
        eb.wait(lambda events: received.append(dict(events)))

    thread = threading.Thread(target=waiter)
    thread.start()
    eb.set(EVT_READ_NEW, 1)
    thread.join(timeout=0.2)
    assert thread.is_alive()
    assert received == []

    eb.watch(EVT_READ_NEW)
    eb.set(EVT_READ_FIN, 2)
    thread.join(timeout=5)
    assert received == [{EVT_READ_NEW: 1, EVT_READ_FIN: 2}]