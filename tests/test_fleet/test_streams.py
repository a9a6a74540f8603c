"""Тесты ResultStream."""

from __future__ import annotations

import threading

import pytest

from fleetdock.fleet.streams import ResultStream


def test_iteration_stops_at_close() -> None:
    stream: ResultStream[int] = ResultStream()
    stream.put(1)
    stream.put(2)
    stream.close()
    assert list(stream) == [1, 2]
    assert list(stream) == []


def test_put_after_close_is_discarded() -> None:
    stream: ResultStream[str] = ResultStream()
    stream.close()
    stream.put("late")
    assert stream.drain() == []


def test_drain_requires_closed_stream() -> None:
    with pytest.raises(RuntimeError):
        ResultStream().drain()


def test_consumer_receives_items_from_other_threads() -> None:
    stream: ResultStream[int] = ResultStream()

    def produce() -> None:
        for value in range(5):
            stream.put(value)
        stream.close()

    threading.Thread(target=produce).start()
    assert sorted(stream) == [0, 1, 2, 3, 4]
