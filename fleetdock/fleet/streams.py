"""Потокобезопасный поток результатов операций list и cat."""

from __future__ import annotations

import threading
from queue import Queue
from typing import Generic, Iterator, List, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ResultStream(Generic[T]):
    """Закрываемая очередь результатов.

    put никогда не блокирует: после close результаты, присланные
    брошенными по таймауту воркерами, молча отбрасываются. Итерация
    возвращает элементы до закрытия потока.
    """

    def __init__(self) -> None:
        self._queue: "Queue[object]" = Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, item: T) -> None:
        with self._lock:
            if self._closed:
                return
            self._queue.put(item)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # повторная итерация тоже должна завершаться
                self._queue.put(_CLOSED)
                return
            yield item  # type: ignore[misc]

    def drain(self) -> List[T]:
        """Возвращает все элементы закрытого потока."""

        if not self._closed:
            raise RuntimeError("ResultStream must be closed before drain()")
        return list(self)
