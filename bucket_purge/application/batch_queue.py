from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from threading import Condition


class BatchQueueClosed(RuntimeError):
    pass


class BatchQueue:
    """Bounded hand-off of deletion batches from one producer to many consumers.

    The producer calls ``close()`` when it is done; closing never waits for
    buffer space. Consumers iterate the queue and stop only once it is closed
    and every batch put before the close has been taken.
    """

    def __init__(self, maxsize: int) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._maxsize = maxsize
        self._items: deque[list[str]] = deque()
        self._cond = Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, batch: list[str]) -> None:
        """Block until there is room for the batch."""
        with self._cond:
            while len(self._items) >= self._maxsize and not self._closed:
                self._cond.wait()
            if self._closed:
                raise BatchQueueClosed("cannot put on a closed batch queue")
            self._items.append(batch)
            self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[list[str]]:
        while True:
            with self._cond:
                while not self._items and not self._closed:
                    self._cond.wait()
                if not self._items:
                    return
                batch = self._items.popleft()
                self._cond.notify_all()
            yield batch
