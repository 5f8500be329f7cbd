"""
Bounded, closable FIFO used to hand addresses from the dispatcher to the workers.
"""

from collections import deque
from queue import Empty, Full
from typing import Any, Deque, Iterator, Optional
import logging
import threading
import time

from .exceptions import ConfigurationError, QueueClosedError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


class _Closed:
    """Marker returned by get() once the queue is closed and drained."""

    def __repr__(self):
        return "CLOSED"


CLOSED = _Closed()


class TaskQueue:
    """
    Thread-safe bounded FIFO with a one-shot close.

    - put() blocks while the queue is full
    - get() blocks while the queue is empty and still open
    - close() may be called exactly once; items already queued are still
      delivered, after which get() returns CLOSED to every consumer
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize task queue.

        Args:
            capacity: Maximum number of queued items (must be >= 1)
        """
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 1:
            raise ConfigurationError(f"Queue capacity must be a positive integer, got {capacity!r}")

        self.capacity = capacity
        self._items: Deque[Any] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    def put(self, item: Any, timeout: Optional[float] = None) -> None:
        """
        Append an item, blocking while the queue is full.

        Args:
            item: Item to enqueue
            timeout: Seconds to wait for a free slot (None waits forever)

        Raises:
            QueueClosedError: If the queue is (or becomes) closed
            queue.Full: If no slot freed up within timeout
        """
        with self._not_full:
            if self._closed:
                raise QueueClosedError("put() called on a closed queue")

            deadline = None if timeout is None else time.monotonic() + timeout
            while len(self._items) >= self.capacity:
                if deadline is None:
                    self._not_full.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise Full
                    self._not_full.wait(remaining)
                if self._closed:
                    raise QueueClosedError("Queue was closed while put() was waiting")

            self._items.append(item)
            self._not_empty.notify()

    def get(self, timeout: Optional[float] = None) -> Any:
        """
        Remove and return the oldest item, blocking while the queue is empty.

        Args:
            timeout: Seconds to wait for an item (None waits forever)

        Returns:
            The next item, or CLOSED once the queue is closed and drained

        Raises:
            queue.Empty: If nothing arrived within timeout
        """
        with self._not_empty:
            deadline = None if timeout is None else time.monotonic() + timeout
            while not self._items:
                if self._closed:
                    return CLOSED
                if deadline is None:
                    self._not_empty.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise Empty
                    self._not_empty.wait(remaining)

            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self) -> None:
        """
        Mark the queue as closed. No further put() calls are allowed.

        Raises:
            QueueClosedError: If the queue is already closed
        """
        with self._lock:
            if self._closed:
                raise QueueClosedError("close() called twice")
            self._closed = True
            # Wake every waiter: consumers see end-of-stream, blocked producers fail
            self._not_empty.notify_all()
            self._not_full.notify_all()
        logger.debug("Task queue closed")

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        """Yield items until the queue is closed and drained."""
        while True:
            item = self.get()
            if item is CLOSED:
                return
            yield item
