#!/usr/bin/env python3
"""
Tests for the bounded task queue:
1. FIFO delivery and iteration
2. Blocking on full / empty
3. Close semantics (drain after close, misuse rejected, waiters woken)
"""

import queue
import threading
import time

import pytest

from verifiers.exceptions import ConfigurationError, QueueClosedError
from verifiers.task_queue import CLOSED, TaskQueue


def test_fifo_order():
    q = TaskQueue(capacity=5)
    for item in ["a@gmail.com", "b@gmail.com", "c@gmail.com"]:
        q.put(item)
    q.close()

    assert list(q) == ["a@gmail.com", "b@gmail.com", "c@gmail.com"]


@pytest.mark.parametrize("capacity", [0, -1, True, 2.5, "10"])
def test_invalid_capacity_rejected(capacity):
    with pytest.raises(ConfigurationError):
        TaskQueue(capacity=capacity)


def test_default_capacity_is_ten():
    assert TaskQueue().capacity == 10


def test_put_blocks_when_full():
    q = TaskQueue(capacity=2)
    q.put("a")
    q.put("b")

    start = time.monotonic()
    with pytest.raises(queue.Full):
        q.put("c", timeout=0.1)
    assert time.monotonic() - start >= 0.09
    assert len(q) == 2


def test_get_blocks_when_empty():
    q = TaskQueue(capacity=2)
    with pytest.raises(queue.Empty):
        q.get(timeout=0.05)


def test_blocked_producer_resumes_when_slot_frees():
    q = TaskQueue(capacity=1)
    q.put("first")
    done = threading.Event()

    def producer():
        q.put("second")
        done.set()

    t = threading.Thread(target=producer)
    t.start()
    assert not done.wait(0.1)

    assert q.get() == "first"
    assert done.wait(2)
    t.join(2)
    assert q.get() == "second"


def test_items_still_delivered_after_close():
    q = TaskQueue(capacity=3)
    q.put("x")
    q.put("y")
    q.close()

    assert q.closed
    assert q.get() == "x"
    assert q.get() == "y"
    assert q.get() is CLOSED
    # Every later call keeps reporting end-of-stream
    assert q.get() is CLOSED


def test_put_after_close_rejected():
    q = TaskQueue()
    q.close()
    with pytest.raises(QueueClosedError):
        q.put("late@gmail.com")


def test_double_close_rejected():
    q = TaskQueue()
    q.close()
    with pytest.raises(QueueClosedError):
        q.close()


def test_close_wakes_all_blocked_consumers():
    q = TaskQueue(capacity=2)
    results = []
    lock = threading.Lock()

    def consumer():
        for item in q:
            with lock:
                results.append(item)

    threads = [threading.Thread(target=consumer) for _ in range(3)]
    for t in threads:
        t.start()

    q.put("only@gmail.com")
    q.close()

    for t in threads:
        t.join(2)
        assert not t.is_alive()
    assert results == ["only@gmail.com"]


def test_close_fails_blocked_producer():
    q = TaskQueue(capacity=1)
    q.put("filler")
    errors = []

    def producer():
        try:
            q.put("blocked")
        except QueueClosedError as e:
            errors.append(e)

    t = threading.Thread(target=producer)
    t.start()
    time.sleep(0.05)
    q.close()
    t.join(2)

    assert not t.is_alive()
    assert len(errors) == 1
    # The item queued before close is not lost
    assert q.get() == "filler"
    assert q.get() is CLOSED


def test_concurrent_consumers_receive_each_item_once():
    q = TaskQueue(capacity=4)
    items = [f"user{i}@gmail.com" for i in range(200)]
    seen = []
    lock = threading.Lock()

    def consumer():
        for item in q:
            with lock:
                seen.append(item)

    threads = [threading.Thread(target=consumer) for _ in range(5)]
    for t in threads:
        t.start()
    for item in items:
        q.put(item)
    q.close()
    for t in threads:
        t.join(5)

    assert sorted(seen) == sorted(items)
    assert len(seen) == len(set(seen))
