from __future__ import annotations

import threading
import time

import pytest

from user_registry.rwlock import ReadWriteLock


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    barrier = threading.Barrier(3, timeout=2)
    errors: list[BaseException] = []

    def reader() -> None:
        try:
            with lock.read():
                # Only passes if all readers hold the lock at the same time.
                barrier.wait()
        except BaseException as e:  # noqa: BLE001 - surfaced via the assertion below
            errors.append(e)

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    assert lock.readers == 0


def test_writer_excludes_readers() -> None:
    lock = ReadWriteLock()
    entered = threading.Event()

    def reader() -> None:
        with lock.read():
            entered.set()

    with lock.write():
        t = threading.Thread(target=reader)
        t.start()
        assert not entered.wait(0.1)

    t.join(timeout=2)
    assert entered.is_set()


def test_writer_waits_for_readers_and_blocks_new_ones() -> None:
    lock = ReadWriteLock()
    writer_in = threading.Event()
    late_reader_in = threading.Event()
    reader_ran_during_write: list[bool] = []

    def writer() -> None:
        with lock.write():
            writer_in.set()
            reader_ran_during_write.append(late_reader_in.is_set())

    def late_reader() -> None:
        with lock.read():
            late_reader_in.set()

    lock.acquire_read()
    w = threading.Thread(target=writer)
    w.start()
    assert _wait_until(lambda: lock._writers_waiting == 1)

    r = threading.Thread(target=late_reader)
    r.start()
    assert not late_reader_in.wait(0.1)
    assert not writer_in.is_set()

    lock.release_read()
    w.join(timeout=2)
    r.join(timeout=2)

    assert writer_in.is_set()
    assert late_reader_in.is_set()
    assert reader_ran_during_write == [False]
    assert not lock.writing


def test_lock_is_released_when_body_raises() -> None:
    lock = ReadWriteLock()

    with pytest.raises(KeyError):
        with lock.write():
            raise KeyError("boom")

    with lock.read():
        assert lock.readers == 1


def test_unbalanced_release_raises() -> None:
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()
