import threading
import time

import pytest

from price_service.rwlock import ReadWriteLock
from price_service.store import PriceStore


def _start(target) -> threading.Thread:
    t = threading.Thread(target=target, daemon=True)
    t.start()
    return t


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    barrier = threading.Barrier(3, timeout=5)

    def reader():
        with lock.read_locked():
            # every reader must be inside at the same time to pass
            barrier.wait()

    threads = [_start(reader) for _ in range(3)]
    for t in threads:
        t.join(timeout=5)
    assert not barrier.broken
    assert lock.readers == 0


def test_writer_waits_for_reader():
    lock = ReadWriteLock()
    acquired = threading.Event()

    def writer():
        with lock.write_locked():
            acquired.set()

    lock.acquire_read()
    t = _start(writer)
    assert not acquired.wait(0.1)
    lock.release_read()
    assert acquired.wait(5)
    t.join(timeout=5)


def test_reader_waits_for_writer():
    lock = ReadWriteLock()
    acquired = threading.Event()

    def reader():
        with lock.read_locked():
            acquired.set()

    lock.acquire_write()
    t = _start(reader)
    assert not acquired.wait(0.1)
    lock.release_write()
    assert acquired.wait(5)
    t.join(timeout=5)


def test_writers_exclude_each_other():
    lock = ReadWriteLock()
    acquired = threading.Event()

    def writer():
        with lock.write_locked():
            acquired.set()

    with lock.write_locked():
        t = _start(writer)
        assert not acquired.wait(0.1)
    assert acquired.wait(5)
    t.join(timeout=5)


def test_lock_released_on_exception():
    lock = ReadWriteLock()
    with pytest.raises(KeyError):
        with lock.read_locked():
            raise KeyError("missing")
    with pytest.raises(KeyError):
        with lock.write_locked():
            raise KeyError("missing")

    assert lock.readers == 0
    with lock.write_locked():
        pass


def test_release_read_without_reader():
    with pytest.raises(RuntimeError):
        ReadWriteLock().release_read()


def test_release_write_without_writer():
    with pytest.raises(RuntimeError):
        ReadWriteLock().release_write()


def test_new_reader_queues_behind_waiting_writer():
    lock = ReadWriteLock()
    order = []
    writer_done = threading.Event()
    reader_done = threading.Event()

    def writer():
        with lock.write_locked():
            order.append("writer")
        writer_done.set()

    def reader():
        with lock.read_locked():
            order.append("reader")
        reader_done.set()

    lock.acquire_read()
    w = _start(writer)
    assert not writer_done.wait(0.1)
    r = _start(reader)
    assert not reader_done.wait(0.1)

    lock.release_read()
    assert writer_done.wait(5)
    assert reader_done.wait(5)
    w.join(timeout=5)
    r.join(timeout=5)
    assert order == ["writer", "reader"]


def test_writer_gets_in_while_reads_keep_overlapping():
    store = PriceStore()
    price_id = store.create(1)
    stop = threading.Event()

    def read_loop():
        while not stop.is_set():
            with store._lock.read_locked():
                time.sleep(0.002)

    readers = [_start(read_loop) for _ in range(4)]
    time.sleep(0.05)
    writer = _start(lambda: store.update(price_id, 2))
    writer.join(timeout=2)
    stop.set()
    for t in readers:
        t.join(timeout=5)

    assert not writer.is_alive()
    assert store.get(price_id) == 2
