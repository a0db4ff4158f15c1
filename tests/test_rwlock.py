import pathlib
import sys
import threading
import time

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from utils.rwlock import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    both_inside = threading.Barrier(2, timeout=2.0)

    def reader():
        with lock.read_locked():
            both_inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=3.0)

    assert not both_inside.broken


def test_writer_waits_for_readers():
    lock = ReadWriteLock()
    events = []
    reader_inside = threading.Event()

    def writer():
        reader_inside.wait()
        with lock.write_locked():
            events.append("write")

    thread = threading.Thread(target=writer)
    thread.start()
    with lock.read_locked():
        reader_inside.set()
        time.sleep(0.1)
        events.append("read-done")
    thread.join(timeout=2.0)

    assert events == ["read-done", "write"]


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    order = []
    lock.acquire_read()

    writer = threading.Thread(target=lambda: (lock.acquire_write(), order.append("write"), lock.release_write()))
    writer.start()
    time.sleep(0.1)

    reader = threading.Thread(target=lambda: (lock.acquire_read(), order.append("read"), lock.release_read()))
    reader.start()
    time.sleep(0.1)
    assert order == []

    lock.release_read()
    writer.join(timeout=2.0)
    reader.join(timeout=2.0)

    assert order == ["write", "read"]
