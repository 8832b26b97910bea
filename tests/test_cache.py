"""Tests for the shared latest-status cache"""
import threading
import time

from conftest import make_snapshot


def test_empty_before_first_publish(cache):
    assert cache.latest() is None
    assert cache.generation == 0


def test_latest_returns_most_recent(cache):
    first, second = make_snapshot('one'), make_snapshot('two')
    cache.publish(first)
    cache.publish(second)

    assert cache.latest() is second
    assert cache.generation == 2


def test_publish_none_clears(cache):
    cache.publish(make_snapshot())
    cache.publish(None)
    assert cache.latest() is None


def test_wait_for_times_out(cache):
    started = time.monotonic()
    assert cache.wait_for(0.05) is None
    assert time.monotonic() - started < 1.0


def test_wait_for_returns_immediately_when_present(cache):
    snapshot = make_snapshot()
    cache.publish(snapshot)
    assert cache.wait_for(5.0) is snapshot


def test_wait_for_woken_by_publish(cache):
    snapshot = make_snapshot()
    timer = threading.Timer(0.05, cache.publish, args=(snapshot,))
    timer.start()
    try:
        assert cache.wait_for(5.0) is snapshot
    finally:
        timer.cancel()


def test_wait_for_newer_generation(cache):
    cache.publish(make_snapshot('old'))
    seen = cache.generation
    newer = make_snapshot('new')

    timer = threading.Timer(0.05, cache.publish, args=(newer,))
    timer.start()
    try:
        assert cache.wait_for(5.0, newer_than=seen) is newer
    finally:
        timer.cancel()


def test_concurrent_readers_see_whole_snapshots(cache):
    snapshots = [make_snapshot(str(i), position=i) for i in range(200)]
    errors = []

    def reader():
        for _ in range(2000):
            value = cache.latest()
            if value is not None and value.metadata.title != str(value.position):
                errors.append(value)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for snapshot in snapshots:
        cache.publish(snapshot)
    for thread in threads:
        thread.join()

    assert errors == []
    assert cache.latest() is snapshots[-1]
