"""Tests for the resolution cache."""

from concurrent.futures import ThreadPoolExecutor
import threading

import pytest

from bashbrew_source.cache import InMemoryResolutionCache, ReadWriteLock
from bashbrew_source.image import ImageName
from bashbrew_source.library import ScmEntry

ALPINE = ImageName("library", "alpine", "3.18")


def make_entry(image_name: ImageName, revision: str) -> ScmEntry:
    return ScmEntry(
        image_name=image_name,
        url="https://github.com/alpinelinux/docker-alpine",
        revision=revision,
        subdirectory=".",
    )


@pytest.fixture(name="cache")
def cache_fixture() -> InMemoryResolutionCache:
    return InMemoryResolutionCache()


def test_get_missing(cache: InMemoryResolutionCache) -> None:
    """Test looking up an image that was never resolved."""
    assert cache.get(ALPINE) is None
    assert len(cache) == 0


def test_put_and_get(cache: InMemoryResolutionCache) -> None:
    """Test that a stored entry is returned until it is replaced."""
    first = make_entry(ALPINE, "abc123")
    cache.put(ALPINE, first)
    assert cache.get(ALPINE) == first
    assert cache.get(ImageName("library", "alpine", "3.19")) is None

    second = make_entry(ALPINE, "def456")
    cache.put(ALPINE, second)
    assert cache.get(ALPINE) == second
    assert len(cache) == 1


def test_snapshot(cache: InMemoryResolutionCache) -> None:
    """Test that a snapshot is a copy of the cache."""
    entry = make_entry(ALPINE, "abc123")
    cache.put(ALPINE, entry)
    snapshot = cache.snapshot()
    assert snapshot == {ALPINE: entry}

    other = ImageName("library", "debian", "12")
    cache.put(other, make_entry(other, "fff"))
    assert snapshot == {ALPINE: entry}
    assert len(cache.snapshot()) == 2


def test_concurrent_readers_and_writers(cache: InMemoryResolutionCache) -> None:
    """Test that readers only see complete entries while writers run."""
    image_names = [ImageName("library", f"image{i}", "latest") for i in range(20)]
    revisions = [f"rev{i}" for i in range(50)]

    def write(image_name: ImageName) -> None:
        for revision in revisions:
            cache.put(image_name, make_entry(image_name, revision))

    def read(image_name: ImageName) -> list[ScmEntry | None]:
        return [cache.get(image_name) for _ in range(200)]

    with ThreadPoolExecutor(max_workers=16) as executor:
        writes = [executor.submit(write, image_name) for image_name in image_names]
        reads = [executor.submit(read, image_name) for image_name in image_names]
        snapshots = [executor.submit(cache.snapshot) for _ in range(20)]
        for future in writes:
            future.result()
        for image_name, future in zip(image_names, reads):
            for entry in future.result():
                if entry is not None:
                    assert entry.image_name == image_name
                    assert entry.revision in revisions
        for future in snapshots:
            for image_name, entry in future.result().items():
                assert entry.image_name == image_name

    for image_name in image_names:
        assert cache.get(image_name) == make_entry(image_name, "rev49")


def test_write_lock_waits_for_readers() -> None:
    """Test that a writer is excluded while a reader holds the lock."""
    lock = ReadWriteLock()
    written = threading.Event()

    def writer() -> None:
        with lock.write():
            written.set()

    with lock.read():
        thread = threading.Thread(target=writer)
        thread.start()
        assert not written.wait(0.1)
    thread.join(timeout=5)
    assert written.is_set()


def test_read_lock_shared() -> None:
    """Test that many readers may hold the lock at once."""
    lock = ReadWriteLock()
    entered = threading.Barrier(3, timeout=5)

    def reader() -> None:
        with lock.read():
            entered.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    with lock.read():
        entered.wait()
    for thread in threads:
        thread.join(timeout=5)


def test_waiting_writer_blocks_new_readers() -> None:
    """Test that readers queue behind a waiting writer."""
    lock = ReadWriteLock()
    order: list[str] = []
    writer_waiting = threading.Event()

    def writer() -> None:
        writer_waiting.set()
        with lock.write():
            order.append("writer")

    def reader() -> None:
        with lock.read():
            order.append("reader")

    with lock.read():
        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        writer_waiting.wait(5)
        # Give the writer time to register as waiting
        writer_thread.join(timeout=0.1)
        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        reader_thread.join(timeout=0.1)
        assert order == []
    writer_thread.join(timeout=5)
    reader_thread.join(timeout=5)
    assert order == ["writer", "reader"]
