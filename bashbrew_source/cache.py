"""Cache of resolved library entries.

The cache maps an `ImageName` to the `ScmEntry` that was last resolved
successfully for it. It is shared by every caller of a `DockerFileSource`
and may be read and written from multiple threads or asyncio tasks at once.

This abstract interface allows for various implementations (in-memory,
persistent, etc.).
"""

from abc import ABC, abstractmethod
from collections.abc import Generator
import contextlib
import logging
import threading

from .image import ImageName
from .library import ScmEntry

__all__ = [
    "ResolutionCache",
    "InMemoryResolutionCache",
    "ReadWriteLock",
]

_LOGGER = logging.getLogger(__name__)


class ReadWriteLock:
    """A lock that allows many readers or a single writer.

    Writers waiting for the lock block new readers from entering so a steady
    stream of readers can't starve them.
    """

    def __init__(self) -> None:
        """Initialize ReadWriteLock."""
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextlib.contextmanager
    def read(self) -> Generator[None, None, None]:
        """Hold the lock in shared mode."""
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def write(self) -> Generator[None, None, None]:
        """Hold the lock in exclusive mode."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ResolutionCache(ABC):
    """Abstract base class for the image name to library entry cache."""

    @abstractmethod
    def get(self, image_name: ImageName) -> ScmEntry | None:
        """Return the last resolved entry for the image, if any."""

    @abstractmethod
    def put(self, image_name: ImageName, entry: ScmEntry) -> None:
        """Record a resolved entry, replacing any previous one for the image."""

    @abstractmethod
    def snapshot(self) -> dict[ImageName, ScmEntry]:
        """Return a consistent copy of every cached entry."""

    @abstractmethod
    def __len__(self) -> int:
        """Return the number of cached entries."""


class InMemoryResolutionCache(ResolutionCache):
    """In-memory implementation of the ResolutionCache interface.

    Entries live for the lifetime of the process; there is no eviction.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryResolutionCache."""
        self._entries: dict[ImageName, ScmEntry] = {}
        self._lock = ReadWriteLock()

    def get(self, image_name: ImageName) -> ScmEntry | None:
        """Return the last resolved entry for the image, if any."""
        with self._lock.read():
            return self._entries.get(image_name)

    def put(self, image_name: ImageName, entry: ScmEntry) -> None:
        """Record a resolved entry, replacing any previous one for the image."""
        _LOGGER.debug("Caching entry %s", entry)
        with self._lock.write():
            self._entries[image_name] = entry

    def snapshot(self) -> dict[ImageName, ScmEntry]:
        """Return a consistent copy of every cached entry."""
        with self._lock.read():
            return dict(self._entries)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)
