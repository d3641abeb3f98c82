"""Dockerfile source backed by a bashbrew library repository.

The `DockerFileSource` resolves image names into Dockerfiles:

- The library mirror is refreshed lazily on each request, subject to the
  configured pull delay.
- The library files relevant to the request are read from the mirror and
  parsed into `ScmEntry` objects.
- Each entry is handed to a `DockerFileFetcher`. Entries that resolve are
  returned to the caller and recorded in the `ResolutionCache`; entries that
  don't are dropped.

Integration Points:
    - bashbrew_source.mirror.MirrorManager: For the local library mirror
    - bashbrew_source.cache.ResolutionCache: For last known resolutions
    - bashbrew_source.fetcher.DockerFileFetcher: For fetching Dockerfiles
"""

import asyncio
import logging

from .cache import InMemoryResolutionCache, ResolutionCache
from .config import DockerFileSourceConfig
from .exceptions import ConfigException, LibraryNotFoundError
from .fetcher import DockerFile, DockerFileFetcher
from .image import ImageName, ImageNameBuilder
from .library import LibraryTree, ScmEntry, parse_library
from .mirror import MirrorManager

__all__ = [
    "DockerFileSource",
]

_LOGGER = logging.getLogger(__name__)


def _check_image_name(image_name: ImageName) -> None:
    """Raise ValueError if the image name can't identify a library file."""
    if image_name is None:
        raise ValueError("image_name must be defined")
    name = image_name.name
    if not name or not name.strip() or "/" in name or name in (".", ".."):
        raise ValueError(f"Invalid image name '{name}' for {image_name!r}")


class DockerFileSource:
    """Resolves image names into Dockerfiles using a library mirror.

    A single instance may be shared by many concurrent callers.
    """

    def __init__(
        self,
        config: DockerFileSourceConfig,
        fetcher: DockerFileFetcher | None,
        cache: ResolutionCache | None = None,
        mirror: MirrorManager | None = None,
    ) -> None:
        """Initialize the DockerFileSource.

        Args:
            config: The configuration for the source
            fetcher: Resolves library entries into Dockerfiles
            cache: Cache of resolved entries, a new in-memory cache by default
            mirror: The library mirror, created from the config by default

        Raises:
            ConfigException: If the configuration is invalid
            MirrorException: If the library mirror can't be cloned
        """
        if fetcher is None:
            raise ConfigException("fetcher must be defined")
        if config.fetch_concurrency < 1:
            raise ConfigException(
                f"fetch_concurrency must be positive, was {config.fetch_concurrency}"
            )
        self._config = config
        self._fetcher = fetcher
        self._cache = cache if cache is not None else InMemoryResolutionCache()
        self._mirror = mirror if mirror is not None else MirrorManager(
            config.workspace,
            config.mirror_url,
            config.library_path,
            config.pull_delay,
        )
        self._library = LibraryTree(self._mirror.library_dir)

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    @property
    def library(self) -> LibraryTree:
        return self._library

    def get_cached_entry(self, image_name: ImageName) -> ScmEntry | None:
        """Return the last resolved entry for the image without fetching."""
        _check_image_name(image_name)
        return self._cache.get(image_name)

    async def fetch_all(self) -> set[DockerFile]:
        """Fetch the Dockerfiles of every image in the library.

        Raises:
            LibraryNotFoundError: If the library directory does not exist
        """
        if not await self._library.exists():
            raise LibraryNotFoundError(str(self._library.path))

        await self._mirror.ensure_fresh()

        entries: list[ScmEntry] = []
        async for library_file in self._library:
            entries.extend(
                parse_library(library_file.content, None, library_file.builder())
            )
        _LOGGER.debug("Found %d library entries in %s", len(entries), self._library.path)
        return await self._resolve(entries)

    async def fetch_dockerfile(self, image_name: ImageName) -> set[DockerFile]:
        """Fetch the Dockerfiles for an image.

        All tags of the image are fetched when the image name has no tag. An
        image missing from the library has no Dockerfiles.
        """
        _check_image_name(image_name)

        await self._mirror.ensure_fresh()

        try:
            content = await self._library.read(image_name)
        except (OSError, UnicodeDecodeError) as err:
            _LOGGER.error(
                "Unable to read content of file %s: %s",
                self._library.file_path(image_name),
                err,
            )
            return set()
        builder = ImageNameBuilder(namespace=image_name.namespace, name=image_name.name)
        entries = parse_library(content, image_name.tag or None, builder)
        result = await self._resolve(entries)
        _LOGGER.debug(
            "Dockerfile %s successfully fetched with entries: %s", image_name, entries
        )
        return result

    async def _resolve(self, entries: list[ScmEntry]) -> set[DockerFile]:
        """Fetch each entry and cache the ones that resolve."""
        sem = asyncio.Semaphore(self._config.fetch_concurrency)

        async def resolve(entry: ScmEntry) -> DockerFile | None:
            async with sem:
                return await self._fetcher.resolve(entry)

        dockerfiles = await asyncio.gather(*[resolve(entry) for entry in entries])
        result: set[DockerFile] = set()
        for entry, dockerfile in zip(entries, dockerfiles):
            if dockerfile is None:
                _LOGGER.debug("No Dockerfile resolved for %s", entry)
                continue
            result.add(dockerfile)
            self._cache.put(entry.image_name, entry)
        return result

    def close(self) -> None:
        """Release the library mirror."""
        self._mirror.close()
