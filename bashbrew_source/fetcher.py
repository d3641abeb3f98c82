"""Fetchers that turn a library entry into a Dockerfile.

A `DockerFileFetcher` is handed an `ScmEntry` and returns the `DockerFile` it
points at, or None when the entry can't be resolved. The `DockerFileSource`
only caches entries that a fetcher resolved.
"""

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass
import hashlib
import logging
from pathlib import Path, PurePosixPath
import re
import threading

import git
from slugify import slugify
from urllib.parse import urlparse

from .exceptions import InputException
from .image import ImageName, parse_image_name
from .library import ScmEntry

__all__ = [
    "DockerFile",
    "DockerFileFetcher",
    "GitDockerFileFetcher",
]

_LOGGER = logging.getLogger(__name__)

DOCKERFILE = "Dockerfile"
PROJECTS_DIRECTORY = "projects"

FROM_PATTERN = re.compile(
    r"^\s*FROM\s+(?:--platform=\S+\s+)?(\S+)", re.IGNORECASE | re.MULTILINE
)


@dataclass(frozen=True, kw_only=True)
class DockerFile:
    """A Dockerfile resolved from a library entry."""

    image_name: ImageName
    """The image built by this Dockerfile."""

    entry: ScmEntry
    """The library entry the Dockerfile was resolved from."""

    content: str
    """Contents of the Dockerfile."""

    from_image: ImageName | None = None
    """The parent image of the first build stage, if it could be parsed."""


def parse_from_image(content: str) -> ImageName | None:
    """Return the image referenced by the first FROM instruction."""
    if not (match := FROM_PATTERN.search(content)):
        return None
    try:
        return parse_image_name(match.group(1))
    except InputException as err:
        _LOGGER.debug("Unable to parse FROM image: %s", err)
        return None


class DockerFileFetcher(ABC):
    """Resolves library entries into Dockerfiles."""

    @abstractmethod
    async def resolve(self, entry: ScmEntry) -> DockerFile | None:
        """Return the Dockerfile for the entry, or None if it can't be resolved."""


def _slugify_url(url: str) -> str:
    """Return a readable directory name for a repository url."""
    path = urlparse(url).path
    if path.endswith(".git"):
        path = path[:-4]
    slug = path.rstrip("/").split("/")[-1]
    return slugify(slug, max_length=50, lowercase=True, separator="-") or "repo"


class GitDockerFileFetcher(DockerFileFetcher):
    """Fetcher that reads Dockerfiles out of cached git clones.

    Each project repository is cloned once under `<workspace>/projects` and
    the Dockerfile is read at the entry revision without touching the working
    tree, so entries at different revisions of the same repository can be
    resolved concurrently.
    """

    def __init__(self, workspace: str | Path) -> None:
        """Initialize GitDockerFileFetcher."""
        self._projects_dir = Path(workspace) / PROJECTS_DIRECTORY
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_lock = threading.Lock()

    def repo_path(self, url: str) -> Path:
        """Return the local path where the repository is cloned."""
        cache_key = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
        return self._projects_dir / _slugify_url(url) / cache_key

    def _lock(self, path: Path) -> threading.Lock:
        with self._locks_lock:
            return self._locks.setdefault(path, threading.Lock())

    async def resolve(self, entry: ScmEntry) -> DockerFile | None:
        """Return the Dockerfile for the entry, or None if it can't be resolved."""
        try:
            content = await asyncio.to_thread(self._read_dockerfile, entry)
        except (git.exc.GitError, OSError) as err:
            _LOGGER.warning("Unable to fetch Dockerfile for %s: %s", entry, err)
            return None
        _LOGGER.debug("Fetched Dockerfile for %s", entry.image_name)
        return DockerFile(
            image_name=entry.image_name,
            entry=entry,
            content=content,
            from_image=parse_from_image(content),
        )

    def _read_dockerfile(self, entry: ScmEntry) -> str:
        path = self.repo_path(entry.url)
        blob = f"{entry.revision}:{PurePosixPath(entry.subdirectory, DOCKERFILE)}"
        with self._lock(path):
            if (path / ".git").exists():
                repo = git.Repo(str(path))
            else:
                _LOGGER.info("Cloning repository %s to %s", entry.url, path)
                path.mkdir(parents=True, exist_ok=True)
                repo = git.Repo.clone_from(entry.url, str(path), no_checkout=True)
            with repo:
                try:
                    return str(repo.git.show(blob, strip_newline_in_stdout=False))
                except git.exc.GitCommandError:
                    _LOGGER.debug("Revision %s not found locally, fetching", entry.revision)
                    repo.remote().fetch()
                    return str(repo.git.show(blob, strip_newline_in_stdout=False))
