"""Local mirror of the upstream library git repository.

The mirror is cloned once into the workspace and then updated in place. Pulls
are rate limited: `ensure_fresh` only pulls when the configured delay has
elapsed since the previous attempt, and a failed pull waits a full delay before
being retried. A stale mirror keeps serving the index it already has.
"""

import asyncio
from collections.abc import Callable
import datetime
import logging
import os
from pathlib import Path
import threading
import time

import git

from .exceptions import ConfigException, MirrorException

__all__ = [
    "MirrorManager",
]

_LOGGER = logging.getLogger(__name__)

MIRROR_DIRECTORY = "bashbrew"
GIT_DIRECTORY = ".git"


def _prepare_workspace(workspace: str) -> Path:
    """Create the workspace if needed and check it is writable."""
    path = Path(workspace)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise ConfigException(f"Unable to create workspace {workspace}: {err}") from err
    if not path.is_dir() or not os.access(path, os.W_OK):
        raise ConfigException(f"Unable to write in directory {workspace}")
    return path


class MirrorManager:
    """Owns the local working copy of the library repository."""

    def __init__(
        self,
        workspace: str,
        url: str,
        library_path: str,
        pull_delay: datetime.timedelta,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Attach to or clone the mirror in the workspace.

        Args:
            workspace: Local directory holding the mirror
            url: URL of the upstream library repository
            library_path: Path of the library directory within the mirror
            pull_delay: Minimum delay between pull attempts
            clock: Source of monotonic timestamps in seconds

        Raises:
            ConfigException: If the workspace or url are invalid
            MirrorException: If the mirror can't be attached or cloned
        """
        if not workspace or not workspace.strip():
            raise ConfigException("workspace must be defined")
        if not url or not url.strip():
            raise ConfigException("mirror url must be defined")
        self._url = url
        self._pull_delay = pull_delay.total_seconds()
        self._clock = clock
        self._last_refresh: float | None = None
        self._refresh_lock = threading.Lock()

        mirror_dir = _prepare_workspace(workspace) / MIRROR_DIRECTORY
        self._mirror_dir = mirror_dir
        self._library_dir = mirror_dir / library_path
        if (mirror_dir / GIT_DIRECTORY).exists():
            try:
                self._repo = git.Repo(str(mirror_dir))
            except git.exc.GitError as err:
                raise MirrorException(
                    f"Unable to attach to git repository {mirror_dir}: {err}"
                ) from err
            _LOGGER.info("Attached to existing mirror at %s", mirror_dir)
        else:
            _LOGGER.info("Cloning repository %s to %s", url, mirror_dir)
            try:
                self._repo = git.Repo.clone_from(url, str(mirror_dir))
            except git.exc.GitError as err:
                raise MirrorException(
                    f"Unable to clone git repository {url}: {err}"
                ) from err

    @property
    def url(self) -> str:
        return self._url

    @property
    def mirror_dir(self) -> Path:
        """Local path of the mirror working tree."""
        return self._mirror_dir

    @property
    def library_dir(self) -> Path:
        """Local path of the library directory within the mirror."""
        return self._library_dir

    @property
    def last_refresh(self) -> float | None:
        """Clock value of the last completed refresh attempt."""
        return self._last_refresh

    async def ensure_fresh(self) -> None:
        """Pull the mirror if the delay since the last attempt has elapsed.

        Only one caller pulls at a time; others arriving during a pull use the
        mirror as it is. Pull failures are logged and never raised.
        """
        if not self._refresh_lock.acquire(blocking=False):
            _LOGGER.debug("Pull of %s already in progress, using current mirror", self._url)
            return
        try:
            now = self._clock()
            if (
                self._last_refresh is not None
                and now - self._last_refresh <= self._pull_delay
            ):
                _LOGGER.debug("Last pull of %s done too soon, skipping pull", self._url)
                return
            try:
                await asyncio.to_thread(self._pull)
            except (git.exc.GitError, OSError, ValueError, AssertionError) as err:
                _LOGGER.error("Unable to pull from %s: %s", self._url, err)
            finally:
                self._last_refresh = now
        finally:
            self._refresh_lock.release()

    def _pull(self) -> None:
        """Pull the upstream changes into the mirror."""
        for info in self._repo.remote().pull():
            _LOGGER.debug("Pulled %s from %s", info.ref, self._url)

    def close(self) -> None:
        """Release the git repository handle."""
        self._repo.close()
