"""Configuration objects for bashbrew-source."""

from dataclasses import dataclass
import datetime

DEFAULT_MIRROR_URL = "https://github.com/docker-library/official-images.git"
DEFAULT_LIBRARY_PATH = ""
DEFAULT_PULL_DELAY = datetime.timedelta(minutes=1)
DEFAULT_FETCH_CONCURRENCY = 8


@dataclass
class DockerFileSourceConfig:
    """Configuration for the DockerFileSource."""

    workspace: str
    """Local directory holding the library mirror, created if absent."""

    mirror_url: str
    """URL of the upstream library git repository."""

    library_path: str = DEFAULT_LIBRARY_PATH
    """Path of the directory holding the namespace directories, relative to the mirror root."""

    pull_delay: datetime.timedelta = DEFAULT_PULL_DELAY
    """Minimum delay between two pulls of the library mirror."""

    fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY
    """Maximum number of concurrent fetcher calls for a single request."""
