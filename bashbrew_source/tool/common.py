"""Flags and helpers shared by the bashbrew-source actions."""

from argparse import ArgumentParser
import datetime
import os
from typing import Any

from bashbrew_source.config import (
    DEFAULT_FETCH_CONCURRENCY,
    DEFAULT_LIBRARY_PATH,
    DEFAULT_MIRROR_URL,
    DEFAULT_PULL_DELAY,
    DockerFileSourceConfig,
)
from bashbrew_source.fetcher import DockerFile, GitDockerFileFetcher
from bashbrew_source.source import DockerFileSource

from .format import PrintFormatter, YamlListFormatter

DEFAULT_WORKSPACE = os.path.join("~", ".cache", "bashbrew-source")

COLUMNS = ["image", "url", "revision", "subdirectory", "from"]


def add_source_flags(args: ArgumentParser) -> None:
    """Add flags for configuring the DockerFileSource."""
    args.add_argument(
        "--workspace",
        default=os.environ.get("BASHBREW_SOURCE_WORKSPACE", DEFAULT_WORKSPACE),
        help="Local directory holding the library mirror and project clones",
    )
    args.add_argument(
        "--mirror-url",
        default=os.environ.get("BASHBREW_SOURCE_MIRROR_URL", DEFAULT_MIRROR_URL),
        help="URL of the bashbrew library git repository",
    )
    args.add_argument(
        "--library-path",
        default=DEFAULT_LIBRARY_PATH,
        help="Path of the library directory within the mirror",
    )
    args.add_argument(
        "--pull-delay",
        type=float,
        default=DEFAULT_PULL_DELAY.total_seconds(),
        help="Minimum number of seconds between two pulls of the mirror",
    )
    args.add_argument(
        "--fetch-concurrency",
        type=int,
        default=DEFAULT_FETCH_CONCURRENCY,
        help="Maximum number of Dockerfiles fetched concurrently",
    )
    args.add_argument(
        "--output",
        "-o",
        choices=["table", "yaml"],
        default="table",
        help="Output format of the command",
    )


def build_source(  # type: ignore[no-untyped-def]
    workspace: str,
    mirror_url: str,
    library_path: str,
    pull_delay: float,
    fetch_concurrency: int,
    **kwargs,  # pylint: disable=unused-argument
) -> DockerFileSource:
    """Build a DockerFileSource from command line flags."""
    workspace = os.path.expanduser(workspace)
    config = DockerFileSourceConfig(
        workspace=workspace,
        mirror_url=mirror_url,
        library_path=library_path,
        pull_delay=datetime.timedelta(seconds=pull_delay),
        fetch_concurrency=fetch_concurrency,
    )
    return DockerFileSource(config, GitDockerFileFetcher(workspace))


def print_dockerfiles(dockerfiles: set[DockerFile], output: str) -> None:
    """Print the resolved Dockerfiles in the requested format."""
    ordered = sorted(dockerfiles, key=lambda dockerfile: dockerfile.image_name)
    if output == "yaml":
        data: list[dict[str, Any]] = []
        for dockerfile in ordered:
            value = dockerfile.entry.to_dict()
            if dockerfile.from_image:
                value["from_image"] = dockerfile.from_image.to_dict()
            data.append(value)
        YamlListFormatter().print(data)
        return
    PrintFormatter(COLUMNS).print(
        [
            {
                "image": str(dockerfile.image_name),
                "url": dockerfile.entry.url,
                "revision": dockerfile.entry.revision,
                "subdirectory": dockerfile.entry.subdirectory,
                "from": str(dockerfile.from_image or ""),
            }
            for dockerfile in ordered
        ]
    )
