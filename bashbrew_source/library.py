"""Library for reading bashbrew library files.

A library repository holds one file per image at `<namespace>/<name>`. Each
file lists, one per line, where the Dockerfile for a tag lives:

```
3.18: https://github.com/alpinelinux/docker-alpine@abc123 x86_64
```

Lines that do not have this shape (comments, blank lines, other bashbrew
directives) are ignored.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass, replace
import logging
import re
from pathlib import Path

import aiofiles
from aiofiles import os as aos
from aiofiles.ospath import isdir, isfile
from mashumaro import DataClassDictMixin

from .image import ImageName, ImageNameBuilder

__all__ = [
    "ScmEntry",
    "LibraryFile",
    "LibraryTree",
    "parse_library",
]

_LOGGER = logging.getLogger(__name__)

# tag, repository url, revision and subdirectory
LIBRARY_CONTENT_PATTERN = re.compile(r"^([^ #]*): ([^ @]*)@([^ ]*) ([^ ]*)$")


@dataclass(frozen=True)
class ScmEntry(DataClassDictMixin):
    """Location of the Dockerfile for a single image tag."""

    image_name: ImageName
    """The image built from this location."""

    url: str
    """URL of the git repository holding the Dockerfile."""

    revision: str
    """Commit or ref to check out."""

    subdirectory: str
    """Directory within the repository that contains the Dockerfile."""

    def __str__(self) -> str:
        return f"{self.image_name} ({self.url}@{self.revision} {self.subdirectory})"


def parse_library(
    content: str, tag: str | None, builder: ImageNameBuilder
) -> list[ScmEntry]:
    """Parse the contents of a library file into entries.

    Args:
        content: The raw library file contents
        tag: Only return entries for this tag, or all entries when empty
        builder: Builder seeded with the namespace and name of the image

    Returns:
        The matching entries in file order.
    """
    entries: list[ScmEntry] = []
    for line in content.splitlines():
        if not (match := LIBRARY_CONTENT_PATTERN.match(line)):
            continue
        current_tag, url, revision, subdirectory = match.groups()
        if tag and tag != current_tag:
            continue
        entries.append(
            ScmEntry(
                image_name=replace(builder, tag=current_tag).build(),
                url=url,
                revision=revision,
                subdirectory=subdirectory,
            )
        )
    return entries


@dataclass(frozen=True)
class LibraryFile:
    """A library file read from the library directory."""

    namespace: str
    name: str
    content: str

    def builder(self) -> ImageNameBuilder:
        """Return a builder seeded with the image of this file."""
        return ImageNameBuilder(namespace=self.namespace, name=self.name)


class LibraryTree:
    """Read only view of a `<namespace>/<name>` library directory.

    Iterating the tree with `async for` walks the directory lazily and yields
    a `LibraryFile` for every image. Each iteration starts a fresh walk.
    """

    def __init__(self, path: Path) -> None:
        """Initialize LibraryTree."""
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    async def exists(self) -> bool:
        """Return True if the library directory exists."""
        return await isdir(self._path)

    def file_path(self, image_name: ImageName) -> Path:
        """Return the path of the library file for the image."""
        if image_name.is_root_image:
            return self._path / image_name.name
        return self._path / image_name.namespace / image_name.name

    async def read(self, image_name: ImageName) -> str:
        """Read the library file for the image.

        Raises:
            OSError: If the file is missing or can't be read
        """
        async with aiofiles.open(self.file_path(image_name), encoding="utf-8") as f:
            return await f.read()

    def __aiter__(self) -> AsyncIterator[LibraryFile]:
        return self._walk()

    async def _walk(self) -> AsyncIterator[LibraryFile]:
        for namespace in sorted(await aos.listdir(self._path)):
            namespace_path = self._path / namespace
            if namespace.startswith(".") or not await isdir(namespace_path):
                continue
            try:
                names = await aos.listdir(namespace_path)
            except OSError as err:
                _LOGGER.error("Unable to list directory %s: %s", namespace_path, err)
                continue
            for name in sorted(names):
                file_path = namespace_path / name
                if name.startswith(".") or not await isfile(file_path):
                    continue
                try:
                    async with aiofiles.open(file_path, encoding="utf-8") as f:
                        content = await f.read()
                except (OSError, UnicodeDecodeError) as err:
                    _LOGGER.error("Unable to read content of file %s: %s", file_path, err)
                    continue
                yield LibraryFile(namespace=namespace, name=name, content=content)
