"""Representation of a Docker image name.

An `ImageName` identifies one image variant by namespace, name and tag and is
the key used for every lookup in the resolution cache. Root images (e.g.
`alpine` rather than `library/alpine`) have an empty namespace.
"""

from dataclasses import dataclass
import logging
import re
from typing import Any

from mashumaro import DataClassDictMixin

from .exceptions import InputException

__all__ = [
    "ImageName",
    "ImageNameBuilder",
    "parse_image_name",
]

_LOGGER = logging.getLogger(__name__)

# [namespace/]name[:tag] where the tag may not contain a slash so that
# registry ports (host:5000/name) are not mistaken for tags.
IMAGE_NAME_PATTERN = re.compile(r"^(?:(?P<namespace>.+)/)?(?P<name>[^/:]+)(?::(?P<tag>[^/:]+))?$")


@dataclass(frozen=True, order=True)
class ImageName(DataClassDictMixin):
    """Identifier for a docker image variant."""

    namespace: str
    """The namespace of the image, empty for root images."""

    name: str
    """The name of the image."""

    tag: str = ""
    """The tag of the image, empty when unspecified."""

    @property
    def is_root_image(self) -> bool:
        """Return True if the image lives outside of any namespace."""
        return not self.namespace

    @property
    def repository(self) -> str:
        """Return the namespace and name without the tag."""
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    @property
    def fully_qualified_name(self) -> str:
        """Return the namespace, name and tag, omitting an empty tag."""
        if self.tag:
            return f"{self.repository}:{self.tag}"
        return self.repository

    def __str__(self) -> str:
        """Return the fully qualified name of the image."""
        return self.fully_qualified_name


@dataclass
class ImageNameBuilder:
    """Incrementally assemble an `ImageName`.

    The builder may be copied with `dataclasses.replace` to derive many image
    names that share a namespace and name but differ by tag.
    """

    namespace: str | None = None
    name: str | None = None
    tag: str | None = None

    def build(self) -> ImageName:
        """Return the immutable `ImageName`, which requires a name."""
        if not self.name or not self.name.strip():
            raise ValueError("Image name must be defined to build an ImageName")
        return ImageName(
            namespace=self.namespace or "",
            name=self.name,
            tag=self.tag or "",
        )


def parse_image_name(value: Any) -> ImageName:
    """Parse an image name string such as `library/alpine:3.18`."""
    if not isinstance(value, str) or not value.strip():
        raise InputException(f"Invalid image name: {value!r}")
    if not (match := IMAGE_NAME_PATTERN.match(value.strip())):
        raise InputException(f"Invalid image name '{value}'")
    _LOGGER.debug("Parsed image name %s from '%s'", match.groupdict(), value)
    return ImageNameBuilder(
        namespace=match.group("namespace"),
        name=match.group("name"),
        tag=match.group("tag"),
    ).build()
