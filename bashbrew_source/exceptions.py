"""Exceptions related to bashbrew-source."""

__all__ = [
    "BashbrewException",
    "ConfigException",
    "InputException",
    "MirrorException",
    "LibraryNotFoundError",
]


class BashbrewException(Exception):
    """Generic base exception used for this library."""


class ConfigException(BashbrewException):
    """Raised when the source is configured with invalid or missing values."""


class InputException(BashbrewException):
    """Raised when an image name or library file is not formatted as expected."""


class MirrorException(BashbrewException):
    """Raised when the local mirror of the library repository can't be set up."""


class LibraryNotFoundError(BashbrewException):
    """Raised when the library directory is missing from the mirror."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Library directory {path} does not exist")
        self.path = path
