"""Exception types raised by the style checker."""

from __future__ import annotations


class StyleCheckError(Exception):
    """Base class for every error raised by this package."""


class DuplicateRuleName(StyleCheckError):
    """A rule name was registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Rule {name!r} is already registered")
        self.name = name


class RegistryFrozen(StyleCheckError):
    """A rule was registered after the registry was frozen."""


class FileUnavailable(StyleCheckError, OSError):
    """Source text for a path could not be read."""

    def __init__(self, path: str | None, reason: str = "") -> None:
        message = f"Source text unavailable for {path!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path


class MalformedNode(StyleCheckError, ValueError):
    """A serialized syntax node does not have the expected shape."""


class ConfigError(StyleCheckError, ValueError):
    """The configuration document is invalid."""
