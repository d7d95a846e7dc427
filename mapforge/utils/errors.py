"""Custom exceptions for mapping resolution."""

from __future__ import annotations

from pathlib import Path


class MappingError(Exception):
    """Base class for mapping resolution failures."""


class MissingUpstreamArtifactError(MappingError):
    """Raised when an obfuscation or intermediate table cannot be loaded."""

    def __init__(self, message: str, *, artifact: str | None = None) -> None:
        super().__init__(message)
        self.artifact = artifact


class MalformedInputError(MappingError, ValueError):
    """Raised when a loaded table or archive is structurally invalid."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        line_number: int | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.line_number = line_number


class UnresolvedMappingError(MappingError, LookupError):
    """Raised when no registered mapping source serves a channel."""

    def __init__(self, message: str, *, channel: str) -> None:
        super().__init__(message)
        self.channel = channel


class MappingIOError(MappingError, OSError):
    """Raised when an archive or fingerprint record cannot be written."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path
