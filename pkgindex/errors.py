"""Error types raised by SourcePkg components.

Each error carries the process exit code the CLI uses when the error
reaches the top level. Components never recover from these locally.
"""
from __future__ import annotations

from typing import Optional, Sequence


class SourcePkgError(Exception):
    """Base class for all SourcePkg failures."""

    exit_code: int = 1


class NetworkError(SourcePkgError):
    """I/O failure while talking to the index host."""

    exit_code = 3

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NotFoundError(SourcePkgError):
    """Package, tag or archive link is absent."""

    exit_code = 4


class ArchiveNotFoundError(NotFoundError):
    """Download requested for a package without a resolved archive URL."""


class NotDownloadedError(NotFoundError):
    """Extraction requested but the staged archive is missing."""


class ConfigError(SourcePkgError):
    """A configuration value is missing its expected type or range."""

    exit_code = 2


class FilesystemError(SourcePkgError):
    """Unable to create the staging or output directory."""

    exit_code = 5


class SubprocessError(SourcePkgError):
    """External downloader/extractor failed to start or exited non-zero."""

    exit_code = 6

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode


__all__ = [
    "SourcePkgError",
    "ConfigError",
    "NetworkError",
    "NotFoundError",
    "ArchiveNotFoundError",
    "NotDownloadedError",
    "FilesystemError",
    "SubprocessError",
]
