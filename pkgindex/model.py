"""Data models for SourcePkg.

Provides the Package dataclass threaded through listing, search, resolution
and download, and the ArchiveRef sum type recording whether a package's
archive URL has been resolved.
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class Unresolved:
    """Archive URL not resolved (yet, or resolution failed)."""


@dataclass(frozen=True)
class Resolved:
    """Archive URL found on the package's revision page."""

    url: str


ArchiveRef = Union[Resolved, Unresolved]

# Group label -> tag names in page order, for one package
TagListing = Dict[str, List[str]]


@dataclass
class Package:
    """A project entry from one fetch of the repository listing.

    Attributes:
        name: Project path on the host (e.g. "platform/build")
        description: Listing description, None when the listing has none
        url: Absolute URL of the project page
        index: Ordinal position in the listing fetch (-1 when built by name)
        archive: Resolved(url) once the resolver found a .tar.gz link
        score: Relevance set by search; 0.0 otherwise
    """

    name: str
    description: Optional[str]
    url: str
    index: int
    archive: ArchiveRef = field(default_factory=Unresolved)
    score: float = 0.0

    @property
    def resolved_archive_url(self) -> Optional[str]:
        if isinstance(self.archive, Resolved):
            return self.archive.url
        return None

    def archive_file(self, staging_dir: str) -> str:
        """Path of the staged archive: <staging_dir>/<name>.tar.gz."""
        return os.path.join(staging_dir, f"{self.name}.tar.gz")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d.pop("archive", None)
        d["resolved_archive_url"] = self.resolved_archive_url
        return d
