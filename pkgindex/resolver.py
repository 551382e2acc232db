"""Resolution of a package and tag to a downloadable archive URL.

Two paths:
- by name: go straight to {base}/{name}/+/{tag} and take the first .tar.gz link
- by index (legacy): list packages, pick the ordinal, find the tag entry on
  the package's +refs page by exact text, follow it, then take the first
  .tar.gz link on that page

Resolution never checks that the archive itself is reachable.
"""
from __future__ import annotations

from typing import Optional, Union

from .core.logs import TaggedLogger, get_tagged_logger
from .errors import NotFoundError
from .index_client import TAGS_TAG, PackageIndexClient
from .model import Package, Resolved

DEFAULT_TAG = "master"

Identifier = Union[str, int]


def parse_identifier(text: str) -> Identifier:
    """CLI helper: all-digit arguments select a package by listing index."""
    text = text.strip()
    return int(text) if text.isdecimal() else text


class PackageResolver:
    """Attaches a Resolved archive URL to a package, or raises NotFoundError."""

    def __init__(self, client: PackageIndexClient, logger: Optional[TaggedLogger] = None):
        self.client = client
        self.log = logger or get_tagged_logger(__name__)

    def resolve(self, identifier: Identifier, tag_name: str = DEFAULT_TAG) -> Package:
        """Resolve identifier at tag_name to a package with its archive URL set.

        Args:
            identifier: Package name (str) or listing index (int)
            tag_name: Tag or branch name; exact match for the index path

        Raises:
            NotFoundError: Unknown index, tag not listed, or no archive link
            NetworkError: If any page cannot be fetched
        """
        if isinstance(identifier, int):
            return self._resolve_by_index(identifier, tag_name)
        return self._resolve_by_name(identifier, tag_name)

    def _resolve_by_name(self, package_name: str, tag_name: str) -> Package:
        package = Package(
            name=package_name.strip("/"),
            description=None,
            url=self.client.package_url(package_name),
            index=-1,
        )
        page_url = self.client.revision_url(package.name, tag_name)
        self._attach_archive(package, page_url, tag_name)
        return package

    def _resolve_by_index(self, package_index: int, tag_name: str) -> Package:
        packages = self.client.list_packages()
        if package_index < 0 or package_index >= len(packages):
            self.log.error(TAGS_TAG, f"no package at index #{package_index} ({len(packages)} listed)")
            raise NotFoundError(f"Package #{package_index} not found in index")

        package = packages[package_index]
        entries = self.client.tag_entries(self.client.refs_url(package))

        tag_link = next((href for text, href in entries if text == tag_name), None)
        if tag_link is None:
            self.log.error(TAGS_TAG, "Tag not found")
            raise NotFoundError(f"Package by supplied tag not found: {package.name}@{tag_name}")

        self._attach_archive(package, tag_link, tag_name)
        return package

    def _attach_archive(self, package: Package, page_url: str, tag_name: str) -> None:
        links = self.client.archive_links(page_url)
        if not links:
            self.log.error(TAGS_TAG, f"no archive link on {page_url}")
            raise NotFoundError(f"Package archive not found: {package.name}@{tag_name}")

        package.archive = Resolved(links[0])
        self.log.info(TAGS_TAG, f"{package.name}@{tag_name} -> {links[0]}")
