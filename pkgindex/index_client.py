"""Client for a Gitiles-style repository index.

Scrapes three kinds of pages:
- the root listing (div.RepoList > a.RepoList-item), one entry per project
- a project's +refs page (div.RefList sections of li.RefList-item entries)
- a revision page (+/<tag>), scanned for .tar.gz archive anchors

The HTTP collaborator is injectable; by default it is
pkgindex.core.network.fetch.
"""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .core.logs import TaggedLogger, get_tagged_logger
from .core.network import FetchResponse, fetch
from .errors import NetworkError
from .model import Package, TagListing

Fetcher = Callable[[str], FetchResponse]
PackageFilter = Callable[[Sequence[Package]], List[Package]]

INDEX_TAG = "packages-index"
TAGS_TAG = "package-tags-index"

REPO_ITEM_SELECTOR = "div.RepoList > a.RepoList-item"
REPO_NAME_SELECTOR = ".RepoList-itemName"
REPO_DESCRIPTION_SELECTOR = ".RepoList-itemDescription"
REF_GROUP_SELECTOR = "div.RefList"
REF_TITLE_SELECTOR = ".RefList-title"
REF_ITEM_SELECTOR = "li.RefList-item"
ARCHIVE_LINK_SELECTOR = 'a[href$=".tar.gz"]'

UNTITLED_REF_GROUP = "Refs"


def glob_to_regex(pattern: str) -> str:
    """Translate a '*' wildcard pattern to a regular expression.

    '*' means zero or more of any character; everything else is literal.
    """
    return ".*".join(re.escape(part) for part in pattern.split("*"))


def apply_filter(pattern: Optional[str]) -> PackageFilter:
    """Build a filter keeping packages whose whole name matches pattern.

    An empty or None pattern keeps every package. Input order is preserved.
    """
    if not pattern:
        return lambda packages: list(packages)

    regex = re.compile(glob_to_regex(pattern), re.DOTALL)
    return lambda packages: [p for p in packages if regex.fullmatch(p.name)]


def filter_packages(packages: Sequence[Package], pattern: Optional[str]) -> List[Package]:
    return apply_filter(pattern)(packages)


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


class PackageIndexClient:
    """Fetches and parses the project listing, ref listings and archive links."""

    def __init__(
        self,
        base_url: str,
        fetcher: Optional[Fetcher] = None,
        logger: Optional[TaggedLogger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.fetcher = fetcher or fetch
        self.log = logger or get_tagged_logger(__name__)

    # ------------------------------------------------------------------ URLs

    def absolute(self, href: str) -> str:
        return urljoin(self.base_url + "/", href)

    def package_url(self, package_name: str) -> str:
        return f"{self.base_url}/{package_name.strip('/')}/"

    def refs_url(self, package: Package) -> str:
        return package.url.rstrip("/") + "/+refs"

    def revision_url(self, package_name: str, tag_name: str) -> str:
        return f"{self.base_url}/{package_name.strip('/')}/+/{tag_name}"

    def apply_filter(self, pattern: Optional[str]) -> PackageFilter:
        return apply_filter(pattern)

    # --------------------------------------------------------------- fetching

    def _get(self, url: str, tag: str) -> FetchResponse:
        try:
            response = self.fetcher(url)
        except NetworkError as e:
            self.log.error(tag, f"i/o exception while loading {url}", e)
            raise

        state = "ok" if response.ok else "failed"
        self.log.debug(
            tag,
            f"responded in {response.elapsed_ms}ms with status = {response.status_code}({state})",
        )
        return response

    def list_packages(self) -> List[Package]:
        """Fetch the root listing.

        Returns:
            Packages in listing order; index is the position in this fetch

        Raises:
            NetworkError: If the index host cannot be reached
        """
        self.log.debug(INDEX_TAG, "loading packages...")
        response = self._get(self.base_url, INDEX_TAG)

        soup = _parse(response.body)
        packages: List[Package] = []
        for index, item in enumerate(soup.select(REPO_ITEM_SELECTOR)):
            name_el = item.select_one(REPO_NAME_SELECTOR)
            desc_el = item.select_one(REPO_DESCRIPTION_SELECTOR)
            name = name_el.get_text(strip=True) if name_el else ""
            description = desc_el.get_text(strip=True) if desc_el else ""
            packages.append(
                Package(
                    name=name,
                    description=description or None,
                    url=self.absolute(item.get("href", "")),
                    index=index,
                )
            )
        return packages

    def list_tags(self, package_name: str) -> TagListing:
        """Fetch {base}/{package_name}/+refs and group tag names by heading.

        Returns:
            Mapping of group label to tag names; empty for an empty page
        """
        url = self.package_url(package_name) + "+refs"
        response = self._get(url, TAGS_TAG)

        listing: TagListing = {}
        for group in _parse(response.body).select(REF_GROUP_SELECTOR):
            title_el = group.select_one(REF_TITLE_SELECTOR)
            label = title_el.get_text(strip=True) if title_el else UNTITLED_REF_GROUP
            names = [li.get_text(strip=True) for li in group.select(REF_ITEM_SELECTOR)]
            if names:
                listing.setdefault(label or UNTITLED_REF_GROUP, []).extend(names)
        return listing

    def tag_entries(self, refs_url: str) -> List[Tuple[str, str]]:
        """Return (visible text, absolute link) for every ref entry on a +refs page."""
        response = self._get(refs_url, TAGS_TAG)

        entries: List[Tuple[str, str]] = []
        for li in _parse(response.body).select(REF_ITEM_SELECTOR):
            anchor = li.find("a")
            href = anchor.get("href") if anchor else None
            if href:
                entries.append((li.get_text(strip=True), self.absolute(href)))

        self.log.debug(TAGS_TAG, f"Searching referenced tag among {len(entries)} tags")
        return entries

    def archive_links(self, page_url: str) -> List[str]:
        """Return absolute URLs of the .tar.gz anchors on a page, in page order."""
        response = self._get(page_url, TAGS_TAG)
        return [
            self.absolute(a["href"])
            for a in _parse(response.body).select(ARCHIVE_LINK_SELECTOR)
        ]
