"""SourcePkg index package.

This package provides the index-facing side of SourcePkg: discovering,
searching and resolving source archives published on a Gitiles-style host.

Key modules:
- core: Configuration, HTTP session and tagged logging
- model: Package dataclass and the Resolved/Unresolved archive reference
- errors: Error hierarchy with CLI exit codes
- scoring: string_score fuzzy matcher and ranking
- index_client: Listing, +refs and archive-link scraping
- resolver: Package + tag -> archive URL
- fetcher: External download and extraction
- search: Listing + filter + ranking

Usage:
    from pkgindex import PackageIndexClient, PackageResolver, SearchEngine
"""

from .fetcher import PackageFetcher
from .index_client import PackageIndexClient, apply_filter
from .model import Package, Resolved, TagListing, Unresolved
from .resolver import PackageResolver
from .scoring import score
from .search import SearchEngine

__all__ = [
    "Package",
    "Resolved",
    "Unresolved",
    "TagListing",
    "PackageIndexClient",
    "PackageResolver",
    "PackageFetcher",
    "SearchEngine",
    "apply_filter",
    "score",
]
