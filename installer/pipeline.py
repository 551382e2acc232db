"""Install pipeline for SourcePkg.

This module encapsulates the reusable logic for:
- Wiring index client, resolver, fetcher and search engine from configuration
- Running resolve -> download -> extract for one package, strictly in order

Any stage that raises aborts the rest; nothing is cleaned up or retried.
The CLI in installer/cli.py is a thin wrapper around these functions.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from pkgindex.core.config import (
    get_index_config,
    get_search_config,
    get_staging_config,
)
from pkgindex.core.logs import TaggedLogger, get_tagged_logger
from pkgindex.errors import ConfigError, SubprocessError
from pkgindex.fetcher import PackageFetcher, Runner
from pkgindex.index_client import PackageIndexClient
from pkgindex.model import Package
from pkgindex.resolver import DEFAULT_TAG, Identifier, PackageResolver
from pkgindex.search import SearchEngine

INSTALL_TAG = "android-pkg-installer"


@dataclass
class Components:
    client: PackageIndexClient
    resolver: PackageResolver
    fetcher: PackageFetcher
    search: SearchEngine


@dataclass
class InstallResult:
    """What one successful install produced."""

    package: Package
    archive_path: str
    output_dir: str
    download_status: int
    extract_status: int


def _search_setting(srch: dict, key: str, low: float, high: float) -> float:
    try:
        value = float(srch[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"search.{key} must be a number, got {srch[key]!r}") from e
    if not low <= value <= high:
        raise ConfigError(f"search.{key} must be between {low:g} and {high:g}, got {value:g}")
    return value


def build_components(
    base_url: Optional[str] = None,
    runner: Optional[Runner] = None,
    log: Optional[TaggedLogger] = None,
) -> Components:
    """Create the collaborating components from the loaded configuration.

    Args:
        base_url: Overrides index.base_url
        runner: External process runner for the fetcher (tests)
        log: Tagged logger shared by all components

    Returns:
        Components bundle

    Raises:
        ConfigError: If a search setting is not a number in [0, 1]
    """
    log = log or get_tagged_logger("pkgindex")

    idx = get_index_config()
    stg = get_staging_config()
    srch = get_search_config()

    client = PackageIndexClient(base_url or idx["base_url"], logger=log)
    fetcher = PackageFetcher(
        staging_dir=str(stg["staging_dir"]),
        download_command=stg["download_command"],
        extract_command=stg["extract_command"],
        runner=runner,
        fail_on_error=bool(stg["fail_on_error"]),
        logger=log,
    )
    return Components(
        client=client,
        resolver=PackageResolver(client, logger=log),
        fetcher=fetcher,
        search=SearchEngine(
            client,
            fuzziness=_search_setting(srch, "fuzziness", 0.0, 1.0),
            threshold=_search_setting(srch, "threshold", 0.0, 1.0),
        ),
    )


def install(
    identifier: Identifier,
    resolver: PackageResolver,
    fetcher: PackageFetcher,
    tag_name: str = DEFAULT_TAG,
    root: str = ".",
    log: Optional[TaggedLogger] = None,
) -> InstallResult:
    """Resolve, download and extract one package.

    Args:
        identifier: Package name or listing index
        resolver: Resolver used to find the archive URL
        fetcher: Fetcher that downloads and extracts
        tag_name: Tag or branch to install
        root: Destination root; the package lands in <root>/<name>

    Returns:
        InstallResult describing the finished install

    Raises:
        SourcePkgError: From whichever stage failed; later stages do not run
    """
    log = log or get_tagged_logger(__name__)

    package = resolver.resolve(identifier, tag_name=tag_name)

    download_status = fetcher.download(package)
    if download_status != 0:
        # Only reachable when the fetcher does not raise on non-zero exits
        log.error(INSTALL_TAG, f"download of {package.name} exited with {download_status}; not extracting")
        raise SubprocessError(
            f"download failed with exit status {download_status}",
            returncode=download_status,
        )

    extract_status = fetcher.extract(package, root)
    log.info(INSTALL_TAG, f"Download process completed({extract_status})")

    return InstallResult(
        package=package,
        archive_path=fetcher.archive_path(package),
        output_dir=os.path.join(root, package.name),
        download_status=download_status,
        extract_status=extract_status,
    )
