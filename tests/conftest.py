"""Pytest configuration and shared fixtures for SourcePkg tests."""
from __future__ import annotations

import json
import os
import shutil
import tempfile
from typing import Any, Dict, Generator, List
from unittest.mock import patch

import pytest

import pkgindex.core.config as config_module
from pkgindex.core.network import FetchResponse

BASE_URL = "https://example.googlesource.com"


# ============================================================================
# HTML pages served by the fake index host
# ============================================================================

INDEX_HTML = """
<html><body>
<div class="RepoList">
  <a class="RepoList-item" href="/foo/">
    <span class="RepoList-itemName">foo</span>
    <span class="RepoList-itemDescription">Foo project</span>
  </a>
  <a class="RepoList-item" href="/bar/">
    <span class="RepoList-itemName">bar</span>
    <span class="RepoList-itemDescription"></span>
  </a>
  <a class="RepoList-item" href="/foobar/">
    <span class="RepoList-itemName">foobar</span>
    <span class="RepoList-itemDescription">Foo and bar together</span>
  </a>
</div>
</body></html>
"""

REFS_HTML = """
<html><body>
<div class="RefList">
  <h3 class="RefList-title">Branches</h3>
  <ul class="RefList-items">
    <li class="RefList-item"><a href="/foo/+/refs/heads/master">master</a></li>
  </ul>
</div>
<div class="RefList">
  <h3 class="RefList-title">Tags</h3>
  <ul class="RefList-items">
    <li class="RefList-item"><a href="/foo/+/refs/tags/v1.0">v1.0</a></li>
    <li class="RefList-item"><a href="/foo/+/refs/tags/v2.0">v2.0</a></li>
  </ul>
</div>
</body></html>
"""


def revision_html(archive_href: str) -> str:
    return f"""
<html><body>
<div class="Metadata"><a href="/foo/+log">log</a></div>
<a href="{archive_href}">tgz</a>
<a href="/foo/+archive/other.zip">zip</a>
</body></html>
"""


def default_pages() -> Dict[str, str]:
    return {
        BASE_URL: INDEX_HTML,
        f"{BASE_URL}/foo/+refs": REFS_HTML,
        f"{BASE_URL}/foo/+/refs/heads/master": revision_html("/foo/+archive/refs/heads/master.tar.gz"),
        f"{BASE_URL}/foo/+/refs/tags/v1.0": revision_html("/foo/+archive/refs/tags/v1.0.tar.gz"),
        f"{BASE_URL}/foo/+/refs/tags/v2.0": revision_html("/foo/+archive/refs/tags/v2.0.tar.gz"),
        f"{BASE_URL}/foo/+/master": revision_html("/foo/+archive/master.tar.gz"),
        f"{BASE_URL}/foo/+/v1.0": revision_html("/foo/+archive/v1.0.tar.gz"),
    }


class FakeFetcher:
    """Serves canned pages; unknown URLs answer 404 with an empty body."""

    def __init__(self, pages: Dict[str, str]):
        self.pages = pages
        self.calls: List[str] = []

    def __call__(self, url: str) -> FetchResponse:
        self.calls.append(url)
        if url in self.pages:
            return FetchResponse(url, 200, self.pages[url], 1000, 1042)
        return FetchResponse(url, 404, "", 1000, 1010)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher(default_pages())


@pytest.fixture
def client(fake_fetcher: FakeFetcher):
    from pkgindex.index_client import PackageIndexClient

    return PackageIndexClient(BASE_URL, fetcher=fake_fetcher)


# ============================================================================
# Path and Directory Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test files."""
    dirpath = tempfile.mkdtemp(prefix="sourcepkg_test_")
    yield dirpath
    shutil.rmtree(dirpath, ignore_errors=True)


@pytest.fixture
def staging_dir(temp_dir: str) -> str:
    return os.path.join(temp_dir, "staging")


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_config_cache() -> Generator[None, None, None]:
    """Keep the module-level config cache from leaking between tests."""
    config_module._CONFIG_CACHE = None
    yield
    config_module._CONFIG_CACHE = None


@pytest.fixture
def sample_config(temp_dir: str) -> Dict[str, Any]:
    """Return a sample configuration dictionary."""
    return {
        "index": {"base_url": BASE_URL + "/"},
        "network": {"timeout_s": 5, "max_retries": 0, "headers": {"X-Test": "1"}},
        "staging": {
            "staging_dir": os.path.join(temp_dir, "staging"),
            "fail_on_error": True,
        },
        "search": {"threshold": 0.3, "fuzziness": 0.0},
        "install": {"default_root": os.path.join(temp_dir, "out"), "default_tag": "master"},
    }


@pytest.fixture
def config_file(temp_dir: str, sample_config: Dict[str, Any]) -> str:
    """Create a temporary config file."""
    config_path = os.path.join(temp_dir, "config.json")
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(sample_config, f)
    return config_path


@pytest.fixture
def mock_config(sample_config: Dict[str, Any]):
    """Mock the config module to return sample config."""
    with patch("pkgindex.core.config._CONFIG_CACHE", sample_config):
        with patch("pkgindex.core.config.get_config", return_value=sample_config):
            yield sample_config


# ============================================================================
# External process fake
# ============================================================================

class RecordingRunner:
    """Stands in for wget/tar: records argv, creates the archive on download."""

    def __init__(self, download_status: int = 0, extract_status: int = 0):
        self.download_status = download_status
        self.extract_status = extract_status
        self.calls: List[List[str]] = []

    def __call__(self, argv: List[str]) -> int:
        self.calls.append(list(argv))
        if argv[0] == "wget":
            if self.download_status == 0:
                with open(argv[argv.index("-O") + 1], "wb") as f:
                    f.write(b"\x1f\x8b")
            return self.download_status
        return self.extract_status

    @property
    def programs(self) -> List[str]:
        return [argv[0] for argv in self.calls]


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def components(client, runner, staging_dir):
    """Pipeline components wired to the fake host and fake runner."""
    from installer.pipeline import Components
    from pkgindex.fetcher import PackageFetcher
    from pkgindex.resolver import PackageResolver
    from pkgindex.search import SearchEngine

    return Components(
        client=client,
        resolver=PackageResolver(client),
        fetcher=PackageFetcher(staging_dir=staging_dir, runner=runner),
        search=SearchEngine(client),
    )
