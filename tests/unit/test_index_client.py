"""Unit tests for pkgindex.index_client module."""
from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from pkgindex.core.logs import TaggedLogger
from pkgindex.core.network import FetchResponse
from pkgindex.errors import NetworkError
from pkgindex.index_client import (
    PackageIndexClient,
    apply_filter,
    filter_packages,
    glob_to_regex,
)
from pkgindex.model import Package, Unresolved

from tests.conftest import BASE_URL, FakeFetcher


def _pkgs(*names: str):
    return [Package(name=n, description=None, url=f"{BASE_URL}/{n}/", index=i) for i, n in enumerate(names)]


class TestListPackages:
    """Tests for PackageIndexClient.list_packages."""

    def test_parses_repo_items(self, client):
        packages = client.list_packages()

        assert [p.name for p in packages] == ["foo", "bar", "foobar"]
        assert [p.index for p in packages] == [0, 1, 2]

    def test_extracts_description_and_url(self, client):
        foo, bar, _ = client.list_packages()

        assert foo.description == "Foo project"
        assert foo.url == f"{BASE_URL}/foo/"
        assert bar.description is None

    def test_fresh_packages_are_unresolved(self, client):
        for pkg in client.list_packages():
            assert isinstance(pkg.archive, Unresolved)
            assert pkg.score == 0.0

    def test_fetches_root_page(self, client, fake_fetcher):
        client.list_packages()
        assert fake_fetcher.calls == [BASE_URL]

    def test_empty_page_yields_empty_list(self):
        client = PackageIndexClient(BASE_URL, fetcher=FakeFetcher({BASE_URL: ""}))
        assert client.list_packages() == []

    def test_malformed_page_yields_empty_list(self):
        client = PackageIndexClient(BASE_URL, fetcher=FakeFetcher({BASE_URL: "<div><a class='RepoList"}))
        assert client.list_packages() == []

    def test_error_status_parses_body(self):
        """A non-2xx answer is not an error; its body simply has no items."""
        client = PackageIndexClient(BASE_URL, fetcher=FakeFetcher({}))
        assert client.list_packages() == []

    def test_network_error_propagates_and_logs(self):
        fetcher = MagicMock(side_effect=NetworkError("boom", url=BASE_URL))
        log = MagicMock(spec=TaggedLogger)
        client = PackageIndexClient(BASE_URL, fetcher=fetcher, logger=log)

        with pytest.raises(NetworkError):
            client.list_packages()

        log.error.assert_called_once()
        assert log.error.call_args[0][0] == "packages-index"

    def test_logs_status_and_timing(self, fake_fetcher, caplog):
        client = PackageIndexClient(BASE_URL, fetcher=fake_fetcher, logger=TaggedLogger(logging.getLogger("t")))

        with caplog.at_level(logging.DEBUG, logger="t"):
            client.list_packages()

        assert "responded in 42ms with status = 200(ok)" in caplog.text


class TestListTags:
    """Tests for PackageIndexClient.list_tags."""

    def test_groups_by_heading(self, client):
        listing = client.list_tags("foo")

        assert listing == {"Branches": ["master"], "Tags": ["v1.0", "v2.0"]}
        assert list(listing) == ["Branches", "Tags"]

    def test_fetches_refs_url(self, client, fake_fetcher):
        client.list_tags("foo")
        assert fake_fetcher.calls == [f"{BASE_URL}/foo/+refs"]

    def test_missing_page_yields_empty_mapping(self, client):
        assert client.list_tags("does/not/exist") == {}

    def test_untitled_group(self):
        html = '<div class="RefList"><ul><li class="RefList-item"><a href="/x">x1</a></li></ul></div>'
        client = PackageIndexClient(BASE_URL, fetcher=FakeFetcher({f"{BASE_URL}/x/+refs": html}))

        assert client.list_tags("x") == {"Refs": ["x1"]}


class TestPageHelpers:
    """Tests for tag_entries, archive_links and URL builders."""

    def test_tag_entries_are_absolute(self, client):
        entries = client.tag_entries(f"{BASE_URL}/foo/+refs")

        assert entries[0] == ("master", f"{BASE_URL}/foo/+/refs/heads/master")
        assert [text for text, _ in entries] == ["master", "v1.0", "v2.0"]

    def test_archive_links_only_tar_gz(self, client):
        links = client.archive_links(f"{BASE_URL}/foo/+/v1.0")
        assert links == [f"{BASE_URL}/foo/+archive/v1.0.tar.gz"]

    def test_archive_links_keeps_absolute_href(self):
        html = '<a href="https://cdn.example.org/pkg.tar.gz">dl</a>'
        client = PackageIndexClient(BASE_URL, fetcher=FakeFetcher({"u": html}))
        assert client.archive_links("u") == ["https://cdn.example.org/pkg.tar.gz"]

    def test_url_builders(self):
        client = PackageIndexClient(BASE_URL + "/", fetcher=FakeFetcher({}))
        pkg = Package(name="platform/build", description=None, url=f"{BASE_URL}/platform/build/", index=0)

        assert client.base_url == BASE_URL
        assert client.refs_url(pkg) == f"{BASE_URL}/platform/build/+refs"
        assert client.revision_url("platform/build", "master") == f"{BASE_URL}/platform/build/+/master"


class TestApplyFilter:
    """Tests for apply_filter and glob translation."""

    def test_prefix_wildcard_preserves_order(self):
        result = apply_filter("foo*")(_pkgs("foo", "bar", "foobar"))
        assert [p.name for p in result] == ["foo", "foobar"]

    def test_full_match_not_substring(self):
        result = filter_packages(_pkgs("foo", "xfoo", "foox"), "foo")
        assert [p.name for p in result] == ["foo"]

    def test_wildcard_in_middle(self):
        result = filter_packages(_pkgs("platform/build", "platform/art", "device/build"), "*/build")
        assert [p.name for p in result] == ["platform/build", "device/build"]

    def test_regex_metacharacters_are_literal(self):
        result = filter_packages(_pkgs("a.b", "axb", "a+b"), "a.b")
        assert [p.name for p in result] == ["a.b"]

    @pytest.mark.parametrize("pattern", [None, ""])
    def test_empty_pattern_matches_everything(self, pattern):
        result = apply_filter(pattern)(_pkgs("foo", "bar"))
        assert [p.name for p in result] == ["foo", "bar"]

    def test_glob_to_regex(self):
        assert glob_to_regex("foo*") == "foo.*"
        assert glob_to_regex("*") == ".*"

    def test_client_method_delegates(self, client):
        result = client.apply_filter("bar")(client.list_packages())
        assert [p.name for p in result] == ["bar"]
