"""Tests for repository index resolution."""

import pytest
import requests

from helmcheck.errors import RepositoryError
from helmcheck.helm.repository import (
    HTTPFetcher,
    RepositoryIndexCache,
    get_repository_latest_chart_versions,
    index_url,
    parse_index,
    select_latest_version,
)

REPO = "https://charts.example.com"
INDEX = f"{REPO}/index.yaml"


class TestIndexURL:
    def test_join(self):
        assert index_url("https://charts.example.com") == INDEX

    def test_trailing_slash(self):
        assert index_url("https://example.com/charts/") == "https://example.com/charts/index.yaml"


class TestSelectLatestVersion:
    """Tests for latest version selection."""

    def test_prerelease_excluded(self):
        assert select_latest_version(["1.0.0", "1.1.0", "1.2.0-rc1"]) == "1.1.0"

    def test_only_prereleases(self):
        assert select_latest_version(["1.0.0-alpha", "2.0.0-beta.1"]) is None

    def test_numeric_ordering(self):
        assert select_latest_version(["1.9.0", "1.10.0", "1.2.0"]) == "1.10.0"

    def test_single_malformed_version_raises(self):
        with pytest.raises(ValueError):
            select_latest_version(["latest"])

    def test_malformed_mixed_with_valid_raises(self):
        with pytest.raises(ValueError):
            select_latest_version(["1.0.0", "1.1", "1.2.0"])


class TestParseIndex:
    def test_versions_stay_strings(self):
        index = parse_index("entries:\n  foo:\n  - version: 1.10\n")
        assert index == {"foo": ["1.10"]}

    def test_missing_entries(self):
        assert parse_index("apiVersion: v1\n") == {}

    def test_invalid_yaml(self):
        with pytest.raises(RepositoryError, match="index.yaml"):
            parse_index("entries: [\n", source=INDEX)

    def test_chart_without_entries(self):
        assert parse_index("entries:\n  foo:\n") == {"foo": []}

    @pytest.mark.parametrize(
        "version",
        ["[1, 2]", "{a: b}"],
    )
    def test_non_string_version(self, version):
        with pytest.raises(RepositoryError, match="index.yaml"):
            parse_index(
                f"entries:\n  foo:\n  - version: 1.0.0\n  - version: {version}\n",
                source=INDEX,
            )

    def test_chart_entries_not_a_list(self):
        with pytest.raises(RepositoryError, match="foo"):
            parse_index("entries:\n  foo: 1.0.0\n", source=INDEX)

    def test_non_string_version_fails_repository(self, make_fetcher):
        fetcher = make_fetcher({INDEX: "entries: {foo: [{version: 1.0.0}, {version: [1, 2]}]}\n"})

        with pytest.raises(RepositoryError, match="index.yaml"):
            get_repository_latest_chart_versions(REPO, fetcher)


class TestGetRepositoryLatestChartVersions:
    """Tests for resolving a whole repository."""

    def test_latest_per_chart(self, make_fetcher):
        fetcher = make_fetcher({INDEX: """apiVersion: v1
entries:
  foo:
  - version: 1.0.0
  - version: 1.1.0
  - version: 1.2.0-rc1
  bar:
  - version: 0.9.0
"""})

        versions = get_repository_latest_chart_versions(REPO, fetcher)

        assert versions == {"foo": "1.1.0", "bar": "0.9.0"}
        assert fetcher.requests == [INDEX]

    def test_prerelease_only_chart_omitted(self, make_fetcher):
        fetcher = make_fetcher({INDEX: """entries:
  foo:
  - version: 1.0.0
  nightly:
  - version: 0.1.0-alpha
  - version: 0.2.0-beta
"""})

        versions = get_repository_latest_chart_versions(REPO, fetcher)

        assert "nightly" not in versions
        assert versions == {"foo": "1.0.0"}

    def test_malformed_version_fails_repository(self, make_fetcher):
        fetcher = make_fetcher({INDEX: """entries:
  foo:
  - version: 1.0.0
  - version: "1.1"
"""})

        with pytest.raises(RepositoryError, match="foo"):
            get_repository_latest_chart_versions(REPO, fetcher)

    def test_fetch_failure_propagates(self, make_fetcher):
        with pytest.raises(RepositoryError, match="404"):
            get_repository_latest_chart_versions(REPO, make_fetcher({}))


class TestRepositoryIndexCache:
    def test_fetches_once(self, make_fetcher):
        fetcher = make_fetcher({INDEX: "entries:\n  foo:\n  - version: 1.0.0\n"})
        cache = RepositoryIndexCache(fetcher)

        assert cache.get(REPO) == {"foo": "1.0.0"}
        assert cache.get(REPO) == {"foo": "1.0.0"}
        assert fetcher.requests == [INDEX]
        assert REPO in cache
        assert len(cache) == 1


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b""):
        self.status_code = status_code
        self.content = content


class TestHTTPFetcher:
    """Tests for the requests-based fetcher."""

    def test_success(self, monkeypatch):
        fetcher = HTTPFetcher(timeout=5)
        calls = []

        def fake_get(url, timeout=None):
            calls.append((url, timeout))
            return FakeResponse(200, b"entries: {}\n")

        monkeypatch.setattr(fetcher.session, "get", fake_get)

        assert fetcher(INDEX) == b"entries: {}\n"
        assert calls == [(INDEX, 5)]

    def test_non_200_status(self, monkeypatch):
        fetcher = HTTPFetcher()
        monkeypatch.setattr(fetcher.session, "get", lambda url, timeout=None: FakeResponse(503))

        with pytest.raises(RepositoryError, match="503"):
            fetcher(INDEX)

    def test_transport_error(self, monkeypatch):
        fetcher = HTTPFetcher()

        def fake_get(url, timeout=None):
            raise requests.ConnectionError("connection refused")

        monkeypatch.setattr(fetcher.session, "get", fake_get)

        with pytest.raises(RepositoryError, match="failed to GET"):
            fetcher(INDEX)
