"""Helm repository index fetching and latest version resolution."""

import logging
from typing import Callable

import requests
import yaml

from .. import __version__
from ..errors import RepositoryError, VersionParseError
from ..version import compare_versions, parse_version

logger = logging.getLogger(__name__)

# Scalars stay strings, so a version like 1.10 is not read as the float 1.1.
_YamlLoader = getattr(yaml, "CBaseLoader", yaml.BaseLoader)

INDEX_FILENAME = "index.yaml"

Fetcher = Callable[[str], bytes]


class HTTPFetcher:
    """Fetch raw response bodies from Helm repositories."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": f"helm-update-checker/{__version__}",
        })

    def __call__(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise RepositoryError(f"failed to GET {url!r}: {e}") from e

        if response.status_code != 200:
            raise RepositoryError(
                f"expected status code to be 200, got {response.status_code} for {url!r}"
            )
        return response.content

    def close(self) -> None:
        self.session.close()


def index_url(repository: str) -> str:
    """Return the index.yaml URL of a repository."""
    return f"{repository.rstrip('/')}/{INDEX_FILENAME}"


def parse_index(content: bytes | str, source: str = "") -> dict[str, list[str]]:
    """
    Decode a repository index into chart versions.

    Returns:
        Dictionary mapping chart name to the versions listed for it, in
        index order.
    """
    try:
        data = yaml.load(content, Loader=_YamlLoader)
    except yaml.YAMLError as e:
        raise RepositoryError(f"failed to unmarshal response from {source!r}: {e}") from e

    if not data:
        return {}
    if not isinstance(data, dict):
        raise RepositoryError(f"failed to unmarshal response from {source!r}: not a mapping")

    entries = data.get("entries") or {}
    if not isinstance(entries, dict):
        raise RepositoryError(f"failed to unmarshal response from {source!r}: bad entries")

    versions: dict[str, list[str]] = {}
    for chart_name, chart_entries in entries.items():
        if chart_entries == "":
            chart_entries = []
        if not isinstance(chart_entries, list):
            raise RepositoryError(
                f"failed to unmarshal response from {source!r}: entries of chart {chart_name!r} are not a list"
            )

        chart_versions = []
        for entry in chart_entries:
            if not isinstance(entry, dict):
                raise RepositoryError(
                    f"failed to unmarshal response from {source!r}: bad entry for chart {chart_name!r}"
                )
            version = entry.get("version", "")
            if not isinstance(version, str):
                raise RepositoryError(
                    f"failed to unmarshal response from {source!r}: version of chart {chart_name!r} is not a string"
                )
            chart_versions.append(version)
        versions[chart_name] = chart_versions
    return versions


def select_latest_version(versions: list[str]) -> str | None:
    """
    Pick the highest stable version.

    Versions containing a hyphen are pre-releases and never qualify.
    Every remaining version must parse; a malformed one raises
    VersionParseError instead of being skipped.
    """
    # Ignore beta, alpha, rc, etc.
    candidates = [v for v in versions if "-" not in v]
    if not candidates:
        return None

    latest = candidates[0]
    parse_version(latest)
    for candidate in candidates[1:]:
        if compare_versions(candidate, latest) > 0:
            latest = candidate
    return latest


def get_repository_latest_chart_versions(repository: str, fetch: Fetcher) -> dict[str, str]:
    """Return the latest stable version of each chart in a repository."""
    url = index_url(repository)
    logger.debug(f"Fetching repository index {url}")
    index = parse_index(fetch(url), source=url)

    latest_versions: dict[str, str] = {}
    for chart_name, versions in index.items():
        try:
            latest = select_latest_version(versions)
        except VersionParseError as e:
            raise RepositoryError(
                f"failed to sort versions of chart {chart_name!r} in {url!r}: {e}"
            ) from e
        if latest is not None:
            latest_versions[chart_name] = latest

    logger.debug(f"Resolved {len(latest_versions)} charts from {url}")
    return latest_versions


class RepositoryIndexCache:
    """Per-run cache of repository URL to {chart name: latest version}."""

    def __init__(self, fetch: Fetcher):
        self.fetch = fetch
        self._versions: dict[str, dict[str, str]] = {}

    def __contains__(self, repository: str) -> bool:
        return repository in self._versions

    def __len__(self) -> int:
        return len(self._versions)

    def get(self, repository: str) -> dict[str, str]:
        """Return the latest chart versions of a repository, fetching it once."""
        if repository not in self._versions:
            self._versions[repository] = get_repository_latest_chart_versions(
                repository, self.fetch
            )
        return self._versions[repository]

    def put(self, repository: str, versions: dict[str, str]) -> None:
        """Record versions resolved outside the cache (e.g. on a worker thread)."""
        self._versions[repository] = versions
