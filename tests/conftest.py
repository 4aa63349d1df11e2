"""Shared fixtures for the update checker tests."""

from pathlib import Path

import pytest

from helmcheck.errors import RepositoryError


class StubFetcher:
    """Serve repository indexes from memory and record requested URLs."""

    def __init__(self, indexes: dict[str, str] | None = None):
        self.indexes = indexes or {}
        self.requests: list[str] = []

    def __call__(self, url: str) -> bytes:
        self.requests.append(url)
        if url not in self.indexes:
            raise RepositoryError(f"expected status code to be 200, got 404 for {url!r}")
        return self.indexes[url].encode("utf-8")


APP_INDEX = """apiVersion: v1
entries:
  app:
  - version: 1.1.0
  - version: 1.0.0
  - version: 1.2.0-rc.1
  other:
  - version: 0.3.0
"""


@pytest.fixture
def fetcher() -> StubFetcher:
    """Fetcher serving a single repository with an 'app' chart at 1.1.0."""
    return StubFetcher({"https://example.test/charts/index.yaml": APP_INDEX})


@pytest.fixture
def chart_dir(tmp_path: Path) -> Path:
    """Create a project with one Chart.yaml depending on app 1.0.0."""
    chart = tmp_path / "Chart.yaml"
    chart.write_text("""apiVersion: v2
name: umbrella
version: 0.1.0
dependencies:
- name: app
  repository: https://example.test/charts
  version: 1.0.0
""")
    return tmp_path


@pytest.fixture
def make_fetcher():
    """Factory for fetchers serving the given {index url: index body}."""
    return StubFetcher
