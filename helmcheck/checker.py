"""Resolve the latest version of every chart found in a directory tree."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

from .errors import ChartNotFoundError
from .helm.repository import Fetcher, RepositoryIndexCache, get_repository_latest_chart_versions
from .helm.scanner import HelmScanner
from .models import ChartReference, ChartUpdate

logger = logging.getLogger(__name__)


def _fetch_repositories(repositories: list[str], cache: RepositoryIndexCache, max_workers: int) -> None:
    """Fill the cache for repositories concurrently."""
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(get_repository_latest_chart_versions, repository, cache.fetch)
            for repository in repositories
        ]
        # Results are collected in discovery order so the first failing
        # repository is the one reported.
        for repository, future in zip(repositories, futures):
            cache.put(repository, future.result())


def get_latest_chart_versions(
    charts: list[ChartReference],
    cache: RepositoryIndexCache,
    max_workers: int = 1,
) -> dict[ChartReference, str]:
    """
    Return the latest version of each chart.

    Each distinct repository is fetched once, in the order it is first
    referenced.

    Raises:
        RepositoryError: if any repository cannot be fetched or resolved.
        ChartNotFoundError: if a chart is missing from its repository.
    """
    repositories = list(dict.fromkeys(
        chart.repository for chart in charts if chart.repository not in cache
    ))

    if max_workers > 1 and len(repositories) > 1:
        _fetch_repositories(repositories, cache, max_workers)
    else:
        for repository in repositories:
            cache.get(repository)
    logger.info(f"Fetched {len(repositories)} repository indexes")

    chart_versions: dict[ChartReference, str] = {}
    for chart in charts:
        version = cache.get(chart.repository).get(chart.name)
        if version is None:
            raise ChartNotFoundError(
                f"no version for chart {chart.name!r} in repository {chart.repository!r}"
            )
        chart_versions[chart] = version
    return chart_versions


def check_charts(
    path: str | os.PathLike,
    fetch: Fetcher,
    max_workers: int = 1,
    scanner: HelmScanner | None = None,
) -> list[ChartUpdate]:
    """Scan path for chart references and pair each with its latest version."""
    scanner = scanner or HelmScanner()
    charts = scanner.scan(path)
    logger.info(f"Found {len(charts)} chart references in {os.fspath(path)}")

    cache = RepositoryIndexCache(fetch)
    latest_versions = get_latest_chart_versions(charts, cache, max_workers=max_workers)
    return [
        ChartUpdate(chart=chart, latest_version=latest_version)
        for chart, latest_version in latest_versions.items()
    ]


def outdated_charts(updates: list[ChartUpdate]) -> list[ChartUpdate]:
    """Filter the updates down to charts whose declared version is not the latest."""
    return [update for update in updates if update.is_outdated]
