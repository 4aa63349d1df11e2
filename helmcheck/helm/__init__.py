"""Helm manifest scanning and repository index resolution."""

from .extractors import CHART_READERS
from .repository import HTTPFetcher, RepositoryIndexCache, get_repository_latest_chart_versions
from .scanner import HelmScanner

__all__ = [
    "CHART_READERS",
    "HTTPFetcher",
    "HelmScanner",
    "RepositoryIndexCache",
    "get_repository_latest_chart_versions",
]
