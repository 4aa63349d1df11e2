"""Scanner for chart references in Chart.yaml, helmfile, skaffold and devspace manifests."""

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Callable, Protocol

from ..errors import HelmCheckError, ScanError
from ..models import ChartReference
from .extractors import CHART_READERS, ChartReader

logger = logging.getLogger(__name__)


class DirEntry(Protocol):
    """The parts of os.DirEntry the scanner relies on."""

    name: str

    def is_dir(self, *, follow_symlinks: bool = True) -> bool: ...


DirectoryLister = Callable[[str], list[DirEntry]]


def list_directory(path: str) -> list[os.DirEntry]:
    """List a directory sorted by filename."""
    with os.scandir(path) as it:
        return sorted(it, key=lambda entry: entry.name)


class HelmScanner:
    """Scanner for chart references in a directory tree."""

    def __init__(
        self,
        list_dir: DirectoryLister = list_directory,
        readers: dict[str, ChartReader] | None = None,
    ):
        self.list_dir = list_dir
        self.readers = CHART_READERS if readers is None else readers

    def scan(self, path: str | os.PathLike) -> list[ChartReference]:
        """
        Recursively collect the chart references declared under path.

        Every reference is stamped with the path of the manifest declaring it.

        Raises:
            ScanError: if a directory cannot be listed or a manifest cannot be
                read or decoded. Nothing is returned for a partial scan.
        """
        path = os.fspath(path)
        try:
            entries = self.list_dir(path)
        except OSError as e:
            raise ScanError(f"failed to read directory {path!r}: {e}") from e

        charts: list[ChartReference] = []
        for entry in entries:
            entry_path = os.path.join(path, entry.name)
            if entry.is_dir(follow_symlinks=False):
                charts.extend(self.scan(entry_path))
            elif entry.name in self.readers:
                charts.extend(self._read_manifest(entry_path, self.readers[entry.name]))
        return charts

    def _read_manifest(self, path: str, reader: ChartReader) -> list[ChartReference]:
        """Run a reader over one manifest and stamp its references."""
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScanError(f"failed to open {path!r}: {e}") from e

        try:
            charts = reader(content)
        except HelmCheckError as e:
            raise ScanError(f"failed to read {path!r}: {e}") from e

        logger.debug(f"Found {len(charts)} charts in {path}")
        return [replace(chart, path=path) for chart in charts]
