"""Data models for the update checker."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChartReference:
    """A chart declared in a deployment manifest."""

    repository: str
    name: str
    version: str
    path: str = ""

    @property
    def is_resolvable(self) -> bool:
        """Check if the reference points at a repository and a version."""
        return bool(self.repository) and bool(self.version)


@dataclass(frozen=True)
class ChartUpdate:
    """Result of resolving a chart reference against its repository."""

    chart: ChartReference
    latest_version: str

    @property
    def is_outdated(self) -> bool:
        """Check if the declared version differs from the latest one."""
        return self.chart.version != self.latest_version

    def format(self) -> str:
        """Render the report line for this chart."""
        return (
            f"{self.chart.path}: {self.chart.repository} {self.chart.name} "
            f"{self.chart.version} -> {self.latest_version}"
        )
