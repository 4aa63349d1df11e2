"""Readers that extract chart references from deployment manifests.

Each reader takes the raw text of one manifest and returns the chart
references it declares. References without a repository or a version
(local charts, path-based sources) are silently dropped.
"""

import re
from typing import Any, Callable, Iterator

import yaml

from ..errors import ManifestError
from ..models import ChartReference

# Scalars stay strings, so a version like 1.10 is not read as the float 1.1.
_YamlLoader = getattr(yaml, "CBaseLoader", yaml.BaseLoader)

# Go template actions, as used by helmfile. Non-greedy and single-line.
GO_TEMPLATE_PATTERN = re.compile(r"{{.*?}}")

# The base loader keeps null scalars as text.
_NULLS = frozenset({"", "~", "null", "Null", "NULL"})

ChartReader = Callable[[str], list[ChartReference]]


def _load_documents(content: str) -> Iterator[Any]:
    """Yield every document of a (possibly multi-document) YAML stream."""
    try:
        yield from yaml.load_all(content, Loader=_YamlLoader)
    except yaml.YAMLError as e:
        raise ManifestError(f"failed to unmarshal: {e}") from e


def _load_first_document(content: str) -> Any:
    # Only the first document is decoded, later ones are not even parsed.
    return next(_load_documents(content), None)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value in _NULLS)


def _mapping(value: Any, key: str) -> dict:
    """Return value as a mapping, treating missing values as empty."""
    if _is_empty(value):
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"failed to unmarshal: {key!r} is not a mapping")
    return value


def _sequence(value: Any, key: str) -> list:
    """Return value as a list, treating missing values as empty."""
    if _is_empty(value):
        return []
    if not isinstance(value, list):
        raise ManifestError(f"failed to unmarshal: {key!r} is not a list")
    return value


def _string(item: dict, key: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else ""


def _resolvable(charts: list[ChartReference]) -> list[ChartReference]:
    return [chart for chart in charts if chart.is_resolvable]


def read_helm_subcharts(content: str) -> list[ChartReference]:
    """Return the subcharts listed in a Chart.yaml."""
    document = _mapping(_load_first_document(content), "document")

    charts = []
    for dependency in _sequence(document.get("dependencies"), "dependencies"):
        dependency = _mapping(dependency, "dependencies")
        repository = _string(dependency, "repository")
        # file:// and @alias repositories have no index to fetch
        if not repository.startswith("http"):
            continue
        charts.append(ChartReference(
            repository=repository,
            name=_string(dependency, "name"),
            version=_string(dependency, "version"),
        ))
    return _resolvable(charts)


def strip_go_templates(content: str) -> str:
    """
    Remove all Go template actions from a manifest.

    This may leave invalid YAML behind when template actions generate YAML
    structure, which then fails to decode. Evaluating the template is out of
    scope.
    """
    return GO_TEMPLATE_PATTERN.sub("", content)


def read_helmfile_charts(content: str) -> list[ChartReference]:
    """
    Return the charts listed in a helmfile.yaml.

    Charts are referenced as ``<repository alias>/<chart name>`` and the
    alias is looked up in the document's ``repositories``. Helmfile only
    uses the last occurrence of a property, so every document replaces the
    repositories and releases of the previous ones.
    """
    charts: list[ChartReference] = []
    for document in _load_documents(strip_go_templates(content)):
        if not document:
            continue
        document = _mapping(document, "document")

        repositories: dict[str, str] = {}
        for repository in _sequence(document.get("repositories"), "repositories"):
            repository = _mapping(repository, "repositories")
            repositories[_string(repository, "name")] = _string(repository, "url")

        charts = []
        for release in _sequence(document.get("releases"), "releases"):
            release = _mapping(release, "releases")
            alias, sep, name = _string(release, "chart").partition("/")
            if not sep or alias not in repositories:
                continue
            charts.append(ChartReference(
                repository=repositories[alias],
                name=name,
                version=_string(release, "version"),
            ))
    return _resolvable(charts)


def _skaffold_releases(section: Any, key: str) -> Iterator[ChartReference]:
    helm = _mapping(_mapping(section, key).get("helm"), f"{key}.helm")
    for release in _sequence(helm.get("releases"), f"{key}.helm.releases"):
        release = _mapping(release, f"{key}.helm.releases")
        remote_chart = _string(release, "remoteChart")
        # Releases with a local chartPath have no repository
        if not remote_chart:
            continue
        yield ChartReference(
            repository=_string(release, "repo"),
            name=remote_chart,
            version=_string(release, "version"),
        )


def read_skaffold_charts(content: str) -> list[ChartReference]:
    """
    Return the charts listed in a skaffold.yaml.

    Helm releases may appear under ``deploy`` and ``manifests``. Every
    document of a multi-document file is a separate config, so releases
    accumulate across documents.
    """
    charts: list[ChartReference] = []
    for document in _load_documents(content):
        if not document:
            continue
        document = _mapping(document, "document")
        charts.extend(_skaffold_releases(document.get("deploy"), "deploy"))
        charts.extend(_skaffold_releases(document.get("manifests"), "manifests"))
    return _resolvable(charts)


def read_devspace_charts(content: str) -> list[ChartReference]:
    """Return the charts listed in a devspace.yaml."""
    document = _mapping(_load_first_document(content), "document")

    charts = []
    deployments = _mapping(document.get("deployments"), "deployments")
    for deployment_name, deployment in deployments.items():
        deployment = _mapping(deployment, f"deployments.{deployment_name}")
        helm = _mapping(deployment.get("helm"), f"deployments.{deployment_name}.helm")
        chart = _mapping(helm.get("chart"), f"deployments.{deployment_name}.helm.chart")
        charts.append(ChartReference(
            repository=_string(chart, "repo"),
            name=_string(chart, "name"),
            version=_string(chart, "version"),
        ))
    return _resolvable(charts)


CHART_READERS: dict[str, ChartReader] = {
    "Chart.yaml": read_helm_subcharts,
    "helmfile.yaml": read_helmfile_charts,
    "skaffold.yaml": read_skaffold_charts,
    "devspace.yaml": read_devspace_charts,
}
