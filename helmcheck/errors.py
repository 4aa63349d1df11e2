"""Exceptions raised while scanning manifests and resolving chart versions."""


class HelmCheckError(Exception):
    """Base exception for update checker errors."""

    pass


class VersionParseError(HelmCheckError, ValueError):
    """Raised when a version string is not in the form X.Y.Z."""

    pass


class ManifestError(HelmCheckError):
    """Raised when a manifest cannot be decoded."""

    pass


class ScanError(HelmCheckError):
    """Raised when a directory or manifest in the scanned tree cannot be read."""

    pass


class RepositoryError(HelmCheckError):
    """Raised when a repository index cannot be fetched or resolved."""

    pass


class ChartNotFoundError(HelmCheckError):
    """Raised when a chart is missing from its repository index."""

    pass
