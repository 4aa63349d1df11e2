"""Report Helm chart references that lag behind their repository's latest release."""

__version__ = "0.1.0"
