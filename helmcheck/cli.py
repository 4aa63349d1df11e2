"""CLI entrypoint for helm-update-checker."""

import logging
import os
import sys

import click
import typer

from . import __version__
from .checker import check_charts, outdated_charts
from .config import Config
from .errors import HelmCheckError
from .helm.repository import HTTPFetcher

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="helm-update-checker",
    help="Report Helm charts in Chart.yaml, helmfile, skaffold and devspace manifests that have newer versions",
    add_completion=False,
)


def _configure_logging(level: str) -> None:
    # Logs go to stderr; stdout is reserved for the report.
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"helm-update-checker v{__version__}")
        raise typer.Exit()


@app.command()
def check(
    path: str = typer.Argument(
        None,
        help="Directory to scan for Helm manifests (default: current directory)",
        show_default=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log scanned manifests and fetched repositories",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show helm-update-checker version",
    ),
) -> None:
    """Print every chart whose declared version is not the latest stable release."""
    try:
        config = Config.from_env()
    except ValueError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    _configure_logging("DEBUG" if verbose else config.log_level)

    root = os.path.abspath(path) if path else os.getcwd()

    fetcher = HTTPFetcher(timeout=config.request_timeout)
    try:
        updates = check_charts(root, fetcher, max_workers=config.max_workers)
    except HelmCheckError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        fetcher.close()

    for update in outdated_charts(updates):
        typer.echo(update.format())


def main() -> None:
    """Main entrypoint."""
    try:
        exit_code = app(standalone_mode=False)
    except click.ClickException as e:
        # One line instead of the usage box
        typer.echo(f"error: {e.format_message()}", err=True)
        sys.exit(e.exit_code)
    sys.exit(exit_code or 0)


if __name__ == "__main__":
    main()
