"""manage-models - search, download and track GGUF models for KoboldCpp."""

import functools
import logging
from pathlib import Path
from typing import Callable, TypeVar

import click

from nobold import __version__
from nobold.config import DEFAULT_SEARCH_LIMIT, HUB_URL, INSTALL_DIR, InstallLayout
from nobold.engine.model_manager import ModelManager
from nobold.models.downloader import Downloader
from nobold.models.errors import ModelManagerError
from nobold.models.hub import HubClient
from nobold.utils.logging import setup_logging

F = TypeVar("F", bound=Callable)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def reports_errors(func: F) -> F:
    """Print ModelManagerError as 'ERROR: ...' plus hint and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ModelManagerError as e:
            click.echo(f"ERROR: {e.message}", err=True)
            if e.hint:
                click.echo(e.hint, err=True)
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, prog_name="manage-models")
@click.option(
    "--install-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=INSTALL_DIR,
    show_default=True,
    help="KoboldCpp install root (env: INSTALL_DIR).",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=DEFAULT_SEARCH_LIMIT,
    show_default=True,
    help="Maximum number of search results.",
)
@click.option("--hub-url", default=HUB_URL, show_default=True, help="Model hub endpoint.")
@click.option("--yes", "-y", is_flag=True, help="Answer yes to confirmation prompts.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    install_dir: Path,
    limit: int,
    hub_url: str,
    yes: bool,
    verbose: bool,
) -> None:
    """Search, download and manage GGUF models."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    # Only create the manager if not already provided (e.g., by tests)
    if ctx.obj is None:
        manager = ModelManager(
            InstallLayout(install_dir.expanduser()),
            hub=HubClient(hub_url),
            downloader=Downloader(hub_url),
            search_limit=limit,
            assume_yes=yes,
        )
        ctx.call_on_close(manager.close)
        ctx.obj = manager


@cli.command("list")
@click.pass_obj
@reports_errors
def list_cmd(manager: ModelManager) -> None:
    """List registered models and their install status."""
    manager.list_models()


@cli.command("info")
@click.argument("name")
@click.pass_obj
@reports_errors
def info_cmd(manager: ModelManager, name: str) -> None:
    """Show details of a registered model."""
    manager.info(name)


@cli.command("search")
@click.argument("term", nargs=-1, required=True)
@click.pass_obj
@reports_errors
def search_cmd(manager: ModelManager, term: tuple[str, ...]) -> None:
    """Search the hub for GGUF models."""
    query = " ".join(term).strip()
    if not query:
        raise click.UsageError("Search term must not be empty.")
    manager.search(query)


@cli.command("browse")
@click.argument("term", nargs=-1)
@click.pass_obj
@reports_errors
def browse_cmd(manager: ModelManager, term: tuple[str, ...]) -> None:
    """Search, pick a file, download it and register it."""
    manager.browse(" ".join(term).strip() or None)


@cli.command("pull")
@click.argument("name")
@click.pass_obj
@reports_errors
def pull_cmd(manager: ModelManager, name: str) -> None:
    """Download a registered model."""
    manager.pull(name)


@cli.command("remove")
@click.argument("name")
@click.pass_obj
@reports_errors
def remove_cmd(manager: ModelManager, name: str) -> None:
    """Delete a model's file, keeping its registry entry."""
    manager.remove(name)


def main() -> None:
    """CLI entry point used by the `manage-models` console script."""
    cli()


if __name__ == "__main__":
    main()
