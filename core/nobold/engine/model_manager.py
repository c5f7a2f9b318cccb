"""
Model manager - resolves manage-models commands into registry reads,
hub queries, file selection and downloads.
"""

from pathlib import Path
from typing import Optional, Sequence, TypeVar

import click

from nobold.config import DEFAULT_SEARCH_LIMIT, InstallLayout
from nobold.engine.selection import Aborted, Invalid, Selected, choose
from nobold.models.downloader import Downloader, DownloadResult
from nobold.models.errors import UnknownModelError
from nobold.models.hub import HubClient
from nobold.models.registry import ModelRecord, RegistryStore
from nobold.models.selector import SelectionResult, build_selection
from nobold.models.templates import detect_chat_template
from nobold.utils.logging import logger

T = TypeVar("T")

GIB = 2**30


class _ProgressPrinter:
    """Prints download progress on one line of stderr."""

    def __init__(self) -> None:
        self._last_percent = -1

    def __call__(self, downloaded: int, total: int) -> None:
        if total <= 0:
            return
        percent = min(100, downloaded * 100 // total)
        if percent == self._last_percent:
            return
        self._last_percent = percent
        click.echo(f"\r  {percent:3d}% of {total / GIB:.2f} GB", nl=False, err=True)
        if downloaded >= total:
            click.echo(err=True)


class ModelManager:
    """
    Runs one manage-models command per call.

    Every command reads the registry fresh; only a successful download
    in browse adds a registry entry.
    """

    def __init__(
        self,
        layout: InstallLayout,
        hub: Optional[HubClient] = None,
        downloader: Optional[Downloader] = None,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        assume_yes: bool = False,
    ) -> None:
        self.layout = layout
        self.store = RegistryStore(layout.registry_file)
        self.hub = hub or HubClient()
        self.downloader = downloader or Downloader()
        self.search_limit = search_limit
        self.assume_yes = assume_yes

    def close(self) -> None:
        self.hub.close()
        self.downloader.close()

    # ─────────────────────────────────────────────────────────
    # REGISTRY COMMANDS
    # ─────────────────────────────────────────────────────────

    def list_models(self) -> None:
        """Print every registered model with its install status."""
        models = self.store.require()
        if not models:
            click.echo("No models registered.")
            return

        click.echo(f"Models in {self.layout.files_dir}:")
        # Several entries may share one file; count each file once.
        installed_paths: set[Path] = set()
        installed = 0
        for name, record in models.items():
            path = self.layout.model_path(record.filename)
            if path.is_file():
                installed_paths.add(path.resolve())
                installed += 1
                status = "installed"
            else:
                status = "not installed"
            click.echo(
                f"  {name:<24} {status:<14} {record.size_gb:>7.2f} GB  {record.source_repo}"
            )

        used_bytes = sum(p.stat().st_size for p in installed_paths)
        click.echo(
            f"\n{installed} of {len(models)} installed, "
            f"disk usage: {used_bytes / GIB:.2f} GB"
        )

    def info(self, name: str) -> ModelRecord:
        """Print metadata and install status of one model."""
        record = self._resolve(name)
        path = self.layout.model_path(record.filename)

        click.echo(f"Name:          {record.name}")
        click.echo(f"Repository:    {record.source_repo}")
        click.echo(f"File:          {record.filename}")
        click.echo(f"Size:          {record.size_gb:.2f} GB")
        click.echo(f"Chat template: {record.chat_template}")
        click.echo(f"Added:         {record.added_date.isoformat()}")
        click.echo(f"Path:          {path}")
        click.echo(f"Status:        {'installed' if path.is_file() else 'not installed'}")
        return record

    def pull(self, name: str) -> DownloadResult:
        """Download a registered model to its canonical path."""
        record = self._resolve(name)
        result = self._download(record.source_repo, record.filename)
        click.echo(f"'{record.name}' is ready at {result.path}")
        return result

    def remove(self, name: str) -> bool:
        """
        Delete a model's file. The registry entry is kept.

        Returns:
            True if the file was deleted
        """
        record = self._resolve(name)
        path = self.layout.model_path(record.filename)

        if not path.is_file():
            click.echo(f"'{name}' is not installed ({path} not found).")
            return False

        size_gb = path.stat().st_size / GIB
        if not self._confirm(f"Delete {path} ({size_gb:.2f} GB)?", default=False):
            click.echo("Cancelled.")
            return False

        path.unlink()
        logger.info(f"Deleted {path}")
        click.echo(f"Removed {path}. Registry entry '{name}' kept; use 'pull' to restore it.")
        return True

    # ─────────────────────────────────────────────────────────
    # HUB COMMANDS
    # ─────────────────────────────────────────────────────────

    def search(self, term: str) -> list[str]:
        """Print repositories matching term."""
        click.echo(f"Searching for '{term}'...")
        repos = self.hub.search_models(term, self.search_limit)

        if not repos:
            click.echo("No models found.")
            return repos

        for i, repo_id in enumerate(repos, start=1):
            click.echo(f"  {i:>2}) {repo_id}")
        return repos

    def browse(self, term: Optional[str] = None) -> Optional[ModelRecord]:
        """
        Interactive search -> pick repo -> pick file -> download -> register.

        Returns:
            The registered record, or None if the user aborted
        """
        if not term:
            term = click.prompt("Search term", default="", show_default=False).strip()
            if not term:
                click.echo("Aborted.")
                return None

        repos = self.search(term)
        if not repos:
            return None

        repo_id = self._pick("Select a model", repos, default=1)
        if repo_id is None:
            return None

        selection = build_selection(repo_id, self.hub.list_files(repo_id))
        self._print_candidates(selection)

        candidate = self._pick(
            "Select a file", selection.all_candidates, default=selection.recommended_index
        )
        if candidate is None:
            return None

        destination = self.layout.model_path(candidate.path)
        question = f"Download {candidate.path} ({candidate.size_gb:.2f} GB) to {destination}?"
        if not self._confirm(question, default=True):
            click.echo("Aborted.")
            return None

        self._download(repo_id, candidate.path)

        record = self.store.upsert(
            ModelRecord(
                source_repo=repo_id,
                filename=candidate.path,
                size_gb=candidate.size_gb,
                chat_template=detect_chat_template(repo_id),
            )
        )
        click.echo(f"Registered as '{record.name}'.")
        return record

    # ─────────────────────────────────────────────────────────
    # HELPERS
    # ─────────────────────────────────────────────────────────

    def _resolve(self, name: str) -> ModelRecord:
        models = self.store.require()
        record = models.get(name)
        if record is None:
            raise UnknownModelError(name, models.keys())
        return record

    def _download(self, repo_id: str, filename: str) -> DownloadResult:
        url = self.downloader.model_url(repo_id, filename)
        destination = self.layout.model_path(filename)

        click.echo(f"Downloading from: {url}")
        result = self.downloader.download(url, destination, progress_callback=_ProgressPrinter())

        if result.skipped:
            click.echo(f"WARNING: {destination} already exists, skipping download.")
        else:
            click.echo(
                f"Downloaded {result.bytes_written / GIB:.2f} GB in {result.elapsed:.1f}s"
            )
        return result

    def _pick(self, prompt: str, options: Sequence[T], default: int) -> Optional[T]:
        raw = click.prompt(prompt, default=str(default))
        outcome = choose(raw, options, default)

        if isinstance(outcome, Selected):
            return outcome.value
        if isinstance(outcome, Invalid):
            click.echo(f"ERROR: {outcome.error}", err=True)
        elif isinstance(outcome, Aborted):
            click.echo("Aborted.")
        return None

    def _confirm(self, question: str, default: bool) -> bool:
        if self.assume_yes:
            return True
        return click.confirm(question, default=default)

    def _print_candidates(self, selection: SelectionResult) -> None:
        click.echo(f"Files in {selection.source_repo}:")
        for i, candidate in enumerate(selection.all_candidates, start=1):
            marker = "  (recommended)" if candidate is selection.recommended else ""
            click.echo(f"  {i:>2}) {candidate.path}  {candidate.size_gb:.2f} GB{marker}")
