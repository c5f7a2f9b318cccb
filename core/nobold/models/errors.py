"""
Errors raised by the model manager.
Every error carries a user-facing message and an optional hint line.
"""

from pathlib import Path
from typing import Iterable, Optional


class ModelManagerError(Exception):
    """Base class for failures reported to the user."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class RegistryError(ModelManagerError):
    """The registry file exists but cannot be read or written."""

    def __init__(self, path: Path, cause: Exception):
        super().__init__(
            f"Registry at {path} is unreadable: {cause}",
            hint="Fix or move the file aside; it will be recreated on the next download.",
        )
        self.path = path
        self.cause = cause


class RegistryNotFoundError(ModelManagerError):
    """The registry file is required but absent."""

    def __init__(self, path: Path):
        super().__init__(
            f"Registry not found at {path}",
            hint="Run 'manage-models browse' to find and download a model first.",
        )
        self.path = path


class UnknownModelError(ModelManagerError):
    """A model name is not present in the registry."""

    def __init__(self, name: str, known: Iterable[str]):
        self.name = name
        self.known = sorted(known)
        listing = ", ".join(self.known) if self.known else "(none)"
        super().__init__(
            f"Model '{name}' not found in registry",
            hint=f"Known models: {listing}",
        )


class RemoteRequestError(ModelManagerError):
    """A request to the model hub failed."""

    def __init__(self, message: str, url: str, cause: Optional[Exception] = None):
        super().__init__(message, hint=f"Try opening it manually: {url}")
        self.url = url
        self.cause = cause


class SearchError(RemoteRequestError):
    """Model search failed."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Search failed: {cause}", url, cause)


class ListFilesError(RemoteRequestError):
    """Listing a repository's files failed."""

    def __init__(self, repo_id: str, url: str, cause: Optional[Exception] = None):
        super().__init__(f"Could not list files for {repo_id}: {cause}", url, cause)
        self.repo_id = repo_id


class NoModelFilesError(ListFilesError):
    """The repository holds no usable model files."""

    def __init__(self, repo_id: str, url: str):
        super().__init__(repo_id, url)
        self.message = f"No GGUF files found in {repo_id}"
        self.args = (self.message,)


class DownloadError(ModelManagerError):
    """A file transfer failed; no partial file is left behind."""

    def __init__(self, url: str, destination: Path, cause: Exception):
        super().__init__(
            f"Download failed: {cause}",
            hint=f"Download it manually from {url} into {destination.parent}",
        )
        self.url = url
        self.destination = destination
        self.cause = cause


class InvalidSelectionError(ValueError):
    """An interactive choice was not a valid 1-based index."""

    def __init__(self, raw: str, count: int):
        super().__init__(f"Invalid selection '{raw}': expected a number from 1 to {count}")
        self.raw = raw
        self.count = count
