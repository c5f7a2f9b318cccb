"""Models module - model search, selection, download and registry."""

from nobold.models.downloader import Downloader, DownloadResult
from nobold.models.errors import (
    DownloadError,
    InvalidSelectionError,
    ListFilesError,
    ModelManagerError,
    NoModelFilesError,
    RegistryError,
    RegistryNotFoundError,
    SearchError,
    UnknownModelError,
)
from nobold.models.hub import CandidateFile, HubClient
from nobold.models.registry import ModelRecord, RegistryStore
from nobold.models.selector import (
    QUANT_PREFERENCE,
    SelectionResult,
    build_selection,
    select_best,
)
from nobold.models.templates import detect_chat_template

__all__ = [
    "Downloader",
    "DownloadResult",
    "DownloadError",
    "InvalidSelectionError",
    "ListFilesError",
    "ModelManagerError",
    "NoModelFilesError",
    "RegistryError",
    "RegistryNotFoundError",
    "SearchError",
    "UnknownModelError",
    "CandidateFile",
    "HubClient",
    "ModelRecord",
    "RegistryStore",
    "QUANT_PREFERENCE",
    "SelectionResult",
    "build_selection",
    "select_best",
    "detect_chat_template",
]
