"""Configuration settings for the nobold model manager."""

import os
from dataclasses import dataclass
from pathlib import Path

from huggingface_hub import constants as hf_constants

# Paths
INSTALL_DIR = Path(os.environ.get("INSTALL_DIR", Path.home() / ".koboldcpp")).expanduser()

# Hub
HUB_URL = hf_constants.ENDPOINT.rstrip("/")
REQUEST_TIMEOUT = float(os.environ.get("NOBOLD_HTTP_TIMEOUT", "15"))
CONNECT_TIMEOUT = 15.0

# Search
DEFAULT_SEARCH_LIMIT = int(os.environ.get("NOBOLD_SEARCH_LIMIT", "10"))
FALLBACK_SEARCH_LIMIT = 6
SEARCH_PREFIX = "GGUF"

# Models
MODEL_EXTENSION = ".gguf"
DEFAULT_CHAT_TEMPLATE = "auto"


@dataclass(frozen=True)
class InstallLayout:
    """Paths the model manager uses under an install root."""

    root: Path

    @property
    def models_dir(self) -> Path:
        return self.root / "models"

    @property
    def files_dir(self) -> Path:
        return self.models_dir / "files"

    @property
    def registry_file(self) -> Path:
        return self.models_dir / "registry.json"

    def model_path(self, filename: str) -> Path:
        """Local path for a repository file; subfolders are flattened."""
        return self.files_dir / Path(filename).name
