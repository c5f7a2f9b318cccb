"""
Registry of known models.
Maps a friendly name to the repository file it was acquired from.
"""

import os
import re
import tempfile
from datetime import date
from pathlib import Path
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    StringConstraints,
    ValidationError,
)

from nobold.config import DEFAULT_CHAT_TEMPLATE
from nobold.models.errors import RegistryError, RegistryNotFoundError
from nobold.utils.logging import logger

ModelName = Annotated[str, StringConstraints(pattern=r"^[a-z0-9]+$")]

_NON_SLUG = re.compile(r"[^a-z0-9]")


class ModelRecord(BaseModel):
    """A model known to the registry."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", exclude=True)  # Registry key, not stored in the value
    source_repo: str = Field(alias="hf_repo")  # "TheBloke/Llama-2-7B-GGUF"
    filename: str  # Path inside the repo: "llama-2-7b.Q4_K_M.gguf"
    size_gb: float = 0.0
    chat_template: str = DEFAULT_CHAT_TEMPLATE
    added_date: date = Field(default_factory=date.today)


class RegistryDocument(RootModel[dict[ModelName, ModelRecord]]):
    """On-disk shape of registry.json."""


Registry = dict[str, ModelRecord]


def slugify(source_repo: str) -> str:
    """Base registry key for a repository: last segment, lowercase alphanumerics."""
    slug = _NON_SLUG.sub("", source_repo.rstrip("/").split("/")[-1].lower())
    return slug or "model"


def unique_name(base: str, existing: Registry) -> str:
    """Append 1, 2, ... to base until it is not a key of existing."""
    name = base
    counter = 1
    while name in existing:
        name = f"{base}{counter}"
        counter += 1
    return name


class RegistryStore:
    """
    Reads and writes registry.json.
    Every mutation rewrites the whole file through an atomic replace.
    """

    def __init__(self, registry_file: Path):
        self.registry_file = registry_file

    def exists(self) -> bool:
        return self.registry_file.is_file()

    def load(self) -> Registry:
        """Load the registry; an absent file is an empty registry."""
        if not self.exists():
            return {}

        try:
            document = RegistryDocument.model_validate_json(self.registry_file.read_bytes())
        except (OSError, ValidationError) as e:
            raise RegistryError(self.registry_file, e) from e

        models = {
            name: record.model_copy(update={"name": name})
            for name, record in document.root.items()
        }
        logger.debug(f"Loaded {len(models)} models from {self.registry_file}")
        return models

    def require(self) -> Registry:
        """Load the registry, failing when it has never been created."""
        if not self.exists():
            raise RegistryNotFoundError(self.registry_file)
        return self.load()

    def save(self, models: Registry) -> None:
        """Replace the registry file with the given mapping."""
        try:
            document = RegistryDocument(models)
        except ValidationError as e:
            raise RegistryError(self.registry_file, e) from e

        payload = document.model_dump_json(indent=2, by_alias=True) + "\n"
        self.registry_file.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.registry_file.parent, prefix=".registry-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.registry_file)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise RegistryError(self.registry_file, e) from e

        logger.debug(f"Saved {len(models)} models to {self.registry_file}")

    def upsert(self, record: ModelRecord) -> ModelRecord:
        """
        Register a model under a fresh unique name and persist.

        Args:
            record: The record to add; its name is ignored

        Returns:
            The stored record, with its assigned name
        """
        models = self.load()
        name = unique_name(slugify(record.source_repo), models)
        stored = record.model_copy(update={"name": name})

        models[name] = stored
        self.save(models)

        logger.info(f"Registered model: {name} ({record.source_repo})")
        return stored
