"""
Client for the model hub's search and file-tree endpoints.
Queries are anonymous, bounded by a timeout and never retried.
"""

import re
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, computed_field

from nobold.config import (
    FALLBACK_SEARCH_LIMIT,
    HUB_URL,
    MODEL_EXTENSION,
    REQUEST_TIMEOUT,
    SEARCH_PREFIX,
)
from nobold.models.errors import ListFilesError, NoModelFilesError, SearchError
from nobold.utils.logging import logger

# "model-00002-of-00003.gguf", "model.gguf-part2of3.gguf", "model-part2-of-3.gguf"
_SHARD_PATTERN = re.compile(
    r"[-_.](?:part)?(?P<index>\d+)-?of-?(?P<total>\d+)\.gguf$", re.IGNORECASE
)

# Too few prefixed results triggers a broader, unprefixed search.
_BROADEN_THRESHOLD = 3


class CandidateFile(BaseModel):
    """A model file offered by a repository."""

    path: str
    size_bytes: int = 0

    @computed_field
    @property
    def size_gb(self) -> float:
        return round(self.size_bytes / 2**30, 2)


def is_secondary_shard(path: str) -> bool:
    """
    True for the second and later parts of a split model.

    Names that look split but do not parse into a sane index/total
    are treated as standalone files and kept.
    """
    match = _SHARD_PATTERN.search(path)
    if not match:
        return False

    index = int(match.group("index"))
    total = int(match.group("total"))
    if index == 0 or total == 0 or index > total:
        return False
    return index != 1


class HubClient:
    """Searches the hub for GGUF repositories and lists their files."""

    def __init__(
        self,
        hub_url: str = HUB_URL,
        timeout: float = REQUEST_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        self.hub_url = hub_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        self.client.close()

    def search_url(self, term: str, limit: int) -> str:
        return str(
            httpx.URL(f"{self.hub_url}/api/models", params={"search": term, "limit": limit})
        )

    def tree_url(self, repo_id: str) -> str:
        return f"{self.hub_url}/api/models/{quote(repo_id)}/tree/main?recursive=true"

    def _get_json(self, url: str) -> Any:
        response = self.client.get(url)
        response.raise_for_status()
        return response.json()

    def _search(self, term: str, limit: int) -> list[str]:
        url = self.search_url(term, limit)
        logger.debug(f"GET {url}")
        try:
            data = self._get_json(url)
        except (httpx.HTTPError, ValueError) as e:
            raise SearchError(url, e) from e

        if not isinstance(data, list):
            raise SearchError(url, ValueError("unexpected response shape"))

        return [item["id"] for item in data if isinstance(item, dict) and item.get("id")]

    def search_models(self, term: str, limit: int) -> list[str]:
        """
        Search for repositories, biased toward GGUF artifacts.

        Args:
            term: Search term (e.g., "tinyllama", "mistral 7b")
            limit: Maximum number of prefixed results

        Returns:
            Repository ids in relevance order
        """
        results = self._search(f"{SEARCH_PREFIX} {term}", limit)

        if len(results) <= _BROADEN_THRESHOLD:
            logger.info(f"Only {len(results)} GGUF results for '{term}', broadening search")
            try:
                broader = self._search(term, FALLBACK_SEARCH_LIMIT)
            except SearchError as e:
                logger.warning(f"Broader search failed, keeping GGUF results: {e}")
                broader = []

            seen = set(results)
            for repo_id in broader:
                if repo_id not in seen:
                    seen.add(repo_id)
                    results.append(repo_id)

        return results

    def list_files(self, repo_id: str) -> list[CandidateFile]:
        """
        List the downloadable model files of a repository.

        Only the first part of a split model is kept.

        Raises:
            NoModelFilesError: The repository has no qualifying files
            ListFilesError: The request failed
        """
        url = self.tree_url(repo_id)
        logger.debug(f"GET {url}")
        try:
            entries = self._get_json(url)
        except (httpx.HTTPError, ValueError) as e:
            raise ListFilesError(repo_id, url, e) from e

        if not isinstance(entries, list):
            raise ListFilesError(repo_id, url, ValueError("unexpected response shape"))

        candidates = []
        for entry in entries:
            if not isinstance(entry, dict) or entry.get("type") != "file":
                continue
            path = entry.get("path")
            if not isinstance(path, str) or not path.lower().endswith(MODEL_EXTENSION):
                continue
            if is_secondary_shard(path):
                logger.debug(f"Skipping shard: {path}")
                continue

            lfs = entry.get("lfs") or {}
            size = lfs.get("size") or entry.get("size") or 0
            candidates.append(CandidateFile(path=path, size_bytes=int(size)))

        if not candidates:
            raise NoModelFilesError(repo_id, url)

        logger.info(f"Found {len(candidates)} model files in {repo_id}")
        return candidates
