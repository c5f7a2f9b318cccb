"""
Download model files from the hub.
Streams into a temporary file and only moves it into place once complete.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx
from huggingface_hub import hf_hub_url

from nobold.config import CONNECT_TIMEOUT, HUB_URL
from nobold.models.errors import DownloadError
from nobold.utils.logging import logger

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class DownloadResult:
    """Outcome of a download."""

    path: Path
    bytes_written: int
    elapsed: float  # seconds
    skipped: bool = False  # Destination already existed


class Downloader:
    """
    Transfers a remote file to a local path.
    No resume support: a failed transfer restarts from zero.
    """

    def __init__(self, hub_url: str = HUB_URL, client: Optional[httpx.Client] = None):
        self.hub_url = hub_url.rstrip("/")
        # No read timeout: transfer time scales with file size.
        self.client = client or httpx.Client(
            follow_redirects=True,
            timeout=httpx.Timeout(None, connect=CONNECT_TIMEOUT),
        )

    def close(self) -> None:
        self.client.close()

    def model_url(self, repo_id: str, filename: str) -> str:
        """Resolve URL of a file on the main branch of a repository."""
        return hf_hub_url(repo_id, filename, endpoint=self.hub_url)

    def download(
        self,
        url: str,
        destination: Path,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> DownloadResult:
        """
        Download url to destination.

        Args:
            url: Source URL
            destination: Final file path; parents are created
            progress_callback: Optional callback (downloaded_bytes, total_bytes)

        Returns:
            DownloadResult; skipped is set when destination already existed

        Raises:
            DownloadError: The transfer failed; nothing is left at destination
        """
        if destination.exists():
            logger.info(f"{destination} already exists, skipping download")
            return DownloadResult(
                path=destination,
                bytes_written=destination.stat().st_size,
                elapsed=0.0,
                skipped=True,
            )

        partial = destination.with_name(destination.name + ".part")
        started = time.monotonic()
        logger.info(f"Downloading {url} -> {destination}")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            downloaded = self._stream(url, partial, progress_callback)
            partial.replace(destination)
        except (httpx.HTTPError, OSError) as e:
            self._discard(partial, destination)
            logger.error(f"Download failed: {e}")
            raise DownloadError(url, destination, e) from e
        except BaseException:
            self._discard(partial, destination)
            logger.info(f"Download interrupted: {url}")
            raise

        elapsed = time.monotonic() - started
        logger.info(f"Downloaded {downloaded} bytes in {elapsed:.1f}s")
        return DownloadResult(path=destination, bytes_written=downloaded, elapsed=elapsed)

    def _stream(
        self,
        url: str,
        target: Path,
        progress_callback: Optional[Callable[[int, int], None]],
    ) -> int:
        with self.client.stream("GET", url) as response:
            response.raise_for_status()

            total_size = int(response.headers.get("content-length", 0))
            downloaded = 0

            if progress_callback:
                progress_callback(0, total_size)

            with open(target, "wb") as f:
                for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)

                        if progress_callback:
                            progress_callback(downloaded, total_size)

        return downloaded

    @staticmethod
    def _discard(*paths: Path) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")
