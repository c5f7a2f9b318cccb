"""Shared fixtures: a fake model hub served through httpx.MockTransport."""

from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from nobold.config import InstallLayout
from nobold.engine.model_manager import ModelManager
from nobold.models.downloader import Downloader
from nobold.models.hub import HubClient

HUB_URL = "https://hub.test"
GIB = 2**30


@dataclass
class FakeHub:
    """In-memory stand-in for the hub's search, tree and resolve endpoints."""

    searches: dict[str, list[str]] = field(default_factory=dict)
    trees: dict[str, list[dict]] = field(default_factory=dict)
    files: dict[str, bytes] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def add_file(self, repo_id: str, path: str, size_bytes: int, content: bytes = b"GGUF") -> None:
        self.trees.setdefault(repo_id, []).append(
            {"type": "file", "path": path, "size": size_bytes}
        )
        self.files[f"{repo_id}/{path}"] = content

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/models":
            ids = self.searches.get(request.url.params["search"], [])
            limit = int(request.url.params["limit"])
            return httpx.Response(200, json=[{"id": i} for i in ids[:limit]])

        if path.startswith("/api/models/") and path.endswith("/tree/main"):
            repo_id = path[len("/api/models/"):-len("/tree/main")]
            if repo_id not in self.trees:
                return httpx.Response(404, json={"error": "Repository not found"})
            return httpx.Response(200, json=self.trees[repo_id])

        if "/resolve/main/" in path:
            repo_id, file_path = path.lstrip("/").split("/resolve/main/", 1)
            content = self.files.get(f"{repo_id}/{file_path}")
            if content is None:
                return httpx.Response(404)
            return httpx.Response(200, content=content)

        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def layout(tmp_path: Path) -> InstallLayout:
    return InstallLayout(tmp_path / "koboldcpp")


@pytest.fixture
def make_manager(fake_hub: FakeHub, layout: InstallLayout):
    def factory(**kwargs) -> ModelManager:
        return ModelManager(
            layout,
            hub=HubClient(HUB_URL, client=fake_hub.client()),
            downloader=Downloader(HUB_URL, client=fake_hub.client()),
            **kwargs,
        )

    return factory
