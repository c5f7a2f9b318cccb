import httpx
import pytest

from conftest import GIB, HUB_URL
from nobold.config import REQUEST_TIMEOUT
from nobold.models.errors import ListFilesError, NoModelFilesError, SearchError
from nobold.models.hub import HubClient, is_secondary_shard


def _client(handler) -> HubClient:
    return HubClient(HUB_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestSearchModels:
    def test_prefixes_query_and_keeps_remote_order(self, fake_hub):
        fake_hub.searches["GGUF llama"] = ["a/one", "b/two", "c/three", "d/four"]
        hub = HubClient(HUB_URL, client=fake_hub.client())

        assert hub.search_models("llama", limit=10) == ["a/one", "b/two", "c/three", "d/four"]
        assert len(fake_hub.requests) == 1
        assert fake_hub.requests[0].url.params["limit"] == "10"

    def test_few_results_broaden_without_prefix(self, fake_hub):
        fake_hub.searches["GGUF tinyllama"] = ["org/tinyllama-gguf", "org2/tiny-chat"]
        fake_hub.searches["tinyllama"] = [
            "org2/tiny-chat",
            "base/tinyllama",
            "x/1",
            "x/2",
            "x/3",
            "x/4",
            "x/5",
        ]
        hub = HubClient(HUB_URL, client=fake_hub.client())

        results = hub.search_models("tinyllama", limit=10)

        assert results == [
            "org/tinyllama-gguf",
            "org2/tiny-chat",
            "base/tinyllama",
            "x/1",
            "x/2",
            "x/3",
            "x/4",
        ]
        assert fake_hub.requests[1].url.params["limit"] == "6"

    def test_http_error_raises_search_error_with_url(self):
        hub = _client(lambda request: httpx.Response(503))

        with pytest.raises(SearchError) as exc_info:
            hub.search_models("llama", limit=5)

        assert exc_info.value.url.startswith(f"{HUB_URL}/api/models?")
        assert "search=GGUF" in exc_info.value.url

    def test_timeout_raises_search_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(SearchError):
            _client(handler).search_models("llama", limit=5)

    def test_broader_search_failure_keeps_first_results(self):
        def handler(request):
            if request.url.params["search"].startswith("GGUF "):
                return httpx.Response(200, json=[{"id": "org/only-one"}])
            return httpx.Response(500)

        assert _client(handler).search_models("rare", limit=5) == ["org/only-one"]


class TestListFiles:
    def test_filters_to_gguf_files_and_first_shard(self, fake_hub):
        repo = "org/big-gguf"
        fake_hub.add_file(repo, "README.md", 100)
        fake_hub.add_file(repo, "model.gguf", GIB)
        fake_hub.add_file(repo, "model-00001-of-00003.gguf", 2 * GIB)
        fake_hub.add_file(repo, "model-00002-of-00003.gguf", 2 * GIB)
        fake_hub.add_file(repo, "model-00003-of-00003.gguf", 2 * GIB)
        fake_hub.trees[repo].append({"type": "directory", "path": "dir.gguf", "size": 0})
        hub = HubClient(HUB_URL, client=fake_hub.client())

        files = hub.list_files(repo)

        assert [f.path for f in files] == ["model.gguf", "model-00001-of-00003.gguf"]
        assert files[0].size_gb == 1.0
        assert files[1].size_bytes == 2 * GIB

    def test_requests_recursive_tree(self, fake_hub):
        fake_hub.add_file("org/m", "sub/m-Q4_K_M.GGUF", GIB)
        hub = HubClient(HUB_URL, client=fake_hub.client())

        files = hub.list_files("org/m")

        assert [f.path for f in files] == ["sub/m-Q4_K_M.GGUF"]
        request = fake_hub.requests[0]
        assert request.url.path == "/api/models/org/m/tree/main"
        assert request.url.params["recursive"] == "true"

    def test_prefers_lfs_size(self):
        def handler(request):
            return httpx.Response(
                200,
                json=[{"type": "file", "path": "m.gguf", "size": 134, "lfs": {"size": 3 * GIB}}],
            )

        assert _client(handler).list_files("org/m")[0].size_gb == 3.0

    def test_skips_entries_without_a_path(self):
        def handler(request):
            return httpx.Response(
                200,
                json=[
                    {"type": "file", "path": None, "size": 10},
                    {"type": "file", "size": 10},
                    {"type": "file", "path": "m.gguf", "size": GIB},
                ],
            )

        assert [f.path for f in _client(handler).list_files("org/m")] == ["m.gguf"]

    def test_no_files_is_distinct_from_request_failure(self, fake_hub):
        fake_hub.add_file("org/no-gguf", "model.safetensors", GIB)
        hub = HubClient(HUB_URL, client=fake_hub.client())

        with pytest.raises(NoModelFilesError):
            hub.list_files("org/no-gguf")

        with pytest.raises(ListFilesError) as exc_info:
            hub.list_files("org/missing")
        assert not isinstance(exc_info.value, NoModelFilesError)
        assert exc_info.value.url.endswith("/api/models/org/missing/tree/main?recursive=true")


@pytest.mark.parametrize(
    "path, secondary",
    [
        ("model.gguf", False),
        ("model-00001-of-00003.gguf", False),
        ("model-00002-of-00003.gguf", True),
        ("Q8_0/model-Q8_0-00003-of-00003.gguf", True),
        ("model.gguf-part2of3.gguf", True),
        ("model-part1-of-2.gguf", False),
        ("model-00004-of-00003.gguf", False),  # unparseable, kept
        ("model-00000-of-00003.gguf", False),
        ("one-of-us-7b.gguf", False),
    ],
)
def test_is_secondary_shard(path, secondary):
    assert is_secondary_shard(path) is secondary


def test_requests_use_a_bounded_timeout():
    default = HubClient(HUB_URL).client.timeout
    assert default.read == REQUEST_TIMEOUT
    assert default.connect == REQUEST_TIMEOUT

    custom = HubClient(HUB_URL, timeout=12).client.timeout
    assert custom.read == 12
    assert custom.pool == 12
