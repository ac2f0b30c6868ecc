"""Tests for the single-shot search API, client facades and configuration."""

import json

import httpx
import pytest

from moviesearch.client import AsyncMovieSearch, MovieSearch
from moviesearch.config import API_URL_ENV, SearchConfig, load_config, save_config
from moviesearch.errors import MalformedFrameError, ServerError, TransportError
from moviesearch.models.overview import DecodeStatus
from moviesearch.search import SearchAPI

from helpers import MISSING_COMMA_PAYLOAD, OVERVIEW_DOC, RESULTS_BODY, make_http


def route(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/health":
        return httpx.Response(200, json={"status": "healthy"})
    if request.url.path == "/ready":
        return httpx.Response(200, json={"status": "ready", "models_loaded": True, "load_times": {"encoder": 1.25}})
    if request.url.path == "/search":
        body = dict(RESULTS_BODY)
        if request.url.params.get("ai_overview") == "true":
            body["ai_overview"] = dict(OVERVIEW_DOC, ai_metadata={"model": "llama3.2:3b", "status": "success"})
        return httpx.Response(200, json=body)
    return httpx.Response(404, text="not found")


class TestSearchAPI:
    @pytest.mark.asyncio
    async def test_search_without_overview(self):
        result = await SearchAPI(make_http(route)).search("heist movies", k=2)
        assert result.page.query == "heist movies"
        assert result.page.total_count == 2
        assert result.page.items[1].poster_path == "/inside.jpg"
        assert result.page.timings.total_ms == 42.0
        assert result.overview is None

    @pytest.mark.asyncio
    async def test_search_with_overview(self):
        result = await SearchAPI(make_http(route)).search("heist movies", ai_overview=True)
        assert result.overview is not None
        assert result.overview.decode_status == DecodeStatus.OK
        assert result.overview.summary_text == OVERVIEW_DOC["overview"]
        assert result.overview.metadata.model == "llama3.2:3b"

    @pytest.mark.asyncio
    async def test_parse_error_overview_is_decoded(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = dict(RESULTS_BODY, ai_overview={
                "overview": MISSING_COMMA_PAYLOAD,
                "movie_explanations": [],
                "ai_metadata": {"status": "parse_error"},
            })
            return httpx.Response(200, json=body)

        result = await SearchAPI(make_http(handler)).search("heist", ai_overview=True)
        assert result.overview.decode_status == DecodeStatus.REPAIRED
        assert result.overview.summary_text == "Great picks"

    @pytest.mark.asyncio
    async def test_http_error(self):
        api = SearchAPI(make_http(lambda request: httpx.Response(502, text="bad gateway")))
        with pytest.raises(TransportError) as exc:
            await api.search("heist")
        assert exc.value.status_code == 502

    @pytest.mark.asyncio
    async def test_not_json(self):
        api = SearchAPI(make_http(lambda request: httpx.Response(200, text="<html></html>")))
        with pytest.raises(MalformedFrameError):
            await api.search("heist")

    @pytest.mark.asyncio
    async def test_wrong_shape(self):
        api = SearchAPI(make_http(lambda request: httpx.Response(200, json={"results": []})))
        with pytest.raises(MalformedFrameError):
            await api.search("heist")

    @pytest.mark.asyncio
    async def test_error_body_is_server_error(self):
        api = SearchAPI(make_http(lambda request: httpx.Response(200, json={"error": "index not loaded"})))
        with pytest.raises(ServerError) as exc:
            await api.search("heist")
        assert exc.value.code == "server_error"
        assert str(exc.value) == "index not loaded"

    @pytest.mark.asyncio
    async def test_health_and_ready(self):
        api = SearchAPI(make_http(route))
        assert (await api.health()).status == "healthy"
        ready = await api.ready()
        assert ready.models_loaded
        assert ready.load_times == {"encoder": 1.25}


class TestClient:
    @pytest.mark.asyncio
    async def test_defaults_flow_into_requests(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return route(request)

        async with AsyncMovieSearch(
            base_url="http://search.test/", result_count=12, alpha=0.3, transport=httpx.MockTransport(handler),
        ) as client:
            assert client.http.base_url == "http://search.test"
            await client.search("heist")

        assert requests[0].url.params["k"] == "12"
        assert requests[0].url.params["alpha"] == "0.3"

    @pytest.mark.asyncio
    async def test_orchestrator_uses_client_defaults(self):
        async with AsyncMovieSearch(transport=httpx.MockTransport(route), result_count=5) as client:
            orchestrator = client.orchestrator()
            orchestrator.submit("heist")
            snap = await orchestrator.wait()
        assert snap.query.result_count == 5
        assert snap.results.total_count == 2

    def test_sync_wrapper(self):
        client = MovieSearch(base_url="http://search.test", transport=httpx.MockTransport(route))
        try:
            assert client.health().status == "healthy"
            result = client.search("heist", ai_overview=True)
            assert result.overview.summary_text == OVERVIEW_DOC["overview"]
        finally:
            client.close()


class TestConfig:
    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv(API_URL_ENV, raising=False)
        assert load_config(tmp_path / "missing.json") == SearchConfig()

    def test_invalid_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv(API_URL_ENV, raising=False)
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert load_config(path) == SearchConfig()
        path.write_text(json.dumps({"alpha": 7}))
        assert load_config(path) == SearchConfig()

    def test_saved_values_are_loaded(self, tmp_path, monkeypatch):
        monkeypatch.delenv(API_URL_ENV, raising=False)
        path = tmp_path / "nested" / "config.json"
        save_config(SearchConfig(base_url="http://films.example", result_count=10), path)
        cfg = load_config(path)
        assert cfg.base_url == "http://films.example"
        assert cfg.result_count == 10

    def test_env_overrides_base_url(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        save_config(SearchConfig(base_url="http://films.example"), path)
        monkeypatch.setenv(API_URL_ENV, "http://override.example")
        assert load_config(path).base_url == "http://override.example"
        assert load_config(path, apply_env=False).base_url == "http://films.example"
