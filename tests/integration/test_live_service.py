"""
Integration tests against a running movie search service.

Requires environment variables:
  MOVIESEARCH_INTEGRATION  — any value enables these tests
  MOVIESEARCH_API_URL      — (optional) defaults to http://localhost:8000

Run: MOVIESEARCH_INTEGRATION=1 pytest tests/integration/ -v
"""

import os

import pytest

from moviesearch import AsyncMovieSearch, DecodeStatus, SessionStatus

SKIP = not os.environ.get("MOVIESEARCH_INTEGRATION")
BASE_URL = os.environ.get("MOVIESEARCH_API_URL", "http://localhost:8000")

pytestmark = pytest.mark.skipif(SKIP, reason="MOVIESEARCH_INTEGRATION not set")


def make_client() -> AsyncMovieSearch:
    return AsyncMovieSearch(base_url=BASE_URL, timeout=120.0)


class TestServiceChecks:
    @pytest.mark.asyncio
    async def test_health_and_ready(self):
        async with make_client() as client:
            assert (await client.health()).status
            ready = await client.ready()
            assert ready.models_loaded


class TestSingleShot:
    @pytest.mark.asyncio
    async def test_search_returns_ranked_movies(self):
        async with make_client() as client:
            result = await client.search("a heist that goes wrong", k=10)
        assert result.page.items
        assert len(result.page.items) <= 10
        ids = [m.id for m in result.page.items]
        assert len(ids) == len(set(ids))


class TestStreaming:
    @pytest.mark.asyncio
    async def test_results_then_overview(self):
        async with make_client() as client:
            orchestrator = client.orchestrator()
            seen = []
            orchestrator.add_listener(seen.append)
            orchestrator.submit("space exploration with a lonely astronaut", wants_overview=True)
            snap = await orchestrator.wait()

        assert snap.status == SessionStatus.SETTLED
        assert snap.error is None, snap.error
        assert snap.results is not None
        first_results = next(i for i, s in enumerate(seen) if s.results is not None)
        overviews = [i for i, s in enumerate(seen) if s.overview is not None]
        if overviews:
            assert first_results < overviews[0]
            assert snap.overview.decode_status in (DecodeStatus.OK, DecodeStatus.REPAIRED, DecodeStatus.EMPTY)

    @pytest.mark.asyncio
    async def test_supersede_mid_stream(self):
        async with make_client() as client:
            orchestrator = client.orchestrator()
            orchestrator.submit("romantic comedy in paris", wants_overview=True)
            second = orchestrator.submit("gritty detective noir", wants_overview=False)
            snap = await orchestrator.wait()

        assert snap.token == second
        assert snap.query.text == "gritty detective noir"
        assert snap.overview is None
