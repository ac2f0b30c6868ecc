"""
AsyncMovieSearch / MovieSearch — main client facades.
"""

import asyncio
from typing import Any, Optional

import httpx

from moviesearch.channel import ChannelHandle, ChannelHandlers, StreamingQueryChannel
from moviesearch.config import SearchConfig
from moviesearch.decoder import OverviewDecoder
from moviesearch.models.query import DEFAULT_ALPHA, DEFAULT_RESULT_COUNT
from moviesearch.models.results import HealthStatus, ReadyStatus
from moviesearch.orchestrator import QueryOrchestrator
from moviesearch.reveal import DEFAULT_INTERVAL_S, IncrementalTextRevealer
from moviesearch.search import SearchAPI, SearchResult
from moviesearch.transport.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_S, HttpClient


class AsyncMovieSearch:
    """Async movie search client (primary)."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        result_count: int = DEFAULT_RESULT_COUNT,
        alpha: float = DEFAULT_ALPHA,
        reveal_interval: float = DEFAULT_INTERVAL_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._result_count = result_count
        self._alpha = alpha
        self._reveal_interval = reveal_interval

        self.http = HttpClient(base_url=base_url, timeout=timeout, transport=transport)
        self.decoder = OverviewDecoder()
        self.api = SearchAPI(self.http, self.decoder)
        self.channel = StreamingQueryChannel(self.http)

    @property
    def result_count(self) -> int:
        return self._result_count

    @property
    def alpha(self) -> float:
        return self._alpha

    @classmethod
    def from_config(cls, cfg: SearchConfig, **kwargs: Any) -> "AsyncMovieSearch":
        return cls(
            base_url=cfg.base_url,
            timeout=cfg.timeout,
            result_count=cfg.result_count,
            alpha=cfg.alpha,
            reveal_interval=cfg.reveal_interval,
            **kwargs,
        )

    async def __aenter__(self) -> "AsyncMovieSearch":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def search(
        self,
        query: str,
        k: Optional[int] = None,
        alpha: Optional[float] = None,
        ai_overview: bool = False,
    ) -> SearchResult:
        """Single-shot search. With ai_overview the call returns only once generation is done."""
        return await self.api.search(
            query,
            k=k if k is not None else self._result_count,
            alpha=alpha if alpha is not None else self._alpha,
            ai_overview=ai_overview,
        )

    def stream(
        self,
        query: str,
        handlers: ChannelHandlers,
        k: Optional[int] = None,
        alpha: Optional[float] = None,
    ) -> ChannelHandle:
        """Open a two-phase stream: results first, overview later."""
        return self.channel.open(
            query,
            k if k is not None else self._result_count,
            handlers,
            alpha=alpha if alpha is not None else self._alpha,
        )

    def orchestrator(self) -> QueryOrchestrator:
        return QueryOrchestrator(
            self.api,
            self.channel,
            self.decoder,
            result_count=self._result_count,
            alpha=self._alpha,
        )

    def revealer(self) -> IncrementalTextRevealer:
        return IncrementalTextRevealer(interval=self._reveal_interval)

    async def health(self) -> HealthStatus:
        return await self.api.health()

    async def ready(self) -> ReadyStatus:
        return await self.api.ready()

    async def close(self) -> None:
        await self.http.close()


class MovieSearch:
    """Sync wrapper around AsyncMovieSearch. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._loop = asyncio.new_event_loop()
        self._async = AsyncMovieSearch(**kwargs)

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    def search(
        self,
        query: str,
        k: Optional[int] = None,
        alpha: Optional[float] = None,
        ai_overview: bool = False,
    ) -> SearchResult:
        return self._run(self._async.search(query, k=k, alpha=alpha, ai_overview=ai_overview))

    def health(self) -> HealthStatus:
        return self._run(self._async.health())

    def ready(self) -> ReadyStatus:
        return self._run(self._async.ready())

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()
