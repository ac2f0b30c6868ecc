"""
Search REST API — single-shot search and service health checks.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from moviesearch.decoder import OverviewDecoder
from moviesearch.errors import MalformedFrameError, ServerError
from moviesearch.models.overview import Overview
from moviesearch.models.query import DEFAULT_ALPHA, DEFAULT_RESULT_COUNT
from moviesearch.models.results import HealthStatus, ReadyStatus, ResultPage
from moviesearch.transport.http import HttpClient

logger = logging.getLogger("moviesearch.search")

SEARCH_PATH = "/search"

_M = TypeVar("_M", bound=BaseModel)


class SearchResult(BaseModel):
    """Single-shot search response: the result page plus the overview, when requested."""

    page: ResultPage
    overview: Optional[Overview] = None


def search_params(
    query: str,
    k: int = DEFAULT_RESULT_COUNT,
    alpha: float = DEFAULT_ALPHA,
    ai_overview: bool = False,
    stream: bool = False,
) -> dict[str, Any]:
    params: dict[str, Any] = {"q": query, "k": k, "alpha": alpha, "ai_overview": ai_overview}
    if stream:
        params["stream"] = True
    return params


class SearchAPI:
    def __init__(self, http: HttpClient, decoder: Optional[OverviewDecoder] = None):
        self._http = http
        self._decoder = decoder or OverviewDecoder()

    @property
    def http(self) -> HttpClient:
        return self._http

    async def search(
        self,
        query: str,
        k: int = DEFAULT_RESULT_COUNT,
        alpha: float = DEFAULT_ALPHA,
        ai_overview: bool = False,
    ) -> SearchResult:
        """Hybrid search; with ai_overview the response waits for generation to finish."""
        data = await self._http.get(SEARCH_PATH, params=search_params(query, k, alpha, ai_overview))
        if not isinstance(data, dict):
            raise MalformedFrameError("malformed search response")
        if "results" not in data and "items" not in data:
            message = data.get("error") or data.get("message")
            if isinstance(message, str) and message:
                logger.error(f"Search {query!r} rejected by service: {message}")
                raise ServerError(message, details=data)
        page = _validate(ResultPage, data, "search response")

        overview = None
        raw_overview = data.get("ai_overview")
        if raw_overview is not None:
            raw = raw_overview if isinstance(raw_overview, str) else json.dumps(raw_overview)
            overview = self._decoder.decode(raw)
        logger.debug(f"Search {query!r}: {len(page.items)} of {page.total_count} results")
        return SearchResult(page=page, overview=overview)

    async def health(self) -> HealthStatus:
        return _validate(HealthStatus, await self._http.get("/health"), "health response")

    async def ready(self) -> ReadyStatus:
        """Whether the service has finished loading its models."""
        return _validate(ReadyStatus, await self._http.get("/ready"), "ready response")


def _validate(model: type[_M], data: Any, what: str) -> _M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedFrameError(f"malformed {what}", details={"errors": e.errors()}) from e
