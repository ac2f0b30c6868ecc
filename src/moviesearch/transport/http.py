"""
REST / event-stream HTTP client for the movie search service.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from moviesearch.errors import MalformedFrameError, TransportError

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT_S = 30.0
USER_AGENT = "moviesearch-client/0.1.0"


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        try:
            resp = await self._client.get(path, params=params, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {path} failed: {e}") from e
        if resp.status_code >= 400:
            raise TransportError(f"HTTP {resp.status_code}: {resp.text[:200]}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedFrameError(f"Response from {path} is not valid JSON: {e}") from e

    @asynccontextmanager
    async def stream(self, path: str, params: Optional[dict[str, Any]] = None) -> AsyncIterator[httpx.Response]:
        """Open an event-stream response. The body is released when the block exits."""
        async with self._client.stream(
            "GET", path, params=params, headers={"Accept": "text/event-stream"},
        ) as resp:
            if resp.status_code >= 400:
                body = await resp.aread()
                raise TransportError(
                    f"HTTP {resp.status_code}: {body.decode(errors='replace')[:200]}",
                    status_code=resp.status_code,
                )
            yield resp

    async def close(self) -> None:
        await self._client.aclose()
