"""
Streaming query channel — one server-push connection per query.

The stream delivers `results`, then optionally `overview`, then a terminator
(`done` or `error`). Each frame is demultiplexed into a typed callback.

Guarantees per opened channel:
- exactly one terminal callback: on_done or on_error, never both
- on_results at most once, always before on_overview
- nothing fires after cancel(), even for data already read in the same tick
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from moviesearch.errors import TransportError
from moviesearch.models.events import KNOWN_EVENTS, StreamEvent
from moviesearch.models.query import DEFAULT_ALPHA, ErrorKind
from moviesearch.models.results import ResultPage
from moviesearch.search import SEARCH_PATH, search_params
from moviesearch.transport.http import HttpClient
from moviesearch.transport.sse import ServerSentEvent, SSEDecoder

logger = logging.getLogger("moviesearch.channel")

MALFORMED_RESULTS = "malformed results frame"
MALFORMED_OVERVIEW = "malformed overview frame"
OVERVIEW_BEFORE_RESULTS = "overview frame before results"
STREAM_CLOSED = "stream closed before completion"
HANDLER_FAILED = "stream handler failed"


@dataclass(frozen=True)
class ChannelError:
    kind: ErrorKind
    reason: str


@dataclass
class ChannelHandlers:
    on_results: Optional[Callable[[ResultPage], None]] = None
    on_overview: Optional[Callable[[str], None]] = None
    on_error: Optional[Callable[[ChannelError], None]] = None
    on_done: Optional[Callable[[], None]] = None


class ChannelHandle:
    """Cancelable handle for one opened channel."""

    def __init__(self, handlers: ChannelHandlers):
        self._handlers = handlers
        self._open = True
        self._terminated = False
        self._results_seen = False
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def closed(self) -> bool:
        return not self._open

    @property
    def terminated(self) -> bool:
        """True once on_done or on_error has fired."""
        return self._terminated

    def cancel(self) -> None:
        """Stop delivery and release the stream. Idempotent."""
        if self._open:
            self._open = False
            logger.debug("Channel cancelled")
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def _attach(self, task: "asyncio.Task[None]") -> None:
        self._task = task

    def _dispatch(self, sse: ServerSentEvent) -> None:
        if not self._open:
            return
        if sse.event not in KNOWN_EVENTS:
            logger.debug(f"Ignoring unknown stream event {sse.event!r}")
            return

        if sse.event == StreamEvent.RESULTS:
            if self._results_seen:
                logger.warning("Duplicate results frame ignored")
                return
            try:
                page = ResultPage.model_validate_json(sse.data)
            except ValidationError:
                self._fail(ErrorKind.MALFORMED_FRAME, MALFORMED_RESULTS)
                return
            self._results_seen = True
            self._emit(self._handlers.on_results, page)

        elif sse.event == StreamEvent.OVERVIEW:
            if not self._results_seen:
                self._fail(ErrorKind.MALFORMED_FRAME, OVERVIEW_BEFORE_RESULTS)
                return
            raw = _overview_payload(sse.data)
            if raw is None:
                self._fail(ErrorKind.MALFORMED_FRAME, MALFORMED_OVERVIEW)
                return
            self._emit(self._handlers.on_overview, raw)

        elif sse.event == StreamEvent.ERROR:
            self._fail(ErrorKind.SERVER, _error_reason(sse.data))

        elif sse.event == StreamEvent.DONE:
            self._finish()

    def _emit(self, callback: Optional[Callable[..., None]], *args: Any) -> None:
        if self._open and callback is not None:
            callback(*args)

    def _finish(self) -> None:
        if not self._open:
            return
        self._open = False
        self._terminated = True
        if self._handlers.on_done is not None:
            self._handlers.on_done()

    def _fail(self, kind: ErrorKind, reason: str) -> None:
        if not self._open:
            return
        self._open = False
        self._terminated = True
        if self._handlers.on_error is not None:
            self._handlers.on_error(ChannelError(kind, reason))


class StreamingQueryChannel:
    def __init__(self, http: HttpClient):
        self._http = http

    def open(
        self,
        query: str,
        result_count: int,
        handlers: ChannelHandlers,
        alpha: float = DEFAULT_ALPHA,
    ) -> ChannelHandle:
        """Open the event stream for `query`. Must be called from within the running loop."""
        handle = ChannelHandle(handlers)
        params = search_params(query, result_count, alpha, ai_overview=True, stream=True)
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(handle, params))
        task.add_done_callback(_log_task_failure)
        handle._attach(task)
        return handle

    async def _run(self, handle: ChannelHandle, params: dict[str, Any]) -> None:
        decoder = SSEDecoder()
        try:
            async with self._http.stream(SEARCH_PATH, params=params) as resp:
                async for line in resp.aiter_lines():
                    sse = decoder.feed(line)
                    if sse is not None:
                        handle._dispatch(sse)
                    if handle.closed:
                        return
                sse = decoder.flush()
                if sse is not None:
                    handle._dispatch(sse)
        except TransportError as e:
            logger.error(f"Stream request failed: {e}")
            handle._fail(ErrorKind.TRANSPORT, str(e))
            return
        except httpx.HTTPError as e:
            logger.error(f"Stream connection lost: {e}")
            handle._fail(ErrorKind.TRANSPORT, f"connection lost: {e}")
            return
        except Exception as e:
            logger.exception("Stream handler failed")
            handle._fail(ErrorKind.TRANSPORT, f"{HANDLER_FAILED}: {e}")
            return
        handle._fail(ErrorKind.TRANSPORT, STREAM_CLOSED)


def _overview_payload(data: str) -> Optional[str]:
    """Raw overview text for the decoder, or None when the frame body is unusable."""
    if not data.strip():
        return None
    try:
        parsed = json.loads(data)
    except ValueError:
        return data  # raw generator output; the decoder repairs what it can
    if isinstance(parsed, dict):
        return data
    if isinstance(parsed, str):
        return parsed
    return None


def _error_reason(data: str) -> str:
    try:
        parsed = json.loads(data)
    except ValueError:
        return data.strip() or "search failed"
    if isinstance(parsed, dict):
        for key in ("message", "error", "detail"):
            value = parsed.get(key)
            if isinstance(value, str) and value:
                return value
    return "search failed"


def _log_task_failure(task: "asyncio.Task[None]") -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Channel reader crashed", exc_info=task.exception())
