"""
Query orchestrator — owns the lifecycle of "the current search".

Session states:
  idle -> loading -> overview_pending (streaming only) -> settled

Every transport callback is bound to the token of the session that created
it. A callback whose token is no longer current is dropped, so a superseded
query can never leak into the session that replaced it, whatever order the
transport delivers in.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, Optional, Protocol, Union

from moviesearch.channel import ChannelError, ChannelHandlers, StreamingQueryChannel
from moviesearch.decoder import OverviewDecoder
from moviesearch.errors import MalformedFrameError, MovieSearchError, ServerError
from moviesearch.models.overview import Overview
from moviesearch.models.query import (
    DEFAULT_ALPHA,
    DEFAULT_RESULT_COUNT,
    ErrorKind,
    Query,
    QueryError,
    SessionSnapshot,
    SessionStatus,
)
from moviesearch.models.results import ResultPage
from moviesearch.search import SearchAPI

logger = logging.getLogger("moviesearch.orchestrator")

Listener = Callable[[SessionSnapshot], None]


class TransportHandle(Protocol):
    def cancel(self) -> None: ...


class _RequestHandle:
    """Cancelable wrapper around the single-shot request task."""

    def __init__(self, task: asyncio.Task[None]):
        self._task = task

    def cancel(self) -> None:
        if not self._task.done():
            self._task.cancel()


class QuerySession:
    def __init__(self, query: Query):
        self.token = uuid.uuid4().hex
        self.query = query
        self.status = SessionStatus.LOADING
        self.results: Optional[ResultPage] = None
        self.overview: Optional[Overview] = None
        self.error: Optional[QueryError] = None
        self.handle: Optional[TransportHandle] = None
        self.finished = asyncio.Event()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self.status,
            token=self.token,
            query=self.query,
            results=self.results,
            overview=self.overview,
            error=self.error,
        )

    def close(self) -> None:
        if self.handle is not None:
            self.handle.cancel()
            self.handle = None
        self.finished.set()


class QueryOrchestrator:
    def __init__(
        self,
        api: SearchAPI,
        channel: Optional[StreamingQueryChannel] = None,
        decoder: Optional[OverviewDecoder] = None,
        result_count: int = DEFAULT_RESULT_COUNT,
        alpha: float = DEFAULT_ALPHA,
    ):
        self._api = api
        self._channel = channel or StreamingQueryChannel(api.http)
        self._decoder = decoder or OverviewDecoder()
        self._result_count = result_count
        self._alpha = alpha
        self._session: Optional[QuerySession] = None
        self._listeners: list[Listener] = []

    @property
    def snapshot(self) -> SessionSnapshot:
        if self._session is None:
            return SessionSnapshot()
        return self._session.snapshot()

    @property
    def current_token(self) -> Optional[str]:
        return self._session.token if self._session else None

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to state changes. Returns a cleanup function."""
        self._listeners.append(listener)

        def remove() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass
        return remove

    def submit(self, query: Union[Query, str], wants_overview: bool = False) -> Optional[str]:
        """Start a new search, superseding the current one. Returns the session token.

        Blank query text is declined silently (returns None). Must be called
        from within the running loop.
        """
        if isinstance(query, str):
            if not query.strip():
                return None
            query = Query(
                text=query,
                wants_overview=wants_overview,
                result_count=self._result_count,
                alpha=self._alpha,
            )
        if query.is_blank:
            return None

        self._invalidate()
        session = QuerySession(query)
        self._session = session
        self._publish()

        text = query.text.strip()
        if query.wants_overview:
            session.handle = self._channel.open(
                text, query.result_count, self._stream_handlers(session.token), alpha=query.alpha,
            )
        else:
            task = asyncio.get_running_loop().create_task(self._single_shot(session.token, query))
            session.handle = _RequestHandle(task)
        logger.debug(f"Session {session.token[:8]} started for {text!r} (overview={query.wants_overview})")
        return session.token

    def reset(self) -> None:
        """Cancel the current search and return to idle with nothing displayed."""
        self._invalidate()
        self._session = None
        self._publish()

    async def wait(self) -> SessionSnapshot:
        """Wait until the current session settles, following any supersessions."""
        while True:
            session = self._session
            if session is None:
                return self.snapshot
            await session.finished.wait()
            if session is self._session:
                return session.snapshot()

    def _invalidate(self) -> None:
        if self._session is not None:
            logger.debug(f"Session {self._session.token[:8]} superseded")
            self._session.close()

    def _current(self, token: str) -> Optional[QuerySession]:
        session = self._session
        if session is None or session.token != token:
            logger.debug(f"Dropping event for stale session {token[:8]}")
            return None
        return session

    def _publish(self) -> None:
        snapshot = self.snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener failed")

    # Single-shot

    async def _single_shot(self, token: str, query: Query) -> None:
        try:
            result = await self._api.search(
                query.text.strip(), k=query.result_count, alpha=query.alpha, ai_overview=False,
            )
        except MovieSearchError as e:
            logger.error(f"Search failed: {e}")
            self._on_error(token, _query_error(e))
            return
        session = self._current(token)
        if session is None:
            return
        session.results = result.page
        session.status = SessionStatus.SETTLED
        session.handle = None
        session.finished.set()
        self._publish()

    # Streaming

    def _stream_handlers(self, token: str) -> ChannelHandlers:
        return ChannelHandlers(
            on_results=lambda page: self._on_results(token, page),
            on_overview=lambda raw: self._on_overview(token, raw),
            on_error=lambda err: self._on_channel_error(token, err),
            on_done=lambda: self._on_done(token),
        )

    def _on_results(self, token: str, page: ResultPage) -> None:
        session = self._current(token)
        if session is None or session.results is not None:
            return
        session.results = page
        session.status = SessionStatus.OVERVIEW_PENDING
        self._publish()

    def _on_overview(self, token: str, raw: str) -> None:
        session = self._current(token)
        if session is None:
            return
        overview = self._decoder.decode(raw)
        if session.overview is not None and session.overview.has_content and not overview.has_content:
            logger.warning("Keeping previous overview over an empty one")
            return
        session.overview = overview
        self._publish()

    def _on_done(self, token: str) -> None:
        session = self._current(token)
        if session is None:
            return
        session.status = SessionStatus.SETTLED
        session.handle = None
        session.finished.set()
        self._publish()

    def _on_channel_error(self, token: str, err: ChannelError) -> None:
        self._on_error(token, QueryError(kind=err.kind, reason=err.reason))

    def _on_error(self, token: str, error: QueryError) -> None:
        session = self._current(token)
        if session is None:
            return
        session.error = error
        session.status = SessionStatus.SETTLED
        session.handle = None
        session.finished.set()
        self._publish()


def _query_error(e: MovieSearchError) -> QueryError:
    if isinstance(e, MalformedFrameError):
        kind = ErrorKind.MALFORMED_FRAME
    elif isinstance(e, ServerError):
        kind = ErrorKind.SERVER
    else:
        kind = ErrorKind.TRANSPORT
    return QueryError(kind=kind, reason=str(e))
