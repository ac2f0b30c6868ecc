"""
moviesearch — progressive movie search client.

Results first, AI overview later: an SSE + REST client for the hybrid movie
search service, with a session orchestrator, a resilient overview decoder
and a paced text revealer.
"""

from moviesearch.client import AsyncMovieSearch, MovieSearch
from moviesearch.channel import ChannelError, ChannelHandle, ChannelHandlers, StreamingQueryChannel
from moviesearch.decoder import OverviewDecoder, RepairRule
from moviesearch.errors import MalformedFrameError, MovieSearchError, ServerError, TransportError
from moviesearch.images import poster_url
from moviesearch.models.events import StreamEvent
from moviesearch.models.overview import DecodeStatus, MovieExplanation, Overview
from moviesearch.models.query import ErrorKind, Query, QueryError, SessionSnapshot, SessionStatus
from moviesearch.models.results import Movie, ResultPage
from moviesearch.orchestrator import QueryOrchestrator
from moviesearch.reveal import IncrementalTextRevealer, RevealFrame, RevealState, reveal_prefixes

__version__ = "0.1.0"
__all__ = [
    "AsyncMovieSearch",
    "MovieSearch",
    "QueryOrchestrator",
    "StreamingQueryChannel",
    "ChannelHandle",
    "ChannelHandlers",
    "ChannelError",
    "OverviewDecoder",
    "RepairRule",
    "IncrementalTextRevealer",
    "RevealFrame",
    "RevealState",
    "reveal_prefixes",
    "poster_url",
    "MovieSearchError",
    "TransportError",
    "MalformedFrameError",
    "ServerError",
    "StreamEvent",
    "DecodeStatus",
    "MovieExplanation",
    "Overview",
    "ErrorKind",
    "Query",
    "QueryError",
    "SessionSnapshot",
    "SessionStatus",
    "Movie",
    "ResultPage",
]
