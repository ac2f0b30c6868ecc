"""Test helpers: canned service payloads and httpx mock transports."""

import json
from typing import Any, Callable, Optional

import httpx

from moviesearch.transport.http import HttpClient

BASE_URL = "http://search.test"

RESULTS_BODY: dict[str, Any] = {
    "query": "heist movies",
    "count": 2,
    "results": [
        {"id": 1, "title": "Heat", "release_date": "1995-12-15", "genres": "Crime", "rrf_score": 0.031},
        {"id": 2, "title": "Inside Man", "poster_path": "/inside.jpg", "vector_rank": 2, "bm25_rank": None},
    ],
    "timings": {"total_ms": 42.0},
}

OVERVIEW_DOC: dict[str, Any] = {
    "overview": "Two tense heist stories.",
    "movie_explanations": [
        {"id": 1, "title": "Heat", "explanation": "A crew plans one last score."},
        {"id": 2, "title": "Inside Man", "explanation": "A bank robbery with a twist."},
    ],
}

MISSING_COMMA_PAYLOAD = (
    '```json\n'
    '{"overview": "Great picks"\n'
    '  "movie_explanations": [{"id": 1, "title": "Heat", "explanation": "Slick and tense."}]}\n'
    '```  '
)


def sse_body(*frames: tuple[str, str]) -> bytes:
    """Encode (event, data) pairs as an event-stream body; multi-line data becomes several data: lines."""
    out = []
    for event, data in frames:
        out.append(f"event: {event}\n")
        for line in data.split("\n"):
            out.append(f"data: {line}\n")
        out.append("\n")
    return "".join(out).encode()


def results_frame(body: Optional[dict[str, Any]] = None) -> tuple[str, str]:
    return ("results", json.dumps(body or RESULTS_BODY))


def make_http(handler: Callable[[httpx.Request], Any]) -> HttpClient:
    return HttpClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


def stream_http(body: bytes, status_code: int = 200, requests: Optional[list[httpx.Request]] = None) -> HttpClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, headers={"content-type": "text/event-stream"}, content=body)
    return make_http(handler)

