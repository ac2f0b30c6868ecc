"""
Result page models — the `results` frame and the single-shot search response.
"""

from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, Field


class Movie(BaseModel):
    """A ranked search hit. Ranking diagnostics are informational only."""

    model_config = {"extra": "ignore", "frozen": True}

    id: Union[int, str]
    title: str
    original_title: Optional[str] = None
    overview: Optional[str] = None
    tagline: Optional[str] = None
    genres: Optional[str] = None
    release_date: Optional[str] = None
    original_language: Optional[str] = None
    poster_path: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    # Search diagnostics
    rerank_score: Optional[float] = None
    rrf_score: Optional[float] = None
    vector_rank: Optional[int] = None
    bm25_rank: Optional[int] = None
    distance: Optional[float] = None


class SearchConfigInfo(BaseModel):
    """Retrieval parameters echoed back by the service."""

    alpha: float
    rrf_k: int
    vector_candidates: Optional[int] = None
    bm25_candidates: Optional[int] = None
    rerank_candidates: Optional[int] = None


class SearchTimings(BaseModel):
    encode_ms: float = 0
    retrieval_ms: float = 0
    fusion_ms: float = 0
    fetch_ms: float = 0
    rerank_ms: float = 0
    total_ms: float = 0


class RetrievalCounts(BaseModel):
    vector: int = 0
    bm25: int = 0
    fused: int = 0


class ResultPage(BaseModel):
    model_config = {"extra": "ignore", "frozen": True, "populate_by_name": True}

    query: str
    total_count: int = Field(validation_alias=AliasChoices("count", "total_count"))
    items: list[Movie] = Field(
        default_factory=list, validation_alias=AliasChoices("results", "items")
    )
    config: Optional[SearchConfigInfo] = None
    timings: Optional[SearchTimings] = None
    retrieval: Optional[RetrievalCounts] = None


class HealthStatus(BaseModel):
    status: str


class ReadyStatus(BaseModel):
    status: str
    models_loaded: bool = False
    load_times: dict[str, float] = Field(default_factory=dict)
