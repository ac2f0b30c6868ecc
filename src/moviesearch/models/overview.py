"""
Overview models — the decoded AI overview and its generation metadata.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


class DecodeStatus(str, Enum):
    OK = "ok"
    REPAIRED = "repaired"
    ERROR = "error"
    EMPTY = "empty"


class MovieExplanation(BaseModel):
    model_config = {"extra": "ignore", "frozen": True}

    id: Union[int, str]
    title: str = ""
    explanation: str = ""


class OverviewMetadata(BaseModel):
    model_config = {"frozen": True}

    decode_status: DecodeStatus
    model: Optional[str] = None
    generation_time_ms: Optional[float] = None
    eval_count: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    error: Optional[str] = None


class Overview(BaseModel):
    model_config = {"frozen": True}

    summary_text: str = ""
    explanations: list[MovieExplanation] = Field(default_factory=list)
    metadata: OverviewMetadata = OverviewMetadata(decode_status=DecodeStatus.EMPTY)

    @property
    def decode_status(self) -> DecodeStatus:
        return self.metadata.decode_status

    @property
    def has_content(self) -> bool:
        return bool(self.summary_text or self.explanations)


class AIMetadata(BaseModel):
    """`ai_metadata` block attached by the service to a generated overview."""

    model_config = {"extra": "ignore"}

    model: Optional[str] = None
    generation_time_ms: Optional[float] = None
    status: str = "success"  # "success" | "parse_error" | "error" | "no_results"
    eval_count: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    error: Optional[str] = None


class OverviewDocument(BaseModel):
    """Structural shape of an overview payload, with or without the service envelope."""

    model_config = {"extra": "ignore"}

    overview: str = ""
    movie_explanations: list[MovieExplanation] = Field(default_factory=list)
    ai_metadata: Optional[AIMetadata] = None

    @field_validator("overview", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("movie_explanations", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value
