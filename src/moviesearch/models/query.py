"""
Query and session-state models shared by the orchestrator and its renderers.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from moviesearch.models.overview import Overview
from moviesearch.models.results import ResultPage

DEFAULT_RESULT_COUNT = 24
DEFAULT_ALPHA = 0.5
RETRY_HINT = "Please try again."


class Query(BaseModel):
    model_config = {"frozen": True}

    text: str
    wants_overview: bool = False
    result_count: int = Field(default=DEFAULT_RESULT_COUNT, ge=1, le=100)
    alpha: float = Field(default=DEFAULT_ALPHA, ge=0.0, le=1.0)

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    OVERVIEW_PENDING = "overview_pending"
    SETTLED = "settled"


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    MALFORMED_FRAME = "malformed_frame"
    SERVER = "server"


class QueryError(BaseModel):
    """A session-scoped failure as shown to the user."""

    model_config = {"frozen": True}

    kind: ErrorKind
    reason: str
    retryable: bool = True

    @property
    def message(self) -> str:
        if self.kind == ErrorKind.TRANSPORT:
            return f"Search failed: {self.reason}. {RETRY_HINT}"
        return f"{self.reason}. {RETRY_HINT}"


class SessionSnapshot(BaseModel):
    """Read-only view of the current session for the display layer."""

    model_config = {"frozen": True}

    status: SessionStatus = SessionStatus.IDLE
    token: Optional[str] = None
    query: Optional[Query] = None
    results: Optional[ResultPage] = None
    overview: Optional[Overview] = None
    error: Optional[QueryError] = None

    @property
    def settled(self) -> bool:
        return self.status == SessionStatus.SETTLED

    @property
    def failed(self) -> bool:
        return self.error is not None
