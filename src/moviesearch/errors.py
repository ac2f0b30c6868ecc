"""
moviesearch error types — transport, frame and server-signaled failures.
"""

from typing import Any, Optional


class MovieSearchError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class TransportError(MovieSearchError):
    """Connection could not be established, dropped, or answered with HTTP >= 400."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {"status_code": status_code} if status_code is not None else None
        super().__init__("transport_error", message, details)

    @property
    def status_code(self) -> Optional[int]:
        return (self.details or {}).get("status_code")


class MalformedFrameError(MovieSearchError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_frame", message, details)


class ServerError(MovieSearchError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("server_error", message, details)
