"""
Server-Sent Events frame decoding.

Lines are fed one at a time (as produced by httpx's aiter_lines()); a blank
line dispatches the accumulated frame.
"""

from typing import Optional

from pydantic import BaseModel

DEFAULT_EVENT = "message"


class ServerSentEvent(BaseModel):
    event: str = DEFAULT_EVENT
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


class SSEDecoder:
    def __init__(self) -> None:
        self._event = ""
        self._data: list[str] = []
        self._last_event_id: Optional[str] = None
        self._retry: Optional[int] = None

    @property
    def last_event_id(self) -> Optional[str]:
        return self._last_event_id

    def feed(self, line: str) -> Optional[ServerSentEvent]:
        """Consume one line. Returns a frame when `line` terminates one."""
        line = line.rstrip("\r\n")
        if not line:
            return self.flush()
        if line.startswith(":"):
            return None  # comment / keep-alive

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        elif field == "id":
            if "\0" not in value:
                self._last_event_id = value
        elif field == "retry":
            if value.isdigit():
                self._retry = int(value)
        return None

    def flush(self) -> Optional[ServerSentEvent]:
        """Dispatch whatever is pending, e.g. when the stream ends without a blank line."""
        if not self._event and not self._data:
            return None
        sse = ServerSentEvent(
            event=self._event or DEFAULT_EVENT,
            data="\n".join(self._data),
            id=self._last_event_id,
            retry=self._retry,
        )
        self._event = ""
        self._data = []
        self._retry = None
        return sse
