"""
Server-push event names emitted by the streaming search endpoint.
"""


class StreamEvent:
    RESULTS = "results"
    OVERVIEW = "overview"
    ERROR = "error"
    DONE = "done"


KNOWN_EVENTS = {StreamEvent.RESULTS, StreamEvent.OVERVIEW, StreamEvent.ERROR, StreamEvent.DONE}
