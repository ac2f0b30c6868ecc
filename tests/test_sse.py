"""Tests for event-stream frame decoding."""

from moviesearch.transport.sse import SSEDecoder, ServerSentEvent


def feed_all(decoder: SSEDecoder, text: str) -> list[ServerSentEvent]:
    events = []
    for line in text.split("\n"):
        event = decoder.feed(line)
        if event is not None:
            events.append(event)
    return events


def test_named_events():
    events = feed_all(SSEDecoder(), "event: results\ndata: {}\n\nevent: done\ndata:\n\n")
    assert [(e.event, e.data) for e in events] == [("results", "{}"), ("done", "")]


def test_multiline_data_is_joined():
    events = feed_all(SSEDecoder(), "event: overview\ndata: line one\ndata:   line two\n\n")
    assert events[0].data == "line one\n  line two"


def test_default_event_name_and_comments():
    events = feed_all(SSEDecoder(), ": keep-alive\ndata: hi\n\n")
    assert len(events) == 1
    assert events[0].event == "message"
    assert events[0].data == "hi"


def test_id_and_retry():
    decoder = SSEDecoder()
    events = feed_all(decoder, "id: 7\nretry: 1500\nevent: done\n\n")
    assert events[0].id == "7"
    assert events[0].retry == 1500
    assert decoder.last_event_id == "7"


def test_crlf_lines():
    decoder = SSEDecoder()
    assert decoder.feed("event: done\r\n") is None
    event = decoder.feed("\r\n")
    assert event is not None and event.event == "done"


def test_flush_pending_frame_without_blank_line():
    decoder = SSEDecoder()
    decoder.feed("event: done")
    event = decoder.flush()
    assert event is not None and event.event == "done"
    assert decoder.flush() is None


def test_blank_lines_alone_dispatch_nothing():
    assert feed_all(SSEDecoder(), "\n\n\n") == []
