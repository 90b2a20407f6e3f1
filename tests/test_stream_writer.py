import json
import pytest
from sse_relay.core.events import (
    Event,
    broadcast_event,
    custom_event,
    format_event,
    heartbeat_event,
    stock_price_event,
    welcome_event,
    write_event,
)
from sse_relay.core.stream import ConnectionClosedError, SlowConsumerError, StreamHandle


def parse_sse(chunk: str) -> dict:
    """Split one encoded event into its fields."""
    assert chunk.endswith("\n\n")
    fields = {}
    for line in chunk.strip("\n").split("\n"):
        name, _, value = line.partition(": ")
        fields[name] = value
    return fields


def test_format_generator_event_has_id_and_type():
    event = stock_price_event(7, "AAPL", 153.456, -0.123)
    fields = parse_sse(format_event(event))

    assert fields["id"] == "7"
    assert fields["event"] == "stock-price"
    payload = json.loads(fields["data"])
    assert payload["type"] == "stock-price"
    assert payload["id"] == 7
    assert payload["price"] == 153.46
    assert payload["change"] == -0.12


def test_format_line_order():
    text = format_event(stock_price_event(1, "AAPL", 150.0, 0.0))
    lines = text.split("\n")
    assert lines[0].startswith("id: ")
    assert lines[1].startswith("event: ")
    assert lines[2].startswith("data: ")
    assert lines[3:] == ["", ""]


def test_broadcast_is_a_data_only_frame():
    fields = parse_sse(format_event(broadcast_event("hi")))
    assert "id" not in fields
    assert "event" not in fields
    payload = json.loads(fields["data"])
    assert payload["message"] == "hi"
    assert payload["sender"] == "server"
    assert payload["timestamp"].endswith("Z")


def test_default_message_type_omits_event_line():
    text = format_event(Event(payload={"hello": "world"}))
    assert text == 'data: {"hello": "world"}\n\n'


def test_multiline_message_stays_on_one_data_line():
    fields = parse_sse(format_event(custom_event("promo", "line one\nline two")))
    assert json.loads(fields["data"])["message"] == "line one\nline two"


def test_welcome_and_heartbeat_payloads():
    welcome = json.loads(parse_sse(format_event(welcome_event("abc")))["data"])
    assert welcome["type"] == "welcome"
    assert welcome["clientId"] == "abc"

    heartbeat = heartbeat_event()
    assert heartbeat.type == "heartbeat"
    assert heartbeat.id is None
    assert isinstance(heartbeat.payload["epoch_ms"], int)


def test_event_is_immutable():
    event = broadcast_event("hi")
    with pytest.raises(Exception):
        event.type = "other"


def test_handle_preserves_write_order():
    handle = StreamHandle()
    for i in range(5):
        write_event(handle, custom_event("n", str(i)))
    handle.close()

    messages = [json.loads(parse_sse(chunk)["data"])["message"] for chunk in handle]
    assert messages == ["0", "1", "2", "3", "4"]


def test_write_after_close_raises():
    handle = StreamHandle()
    handle.close()
    with pytest.raises(ConnectionClosedError):
        write_event(handle, broadcast_event("late"))


def test_full_buffer_raises_slow_consumer():
    handle = StreamHandle(maxsize=2)
    handle.write("a")
    handle.write("b")
    with pytest.raises(SlowConsumerError):
        handle.write("c")

    # Closing a full handle still ends the reader
    handle.close()
    assert list(handle) == ["b"]


def test_welcome_and_heartbeat_reach_onmessage_listeners():
    welcome = format_event(welcome_event("abc"))
    assert welcome.startswith('data: {"type": "welcome", ')
    assert "event:" not in welcome

    heartbeat = format_event(heartbeat_event())
    assert heartbeat.startswith('data: {"type": "heartbeat", ')
    assert "event:" not in heartbeat


def test_custom_event_keeps_event_line():
    text = format_event(custom_event("promo", "sale"))
    assert text.startswith("event: promo\ndata: ")
