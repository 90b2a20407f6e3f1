import json
import pytest
from sse_relay.core.broadcaster import Broadcaster
from sse_relay.core.events import broadcast_event
from sse_relay.core.registry import ConnectionRegistry
from sse_relay.core.stream import StreamHandle
from tests.fakes import BrokenPipeHandle, ClosedFileHandle, RecordingHandle


@pytest.fixture
def registry():
    return ConnectionRegistry()


def test_broadcast_reaches_every_connection(registry):
    handles = {f"c{i}": RecordingHandle() for i in range(3)}
    for key, handle in handles.items():
        registry.register(key, handle)

    result = Broadcaster(registry).broadcast(broadcast_event("hi"))

    assert (result.addressed, result.delivered, result.dropped) == (3, 3, 0)
    for handle in handles.values():
        assert len(handle.chunks) == 1
        assert handle.chunks[0].startswith("data: ")
        assert "\"type\": \"broadcast\"" in handle.chunks[0]


def test_failing_connection_is_removed_without_affecting_others(registry):
    good = [RecordingHandle() for _ in range(4)]
    registry.register("g0", good[0])
    registry.register("g1", good[1])
    registry.register("bad", BrokenPipeHandle())
    registry.register("g2", good[2])
    registry.register("g3", good[3])

    result = Broadcaster(registry).broadcast(broadcast_event("hi"))

    assert result.addressed == 5
    assert result.delivered == 4
    assert result.dropped == 1
    assert registry.size() == 4
    assert not registry.contains("bad")
    for handle in good:
        assert len(handle.chunks) == 1


def test_closed_handle_counts_as_failure(registry):
    stale = StreamHandle()
    registry.register("stale", stale)
    registry.register("live", RecordingHandle())
    stale.close()

    result = Broadcaster(registry).broadcast(broadcast_event("hi"))

    assert result.delivered == 1
    assert registry.size() == 1


def test_removed_connection_gets_nothing_further(registry):
    handle = RecordingHandle()
    registry.register("a", handle)
    broadcaster = Broadcaster(registry)

    broadcaster.broadcast(broadcast_event("first"))
    registry.unregister("a")
    result = broadcaster.broadcast(broadcast_event("second"))

    assert result.addressed == 0
    assert len(handle.chunks) == 1
    assert json.loads(handle.chunks[0].split("data: ")[1])["message"] == "first"


def test_broadcast_with_no_connections(registry):
    result = Broadcaster(registry).broadcast(broadcast_event("nobody"))
    assert (result.addressed, result.delivered, result.dropped) == (0, 0, 0)


def test_unexpected_write_error_does_not_stop_fan_out(registry):
    good = RecordingHandle()
    registry.register("bad", ClosedFileHandle())
    registry.register("good", good)

    result = Broadcaster(registry).broadcast(broadcast_event("hi"))

    assert result.delivered == 1
    assert result.dropped == 1
    assert len(good.chunks) == 1
    assert not registry.contains("bad")
    assert registry.contains("good")
