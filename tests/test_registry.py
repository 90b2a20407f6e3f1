import random
import pytest
from sse_relay.core.registry import ConnectionRegistry
from sse_relay.core.stream import StreamHandle
from tests.fakes import RecordingHandle


@pytest.fixture
def registry():
    return ConnectionRegistry()


def test_register_and_unregister(registry):
    conn = registry.register("a", RecordingHandle(), remote_addr="127.0.0.1")
    assert conn is not None
    assert conn.remote_addr == "127.0.0.1"
    assert registry.size() == 1
    assert registry.contains("a")

    assert registry.unregister("a") is True
    assert registry.size() == 0
    assert not registry.contains("a")


def test_duplicate_register_is_noop(registry):
    first = RecordingHandle()
    registry.register("a", first)
    assert registry.register("a", RecordingHandle()) is None
    assert registry.size() == 1
    assert registry.get("a").handle is first


def test_unregister_is_idempotent(registry):
    registry.register("a", RecordingHandle())
    assert registry.unregister("a") is True
    assert registry.unregister("a") is False
    assert registry.unregister("never-registered") is False
    assert registry.size() == 0


def test_unregister_cancels_token_and_closes_handle(registry):
    handle = StreamHandle()
    conn = registry.register("a", handle)
    assert not conn.cancelled.is_set()

    registry.unregister("a")

    assert conn.cancelled.is_set()
    assert handle.closed


def test_size_tracks_random_operations(registry):
    rng = random.Random(1234)
    live = set()
    for _ in range(500):
        key = f"c{rng.randint(0, 30)}"
        if rng.random() < 0.6:
            registry.register(key, RecordingHandle())
            live.add(key)
        else:
            registry.unregister(key)
            live.discard(key)
        assert registry.size() == len(live)


def test_for_each_tolerates_removing_current_entry(registry):
    for key in ("a", "b", "c", "d"):
        registry.register(key, RecordingHandle())

    visited = []

    def visitor(identifier, conn):
        visited.append(identifier)
        if identifier in ("a", "c"):
            registry.unregister(identifier)

    count = registry.for_each(visitor)

    assert visited == ["a", "b", "c", "d"]
    assert count == 4
    assert registry.size() == 2


def test_for_each_skips_entries_removed_mid_iteration(registry):
    for key in ("a", "b", "c"):
        registry.register(key, RecordingHandle())

    visited = []

    def visitor(identifier, conn):
        visited.append(identifier)
        if identifier == "a":
            registry.unregister("c")

    registry.for_each(visitor)
    assert visited == ["a", "b"]


def test_close_all(registry):
    handles = [StreamHandle() for _ in range(3)]
    for i, handle in enumerate(handles):
        registry.register(str(i), handle)

    registry.close_all()

    assert registry.size() == 0
    assert all(h.closed for h in handles)
