"""
Service layer for the event stream.

Owns the connection registry and everything that writes to it, so that the
Flask routes stay thin and tests can run several independent instances side
by side.
"""

import logging
import time
import uuid
from typing import Dict, Any, Optional

from sse_relay.config import ConfigManager
from sse_relay.core.broadcaster import Broadcaster, BroadcastResult
from sse_relay.core.events import (
    broadcast_event,
    custom_event,
    isoformat,
    utc_now,
    welcome_event,
    write_event,
)
from sse_relay.core.registry import Connection, ConnectionRegistry
from sse_relay.core.stream import StreamHandle, StreamError
from sse_relay.core.timers import HeartbeatTimer, PeriodicGenerator

logger = logging.getLogger(__name__)


class EventService:

    def __init__(
        self,
        registry: Optional[ConnectionRegistry] = None,
        heartbeat_interval: float = 30.0,
        queue_size: int = 500,
        generator: Optional[PeriodicGenerator] = None,
        start_time: Optional[float] = None,
    ):
        self.registry = registry or ConnectionRegistry()
        self.broadcaster = Broadcaster(self.registry)
        self.heartbeat_interval = heartbeat_interval
        self.queue_size = queue_size
        self.generator = generator or PeriodicGenerator(self.registry, self.broadcaster)
        # Monotonic clock reading that uptime counts from
        self.start_time = time.monotonic() if start_time is None else start_time

    @classmethod
    def from_config(cls, config: ConfigManager) -> "EventService":
        service = cls(
            heartbeat_interval=config.stream.heartbeat_interval,
            queue_size=config.stream.queue_size,
        )
        gen = config.generator
        service.generator = PeriodicGenerator(
            service.registry,
            service.broadcaster,
            interval=gen.interval,
            symbol=gen.symbol,
            base_price=gen.base_price,
            spread=gen.spread,
        )
        return service

    def connect(self, remote_addr: Optional[str] = None) -> Connection:
        """Register a new client stream and greet it."""
        client_id = uuid.uuid4().hex
        handle = StreamHandle(maxsize=self.queue_size)
        conn = self.registry.register(client_id, handle, remote_addr=remote_addr)
        if conn is None:
            raise RuntimeError(f"Connection id collision: {client_id}")

        try:
            write_event(handle, welcome_event(client_id))
        except StreamError as e:
            logger.warning(f"[Stream] Could not greet client {client_id}: {e}")
            self.disconnect(client_id)
            raise

        HeartbeatTimer(self.registry, client_id, self.heartbeat_interval).start()
        return conn

    def disconnect(self, client_id: str) -> bool:
        """Unregister a client. Its heartbeat thread wakes and exits."""
        return self.registry.unregister(client_id)

    def broadcast(self, message: str) -> BroadcastResult:
        return self.broadcaster.broadcast(broadcast_event(message))

    def send_event(self, event_type: str, message: str) -> BroadcastResult:
        return self.broadcaster.broadcast(custom_event(event_type, message))

    def status(self) -> Dict[str, Any]:
        return {
            "connectedClients": self.registry.size(),
            "uptime": round(time.monotonic() - self.start_time, 3),
            "timestamp": isoformat(utc_now()),
        }

    def start_background(self):
        self.generator.start()

    def shutdown(self):
        logger.info("[System] Shutting down event service...")
        self.generator.stop(timeout=1.0)
        self.registry.close_all()


def get_event_service() -> EventService:
    """Return the EventService bound to the current Flask app."""
    from flask import current_app

    return current_app.extensions["event_service"]
