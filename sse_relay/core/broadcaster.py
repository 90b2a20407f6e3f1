import logging
from dataclasses import dataclass

from .events import Event, write_event
from .registry import Connection, ConnectionRegistry
from .stream import StreamError

logger = logging.getLogger(__name__)


@dataclass
class BroadcastResult:
    addressed: int = 0
    delivered: int = 0
    dropped: int = 0


class Broadcaster:
    """Fans one event out to every registered connection."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def broadcast(self, event: Event) -> BroadcastResult:
        result = BroadcastResult()

        def deliver(identifier: str, conn: Connection):
            result.addressed += 1
            try:
                write_event(conn.handle, event)
                result.delivered += 1
            except (StreamError, OSError) as e:
                logger.warning(
                    f"[Broadcast] Error sending {event.type} to client {identifier}: {e}"
                )
                self.registry.unregister(identifier)
                result.dropped += 1
            except Exception:
                logger.exception(
                    f"[Broadcast] Unexpected error sending {event.type} to client {identifier}"
                )
                self.registry.unregister(identifier)
                result.dropped += 1

        self.registry.for_each(deliver)

        if result.dropped:
            logger.info(
                f"[Broadcast] {event.type}: delivered to {result.delivered}, dropped {result.dropped}"
            )
        return result
