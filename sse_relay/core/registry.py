import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .stream import StreamHandle

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    id: str
    handle: StreamHandle
    remote_addr: Optional[str] = None
    connected_at: float = field(default_factory=time.time)
    # Set on unregister; timers wait on it
    cancelled: threading.Event = field(default_factory=threading.Event)


class ConnectionRegistry:
    """Set of live client streams keyed by connection id."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(
        self, identifier: str, handle: StreamHandle, remote_addr: Optional[str] = None
    ) -> Optional[Connection]:
        with self._lock:
            if identifier in self._connections:
                logger.warning(f"[Registry] Connection {identifier} is already registered")
                return None
            conn = Connection(id=identifier, handle=handle, remote_addr=remote_addr)
            self._connections[identifier] = conn
            total = len(self._connections)

        logger.info(f"[Registry] Client {identifier} connected. Total clients: {total}")
        return conn

    def unregister(self, identifier: str) -> bool:
        with self._lock:
            conn = self._connections.pop(identifier, None)
            if conn is None:
                return False
            conn.cancelled.set()
            total = len(self._connections)

        try:
            conn.handle.close()
        except Exception:
            logger.exception(f"[Registry] Error closing stream for client {identifier}")

        logger.info(f"[Registry] Client {identifier} disconnected. Total clients: {total}")
        return True

    def get(self, identifier: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(identifier)

    def contains(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._connections

    def size(self) -> int:
        with self._lock:
            return len(self._connections)

    def snapshot(self) -> List[Tuple[str, Connection]]:
        with self._lock:
            return list(self._connections.items())

    def for_each(self, visitor: Callable[[str, Connection], None]) -> int:
        """
        Call visitor(identifier, connection) for every registered entry.

        Iterates over a snapshot, so the visitor may unregister any entry,
        including the current one. Entries removed after the snapshot was
        taken are skipped. Returns the number of entries visited.
        """
        visited = 0
        for identifier, conn in self.snapshot():
            if conn.cancelled.is_set():
                continue
            visitor(identifier, conn)
            visited += 1
        return visited

    def close_all(self):
        for identifier, _ in self.snapshot():
            self.unregister(identifier)
