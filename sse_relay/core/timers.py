import logging
import random
import threading
from typing import Optional

from .broadcaster import Broadcaster
from .events import Event, heartbeat_event, stock_price_event, write_event
from .registry import ConnectionRegistry
from .stream import StreamError

logger = logging.getLogger(__name__)


class HeartbeatTimer:
    """
    Keeps one connection alive by sending it a heartbeat every `interval` seconds.
    Stops for good once the connection leaves the registry.
    """

    def __init__(self, registry: ConnectionRegistry, connection_id: str, interval: float = 30.0):
        self.registry = registry
        self.connection_id = connection_id
        self.interval = interval
        self.sent = 0
        self._thread: Optional[threading.Thread] = None

    def start(self) -> bool:
        conn = self.registry.get(self.connection_id)
        if conn is None:
            return False

        def loop():
            # wait() returns True as soon as the connection is unregistered
            while not conn.cancelled.wait(self.interval):
                if not self.fire():
                    break
            logger.debug(f"[Heartbeat] Stopped for client {self.connection_id}")

        self._thread = threading.Thread(
            target=loop, name=f"heartbeat-{self.connection_id[:8]}", daemon=True
        )
        self._thread.start()
        return True

    def fire(self) -> bool:
        """Send one heartbeat. Returns False when the timer should stop."""
        conn = self.registry.get(self.connection_id)
        if conn is None or conn.cancelled.is_set():
            return False
        try:
            write_event(conn.handle, heartbeat_event())
        except (StreamError, OSError) as e:
            logger.warning(f"[Heartbeat] Error sending to client {self.connection_id}: {e}")
            self.registry.unregister(self.connection_id)
            return False
        except Exception:
            logger.exception(f"[Heartbeat] Unexpected error sending to client {self.connection_id}")
            self.registry.unregister(self.connection_id)
            return False
        self.sent += 1
        return True

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


class PeriodicGenerator:
    """
    Publishes a simulated stock quote to all clients at a fixed interval.

    Each published quote carries the next value of a process-wide sequence
    counter as its event id. Ticks with no connected clients publish nothing
    and leave the counter untouched.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        broadcaster: Broadcaster,
        interval: float = 5.0,
        symbol: str = "AAPL",
        base_price: float = 150.0,
        spread: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.interval = interval
        self.symbol = symbol
        self.base_price = base_price
        self.spread = spread
        self.rng = rng or random.Random()
        self._counter = 0
        self._counter_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def counter(self) -> int:
        return self._counter

    def tick(self) -> Optional[Event]:
        if self.registry.size() == 0:
            return None

        with self._counter_lock:
            self._counter += 1
            seq = self._counter

        price = self.base_price + self.rng.random() * self.spread
        change = self.rng.random() * 2 - 1
        event = stock_price_event(seq, self.symbol, price, change)
        self.broadcaster.broadcast(event)
        return event

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()

        def loop():
            logger.info(f"[Generator] Publishing {self.symbol} every {self.interval}s")
            while not self._stop.wait(self.interval):
                try:
                    self.tick()
                except Exception:
                    logger.exception("[Generator] Tick failed")

        self._thread = threading.Thread(target=loop, name="stock-generator", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("[Generator] Stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
