import queue
import threading


class StreamError(Exception):
    """A write to a client stream could not be completed."""


class ConnectionClosedError(StreamError):
    pass


class SlowConsumerError(StreamError):
    """The client is not draining its buffer fast enough."""


_CLOSED = object()


class StreamHandle:
    """
    Writable end of one client's event stream.

    Writes go into a bounded FIFO that the HTTP response generator drains,
    so chunks reach the client in the order they were written. Writing never
    blocks: a full buffer or a closed handle raises a StreamError.
    """

    def __init__(self, maxsize: int = 500):
        self._queue = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, chunk: str):
        with self._lock:
            if self._closed:
                raise ConnectionClosedError("stream is closed")
            try:
                self._queue.put_nowait(chunk)
            except queue.Full:
                raise SlowConsumerError(
                    f"stream buffer full ({self._queue.maxsize} chunks)"
                )

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # Wake the reader even when the buffer is full
            while True:
                try:
                    self._queue.put_nowait(_CLOSED)
                    break
                except queue.Full:
                    try:
                        self._queue.get_nowait()
                    except queue.Empty:
                        pass

    def read(self, timeout=None):
        """Return the next chunk, or None once the handle is closed."""
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            return None
        return item

    def __iter__(self):
        while True:
            chunk = self.read()
            if chunk is None:
                return
            yield chunk
