from .stream import StreamHandle, StreamError, ConnectionClosedError, SlowConsumerError
from .registry import Connection, ConnectionRegistry
from .events import Event, format_event, write_event
from .broadcaster import Broadcaster, BroadcastResult
from .timers import HeartbeatTimer, PeriodicGenerator
