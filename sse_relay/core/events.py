import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# SSE default event name; written without an "event:" line
DEFAULT_EVENT_TYPE = "message"

WELCOME = "welcome"
HEARTBEAT = "heartbeat"
BROADCAST = "broadcast"
STOCK_PRICE = "stock-price"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2026-01-12T12:00:00.000Z"""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class Event(BaseModel):
    """One unit of server-to-client data."""

    model_config = ConfigDict(frozen=True)

    type: str = DEFAULT_EVENT_TYPE
    # Written on the "event:" line; unnamed events reach onmessage listeners
    named: bool = False
    payload: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[int] = None
    timestamp: datetime = Field(default_factory=utc_now)


def _make(
    event_type: str,
    fields: Dict[str, Any],
    event_id: Optional[int] = None,
    named: bool = False,
) -> Event:
    now = utc_now()
    payload = {"type": event_type, **fields, "timestamp": isoformat(now)}
    return Event(type=event_type, payload=payload, id=event_id, named=named, timestamp=now)


def welcome_event(client_id: str) -> Event:
    return _make(
        WELCOME, {"message": "Connected to SSE server", "clientId": client_id}
    )


def heartbeat_event() -> Event:
    now = utc_now()
    payload = {
        "type": HEARTBEAT,
        "timestamp": isoformat(now),
        "epoch_ms": int(now.timestamp() * 1000),
    }
    return Event(type=HEARTBEAT, payload=payload, timestamp=now)


def broadcast_event(message: str) -> Event:
    return _make(BROADCAST, {"message": message, "sender": "server"})


def custom_event(event_type: str, message: str) -> Event:
    return _make(event_type, {"message": message}, named=True)


def stock_price_event(seq: int, symbol: str, price: float, change: float) -> Event:
    return _make(
        STOCK_PRICE,
        {
            "symbol": symbol,
            "price": round(price, 2),
            "change": round(change, 2),
            "id": seq,
        },
        event_id=seq,
        named=True,
    )


def format_event(event: Event) -> str:
    """
    Encode an event in the text/event-stream line format:

        id: <n>          (generator events only)
        event: <type>    (named events only)
        data: <json>
        <blank line>
    """
    lines = []
    if event.id is not None:
        lines.append(f"id: {event.id}\n")
    if event.named and event.type != DEFAULT_EVENT_TYPE:
        lines.append(f"event: {event.type}\n")
    lines.append(f"data: {json.dumps(event.payload, ensure_ascii=False)}\n")
    lines.append("\n")
    return "".join(lines)


def write_event(handle, event: Event):
    """Write one event to a stream handle. Write errors propagate."""
    handle.write(format_event(event))
