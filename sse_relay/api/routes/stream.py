"""Event stream endpoint."""

import logging
from flask import Blueprint, Response, request
from sse_relay.services.event_service import get_event_service

logger = logging.getLogger(__name__)

stream_bp = Blueprint("stream", __name__)


@stream_bp.route("/events", methods=["GET"])
def events():
    service = get_event_service()
    remote_addr = request.remote_addr
    conn = service.connect(remote_addr)
    logger.info(f"[Stream] New connection from {remote_addr} ({conn.id})")

    def generator():
        try:
            for chunk in conn.handle:
                yield chunk
        finally:
            # Client went away or the handle was closed on our side
            service.disconnect(conn.id)

    response = Response(generator(), mimetype="text/event-stream")
    response.headers["Cache-Control"] = "no-cache"
    response.headers["Connection"] = "keep-alive"
    response.headers["X-Accel-Buffering"] = "no"
    return response
