"""
API Implementation for the Control Domain.

Every handler answers synchronously with the number of clients the event
reached; delivery itself happens through each client's stream.
"""

from flask import Blueprint, jsonify
from pydantic import ValidationError
from sse_relay.api.schemas.base import ErrorResponse
from sse_relay.api.schemas.control import (
    BroadcastRequest,
    SendEventRequest,
    DeliveryResponse,
)
from sse_relay.services.event_service import get_event_service

control_bp = Blueprint("control_api", __name__)


def missing_parameter(name: str):
    return (
        jsonify(
            ErrorResponse(
                error_code="MISSING_PARAMETER", message=f"'{name}' is required"
            ).model_dump()
        ),
        400,
    )


def handle_validation_error(e: ValidationError):
    error = e.errors()[0]
    return (
        jsonify(
            ErrorResponse(
                error_code="INVALID_ARGUMENT",
                message=f"{error['loc'][0]}: {error['msg']}",
            ).model_dump()
        ),
        422,
    )


@control_bp.route("/broadcast", methods=["GET"])
@control_bp.route("/broadcast/<message>", methods=["GET"])
def broadcast(message=None):
    if message is None or not message.strip():
        return missing_parameter("message")
    try:
        data = BroadcastRequest(message=message)
    except ValidationError as e:
        return handle_validation_error(e)

    result = get_event_service().broadcast(data.message)
    return jsonify(
        DeliveryResponse(
            message=f"Broadcasted to {result.delivered} clients",
            recipients=result.delivered,
        ).model_dump(exclude_none=True)
    )


@control_bp.route("/send-event", methods=["GET"])
@control_bp.route("/send-event/<event_type>", methods=["GET"])
@control_bp.route("/send-event/<event_type>/<message>", methods=["GET"])
def send_event(event_type=None, message=None):
    if event_type is None or not event_type.strip():
        return missing_parameter("eventType")
    if message is None or not message.strip():
        return missing_parameter("message")
    try:
        data = SendEventRequest(event_type=event_type, message=message)
    except ValidationError as e:
        return handle_validation_error(e)

    result = get_event_service().send_event(data.event_type, data.message)
    return jsonify(
        DeliveryResponse(
            message=f"Sent {data.event_type} event to {result.delivered} clients",
            recipients=result.delivered,
        ).model_dump(exclude_none=True)
    )
