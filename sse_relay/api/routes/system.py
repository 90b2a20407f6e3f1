"""API Implementation for the System Domain."""

from flask import Blueprint, jsonify
from sse_relay.api.schemas.system import StatusResponse
from sse_relay.services.event_service import get_event_service

system_bp = Blueprint("system_api", __name__)


@system_bp.route("/status", methods=["GET"])
def status():
    return jsonify(StatusResponse(**get_event_service().status()).model_dump())
