"""API Schemas for the Control Domain."""

import re
from pydantic import BaseModel, Field, field_validator
from typing import Annotated
from sse_relay.api.schemas.base import BaseResponse

# An event name must fit on a single "event:" line
_EVENT_TYPE_PATTERN = re.compile(r"[^\s\x00-\x1f\x7f]+")


class BroadcastRequest(BaseModel):
    message: Annotated[str, Field(min_length=1)]


class SendEventRequest(BaseModel):
    event_type: Annotated[str, Field(min_length=1, max_length=64)]
    message: Annotated[str, Field(min_length=1)]

    @field_validator("event_type")
    @classmethod
    def validate_event_type(cls, v: str) -> str:
        if not _EVENT_TYPE_PATTERN.fullmatch(v):
            raise ValueError(f"Invalid event type: {v!r}")
        return v


class DeliveryResponse(BaseResponse):
    recipients: int
