from pydantic import Field
from typing import Annotated
from .base import BaseConfigModel


class StreamConfig(BaseConfigModel):
    heartbeat_interval: Annotated[float, Field(gt=0)] = 30.0
    queue_size: Annotated[int, Field(ge=1, le=10000)] = 500
