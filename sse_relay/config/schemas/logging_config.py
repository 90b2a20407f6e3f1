import logging
from pydantic import Field, field_validator
from typing import Annotated
from .base import BaseConfigModel


class LoggingConfig(BaseConfigModel):
    level: str = "INFO"
    log_dir: str = "logs"
    max_bytes: Annotated[int, Field(ge=1024)] = 1048576
    backup_count: Annotated[int, Field(ge=0, le=100)] = 10

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v
