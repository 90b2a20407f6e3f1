from pydantic import Field, field_validator
from typing import Annotated
from .base import BaseConfigModel


class GeneratorConfig(BaseConfigModel):
    enabled: bool = True
    interval: Annotated[float, Field(gt=0)] = 5.0
    symbol: str = "AAPL"
    base_price: Annotated[float, Field(gt=0)] = 150.0
    spread: Annotated[float, Field(ge=0)] = 10.0

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Symbol cannot be empty")
        return v
