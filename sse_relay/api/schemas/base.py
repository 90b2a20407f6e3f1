"""Base API Schemas."""
from pydantic import BaseModel
from typing import Optional


class BaseResponse(BaseModel):
    """Base scheme for all API responses."""
    success: bool = True
    error_code: Optional[str] = None
    message: Optional[str] = None


class ErrorResponse(BaseResponse):
    success: bool = False
