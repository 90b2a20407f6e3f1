"""API Schemas for the System Domain."""

from pydantic import BaseModel


class StatusResponse(BaseModel):
    connectedClients: int
    uptime: float
    timestamp: str
