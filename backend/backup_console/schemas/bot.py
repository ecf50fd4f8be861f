"""Schemas for companion bot status."""

from pydantic import BaseModel, Field


class BotProcessStatus(BaseModel):
    name: str
    status: str = Field(..., description="PM2 status, e.g. 'online' or 'stopped'")
    uptime: int = Field(..., description="Seconds since the process started")
    memory: int = Field(..., description="Resident memory in MB")
    cpu: float = Field(..., description="CPU usage percent")
    restarts: int
    pm_id: int
    version: str | None = None


class BotStatusResponse(BaseModel):
    processes: list[BotProcessStatus]
