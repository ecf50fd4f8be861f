"""Schemas for session introspection."""

from pydantic import BaseModel


class SessionUser(BaseModel):
    id: str
    name: str | None = None


class SessionResponse(BaseModel):
    user: SessionUser | None = None
