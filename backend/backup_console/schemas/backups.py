"""Schemas for the backup archive endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Body of every non-2xx JSON response."""

    error: str = Field(..., description="Human-readable error message, shown verbatim by the dashboard")


class BackupFile(BaseModel):
    """One backup archive stored in the bucket."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., description="Full object key, including the configured prefix")
    last_modified: str | None = Field(
        None, alias="lastModified", description="Last modification timestamp (ISO format)"
    )
    size: int | None = Field(None, description="Object size in bytes")


class BackupListResponse(BaseModel):
    files: list[BackupFile] = Field(default_factory=list, description="Archives, newest first")


class CreateBackupResponse(BaseModel):
    message: str
    url: str | None = Field(None, description="Location of the uploaded archive, as reported upstream")
    stats: dict[str, Any] | None = Field(None, description="Upstream backup statistics")


class DeleteBackupResponse(BaseModel):
    message: str
