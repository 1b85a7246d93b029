"""Liveness response for the audit service."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(default="ok", description="Liveness status")
    service: str | None = Field(default=None, description="Configured app name")
    version: str | None = Field(default=None, description="Configured app version")
