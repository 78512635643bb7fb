"""Pydantic schemas for health check responses."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the liveness endpoint."""

    status: str = Field(default="healthy", description="Service status")
    message: str = Field(
        default="User management service is running",
        description="Human-readable status",
    )
