"""
Response bodies shared by every router: errors and the health probe.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx answer."""

    error: str = Field(..., description="Human-readable failure summary")
    detail: Optional[Dict[str, Any]] = Field(None, description="Validation errors or debug information")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="When the failure was answered (UTC)")
    path: Optional[str] = Field(None, description="Request path")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Failed to import records",
                "detail": None,
                "timestamp": "2026-10-19T12:00:00Z",
                "path": "/api/import"
            }
        }


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="'healthy' or 'unhealthy'")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    version: str = Field(..., description="API version")
    database: str = Field(..., description="'connected' or 'disconnected'")


class FailureResponse(BaseModel):
    """Body of a storage failure on the import and records endpoints."""

    error: str = Field(..., description="Failure summary")

    class Config:
        json_schema_extra = {
            "example": {"error": "Failed to import records"}
        }
