"""Response schema for GET /health."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus database reachability; 'degraded' when the database cannot be queried."""

    status: Literal["ok", "degraded"] = "ok"
    version: str = Field(description="API version")
    environment: Literal["dev", "prod"]
    database: Literal["connected", "disconnected"]
