"""Health and version response schemas.

Status Terminology:
    - ready: The deployer loop is running
    - not_ready: The loop has not started yet or has stopped
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OverallStatus(str, Enum):
    """Overall agent readiness status."""

    READY = "ready"
    NOT_READY = "not_ready"


class LivenessResponse(BaseModel):
    """Response for the liveness probe."""

    status: str = Field(default="healthy", description="Always 'healthy' while the process runs")


class DeployerHealth(BaseModel):
    """State of the deployer loop."""

    running: bool = Field(description="Whether the loop thread is running")
    in_flight: bool = Field(description="Whether a deployment cycle is executing")
    last_tick_at: datetime | None = Field(default=None, description="Start of the last tick")
    last_error: str | None = Field(default=None, description="Error of the last poll, if it failed")


class ReadinessResponse(BaseModel):
    """Response for the readiness probe."""

    model_config = ConfigDict(use_enum_values=True)

    status: OverallStatus
    environment: str
    deployer: DeployerHealth


class VersionResponse(BaseModel):
    """Build information."""

    name: str
    description: str
    git_commit: str
    source: str
    version: str
