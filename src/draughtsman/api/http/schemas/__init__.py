"""HTTP response schemas."""

from .health import (
    DeployerHealth,
    LivenessResponse,
    OverallStatus,
    ReadinessResponse,
    VersionResponse,
)

__all__ = [
    "DeployerHealth",
    "LivenessResponse",
    "OverallStatus",
    "ReadinessResponse",
    "VersionResponse",
]
