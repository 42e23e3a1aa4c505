"""Builders shared by the unit tests."""

from datetime import UTC, datetime, timedelta

from src.draughtsman.service.status import Deployment, DeploymentState, DeploymentStatus

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def status(state: DeploymentState | str, minutes: int = 0) -> DeploymentStatus:
    """Build a status entry created ``minutes`` after the base time."""
    return DeploymentStatus(
        state=DeploymentState(state), created_at=BASE_TIME + timedelta(minutes=minutes)
    )


def deployment(
    id: int = 1,
    *,
    project: str = "api",
    environment: str = "production",
    ref: str = "main",
    sha: str = "abc123",
    minutes: int = 0,
    states: tuple[str, ...] | list[str] = ("pending",),
) -> Deployment:
    """Build a deployment whose ``states`` are appended one minute apart."""
    return Deployment(
        id=id,
        project=project,
        environment=environment,
        ref=ref,
        sha=sha,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        statuses=tuple(status(s, minutes + i) for i, s in enumerate(states)),
    )
