"""Deployment records and the status state machine.

A deployment's lifecycle is monotone: ``pending -> {success | failure}``.
Terminal states are sticky, so a deployment that ever carried a terminal
entry is never acted on again, even if a later ``pending`` entry shows up.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.draughtsman.errors import InvalidTransitionError


class DeploymentState(str, Enum):
    """States a deployment status entry can carry."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({DeploymentState.SUCCESS, DeploymentState.FAILURE})


class DeploymentStatus(BaseModel):
    """One entry in a deployment's append-only status history."""

    model_config = ConfigDict(frozen=True)

    state: DeploymentState
    created_at: datetime


class Deployment(BaseModel):
    """Upstream record of intent to install a revision into an environment.

    Attributes:
        id: Identifier assigned by the upstream service
        project: Project (repository) the deployment belongs to
        environment: Environment tag selecting which agent acts on it
        ref: Revision to install
        sha: Commit the ref resolved to when the deployment was created
        description: Free-form description set by whoever requested it
        created_at: Creation time, used for ordering
        statuses: Status history in insertion order
    """

    model_config = ConfigDict(frozen=True)

    id: int
    project: str = ""
    environment: str
    ref: str = ""
    sha: str = ""
    description: str | None = None
    created_at: datetime
    statuses: tuple[DeploymentStatus, ...] = Field(default_factory=tuple)

    @property
    def current_state(self) -> DeploymentState | None:
        """State of the most recently created status entry, if any."""
        if not self.statuses:
            return None
        return max(self.statuses, key=lambda s: s.created_at).state

    @property
    def log_context(self) -> dict[str, str | int]:
        """Fields used to correlate log lines with this deployment."""
        return {
            "deployment_id": self.id,
            "project": self.project,
            "environment": self.environment,
            "ref": self.ref,
        }


def is_pending(deployment: Deployment) -> bool:
    """Return True if the deployment still waits for this agent.

    A deployment is pending iff its history holds at least one ``pending``
    entry and no terminal entry. An empty history is not pending.
    """
    states = {status.state for status in deployment.statuses}
    if states & TERMINAL_STATES:
        return False
    return DeploymentState.PENDING in states


def can_transition(current: DeploymentState | None, new: DeploymentState) -> bool:
    """Check a transition against the status state machine.

    ``pending`` may move to any state. Terminal states only accept
    themselves, which is a no-op.
    """
    if current is None or current is DeploymentState.PENDING:
        return True
    return current is new


def validate_transition(deployment: Deployment, new: DeploymentState) -> None:
    """Reject a transition out of a terminal state.

    Writing the same terminal state again is a no-op and is rejected too,
    since the agent never needs to append it.

    Raises:
        InvalidTransitionError: If the history already holds a terminal entry.
    """
    terminal = next(
        (status.state for status in deployment.statuses if status.state.is_terminal),
        None,
    )
    if terminal is None:
        return
    if can_transition(terminal, new):
        reason = "nothing to report"
    else:
        reason = f"refusing to set {new.value}"
    raise InvalidTransitionError(
        f"Deployment {deployment.id} is already {terminal.value}, {reason}"
    )
