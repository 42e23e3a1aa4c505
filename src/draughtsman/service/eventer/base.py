"""Eventer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.draughtsman.service.status import Deployment, DeploymentState


class Eventer(ABC):
    """Source of actionable deployments and write-back path for their status."""

    @abstractmethod
    def poll(self) -> list[Deployment]:
        """Fetch the deployments this agent should act on.

        Returns:
            Pending deployments for the configured environment, oldest first

        Raises:
            EventerError: If the upstream service could not be read. Nothing
                is remembered from a failed poll.
        """
        ...

    @abstractmethod
    def report_status(
        self,
        deployment: Deployment,
        state: DeploymentState,
        description: str | None = None,
    ) -> None:
        """Append a new status entry upstream.

        Raises:
            EventerError: If the write failed
        """
        ...

    def close(self) -> None:
        """Release any held connections."""
