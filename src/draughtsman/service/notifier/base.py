"""Notifier interface and message formatting."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.draughtsman.service.status import Deployment


class Notifier(ABC):
    """Sends human-readable status messages."""

    @abstractmethod
    def notify(self, message: str) -> None:
        """Send a message.

        Raises:
            NotifierError: If the message could not be delivered
        """
        ...

    def close(self) -> None:
        """Release any held connections."""


def success_message(deployment: Deployment) -> str:
    return (
        f"Successfully deployed {deployment.project} ({deployment.ref}) "
        f"to {deployment.environment}"
    )


def failure_message(deployment: Deployment, reason: str) -> str:
    return (
        f"Failed to deploy {deployment.project} ({deployment.ref}) "
        f"to {deployment.environment}: {reason}"
    )
