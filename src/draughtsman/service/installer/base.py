"""Installer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.draughtsman.service.status import Deployment


class Installer(ABC):
    """Applies a deployment's release to the cluster."""

    @abstractmethod
    def install(self, deployment: Deployment, values: bytes) -> None:
        """Install or upgrade the release for a deployment.

        Must be idempotent: installing the same deployment with the same
        values twice leaves the cluster as after the first call.

        Raises:
            InstallerError: If the release could not be applied
        """
        ...
