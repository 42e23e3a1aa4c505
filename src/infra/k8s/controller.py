"""Abstract Kubernetes controller interface.

Defines the small set of cluster reads the agent needs, so that the
configurers do not depend on a particular client library.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class KubernetesError(Exception):
    """Raised when a Kubernetes read fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ResourceNotFoundError(KubernetesError):
    """Raised when the requested object does not exist."""


@dataclass(frozen=True)
class ObjectRef:
    """Reference to a namespaced Kubernetes object."""

    kind: str
    name: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.kind} {self.namespace}/{self.name}"


class KubernetesController(ABC):
    """Abstract base class for Kubernetes operations.

    All methods are async. Use `run_sync()` to call them from the
    synchronous deployer loop.

    Example:
        from src.infra.k8s import get_k8s_controller, run_sync

        controller = get_k8s_controller(config.kubernetes)
        data = run_sync(controller.get_config_map_data("values", "draughtsman"))
    """

    @abstractmethod
    async def get_config_map_data(self, name: str, namespace: str) -> dict[str, str]:
        """Read the data of a ConfigMap.

        Args:
            name: ConfigMap name
            namespace: Kubernetes namespace

        Returns:
            The ConfigMap's data mapping (empty if it has none)

        Raises:
            ResourceNotFoundError: If the ConfigMap does not exist
            KubernetesError: If the API call fails
        """
        ...

    @abstractmethod
    async def get_secret_data(self, name: str, namespace: str) -> dict[str, bytes]:
        """Read and decode the data of a Secret.

        Args:
            name: Secret name
            namespace: Kubernetes namespace

        Returns:
            The Secret's data mapping with values base64-decoded

        Raises:
            ResourceNotFoundError: If the Secret does not exist
            KubernetesError: If the API call fails
        """
        ...
