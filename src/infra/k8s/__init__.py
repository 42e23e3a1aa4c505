"""Kubernetes infrastructure abstraction layer.

Example:
    from src.infra.k8s import get_k8s_controller, run_sync

    controller = get_k8s_controller(config.kubernetes)
    data = run_sync(controller.get_secret_data("values", "draughtsman"), timeout=10)
"""

from .controller import (
    KubernetesController,
    KubernetesError,
    ObjectRef,
    ResourceNotFoundError,
)
from .helpers import get_k8s_controller
from .utils import run_sync

__all__ = [
    "KubernetesController",
    "KubernetesError",
    "ObjectRef",
    "ResourceNotFoundError",
    "get_k8s_controller",
    "run_sync",
]
