from __future__ import annotations

from cachetools.func import lru_cache  # type: ignore

from src.draughtsman.config.config_data import KubernetesSettings
from src.infra.k8s.controller import KubernetesController


@lru_cache(maxsize=4)
def get_k8s_controller(settings: KubernetesSettings) -> KubernetesController:
    """Get the KubernetesController for the given connection settings.

    Returns:
        A shared controller instance per distinct settings value
    """
    from src.infra.k8s.kr8s_controller import Kr8sController

    return Kr8sController(settings)
