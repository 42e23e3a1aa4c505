"""Configurer reading values from a key of a Kubernetes Secret."""

from __future__ import annotations

from loguru import logger

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import ConfigurerError
from src.draughtsman.service.configurer.base import Configurer
from src.infra.k8s import KubernetesController, KubernetesError, get_k8s_controller, run_sync

SECRET_CONFIGURER_TYPE = "secret"


class SecretConfigurer(Configurer):
    type = SECRET_CONFIGURER_TYPE

    def __init__(
        self,
        config: ConfigData,
        controller: KubernetesController | None = None,
    ) -> None:
        self._settings = config.secret
        self._timeout = config.http_client.timeout
        self._controller = controller or get_k8s_controller(config.kubernetes)

    def fetch_values(self) -> bytes:
        name, namespace, key = self._settings.name, self._settings.namespace, self._settings.key
        try:
            data = run_sync(
                self._controller.get_secret_data(name, namespace),
                timeout=self._timeout,
            )
        except (KubernetesError, TimeoutError) as e:
            raise ConfigurerError(f"Unable to read secret {namespace}/{name}: {e}") from e

        if key not in data:
            raise ConfigurerError(f"Key {key} not found in secret {namespace}/{name}")

        logger.debug(f"Read values from secret {namespace}/{name}")
        return data[key]
