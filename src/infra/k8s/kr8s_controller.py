"""Kr8s-based implementation of KubernetesController.

Uses the kr8s library for native async Kubernetes operations.
"""

from __future__ import annotations

import base64
import binascii
import tempfile
import weakref
from pathlib import Path
from typing import Any

import kr8s
import yaml
from kr8s.asyncio.objects import ConfigMap, Secret

from src.draughtsman.config.config_data import KubernetesSettings

from .controller import KubernetesController, KubernetesError, ObjectRef, ResourceNotFoundError

SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"


class Kr8sController(KubernetesController):
    """Kubernetes controller using kr8s library.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. Since run_sync() creates a fresh event loop
    per call, a cached client would be unusable on the next call.
    """

    def __init__(self, settings: KubernetesSettings | None = None) -> None:
        """Initialize the kr8s controller.

        Args:
            settings: Connection settings. Without an address the pod's
                service account is used when in-cluster is enabled, and the
                local kubeconfig otherwise.
        """
        self._settings = settings or KubernetesSettings()
        self._kubeconfig = _build_kubeconfig(self._settings)
        if self._kubeconfig is not None:
            # Removed when the controller is collected or at interpreter exit
            weakref.finalize(self, self._kubeconfig.unlink, missing_ok=True)

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client bound to the running event loop."""
        if self._kubeconfig is not None:
            return await kr8s.asyncio.api(kubeconfig=str(self._kubeconfig))
        if self._settings.address:
            return await kr8s.asyncio.api(url=self._settings.address)
        if self._settings.in_cluster:
            return await kr8s.asyncio.api(serviceaccount=SERVICE_ACCOUNT_DIR)
        return await kr8s.asyncio.api()

    async def get_config_map_data(self, name: str, namespace: str) -> dict[str, str]:
        ref = ObjectRef("configmap", name, namespace)
        config_map = await self._get(ConfigMap, ref)
        return dict(config_map.raw.get("data") or {})

    async def get_secret_data(self, name: str, namespace: str) -> dict[str, bytes]:
        ref = ObjectRef("secret", name, namespace)
        secret = await self._get(Secret, ref)
        decoded: dict[str, bytes] = {}
        for key, value in (secret.raw.get("data") or {}).items():
            try:
                decoded[key] = base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as e:
                raise KubernetesError(f"Key {key} of {ref} is not valid base64") from e
        return decoded

    async def _get(self, kind: Any, ref: ObjectRef) -> Any:
        try:
            api = await self._get_api()
            return await kind.get(ref.name, namespace=ref.namespace, api=api)
        except kr8s.NotFoundError as e:
            raise ResourceNotFoundError(f"{ref} not found") from e
        except Exception as e:
            raise KubernetesError(f"Unable to read {ref}: {e}") from e


def _build_kubeconfig(settings: KubernetesSettings) -> Path | None:
    """Write a kubeconfig for an explicit address with TLS client files.

    kr8s takes TLS material through a kubeconfig, so an address combined
    with certificate files is turned into a single-context kubeconfig.

    Returns:
        Path to the generated kubeconfig, or None if kr8s defaults apply
    """
    tls = settings.tls
    if not settings.address or not (tls.ca_file or tls.crt_file or tls.key_file):
        return None

    cluster: dict[str, str] = {"server": settings.address}
    if tls.ca_file:
        cluster["certificate-authority"] = tls.ca_file
    user: dict[str, str] = {}
    if tls.crt_file:
        user["client-certificate"] = tls.crt_file
    if tls.key_file:
        user["client-key"] = tls.key_file

    kubeconfig = {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": "draughtsman", "cluster": cluster}],
        "users": [{"name": "draughtsman", "user": user}],
        "contexts": [
            {
                "name": "draughtsman",
                "context": {"cluster": "draughtsman", "user": "draughtsman"},
            }
        ],
        "current-context": "draughtsman",
    }

    with tempfile.NamedTemporaryFile(
        "w", suffix=".yaml", prefix="draughtsman-kubeconfig-", delete=False
    ) as f:
        yaml.safe_dump(kubeconfig, f, default_flow_style=False)
        return Path(f.name)
