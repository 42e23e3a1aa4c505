"""Helm installer pulling charts from an OCI registry.

Charts are published per project as ``<registry>/<organisation>/<project>-chart``
with version ``1.0.0-<sha>``. The release is named after the project.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from loguru import logger

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import InstallerError
from src.draughtsman.service.installer.base import Installer
from src.draughtsman.service.status import Deployment
from src.infra.shell_commands import CommandRunner, HelmCommands

HELM_INSTALLER_TYPE = "helm"

CHART_SUFFIX = "-chart"
CHART_VERSION_PREFIX = "1.0.0-"


class HelmInstaller(Installer):
    """Installer that runs ``helm upgrade --install``."""

    def __init__(self, config: ConfigData, helm: HelmCommands | None = None) -> None:
        """Initialize the installer and log in to the chart registry.

        Args:
            config: Agent configuration
            helm: Optional Helm command wrapper, mainly for tests

        Raises:
            InstallerError: If the registry login fails
        """
        self._settings = config.helm
        self._command_timeout = config.http_client.timeout
        self._helm = helm or HelmCommands(CommandRunner(), binary=self._settings.binary_path)

        if self._settings.username and self._settings.password:
            self._login()

    def chart_reference(self, deployment: Deployment) -> str:
        return (
            f"oci://{self._settings.registry}/{self._settings.organisation}/"
            f"{deployment.project}{CHART_SUFFIX}"
        )

    def chart_version(self, deployment: Deployment) -> str:
        return f"{CHART_VERSION_PREFIX}{deployment.sha or deployment.ref}"

    def install(self, deployment: Deployment, values: bytes) -> None:
        chart = self.chart_reference(deployment)
        version = self.chart_version(deployment)
        log = logger.bind(**deployment.log_context)
        log.info(f"Installing {chart} version {version} as release {deployment.project}")

        values_file = _write_values_file(values)
        try:
            result = self._helm.upgrade_install(
                deployment.project,
                chart,
                self._settings.namespace,
                version=version,
                value_files=[values_file],
                timeout=self._settings.timeout,
            )
        except ValueError as e:
            raise InstallerError(f"Invalid helm timeout {self._settings.timeout!r}") from e
        finally:
            values_file.unlink(missing_ok=True)

        if not result.success:
            reason = "timed out" if result.timed_out else f"exited with {result.returncode}"
            raise InstallerError(
                f"helm upgrade of {deployment.project} {reason}",
                details=result.output,
            )

        log.info(f"Installed release {deployment.project} version {version}")

    def _login(self) -> None:
        registry = self._settings.registry
        result = self._helm.registry_login(
            registry,
            self._settings.username,
            self._settings.password,
            timeout=self._command_timeout,
        )
        if not result.success:
            raise InstallerError(
                f"Unable to log in to chart registry {registry}",
                details=result.output,
            )
        logger.info(f"Logged in to chart registry {registry}")


def _write_values_file(values: bytes) -> Path:
    fd, name = tempfile.mkstemp(suffix=".yaml", prefix="draughtsman-values-")
    with os.fdopen(fd, "wb") as f:
        f.write(values)
    return Path(name)
