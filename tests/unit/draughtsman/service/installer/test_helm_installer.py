"""Tests for the Helm installer."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import InstallerError
from src.draughtsman.service.installer.helm import HelmInstaller
from src.infra.shell_commands import CommandResult, HelmCommands
from tests.helpers import deployment


@pytest.fixture
def helm() -> MagicMock:
    """Create a mock HelmCommands that succeeds."""
    mock = MagicMock(spec=HelmCommands)
    mock.upgrade_install.return_value = CommandResult(success=True, stdout="deployed")
    mock.registry_login.return_value = CommandResult(success=True, stdout="Login Succeeded")
    return mock


@pytest.fixture
def installer(config: ConfigData, helm: MagicMock) -> HelmInstaller:
    return HelmInstaller(config, helm=helm)


class TestChartCoordinates:
    def test_chart_reference(self, installer: HelmInstaller) -> None:
        assert (
            installer.chart_reference(deployment(project="api"))
            == "oci://quay.io/acme-charts/api-chart"
        )

    def test_chart_version_uses_sha(self, installer: HelmInstaller) -> None:
        assert installer.chart_version(deployment(sha="5d2c7a1")) == "1.0.0-5d2c7a1"

    def test_chart_version_falls_back_to_ref(self, installer: HelmInstaller) -> None:
        assert installer.chart_version(deployment(sha="", ref="v2")) == "1.0.0-v2"


class TestInstall:
    """Tests for running the upgrade."""

    def test_runs_upgrade_install(self, installer: HelmInstaller, helm: MagicMock) -> None:
        installer.install(deployment(project="api", sha="abc"), b"replicas: 2\n")

        helm.upgrade_install.assert_called_once()
        args, kwargs = helm.upgrade_install.call_args
        assert args == ("api", "oci://quay.io/acme-charts/api-chart", "default")
        assert kwargs["version"] == "1.0.0-abc"
        assert kwargs["timeout"] == "10m"
        assert len(kwargs["value_files"]) == 1

    def test_values_file_holds_values_and_is_removed(
        self, installer: HelmInstaller, helm: MagicMock
    ) -> None:
        seen: dict[str, bytes] = {}

        def capture(*_: object, value_files: list[Path], **__: object) -> CommandResult:
            seen["content"] = value_files[0].read_bytes()
            seen["path"] = value_files[0]
            return CommandResult(success=True)

        helm.upgrade_install.side_effect = capture

        installer.install(deployment(), b"replicas: 2\n")

        assert seen["content"] == b"replicas: 2\n"
        assert not Path(seen["path"]).exists()

    def test_failure_raises_with_output(self, installer: HelmInstaller, helm: MagicMock) -> None:
        helm.upgrade_install.return_value = CommandResult(
            success=False, stderr="Error: chart not found", returncode=1
        )

        with pytest.raises(InstallerError) as exc_info:
            installer.install(deployment(project="api"), b"")

        assert exc_info.value.message == "helm upgrade of api exited with 1"
        assert exc_info.value.details == "Error: chart not found"

    def test_timeout_raises(self, installer: HelmInstaller, helm: MagicMock) -> None:
        helm.upgrade_install.return_value = CommandResult(
            success=False, returncode=-1, timed_out=True
        )

        with pytest.raises(InstallerError, match="timed out"):
            installer.install(deployment(), b"")

    def test_invalid_timeout_raises_installer_error(
        self, installer: HelmInstaller, helm: MagicMock
    ) -> None:
        helm.upgrade_install.side_effect = ValueError("Invalid duration: 'ten minutes'")

        with pytest.raises(InstallerError, match="Invalid helm timeout"):
            installer.install(deployment(), b"replicas: 2\n")


class TestRegistryLogin:
    def test_no_login_without_credentials(self, helm: MagicMock, installer: HelmInstaller) -> None:
        helm.registry_login.assert_not_called()

    def test_logs_in_with_credentials(self, config: ConfigData, helm: MagicMock) -> None:
        config = config.model_copy(
            update={"helm": config.helm.model_copy(update={"username": "bot", "password": "pw"})}
        )

        HelmInstaller(config, helm=helm)

        helm.registry_login.assert_called_once_with("quay.io", "bot", "pw", timeout=10.0)

    def test_failed_login_raises(self, config: ConfigData, helm: MagicMock) -> None:
        config = config.model_copy(
            update={"helm": config.helm.model_copy(update={"username": "bot", "password": "pw"})}
        )
        helm.registry_login.return_value = CommandResult(
            success=False, stderr="unauthorized", returncode=1
        )

        with pytest.raises(InstallerError, match="Unable to log in"):
            HelmInstaller(config, helm=helm)
