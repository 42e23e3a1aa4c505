"""Tests for the standard deployer loop."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, call

import pytest
from loguru import logger

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import (
    ConfigurerError,
    EventerError,
    InstallerError,
    NotifierError,
)
from src.draughtsman.service.configurer.base import Configurer
from src.draughtsman.service.deployer.standard import StandardDeployer
from src.draughtsman.service.eventer.base import Eventer
from src.draughtsman.service.eventer.filters import filter_deployments_by_status, sort_deployments
from src.draughtsman.service.installer.base import Installer
from src.draughtsman.service.notifier.base import Notifier
from src.draughtsman.service.status import Deployment, DeploymentState, DeploymentStatus
from tests.helpers import deployment


@pytest.fixture
def eventer() -> MagicMock:
    mock = MagicMock(spec=Eventer)
    mock.poll.return_value = []
    return mock


@pytest.fixture
def configurer() -> MagicMock:
    mock = MagicMock(spec=Configurer)
    mock.fetch_values.return_value = b"replicas: 2\n"
    return mock


@pytest.fixture
def installer() -> MagicMock:
    return MagicMock(spec=Installer)


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock(spec=Notifier)


@pytest.fixture
def deployer(
    config: ConfigData,
    eventer: MagicMock,
    configurer: MagicMock,
    installer: MagicMock,
    notifier: MagicMock,
) -> StandardDeployer:
    return StandardDeployer(config, eventer, configurer, installer, notifier)


class TestTick:
    """Tests for a single poll-and-process cycle."""

    def test_no_deployments(self, deployer: StandardDeployer, installer: MagicMock) -> None:
        result = deployer.tick()

        assert result.polled == 0
        assert not result.skipped
        installer.install.assert_not_called()

    def test_successful_deployment(
        self,
        deployer: StandardDeployer,
        eventer: MagicMock,
        installer: MagicMock,
        notifier: MagicMock,
    ) -> None:
        """A pending deployment is installed, reported and announced."""
        d = deployment(7, project="api", ref="v1.2.0")
        eventer.poll.return_value = [d]

        result = deployer.tick()

        assert result.succeeded == 1
        installer.install.assert_called_once_with(d, b"replicas: 2\n")
        eventer.report_status.assert_called_once()
        assert eventer.report_status.call_args[0][:2] == (d, DeploymentState.SUCCESS)
        notifier.notify.assert_called_once_with(
            "Successfully deployed api (v1.2.0) to production"
        )

    def test_installer_failure_reports_failure_and_continues(
        self,
        deployer: StandardDeployer,
        eventer: MagicMock,
        installer: MagicMock,
        notifier: MagicMock,
    ) -> None:
        """A failing install marks that deployment failed and moves on."""
        broken = deployment(1, project="api", minutes=0)
        healthy = deployment(2, project="web", minutes=1)
        eventer.poll.return_value = [broken, healthy]
        installer.install.side_effect = [InstallerError("helm upgrade of api exited with 1"), None]

        result = deployer.tick()

        assert result.failed == 1
        assert result.succeeded == 1
        assert eventer.report_status.call_args_list == [
            call(broken, DeploymentState.FAILURE, "helm upgrade of api exited with 1"),
            call(healthy, DeploymentState.SUCCESS, "Deployed by draughtsman"),
        ]
        first_message = notifier.notify.call_args_list[0][0][0]
        assert first_message.startswith("Failed to deploy api (main) to production")
        assert "exited with 1" in first_message

    def test_processes_in_poll_order(
        self, deployer: StandardDeployer, eventer: MagicMock, installer: MagicMock
    ) -> None:
        """Installs run one by one in the order the eventer returned them."""
        first = deployment(10, minutes=0)
        second = deployment(11, minutes=5)
        eventer.poll.return_value = [first, second]

        deployer.tick()

        assert [c[0][0].id for c in installer.install.call_args_list] == [10, 11]

    def test_configure_failure_defers_without_report(
        self,
        deployer: StandardDeployer,
        eventer: MagicMock,
        configurer: MagicMock,
        installer: MagicMock,
        notifier: MagicMock,
    ) -> None:
        """Missing values leave the deployment pending for the next tick."""
        eventer.poll.return_value = [deployment(1)]
        configurer.fetch_values.side_effect = ConfigurerError("No configurer returned values")

        result = deployer.tick()

        assert result.deferred == 1
        installer.install.assert_not_called()
        eventer.report_status.assert_not_called()
        notifier.notify.assert_not_called()

    def test_terminal_deployment_is_not_reinstalled(
        self, deployer: StandardDeployer, eventer: MagicMock, installer: MagicMock
    ) -> None:
        """A terminal deployment leaking through the poll is left alone."""
        eventer.poll.return_value = [deployment(1, states=["pending", "success"])]

        result = deployer.tick()

        assert result.ignored == 1
        installer.install.assert_not_called()
        eventer.report_status.assert_not_called()

    def test_skipped_deployment_logs_latest_state(
        self, deployer: StandardDeployer, eventer: MagicMock
    ) -> None:
        messages: list[str] = []
        sink_id = logger.add(messages.append, level="WARNING", format="{message}")
        eventer.poll.return_value = [deployment(3, states=["pending", "failure"])]

        try:
            deployer.tick()
        finally:
            logger.remove(sink_id)

        assert any("latest state failure" in m for m in messages)

    def test_report_failure_is_contained(
        self,
        deployer: StandardDeployer,
        eventer: MagicMock,
        installer: MagicMock,
        notifier: MagicMock,
    ) -> None:
        eventer.poll.return_value = [deployment(1), deployment(2, minutes=1)]
        eventer.report_status.side_effect = EventerError("GitHub returned 502")

        result = deployer.tick()

        assert installer.install.call_count == 2
        assert result.succeeded == 2
        assert notifier.notify.call_count == 2

    def test_notifier_failure_is_contained(
        self, deployer: StandardDeployer, eventer: MagicMock, notifier: MagicMock
    ) -> None:
        eventer.poll.return_value = [deployment(1)]
        notifier.notify.side_effect = NotifierError("Slack rejected message")

        result = deployer.tick()

        assert result.succeeded == 1
        eventer.report_status.assert_called_once()

    def test_unexpected_error_defers_deployment(
        self, deployer: StandardDeployer, eventer: MagicMock, installer: MagicMock
    ) -> None:
        eventer.poll.return_value = [deployment(1), deployment(2, minutes=1)]
        installer.install.side_effect = [RuntimeError("boom"), None]

        result = deployer.tick()

        assert result.deferred == 1
        assert result.succeeded == 1

    def test_poll_error_aborts_tick(
        self, deployer: StandardDeployer, eventer: MagicMock, installer: MagicMock
    ) -> None:
        eventer.poll.side_effect = EventerError("Unable to reach GitHub")

        result = deployer.tick()

        assert result.error == "Unable to reach GitHub"
        assert deployer.state().last_error == "Unable to reach GitHub"
        installer.install.assert_not_called()

    def test_successful_poll_clears_last_error(
        self, deployer: StandardDeployer, eventer: MagicMock
    ) -> None:
        eventer.poll.side_effect = [EventerError("down"), []]

        deployer.tick()
        deployer.tick()

        assert deployer.state().last_error is None
        assert deployer.state().last_tick_at is not None


class TestSingleFlight:
    """Tests for the at-most-one-cycle guarantee."""

    def test_overlapping_tick_is_skipped(
        self, deployer: StandardDeployer, eventer: MagicMock, installer: MagicMock
    ) -> None:
        started = threading.Event()
        release = threading.Event()

        def slow_install(*_: object) -> None:
            started.set()
            release.wait(5)

        eventer.poll.return_value = [deployment(1)]
        installer.install.side_effect = slow_install

        worker = threading.Thread(target=deployer.tick)
        worker.start()
        try:
            assert started.wait(5)
            assert deployer.state().in_flight

            result = deployer.tick()

            assert result.skipped
        finally:
            release.set()
            worker.join(5)

        assert installer.install.call_count == 1
        assert not deployer.state().in_flight


class TestRunLoop:
    """Tests for the blocking loop and graceful stop."""

    def test_run_ticks_until_stopped(
        self, deployer: StandardDeployer, eventer: MagicMock
    ) -> None:
        ticked = threading.Event()

        def poll() -> list:
            ticked.set()
            return []

        eventer.poll.side_effect = poll

        worker = threading.Thread(target=deployer.run)
        worker.start()
        assert ticked.wait(5)
        assert deployer.state().running

        deployer.stop()
        worker.join(5)

        assert not worker.is_alive()
        assert not deployer.state().running

    def test_stop_defers_remaining_deployments(
        self, deployer: StandardDeployer, eventer: MagicMock, installer: MagicMock
    ) -> None:
        """After stop() the in-flight install finishes, the rest wait."""
        eventer.poll.return_value = [deployment(1), deployment(2, minutes=1)]
        installer.install.side_effect = lambda *_: deployer.stop()

        result = deployer.tick()

        assert installer.install.call_count == 1
        assert result.succeeded == 1
        assert result.deferred == 1

    def test_loop_survives_unexpected_tick_error(
        self, deployer: StandardDeployer, eventer: MagicMock
    ) -> None:
        calls = []

        def poll() -> list:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("unexpected")
            deployer.stop()
            return []

        eventer.poll.side_effect = poll

        deployer.run()

        assert len(calls) == 2


class FakeEventer(Eventer):
    """Eventer that keeps status writes and filters like the real one."""

    def __init__(self, deployments: list[Deployment]) -> None:
        self.deployments = {d.id: d for d in deployments}

    def poll(self) -> list[Deployment]:
        return sort_deployments(filter_deployments_by_status(self.deployments.values()))

    def report_status(
        self,
        deployment: Deployment,
        state: DeploymentState,
        description: str | None = None,
    ) -> None:
        current = self.deployments[deployment.id]
        entry = DeploymentStatus(state=state, created_at=current.statuses[-1].created_at)
        self.deployments[deployment.id] = current.model_copy(
            update={"statuses": (*current.statuses, entry)}
        )


class TestRepeatedTicks:
    def test_terminal_deployment_installed_once(
        self,
        config: ConfigData,
        configurer: MagicMock,
        installer: MagicMock,
        notifier: MagicMock,
    ) -> None:
        """Ticks after a successful report never install the deployment again."""
        eventer = FakeEventer([deployment(1)])
        deployer = StandardDeployer(config, eventer, configurer, installer, notifier)

        first = deployer.tick()
        second = deployer.tick()

        assert first.succeeded == 1
        assert second.polled == 0
        installer.install.assert_called_once()
