"""Standard deployer: the poll, configure, install, report, notify loop.

Each tick polls the eventer once and handles the returned deployments
sequentially, oldest first. A busy marker guards the whole tick so that at
most one installation runs at any time; a tick that finds the marker held
is skipped instead of overlapping.

Nothing is persisted locally. A deployment that could not be finished
stays pending upstream and is picked up again on the next tick.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from enum import Enum

from loguru import logger

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import (
    ConfigurerError,
    EventerError,
    InstallerError,
    InvalidTransitionError,
    NotifierError,
)
from src.draughtsman.service.configurer.base import Configurer
from src.draughtsman.service.deployer.base import Deployer, DeployerState, TickResult
from src.draughtsman.service.eventer.base import Eventer
from src.draughtsman.service.installer.base import Installer
from src.draughtsman.service.notifier.base import Notifier, failure_message, success_message
from src.draughtsman.service.status import (
    Deployment,
    DeploymentState,
    is_pending,
    validate_transition,
)

STANDARD_DEPLOYER_TYPE = "standard"


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DEFERRED = "deferred"
    IGNORED = "ignored"


class StandardDeployer(Deployer):
    """Sequential, single-flight deployer."""

    def __init__(
        self,
        config: ConfigData,
        eventer: Eventer,
        configurer: Configurer,
        installer: Installer,
        notifier: Notifier,
    ) -> None:
        self._environment = config.environment
        self._poll_interval = config.github.poll_interval
        self._eventer = eventer
        self._configurer = configurer
        self._installer = installer
        self._notifier = notifier

        # Ticks may come from the loop thread or a caller thread, so the
        # busy marker is a lock acquired without blocking
        self._busy = threading.Lock()
        self._stopping = threading.Event()
        self._running = False
        self._last_tick_at: datetime | None = None
        self._last_error: str | None = None

    # =========================================================================
    # Loop
    # =========================================================================

    def run(self) -> None:
        logger.info(
            f"Starting deployer for environment {self._environment}, "
            f"polling every {self._poll_interval:g}s"
        )
        self._running = True
        try:
            while not self._stopping.is_set():
                try:
                    self.tick()
                except Exception:
                    logger.exception("Unexpected error in deployer tick")
                self._stopping.wait(self._poll_interval)
        finally:
            self._running = False
            logger.info("Deployer stopped")

    def stop(self) -> None:
        self._stopping.set()

    def state(self) -> DeployerState:
        return DeployerState(
            running=self._running,
            in_flight=self._busy.locked(),
            last_tick_at=self._last_tick_at,
            last_error=self._last_error,
        )

    def tick(self) -> TickResult:
        if not self._busy.acquire(blocking=False):
            logger.warning("Previous deployment cycle still running, skipping tick")
            return TickResult(skipped=True)

        try:
            return self._tick()
        finally:
            self._busy.release()

    def _tick(self) -> TickResult:
        self._last_tick_at = datetime.now(UTC)
        result = TickResult()

        try:
            deployments = self._eventer.poll()
        except EventerError as e:
            logger.error(f"Polling for deployments failed: {e.message}")
            self._last_error = e.message
            result.error = e.message
            return result

        self._last_error = None
        result.polled = len(deployments)
        if not deployments:
            logger.debug("No pending deployments")
            return result

        logger.info(f"Found {len(deployments)} pending deployments")
        for deployment in deployments:
            if self._stopping.is_set():
                logger.info("Shutdown requested, leaving remaining deployments for later")
                result.deferred += 1
                continue

            outcome = self._execute_contained(deployment)
            if outcome is Outcome.SUCCEEDED:
                result.succeeded += 1
            elif outcome is Outcome.FAILED:
                result.failed += 1
            elif outcome is Outcome.IGNORED:
                result.ignored += 1
            else:
                result.deferred += 1

        return result

    # =========================================================================
    # Single deployment cycle
    # =========================================================================

    def _execute_contained(self, deployment: Deployment) -> Outcome:
        """Run one cycle, keeping any error scoped to this deployment."""
        with logger.contextualize(**deployment.log_context):
            try:
                return self._execute(deployment)
            except Exception:
                logger.exception(f"Unexpected error deploying {deployment.project}")
                return Outcome.DEFERRED

    def _execute(self, deployment: Deployment) -> Outcome:
        if not is_pending(deployment):
            state = deployment.current_state
            logger.warning(
                f"Skipping deployment {deployment.id}, it is no longer pending "
                f"(latest state {state.value if state else 'none'})"
            )
            return Outcome.IGNORED

        logger.info(f"Deploying {deployment.project} ({deployment.ref})")

        try:
            values = self._configurer.fetch_values()
        except ConfigurerError as e:
            logger.error(f"Fetching values failed, will retry next tick: {e.message}")
            if e.details:
                logger.debug(e.details)
            return Outcome.DEFERRED

        try:
            self._installer.install(deployment, values)
        except InstallerError as e:
            logger.error(f"Installing {deployment.project} failed: {e.message}")
            if e.details:
                logger.debug(e.details)
            self._report(deployment, DeploymentState.FAILURE, e.message)
            self._notify(failure_message(deployment, e.message))
            return Outcome.FAILED

        logger.info(f"Deployed {deployment.project} ({deployment.ref})")
        self._report(deployment, DeploymentState.SUCCESS, "Deployed by draughtsman")
        self._notify(success_message(deployment))
        return Outcome.SUCCEEDED

    def _report(self, deployment: Deployment, state: DeploymentState, description: str) -> None:
        try:
            validate_transition(deployment, state)
        except InvalidTransitionError as e:
            logger.warning(f"Not reporting status: {e.message}")
            return

        try:
            self._eventer.report_status(deployment, state, description)
        except EventerError as e:
            # The deployment stays pending upstream and the cycle reruns next tick
            logger.error(f"Reporting {state.value} failed: {e.message}")

    def _notify(self, message: str) -> None:
        try:
            self._notifier.notify(message)
        except NotifierError as e:
            logger.warning(f"Notification failed: {e.message}")
