"""Service wiring: builds the components and owns the deployer thread."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from loguru import logger

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.service import factory
from src.draughtsman.service.configurer.base import Configurer
from src.draughtsman.service.deployer.base import Deployer, DeployerState
from src.draughtsman.service.eventer.base import Eventer
from src.draughtsman.service.installer.base import Installer
from src.draughtsman.service.notifier.base import Notifier


@dataclass
class Components:
    """The collaborators the deployer drives."""

    eventer: Eventer
    configurer: Configurer
    installer: Installer
    notifier: Notifier

    @classmethod
    def from_config(cls, config: ConfigData) -> Components:
        """Build every component selected in the configuration.

        Raises:
            UnknownComponentTypeError: If a type tag is not registered
            DraughtsmanError: If a component fails to initialize
        """
        return cls(
            eventer=factory.new_eventer(config),
            configurer=factory.new_configurer(config),
            installer=factory.new_installer(config),
            notifier=factory.new_notifier(config),
        )


class Service:
    """Runs the deployer loop in a background thread.

    Example:
        ```python
        service = Service(config)
        service.boot()
        ...
        service.shutdown()
        ```
    """

    def __init__(self, config: ConfigData, components: Components | None = None) -> None:
        self.config = config
        self.components = components or Components.from_config(config)
        self.deployer: Deployer = factory.new_deployer(
            config,
            eventer=self.components.eventer,
            configurer=self.components.configurer,
            installer=self.components.installer,
            notifier=self.components.notifier,
        )
        self._thread: threading.Thread | None = None

    def boot(self) -> None:
        """Start the deployer loop unless it is already running."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self.deployer.run, name="draughtsman-deployer", daemon=True
        )
        self._thread.start()
        logger.info("Service booted")

    def shutdown(self, timeout: float | None = None) -> None:
        """Stop the loop, letting an in-flight deployment finish first.

        Args:
            timeout: Seconds to wait for the loop thread; None waits forever
        """
        self.deployer.stop()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Deployer did not stop in time")
        self.components.eventer.close()
        self.components.notifier.close()
        logger.info("Service shut down")

    def state(self) -> DeployerState:
        return self.deployer.state()
