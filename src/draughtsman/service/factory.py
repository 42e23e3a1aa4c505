"""Construction of components from their configured type tags.

Each component kind has a closed registry mapping a tag to its
implementation. Adding a variant means adding it to the registry; the
deployer only sees the shared interfaces.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TypeVar

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.errors import UnknownComponentTypeError
from src.draughtsman.service.configurer.base import Configurer
from src.draughtsman.service.configurer.chain import ChainConfigurer
from src.draughtsman.service.configurer.configmap import (
    CONFIGMAP_CONFIGURER_TYPE,
    ConfigMapConfigurer,
)
from src.draughtsman.service.configurer.file import FILE_CONFIGURER_TYPE, FileConfigurer
from src.draughtsman.service.configurer.secret import SECRET_CONFIGURER_TYPE, SecretConfigurer
from src.draughtsman.service.deployer.base import Deployer
from src.draughtsman.service.deployer.standard import STANDARD_DEPLOYER_TYPE, StandardDeployer
from src.draughtsman.service.eventer.base import Eventer
from src.draughtsman.service.eventer.github import GITHUB_EVENTER_TYPE, GitHubEventer
from src.draughtsman.service.installer.base import Installer
from src.draughtsman.service.installer.helm import HELM_INSTALLER_TYPE, HelmInstaller
from src.draughtsman.service.notifier.base import Notifier
from src.draughtsman.service.notifier.slack import SLACK_NOTIFIER_TYPE, SlackNotifier

T = TypeVar("T")

EVENTERS: Mapping[str, Callable[[ConfigData], Eventer]] = {
    GITHUB_EVENTER_TYPE: GitHubEventer,
}

INSTALLERS: Mapping[str, Callable[[ConfigData], Installer]] = {
    HELM_INSTALLER_TYPE: HelmInstaller,
}

CONFIGURERS: Mapping[str, Callable[[ConfigData], Configurer]] = {
    CONFIGMAP_CONFIGURER_TYPE: ConfigMapConfigurer,
    SECRET_CONFIGURER_TYPE: SecretConfigurer,
    FILE_CONFIGURER_TYPE: FileConfigurer,
}

NOTIFIERS: Mapping[str, Callable[[ConfigData], Notifier]] = {
    SLACK_NOTIFIER_TYPE: SlackNotifier,
}

DEPLOYERS = {
    STANDARD_DEPLOYER_TYPE: StandardDeployer,
}


def _lookup(registry: Mapping[str, T], kind: str, tag: str) -> T:
    try:
        return registry[tag]
    except KeyError:
        known = ", ".join(sorted(registry))
        raise UnknownComponentTypeError(
            f"Unknown {kind} type {tag!r}", details=f"Known types: {known}"
        ) from None


def new_eventer(config: ConfigData) -> Eventer:
    return _lookup(EVENTERS, "eventer", config.deployer.eventer.type)(config)


def new_installer(config: ConfigData) -> Installer:
    return _lookup(INSTALLERS, "installer", config.deployer.installer.type)(config)


def new_configurer(config: ConfigData) -> Configurer:
    """Build the configured configurers, combined in their listed order."""
    factories = [
        _lookup(CONFIGURERS, "configurer", tag) for tag in config.deployer.configurer.types
    ]
    configurers = [factory(config) for factory in factories]
    if len(configurers) == 1:
        return configurers[0]
    return ChainConfigurer(configurers)


def new_notifier(config: ConfigData) -> Notifier:
    return _lookup(NOTIFIERS, "notifier", config.deployer.notifier.type)(config)


def new_deployer(
    config: ConfigData,
    *,
    eventer: Eventer,
    configurer: Configurer,
    installer: Installer,
    notifier: Notifier,
) -> Deployer:
    deployer_cls = _lookup(DEPLOYERS, "deployer", config.deployer.type)
    return deployer_cls(config, eventer, configurer, installer, notifier)
