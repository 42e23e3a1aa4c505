"""Configuration models for the agent.

``ConfigData`` is built once at start-up and passed to every component
constructor. All models are frozen so components cannot mutate shared
configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.draughtsman.errors import ConfigurationError
from src.infra.shell_commands.helm import parse_duration


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class EventerSettings(_Section):
    type: str = "github"


class InstallerSettings(_Section):
    type: str = "helm"


class ConfigurerSettings(_Section):
    types: tuple[str, ...] = ("configmap", "secret")

    @field_validator("types", mode="before")
    @classmethod
    def _split_types(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(t.strip() for t in value.split(",") if t.strip())
        return value


class NotifierSettings(_Section):
    type: str = "slack"


class DeployerSettings(_Section):
    """Component type selection."""

    type: str = "standard"
    eventer: EventerSettings = Field(default_factory=EventerSettings)
    installer: InstallerSettings = Field(default_factory=InstallerSettings)
    configurer: ConfigurerSettings = Field(default_factory=ConfigurerSettings)
    notifier: NotifierSettings = Field(default_factory=NotifierSettings)


class HTTPClientSettings(_Section):
    timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds")


class KubernetesTLSSettings(_Section):
    ca_file: str = ""
    crt_file: str = ""
    key_file: str = ""


class KubernetesSettings(_Section):
    address: str = ""
    in_cluster: bool = True
    tls: KubernetesTLSSettings = Field(default_factory=KubernetesTLSSettings)


class GitHubSettings(_Section):
    oauth_token: str = ""
    organisation: str = ""
    projects: tuple[str, ...] = ()
    poll_interval: float = Field(default=60.0, gt=0, description="Seconds")
    api_url: str = "https://api.github.com"

    @field_validator("projects", mode="before")
    @classmethod
    def _split_projects(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(p.strip() for p in value.split(",") if p.strip())
        return value


class HelmSettings(_Section):
    binary_path: str = "helm"
    registry: str = "quay.io"
    organisation: str = ""
    username: str = ""
    password: str = ""
    namespace: str = "default"
    timeout: str = "10m"

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: str) -> str:
        parse_duration(value)
        return value


class ConfigMapSettings(_Section):
    name: str = "draughtsman-values-configmap"
    namespace: str = "draughtsman"
    key: str = "values"


class SecretSettings(_Section):
    name: str = "draughtsman-values-secret"
    namespace: str = "draughtsman"
    key: str = "values"


class FileSettings(_Section):
    path: str = ""


class SlackSettings(_Section):
    token: str = ""
    channel: str = ""
    emoji: str = ":older_man:"
    username: str = "draughtsman"
    api_url: str = "https://slack.com/api"


class ServerSettings(_Section):
    host: str = "0.0.0.0"
    port: int = 8000


class ConfigData(_Section):
    """Complete agent configuration."""

    environment: str = Field(min_length=1)
    deployer: DeployerSettings = Field(default_factory=DeployerSettings)
    http_client: HTTPClientSettings = Field(default_factory=HTTPClientSettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    helm: HelmSettings = Field(default_factory=HelmSettings)
    configmap: ConfigMapSettings = Field(default_factory=ConfigMapSettings)
    secret: SecretSettings = Field(default_factory=SecretSettings)
    file: FileSettings = Field(default_factory=FileSettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    def validate_for_runtime(self) -> None:
        """Check that the selected components have what they need.

        Raises:
            ConfigurationError: Listing every missing setting
        """
        missing: list[str] = []
        deployer = self.deployer

        if deployer.eventer.type == "github":
            if not self.github.oauth_token:
                missing.append("github.oauth_token")
            if not self.github.organisation:
                missing.append("github.organisation")
            if not self.github.projects:
                missing.append("github.projects")

        if deployer.installer.type == "helm" and not self.helm.organisation:
            missing.append("helm.organisation")

        if not deployer.configurer.types:
            missing.append("deployer.configurer.types")
        if "file" in deployer.configurer.types and not self.file.path:
            missing.append("file.path")

        if deployer.notifier.type == "slack":
            if not self.slack.token:
                missing.append("slack.token")
            if not self.slack.channel:
                missing.append("slack.channel")

        if missing:
            raise ConfigurationError(
                "Missing required configuration",
                details=", ".join(missing),
            )
