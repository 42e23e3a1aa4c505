"""Daemon command: runs the deployment agent.

Settings come from an optional YAML file; every flag given on the command
line overrides the matching file value.
"""

from pathlib import Path
from typing import Annotated, Any

import typer

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.config.config_loader import load_config
from src.draughtsman.logs import setup_logging

from .shared import print_header, with_error_handling


def build_overrides(**flags: Any) -> dict[str, Any]:
    """Map flat command line flags onto the nested configuration layout.

    Flags left at None are dropped later by the loader.
    """
    return {
        "environment": flags.get("environment"),
        "deployer": {
            "type": flags.get("deployer_type"),
            "eventer": {"type": flags.get("eventer_type")},
            "installer": {"type": flags.get("installer_type")},
            "configurer": {"types": flags.get("configurer_types")},
            "notifier": {"type": flags.get("notifier_type")},
        },
        "http_client": {"timeout": flags.get("http_timeout")},
        "kubernetes": {
            "address": flags.get("kubernetes_address"),
            "in_cluster": flags.get("kubernetes_in_cluster"),
            "tls": {
                "ca_file": flags.get("kubernetes_ca_file"),
                "crt_file": flags.get("kubernetes_crt_file"),
                "key_file": flags.get("kubernetes_key_file"),
            },
        },
        "github": {
            "oauth_token": flags.get("github_token"),
            "organisation": flags.get("github_organisation"),
            "projects": flags.get("github_projects"),
            "poll_interval": flags.get("github_poll_interval"),
        },
        "helm": {
            "binary_path": flags.get("helm_binary"),
            "registry": flags.get("helm_registry"),
            "organisation": flags.get("helm_organisation"),
            "username": flags.get("helm_username"),
            "password": flags.get("helm_password"),
            "namespace": flags.get("helm_namespace"),
        },
        "configmap": {
            "name": flags.get("configmap_name"),
            "namespace": flags.get("configmap_namespace"),
            "key": flags.get("configmap_key"),
        },
        "secret": {
            "name": flags.get("secret_name"),
            "namespace": flags.get("secret_namespace"),
            "key": flags.get("secret_key"),
        },
        "file": {"path": flags.get("file_path")},
        "slack": {
            "token": flags.get("slack_token"),
            "channel": flags.get("slack_channel"),
            "emoji": flags.get("slack_emoji"),
            "username": flags.get("slack_username"),
        },
        "server": {"host": flags.get("host"), "port": flags.get("port")},
    }


@with_error_handling
def daemon(
    config_file: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="YAML configuration file", exists=True, dir_okay=False),
    ] = None,
    environment: Annotated[
        str | None, typer.Option(help="Environment name that draughtsman is running in.")
    ] = None,
    deployer_type: Annotated[
        str | None, typer.Option(help="Which deployer to use for deployment management.")
    ] = None,
    eventer_type: Annotated[
        str | None, typer.Option(help="Which eventer to use for event management.")
    ] = None,
    installer_type: Annotated[
        str | None, typer.Option(help="Which installer to use for installation management.")
    ] = None,
    configurer_types: Annotated[
        str | None,
        typer.Option(help="Comma separated list of configurers, tried in order."),
    ] = None,
    notifier_type: Annotated[
        str | None, typer.Option(help="Which notifier to use for notification management.")
    ] = None,
    http_timeout: Annotated[
        float | None, typer.Option(help="Timeout for HTTP requests in seconds.")
    ] = None,
    kubernetes_address: Annotated[
        str | None,
        typer.Option(help="Address used to connect to Kubernetes. When empty in-cluster config is used."),
    ] = None,
    kubernetes_in_cluster: Annotated[
        bool | None,
        typer.Option(
            "--kubernetes-in-cluster/--no-kubernetes-in-cluster",
            help="Whether to use the in-cluster config to authenticate with Kubernetes.",
        ),
    ] = None,
    kubernetes_ca_file: Annotated[
        str | None, typer.Option(help="Certificate authority file for Kubernetes.")
    ] = None,
    kubernetes_crt_file: Annotated[
        str | None, typer.Option(help="Client certificate file for Kubernetes.")
    ] = None,
    kubernetes_key_file: Annotated[
        str | None, typer.Option(help="Client key file for Kubernetes.")
    ] = None,
    github_token: Annotated[
        str | None,
        typer.Option(
            envvar="GITHUB_OAUTH_TOKEN",
            help="OAuth token for GitHub. Needs 'repo_deployment' scope.",
        ),
    ] = None,
    github_organisation: Annotated[
        str | None, typer.Option(help="Organisation under which to check for deployments.")
    ] = None,
    github_projects: Annotated[
        str | None, typer.Option(help="Comma separated list of projects to check for deployments.")
    ] = None,
    github_poll_interval: Annotated[
        float | None, typer.Option(help="Seconds between polls for new deployments.")
    ] = None,
    helm_binary: Annotated[str | None, typer.Option(help="Path to Helm binary.")] = None,
    helm_registry: Annotated[str | None, typer.Option(help="Chart registry host.")] = None,
    helm_organisation: Annotated[
        str | None, typer.Option(help="Organisation of the chart registry.")
    ] = None,
    helm_username: Annotated[
        str | None, typer.Option(help="Username for the chart registry.")
    ] = None,
    helm_password: Annotated[
        str | None,
        typer.Option(envvar="HELM_REGISTRY_PASSWORD", help="Password for the chart registry."),
    ] = None,
    helm_namespace: Annotated[
        str | None, typer.Option(help="Namespace releases are installed into.")
    ] = None,
    configmap_name: Annotated[
        str | None, typer.Option(help="Name of configmap holding values data.")
    ] = None,
    configmap_namespace: Annotated[
        str | None, typer.Option(help="Namespace of configmap holding values data.")
    ] = None,
    configmap_key: Annotated[
        str | None, typer.Option(help="Key in configmap holding values data.")
    ] = None,
    secret_name: Annotated[
        str | None, typer.Option(help="Name of secret holding values data.")
    ] = None,
    secret_namespace: Annotated[
        str | None, typer.Option(help="Namespace of secret holding values data.")
    ] = None,
    secret_key: Annotated[
        str | None, typer.Option(help="Key in secret holding values data.")
    ] = None,
    file_path: Annotated[str | None, typer.Option(help="Path to values file.")] = None,
    slack_token: Annotated[
        str | None,
        typer.Option(envvar="SLACK_TOKEN", help="Token to post Slack notifications with."),
    ] = None,
    slack_channel: Annotated[
        str | None, typer.Option(help="Channel to post Slack notifications to.")
    ] = None,
    slack_emoji: Annotated[
        str | None, typer.Option(help="Emoji to use for Slack notifications.")
    ] = None,
    slack_username: Annotated[
        str | None, typer.Option(help="Username to post Slack notifications with.")
    ] = None,
    host: Annotated[str | None, typer.Option(help="Address the HTTP server binds to.")] = None,
    port: Annotated[int | None, typer.Option(help="Port the HTTP server listens on.")] = None,
    log_level: Annotated[str, typer.Option(help="Minimum log level.")] = "INFO",
    log_json: Annotated[bool, typer.Option(help="Emit JSON log lines.")] = False,
) -> None:
    """Run the deployment agent.

    Examples:
        draughtsman daemon --config /etc/draughtsman/config.yaml
        draughtsman daemon --environment production --github-organisation acme \\
            --github-projects api,web --helm-organisation acme
    """
    setup_logging(log_level, json=log_json)

    overrides = build_overrides(
        environment=environment,
        deployer_type=deployer_type,
        eventer_type=eventer_type,
        installer_type=installer_type,
        configurer_types=configurer_types,
        notifier_type=notifier_type,
        http_timeout=http_timeout,
        kubernetes_address=kubernetes_address,
        kubernetes_in_cluster=kubernetes_in_cluster,
        kubernetes_ca_file=kubernetes_ca_file,
        kubernetes_crt_file=kubernetes_crt_file,
        kubernetes_key_file=kubernetes_key_file,
        github_token=github_token,
        github_organisation=github_organisation,
        github_projects=github_projects,
        github_poll_interval=github_poll_interval,
        helm_binary=helm_binary,
        helm_registry=helm_registry,
        helm_organisation=helm_organisation,
        helm_username=helm_username,
        helm_password=helm_password,
        helm_namespace=helm_namespace,
        configmap_name=configmap_name,
        configmap_namespace=configmap_namespace,
        configmap_key=configmap_key,
        secret_name=secret_name,
        secret_namespace=secret_namespace,
        secret_key=secret_key,
        file_path=file_path,
        slack_token=slack_token,
        slack_channel=slack_channel,
        slack_emoji=slack_emoji,
        slack_username=slack_username,
        host=host,
        port=port,
    )
    config = load_config(config_file, overrides)
    config.validate_for_runtime()

    print_header(
        f"draughtsman: {config.environment}",
        f"projects: {', '.join(config.github.projects) or '-'} | "
        f"configurers: {', '.join(config.deployer.configurer.types)}",
    )

    serve(config, log_level)


def serve(config: ConfigData, log_level: str) -> None:
    """Build the service and serve HTTP until interrupted."""
    import uvicorn

    from src.draughtsman.api.http.app import create_app
    from src.draughtsman.service.service import Service

    service = Service(config)
    server = uvicorn.Server(
        uvicorn.Config(
            app=create_app(service),
            host=config.server.host,
            port=config.server.port,
            log_level=log_level.lower(),
        )
    )
    server.run()
