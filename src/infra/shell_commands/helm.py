"""Helm command abstractions.

This module provides commands for Helm release management: registry
login and idempotent install/upgrade of a release.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|ms|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}

# Extra time the process gets beyond Helm's own --timeout before it is killed
PROCESS_TIMEOUT_GRACE = 60.0


def parse_duration(value: str) -> float:
    """Convert a Go-style duration ("10m", "1m30s", "300s") to seconds.

    Raises:
        ValueError: If the string is not a valid duration
    """
    value = value.strip()
    if value.isdigit():
        return float(value)
    parts = _DURATION_PART.findall(value)
    if not parts or "".join(n + u for n, u in parts) != value:
        raise ValueError(f"Invalid duration: {value!r}")
    return sum(float(number) * _UNIT_SECONDS[unit] for number, unit in parts)


class HelmCommands:
    """Helm-related shell commands."""

    def __init__(self, runner: CommandRunner, binary: str = "helm") -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
            binary: Path to the Helm binary
        """
        self._runner = runner
        self._binary = binary

    def registry_login(
        self,
        registry: str,
        username: str,
        password: str,
        *,
        timeout: float | None = None,
    ) -> CommandResult:
        """Log in to an OCI chart registry.

        The password is passed on stdin so it never shows up in process
        listings or logs.
        """
        cmd = [
            self._binary,
            "registry",
            "login",
            registry,
            "--username",
            username,
            "--password-stdin",
        ]
        return self._runner.run(cmd, input=password, timeout=timeout)

    def upgrade_install(
        self,
        release_name: str,
        chart: str,
        namespace: str,
        *,
        version: str | None = None,
        value_files: list[Path] | None = None,
        timeout: str = "10m",
        wait: bool = True,
        create_namespace: bool = False,
    ) -> CommandResult:
        """Deploy or upgrade a Helm release.

        Uses `helm upgrade --install`, so re-applying the same chart version
        and values is safe.

        Args:
            release_name: Name for the Helm release
            chart: Chart reference (path, repo/name or oci:// URL)
            namespace: Kubernetes namespace for the release
            version: Chart version to install
            value_files: Values files, later files take precedence
            timeout: Helm timeout as a duration string
            wait: Whether to wait for resources to be ready
            create_namespace: Whether to create the namespace if missing

        Returns:
            CommandResult with deployment status

        Example:
            >>> helm.upgrade_install(
            ...     "api",
            ...     "oci://quay.io/giantswarm/api-chart",
            ...     "default",
            ...     version="1.0.0-5d2c7a1",
            ...     value_files=[Path("/tmp/values.yaml")],
            ... )
        """
        cmd = [
            self._binary,
            "upgrade",
            "--install",
            release_name,
            chart,
            "--namespace",
            namespace,
        ]

        if version:
            cmd.extend(["--version", version])
        if create_namespace:
            cmd.append("--create-namespace")
        if wait:
            cmd.append("--wait")
        cmd.extend(["--timeout", timeout])

        for vf in value_files or []:
            cmd.extend(["--values", str(vf)])

        process_timeout = parse_duration(timeout) + PROCESS_TIMEOUT_GRACE
        return self._runner.run(cmd, timeout=process_timeout)
