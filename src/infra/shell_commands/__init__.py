"""Shell command abstractions for the installer.

Usage:
    from src.infra.shell_commands import CommandRunner, HelmCommands

    helm = HelmCommands(CommandRunner(), binary="/bin/helm")
    result = helm.upgrade_install("api", chart, "default", version="1.0.0-abc")
"""

from .helm import HelmCommands, parse_duration
from .runner import CommandRunner
from .types import CommandResult

__all__ = [
    "CommandResult",
    "CommandRunner",
    "HelmCommands",
    "parse_duration",
]
