"""CLI command modules.

Commands:
- daemon: Run the deployment agent
- version: Print build information
"""

from .daemon import daemon
from .version import version

__all__ = [
    "daemon",
    "version",
]
