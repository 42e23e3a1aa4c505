"""Build and identity information for the agent."""

from __future__ import annotations

import os

NAME = "draughtsman"
DESCRIPTION = "draughtsman is an in-cluster agent that handles Helm based deployments."
SOURCE = "https://github.com/giantswarm/draughtsman"
VERSION = "0.1.0"


def git_commit() -> str:
    """Return the commit the image was built from, injected at build time."""
    return os.getenv("DRAUGHTSMAN_GIT_COMMIT", "n/a")
