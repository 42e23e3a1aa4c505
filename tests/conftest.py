import os
from collections.abc import Iterator

import pytest
from loguru import logger

# Keep the secrets directory lookup away from any real mount during tests
os.environ.pop("DRAUGHTSMAN_SECRETS_DIR", None)

from src.draughtsman.config.config_data import ConfigData  # noqa: E402


@pytest.fixture(autouse=True)
def _silence_logs() -> Iterator[None]:
    """Swap loguru's stderr sink for a no-op sink during each test."""
    logger.remove()
    logger.add(lambda _: None, level="DEBUG")
    yield
    logger.remove()


@pytest.fixture
def config() -> ConfigData:
    """A complete configuration for the default component set."""
    return ConfigData(
        environment="production",
        github={
            "oauth_token": "gh-token",
            "organisation": "acme",
            "projects": ("api", "web"),
            "poll_interval": 0.01,
        },
        helm={"organisation": "acme-charts"},
        slack={"token": "xoxb-test", "channel": "#deploys"},
    )
